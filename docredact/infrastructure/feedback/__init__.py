"""Feedback reporting adapters."""

from .feedback_client import FeedbackReport, FeedbackReporter

__all__ = ["FeedbackReport", "FeedbackReporter"]
