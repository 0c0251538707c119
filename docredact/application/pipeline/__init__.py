"""Page-by-page document pipeline."""

from .cancellation import CancellationToken
from .orchestrator import PipelineJob, PipelineOrchestrator, PipelineResult, aggregate_text
from .progress import PipelineProgress, ProgressTracker

__all__ = [
    "CancellationToken",
    "PipelineJob",
    "PipelineOrchestrator",
    "PipelineProgress",
    "PipelineResult",
    "ProgressTracker",
    "aggregate_text",
]
