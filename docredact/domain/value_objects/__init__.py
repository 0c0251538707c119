"""
Domain Value Objects

Immutable value objects that encapsulate domain concepts with validation.
"""
from .bounding_box import BoundingBox, BoxShape
from .confidence import Confidence, normalize_confidence
from .pipeline_status import PipelineState, PipelineStatus

__all__ = [
    'BoundingBox',
    'BoxShape',
    'Confidence',
    'normalize_confidence',
    'PipelineState',
    'PipelineStatus',
]
