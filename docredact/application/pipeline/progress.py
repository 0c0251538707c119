"""Progress reporting for pipeline runs."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from docredact.domain.value_objects.pipeline_status import PipelineState, PipelineStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineProgress:
    """Snapshot emitted to progress listeners."""

    status: str
    processed_pages: int
    total_pages: int
    cancelled: bool = False
    state: PipelineState = PipelineState.IDLE
    page_index: Optional[int] = None

    @property
    def percent(self) -> float:
        if self.total_pages <= 0:
            return 0.0
        return round(100.0 * self.processed_pages / self.total_pages, 1)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "processedPages": self.processed_pages,
            "totalPages": self.total_pages,
            "cancelled": self.cancelled,
            "state": self.state.value,
            "pageIndex": self.page_index,
            "percent": self.percent,
        }


ProgressCallback = Callable[[PipelineProgress], None]


class ProgressTracker:
    """
    Holds the run's status and page counters under a lock.

    ``processed_pages`` only ever grows, whatever order pages finish in.
    """

    def __init__(self, callback: Optional[ProgressCallback] = None) -> None:
        self._lock = threading.Lock()
        self._callback = callback
        self._status = PipelineStatus.idle()
        self._processed = 0
        self._total = 0
        self._cancelled = False

    @property
    def status(self) -> PipelineStatus:
        with self._lock:
            return self._status

    @property
    def processed_pages(self) -> int:
        with self._lock:
            return self._processed

    def set_total(self, total: int) -> None:
        with self._lock:
            self._total = max(0, total)

    def transition(self, state: PipelineState, message: str, page_index: Optional[int] = None) -> PipelineProgress:
        """Move to ``state``; raises ValueError on an invalid transition."""
        with self._lock:
            self._status = self._status.transition_to(state, page_index)
            if state is PipelineState.CANCELLED:
                self._cancelled = True
            snapshot = self._snapshot(message)
        self._emit(snapshot)
        return snapshot

    def page_done(self, message: str) -> PipelineProgress:
        with self._lock:
            self._processed = min(self._processed + 1, self._total) if self._total else self._processed + 1
            snapshot = self._snapshot(message)
        self._emit(snapshot)
        return snapshot

    def snapshot(self, message: str = "") -> PipelineProgress:
        with self._lock:
            return self._snapshot(message or str(self._status))

    def _snapshot(self, message: str) -> PipelineProgress:
        return PipelineProgress(
            status=message,
            processed_pages=self._processed,
            total_pages=self._total,
            cancelled=self._cancelled,
            state=self._status.state,
            page_index=self._status.page_index,
        )

    def _emit(self, snapshot: PipelineProgress) -> None:
        if self._callback is None:
            return
        try:
            self._callback(snapshot)
        except Exception:
            logger.exception("Progress listener failed at %s", snapshot.state.value)
