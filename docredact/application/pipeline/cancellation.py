"""Cooperative cancellation for pipeline runs."""
from __future__ import annotations

import threading


class CancellationToken:
    """Set by a caller, polled by the orchestrator between pages."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled})"
