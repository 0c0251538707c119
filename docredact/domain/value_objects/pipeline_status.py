"""
PipelineStatus value object

Represents where a document job is inside the extraction pipeline.
Enforces valid state transitions.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class PipelineState(str, Enum):
    """Valid pipeline states."""
    IDLE = "idle"
    SPLITTING = "splitting"
    EXTRACTING_PAGE = "extracting_page"
    MATCHING = "matching"
    PATTERN_DETECTING = "pattern_detecting"
    AGGREGATING = "aggregating"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


_IN_FLIGHT = {
    PipelineState.SPLITTING,
    PipelineState.EXTRACTING_PAGE,
    PipelineState.MATCHING,
    PipelineState.PATTERN_DETECTING,
    PipelineState.AGGREGATING,
}

_TERMINAL = {PipelineState.DONE, PipelineState.FAILED, PipelineState.CANCELLED}

_TRANSITIONS = {
    PipelineState.IDLE: {PipelineState.SPLITTING},
    PipelineState.SPLITTING: {PipelineState.EXTRACTING_PAGE},
    # EXTRACTING_PAGE -> EXTRACTING_PAGE advances to the next page index.
    PipelineState.EXTRACTING_PAGE: {PipelineState.EXTRACTING_PAGE, PipelineState.MATCHING},
    PipelineState.MATCHING: {PipelineState.PATTERN_DETECTING},
    PipelineState.PATTERN_DETECTING: {PipelineState.AGGREGATING},
    PipelineState.AGGREGATING: {PipelineState.DONE},
    PipelineState.DONE: set(),
    PipelineState.FAILED: set(),
    PipelineState.CANCELLED: set(),
}


@dataclass(frozen=True)
class PipelineStatus:
    """
    Immutable pipeline status with state transition validation.

    ``page_index`` is only meaningful while extracting a page.
    """
    state: PipelineState = PipelineState.IDLE
    page_index: Optional[int] = None

    def __post_init__(self):
        if not isinstance(self.state, PipelineState):
            object.__setattr__(self, 'state', PipelineState(self.state))
        if self.state is not PipelineState.EXTRACTING_PAGE:
            object.__setattr__(self, 'page_index', None)

    @classmethod
    def idle(cls) -> PipelineStatus:
        return cls(state=PipelineState.IDLE)

    def can_transition_to(self, new_state: PipelineState) -> bool:
        """
        Check if transition to new state is valid.

        Valid transitions:
        - IDLE → SPLITTING
        - SPLITTING → EXTRACTING_PAGE
        - EXTRACTING_PAGE → EXTRACTING_PAGE (next page), MATCHING
        - MATCHING → PATTERN_DETECTING → AGGREGATING → DONE
        - any in-flight state → FAILED, CANCELLED
        - DONE, FAILED, CANCELLED → (none - terminal)
        """
        if new_state in (PipelineState.FAILED, PipelineState.CANCELLED):
            return self.state in _IN_FLIGHT
        return new_state in _TRANSITIONS.get(self.state, set())

    def transition_to(self, new_state: PipelineState, page_index: Optional[int] = None) -> PipelineStatus:
        """
        Create new PipelineStatus with transitioned state.

        Raises:
            ValueError: If transition is invalid

        Examples:
            >>> PipelineStatus.idle().transition_to(PipelineState.SPLITTING).state
            <PipelineState.SPLITTING: 'splitting'>
        """
        if not self.can_transition_to(new_state):
            raise ValueError(
                f"Invalid pipeline transition from {self.state.value} to {new_state.value}"
            )
        return PipelineStatus(state=new_state, page_index=page_index)

    def is_terminal(self) -> bool:
        return self.state in _TERMINAL

    def is_in_flight(self) -> bool:
        return self.state in _IN_FLIGHT

    def __str__(self) -> str:
        if self.page_index is not None:
            return f"{self.state.value}({self.page_index})"
        return self.state.value
