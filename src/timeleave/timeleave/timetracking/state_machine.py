"""Clock-event state machine.

The live state is never stored: it is read off the latest event in the ledger,
so it cannot drift from the event log.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from ..core.enums import ClockEventType, TrackingState
from ..core.exceptions import ConflictError
from .model import ClockEvent

_STATE_AFTER: Dict[ClockEventType, TrackingState] = {
    ClockEventType.CLOCK_IN: TrackingState.CLOCKED_IN,
    ClockEventType.BREAK_START: TrackingState.ON_BREAK,
    ClockEventType.BREAK_END: TrackingState.CLOCKED_IN,
    ClockEventType.CLOCK_OUT: TrackingState.CLOCKED_OUT,
}

# event -> (required state, resulting state)
TRANSITIONS: Dict[ClockEventType, Tuple[TrackingState, TrackingState]] = {
    ClockEventType.CLOCK_IN: (TrackingState.CLOCKED_OUT, TrackingState.CLOCKED_IN),
    ClockEventType.BREAK_START: (TrackingState.CLOCKED_IN, TrackingState.ON_BREAK),
    ClockEventType.BREAK_END: (TrackingState.ON_BREAK, TrackingState.CLOCKED_IN),
    ClockEventType.CLOCK_OUT: (TrackingState.CLOCKED_IN, TrackingState.CLOCKED_OUT),
}

_CONFLICT_MESSAGES: Dict[Tuple[ClockEventType, TrackingState], str] = {
    (ClockEventType.CLOCK_IN, TrackingState.CLOCKED_IN): "Already clocked in. Please clock out first.",
    (ClockEventType.CLOCK_IN, TrackingState.ON_BREAK): "Currently on break. Please end break first.",
    (ClockEventType.CLOCK_OUT, TrackingState.CLOCKED_OUT): "Not clocked in. Please clock in first.",
    (ClockEventType.CLOCK_OUT, TrackingState.ON_BREAK): "Currently on break. Please end break before clocking out.",
    (ClockEventType.BREAK_START, TrackingState.CLOCKED_OUT): "Must be clocked in to start a break.",
    (ClockEventType.BREAK_START, TrackingState.ON_BREAK): "Must be clocked in to start a break.",
    (ClockEventType.BREAK_END, TrackingState.CLOCKED_OUT): "Not on break.",
    (ClockEventType.BREAK_END, TrackingState.CLOCKED_IN): "Not on break.",
}


def derive_state(latest: Optional[ClockEvent]) -> TrackingState:
    if latest is None:
        return TrackingState.CLOCKED_OUT
    return _STATE_AFTER[latest.event_type]


def ensure_transition(current: TrackingState, event_type: ClockEventType) -> TrackingState:
    """Return the state after ``event_type`` or raise ConflictError."""
    required, resulting = TRANSITIONS[event_type]
    if current != required:
        message = _CONFLICT_MESSAGES.get(
            (event_type, current),
            f"Illegal transition: {event_type.value} while {current.value}",
        )
        raise ConflictError(message)
    return resulting
