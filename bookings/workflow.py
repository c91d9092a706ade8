"""Transition tables for the persisted booking status (accepted/cancelled/completed)."""
from typing import Dict, FrozenSet, Optional

import config

ACCEPTED = "accepted"
CANCELLED = "cancelled"
COMPLETED = "completed"
BOOKING_STATUSES = (ACCEPTED, CANCELLED, COMPLETED)
INITIAL_STATUS = ACCEPTED

# Admin override: any status may be set from any status.
OPEN_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    status: frozenset(BOOKING_STATUSES) for status in BOOKING_STATUSES
}

# cancelled and completed are terminal.
STRICT_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    ACCEPTED: frozenset({ACCEPTED, CANCELLED, COMPLETED}),
    CANCELLED: frozenset({CANCELLED}),
    COMPLETED: frozenset({COMPLETED}),
}


def transition_table(strict: Optional[bool] = None) -> Dict[str, FrozenSet[str]]:
    if strict is None:
        strict = config.STRICT_BOOKING_TRANSITIONS
    return STRICT_TRANSITIONS if strict else OPEN_TRANSITIONS


def can_transition(current: str, target: str, strict: Optional[bool] = None) -> bool:
    if target not in BOOKING_STATUSES:
        return False
    # Legacy documents with an unknown status may only move to a known one.
    return target in transition_table(strict).get(current, frozenset(BOOKING_STATUSES))
