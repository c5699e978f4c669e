"""
Speech Practice v1.0 — Session Status × Operation Transition Matrix

3 statuses × 6 operations = 18 combinations.
Every one is defined, allowed or not. No KeyError possible.
"""

from dataclasses import dataclass
from enum import Enum


class SessionStatus(str, Enum):
    IDLE = "IDLE"
    ACTIVE = "ACTIVE"
    COMPLETE = "COMPLETE"


class SessionStateError(RuntimeError):
    """Engine operation called in a status that does not allow it (a caller bug)."""


OPERATIONS = frozenset({
    "start_session",
    "record_result",
    "next_phrase",
    "previous_phrase",
    "end_session",
    "reset_session",
})


@dataclass(frozen=True)
class TransitionResult:
    """
    allowed: whether the engine accepts the operation
    next_status: status the engine moves to when the operation succeeds
                 (next_phrase on the last phrase then runs end_session)
    """
    allowed: bool
    next_status: SessionStatus


def _allow(next_status: SessionStatus) -> TransitionResult:
    return TransitionResult(allowed=True, next_status=next_status)


def _reject(status: SessionStatus) -> TransitionResult:
    return TransitionResult(allowed=False, next_status=status)


_IDLE, _ACTIVE, _COMPLETE = SessionStatus.IDLE, SessionStatus.ACTIVE, SessionStatus.COMPLETE

TRANSITIONS: dict = {
    # ═══ IDLE ═══════════════════════════════════════════════════════════════
    (_IDLE, "start_session"): _allow(_ACTIVE),
    (_IDLE, "record_result"): _reject(_IDLE),
    (_IDLE, "next_phrase"): _reject(_IDLE),
    (_IDLE, "previous_phrase"): _reject(_IDLE),
    (_IDLE, "end_session"): _reject(_IDLE),
    (_IDLE, "reset_session"): _allow(_IDLE),

    # ═══ ACTIVE ═════════════════════════════════════════════════════════════
    (_ACTIVE, "start_session"): _reject(_ACTIVE),  # reset first
    (_ACTIVE, "record_result"): _allow(_ACTIVE),
    (_ACTIVE, "next_phrase"): _allow(_ACTIVE),  # COMPLETE from the last phrase
    (_ACTIVE, "previous_phrase"): _allow(_ACTIVE),
    (_ACTIVE, "end_session"): _allow(_COMPLETE),
    (_ACTIVE, "reset_session"): _allow(_IDLE),

    # ═══ COMPLETE ═══════════════════════════════════════════════════════════
    (_COMPLETE, "start_session"): _allow(_ACTIVE),
    (_COMPLETE, "record_result"): _reject(_COMPLETE),
    (_COMPLETE, "next_phrase"): _reject(_COMPLETE),
    (_COMPLETE, "previous_phrase"): _reject(_COMPLETE),
    (_COMPLETE, "end_session"): _reject(_COMPLETE),
    (_COMPLETE, "reset_session"): _allow(_IDLE),
}


def get_transition(status: SessionStatus, operation: str) -> TransitionResult:
    """Look up a status × operation combination. Unknown operations raise ValueError."""
    if isinstance(status, str):
        status = SessionStatus(status)
    if operation not in OPERATIONS:
        raise ValueError(f"Unknown session operation: {operation}")
    return TRANSITIONS[(status, operation)]


def require_transition(status: SessionStatus, operation: str) -> TransitionResult:
    """Like get_transition, but raises SessionStateError when not allowed."""
    transition = get_transition(status, operation)
    if not transition.allowed:
        raise SessionStateError(f"Cannot {operation.replace('_', ' ')} while session is {status.value}")
    return transition


def validate_matrix_completeness() -> bool:
    """
    Verify that every status × operation combination is defined.

    Returns True if complete, raises AssertionError if not.
    """
    missing = [
        (status.value, operation)
        for status in SessionStatus
        for operation in OPERATIONS
        if (status, operation) not in TRANSITIONS
    ]
    if missing:
        raise AssertionError(f"Missing transitions: {missing}")

    expected = len(SessionStatus) * len(OPERATIONS)
    if len(TRANSITIONS) != expected:
        raise AssertionError(f"Expected {expected} transitions, got {len(TRANSITIONS)}")

    return True
