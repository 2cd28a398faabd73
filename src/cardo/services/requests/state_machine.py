"""Transition graph of the order request lifecycle."""

from __future__ import annotations

from ...errors import InvalidTransitionError
from ...models.domain import RequestStatus

TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.pending: frozenset({RequestStatus.accepted, RequestStatus.rejected}),
    RequestStatus.accepted: frozenset({RequestStatus.completed}),
    RequestStatus.rejected: frozenset(),
    RequestStatus.completed: frozenset(),
}

DECISION_ALIASES: dict[str, RequestStatus] = {
    "accept": RequestStatus.accepted,
    "accepted": RequestStatus.accepted,
    "reject": RequestStatus.rejected,
    "rejected": RequestStatus.rejected,
    "complete": RequestStatus.completed,
    "completed": RequestStatus.completed,
}


def parse_decision(value: str | RequestStatus) -> RequestStatus:
    """Normalize a reviewer decision; ``pending`` is never a valid target."""
    if isinstance(value, RequestStatus) and value is not RequestStatus.pending:
        return value
    try:
        return DECISION_ALIASES[str(value).strip().lower()]
    except KeyError:
        raise ValueError(f"Invalid status '{value}'. Expected one of: accepted, rejected, completed.") from None


def can_transition(current: RequestStatus, target: RequestStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def ensure_transition(current: RequestStatus, target: RequestStatus) -> None:
    if not can_transition(current, target):
        raise InvalidTransitionError(current.value, target.value)


def is_accepted_history(status: RequestStatus) -> bool:
    """Whether a request in ``status`` has gone through an accept transition."""
    return status in (RequestStatus.accepted, RequestStatus.completed)
