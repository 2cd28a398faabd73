"""Order request lifecycle services."""

from .state_machine import TRANSITIONS, can_transition, ensure_transition, parse_decision
from .store import RequestStore
from .validation import validate_submission

__all__ = [
    "RequestStore",
    "TRANSITIONS",
    "can_transition",
    "ensure_transition",
    "parse_decision",
    "validate_submission",
]
