"""Error taxonomy shared by the server and the dashboard client."""

from __future__ import annotations


class CardoError(Exception):
    """Base class for order desk errors."""


class ValidationError(CardoError):
    """One or more submitted fields are invalid.

    ``errors`` maps every offending field (wire name) to a human readable
    message so a form can highlight all of them at once.
    """

    def __init__(self, errors: dict[str, str], message: str = "Order request validation failed") -> None:
        super().__init__(message)
        self.errors = dict(errors)
        self.message = message


class NotFoundError(CardoError):
    """The referenced entity does not exist (any more)."""

    user_message = "This request no longer exists."


class InvalidTransitionError(CardoError):
    """The current status does not permit the requested transition."""

    user_message = "Already handled by another reviewer, please refresh."

    def __init__(self, current: str, target: str, message: str | None = None) -> None:
        super().__init__(message or f"Cannot move request from '{current}' to '{target}'")
        self.current = current
        self.target = target


class NetworkError(CardoError):
    """Transient transport failure; retried by the next poll tick."""


class NotificationDispatchError(CardoError):
    """A durable notification could not be stored."""
