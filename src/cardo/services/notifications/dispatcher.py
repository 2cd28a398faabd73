"""Durable notification dispatch."""

from __future__ import annotations

import logging

from ...errors import NotificationDispatchError
from ...models.domain import Notification, OrderRequest
from ...persistence.repository import NotificationRepository
from .templates import status_change_notification

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Stores one durable notification per successful request transition."""

    def __init__(self, repository: NotificationRepository) -> None:
        self.repository = repository

    def dispatch(self, notification: Notification) -> Notification:
        try:
            stored = self.repository.add(notification)
        except Exception as exc:
            raise NotificationDispatchError(
                f"Failed to store notification '{notification.title}' for {notification.recipient}: {exc}"
            ) from exc
        logger.info(f"Notification {stored.id} dispatched to {stored.recipient}")
        return stored

    def request_status_changed(self, request: OrderRequest) -> Notification:
        return self.dispatch(status_change_notification(request))
