"""Server-side notification feed queries and read-state updates."""

from __future__ import annotations

from ...errors import NotFoundError
from ...models.domain import Notification
from ...persistence.repository import NotificationRepository


def list_notifications(
    repository: NotificationRepository,
    recipient: str | None,
    *,
    limit: int = 20,
    unread_only: bool = False,
) -> dict:
    items, total, unread = repository.list_for(recipient, limit=limit, unread_only=unread_only)
    return {"notifications": items, "total": total, "unreadCount": unread}


def mark_notification_read(repository: NotificationRepository, notification_id: str) -> Notification:
    notification = repository.mark_read(notification_id)
    if notification is None:
        raise NotFoundError(f"Notification '{notification_id}' not found")
    return notification


def mark_all_notifications_read(repository: NotificationRepository, recipient: str | None) -> int:
    return repository.mark_all_read(recipient)
