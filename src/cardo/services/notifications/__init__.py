"""Notification services."""

from .dispatcher import NotificationDispatcher
from .feed import list_notifications, mark_all_notifications_read, mark_notification_read
from .templates import DEFAULT_ICONS, status_change_notification

__all__ = [
    "NotificationDispatcher",
    "list_notifications",
    "mark_notification_read",
    "mark_all_notifications_read",
    "status_change_notification",
    "DEFAULT_ICONS",
]
