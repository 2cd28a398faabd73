"""Notification Source Merger: one feed over durable and ephemeral notifications."""

from __future__ import annotations

import asyncio
import itertools
import logging
import time
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable

from ..config import settings
from ..errors import NotFoundError
from ..models.domain import Notification, NotificationType
from ..services.notifications.templates import DEFAULT_ICONS

logger = logging.getLogger(__name__)

MarkReadRemote = Callable[[str], Awaitable[Any]]


class NotificationMerger:
    """Keeps two independent lists and derives the merged, deduplicated feed.

    Ephemeral entries live only in this process and expire after ``ttl``
    seconds unless created with ``auto_remove=False``. Durable entries are
    replaced wholesale by every fetch.
    """

    def __init__(
        self,
        mark_read_remote: MarkReadRemote | None = None,
        *,
        ttl: float | None = None,
        mark_read_timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._mark_read_remote = mark_read_remote
        self.ttl = ttl if ttl is not None else settings.ephemeral_ttl_seconds
        self.mark_read_timeout = mark_read_timeout if mark_read_timeout is not None else settings.mark_read_timeout_seconds
        self._clock = clock
        self._ids = itertools.count(1)
        self._ephemeral: dict[str, Notification] = {}
        self._expires_at: dict[str, float] = {}
        self._durable: dict[str, Notification] = {}
        # Ids the backing store confirmed as read; read state never reverts.
        self._confirmed_read: set[str] = set()

    # -------------------- ephemeral --------------------

    def add(
        self,
        title: str,
        message: str,
        type: NotificationType = "info",
        icon: str | None = None,
        data: dict[str, Any] | None = None,
        auto_remove: bool = True,
    ) -> Notification:
        notification = Notification(
            id=f"local-{next(self._ids)}",
            title=title,
            message=message,
            type=type,
            icon=icon or DEFAULT_ICONS.get(type, "🔔"),
            created_at=datetime.now(timezone.utc),
            read=False,
            origin="ephemeral",
            data=dict(data or {}),
            auto_remove=auto_remove,
        )
        self._ephemeral[notification.id] = notification
        if auto_remove:
            self._expires_at[notification.id] = self._clock() + self.ttl
        return notification

    def success(self, title: str, message: str, **options: Any) -> Notification:
        return self.add(title, message, type="success", **options)

    def error(self, title: str, message: str, **options: Any) -> Notification:
        return self.add(title, message, type="error", **options)

    def warning(self, title: str, message: str, **options: Any) -> Notification:
        return self.add(title, message, type="warning", **options)

    def info(self, title: str, message: str, **options: Any) -> Notification:
        return self.add(title, message, type="info", **options)

    def _purge_expired(self) -> None:
        now = self._clock()
        for notification_id in [nid for nid, deadline in self._expires_at.items() if deadline <= now]:
            self._expires_at.pop(notification_id, None)
            self._ephemeral.pop(notification_id, None)

    # -------------------- durable --------------------

    def replace_durable(self, notifications: Iterable[Notification]) -> None:
        fresh: dict[str, Notification] = {}
        for notification in notifications:
            item = replace(notification, origin="durable")
            if item.id in self._confirmed_read:
                item.read = True
            fresh[item.id] = item
        self._durable = fresh

    # -------------------- feed --------------------

    def merge(self) -> list[Notification]:
        """Newest-first feed with at most one entry per id."""
        self._purge_expired()
        combined: dict[str, Notification] = {}
        for notification in itertools.chain(self._ephemeral.values(), self._durable.values()):
            combined[notification.id] = notification
        return sorted(combined.values(), key=lambda item: item.created_at, reverse=True)

    @property
    def unread_count(self) -> int:
        return sum(1 for notification in self.merge() if not notification.read)

    def get(self, notification_id: str) -> Notification | None:
        self._purge_expired()
        return self._ephemeral.get(notification_id) or self._durable.get(notification_id)

    async def mark_read(self, notification_id: str) -> Notification:
        """Mark one entry read; durable entries flip only after the store confirms."""
        self._purge_expired()
        if notification_id in self._ephemeral:
            self._ephemeral[notification_id].read = True
            return self._ephemeral[notification_id]

        notification = self._durable.get(notification_id)
        if notification is None:
            raise NotFoundError(f"Notification '{notification_id}' not found")
        if notification.read:
            return notification
        if self._mark_read_remote is not None:
            await asyncio.wait_for(self._mark_read_remote(notification_id), timeout=self.mark_read_timeout)

        self._confirmed_read.add(notification_id)
        # The durable list may have been replaced while the update was in flight.
        current = self._durable.get(notification_id, notification)
        current.read = True
        return current

    async def mark_all_read(self) -> list[str]:
        """Mark every unread entry independently; returns the ids left unread."""
        unread = [notification.id for notification in self.merge() if not notification.read]
        results = await asyncio.gather(*(self.mark_read(nid) for nid in unread), return_exceptions=True)
        failed = []
        for notification_id, result in zip(unread, results):
            if isinstance(result, BaseException):
                logger.warning(f"Failed to mark notification {notification_id} as read: {result!r}")
                failed.append(notification_id)
        return failed

    def remove(self, notification_id: str) -> None:
        self._ephemeral.pop(notification_id, None)
        self._expires_at.pop(notification_id, None)
        self._durable.pop(notification_id, None)

    def clear(self) -> None:
        """Drop every entry; durable ones come back with the next fetch."""
        self._ephemeral.clear()
        self._expires_at.clear()
        self._durable.clear()
