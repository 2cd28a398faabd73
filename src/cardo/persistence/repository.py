"""Repository contracts and the in-memory implementations used without Supabase."""

from __future__ import annotations

import threading
from dataclasses import replace
from typing import Any, Protocol, Sequence

from ..models.domain import Notification, OrderRequest, RequestStatus


class RequestRepository(Protocol):
    def add(self, request: OrderRequest) -> OrderRequest: ...

    def get(self, request_id: str) -> OrderRequest | None: ...

    def all(self) -> Sequence[OrderRequest]: ...

    def compare_and_set(
        self, request_id: str, expected: RequestStatus, changes: dict[str, Any]
    ) -> OrderRequest | None:
        """Apply ``changes`` only if the stored status still equals ``expected``."""
        ...

    def delete(self, request_id: str, expected: RequestStatus | None = None) -> bool:
        """Delete the request, only while its stored status equals ``expected`` when given."""
        ...


class NotificationRepository(Protocol):
    def add(self, notification: Notification) -> Notification: ...

    def list_for(
        self, recipient: str | None, *, limit: int, unread_only: bool = False
    ) -> tuple[list[Notification], int, int]:
        """Return (newest-first page, total matching, unread count)."""
        ...

    def mark_read(self, notification_id: str) -> Notification | None: ...

    def mark_all_read(self, recipient: str | None) -> int: ...


class InMemoryRequestRepository:
    """Process-local request storage guarded by a single lock."""

    def __init__(self, requests: Sequence[OrderRequest] = ()) -> None:
        self._lock = threading.RLock()
        self._items: dict[str, OrderRequest] = {request.id: request for request in requests}

    def add(self, request: OrderRequest) -> OrderRequest:
        with self._lock:
            if request.id in self._items:
                raise ValueError(f"Duplicate order request id '{request.id}'")
            self._items[request.id] = request
            return replace(request)

    def get(self, request_id: str) -> OrderRequest | None:
        with self._lock:
            stored = self._items.get(request_id)
            return replace(stored) if stored else None

    def all(self) -> list[OrderRequest]:
        with self._lock:
            return [replace(item) for item in self._items.values()]

    def compare_and_set(
        self, request_id: str, expected: RequestStatus, changes: dict[str, Any]
    ) -> OrderRequest | None:
        with self._lock:
            stored = self._items.get(request_id)
            if stored is None or stored.status != expected:
                return None
            updated = replace(stored, **changes)
            self._items[request_id] = updated
            return replace(updated)

    def delete(self, request_id: str, expected: RequestStatus | None = None) -> bool:
        with self._lock:
            stored = self._items.get(request_id)
            if stored is None or (expected is not None and stored.status != expected):
                return False
            del self._items[request_id]
            return True


class InMemoryNotificationRepository:
    """Process-local durable notification storage."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._items: dict[str, Notification] = {}

    def add(self, notification: Notification) -> Notification:
        with self._lock:
            self._items[notification.id] = notification
            return replace(notification)

    def list_for(
        self, recipient: str | None, *, limit: int, unread_only: bool = False
    ) -> tuple[list[Notification], int, int]:
        with self._lock:
            owned = [
                item for item in self._items.values()
                if recipient is None or item.recipient == recipient
            ]
        unread = sum(1 for item in owned if not item.read)
        matching = [item for item in owned if not (unread_only and item.read)]
        matching.sort(key=lambda item: item.created_at, reverse=True)
        return [replace(item) for item in matching[:limit]], len(matching), unread

    def mark_read(self, notification_id: str) -> Notification | None:
        with self._lock:
            stored = self._items.get(notification_id)
            if stored is None:
                return None
            stored.read = True
            return replace(stored)

    def mark_all_read(self, recipient: str | None) -> int:
        modified = 0
        with self._lock:
            for item in self._items.values():
                if item.read or (recipient is not None and item.recipient != recipient):
                    continue
                item.read = True
                modified += 1
        return modified
