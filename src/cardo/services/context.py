"""Explicit wiring of the server-side services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ..db.supabase import get_supabase_client
from ..persistence.filesystem import JsonFileStore, KeyValueStore
from ..persistence.repository import (
    InMemoryNotificationRepository,
    InMemoryRequestRepository,
    NotificationRepository,
    RequestRepository,
)
from .hub_network.aggregator import HubNetworkAggregator
from .notifications.dispatcher import NotificationDispatcher
from .requests.store import RequestStore
from .reviewer.gateway import ReviewerGateway

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything a request handler needs; created once per application."""

    requests: RequestRepository
    notifications: NotificationRepository
    cache: KeyValueStore
    dispatcher: NotificationDispatcher
    store: RequestStore
    aggregator: HubNetworkAggregator
    gateway: ReviewerGateway
    backend: str = "memory"

    def sync_hub_network(self) -> bool:
        """Rebuild the district index if it drifted from the request history."""
        return self.aggregator.ensure_consistent(self.store.all())


def build_context(
    *,
    requests: RequestRepository | None = None,
    notifications: NotificationRepository | None = None,
    cache: KeyValueStore | None = None,
    cache_dir: Path | None = None,
) -> AppContext:
    """Assemble repositories (Supabase first, in-memory fallback) and services."""
    backend = "custom" if requests is not None else "memory"
    if requests is None or notifications is None:
        supabase = get_supabase_client()
        if supabase is not None:
            from ..persistence.database import SupabaseNotificationRepository, SupabaseRequestRepository

            requests = requests or SupabaseRequestRepository(supabase)
            notifications = notifications or SupabaseNotificationRepository(supabase)
            backend = "supabase"
        else:
            requests = requests or InMemoryRequestRepository()
            notifications = notifications or InMemoryNotificationRepository()

    if cache is None:
        cache = JsonFileStore(cache_dir)

    dispatcher = NotificationDispatcher(notifications)
    store = RequestStore(requests, dispatcher)
    aggregator = HubNetworkAggregator(cache)
    gateway = ReviewerGateway(store, aggregator)
    logger.info(f"Order desk context ready (backend: {backend})")
    return AppContext(
        requests=requests,
        notifications=notifications,
        cache=cache,
        dispatcher=dispatcher,
        store=store,
        aggregator=aggregator,
        gateway=gateway,
        backend=backend,
    )
