"""Supabase client for the order desk backend."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import settings

logger = logging.getLogger(__name__)

ORDER_REQUESTS_TABLE = "order_requests"
NOTIFICATIONS_TABLE = "notifications"
HUBS_TABLE = "hubs"


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.info("Supabase credentials not configured; using in-memory repositories")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as exc:
        logger.error(f"Failed to create Supabase client: {exc}")
        return None
