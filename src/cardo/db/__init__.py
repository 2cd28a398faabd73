"""Database clients and utilities."""

from .supabase import HUBS_TABLE, NOTIFICATIONS_TABLE, ORDER_REQUESTS_TABLE, get_supabase_client

__all__ = ["get_supabase_client", "ORDER_REQUESTS_TABLE", "NOTIFICATIONS_TABLE", "HUBS_TABLE"]
