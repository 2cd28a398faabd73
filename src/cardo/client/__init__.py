"""Asyncio dashboard client for the order desk API."""

from .api import ApiClient
from .notifications import NotificationMerger
from .polling import PollingTask, RefreshOutcome
from .session import DashboardSession, DraftStore, user_message

__all__ = [
    "ApiClient",
    "DashboardSession",
    "DraftStore",
    "NotificationMerger",
    "PollingTask",
    "RefreshOutcome",
    "user_message",
]
