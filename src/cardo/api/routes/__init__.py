"""Route group exports."""

from . import health, hub_network, notifications, order_requests

__all__ = ["health", "order_requests", "notifications", "hub_network"]
