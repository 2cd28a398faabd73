"""Domain models for order requests, notifications and the hub directory."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Optional


class RequestStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    completed = "completed"


GRADES: tuple[str, ...] = ("A Grade", "B Grade", "C Grade", "Mixed", "Any")
URGENCIES: tuple[str, ...] = ("normal", "urgent", "immediate")

NotificationType = Literal["info", "success", "warning", "error"]
NotificationOrigin = Literal["durable", "ephemeral"]


@dataclass(slots=True)
class HubResponse:
    """Reviewer reply recorded when a request leaves ``pending``."""

    message: str
    responded_at: datetime
    responded_by: Optional[str] = None


@dataclass(slots=True)
class OrderRequest:
    """A customer's custom order awaiting reviewer action."""

    id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    product_type: str
    grade: str
    quantity: float
    budget_min: float
    budget_max: float
    urgency: str
    preferred_hub: str
    description: str
    hub_district: Optional[str]
    status: RequestStatus
    created_at: datetime
    updated_at: datetime
    hub_response: Optional[HubResponse] = None
    total_amount: Optional[float] = None


@dataclass(slots=True)
class Notification:
    """Entry of a notification feed, either server-issued or client-local."""

    id: str
    title: str
    message: str
    type: NotificationType
    icon: str
    created_at: datetime
    read: bool = False
    origin: NotificationOrigin = "durable"
    recipient: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)
    auto_remove: bool = False


@dataclass(slots=True)
class DistrictRecord:
    """Summary of an accepted request inside a district bucket."""

    request_id: str
    customer_name: str
    order_date: str
    total_amount: Optional[float]
    status: str = "accepted"


@dataclass(slots=True)
class Hub:
    """Regional hub with the district it serves."""

    name: str
    district: str
    state: str = "Kerala"
