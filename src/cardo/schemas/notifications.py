"""Notification API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..models.domain import Notification


class NotificationModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    message: str
    type: Literal["info", "success", "warning", "error"] = "info"
    icon: str = "🔔"
    created_at: datetime
    read: bool = False
    recipient: Optional[str] = None
    data: dict[str, Any] = {}

    @classmethod
    def from_domain(cls, notification: Notification) -> "NotificationModel":
        return cls(
            id=notification.id,
            title=notification.title,
            message=notification.message,
            type=notification.type,
            icon=notification.icon,
            created_at=notification.created_at,
            read=notification.read,
            recipient=notification.recipient,
            data=dict(notification.data),
        )

    def to_domain(self) -> Notification:
        return Notification(
            id=self.id,
            title=self.title,
            message=self.message,
            type=self.type,
            icon=self.icon,
            created_at=self.created_at,
            read=self.read,
            origin="durable",
            recipient=self.recipient,
            data=dict(self.data),
        )


class NotificationListResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    notifications: List[NotificationModel]
    total: int
    unread_count: int


class UnreadCountResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    unread_count: int


class MarkAllReadResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str
    modified_count: int
