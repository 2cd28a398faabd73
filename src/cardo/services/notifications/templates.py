"""Notification templates for order request lifecycle events."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from ...models.domain import Notification, OrderRequest, RequestStatus

DEFAULT_ICONS: dict[str, str] = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
}

_STATUS_TEMPLATES: dict[RequestStatus, dict[str, str]] = {
    RequestStatus.accepted: {
        "title": "Order Request Accepted",
        "type": "success",
        "icon": "🎉",
        "message": "Your request for {quantity:g} kg of {grade} {product_type} was accepted. {response}",
    },
    RequestStatus.rejected: {
        "title": "Order Request Declined",
        "type": "warning",
        "icon": "📋",
        "message": "Your request for {quantity:g} kg of {grade} {product_type} was declined. {response}",
    },
    RequestStatus.completed: {
        "title": "Order Request Completed",
        "type": "info",
        "icon": "📦",
        "message": "Your request for {quantity:g} kg of {grade} {product_type} has been completed.",
    },
}


def status_change_notification(request: OrderRequest) -> Notification:
    """Build the durable notification sent to the customer after a transition."""
    template = _STATUS_TEMPLATES[request.status]
    response = request.hub_response.message if request.hub_response else ""
    message = template["message"].format(
        quantity=request.quantity,
        grade=request.grade,
        product_type=request.product_type,
        response=response,
    ).strip()
    return Notification(
        id=uuid.uuid4().hex,
        title=template["title"],
        message=message,
        type=template["type"],
        icon=template["icon"],
        created_at=datetime.now(timezone.utc),
        read=False,
        origin="durable",
        recipient=request.customer_email,
        data={
            "orderRequestId": request.id,
            "status": request.status.value,
            "preferredHub": request.preferred_hub,
        },
    )
