"""Supabase-backed repositories for order requests and notifications."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime
from typing import Any

from supabase import Client

from ..db.supabase import NOTIFICATIONS_TABLE, ORDER_REQUESTS_TABLE
from ..models.domain import HubResponse, Notification, OrderRequest, RequestStatus

logger = logging.getLogger(__name__)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def request_to_row(request: OrderRequest) -> dict[str, Any]:
    row = asdict(request)
    row["status"] = request.status.value
    row["created_at"] = request.created_at.isoformat()
    row["updated_at"] = request.updated_at.isoformat()
    row["hub_response"] = _hub_response_to_row(request.hub_response)
    return row


def _hub_response_to_row(response: HubResponse | None) -> dict[str, Any] | None:
    if response is None:
        return None
    return {
        "message": response.message,
        "responded_at": response.responded_at.isoformat(),
        "responded_by": response.responded_by,
    }


def row_to_request(row: dict[str, Any]) -> OrderRequest:
    hub_response = row.get("hub_response")
    return OrderRequest(
        id=str(row["id"]),
        customer_name=row["customer_name"],
        customer_email=row["customer_email"],
        customer_phone=row["customer_phone"],
        product_type=row.get("product_type") or "Cardamom",
        grade=row["grade"],
        quantity=float(row["quantity"]),
        budget_min=float(row["budget_min"]),
        budget_max=float(row["budget_max"]),
        urgency=row.get("urgency") or "normal",
        preferred_hub=row["preferred_hub"],
        description=row["description"],
        hub_district=row.get("hub_district"),
        status=RequestStatus(row["status"]),
        created_at=_parse_timestamp(row["created_at"]),
        updated_at=_parse_timestamp(row["updated_at"]),
        hub_response=HubResponse(
            message=hub_response["message"],
            responded_at=_parse_timestamp(hub_response["responded_at"]),
            responded_by=hub_response.get("responded_by"),
        ) if hub_response else None,
        total_amount=float(row["total_amount"]) if row.get("total_amount") is not None else None,
    )


def notification_to_row(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "recipient": notification.recipient,
        "title": notification.title,
        "message": notification.message,
        "type": notification.type,
        "icon": notification.icon,
        "created_at": notification.created_at.isoformat(),
        "read": notification.read,
        "data": notification.data,
    }


def row_to_notification(row: dict[str, Any]) -> Notification:
    return Notification(
        id=str(row["id"]),
        title=row["title"],
        message=row["message"],
        type=row.get("type") or "info",
        icon=row.get("icon") or "🔔",
        created_at=_parse_timestamp(row["created_at"]),
        read=bool(row.get("read")),
        origin="durable",
        recipient=row.get("recipient"),
        data=row.get("data") or {},
    )


class SupabaseRequestRepository:
    """Order requests stored in the ``order_requests`` table."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def add(self, request: OrderRequest) -> OrderRequest:
        response = self._client.table(ORDER_REQUESTS_TABLE).insert(request_to_row(request)).execute()
        return row_to_request(response.data[0]) if response.data else request

    def get(self, request_id: str) -> OrderRequest | None:
        response = (
            self._client.table(ORDER_REQUESTS_TABLE)
            .select("*")
            .eq("id", request_id)
            .limit(1)
            .execute()
        )
        return row_to_request(response.data[0]) if response.data else None

    def all(self) -> list[OrderRequest]:
        response = (
            self._client.table(ORDER_REQUESTS_TABLE)
            .select("*")
            .order("created_at", desc=True)
            .execute()
        )
        return [row_to_request(row) for row in (response.data or [])]

    def compare_and_set(
        self, request_id: str, expected: RequestStatus, changes: dict[str, Any]
    ) -> OrderRequest | None:
        payload = dict(changes)
        if "status" in payload:
            payload["status"] = RequestStatus(payload["status"]).value
        if "updated_at" in payload:
            payload["updated_at"] = payload["updated_at"].isoformat()
        if "hub_response" in payload:
            payload["hub_response"] = _hub_response_to_row(payload["hub_response"])

        # Conditional write: no row matches once another reviewer moved the request.
        response = (
            self._client.table(ORDER_REQUESTS_TABLE)
            .update(payload)
            .eq("id", request_id)
            .eq("status", expected.value)
            .execute()
        )
        if not response.data:
            return None
        return row_to_request(response.data[0])

    def delete(self, request_id: str, expected: RequestStatus | None = None) -> bool:
        query = self._client.table(ORDER_REQUESTS_TABLE).delete().eq("id", request_id)
        if expected is not None:
            query = query.eq("status", expected.value)
        response = query.execute()
        return bool(response.data)


class SupabaseNotificationRepository:
    """Durable notifications stored in the ``notifications`` table."""

    def __init__(self, client: Client) -> None:
        self._client = client

    def add(self, notification: Notification) -> Notification:
        response = self._client.table(NOTIFICATIONS_TABLE).insert(notification_to_row(notification)).execute()
        return row_to_notification(response.data[0]) if response.data else notification

    def list_for(
        self, recipient: str | None, *, limit: int, unread_only: bool = False
    ) -> tuple[list[Notification], int, int]:
        query = self._client.table(NOTIFICATIONS_TABLE).select("*", count="exact")
        unread_query = self._client.table(NOTIFICATIONS_TABLE).select("id", count="exact").eq("read", False)
        if recipient is not None:
            query = query.eq("recipient", recipient)
            unread_query = unread_query.eq("recipient", recipient)
        if unread_only:
            query = query.eq("read", False)

        response = query.order("created_at", desc=True).limit(limit).execute()
        unread_response = unread_query.execute()
        items = [row_to_notification(row) for row in (response.data or [])]
        total = response.count if response.count is not None else len(items)
        unread = unread_response.count if unread_response.count is not None else len(unread_response.data or [])
        return items, total, unread

    def mark_read(self, notification_id: str) -> Notification | None:
        response = (
            self._client.table(NOTIFICATIONS_TABLE)
            .update({"read": True})
            .eq("id", notification_id)
            .execute()
        )
        return row_to_notification(response.data[0]) if response.data else None

    def mark_all_read(self, recipient: str | None) -> int:
        query = self._client.table(NOTIFICATIONS_TABLE).update({"read": True}).eq("read", False)
        if recipient is not None:
            query = query.eq("recipient", recipient)
        response = query.execute()
        modified = len(response.data or [])
        logger.info(f"Marked {modified} notifications as read for {recipient or 'all recipients'}")
        return modified
