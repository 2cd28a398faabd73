"""Durable notification endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from ...errors import NotFoundError
from ...schemas.notifications import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationModel,
    UnreadCountResponse,
)
from ...services.context import AppContext
from ...services.notifications import list_notifications, mark_all_notifications_read, mark_notification_read
from ..dependencies import get_context

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationListResponse, status_code=status.HTTP_200_OK)
def get_notifications(
    recipient: str | None = Query(default=None, description="Recipient identifier (customer email)"),
    limit: int = Query(default=20, ge=1, le=200),
    unread_only: bool = Query(default=False, alias="unreadOnly"),
    context: AppContext = Depends(get_context),
) -> NotificationListResponse:
    result = list_notifications(context.notifications, recipient, limit=limit, unread_only=unread_only)
    return NotificationListResponse(
        notifications=[NotificationModel.from_domain(item) for item in result["notifications"]],
        total=result["total"],
        unread_count=result["unreadCount"],
    )


@router.get("/unread-count", response_model=UnreadCountResponse, status_code=status.HTTP_200_OK)
def get_unread_count(
    recipient: str | None = Query(default=None),
    context: AppContext = Depends(get_context),
) -> UnreadCountResponse:
    result = list_notifications(context.notifications, recipient, limit=1)
    return UnreadCountResponse(unread_count=result["unreadCount"])


@router.patch("/read-all", response_model=MarkAllReadResponse, status_code=status.HTTP_200_OK)
@router.patch("/mark-all-read", response_model=MarkAllReadResponse, status_code=status.HTTP_200_OK, include_in_schema=False)
def mark_all_read(
    recipient: str | None = Query(default=None),
    context: AppContext = Depends(get_context),
) -> MarkAllReadResponse:
    modified = mark_all_notifications_read(context.notifications, recipient)
    return MarkAllReadResponse(message="All notifications marked as read", modified_count=modified)


@router.patch("/{notification_id}/read", response_model=NotificationModel, status_code=status.HTTP_200_OK)
def mark_read(
    notification_id: str = Path(..., description="Notification identifier"),
    context: AppContext = Depends(get_context),
) -> NotificationModel:
    try:
        return NotificationModel.from_domain(mark_notification_read(context.notifications, notification_id))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
