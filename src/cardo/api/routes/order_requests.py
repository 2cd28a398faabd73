"""Order request endpoints for customers and reviewers."""

from __future__ import annotations

from typing import Any, Literal

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Query, status

from ...errors import InvalidTransitionError, NotFoundError, ValidationError
from ...schemas.order_requests import (
    OrderRequestListResponse,
    OrderRequestModel,
    StatusUpdateRequest,
    ValidationErrorResponse,
)
from ...services.context import AppContext
from ...services.reviewer.gateway import ReviewerScope
from ..dependencies import get_context

router = APIRouter(prefix="/order-requests", tags=["order-requests"])


@router.post(
    "",
    response_model=OrderRequestModel,
    status_code=status.HTTP_201_CREATED,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ValidationErrorResponse}},
)
def submit_order_request(
    payload: dict[str, Any] = Body(..., description="Order request fields (camelCase)."),
    context: AppContext = Depends(get_context),
) -> OrderRequestModel:
    try:
        created = context.store.submit(payload)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": exc.message, "errors": exc.errors},
        ) from exc
    return OrderRequestModel.from_domain(created)


@router.get("", response_model=OrderRequestListResponse, status_code=status.HTTP_200_OK)
def list_order_requests(
    role: Literal["admin", "hub", "customer"] = Query(default="admin", description="Caller role used for visibility"),
    hub_district: str | None = Query(default=None, alias="hubDistrict", description="District served by a hub manager"),
    customer_email: str | None = Query(default=None, alias="customerEmail", description="Customer whose requests to show"),
    status_filter: str | None = Query(default=None, alias="status", description="Optional status filter"),
    district: str | None = Query(default=None, description="Optional resolved district filter"),
    q: str | None = Query(default=None, description="Case-insensitive search over customer name or request id"),
    page: int = Query(default=1, ge=1, description="1-based page index"),
    limit: int = Query(default=50, ge=1, le=500, description="Maximum number of requests per page"),
    context: AppContext = Depends(get_context),
) -> OrderRequestListResponse:
    if role == "customer" and not customer_email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="customerEmail is required for the customer role.")
    scope = ReviewerScope(role=role, district=hub_district, customer_email=customer_email)
    try:
        result = context.gateway.list(scope, status=status_filter, district=district, query=q, page=page, limit=limit)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return OrderRequestListResponse(
        items=[OrderRequestModel.from_domain(item) for item in result.items],
        total=result.total,
        counts_by_status=result.counts_by_status,
        page=result.page,
        limit=result.limit,
        pages=result.pages,
    )


@router.get("/{request_id}", response_model=OrderRequestModel, status_code=status.HTTP_200_OK)
def get_order_request(
    request_id: str = Path(..., description="Order request identifier"),
    context: AppContext = Depends(get_context),
) -> OrderRequestModel:
    try:
        return OrderRequestModel.from_domain(context.store.get(request_id))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.patch("/{request_id}/status", response_model=OrderRequestModel, status_code=status.HTTP_200_OK)
def update_order_request_status(
    payload: StatusUpdateRequest,
    request_id: str = Path(..., description="Order request identifier"),
    context: AppContext = Depends(get_context),
) -> OrderRequestModel:
    try:
        updated = context.gateway.respond(
            request_id,
            payload.status,
            payload.message,
            responded_by=payload.responded_by,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidTransitionError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(exc), "currentStatus": exc.current, "requestedStatus": exc.target},
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return OrderRequestModel.from_domain(updated)


@router.delete("/{request_id}", status_code=status.HTTP_200_OK)
def cancel_order_request(
    request_id: str = Path(..., description="Order request identifier"),
    customer_email: str | None = Query(default=None, alias="customerEmail", description="Owner of the request"),
    context: AppContext = Depends(get_context),
) -> dict:
    try:
        context.store.cancel(request_id, customer_email)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidTransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    return {"success": True, "message": "Order request deleted successfully"}
