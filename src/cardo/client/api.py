"""Async HTTP client used by the dashboards to talk to the order desk API."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from ..config import settings
from ..errors import CardoError, InvalidTransitionError, NetworkError, NotFoundError, ValidationError
from ..models.domain import Notification, OrderRequest
from ..schemas.notifications import NotificationListResponse, NotificationModel
from ..schemas.order_requests import OrderRequestListResponse, OrderRequestModel
from ..services.reviewer.gateway import RequestPage

logger = logging.getLogger(__name__)


def _detail(response: httpx.Response) -> Any:
    try:
        body = response.json()
    except ValueError:
        return response.text
    return body.get("detail", body) if isinstance(body, dict) else body


class ApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` that speaks the error taxonomy.

    HTTP 400 -> ValidationError, 404 -> NotFoundError, 409 ->
    InvalidTransitionError, transport failures and 5xx -> NetworkError.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.api_base_url
        timeout_seconds = timeout if timeout is not None else settings.http_timeout_seconds
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout_seconds, connect=min(timeout_seconds, 5.0)),
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise NetworkError(f"{method} {path} timed out: {exc}") from exc
        except httpx.TransportError as exc:
            raise NetworkError(f"{method} {path} failed: {exc}") from exc

        if response.is_success:
            return response.json() if response.content else None

        detail = _detail(response)
        code = response.status_code
        if code == 400:
            if isinstance(detail, dict) and isinstance(detail.get("errors"), dict):
                raise ValidationError(detail["errors"], detail.get("message") or "Validation failed")
            raise ValidationError({"request": str(detail)}, str(detail))
        if code == 404:
            raise NotFoundError(str(detail))
        if code == 409:
            if isinstance(detail, dict):
                raise InvalidTransitionError(
                    detail.get("currentStatus", "unknown"),
                    detail.get("requestedStatus", "unknown"),
                    detail.get("message"),
                )
            raise InvalidTransitionError("unknown", "unknown", str(detail))
        if code >= 500:
            logger.warning(f"{method} {path} returned HTTP {code}")
            raise NetworkError(f"{method} {path} returned HTTP {code}: {detail}")
        raise CardoError(f"{method} {path} returned HTTP {code}: {detail}")

    # -------------------- order requests --------------------

    async def submit_request(self, payload: Mapping[str, Any]) -> OrderRequest:
        body = await self._request("POST", "/order-requests", json=dict(payload))
        return OrderRequestModel.model_validate(body).to_domain()

    async def list_requests(
        self,
        *,
        role: str = "admin",
        hub_district: str | None = None,
        customer_email: str | None = None,
        status: str | None = None,
        district: str | None = None,
        query: str | None = None,
        page: int = 1,
        limit: int | None = None,
    ) -> RequestPage:
        params: dict[str, Any] = {"role": role, "page": page, "limit": limit or settings.request_list_limit}
        optional = {
            "hubDistrict": hub_district,
            "customerEmail": customer_email,
            "status": status,
            "district": district,
            "q": query,
        }
        params.update({key: value for key, value in optional.items() if value})
        body = OrderRequestListResponse.model_validate(await self._request("GET", "/order-requests", params=params))
        return RequestPage(
            items=[item.to_domain() for item in body.items],
            total=body.total,
            counts_by_status=dict(body.counts_by_status),
            page=body.page,
            limit=body.limit,
            pages=body.pages,
        )

    async def get_request(self, request_id: str) -> OrderRequest:
        body = await self._request("GET", f"/order-requests/{request_id}")
        return OrderRequestModel.model_validate(body).to_domain()

    async def update_status(
        self,
        request_id: str,
        status: str,
        message: str | None = None,
        responded_by: str | None = None,
    ) -> OrderRequest:
        payload = {"status": status, "message": message, "respondedBy": responded_by}
        body = await self._request("PATCH", f"/order-requests/{request_id}/status", json=payload)
        return OrderRequestModel.model_validate(body).to_domain()

    async def cancel_request(self, request_id: str, customer_email: str | None = None) -> None:
        params = {"customerEmail": customer_email} if customer_email else None
        await self._request("DELETE", f"/order-requests/{request_id}", params=params)

    # -------------------- notifications --------------------

    async def get_notifications(self, recipient: str | None = None, limit: int | None = None) -> list[Notification]:
        params: dict[str, Any] = {"limit": limit or settings.notification_fetch_limit}
        if recipient:
            params["recipient"] = recipient
        body = NotificationListResponse.model_validate(await self._request("GET", "/notifications", params=params))
        return [item.to_domain() for item in body.notifications]

    async def mark_notification_read(self, notification_id: str) -> Notification:
        body = await self._request("PATCH", f"/notifications/{notification_id}/read")
        return NotificationModel.model_validate(body).to_domain()

    async def mark_all_notifications_read(self, recipient: str | None = None) -> int:
        params = {"recipient": recipient} if recipient else None
        body = await self._request("PATCH", "/notifications/read-all", params=params)
        return int(body.get("modifiedCount", 0))

    # -------------------- hub network --------------------

    async def list_district_summaries(self) -> list[dict]:
        return await self._request("GET", "/hub-network/districts")

    async def get_district(self, district: str) -> list[dict]:
        return await self._request("GET", f"/hub-network/districts/{district}")
