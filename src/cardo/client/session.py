"""Dashboard session: API client, pollers, notification feed and drafts in one context."""

from __future__ import annotations

import logging
from typing import Any, Literal, Mapping, Optional

from ..config import settings
from ..errors import CardoError, InvalidTransitionError, NetworkError, NotFoundError, ValidationError
from ..models.domain import Notification, OrderRequest
from ..persistence.filesystem import KeyValueStore, MemoryKeyValueStore
from ..services.requests.state_machine import parse_decision
from ..services.reviewer.gateway import RequestPage
from .api import ApiClient
from .notifications import NotificationMerger
from .polling import PollingTask, RefreshOutcome

logger = logging.getLogger(__name__)

Role = Literal["admin", "hub", "customer"]


def user_message(exc: Exception) -> str:
    """Text shown to a person for a failed action."""
    if isinstance(exc, (NotFoundError, InvalidTransitionError)):
        return exc.user_message
    if isinstance(exc, ValidationError):
        return exc.message
    if isinstance(exc, NetworkError):
        return "Could not reach the server. Please try again."
    return str(exc) or "Something went wrong."


class DraftStore:
    """Unsent order form contents, kept under one key of a key-value store."""

    def __init__(self, store: KeyValueStore, key: str = "order-draft") -> None:
        self.store = store
        self.key = key

    def load(self) -> dict[str, Any]:
        value = self.store.get(self.key)
        return dict(value) if isinstance(value, dict) else {}

    def save(self, fields: Mapping[str, Any]) -> None:
        self.store.set(self.key, dict(fields))

    def clear(self) -> None:
        self.store.remove(self.key)


class DashboardSession:
    """Everything one dashboard view needs, created and torn down together.

    Notifications and the request list are polled independently. Reviewer
    actions apply the server's post-state to the cached page and then
    refresh the list so badges stay correct.
    """

    def __init__(
        self,
        api: ApiClient,
        *,
        role: Role = "admin",
        user_email: Optional[str] = None,
        hub_district: Optional[str] = None,
        drafts: KeyValueStore | None = None,
        notification_interval: float | None = None,
        request_interval: float | None = None,
        ephemeral_ttl: float | None = None,
        owns_api: bool = False,
    ) -> None:
        if role == "customer" and not user_email:
            raise ValueError("customer sessions need a user_email")
        self.api = api
        self.role = role
        self.user_email = user_email
        self.hub_district = hub_district
        self._owns_api = owns_api
        self.status_filter: Optional[str] = None
        self.district_filter: Optional[str] = None
        self.query: Optional[str] = None
        self.page = 1
        self.limit = settings.request_list_limit
        self.requests: RequestPage | None = None

        self.notifications = NotificationMerger(api.mark_notification_read, ttl=ephemeral_ttl)
        self.drafts = DraftStore(drafts or MemoryKeyValueStore(), key=f"order-draft:{user_email or role}")
        self.notification_poller: PollingTask[list[Notification]] = PollingTask(
            "notifications",
            self._fetch_notifications,
            notification_interval or settings.notification_poll_seconds,
            on_result=self.notifications.replace_durable,
        )
        self.request_poller: PollingTask[RequestPage] = PollingTask(
            "order-requests",
            self._fetch_requests,
            request_interval or settings.request_poll_seconds,
            on_result=self._apply_page,
        )

    @property
    def recipient(self) -> Optional[str]:
        return self.user_email if self.role == "customer" else None

    @property
    def stale(self) -> bool:
        return self.notification_poller.stale or self.request_poller.stale

    async def __aenter__(self) -> "DashboardSession":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def start(self) -> None:
        self.notification_poller.start()
        self.request_poller.start()

    async def close(self) -> None:
        await self.notification_poller.stop()
        await self.request_poller.stop()
        if self._owns_api:
            await self.api.aclose()

    # -------------------- fetching --------------------

    async def _fetch_notifications(self) -> list[Notification]:
        return await self.api.get_notifications(self.recipient)

    async def _fetch_requests(self) -> RequestPage:
        return await self.api.list_requests(
            role=self.role,
            hub_district=self.hub_district,
            customer_email=self.user_email if self.role == "customer" else None,
            status=self.status_filter,
            district=self.district_filter,
            query=self.query,
            page=self.page,
            limit=self.limit,
        )

    def _apply_page(self, page: RequestPage) -> None:
        self.requests = page

    def _apply_request(self, updated: OrderRequest) -> None:
        if self.requests is None:
            return
        self.requests.items = [updated if item.id == updated.id else item for item in self.requests.items]

    async def set_filters(
        self,
        *,
        status: Optional[str] = None,
        district: Optional[str] = None,
        query: Optional[str] = None,
        page: int = 1,
    ) -> RefreshOutcome:
        self.status_filter = status
        self.district_filter = district
        self.query = query
        self.page = page
        return await self.request_poller.refresh()

    async def refresh_requests(self) -> RefreshOutcome:
        outcome = await self.request_poller.refresh()
        self._toast_refresh(outcome, "Requests")
        return outcome

    async def refresh_notifications(self) -> RefreshOutcome:
        outcome = await self.notification_poller.refresh()
        self._toast_refresh(outcome, "Notifications")
        return outcome

    def _toast_refresh(self, outcome: RefreshOutcome, label: str) -> None:
        if outcome.ok:
            self.notifications.success("Refreshed", f"{label} refreshed successfully!")
        else:
            self.notifications.error("Refresh failed", user_message(outcome.error))

    # -------------------- actions --------------------

    async def submit(self, payload: Mapping[str, Any]) -> OrderRequest:
        """Submit an order request; field errors propagate for the form to show."""
        try:
            created = await self.api.submit_request(payload)
        except ValidationError:
            self.drafts.save(payload)
            raise
        except CardoError as exc:
            self.drafts.save(payload)
            self.notifications.error("Submission failed", user_message(exc))
            raise
        self.drafts.clear()
        self.notifications.success(
            "Request submitted",
            f"Your request for {created.preferred_hub} was sent. We'll notify you when a hub responds.",
        )
        await self.request_poller.refresh()
        return created

    async def respond(
        self,
        request_id: str,
        decision: str,
        message: Optional[str] = None,
    ) -> OrderRequest:
        """Accept, reject or complete a request as the current reviewer."""
        target = parse_decision(decision)
        try:
            updated = await self.api.update_status(request_id, target.value, message, responded_by=self.user_email)
        except (NotFoundError, InvalidTransitionError) as exc:
            self.notifications.error("Request update failed", exc.user_message)
            await self.request_poller.refresh()
            raise
        except CardoError as exc:
            self.notifications.error("Request update failed", user_message(exc))
            raise
        self._apply_request(updated)
        self.notifications.success("Request updated", f"Request {updated.status.value} successfully!")
        await self.request_poller.refresh()
        return updated

    async def cancel(self, request_id: str) -> None:
        try:
            await self.api.cancel_request(request_id, customer_email=self.user_email)
        except CardoError as exc:
            self.notifications.error("Cancellation failed", user_message(exc))
            raise
        self.notifications.info("Request cancelled", "Your pending request was withdrawn.")
        await self.request_poller.refresh()

    async def mark_all_read(self) -> list[str]:
        failed = await self.notifications.mark_all_read()
        if failed:
            self.notifications.warning(
                "Some notifications stayed unread",
                f"{len(failed)} notification(s) could not be marked as read.",
            )
        return failed
