"""Request Store: creation, lookup and per-id serialized status transitions."""

from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, Mapping

from ...data.hub_repository import resolve_district
from ...errors import InvalidTransitionError, NotFoundError, NotificationDispatchError
from ...models.domain import HubResponse, OrderRequest, RequestStatus
from ...persistence.repository import RequestRepository
from ..notifications.dispatcher import NotificationDispatcher
from .state_machine import ensure_transition, parse_decision
from .validation import validate_submission

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RequestStore:
    """Owns order request persistence and the lifecycle transition rules."""

    def __init__(
        self,
        repository: RequestRepository,
        dispatcher: NotificationDispatcher,
        *,
        district_resolver: Callable[[str], str | None] = resolve_district,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.repository = repository
        self.dispatcher = dispatcher
        self._resolve_district = district_resolver
        self._clock = clock
        self._locks_guard = threading.Lock()
        # request id -> [lock, number of holders and waiters]; dropped when unused.
        self._locks: dict[str, list] = {}

    @contextmanager
    def _locked(self, request_id: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._locks.setdefault(request_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._locks_guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[request_id]

    def submit(self, payload: Mapping[str, Any]) -> OrderRequest:
        clean = validate_submission(payload)
        now = self._clock()
        request = OrderRequest(
            id=uuid.uuid4().hex,
            customer_name=clean.customer_name,
            customer_email=clean.customer_email,
            customer_phone=clean.customer_phone,
            product_type=clean.product_type,
            grade=clean.grade,
            quantity=clean.quantity,
            budget_min=clean.budget_min,
            budget_max=clean.budget_max,
            urgency=clean.urgency,
            preferred_hub=clean.preferred_hub,
            description=clean.description,
            hub_district=self._resolve_district(clean.preferred_hub),
            status=RequestStatus.pending,
            created_at=now,
            updated_at=now,
        )
        stored = self.repository.add(request)
        logger.info(f"Order request created: {stored.id} by {stored.customer_name} (hub: {stored.preferred_hub})")
        return stored

    def get(self, request_id: str) -> OrderRequest:
        request = self.repository.get(request_id)
        if request is None:
            raise NotFoundError(f"Order request '{request_id}' not found")
        return request

    def all(self) -> list[OrderRequest]:
        return list(self.repository.all())

    def transition(
        self,
        request_id: str,
        target: str | RequestStatus,
        message: str | None = None,
        responded_by: str | None = None,
    ) -> OrderRequest:
        """Move a request to ``target`` and emit one durable notification.

        Raises NotFoundError for unknown ids and InvalidTransitionError when the
        current status does not allow ``target`` (including when a concurrent
        reviewer won the race).
        """
        target_status = parse_decision(target)
        with self._locked(request_id):
            current = self.get(request_id)
            ensure_transition(current.status, target_status)

            now = self._clock()
            changes: dict[str, Any] = {"status": target_status, "updated_at": now}
            if current.status is RequestStatus.pending:
                changes["hub_response"] = HubResponse(
                    message=(message or "").strip() or f"Request {target_status.value}",
                    responded_at=now,
                    responded_by=responded_by,
                )
            updated = self.repository.compare_and_set(request_id, current.status, changes)
            if updated is None:
                # Another writer (e.g. a second server process) got there first.
                latest = self.get(request_id)
                raise InvalidTransitionError(latest.status.value, target_status.value)

        logger.info(f"Order request {request_id} status updated to {target_status.value} by {responded_by or 'unknown'}")
        self._notify(updated)
        return updated

    def _notify(self, request: OrderRequest) -> None:
        try:
            self.dispatcher.request_status_changed(request)
        except NotificationDispatchError as exc:
            logger.error(f"[Request: {request.id}] Notification dispatch failed, transition kept: {exc}")

    def cancel(self, request_id: str, customer_email: str | None = None) -> OrderRequest:
        """Delete a customer's own request while it is still pending."""
        with self._locked(request_id):
            request = self.get(request_id)
            if customer_email is not None and request.customer_email.lower() != customer_email.strip().lower():
                raise NotFoundError(f"Order request '{request_id}' not found")
            if request.status is not RequestStatus.pending:
                raise InvalidTransitionError(
                    request.status.value,
                    "cancelled",
                    "Cannot delete a request that has been processed",
                )
            if not self.repository.delete(request_id, expected=RequestStatus.pending):
                # Another process moved or removed the request since it was read.
                latest = self.get(request_id)
                raise InvalidTransitionError(
                    latest.status.value,
                    "cancelled",
                    "Cannot delete a request that has been processed",
                )
        logger.info(f"Order request {request_id} cancelled by {request.customer_email}")
        return request
