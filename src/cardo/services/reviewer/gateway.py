"""Role-scoped query and command surface for the admin and hub consoles."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Literal, Optional

from ...models.domain import OrderRequest, RequestStatus
from ..hub_network.aggregator import HubNetworkAggregator
from ..requests.state_machine import parse_decision
from ..requests.store import RequestStore

logger = logging.getLogger(__name__)

Role = Literal["admin", "hub", "customer"]


@dataclass(slots=True, frozen=True)
class ReviewerScope:
    """Visibility of a caller: admins see all, hubs their district, customers their own."""

    role: Role = "admin"
    district: Optional[str] = None
    customer_email: Optional[str] = None

    def permits(self, request: OrderRequest) -> bool:
        if self.role == "admin":
            return True
        if self.role == "hub":
            if not self.district:
                return True
            return (request.hub_district or "").lower() == self.district.strip().lower()
        if self.role == "customer":
            return bool(self.customer_email) and request.customer_email.lower() == self.customer_email.strip().lower()
        return False


@dataclass(slots=True)
class RequestPage:
    items: list[OrderRequest]
    total: int
    counts_by_status: dict[str, int]
    page: int
    limit: int
    pages: int = field(default=0)


def _matches_query(request: OrderRequest, query: str) -> bool:
    needle = query.strip().lower()
    return needle in request.customer_name.lower() or needle in request.id.lower()


class ReviewerGateway:
    def __init__(self, store: RequestStore, aggregator: HubNetworkAggregator) -> None:
        self.store = store
        self.aggregator = aggregator

    def list(
        self,
        scope: ReviewerScope,
        *,
        status: str | RequestStatus | None = None,
        district: str | None = None,
        query: str | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> RequestPage:
        """List requests visible to ``scope``.

        ``counts_by_status`` is computed over the scoped but otherwise
        unfiltered population so status tabs keep accurate badges.
        """
        visible = [request for request in self.store.all() if scope.permits(request)]

        counts = {status_value.value: 0 for status_value in RequestStatus}
        for request in visible:
            counts[request.status.value] += 1

        filtered = visible
        if status:
            status_filter = RequestStatus(status)
            filtered = [request for request in filtered if request.status is status_filter]
        if district:
            district_filter = district.strip().lower()
            filtered = [request for request in filtered if (request.hub_district or "").lower() == district_filter]
        if query and query.strip():
            filtered = [request for request in filtered if _matches_query(request, query)]

        filtered.sort(key=lambda request: request.created_at, reverse=True)
        page = max(page, 1)
        limit = max(limit, 1)
        offset = (page - 1) * limit
        total = len(filtered)
        return RequestPage(
            items=filtered[offset:offset + limit],
            total=total,
            counts_by_status=counts,
            page=page,
            limit=limit,
            pages=(total + limit - 1) // limit,
        )

    def respond(
        self,
        request_id: str,
        decision: str | RequestStatus,
        message: str | None = None,
        responded_by: str | None = None,
    ) -> OrderRequest:
        """Apply a reviewer decision and return the authoritative post-state."""
        target = parse_decision(decision)
        updated = self.store.transition(request_id, target, message, responded_by=responded_by)
        if target is RequestStatus.accepted:
            try:
                self.aggregator.on_accepted(updated)
            except Exception as exc:
                # The index is a rebuildable cache; never undo the transition for it.
                logger.error(f"[Request: {request_id}] Hub network update failed: {exc}", exc_info=True)
        return updated
