"""District index of accepted order requests for hub-network reporting."""

from __future__ import annotations

import logging
import threading
from dataclasses import asdict
from typing import Iterable

from ...models.domain import DistrictRecord, OrderRequest
from ...persistence.filesystem import KeyValueStore
from ..requests.state_machine import is_accepted_history

logger = logging.getLogger(__name__)

CACHE_KEY = "hub_network"
UNASSIGNED_DISTRICT = "Unassigned"


def _record_from_request(request: OrderRequest) -> DistrictRecord:
    return DistrictRecord(
        request_id=request.id,
        customer_name=request.customer_name,
        order_date=request.created_at.isoformat(),
        total_amount=request.total_amount,
        status="accepted",
    )


class HubNetworkAggregator:
    """Groups accepted requests into per-district buckets.

    The index is a derived cache: it is written through ``store`` after every
    change and can always be rebuilt from the request history.
    """

    def __init__(self, store: KeyValueStore, key: str = CACHE_KEY) -> None:
        self._store = store
        self._key = key
        self._lock = threading.RLock()
        self._buckets: dict[str, list[DistrictRecord]] = self._load()

    def _load(self) -> dict[str, list[DistrictRecord]]:
        cached = self._store.get(self._key)
        if not cached:
            return {}
        try:
            return {
                district: [DistrictRecord(**record) for record in records]
                for district, records in cached.get("hubsByDistrict", {}).items()
            }
        except (AttributeError, TypeError) as exc:
            logger.warning(f"Discarding malformed hub network cache: {exc}")
            return {}

    def _persist(self) -> None:
        payload = {
            "hubsByDistrict": {
                district: [asdict(record) for record in records]
                for district, records in self._buckets.items()
            }
        }
        self._store.set(self._key, payload)

    @staticmethod
    def district_for(request: OrderRequest) -> str:
        return request.hub_district or UNASSIGNED_DISTRICT

    def request_ids(self) -> set[str]:
        with self._lock:
            return {record.request_id for records in self._buckets.values() for record in records}

    def on_accepted(self, request: OrderRequest) -> bool:
        """Index an accepted request; returns False when it was already indexed."""
        with self._lock:
            if request.id in self.request_ids():
                return False
            district = self.district_for(request)
            self._buckets.setdefault(district, []).append(_record_from_request(request))
            self._persist()
        logger.info(f"Hub network: request {request.id} indexed under {district}")
        return True

    def get_by_district(self, district: str) -> list[DistrictRecord]:
        """Records of one district bucket; the name is matched case-insensitively."""
        wanted = district.strip().casefold()
        with self._lock:
            for name, records in self._buckets.items():
                if name.casefold() == wanted:
                    return list(records)
        return []

    def list_district_summaries(self) -> list[dict]:
        with self._lock:
            return [
                {
                    "district": district,
                    "requestCount": len(records),
                    "totalAmount": sum(record.total_amount or 0 for record in records),
                }
                for district, records in self._buckets.items()
                if records
            ]

    def rebuild(self, requests: Iterable[OrderRequest]) -> int:
        """Flush the cache and replay every accept transition in the history."""
        accepted = sorted(
            (request for request in requests if is_accepted_history(request.status)),
            key=lambda request: (request.hub_response.responded_at if request.hub_response else request.updated_at),
        )
        with self._lock:
            self._buckets = {}
            for request in accepted:
                self._buckets.setdefault(self.district_for(request), []).append(_record_from_request(request))
            self._persist()
        logger.info(f"Hub network rebuilt from {len(accepted)} accepted requests")
        return len(accepted)

    def ensure_consistent(self, requests: Iterable[OrderRequest]) -> bool:
        """Rebuild when the cached ids differ from the accepted history; returns True if rebuilt."""
        history = list(requests)
        expected = {request.id for request in history if is_accepted_history(request.status)}
        if expected == self.request_ids():
            return False
        logger.warning("Hub network cache is inconsistent with request history; rebuilding")
        self.rebuild(history)
        return True

    def clear(self) -> None:
        with self._lock:
            self._buckets = {}
            self._store.remove(self._key)
