from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient

from cardo.main import create_app
from cardo.persistence.filesystem import MemoryKeyValueStore
from cardo.persistence.repository import InMemoryNotificationRepository, InMemoryRequestRepository
from cardo.services.context import AppContext, build_context


class StepClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    def _make(**overrides: Any) -> dict[str, Any]:
        payload = {
            "customerName": "Anita Menon",
            "customerEmail": "anita@example.com",
            "customerPhone": "+91 98470 12345",
            "productType": "Cardamom",
            "grade": "A Grade",
            "quantity": 25,
            "budgetMin": 40000,
            "budgetMax": 55000,
            "urgency": "normal",
            "preferredHub": "Kumily Cardamom Hub",
            "description": "Bold green 8mm pods for festive gift boxes.",
        }
        payload.update(overrides)
        return payload

    return _make


@pytest.fixture
def context() -> AppContext:
    ctx = build_context(
        requests=InMemoryRequestRepository(),
        notifications=InMemoryNotificationRepository(),
        cache=MemoryKeyValueStore(),
    )
    ctx.store._clock = StepClock()
    return ctx


@pytest.fixture
def api_client(context: AppContext):
    app = create_app(context)
    with TestClient(app) as client:
        yield client
