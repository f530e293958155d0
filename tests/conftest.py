"""Shared fixtures for the order intake test suite."""

from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Any, Awaitable, Callable, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shared.config.database import create_tables, make_engine, make_session_factory
from shared.config.settings import Settings
from services.model_service.uploads import UploadedModel
from services.order_service.repository import OrderRepository
from services.order_service.service import OrderService


# ---------------------------------------------------------------------------
# Constants reused across tests
# ---------------------------------------------------------------------------

MB = 1024 * 1024
TEST_DATABASE_URL = "sqlite+aiosqlite://"

MEETUP_PAYLOAD = {
    "customerName": "Ada Lovelace",
    "customerPhone": "7325550100",
    "deliveryMethod": "meetup",
}

DELIVERY_PAYLOAD = {
    "customerName": "Ada Lovelace",
    "customerPhone": "7325550100",
    "deliveryMethod": "delivery",
    "streetAddress": "12 Main St",
    "city": "Monroe Township",
    "state": "NJ",
    "zipCode": "08831",
}


class RecordingNotifier:
    """Stands in for the mail transport; remembers every order it was given."""

    def __init__(self, result: bool = True, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls: List[Tuple[Any, Optional[UploadedModel]]] = []
        self.closed = False

    async def notify(self, order, upload=None) -> bool:
        self.calls.append((order, upload))
        if self.error:
            raise self.error
        return self.result

    async def aclose(self):
        self.closed = True


def make_upload(size: int, filename: str = "part.stl") -> UploadedModel:
    return UploadedModel(filename=filename, content=b"\x00" * size, content_type="model/stl")


# ---------------------------------------------------------------------------
# Store / service fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def with_repository() -> Callable[[Callable[[OrderRepository], Awaitable[Any]]], Any]:
    """Run an async scenario against a fresh in-memory store, all on one event loop."""

    def runner(scenario, create_schema: bool = True):
        async def main():
            engine = make_engine(TEST_DATABASE_URL)
            if create_schema:
                await create_tables(engine)
            try:
                return await scenario(OrderRepository(make_session_factory(engine)))
            finally:
                await engine.dispose()

        return asyncio.run(main())

    return runner


@pytest.fixture()
def with_service(with_repository, notifier):
    """Run an async scenario with an OrderService over a fresh store."""

    def runner(scenario, trust_client_estimates: bool = False, service_notifier=None):
        async def wrapped(repository):
            service = OrderService(
                repository,
                service_notifier or notifier,
                support_removal_fee=Decimal("5.00"),
                trust_client_estimates=trust_client_estimates,
            )
            return await scenario(service, repository)

        return with_repository(wrapped)

    return runner


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def settings() -> Settings:
    return Settings(database_url=TEST_DATABASE_URL, metrics_enabled=False, max_upload_mb=50)


@pytest.fixture()
def api(settings, notifier):
    app = create_app(settings, notifier=notifier)
    with TestClient(app) as client:
        yield client
