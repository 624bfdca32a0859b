"""Shared fixtures: in-memory SQLite store, a controllable clock, and an HTTP client."""

import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient

from burnnote.config import Settings
from burnnote.core.message import MessageService
from burnnote.infra.postgres import SqlMessageStore, build_engine, init_db
from burnnote.main import create_app


class FakeClock:
    """Fixed point in time that tests can move forward."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta):
        self.now += delta


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings():
    return Settings(database_url="sqlite://", rate_limit_enabled=False)


@pytest.fixture
def store():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield SqlMessageStore(engine)
    engine.dispose()


@pytest.fixture
def service(store, settings, clock):
    return MessageService(store, settings, clock=clock)


@pytest.fixture
def client(settings, service):
    app = create_app(settings, service=service)
    with TestClient(app) as test_client:
        yield test_client
