"""
tests/conftest.py
"""
from __future__ import annotations

import datetime as _dt
import itertools
from pathlib import Path
from typing import AsyncIterator, Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.runtime import Runtime
from app.db.memory import MemoryPostStore
from app.db.sql import SqlPostStore
from app.main import create_app
from app.services.posts import NewPost


ADMIN_PASSWORD = "correct"


class FakeClock:
    """Every call returns a timestamp one second later than the previous one."""

    def __init__(self) -> None:
        self._counter = itertools.count()
        self.base = _dt.datetime(2099, 1, 1, tzinfo=_dt.timezone.utc)

    def __call__(self) -> _dt.datetime:
        return self.base + _dt.timedelta(seconds=next(self._counter))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url="memory://",
        admin_password=ADMIN_PASSWORD,
        secret_key="test-secret",
        upload_dir=str(tmp_path / "uploads"),
        log_level="DEBUG",
    )


@pytest.fixture
def make_client(clock: FakeClock) -> Iterator[Callable[..., TestClient]]:
    """Build a client around an app for the given settings (and optional runtime)."""
    clients: list[TestClient] = []

    def _make(settings: Settings, runtime: Runtime | None = None) -> TestClient:
        runtime = runtime or Runtime.from_settings(settings, clock=clock)
        client = TestClient(create_app(settings, runtime=runtime))
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client: Callable[..., TestClient], settings: Settings) -> TestClient:
    return make_client(settings)


@pytest.fixture
def admin_headers(client: TestClient) -> dict[str, str]:
    rv = client.post("/auth/admin", json={"password": ADMIN_PASSWORD})
    token = rv.json()["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def memory_store(clock: FakeClock) -> MemoryPostStore:
    return MemoryPostStore(clock=clock)


@pytest.fixture
async def sql_store(tmp_path: Path, clock: FakeClock) -> AsyncIterator[SqlPostStore]:
    store = SqlPostStore(f"sqlite:///{tmp_path / 'blog.sqlite3'}", clock=clock)
    await store.initialize()
    yield store
    await store.close()


@pytest.fixture(params=["memory", "sql"])
async def store(request: pytest.FixtureRequest, memory_store: MemoryPostStore, tmp_path: Path, clock: FakeClock):
    """Run a test once per backend."""
    if request.param == "memory":
        yield memory_store
        return
    sql = SqlPostStore(f"sqlite:///{tmp_path / 'param.sqlite3'}", clock=clock)
    await sql.initialize()
    yield sql
    await sql.close()


def new_post(**overrides) -> NewPost:
    fields = dict(
        title="Sustainable Futures",
        content="Soil health starts with the farmers who tend it.",
        excerpt="Why soil matters",
        author="FACHIG Team",
        tags=[],
        featured=False,
    )
    fields.update(overrides)
    return NewPost(**fields)


def post_payload(**overrides) -> dict:
    payload = dict(
        title="Sustainable Futures",
        content="Soil health starts with the farmers who tend it.",
        excerpt="Why soil matters",
        author="FACHIG Team",
        tags=["Agroecology"],
        featured=False,
    )
    payload.update(overrides)
    return payload
