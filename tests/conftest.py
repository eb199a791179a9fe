from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from remotehq.db import init_db
from remotehq.providers import Provider, RawJob
from remotehq.schemas import HarvestSnapshot, JobRecord
from remotehq.services.storage import JobStore


@pytest.fixture()
def store() -> JobStore:
    engine = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    yield JobStore(factory)
    engine.dispose()


@pytest.fixture()
def harvest() -> HarvestSnapshot:
    return HarvestSnapshot(whitelisted_titles=("engineer", "developer"), harvesting_mode="fuzzy")


def make_record(external_id: str, source: str = "Remotive", **overrides) -> JobRecord:
    data = dict(
        external_id=external_id,
        title=f"Software Engineer {external_id}",
        company="Acme",
        location_type="Remote",
        url=f"https://example.com/jobs/{external_id}",
        source=source,
        posted_date=datetime(2026, 10, 1, tzinfo=timezone.utc),
    )
    data.update(overrides)
    return JobRecord(**data)


class StubProvider(Provider):
    """Serves a fixed list of raw jobs; swap ``raw_jobs`` between passes."""

    name = "Remotive"

    def __init__(self, raw_jobs=None, *, fail_with: Exception | None = None, name: str | None = None):
        super().__init__(transport=httpx.MockTransport(lambda r: httpx.Response(404)), batch_delay=0)
        self.raw_jobs = list(raw_jobs or [])
        self.fail_with = fail_with
        self.calls = 0
        if name:
            self.name = name

    async def fetch_raw(self, client, harvest):
        self.calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.raw_jobs)


def raw(external_id: str, title: str = "Backend Engineer", location: str = "Worldwide", **kw) -> RawJob:
    return RawJob(
        external_id=external_id,
        title=title,
        company=kw.pop("company", "Acme"),
        location=location,
        url=kw.pop("url", f"https://example.com/{external_id}"),
        **kw,
    )


def mock_transport(routes: dict[str, object], calls: list | None = None) -> httpx.MockTransport:
    """Route by ``host + path``; values are JSON-able objects or ``httpx.Response``."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        key = f"{request.url.host}{request.url.path}"
        if key not in routes:
            return httpx.Response(404, text="not found")
        val = routes[key]
        if callable(val):
            val = val(request)
        if isinstance(val, httpx.Response):
            return val
        if isinstance(val, str):
            return httpx.Response(200, text=val)
        return httpx.Response(200, json=val)

    return httpx.MockTransport(handler)
