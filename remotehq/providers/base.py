from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, ClassVar, Literal, Optional, Union

import httpx
from pydantic import BaseModel, Field

from ..config import settings
from ..log import get_logger
from ..schemas import HarvestSnapshot, JobRecord
from ..services.normalize import (
    clean_tags,
    extract_tech_tags,
    normalize_level,
    normalize_location_type,
    truncate,
)
from ..services.whitelist import is_job_whitelisted

logger = get_logger(__name__)


class RawJob(BaseModel):
    """What every source-specific record is reduced to before normalization."""

    external_id: str
    title: str = ""
    company: Optional[str] = None
    company_logo: Optional[str] = None
    location: Optional[str] = None
    level: Any = None
    tags: list[str] = Field(default_factory=list)
    url: str = ""
    salary: Optional[str] = None
    posted_date: Optional[datetime] = None
    description: Optional[str] = None
    job_type: Optional[str] = None


def parse_date(val: Any) -> Optional[datetime]:
    """Epoch seconds/ms, ISO 8601 or RFC 822 (RSS) dates; None when unparseable."""
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        return val
    if isinstance(val, (int, float)):
        ts = float(val)
        if ts > 1e12:
            ts /= 1000.0
        try:
            return datetime.fromtimestamp(ts, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(val, str):
        s = val.strip()
        try:
            return datetime.fromisoformat(s.replace("Z", "+00:00"))
        except ValueError:
            pass
        try:
            return parsedate_to_datetime(s)
        except (TypeError, ValueError, IndexError):
            return None
    return None


RejectReason = Literal["incomplete", "location", "whitelist"]


@dataclass(frozen=True)
class Accepted:
    record: JobRecord


@dataclass(frozen=True)
class Rejected:
    reason: RejectReason
    title: str
    detail: str = ""


Outcome = Union[Accepted, Rejected]


def build_record(raw: RawJob, source: str, harvest: HarvestSnapshot) -> Outcome:
    """Map one raw record to a canonical ``JobRecord`` or say why it was dropped."""
    title = (raw.title or "").strip()
    url = (raw.url or "").strip()
    if not title or not url or not raw.external_id:
        return Rejected("incomplete", title, "missing title, url or id")

    location_type = normalize_location_type(raw.location)
    if location_type is None:
        return Rejected("location", title, raw.location or "")

    if not is_job_whitelisted(title, harvest):
        return Rejected("whitelist", title)

    description = (raw.description or "").strip() or None
    tags = clean_tags(raw.tags) or extract_tech_tags(title, description)
    record = JobRecord(
        external_id=raw.external_id,
        title=title,
        company=(raw.company or "").strip() or "Unknown",
        company_logo=raw.company_logo or None,
        location_type=location_type,
        level=normalize_level(raw.level, title),
        tech_tags=tags,
        url=url,
        source=source,
        salary=(raw.salary or "").strip() or None,
        posted_date=raw.posted_date,
        description=truncate(description),
        job_type=raw.job_type or None,
    )
    return Accepted(record)


@dataclass
class FetchOutcome:
    source: str
    records: list[JobRecord] = field(default_factory=list)
    rejected: list[Rejected] = field(default_factory=list)
    error: Optional[str] = None


class Provider:
    """One upstream job board.

    Subclasses implement ``fetch_raw`` and return typed raw records (the
    harvest snapshot is passed along for sources that prefilter); ``run``
    maps them through ``build_record`` and turns any failure into an empty
    result carrying the error text, so one broken board never stops the others.
    """

    name: ClassVar[str]
    tag: ClassVar[str] = ""
    record_limit: ClassVar[Optional[int]] = settings.MAX_RECORDS_PER_SOURCE
    headers: ClassVar[dict[str, str]] = {"User-Agent": settings.USER_AGENT}

    def __init__(
        self,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
        batch_delay: float | None = None,
    ) -> None:
        self._transport = transport
        self._timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT
        self.batch_delay = batch_delay if batch_delay is not None else settings.BATCH_DELAY_SECONDS

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self._timeout,
            headers=self.headers,
            follow_redirects=True,
            transport=self._transport,
        )

    async def _get_json(self, client: httpx.AsyncClient, url: str, params: dict | None = None) -> Any:
        r = await client.get(url, params=params)
        r.raise_for_status()
        return r.json()

    async def _get_text(self, client: httpx.AsyncClient, url: str, params: dict | None = None) -> str:
        r = await client.get(url, params=params)
        r.raise_for_status()
        return r.text

    async def pause(self) -> None:
        if self.batch_delay > 0:
            await asyncio.sleep(self.batch_delay)

    async def fetch_raw(self, client: httpx.AsyncClient, harvest: HarvestSnapshot) -> list[RawJob]:
        raise NotImplementedError

    async def run(self, harvest: HarvestSnapshot) -> FetchOutcome:
        outcome = FetchOutcome(source=self.name)
        try:
            async with self.client() as client:
                raw_jobs = await self.fetch_raw(client, harvest)
            for raw in raw_jobs:
                res = build_record(raw, self.name, harvest)
                if isinstance(res, Accepted):
                    outcome.records.append(res.record)
                else:
                    outcome.rejected.append(res)
        except Exception as e:
            logger.exception("%s fetch error: %s", self.name, e)
            return FetchOutcome(source=self.name, error=f"{type(e).__name__}: {e}")

        if self.record_limit is not None:
            outcome.records = outcome.records[: self.record_limit]
        if outcome.rejected:
            by_reason: dict[str, int] = {}
            for rej in outcome.rejected:
                by_reason[rej.reason] = by_reason.get(rej.reason, 0) + 1
            logger.debug("%s rejected %s", self.name, by_reason)
        return outcome

    async def fetch(self, harvest: HarvestSnapshot) -> list[JobRecord]:
        return (await self.run(harvest)).records
