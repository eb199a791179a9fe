# remotehq/providers/remoteok.py
from __future__ import annotations

from typing import Any, Optional

import httpx
from pydantic import BaseModel

from ..schemas import HarvestSnapshot
from ..services.normalize import format_salary_range, strip_html
from .base import Provider, RawJob, parse_date

REMOTEOK_ENDPOINT = "https://remoteok.com/api"


class RemoteOKJob(BaseModel):
    id: Any = None
    position: Optional[str] = None
    company: Optional[str] = None
    company_logo: Optional[str] = None
    logo: Optional[str] = None
    location: Optional[str] = None
    tags: Optional[list[Any]] = None
    url: Optional[str] = None
    salary_min: Any = None
    salary_max: Any = None
    date: Any = None
    description: Optional[str] = None

    def to_raw_job(self) -> RawJob:
        ident = str(self.id) if self.id is not None else ""
        return RawJob(
            external_id=ident,
            title=self.position or "",
            company=self.company,
            company_logo=self.company_logo or self.logo,
            location=self.location or "",
            tags=[str(t) for t in self.tags or [] if t],
            url=self.url or f"https://remoteok.com/remote-jobs/{ident}",
            salary=format_salary_range(self.salary_min, self.salary_max),
            posted_date=parse_date(self.date),
            description=strip_html(self.description) or None,
        )


class RemoteOKProvider(Provider):
    name = "RemoteOK"

    async def fetch_raw(self, client: httpx.AsyncClient, harvest: HarvestSnapshot) -> list[RawJob]:
        data = await self._get_json(client, REMOTEOK_ENDPOINT)
        # element 0 is the API's legal notice, not a job
        items = data[1:] if isinstance(data, list) else []
        jobs = [RemoteOKJob.model_validate(it) for it in items if isinstance(it, dict)]
        return [j.to_raw_job() for j in jobs if j.position and j.company]
