# remotehq/providers/workingnomads.py
from __future__ import annotations

from typing import Any, Optional

import httpx
from pydantic import BaseModel

from ..schemas import HarvestSnapshot
from ..services.normalize import encode_external_id, strip_html, truncate
from .base import Provider, RawJob, parse_date

WORKING_NOMADS_ENDPOINT = "https://www.workingnomads.com/api/exposed_jobs/"


class WorkingNomadsJob(BaseModel):
    url: Optional[str] = None
    title: Optional[str] = None
    company_name: Optional[str] = None
    location: Optional[str] = None
    tags: Any = None
    pub_date: Any = None
    description: Optional[str] = None

    def tag_list(self) -> list[str]:
        if not self.tags:
            return []
        if isinstance(self.tags, list):
            return [str(t).strip() for t in self.tags if str(t).strip()]
        return [t.strip() for t in str(self.tags).split(",") if t.strip()]

    def to_raw_job(self) -> RawJob:
        return RawJob(
            external_id=encode_external_id("wn", self.url or ""),
            title=self.title or "",
            company=self.company_name,
            location=self.location or "",
            tags=self.tag_list(),
            url=self.url or "",
            posted_date=parse_date(self.pub_date),
            description=truncate(strip_html(self.description)),
        )


class WorkingNomadsProvider(Provider):
    name = "WorkingNomads"

    async def fetch_raw(self, client: httpx.AsyncClient, harvest: HarvestSnapshot) -> list[RawJob]:
        data = await self._get_json(client, WORKING_NOMADS_ENDPOINT, params={"category": "development"})
        items = data if isinstance(data, list) else []
        jobs = [WorkingNomadsJob.model_validate(it) for it in items if isinstance(it, dict)]
        return [j.to_raw_job() for j in jobs if j.title and j.url]
