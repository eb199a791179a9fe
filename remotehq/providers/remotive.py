# remotehq/providers/remotive.py
from __future__ import annotations

from typing import Any, Optional

import httpx
from pydantic import BaseModel

from ..schemas import HarvestSnapshot
from ..services.normalize import strip_html
from .base import Provider, RawJob, parse_date

REMOTIVE_ENDPOINT = "https://remotive.com/api/remote-jobs"


class RemotiveJob(BaseModel):
    id: Any = None
    title: Optional[str] = None
    company_name: Optional[str] = None
    company_logo: Optional[str] = None
    candidate_required_location: Optional[str] = None
    url: Optional[str] = None
    salary: Optional[str] = None
    publication_date: Optional[str] = None
    description: Optional[str] = None
    job_type: Optional[str] = None

    def to_raw_job(self) -> RawJob:
        return RawJob(
            external_id=str(self.id) if self.id is not None else "",
            title=self.title or "",
            company=self.company_name,
            company_logo=self.company_logo,
            location=self.candidate_required_location or "",
            url=self.url or "",
            salary=self.salary,
            posted_date=parse_date(self.publication_date),
            description=strip_html(self.description) or None,
            job_type=self.job_type,
        )


class RemotiveProvider(Provider):
    name = "Remotive"

    async def fetch_raw(self, client: httpx.AsyncClient, harvest: HarvestSnapshot) -> list[RawJob]:
        data = await self._get_json(
            client, REMOTIVE_ENDPOINT, params={"category": "software-dev", "limit": 100}
        )
        return [RemotiveJob.model_validate(it).to_raw_job() for it in data.get("jobs") or []]
