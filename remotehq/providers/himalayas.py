# remotehq/providers/himalayas.py
from __future__ import annotations

import re
from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field

from ..schemas import HarvestSnapshot
from ..services.normalize import format_salary_range
from .base import Provider, RawJob, parse_date

HIMALAYAS_ENDPOINT = "https://himalayas.app/jobs/api"
BATCH_SIZE = 20
MAX_BATCHES = 5

# The feed mixes in sales, support, marketing etc.
_TECH_CATEGORY_RE = re.compile(
    r"software|engineer|develop|programming|devops|data|tech|full.?stack|front.?end|back.?end"
    r"|mobile|cloud|security|sre|platform",
    re.I,
)
_TECH_TITLE_RE = re.compile(
    r"engineer|developer|programmer|devops|sre|architect|data|software|full.?stack|front.?end"
    r"|back.?end|platform",
    re.I,
)


class HimalayasJob(BaseModel):
    id: Any = None
    slug: Optional[str] = None
    title: Optional[str] = None
    company_name: Optional[str] = Field(default=None, alias="companyName")
    company_logo: Optional[str] = Field(default=None, alias="companyLogo")
    categories: Optional[list[str]] = None
    location_restrictions: Optional[list[str]] = Field(default=None, alias="locationRestrictions")
    seniority: Any = None
    application_link: Optional[str] = Field(default=None, alias="applicationLink")
    min_salary: Optional[float] = Field(default=None, alias="minSalary")
    max_salary: Optional[float] = Field(default=None, alias="maxSalary")
    pub_date: Any = Field(default=None, alias="pubDate")
    excerpt: Optional[str] = None
    description: Optional[str] = None
    employment_type: Optional[str] = Field(default=None, alias="employmentType")

    class Config:
        populate_by_name = True

    def is_software_role(self) -> bool:
        if any(_TECH_CATEGORY_RE.search(c or "") for c in self.categories or ()):
            return True
        return bool(_TECH_TITLE_RE.search(self.title or ""))

    def to_raw_job(self, fallback_id: str) -> RawJob:
        ident = str(self.id or self.slug or fallback_id)
        return RawJob(
            external_id=ident,
            title=self.title or "",
            company=self.company_name,
            company_logo=self.company_logo,
            location=", ".join(self.location_restrictions) if self.location_restrictions else "Worldwide",
            level=self.seniority,
            url=self.application_link or f"https://himalayas.app/jobs/{self.slug or ident}",
            salary=format_salary_range(self.min_salary, self.max_salary),
            posted_date=parse_date(self.pub_date),
            description=self.excerpt or self.description,
            job_type=self.employment_type,
        )


class HimalayasProvider(Provider):
    name = "Himalayas"

    async def fetch_raw(self, client: httpx.AsyncClient, harvest: HarvestSnapshot) -> list[RawJob]:
        out: list[RawJob] = []
        offset = 0
        for batch in range(MAX_BATCHES):
            if batch:
                await self.pause()
            data = await self._get_json(
                client, HIMALAYAS_ENDPOINT, params={"limit": BATCH_SIZE, "offset": offset}
            )
            items = data if isinstance(data, list) else data.get("jobs") or []
            if not items:
                break
            for it in items:
                job = HimalayasJob.model_validate(it)
                if not job.is_software_role():
                    continue
                out.append(job.to_raw_job(f"him-{offset + len(out)}"))
            offset += BATCH_SIZE
        return out
