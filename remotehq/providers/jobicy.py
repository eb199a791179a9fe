# remotehq/providers/jobicy.py
from __future__ import annotations

from typing import Any, Optional

import httpx
from pydantic import BaseModel, Field

from ..schemas import HarvestSnapshot
from ..services.normalize import extract_tech_tags, format_salary_range, strip_html
from .base import Provider, RawJob, parse_date

JOBICY_ENDPOINT = "https://jobicy.com/api/v2/remote-jobs"


class JobicyJob(BaseModel):
    id: Any = None
    url: Optional[str] = None
    job_title: Optional[str] = Field(default=None, alias="jobTitle")
    company_name: Optional[str] = Field(default=None, alias="companyName")
    company_logo: Optional[str] = Field(default=None, alias="companyLogo")
    job_geo: Optional[str] = Field(default=None, alias="jobGeo")
    job_level: Any = Field(default=None, alias="jobLevel")
    job_type: Any = Field(default=None, alias="jobType")
    job_excerpt: Optional[str] = Field(default=None, alias="jobExcerpt")
    job_description: Optional[str] = Field(default=None, alias="jobDescription")
    annual_salary_min: Any = Field(default=None, alias="annualSalaryMin")
    annual_salary_max: Any = Field(default=None, alias="annualSalaryMax")
    pub_date: Optional[str] = Field(default=None, alias="pubDate")

    class Config:
        populate_by_name = True

    def to_raw_job(self) -> RawJob:
        job_type = self.job_type
        if isinstance(job_type, list):
            job_type = ", ".join(str(x) for x in job_type)
        return RawJob(
            external_id=str(self.id) if self.id is not None else "",
            title=self.job_title or "",
            company=self.company_name,
            company_logo=self.company_logo,
            location=self.job_geo or "",
            level=self.job_level,
            url=self.url or "",
            salary=format_salary_range(self.annual_salary_min, self.annual_salary_max),
            posted_date=parse_date(self.pub_date),
            # tags come from the full description, only the excerpt is stored
            tags=extract_tech_tags(self.job_title, strip_html(self.tag_text())),
            description=self.job_excerpt,
            job_type=job_type or None,
        )

    def tag_text(self) -> str:
        return self.job_description or self.job_excerpt or ""


class JobicyProvider(Provider):
    name = "Jobicy"

    async def fetch_raw(self, client: httpx.AsyncClient, harvest: HarvestSnapshot) -> list[RawJob]:
        data = await self._get_json(client, JOBICY_ENDPOINT, params={"count": 50, "industry": "dev"})
        out: list[RawJob] = []
        for it in data.get("jobs") or []:
            out.append(JobicyJob.model_validate(it).to_raw_job())
        return out
