from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

LOCATION_TYPES: tuple[str, ...] = ("Anywhere", "Worldwide", "Global", "Remote", "Remote (APAC)")

LocationType = Literal["Anywhere", "Worldwide", "Global", "Remote", "Remote (APAC)"]
SourceName = Literal[
    "Remotive", "Himalayas", "Jobicy", "RemoteOK",
    "WeWorkRemotely", "WorkingNomads", "DailyRemote", "HackerNews",
]
HarvestingMode = Literal["exact", "fuzzy"]
JobStatus = Literal["applied", "ignored"]
LifecycleStatus = Literal["new", "active", "inactive"]
SortKey = Literal["recent", "applied", "ignored", "pay", "level"]


class JobRecord(BaseModel):
    """Canonical job record; identical in shape whichever source produced it."""

    external_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    company: str = Field(min_length=1)
    company_logo: Optional[str] = None
    location_type: LocationType
    level: Optional[str] = None
    tech_tags: List[str] = Field(default_factory=list, max_length=6)
    url: str = Field(min_length=1)
    source: SourceName
    salary: Optional[str] = None
    posted_date: Optional[datetime] = None
    description: Optional[str] = Field(default=None, max_length=500)
    job_type: Optional[str] = None


class JobOut(JobRecord):
    id: int
    status: Optional[JobStatus] = None
    lifecycle_status: LifecycleStatus = "new"
    created_at: datetime

    class Config:
        from_attributes = True


class JobsPage(BaseModel):
    jobs: List[JobOut]
    total: int
    page: int
    total_pages: int


class JobStatusUpdate(BaseModel):
    status: Optional[JobStatus] = None


class HarvestSnapshot(BaseModel):
    """Read-only copy of the harvesting settings handed to every adapter in one pass."""

    whitelisted_titles: tuple[str, ...] = ()
    harvesting_mode: HarvestingMode = "fuzzy"

    class Config:
        frozen = True


class HarvestingSettingsOut(BaseModel):
    id: int
    user_id: Optional[str] = None
    whitelisted_titles: List[str]
    harvesting_mode: HarvestingMode
    updated_at: datetime

    class Config:
        from_attributes = True


class SettingsUpdate(BaseModel):
    whitelisted_titles: Optional[List[str]] = None
    harvesting_mode: Optional[HarvestingMode] = None

    class Config:
        extra = "forbid"

    @field_validator("whitelisted_titles")
    @classmethod
    def _clean_titles(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        out: List[str] = []
        for raw in v:
            phrase = " ".join(raw.split()).lower()
            if not phrase:
                raise ValueError("whitelisted titles must be non-empty")
            if len(phrase) > 100:
                raise ValueError("whitelisted titles must be at most 100 characters")
            if phrase not in out:
                out.append(phrase)
        return out


class FetchLogEntry(BaseModel):
    source: str
    jobs_found: int = 0
    jobs_added: int = 0
    success: bool = True
    error: Optional[str] = None


class FetchLogOut(FetchLogEntry):
    id: int
    fetched_at: datetime

    class Config:
        from_attributes = True


class SourceResult(BaseModel):
    source: str
    found: int
    added: int
    error: Optional[str] = None


class FetchSummary(BaseModel):
    total_added: int
    sources: List[SourceResult]


class CountBy(BaseModel):
    key: str
    count: int


class StatsOut(BaseModel):
    total_jobs: int
    total_companies: int
    total_sources: int
    by_level: List[CountBy]
    by_source: List[CountBy]
    by_location_type: List[CountBy]
    by_lifecycle_status: List[CountBy]
    top_companies: List[CountBy]
    recent_fetches: List[FetchLogOut]
