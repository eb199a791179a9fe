# remotehq/providers/dailyremote.py
from __future__ import annotations

import re
from typing import Optional

import httpx
from bs4 import BeautifulSoup, Tag
from pydantic import BaseModel, Field

from ..config import settings
from ..schemas import HarvestSnapshot
from ..services.normalize import encode_external_id
from .base import Provider, RawJob

DAILY_REMOTE_BASE = "https://dailyremote.com"
DAILY_REMOTE_LISTING = f"{DAILY_REMOTE_BASE}/remote-software-development-jobs"

LOCATION_MARK = "\U0001F30E"  # globe
SALARY_MARK = "\U0001F4B5"  # banknote

_SKIP_COMPANY_RE = re.compile(
    r"^(full time|part time|internship|contract|·|\d+ (?:min|hour|day|week|month)s? ago|\d+ \w+ ago)$",
    re.I,
)


class DailyRemoteCard(BaseModel):
    href: str
    title: str
    company: str = "Unknown"
    location: Optional[str] = None
    salary: Optional[str] = None
    tags: list[str] = Field(default_factory=list)

    def to_raw_job(self) -> RawJob:
        return RawJob(
            external_id=encode_external_id("dr", self.href),
            title=self.title,
            company=self.company,
            # cards without a location tag are plain remote listings
            location=self.location or "Remote",
            tags=self.tags,
            url=f"{DAILY_REMOTE_BASE}{self.href}",
            salary=self.salary,
        )


def _company_from(article: Tag) -> str:
    box = article.select_one("div.company-name")
    if box is not None:
        for span in box.find_all("span"):
            text = span.get_text(strip=True)
            if 1 < len(text) < 80 and not _SKIP_COMPANY_RE.match(text):
                return text
    mobile = article.select_one("div.company-name-mobile span")
    if mobile is not None:
        text = mobile.get_text(strip=True)
        if len(text) > 1 and not _SKIP_COMPANY_RE.match(text):
            return text
    return "Unknown"


def parse_listing(html: str) -> list[DailyRemoteCard]:
    soup = BeautifulSoup(html, "html.parser")
    cards: list[DailyRemoteCard] = []
    seen: set[str] = set()

    for article in soup.find_all("article"):
        link = article.select_one("h2.job-position a[href*='/remote-job/']")
        if link is None:
            continue
        href = link.get("href") or ""
        if not href or href in seen:
            continue
        seen.add(href)

        title = link.get_text(strip=True)
        if len(title) < 3:
            continue

        location: Optional[str] = None
        salary: Optional[str] = None
        meta = article.select_one("div.job-meta")
        for tag in meta.select("span.card-tag") if meta is not None else []:
            text = tag.get_text(strip=True)
            if text.startswith(LOCATION_MARK):
                location = text.replace(LOCATION_MARK, "").strip() or location
            elif SALARY_MARK in text:
                salary = text.replace(SALARY_MARK, "").strip() or salary

        tags: list[str] = []
        for a in article.select("a[href*='/remote-'][href*='-jobs']"):
            text = a.get_text(strip=True)
            if text and "Software Development" not in text and len(text) < 30:
                tags.append(text)

        cards.append(DailyRemoteCard(
            href=href,
            title=title,
            company=_company_from(article),
            location=location,
            salary=salary,
            tags=tags,
        ))
    return cards


class DailyRemoteProvider(Provider):
    name = "DailyRemote"
    headers = {
        "User-Agent": settings.BROWSER_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml",
    }

    async def fetch_raw(self, client: httpx.AsyncClient, harvest: HarvestSnapshot) -> list[RawJob]:
        html = await self._get_text(client, DAILY_REMOTE_LISTING)
        return [card.to_raw_job() for card in parse_listing(html)]
