# remotehq/providers/weworkremotely.py
from __future__ import annotations

import re
from typing import Optional

import httpx
from bs4 import BeautifulSoup
from pydantic import BaseModel

from ..schemas import HarvestSnapshot
from ..services.normalize import encode_external_id, strip_html
from .base import Provider, RawJob, parse_date

WWR_FEED = "https://weworkremotely.com/categories/remote-programming-jobs.rss"

_COMPANY_TITLE_RE = re.compile(r"^(.+?):\s+(.+)$")


class WWRItem(BaseModel):
    title: str
    link: str
    description: str = ""
    pub_date: Optional[str] = None
    region: Optional[str] = None

    def split_title(self) -> tuple[str, str]:
        """``"Acme: Senior Engineer"`` -> ``("Acme", "Senior Engineer")``."""
        m = _COMPANY_TITLE_RE.match(self.title)
        if not m:
            return "Unknown", self.title
        return m.group(1).strip(), m.group(2).strip()

    def to_raw_job(self) -> RawJob:
        company, role = self.split_title()
        return RawJob(
            external_id=encode_external_id("wwr", self.link),
            title=role,
            company=company,
            location=self.region or "Anywhere",
            url=self.link,
            posted_date=parse_date(self.pub_date),
            description=strip_html(self.description),
        )


def parse_feed(xml: str) -> list[WWRItem]:
    soup = BeautifulSoup(xml, "xml")
    items: list[WWRItem] = []
    for el in soup.find_all("item"):
        def text(tag: str) -> str:
            node = el.find(tag)
            return node.get_text().strip() if node else ""

        title, link = text("title"), text("link")
        if not title or not link:
            continue
        items.append(WWRItem(
            title=title,
            link=link,
            description=text("description"),
            pub_date=text("pubDate") or None,
            region=text("region") or None,
        ))
    return items


class WeWorkRemotelyProvider(Provider):
    name = "WeWorkRemotely"

    async def fetch_raw(self, client: httpx.AsyncClient, harvest: HarvestSnapshot) -> list[RawJob]:
        xml = await self._get_text(client, WWR_FEED)
        return [it.to_raw_job() for it in parse_feed(xml)]
