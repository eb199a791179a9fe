# remotehq/providers/hackernews.py
"""Hacker News job posts, via the Algolia search API.

Two phases: the search listing gives id, title, url and date for each post.
Company names are parsed from titles such as "Acme (YC W21) Is Hiring a
Senior Engineer (Remote)". Posts whose title does not name the company, and
that would pass the location and whitelist checks, get one GET of their
external posting page, and the company is read from that
page's ``og:site_name`` or ``<title>``. Those lookups run in small batches
and are capped per run.
"""
from __future__ import annotations

import asyncio
import re
from typing import Optional

import httpx
from bs4 import BeautifulSoup
from pydantic import BaseModel

from ..config import settings
from ..log import get_logger
from ..schemas import HarvestSnapshot
from ..services.normalize import normalize_location_type, strip_html
from ..services.whitelist import is_job_whitelisted
from .base import Provider, RawJob, parse_date

logger = get_logger(__name__)

ALGOLIA_ENDPOINT = "https://hn.algolia.com/api/v1/search_by_date"
HN_ITEM_URL = "https://news.ycombinator.com/item?id={id}"
HITS_PER_PAGE = 100
MAX_PAGES = 5

_HIRING_RE = re.compile(
    r"^(?P<company>.+?)\s+(?:is|are)\s+hiring\b[\s:,-]*(?:an?\s+)?(?P<role>.*)$", re.I
)
_YC_RE = re.compile(r"\s*\((?:YC|Y Combinator)\b[^)]*\)", re.I)
_PAREN_RE = re.compile(r"\(([^()]*)\)")
_TITLE_SPLIT_RE = re.compile(r"\s+[|\-–—:]\s+")


class HNJobHit(BaseModel):
    objectID: str
    title: Optional[str] = None
    url: Optional[str] = None
    created_at: Optional[str] = None
    story_text: Optional[str] = None

    def parse_title(self) -> tuple[Optional[str], str, str]:
        """Returns (company or None, role, location hint)."""
        title = (self.title or "").strip()
        places = [p.strip() for p in _PAREN_RE.findall(_YC_RE.sub("", title)) if p.strip()]

        company: Optional[str] = None
        role = title
        m = _HIRING_RE.match(title)
        if m:
            company = _PAREN_RE.sub("", _YC_RE.sub("", m.group("company"))).strip() or None
            role = m.group("role").strip() or title
        role = _PAREN_RE.sub("", _YC_RE.sub("", role)).strip(" -,") or title

        # parentheticals also carry funding stages, team names etc.
        location = next((p for p in places if normalize_location_type(p) is not None), None)
        if location is None:
            if "remote" in title.lower():
                location = "Remote"
            elif places:
                location = ", ".join(places)
            else:
                location = "on-site"
        return company, role, location

    def needs_lookup(self, harvest: HarvestSnapshot) -> bool:
        """Whether a detail-page GET is worth spending on this post.

        Only posts with an external page and no company in the title qualify,
        and only if they would survive the location and whitelist checks.
        """
        if not self.url:
            return False
        company, role, location = self.parse_title()
        if company is not None or normalize_location_type(location) is None:
            return False
        return is_job_whitelisted(role, harvest)

    def post_url(self) -> str:
        return self.url or HN_ITEM_URL.format(id=self.objectID)

    def to_raw_job(self, company: Optional[str] = None) -> RawJob:
        parsed_company, role, location = self.parse_title()
        return RawJob(
            external_id=self.objectID,
            title=role,
            company=parsed_company or company,
            location=location,
            url=self.post_url(),
            posted_date=parse_date(self.created_at),
            description=strip_html(self.story_text) or None,
        )


def company_from_page(html: str) -> Optional[str]:
    soup = BeautifulSoup(html, "html.parser")
    for attrs in ({"property": "og:site_name"}, {"name": "application-name"}):
        meta = soup.find("meta", attrs=attrs)
        content = (meta.get("content") or "").strip() if meta else ""
        if content:
            return content
    if soup.title and soup.title.string:
        parts = _TITLE_SPLIT_RE.split(soup.title.string.strip())
        name = parts[-1].strip() if len(parts) > 1 else parts[0].strip()
        return name or None
    return None


class HackerNewsProvider(Provider):
    name = "HackerNews"
    # bounded by MAX_PAGES and the lookup limit instead of the usual 100 cap
    record_limit = None

    def __init__(
        self,
        *,
        lookup_limit: int | None = None,
        lookup_batch_size: int | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.lookup_limit = lookup_limit if lookup_limit is not None else settings.DETAIL_LOOKUP_LIMIT
        self.lookup_batch_size = max(1, lookup_batch_size or settings.DETAIL_BATCH_SIZE)

    async def _list_hits(self, client: httpx.AsyncClient) -> list[HNJobHit]:
        hits: list[HNJobHit] = []
        for page in range(MAX_PAGES):
            if page:
                await self.pause()
            data = await self._get_json(
                client,
                ALGOLIA_ENDPOINT,
                params={"tags": "job", "hitsPerPage": HITS_PER_PAGE, "page": page},
            )
            batch = data.get("hits") or []
            hits.extend(HNJobHit.model_validate(h) for h in batch if h.get("objectID"))
            if not batch or page + 1 >= int(data.get("nbPages") or 0):
                break
        return hits

    async def _lookup_company(self, client: httpx.AsyncClient, url: str) -> Optional[str]:
        html = await self._get_text(client, url)
        return company_from_page(html)

    async def _resolve_companies(
        self, client: httpx.AsyncClient, hits: list[HNJobHit], harvest: HarvestSnapshot
    ) -> dict[str, str]:
        pending = [h for h in hits if h.needs_lookup(harvest)]
        if len(pending) > self.lookup_limit:
            logger.info("HackerNews: %d posts need a company lookup, capping at %d", len(pending), self.lookup_limit)
            pending = pending[: self.lookup_limit]

        resolved: dict[str, str] = {}
        size = self.lookup_batch_size
        for i in range(0, len(pending), size):
            if i:
                await self.pause()
            batch = pending[i : i + size]
            results = await asyncio.gather(
                *(self._lookup_company(client, h.url) for h in batch),
                return_exceptions=True,
            )
            for hit, res in zip(batch, results):
                if isinstance(res, Exception):
                    logger.debug("HackerNews: company lookup failed for %s: %s", hit.url, res)
                elif res:
                    resolved[hit.objectID] = res
        return resolved

    async def fetch_raw(self, client: httpx.AsyncClient, harvest: HarvestSnapshot) -> list[RawJob]:
        hits = await self._list_hits(client)
        companies = await self._resolve_companies(client, hits, harvest)
        return [h.to_raw_job(companies.get(h.objectID)) for h in hits]
