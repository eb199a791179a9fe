from __future__ import annotations

import re
from functools import lru_cache

from ..schemas import HarvestSnapshot


@lru_cache(maxsize=512)
def _phrase_regex(phrase: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(phrase)}\b", re.IGNORECASE)


def is_job_whitelisted(title: str | None, harvest: HarvestSnapshot) -> bool:
    """Whether ``title`` passes the user's title whitelist.

    exact: the trimmed, lower-cased title equals a whitelist entry.
    fuzzy: some entry occurs in the title between word boundaries; the words
    of a multi-word entry must appear contiguously ("staff engineer" does not
    match "Staff Software Engineer").
    An empty whitelist matches nothing in either mode.
    """
    phrases = [p.strip().lower() for p in harvest.whitelisted_titles if p and p.strip()]
    if not phrases or not title:
        return False

    if harvest.harvesting_mode == "exact":
        t = title.strip().lower()
        return any(t == p for p in phrases)

    return any(_phrase_regex(p).search(title) for p in phrases)
