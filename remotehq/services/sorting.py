from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Iterable, List, Optional

_NUM = r"(\d[\d,]*(?:\.\d+)?)\s*(k)?"
_SALARY_RANGE_RE = re.compile(rf"\$?\s*{_NUM}\s*(?:-|–|—|to)\s*\$?\s*{_NUM}", re.I)
_SALARY_ONE_RE = re.compile(rf"\$\s*{_NUM}", re.I)

_LEVEL_RANKS: list[tuple[tuple[str, ...], int]] = [
    (("principal",), 1),
    (("lead",), 2),
    (("staff",), 3),
    (("senior", "sr"), 4),
    (("mid",), 5),
    (("junior", "jr"), 6),
    (("intern",), 7),
]
UNRANKED_LEVEL = 8


def _amount(num: str, k: Optional[str]) -> float:
    value = float(num.replace(",", ""))
    return value * 1000 if k else value


def extract_max_salary(salary: Optional[str]) -> Optional[int]:
    """Upper bound of a salary string like "$100k-$150k" or "$90,000 - $120,000"."""
    if not salary:
        return None
    m = _SALARY_RANGE_RE.search(salary)
    if m:
        return int(max(_amount(m.group(1), m.group(2)), _amount(m.group(3), m.group(4))))
    m = _SALARY_ONE_RE.search(salary)
    if m:
        return int(_amount(m.group(1), m.group(2)))
    return None


def level_rank(level: Optional[str]) -> int:
    if not level:
        return UNRANKED_LEVEL
    lower = level.lower()
    for needles, rank in _LEVEL_RANKS:
        if any(n in lower for n in needles):
            return rank
    return UNRANKED_LEVEL


def _ts(value: Optional[datetime]) -> float:
    return value.timestamp() if value is not None else 0.0


def sort_jobs(jobs: Iterable[Any], key: str = "recent") -> List[Any]:
    """Order jobs for the listing; every key is a stable sort."""
    items = list(jobs)
    if key == "pay":
        def pay_key(j):
            pay = extract_max_salary(j.salary)
            return (pay is None, -(pay or 0))
        return sorted(items, key=pay_key)
    if key == "level":
        return sorted(items, key=lambda j: level_rank(j.level))
    if key in ("applied", "ignored"):
        return sorted(items, key=lambda j: 0 if j.status == key else 1)
    if key == "recent":
        return sorted(
            items,
            key=lambda j: (j.posted_date is None, -_ts(j.posted_date), -_ts(getattr(j, "created_at", None))),
        )
    raise ValueError(f"unknown sort key: {key!r}")
