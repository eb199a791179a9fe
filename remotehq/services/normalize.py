"""Field normalizers.

Pure, deterministic helpers that turn the loosely typed fields upstream boards
return (location strings, seniority labels, free-text tech mentions) into the
canonical values stored on a ``JobRecord``. Nothing here does I/O.
"""
from __future__ import annotations

import base64
import json
import re
from typing import Any, Iterable, List, Optional

from bs4 import BeautifulSoup

MAX_TECH_TAGS = 6
DESCRIPTION_LIMIT = 500

# Checked in order; the first substring hit wins.
_LOCATION_RULES: list[tuple[tuple[str, ...], str]] = [
    (("anywhere",), "Anywhere"),
    (("worldwide", "world"), "Worldwide"),
    (("global",), "Global"),
    (("apac", "asia"), "Remote (APAC)"),
    (("remote",), "Remote"),
]

_TITLE_LEVELS: list[tuple[tuple[str, ...], str]] = [
    (("principal",), "Principal"),
    (("staff",), "Staff"),
    (("lead",), "Lead"),
    (("senior", "sr.", "sr "), "Senior"),
    (("junior", "jr.", "jr "), "Junior"),
    (("mid-level", "mid level", "midweight"), "Mid"),
    (("intern",), "Intern"),
    (("director",), "Director"),
    (("manager",), "Manager"),
]

# Wider set for labels an upstream board supplies itself.
_RAW_LEVELS: list[tuple[tuple[str, ...], str]] = [
    (("principal",), "Principal"),
    (("staff",), "Staff"),
    (("lead",), "Lead"),
    (("senior", "sr"), "Senior"),
    (("mid", "midweight"), "Mid"),
    (("junior", "jr", "entry"), "Junior"),
    (("intern",), "Intern"),
    (("director",), "Director"),
    (("manager",), "Manager"),
    (("executive",), "Executive"),
]

# Order matters: labels are emitted in table order. Padded keys avoid hits
# inside longer words ("go" in "google", "ai" in "maintain").
TECH_KEYWORDS: list[tuple[str, str]] = [
    ("react", "React"),
    ("reactjs", "React"),
    ("react.js", "React"),
    ("angular", "Angular"),
    ("vue", "Vue"),
    ("vuejs", "Vue"),
    ("vue.js", "Vue"),
    ("node", "Node.js"),
    ("nodejs", "Node.js"),
    ("node.js", "Node.js"),
    ("python", "Python"),
    ("django", "Django"),
    ("flask", "Flask"),
    ("java ", "Java"),
    ("javascript", "JavaScript"),
    ("typescript", "TypeScript"),
    ("golang", "Go"),
    (" go ", "Go"),
    ("rust", "Rust"),
    ("ruby", "Ruby"),
    ("rails", "Rails"),
    ("php", "PHP"),
    ("laravel", "Laravel"),
    ("swift", "Swift"),
    ("kotlin", "Kotlin"),
    ("flutter", "Flutter"),
    ("docker", "Docker"),
    ("kubernetes", "Kubernetes"),
    ("k8s", "Kubernetes"),
    ("aws", "AWS"),
    ("azure", "Azure"),
    ("gcp", "GCP"),
    ("terraform", "Terraform"),
    ("graphql", "GraphQL"),
    ("postgresql", "PostgreSQL"),
    ("postgres", "PostgreSQL"),
    ("mongodb", "MongoDB"),
    ("redis", "Redis"),
    ("elasticsearch", "Elasticsearch"),
    ("nextjs", "Next.js"),
    ("next.js", "Next.js"),
    ("svelte", "Svelte"),
    ("c++", "C++"),
    ("c#", "C#"),
    (".net", ".NET"),
    ("scala", "Scala"),
    ("elixir", "Elixir"),
    ("machine learning", "ML"),
    (" ml ", "ML"),
    (" ai ", "AI"),
    ("data science", "Data Science"),
    ("devops", "DevOps"),
    ("ci/cd", "CI/CD"),
    ("linux", "Linux"),
    ("sql", "SQL"),
]

_LEVEL_STRIP_RE = re.compile(r'[{}"\[\]]')


def normalize_location_type(raw: Optional[str]) -> Optional[str]:
    """Map a raw location to the allowed set, or None when the job must be dropped."""
    lower = (raw or "").lower().strip()
    if not lower:
        return "Remote"
    for needles, label in _LOCATION_RULES:
        if any(n in lower for n in needles):
            return label
    return None


def _first_match(text: str, rules: list[tuple[tuple[str, ...], str]]) -> Optional[str]:
    for needles, label in rules:
        if any(n in text for n in needles):
            return label
    return None


def detect_level(title: Optional[str]) -> Optional[str]:
    return _first_match((title or "").lower(), _TITLE_LEVELS)


def normalize_level(raw_level: Any, title: Optional[str]) -> Optional[str]:
    """Canonical level from an upstream label, falling back to the title.

    An upstream label that matches nothing and cannot be inferred from the
    title is kept as-is (minus brackets and quotes) rather than discarded.
    """
    if not raw_level:
        return detect_level(title)

    if isinstance(raw_level, (list, tuple)):
        text = ", ".join(str(x) for x in raw_level)
    elif isinstance(raw_level, dict):
        text = json.dumps(raw_level)
    else:
        text = str(raw_level)

    cleaned = _LEVEL_STRIP_RE.sub("", text).strip()
    if not cleaned:
        return detect_level(title)
    lower = cleaned.lower()

    hit = _first_match(lower, _RAW_LEVELS)
    if hit:
        return hit
    if lower == "any":
        return detect_level(title)
    return detect_level(title) or cleaned


def extract_tech_tags(title: Optional[str], description: Optional[str] = None) -> List[str]:
    text = f"{title or ''} {description or ''}".lower()
    found: List[str] = []
    for keyword, label in TECH_KEYWORDS:
        if keyword in text and label not in found:
            found.append(label)
    return found[:MAX_TECH_TAGS]


def clean_tags(tags: Iterable[Any]) -> List[str]:
    """Deduplicate upstream tag lists (first spelling wins), capped at six."""
    seen: set[str] = set()
    out: List[str] = []
    for t in tags or ():
        s = str(t).strip() if t is not None else ""
        if not s or s.lower() in seen:
            continue
        seen.add(s.lower())
        out.append(s)
        if len(out) >= MAX_TECH_TAGS:
            break
    return out


def strip_html(text: Optional[str]) -> str:
    if not text:
        return ""
    return BeautifulSoup(text, "html.parser").get_text(" ", strip=True)


def truncate(text: Optional[str], limit: int = DESCRIPTION_LIMIT) -> Optional[str]:
    if not text:
        return None
    return text[:limit]


def encode_external_id(tag: str, value: str) -> str:
    """Stable id for sources without one: ``<tag>-`` plus the base64 of ``value``, cut to 40 chars."""
    encoded = base64.b64encode(value.encode("utf-8")).decode("ascii")
    return f"{tag}-{encoded[:40]}"


def format_salary_range(lo: Any, hi: Any) -> Optional[str]:
    """``"$90,000 - $120,000"`` when both bounds are usable numbers."""
    try:
        lo_n, hi_n = float(lo), float(hi)
    except (TypeError, ValueError):
        return None
    if not lo_n or not hi_n:
        return None
    return f"${lo_n:,.0f} - ${hi_n:,.0f}"
