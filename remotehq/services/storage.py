from __future__ import annotations

from math import ceil
from typing import Iterable, Optional, Sequence

from sqlalchemy import String, cast, func, or_
from sqlalchemy.orm import Session, sessionmaker

from ..config import settings
from ..db import SessionLocal
from ..models import FetchLog, HarvestingSettings, Job
from ..schemas import (
    LOCATION_TYPES,
    CountBy,
    FetchLogEntry,
    FetchLogOut,
    JobRecord,
    SettingsUpdate,
    StatsOut,
)
from .sorting import sort_jobs

CHUNK = 500


def _commit(db: Session) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def _unique_by_key(records: Iterable[JobRecord]) -> list[JobRecord]:
    seen: set[tuple[str, str]] = set()
    out: list[JobRecord] = []
    for r in records:
        key = (r.external_id, r.source)
        if key in seen:
            continue
        seen.add(key)
        out.append(r)
    return out


class JobStore:
    """SQLAlchemy-backed job store.

    Each call opens and closes its own session, so returned ORM objects are
    detached (``expire_on_commit=False``) and safe to read after the call.
    """

    def __init__(self, session_factory: sessionmaker | None = None) -> None:
        self._session_factory = session_factory or SessionLocal

    def session(self) -> Session:
        db = self._session_factory()
        db.expire_on_commit = False
        return db

    # -- ingestion side -------------------------------------------------

    def get_jobs_by_source(self, source: str) -> list[Job]:
        with self.session() as db:
            return db.query(Job).filter(Job.source == source).order_by(Job.id).all()

    def insert_jobs(self, records: Sequence[JobRecord]) -> int:
        """Insert records whose (external_id, source) is not stored yet; returns the count added."""
        if not records:
            return 0
        items = _unique_by_key(records)

        with self.session() as db:
            existing: set[tuple[str, str]] = set()
            for i in range(0, len(items), CHUNK):
                chunk = items[i : i + CHUNK]
                q = db.query(Job.external_id, Job.source).filter(
                    Job.source.in_({c.source for c in chunk}),
                    Job.external_id.in_([c.external_id for c in chunk]),
                )
                existing.update((eid, src) for eid, src in q.all())

            added = 0
            for r in items:
                if (r.external_id, r.source) in existing:
                    continue
                db.add(Job(**r.model_dump(), lifecycle_status="new"))
                added += 1
            _commit(db)
        return added

    def update_jobs_lifecycle_status_bulk(self, ids: Sequence[int], status: str) -> None:
        if not ids:
            return
        with self.session() as db:
            for i in range(0, len(ids), CHUNK):
                db.query(Job).filter(Job.id.in_(list(ids[i : i + CHUNK]))).update(
                    {Job.lifecycle_status: status}, synchronize_session=False
                )
            _commit(db)

    def insert_fetch_log(self, entry: FetchLogEntry) -> FetchLog:
        with self.session() as db:
            row = FetchLog(**entry.model_dump())
            db.add(row)
            _commit(db)
            db.refresh(row)
            return row

    # -- settings -------------------------------------------------------

    def get_settings(self, user_id: Optional[str] = None) -> HarvestingSettings:
        with self.session() as db:
            row = self._settings_row(db, user_id)
            return row

    def _settings_row(self, db: Session, user_id: Optional[str]) -> HarvestingSettings:
        q = db.query(HarvestingSettings)
        q = q.filter(HarvestingSettings.user_id.is_(None)) if user_id is None else q.filter(HarvestingSettings.user_id == user_id)
        row = q.first()
        if row is None:
            row = HarvestingSettings(
                user_id=user_id,
                whitelisted_titles=list(settings.DEFAULT_WHITELIST),
                harvesting_mode=settings.DEFAULT_HARVESTING_MODE,
            )
            db.add(row)
            _commit(db)
            db.refresh(row)
        return row

    def update_settings(self, user_id: Optional[str], update: SettingsUpdate) -> HarvestingSettings:
        with self.session() as db:
            row = self._settings_row(db, user_id)
            if update.whitelisted_titles is not None:
                row.whitelisted_titles = list(update.whitelisted_titles)
            if update.harvesting_mode is not None:
                row.harvesting_mode = update.harvesting_mode
            row.updated_at = func.now()
            _commit(db)
            db.refresh(row)
            return row

    # -- query side -----------------------------------------------------

    def update_job_status(self, job_id: int, status: Optional[str]) -> Optional[Job]:
        with self.session() as db:
            job = db.get(Job, job_id)
            if job is None:
                return None
            job.status = status
            _commit(db)
            db.refresh(job)
            return job

    def get_jobs(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        search: Optional[str] = None,
        level: Optional[str] = None,
        companies: Optional[Sequence[str]] = None,
        sort: str = "recent",
    ) -> tuple[list[Job], int]:
        with self.session() as db:
            q = db.query(Job).filter(Job.location_type.in_(LOCATION_TYPES))
            if search:
                kw = f"%{search.strip()}%"
                q = q.filter(
                    or_(
                        Job.title.ilike(kw),
                        Job.company.ilike(kw),
                        cast(Job.tech_tags, String).ilike(kw),
                    )
                )
            if level:
                q = q.filter(Job.level.ilike(f"%{level.strip()}%"))
            if companies:
                q = q.filter(Job.company.in_(list(companies)))

            total = q.count()
            offset = (page - 1) * limit
            if sort == "recent":
                rows = (
                    q.order_by(Job.posted_date.is_(None), Job.posted_date.desc(), Job.created_at.desc())
                    .offset(offset)
                    .limit(limit)
                    .all()
                )
            else:
                # salary and level ordering are derived from free text, so they sort in Python
                rows = sort_jobs(q.all(), sort)[offset : offset + limit]
        return rows, total

    @staticmethod
    def total_pages(total: int, limit: int) -> int:
        return ceil(total / limit) if limit else 0

    def get_companies(self) -> list[str]:
        with self.session() as db:
            rows = (
                db.query(Job.company)
                .filter(Job.company != "Unknown")
                .distinct()
                .order_by(Job.company)
                .all()
            )
        return [c for (c,) in rows]

    def get_stats(self) -> StatsOut:
        with self.session() as db:
            def grouped(column, label=None) -> list[CountBy]:
                expr = func.coalesce(column, label) if label else column
                rows = (
                    db.query(expr, func.count(Job.id))
                    .group_by(expr)
                    .order_by(func.count(Job.id).desc())
                    .all()
                )
                return [CountBy(key=str(k), count=n) for k, n in rows]

            top = (
                db.query(Job.company, func.count(Job.id))
                .filter(Job.company != "Unknown")
                .group_by(Job.company)
                .order_by(func.count(Job.id).desc())
                .limit(20)
                .all()
            )
            recent = db.query(FetchLog).order_by(FetchLog.fetched_at.desc(), FetchLog.id.desc()).limit(10).all()
            return StatsOut(
                total_jobs=db.query(func.count(Job.id)).scalar() or 0,
                total_companies=db.query(func.count(func.distinct(Job.company))).scalar() or 0,
                total_sources=db.query(func.count(func.distinct(Job.source))).scalar() or 0,
                by_level=grouped(Job.level, "Unspecified"),
                by_source=grouped(Job.source),
                by_location_type=grouped(Job.location_type),
                by_lifecycle_status=grouped(Job.lifecycle_status),
                top_companies=[CountBy(key=c, count=n) for c, n in top],
                recent_fetches=[FetchLogOut.model_validate(r) for r in recent],
            )
