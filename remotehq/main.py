# remotehq/main.py
from __future__ import annotations

import asyncio
from pathlib import Path

from fastapi import FastAPI, Depends, Query, HTTPException
from sqlalchemy.engine.url import make_url

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .config import settings
from .db import engine, init_db
from .log import get_logger, get_sink
from .schemas import (
    FetchSummary,
    HarvestingSettingsOut,
    JobOut,
    JobsPage,
    JobStatusUpdate,
    SettingsUpdate,
    SortKey,
    StatsOut,
)
from .services.ingest import fetch_all_jobs
from .services.storage import JobStore

logger = get_logger(__name__)

app = FastAPI(title="RemoteHQ Jobs")

_store = JobStore()
_fetch_lock = asyncio.Lock()


def get_store() -> JobStore:
    return _store


@app.on_event("startup")
async def on_start():
    try:
        url = make_url(str(engine.url))
        if url.get_backend_name() == "sqlite" and url.database:
            db_path = Path(url.database).resolve()
            logger.info("Using SQLite at: %s (exists=%s)", db_path, db_path.exists())
    except Exception as e:
        logger.warning("failed to resolve db path: %s", e)

    init_db()

    if settings.FETCH_ON_STARTUP:
        try:
            await cron_fetch()
        except Exception as e:
            logger.exception("startup fetch failed: %s", e)

    sched = AsyncIOScheduler()
    sched.add_job(cron_fetch, "interval", hours=settings.FETCH_INTERVAL_HOURS, id="fetch_all_jobs")
    sched.start()


async def cron_fetch() -> FetchSummary:
    # one pass at a time; a manual trigger during a scheduled pass waits for it
    async with _fetch_lock:
        summary = await fetch_all_jobs(get_store())
    logger.info("scheduled fetch added: %d", summary.total_added)
    return summary


@app.get("/api/jobs", response_model=JobsPage)
def api_jobs(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    search: str | None = Query(None, description="title/company/tag substring"),
    level: str | None = Query(None),
    companies: str | None = Query(None, description="comma separated company names"),
    sort: SortKey = Query("recent"),
    store: JobStore = Depends(get_store),
):
    company_list = [c for c in (companies or "").split(",") if c] or None
    rows, total = store.get_jobs(
        page=page, limit=limit, search=search, level=level, companies=company_list, sort=sort
    )
    return JobsPage(
        jobs=[JobOut.model_validate(x) for x in rows],
        total=total,
        page=page,
        total_pages=JobStore.total_pages(total, limit),
    )


@app.patch("/api/jobs/{job_id}/status", response_model=JobOut)
def api_job_status(job_id: int, payload: JobStatusUpdate, store: JobStore = Depends(get_store)):
    job = store.update_job_status(job_id, payload.status)
    if job is None:
        raise HTTPException(404, "job not found")
    return JobOut.model_validate(job)


@app.get("/api/companies", response_model=list[str])
def api_companies(store: JobStore = Depends(get_store)):
    return store.get_companies()


@app.get("/api/stats", response_model=StatsOut)
def api_stats(store: JobStore = Depends(get_store)):
    return store.get_stats()


@app.post("/api/jobs/fetch", response_model=FetchSummary)
async def api_fetch(store: JobStore = Depends(get_store)):
    async with _fetch_lock:
        return await fetch_all_jobs(store)


@app.get("/api/settings", response_model=HarvestingSettingsOut)
def api_get_settings(store: JobStore = Depends(get_store)):
    return HarvestingSettingsOut.model_validate(store.get_settings())


@app.patch("/api/settings", response_model=HarvestingSettingsOut)
def api_update_settings(payload: SettingsUpdate, store: JobStore = Depends(get_store)):
    return HarvestingSettingsOut.model_validate(store.update_settings(None, payload))


@app.get("/api/logs", response_model=list[str])
def api_logs():
    sink = get_sink()
    return sink.lines() if hasattr(sink, "lines") else []
