from __future__ import annotations

import asyncio
from typing import Optional, Protocol, Sequence

from ..config import settings
from ..log import get_logger
from ..models import FetchLog, HarvestingSettings, Job
from ..providers import FetchOutcome, Provider, default_providers
from ..schemas import FetchLogEntry, FetchSummary, HarvestSnapshot, JobRecord, SourceResult

logger = get_logger(__name__)


class Store(Protocol):
    def get_jobs_by_source(self, source: str) -> list[Job]: ...
    def insert_jobs(self, records: Sequence[JobRecord]) -> int: ...
    def update_jobs_lifecycle_status_bulk(self, ids: Sequence[int], status: str) -> None: ...
    def insert_fetch_log(self, entry: FetchLogEntry) -> FetchLog: ...
    def get_settings(self, user_id: Optional[str] = None) -> HarvestingSettings: ...


def snapshot(row: HarvestingSettings) -> HarvestSnapshot:
    return HarvestSnapshot(
        whitelisted_titles=tuple(row.whitelisted_titles or ()),
        harvesting_mode=row.harvesting_mode,
    )


def reconcile(store: Store, source: str, records: Sequence[JobRecord]) -> int:
    """Store new records for ``source`` and refresh the lifecycle of known ones.

    Known jobs present in ``records`` become "active", known jobs missing from
    it become "inactive"; rows inserted now keep the "new" default. Returns the
    number of rows added.
    """
    existing = store.get_jobs_by_source(source)
    added = store.insert_jobs(records)

    fetched_ids = {r.external_id for r in records}
    active = [j.id for j in existing if j.external_id in fetched_ids]
    inactive = [j.id for j in existing if j.external_id not in fetched_ids]
    store.update_jobs_lifecycle_status_bulk(active, "active")
    store.update_jobs_lifecycle_status_bulk(inactive, "inactive")
    if inactive:
        logger.info("%s: %d jobs no longer listed upstream", source, len(inactive))
    return added


async def fetch_all_jobs(
    store: Store,
    providers: Optional[Sequence[Provider]] = None,
    *,
    user_id: Optional[str] = None,
    delay: Optional[float] = None,
) -> FetchSummary:
    """One fetch pass over every source, in order, with a pause between sources."""
    harvest = snapshot(store.get_settings(user_id))
    providers = list(providers) if providers is not None else default_providers()
    delay = settings.SOURCE_DELAY_SECONDS if delay is None else delay

    results: list[SourceResult] = []
    total_added = 0

    for i, provider in enumerate(providers):
        if i and delay > 0:
            await asyncio.sleep(delay)
        name = provider.name
        try:
            logger.info("Fetching from %s...", name)
            outcome: FetchOutcome = await provider.run(harvest)
            found = len(outcome.records)
            added = reconcile(store, name, outcome.records)
            store.insert_fetch_log(FetchLogEntry(
                source=name,
                jobs_found=found,
                jobs_added=added,
                success=outcome.error is None,
                error=outcome.error,
            ))
            total_added += added
            results.append(SourceResult(source=name, found=found, added=added, error=outcome.error))
            logger.info("%s: found %d, added %d new, rejected %d", name, found, added, len(outcome.rejected))
        except Exception as e:
            logger.exception("%s error: %s", name, e)
            results.append(SourceResult(source=name, found=0, added=0, error=str(e)))
            store.insert_fetch_log(FetchLogEntry(
                source=name,
                jobs_found=0,
                jobs_added=0,
                success=False,
                error=str(e),
            ))

    logger.info("fetch pass done: %d new jobs", total_added)
    return FetchSummary(total_added=total_added, sources=results)
