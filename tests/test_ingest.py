import asyncio

import pytest

from remotehq.services import ingest
from remotehq.services.ingest import fetch_all_jobs, reconcile
from remotehq.services.storage import JobStore

from conftest import StubProvider, make_record, raw


def lifecycle(store: JobStore, source: str = "Remotive") -> dict[str, str]:
    return {j.external_id: j.lifecycle_status for j in store.get_jobs_by_source(source)}


def run_pass(store, providers, **kw):
    return asyncio.run(fetch_all_jobs(store, providers, delay=0, **kw))


def test_reconcile_marks_active_and_inactive(store) -> None:
    assert reconcile(store, "Remotive", [make_record(x) for x in "ABC"]) == 3
    assert lifecycle(store) == {"A": "new", "B": "new", "C": "new"}

    assert reconcile(store, "Remotive", [make_record(x) for x in "ACD"]) == 1
    assert lifecycle(store) == {"A": "active", "B": "inactive", "C": "active", "D": "new"}


def test_reconcile_is_scoped_to_source(store) -> None:
    reconcile(store, "Remotive", [make_record("A")])
    reconcile(store, "Jobicy", [make_record("Z", source="Jobicy")])
    reconcile(store, "Remotive", [make_record("A")])
    assert lifecycle(store, "Jobicy") == {"Z": "new"}


def test_reconcile_empty_fetch_marks_all_inactive(store) -> None:
    reconcile(store, "Remotive", [make_record("A"), make_record("B")])
    assert reconcile(store, "Remotive", []) == 0
    assert lifecycle(store) == {"A": "inactive", "B": "inactive"}


def test_fetch_pass_lifecycle_across_passes(store) -> None:
    provider = StubProvider([raw("A"), raw("B"), raw("C")])
    summary = run_pass(store, [provider])
    assert summary.total_added == 3
    assert summary.sources[0].found == 3

    provider.raw_jobs = [raw("A"), raw("C"), raw("D")]
    summary = run_pass(store, [provider])
    assert summary.total_added == 1
    assert lifecycle(store) == {"A": "active", "B": "inactive", "C": "active", "D": "new"}


def test_fetch_pass_is_idempotent(store) -> None:
    provider = StubProvider([raw("A"), raw("B")])
    run_pass(store, [provider])
    summary = run_pass(store, [provider])
    assert summary.total_added == 0
    assert len(store.get_jobs_by_source("Remotive")) == 2
    assert set(lifecycle(store).values()) == {"active"}


def test_fetch_pass_uses_stored_whitelist(store) -> None:
    from remotehq.schemas import SettingsUpdate

    store.update_settings(None, SettingsUpdate(whitelisted_titles=["data scientist"], harvesting_mode="exact"))
    provider = StubProvider([raw("A", title="Data Scientist"), raw("B", title="Senior Data Scientist")])
    summary = run_pass(store, [provider])
    assert summary.total_added == 1
    assert list(lifecycle(store)) == ["A"]


def test_failing_adapter_is_isolated(store) -> None:
    broken = StubProvider([raw("H1"), raw("H2")], name="Himalayas")
    run_pass(store, [broken])

    broken.fail_with = RuntimeError("upstream down")
    ok = StubProvider([raw("A")])
    later = StubProvider([raw("J1")], name="Jobicy")
    summary = run_pass(store, [ok, broken, later])

    assert [s.source for s in summary.sources] == ["Remotive", "Himalayas", "Jobicy"]
    assert summary.sources[1].error == "RuntimeError: upstream down"
    assert summary.sources[1].found == 0
    assert summary.total_added == 2
    assert later.calls == 1
    # a failed source fetched nothing, so none of its jobs are listed
    assert lifecycle(store, "Himalayas") == {"H1": "inactive", "H2": "inactive"}

    newest = next(log for log in store.get_stats().recent_fetches if log.source == "Himalayas")
    assert newest.success is False
    assert newest.error == "RuntimeError: upstream down"


class FlakyStore(JobStore):
    def __init__(self, session_factory, fail_source):
        super().__init__(session_factory)
        self.fail_source = fail_source

    def insert_jobs(self, records):
        if any(r.source == self.fail_source for r in records):
            raise RuntimeError("db write failed")
        return super().insert_jobs(records)


def test_store_failure_is_logged_and_pass_continues(store) -> None:
    flaky = FlakyStore(store._session_factory, "Himalayas")
    providers = [
        StubProvider([raw("A")]),
        StubProvider([raw("H1")], name="Himalayas"),
        StubProvider([raw("J1")], name="Jobicy"),
    ]
    summary = run_pass(flaky, providers)

    assert [s.error for s in summary.sources] == [None, "db write failed", None]
    assert summary.total_added == 2

    failed = [log for log in flaky.get_stats().recent_fetches if not log.success]
    assert [(log.source, log.error) for log in failed] == [("Himalayas", "db write failed")]


class NoLogStore(JobStore):
    def insert_fetch_log(self, entry):
        raise RuntimeError("fetch_logs unavailable")


def test_failed_log_write_propagates(store) -> None:
    broken = NoLogStore(store._session_factory)
    with pytest.raises(RuntimeError, match="fetch_logs unavailable"):
        run_pass(broken, [StubProvider([raw("A")])])


def test_successful_pass_writes_one_log_per_source(store) -> None:
    providers = [StubProvider([raw("A")]), StubProvider([], name="Jobicy")]
    run_pass(store, providers)
    logs = store.get_stats().recent_fetches
    assert sorted((log.source, log.jobs_found, log.jobs_added, log.success) for log in logs) == [
        ("Jobicy", 0, 0, True),
        ("Remotive", 1, 1, True),
    ]


def test_delay_between_sources(store, monkeypatch) -> None:
    slept = []

    async def fake_sleep(seconds):
        slept.append(seconds)

    monkeypatch.setattr(ingest.asyncio, "sleep", fake_sleep)
    providers = [StubProvider([]), StubProvider([], name="Jobicy"), StubProvider([], name="RemoteOK")]
    asyncio.run(fetch_all_jobs(store, providers, delay=0.25))
    assert slept == [0.25, 0.25]

    slept.clear()
    asyncio.run(fetch_all_jobs(store, providers, delay=0))
    assert slept == []


def test_failed_source_recovers_on_next_pass(store) -> None:
    provider = StubProvider([raw("A"), raw("B")])
    run_pass(store, [provider])

    provider.fail_with = RuntimeError("timeout")
    summary = run_pass(store, [provider])
    assert summary.sources[0].error == "RuntimeError: timeout"
    assert lifecycle(store) == {"A": "inactive", "B": "inactive"}

    provider.fail_with = None
    summary = run_pass(store, [provider])
    assert summary.total_added == 0
    assert lifecycle(store) == {"A": "active", "B": "active"}
