"""
Unit tests for econ_ingest/core/scheduler_service.py

Tests cover job registration, skip-if-running overlap handling, bounded
retry with linear backoff, the hard per-run timeout, and status output.

The orchestrator is mocked; retry delays go through an injected sleep.
All tests are fully offline (no DB, no network).
"""
import asyncio

import pytest
from unittest.mock import AsyncMock, MagicMock

from econ_ingest.core.scheduler_service import (
    DEFAULT_SYNC_SCHEDULES,
    FULL_SYNC_JOB_ID,
    SyncJob,
    SyncJobResult,
    SyncJobState,
    SyncScheduler,
    job_id_for,
)
from econ_ingest.core.sync_orchestrator import SyncOrchestrator, SyncResult
from econ_ingest.sources.factory import ADAPTER_CLASSES, AdapterFactory


def _ok(name="Unemployment Rate", source="FRED"):
    return SyncResult(indicator=name, source=source, success=True, data_points=3)


def _failed(name="Housing Starts", source="FRED", error_type="UpstreamError"):
    return SyncResult(
        indicator=name, source=source, success=False, error="Server error: 502", error_type=error_type
    )


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def orchestrator():
    mock = MagicMock(spec=SyncOrchestrator)
    mock.sync_batch = AsyncMock(return_value=[_ok()])
    mock.get_last_sync_status = MagicMock(return_value=[{"name": "Unemployment Rate"}])
    mock.fetch_and_store_indicator_data = AsyncMock(return_value=_ok())
    return mock


@pytest.fixture
def factory():
    mock = MagicMock(spec=AdapterFactory)
    mock.adapter_classes = dict(ADAPTER_CLASSES)
    mock.is_available.side_effect = lambda source: source != "RAPIDAPI"
    return mock


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def scheduler(orchestrator, factory, sleep):
    instance = SyncScheduler(orchestrator, factory, sleep=sleep, retry_delay_seconds=30)
    yield instance
    instance.stop()


def _scheduled_job(scheduler, source="FRED"):
    job = SyncJob(id=job_id_for(source), source=source, schedule=DEFAULT_SYNC_SCHEDULES[source])
    scheduler.jobs[job.id] = job
    return job


class Gate:
    """Blocks sync_batch until released."""

    def __init__(self):
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def run(self, source=None, force=True, **kwargs):
        self.entered.set()
        await self.release.wait()
        return [_ok(source=source)]


# =============================================================================
# Job ids and records
# =============================================================================


class TestJobIds:

    def test_source_job_ids(self):
        assert job_id_for("FRED") == "fred-sync"
        assert job_id_for("ALPHA_VANTAGE") == "alpha-vantage-sync"
        assert job_id_for(None) == FULL_SYNC_JOB_ID

    def test_job_to_dict(self):
        job = SyncJob(id="fred-sync", source="FRED", schedule="0 6 * * *")
        data = job.to_dict()
        assert data["state"] == "idle"
        assert data["last_result"] is None
        assert data["last_run"] is None
        assert data["skipped_runs"] == 0

    def test_every_source_has_a_schedule(self):
        assert set(DEFAULT_SYNC_SCHEDULES) == set(ADAPTER_CLASSES)


# =============================================================================
# Lifecycle
# =============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
class TestLifecycle:

    async def test_start_registers_available_sources_and_full_sync(self, scheduler):
        scheduler.start()

        assert scheduler.is_running
        assert FULL_SYNC_JOB_ID in scheduler.jobs
        assert "fred-sync" in scheduler.jobs
        assert "rapidapi-sync" not in scheduler.jobs
        assert len(scheduler.jobs) == len(DEFAULT_SYNC_SCHEDULES)
        assert all(job.next_run is not None for job in scheduler.jobs.values())
        scheduler.stop()

    async def test_start_twice_is_a_noop(self, scheduler):
        scheduler.start()
        first = scheduler._scheduler

        scheduler.start()

        assert scheduler._scheduler is first
        scheduler.stop()

    async def test_stop_clears_jobs(self, scheduler):
        scheduler.start()

        scheduler.stop()

        assert not scheduler.is_running
        assert scheduler.jobs == {}
        assert scheduler.get_status()["enabled"] is False

    async def test_stop_before_start(self, scheduler):
        scheduler.stop()
        assert not scheduler.is_running

    async def test_custom_schedules(self, orchestrator):
        scheduler = SyncScheduler(
            orchestrator, schedules={"ECB": "*/5 * * * *"}, full_sync_schedule="0 1 * * *"
        )
        scheduler.start()
        try:
            assert set(scheduler.jobs) == {"ecb-sync", FULL_SYNC_JOB_ID}
            assert scheduler.jobs["ecb-sync"].schedule == "*/5 * * * *"
        finally:
            scheduler.stop()


# =============================================================================
# Scheduled runs and retry
# =============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
class TestScheduledRuns:

    async def test_scheduled_run_respects_freshness(self, scheduler, orchestrator):
        job = _scheduled_job(scheduler)

        await scheduler._run_scheduled(job.id)

        orchestrator.sync_batch.assert_awaited_once_with(source="FRED", force=False)
        assert job.state is SyncJobState.SUCCESS
        assert job.last_result is SyncJobResult.SUCCESS
        assert job.run_count == 1
        assert job.last_summary == {"total": 1, "succeeded": 1, "failed": 0, "critical": 0, "skipped": 0}

    async def test_rate_limited_and_unconfigured_indicators_do_not_fail_the_job(self, scheduler, orchestrator):
        orchestrator.sync_batch.return_value = [
            _ok(),
            _failed(error_type="RateLimitError"),
            _failed(name="EUR/USD Exchange Rate", source="ECB", error_type="ConfigNotFoundError"),
        ]
        job = _scheduled_job(scheduler)

        await scheduler._run_scheduled(job.id)

        assert job.last_result is SyncJobResult.SUCCESS
        assert job.last_summary["failed"] == 2
        assert job.last_summary["critical"] == 0
        assert orchestrator.sync_batch.await_count == 1

    async def test_failed_indicators_fail_and_retry_the_job(self, scheduler, orchestrator, sleep):
        orchestrator.sync_batch.return_value = [
            _failed(name="Unemployment Rate"),
            _failed(name="Housing Starts", error_type=None),
        ]
        job = _scheduled_job(scheduler)

        await scheduler._run_scheduled(job.id)

        assert orchestrator.sync_batch.await_count == 1 + scheduler.max_retries
        assert sleep.delays == [30, 60, 90]
        assert job.state is SyncJobState.IDLE
        assert job.last_result is SyncJobResult.FAILED
        assert job.last_summary["critical"] == 2
        assert job.error.startswith("2 of 2 indicators failed: Unemployment Rate: Server error: 502")

    async def test_partial_failure_recovers_on_retry(self, scheduler, orchestrator, sleep):
        orchestrator.sync_batch.side_effect = [[_ok(), _failed()], [_ok(), _ok(name="Housing Starts")]]
        job = _scheduled_job(scheduler)

        await scheduler._run_scheduled(job.id)

        assert sleep.delays == [30]
        assert job.state is SyncJobState.SUCCESS
        assert job.error is None
        assert [r["status"] for r in scheduler.results] == ["failed", "success"]

    async def test_stop_during_retry_wait_ends_the_chain(self, scheduler, orchestrator):
        orchestrator.sync_batch.side_effect = RuntimeError("database is locked")
        job = _scheduled_job(scheduler)

        async def stop_while_waiting(seconds):
            scheduler.jobs.clear()

        scheduler._sleep = stop_while_waiting

        await scheduler._run_scheduled(job.id)

        assert orchestrator.sync_batch.await_count == 1
        assert job.state is SyncJobState.IDLE
        assert job.last_result is SyncJobResult.FAILED
        assert scheduler._running == {}

    async def test_failure_retried_with_linear_backoff(self, scheduler, orchestrator, sleep):
        orchestrator.sync_batch.side_effect = [
            RuntimeError("database is locked"),
            RuntimeError("database is locked"),
            [_ok()],
        ]
        job = _scheduled_job(scheduler)

        await scheduler._run_scheduled(job.id)

        assert orchestrator.sync_batch.await_count == 3
        assert sleep.delays == [30, 60]
        assert job.state is SyncJobState.SUCCESS
        assert job.retry_attempt == 2
        assert job.error is None

    async def test_retries_are_bounded(self, scheduler, orchestrator, sleep):
        orchestrator.sync_batch.side_effect = RuntimeError("database is locked")
        job = _scheduled_job(scheduler)

        await scheduler._run_scheduled(job.id)

        assert orchestrator.sync_batch.await_count == 1 + scheduler.max_retries
        assert sleep.delays == [30, 60, 90]
        assert job.state is SyncJobState.IDLE
        assert job.last_result is SyncJobResult.FAILED
        assert job.error == "database is locked"
        assert [r["attempt"] for r in scheduler.results] == [0, 1, 2, 3]

    async def test_zero_retries(self, orchestrator, sleep):
        orchestrator.sync_batch.side_effect = RuntimeError("boom")
        scheduler = SyncScheduler(orchestrator, max_retries=0, sleep=sleep)
        job = _scheduled_job(scheduler)

        await scheduler._run_scheduled(job.id)

        assert orchestrator.sync_batch.await_count == 1
        assert sleep.delays == []

    async def test_timeout_cancels_run(self, orchestrator, sleep):
        async def hang(**kwargs):
            await asyncio.sleep(10)

        orchestrator.sync_batch.side_effect = hang
        scheduler = SyncScheduler(orchestrator, job_timeout_seconds=0.05, max_retries=0, sleep=sleep)
        job = _scheduled_job(scheduler)

        await scheduler._run_scheduled(job.id)

        assert job.last_result is SyncJobResult.FAILED
        assert job.error == "TimeoutError: job fred-sync exceeded 0.05s and was cancelled"
        assert scheduler._running == {}

    async def test_error_is_redacted(self, scheduler, orchestrator):
        orchestrator.sync_batch.side_effect = RuntimeError("GET /obs?api_key=hunter22secret failed")
        scheduler.max_retries = 0
        job = _scheduled_job(scheduler)

        await scheduler._run_scheduled(job.id)

        assert "hunter22secret" not in job.error
        assert "hunter22secret" not in str(scheduler.get_status())

    async def test_unknown_job_id(self, scheduler, orchestrator):
        await scheduler._run_scheduled("nope-sync")
        orchestrator.sync_batch.assert_not_awaited()


# =============================================================================
# Manual triggers and overlap
# =============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
class TestTriggerSync:

    async def test_manual_trigger_forces_single_attempt(self, scheduler, orchestrator, sleep):
        orchestrator.sync_batch.side_effect = RuntimeError("boom")

        outcome = await scheduler.trigger_sync("fred")

        orchestrator.sync_batch.assert_awaited_once_with(source="FRED", force=True)
        assert outcome["success"] is False
        assert outcome["error"] == "boom"
        assert sleep.delays == []


    async def test_manual_trigger_reports_failed_indicators(self, scheduler, orchestrator, sleep):
        orchestrator.sync_batch.return_value = [_ok(), _failed()]

        outcome = await scheduler.trigger_sync("fred")

        assert outcome["success"] is False
        assert outcome["error"] == "1 of 2 indicators failed: Housing Starts: Server error: 502"
        assert outcome["output"] == "1/2 indicators synced, 1 failed"
        assert sleep.delays == []

    async def test_manual_trigger_result(self, scheduler):
        outcome = await scheduler.trigger_sync("fred")

        assert outcome["success"] is True
        assert outcome["skipped"] is False
        assert outcome["output"] == "1/1 indicators synced, 0 failed"
        assert outcome["results"][0].indicator == "Unemployment Rate"
        assert scheduler.jobs["fred-sync"].schedule == "manual"

    async def test_full_sync(self, scheduler, orchestrator):
        outcome = await scheduler.trigger_sync()

        orchestrator.sync_batch.assert_awaited_once_with(source=None, force=True)
        assert outcome["success"] is True
        assert FULL_SYNC_JOB_ID in scheduler.jobs

    async def test_unknown_source(self, scheduler, orchestrator):
        outcome = await scheduler.trigger_sync("unknown-source")

        assert outcome["success"] is False
        assert "unknown-source" in outcome["error"]
        orchestrator.sync_batch.assert_not_awaited()

    async def test_concurrent_trigger_for_same_source_is_skipped(self, scheduler, orchestrator):
        gate = Gate()
        orchestrator.sync_batch.side_effect = gate.run

        first = asyncio.ensure_future(scheduler.trigger_sync("fred"))
        await gate.entered.wait()
        second = await scheduler.trigger_sync("FRED")
        gate.release.set()
        first = await first

        assert first["success"] is True
        assert second["skipped"] is True
        assert second["success"] is False
        assert "already running" in second["error"]
        assert orchestrator.sync_batch.await_count == 1
        job = scheduler.jobs["fred-sync"]
        assert job.skipped_runs == 1
        assert job.last_skipped_at is not None
        assert [r["status"] for r in scheduler.results] == ["skipped", "success"]

    async def test_other_sources_run_alongside(self, scheduler, orchestrator):
        gate = Gate()
        orchestrator.sync_batch.side_effect = gate.run

        fred = asyncio.ensure_future(scheduler.trigger_sync("fred"))
        await gate.entered.wait()
        ecb = asyncio.ensure_future(scheduler.trigger_sync("ecb"))
        await asyncio.sleep(0)
        assert scheduler.get_status()["running"] == ["ECB", "FRED"]

        gate.release.set()
        results = await asyncio.gather(fred, ecb)

        assert all(r["success"] for r in results)

    async def test_full_sync_blocks_source_runs(self, scheduler, orchestrator):
        gate = Gate()
        orchestrator.sync_batch.side_effect = gate.run

        full = asyncio.ensure_future(scheduler.trigger_sync())
        await gate.entered.wait()
        source_run = await scheduler.trigger_sync("bls")
        gate.release.set()
        await full

        assert source_run["skipped"] is True

    async def test_source_run_blocks_full_sync(self, scheduler, orchestrator):
        gate = Gate()
        orchestrator.sync_batch.side_effect = gate.run

        source_run = asyncio.ensure_future(scheduler.trigger_sync("bls"))
        await gate.entered.wait()
        full = await scheduler.trigger_sync()
        gate.release.set()
        await source_run

        assert full["skipped"] is True

    async def test_scheduled_tick_skipped_while_manual_run_in_flight(self, scheduler, orchestrator):
        gate = Gate()
        orchestrator.sync_batch.side_effect = gate.run
        job = _scheduled_job(scheduler)

        manual = asyncio.ensure_future(scheduler.trigger_sync("fred"))
        await gate.entered.wait()
        await scheduler._run_scheduled(job.id)
        gate.release.set()
        await manual

        assert job.skipped_runs == 1
        assert orchestrator.sync_batch.await_count == 1


# =============================================================================
# Observability
# =============================================================================


@pytest.mark.unit
@pytest.mark.asyncio
class TestStatus:

    async def test_get_status(self, scheduler):
        await scheduler.trigger_sync("fred")

        status = scheduler.get_status()

        assert status["enabled"] is False
        assert status["job_count"] == 1
        assert status["running"] == []
        job = status["jobs"][0]
        assert job["id"] == "fred-sync"
        assert job["state"] == "success"
        assert job["last_result"] == "success"
        record = status["results"][0]
        assert record["trigger"] == "manual"
        assert record["status"] == "success"
        assert record["results"][0]["indicator"] == "Unemployment Rate"

    async def test_history_is_bounded(self, orchestrator, sleep):
        scheduler = SyncScheduler(orchestrator, history_size=2, sleep=sleep)

        for _ in range(3):
            await scheduler.trigger_sync("fred")

        assert len(scheduler.get_status()["results"]) == 2

    async def test_delegates(self, scheduler, orchestrator):
        assert scheduler.get_last_sync_status() == [{"name": "Unemployment Rate"}]

        result = await scheduler.fetch_and_store_indicator_data("Unemployment Rate")

        assert result.success is True
        orchestrator.fetch_and_store_indicator_data.assert_awaited_once_with("Unemployment Rate")
