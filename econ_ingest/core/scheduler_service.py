"""
Scheduler service for automated indicator syncs.

Uses APScheduler to run one cron job per source plus a catch-all full
sync. Every run goes through SyncOrchestrator.sync_batch with a hard
wall-clock timeout; failed scheduled runs are retried with linear backoff
(retry_delay * attempt) up to max_retries.

Overlap policy is skip-if-running: a run claims its source (the full sync
claims every source) and any trigger that would overlap a claim is
skipped and recorded on the job.

Job status and run history live in memory and are lost on restart.
"""
import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, Dict, List, Mapping, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from econ_ingest.core.api_errors import SyncTimeoutError, sanitize_error_message
from econ_ingest.core.api_registry import normalize_source
from econ_ingest.core.sync_orchestrator import SyncOrchestrator, SyncResult
from econ_ingest.sources.factory import AdapterFactory

logger = logging.getLogger(__name__)


# Cron expressions (minute hour day month day_of_week), evaluated in the
# scheduler timezone. Weekdays are named; APScheduler numbers Monday as 0.
DEFAULT_SYNC_SCHEDULES: Dict[str, str] = {
    "FRED": "0 6,8,10,12,14,16,18,20 * * mon-fri",
    "ALPHA_VANTAGE": "0,30 9-16 * * mon-fri",
    "BLS": "30 8 * * *",
    "WORLD_BANK": "0 2 * * sun",
    "ECB": "0 11 * * mon-fri",
    "IMF": "0 3 * * mon",
    "TREASURY": "0 16 * * mon-fri",
    "SEC": "0 4 * * sat",
    "RAPIDAPI": "15 10-16 * * mon-fri",
    "FINNHUB": "45 9-16 * * mon-fri",
    "FMP": "30 17 * * mon-fri",
}

FULL_SYNC_SCHEDULE = "0 6 * * *"
FULL_SYNC_JOB_ID = "full-sync"

# Claim key held by a full sync
ALL_SOURCES = "*"


class SyncJobState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    RETRYING = "retrying"


class SyncJobResult(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


def job_id_for(source: Optional[str]) -> str:
    """Job id for a source: ALPHA_VANTAGE -> alpha-vantage-sync, None -> full-sync."""
    if source is None:
        return FULL_SYNC_JOB_ID
    return f"{source.lower().replace('_', '-')}-sync"


@dataclass
class SyncJob:
    """Runtime status record of one scheduled (or manual) sync job."""

    id: str
    source: Optional[str]
    schedule: str
    state: SyncJobState = SyncJobState.IDLE
    last_run: Optional[datetime] = None
    last_result: Optional[SyncJobResult] = None
    retry_attempt: int = 0
    duration_ms: Optional[int] = None
    error: Optional[str] = None
    run_count: int = 0
    skipped_runs: int = 0
    last_skipped_at: Optional[datetime] = None
    next_run: Optional[datetime] = None
    last_summary: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "schedule": self.schedule,
            "state": self.state.value,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "last_result": self.last_result.value if self.last_result else None,
            "retry_attempt": self.retry_attempt,
            "duration_ms": self.duration_ms,
            "error": self.error,
            "run_count": self.run_count,
            "skipped_runs": self.skipped_runs,
            "last_skipped_at": self.last_skipped_at.isoformat() if self.last_skipped_at else None,
            "next_run": self.next_run.isoformat() if self.next_run else None,
            "last_summary": dict(self.last_summary),
        }


class SyncScheduler:
    """
    Cron-driven sync scheduler with timeout, bounded retry and run history.

    Usage:
        scheduler = SyncScheduler(orchestrator, factory)
        scheduler.start()
        await scheduler.trigger_sync("fred")
        scheduler.stop()
    """

    def __init__(
        self,
        orchestrator: SyncOrchestrator,
        factory: Optional[AdapterFactory] = None,
        timezone: str = "America/New_York",
        job_timeout_seconds: float = 300.0,
        max_retries: int = 3,
        retry_delay_seconds: float = 30.0,
        history_size: int = 50,
        schedules: Optional[Mapping[str, str]] = None,
        full_sync_schedule: str = FULL_SYNC_SCHEDULE,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        self.orchestrator = orchestrator
        self.factory = factory
        self.timezone = timezone
        self.job_timeout_seconds = job_timeout_seconds
        self.max_retries = max_retries
        self.retry_delay_seconds = retry_delay_seconds
        self.schedules: Dict[str, str] = dict(
            schedules if schedules is not None else DEFAULT_SYNC_SCHEDULES
        )
        self.full_sync_schedule = full_sync_schedule
        self._sleep = sleep or asyncio.sleep

        self._scheduler: Optional[AsyncIOScheduler] = None
        self.jobs: Dict[str, SyncJob] = {}
        self.results: Deque[Dict[str, Any]] = deque(maxlen=history_size)
        self._running: Dict[str, str] = {}

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """
        Register the cron jobs and start the scheduler. No-op if already started.

        Must be called with a running asyncio event loop.
        """
        if self.is_running:
            logger.info("Sync scheduler already running")
            return

        scheduler = AsyncIOScheduler(timezone=self.timezone)

        for source, cron in self.schedules.items():
            if self.factory is not None and not self.factory.is_available(source):
                logger.info(f"Not scheduling {source}: adapter unavailable")
                continue
            self._register(scheduler, source, cron)
        self._register(scheduler, None, self.full_sync_schedule)

        scheduler.start()
        self._scheduler = scheduler
        self._refresh_next_runs()
        logger.info(f"Sync scheduler started with {len(self.jobs)} jobs")

    def _register(self, scheduler: AsyncIOScheduler, source: Optional[str], cron: str) -> None:
        job_id = job_id_for(source)
        trigger = CronTrigger.from_crontab(cron, timezone=self.timezone)
        scheduler.add_job(
            self._run_scheduled,
            trigger=trigger,
            args=[job_id],
            id=job_id,
            name=f"{source or 'Full'} sync",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self.jobs[job_id] = SyncJob(id=job_id, source=source, schedule=cron)
        logger.debug(f"Registered {job_id}: {cron}")

    def stop(self) -> None:
        """
        Deregister all jobs and stop the scheduler.

        Runs already in flight are not cancelled; their own timeout still applies.
        """
        if self._scheduler is None:
            return
        self._scheduler.remove_all_jobs()
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        self.jobs.clear()
        logger.info("Sync scheduler stopped")

    def _refresh_next_runs(self) -> None:
        if self._scheduler is None:
            return
        for job_id, job in self.jobs.items():
            aps_job = self._scheduler.get_job(job_id)
            job.next_run = aps_job.next_run_time if aps_job else None

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def _claim_key(self, job: SyncJob) -> str:
        return job.source or ALL_SOURCES

    def _is_busy(self, claim: str) -> bool:
        if claim == ALL_SOURCES:
            return bool(self._running)
        return claim in self._running or ALL_SOURCES in self._running

    async def _run_scheduled(self, job_id: str) -> None:
        """APScheduler entry point."""
        job = self.jobs.get(job_id)
        if job is None:
            logger.warning(f"Scheduled tick for unknown job {job_id}")
            return
        await self._execute(job, trigger="scheduled", retry=True, force=False)
        self._refresh_next_runs()

    async def _execute(self, job: SyncJob, trigger: str, retry: bool, force: bool) -> Dict[str, Any]:
        claim = self._claim_key(job)
        if self._is_busy(claim):
            return self._record_skip(job, trigger)

        self._running[claim] = job.id
        try:
            attempt = 0
            while True:
                job.state = SyncJobState.RUNNING
                job.retry_attempt = attempt
                outcome = await self._run_once(job, trigger, attempt, force)
                if outcome["success"]:
                    job.state = SyncJobState.SUCCESS
                    return outcome

                job.state = SyncJobState.FAILED
                if not retry or attempt >= self.max_retries:
                    if retry:
                        logger.error(
                            f"{job.id} failed after {attempt} retries; "
                            f"waiting for next scheduled run"
                        )
                    job.state = SyncJobState.IDLE
                    return outcome

                attempt += 1
                job.state = SyncJobState.RETRYING
                job.retry_attempt = attempt
                delay = self.retry_delay_seconds * attempt
                logger.warning(f"{job.id} failed; retry {attempt}/{self.max_retries} in {delay:g}s")
                await self._sleep(delay)
                if self.jobs.get(job.id) is not job:
                    logger.info(f"{job.id} deregistered while waiting to retry; giving up")
                    job.state = SyncJobState.IDLE
                    return outcome
        finally:
            self._running.pop(claim, None)

    async def _run_once(self, job: SyncJob, trigger: str, attempt: int, force: bool) -> Dict[str, Any]:
        started_at = datetime.utcnow()
        started = time.monotonic()
        results: List[SyncResult] = []
        error: Optional[str] = None

        logger.info(f"Running {job.id} ({trigger}, attempt {attempt + 1})")
        try:
            results = await asyncio.wait_for(
                self.orchestrator.sync_batch(source=job.source, force=force),
                timeout=self.job_timeout_seconds,
            )
        except asyncio.TimeoutError:
            error = str(SyncTimeoutError(job.id, self.job_timeout_seconds))
        except Exception as e:
            logger.error(f"{job.id} raised: {sanitize_error_message(e)}", exc_info=True)
            error = sanitize_error_message(e)

        duration_ms = int((time.monotonic() - started) * 1000)
        succeeded = sum(1 for r in results if r.success)
        critical = [r for r in results if r.critical]
        summary = {
            "total": len(results),
            "succeeded": succeeded,
            "failed": len(results) - succeeded,
            "critical": len(critical),
            "skipped": sum(1 for r in results if r.skipped),
        }
        # Rate-limited and unconfigured indicators do not fail the run
        if error is None and critical:
            error = sanitize_error_message(
                f"{len(critical)} of {len(results)} indicators failed: "
                + "; ".join(f"{r.indicator}: {r.error}" for r in critical)
            )
        success = error is None

        job.last_run = started_at
        job.duration_ms = duration_ms
        job.run_count += 1
        job.last_result = SyncJobResult.SUCCESS if success else SyncJobResult.FAILED
        job.error = error
        job.last_summary = summary

        output = (
            f"{summary['succeeded']}/{summary['total']} indicators synced, "
            f"{summary['failed']} failed"
        )
        if success:
            logger.info(f"{job.id} finished in {duration_ms}ms: {output}")
        else:
            logger.error(f"{job.id} failed in {duration_ms}ms: {error}")

        self.results.append(
            {
                "job_id": job.id,
                "source": job.source,
                "trigger": trigger,
                "status": job.last_result.value,
                "attempt": attempt,
                "started_at": started_at.isoformat(),
                "duration_ms": duration_ms,
                "error": error,
                "summary": summary,
                "results": [r.to_dict() for r in results],
            }
        )

        return {
            "success": success,
            "skipped": False,
            "output": output,
            "error": error,
            "results": results,
        }

    def _record_skip(self, job: SyncJob, trigger: str) -> Dict[str, Any]:
        now = datetime.utcnow()
        job.skipped_runs += 1
        job.last_skipped_at = now
        holder = ", ".join(sorted(set(self._running.values())))
        message = f"Skipped {job.id}: sync already running ({holder})"
        logger.warning(message)

        self.results.append(
            {
                "job_id": job.id,
                "source": job.source,
                "trigger": trigger,
                "status": "skipped",
                "attempt": 0,
                "started_at": now.isoformat(),
                "duration_ms": 0,
                "error": message,
                "summary": {},
                "results": [],
            }
        )
        return {"success": False, "skipped": True, "output": None, "error": message, "results": []}

    def _get_or_create_job(self, source: Optional[str]) -> SyncJob:
        job_id = job_id_for(source)
        job = self.jobs.get(job_id)
        if job is None:
            job = SyncJob(id=job_id, source=source, schedule="manual")
            self.jobs[job_id] = job
        return job

    async def trigger_sync(self, source: Optional[str] = None) -> Dict[str, Any]:
        """
        Run a sync now, outside the cron schedule.

        One attempt, under the job timeout, without automatic retry. Skipped
        if a run for the same source (or a full sync) is in flight.

        Returns:
            {"success", "skipped", "output", "error", "results"}
        """
        key = normalize_source(source) if source else None
        if key is not None and self.factory is not None and key not in self.factory.adapter_classes:
            message = f"No adapter registered for source '{source}'"
            logger.warning(message)
            return {"success": False, "skipped": False, "output": None, "error": message, "results": []}

        job = self._get_or_create_job(key)
        return await self._execute(job, trigger="manual", retry=False, force=True)

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def get_status(self) -> Dict[str, Any]:
        """Snapshot of job states and recent run history (newest last)."""
        self._refresh_next_runs()
        return {
            "enabled": self.is_running,
            "job_count": len(self.jobs),
            "jobs": [job.to_dict() for job in self.jobs.values()],
            "results": list(self.results),
            "running": sorted(self._running),
        }

    def get_last_sync_status(self) -> List[Dict[str, Any]]:
        return self.orchestrator.get_last_sync_status()

    async def fetch_and_store_indicator_data(self, indicator_name: str) -> SyncResult:
        return await self.orchestrator.fetch_and_store_indicator_data(indicator_name)
