"""
Sync orchestrator.

Pipeline per indicator:
    Indicator row -> adapter by source -> rate limiter -> fetch -> upsert

Errors from any step are turned into a failed SyncResult at the
per-indicator boundary, so a batch always attempts every indicator.
"""
import logging
import time
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import sessionmaker

from econ_ingest.core import indicator_service
from econ_ingest.core.api_errors import (
    NON_CRITICAL_FAILURES,
    ConfigNotFoundError,
    failure_kind,
    sanitize_error_message,
)
from econ_ingest.core.api_registry import normalize_source
from econ_ingest.core.models import Indicator
from econ_ingest.core.rate_limiter import RateLimiterService
from econ_ingest.sources.factory import AdapterFactory

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Outcome of syncing one indicator."""

    indicator: str
    source: Optional[str]
    success: bool
    data_points: int = 0
    duration_ms: int = 0
    error: Optional[str] = None
    error_type: Optional[str] = None
    skipped: bool = False

    @property
    def critical(self) -> bool:
        """A failure worth failing (and retrying) the whole sync job over."""
        return not self.success and self.error_type not in NON_CRITICAL_FAILURES

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["critical"] = self.critical
        return data


@dataclass
class _Target:
    """Detached snapshot of the Indicator row being synced."""

    id: int
    name: str
    source: str
    frequency: str


class SyncOrchestrator:
    """
    Fetches indicators through their adapters and upserts the results.

    The orchestrator is the only writer of DataPoint rows.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        factory: AdapterFactory,
        rate_limiter: RateLimiterService,
        freshness_daily_hours: float = 1.0,
        freshness_default_hours: float = 6.0,
    ):
        self.session_factory = session_factory
        self.factory = factory
        self.rate_limiter = rate_limiter
        self.freshness_daily = timedelta(hours=freshness_daily_hours)
        self.freshness_default = timedelta(hours=freshness_default_hours)

    def initialize_indicators(self) -> Dict[str, int]:
        """Seed every catalog entry into the indicator table."""

        def standardize(source: str, unit: str) -> str:
            if self.factory.is_available(source):
                return self.factory.standardize_unit(source, unit)
            adapter_cls = self.factory.adapter_classes.get(source)
            if adapter_cls is not None:
                return adapter_cls.UNIT_MAP.get(unit.strip(), unit)
            return unit

        with self.session_factory() as db:
            return indicator_service.initialize_core_indicators(
                db, self.factory.get_all_core_indicators(), standardize
            )

    def _load_target(self, indicator_name: str) -> _Target:
        with self.session_factory() as db:
            indicator = indicator_service.get_indicator_by_name(db, indicator_name)
            if indicator is None:
                raise ConfigNotFoundError(indicator_name)
            return _Target(indicator.id, indicator.name, indicator.source, indicator.frequency)

    def _is_fresh(self, target: _Target) -> bool:
        window = self.freshness_daily if target.frequency == "daily" else self.freshness_default
        with self.session_factory() as db:
            last_write = indicator_service.get_last_write_time(db, target.id)
        return last_write is not None and datetime.utcnow() - last_write < window

    def _store(self, target: _Target, points) -> Dict[str, int]:
        with self.session_factory() as db:
            indicator = db.get(Indicator, target.id)
            return indicator_service.store_indicator_data(db, indicator, points)

    async def _sync(self, target: _Target, force: bool, dry_run: bool) -> SyncResult:
        started = time.monotonic()

        if not force and self._is_fresh(target):
            logger.info(f"Skipping {target.name}: refreshed within freshness window")
            return SyncResult(
                indicator=target.name,
                source=target.source,
                success=True,
                duration_ms=int((time.monotonic() - started) * 1000),
                skipped=True,
            )

        async with self.rate_limiter.limit(target.source):
            points = await self.factory.fetch_data(target.source, target.name)

        if dry_run:
            stored = len(points)
            logger.info(f"[dry run] {target.name}: fetched {stored} points")
        else:
            counts = self._store(target, points)
            stored = counts["inserted"] + counts["updated"]
            logger.info(
                f"Synced {target.name}: {counts['inserted']} inserted, "
                f"{counts['updated']} updated"
            )

        return SyncResult(
            indicator=target.name,
            source=target.source,
            success=True,
            data_points=stored,
            duration_ms=int((time.monotonic() - started) * 1000),
        )

    async def sync_one(
        self, indicator_name: str, force: bool = True, dry_run: bool = False
    ) -> SyncResult:
        """
        Sync one indicator by name.

        Never raises for indicator-level failures; they come back as a failed
        SyncResult with a redacted error string.
        """
        started = time.monotonic()
        source: Optional[str] = None
        try:
            target = self._load_target(indicator_name)
            source = target.source
            return await self._sync(target, force=force, dry_run=dry_run)
        except Exception as e:
            logger.error(f"Sync failed for {indicator_name}: {sanitize_error_message(e)}")
            return SyncResult(
                indicator=indicator_name,
                source=source,
                success=False,
                duration_ms=int((time.monotonic() - started) * 1000),
                error=sanitize_error_message(e),
                error_type=failure_kind(e),
            )

    async def fetch_and_store_indicator_data(self, indicator_name: str) -> SyncResult:
        """
        Sync one indicator, raising on failure.

        Raises:
            ConfigNotFoundError, AdapterNotFoundError, UpstreamError, PersistenceError
        """
        target = self._load_target(indicator_name)
        return await self._sync(target, force=True, dry_run=False)

    def _select_indicators(
        self, source: Optional[str], indicators: Optional[Iterable[str]]
    ) -> List[str]:
        key = normalize_source(source) if source else None
        with self.session_factory() as db:
            rows = indicator_service.get_all_indicators(db, active_only=True)
            catalog = {row.name: row.source for row in rows}

        names = [name for name, row_source in catalog.items() if key is None or row_source == key]
        if indicators is None:
            return names

        # Names missing from the store are kept so they surface as failed results
        selected = set(names)
        return [name for name in indicators if name in selected or name not in catalog]

    async def sync_batch(
        self,
        source: Optional[str] = None,
        indicators: Optional[Iterable[str]] = None,
        force: bool = True,
        dry_run: bool = False,
    ) -> List[SyncResult]:
        """
        Sync every active indicator, optionally filtered by source and/or names.

        A failure on one indicator never stops the others from being attempted.
        """
        names = self._select_indicators(source, indicators)
        logger.info(f"Starting batch sync of {len(names)} indicators (source={source or 'all'})")

        results = []
        for name in names:
            results.append(await self.sync_one(name, force=force, dry_run=dry_run))

        failed = [r for r in results if not r.success]
        logger.info(
            f"Batch sync finished: {len(results) - len(failed)} succeeded, "
            f"{len(failed)} failed"
        )
        return results

    def get_last_sync_status(self) -> List[Dict[str, Any]]:
        with self.session_factory() as db:
            return indicator_service.get_last_sync_status(db)
