"""
Application root.

build_runtime() constructs every service from Settings and wires them
together. Entry points (FastAPI app, CLI) own the returned SyncRuntime and
close it on shutdown; nothing is held in module-level globals.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from econ_ingest.core.api_registry import build_source_configs
from econ_ingest.core.config import Settings
from econ_ingest.core.database import create_db_engine, create_tables, get_session_factory
from econ_ingest.core.rate_limiter import RateLimiterService
from econ_ingest.core.scheduler_service import SyncScheduler
from econ_ingest.core.sync_orchestrator import SyncOrchestrator
from econ_ingest.sources.factory import AdapterFactory
from econ_ingest.sources.registry import IndicatorRegistry, build_default_registry

logger = logging.getLogger(__name__)


@dataclass
class SyncRuntime:
    settings: Settings
    engine: Engine
    session_factory: sessionmaker
    registry: IndicatorRegistry
    rate_limiter: RateLimiterService
    factory: AdapterFactory
    orchestrator: SyncOrchestrator
    scheduler: SyncScheduler

    async def close(self) -> None:
        """Stop the scheduler, close adapter clients and dispose the engine."""
        self.scheduler.stop()
        await self.factory.close()
        self.engine.dispose()
        logger.info("Sync runtime closed")


async def build_runtime(
    settings: Settings,
    http_options: Optional[Mapping[str, Any]] = None,
    seed_indicators: bool = True,
) -> SyncRuntime:
    """
    Build the full ingestion stack.

    Args:
        settings: Application settings
        http_options: Extra BaseAPIClient kwargs for every adapter (e.g. transport)
        seed_indicators: Upsert the indicator catalog into the store

    Returns:
        A ready SyncRuntime; the scheduler is NOT started
    """
    engine = create_db_engine(settings.database_url)
    create_tables(engine)
    session_factory = get_session_factory(engine)

    configs = build_source_configs(settings)
    registry = build_default_registry()
    rate_limiter = RateLimiterService.from_source_configs(configs)

    options: Dict[str, Any] = {
        "max_concurrency": settings.max_concurrency,
        "max_retries": settings.max_retries,
        "backoff_factor": settings.retry_backoff_factor,
    }
    options.update(http_options or {})

    factory = AdapterFactory(registry)
    await factory.initialize(configs, http_options=options)

    orchestrator = SyncOrchestrator(
        session_factory,
        factory,
        rate_limiter,
        freshness_daily_hours=settings.freshness_daily_hours,
        freshness_default_hours=settings.freshness_default_hours,
    )
    if seed_indicators:
        orchestrator.initialize_indicators()

    scheduler = SyncScheduler(
        orchestrator,
        factory,
        timezone=settings.scheduler_timezone,
        job_timeout_seconds=settings.sync_job_timeout_seconds,
        max_retries=settings.sync_max_retries,
        retry_delay_seconds=settings.sync_retry_delay_seconds,
        history_size=settings.sync_history_size,
    )

    return SyncRuntime(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        registry=registry,
        rate_limiter=rate_limiter,
        factory=factory,
        orchestrator=orchestrator,
        scheduler=scheduler,
    )
