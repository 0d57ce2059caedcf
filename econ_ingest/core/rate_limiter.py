"""
Per-source rate limiter service.

Enforces a minimum interval between granted calls for each data source.
Callers for the same source queue on an asyncio.Lock, which wakes waiters
in arrival order, so concurrent triggers are served FIFO. Each source has
its own lock and timestamp; different sources never wait on each other.
"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

from econ_ingest.core.api_registry import SOURCE_REGISTRY, SourceConfig, normalize_source

logger = logging.getLogger(__name__)


# Minimum seconds between calls, derived from the declared provider limits
DEFAULT_MIN_INTERVALS: Dict[str, float] = {
    source: config.min_interval for source, config in SOURCE_REGISTRY.items()
}

# Fallback for sources without a declared limit
DEFAULT_MIN_INTERVAL = 1.0


@dataclass
class SourceInterval:
    """
    Rate limiting state for one source.

    last_granted is only read and written while holding lock.
    """

    source: str
    min_interval: float
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)
    last_granted: Optional[float] = None

    # Statistics
    total_requests: int = 0
    total_throttled: int = 0
    total_wait_seconds: float = 0.0

    def wait_time(self, now: float) -> float:
        """Seconds until the next call may be granted (0 if allowed now)."""
        if self.last_granted is None:
            return 0.0
        return max(0.0, self.last_granted + self.min_interval - now)


class RateLimiterService:
    """
    Per-source minimum-interval rate limiter.

    Owned by the application root and shared by every sync path (scheduled
    and manual) so they all respect the same per-source spacing.
    """

    def __init__(
        self,
        min_intervals: Optional[Mapping[str, float]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._defaults: Dict[str, float] = dict(DEFAULT_MIN_INTERVALS)
        if min_intervals:
            self._defaults.update(
                {normalize_source(s): float(v) for s, v in min_intervals.items()}
            )
        self._clock = clock
        self._sources: Dict[str, SourceInterval] = {}

    @classmethod
    def from_source_configs(cls, configs: Mapping[str, SourceConfig]) -> "RateLimiterService":
        """Build a limiter using each SourceConfig's declared rate limit."""
        return cls({source: config.min_interval for source, config in configs.items()})

    def _get_state(self, source: str) -> SourceInterval:
        """Get or create the interval state for a source."""
        key = normalize_source(source)
        state = self._sources.get(key)
        if state is None:
            state = SourceInterval(
                source=key,
                min_interval=self._defaults.get(key, DEFAULT_MIN_INTERVAL),
            )
            self._sources[key] = state
        return state

    async def acquire(self, source: str) -> float:
        """
        Wait until a call to source is allowed.

        Blocks (without busy-waiting) until at least min_interval has passed
        since the previous granted call for the same source.

        Args:
            source: Data source tag

        Returns:
            Seconds this caller spent sleeping for the interval
        """
        state = self._get_state(source)

        async with state.lock:
            wait_time = state.wait_time(self._clock())
            if wait_time > 0:
                state.total_throttled += 1
                state.total_wait_seconds += wait_time
                logger.debug(f"Rate limiting {state.source}: waiting {wait_time:.2f}s")
                await asyncio.sleep(wait_time)

            state.last_granted = self._clock()
            state.total_requests += 1

        return wait_time

    @asynccontextmanager
    async def limit(self, source: str):
        """
        Async context manager for rate-limited calls.

        Usage:
            async with rate_limiter.limit("FRED"):
                points = await adapter.fetch_data(name)
        """
        await self.acquire(source)
        yield

    def get_stats(self, source: str) -> Dict[str, Any]:
        """Get rate limit statistics for a source."""
        state = self._get_state(source)

        return {
            "source": state.source,
            "min_interval": state.min_interval,
            "total_requests": state.total_requests,
            "total_throttled": state.total_throttled,
            "total_wait_seconds": round(state.total_wait_seconds, 3),
            "waiting": state.lock.locked(),
        }

    def get_all_stats(self) -> Dict[str, Dict[str, Any]]:
        """Get rate limit statistics for all active sources."""
        return {source: self.get_stats(source) for source in self._sources}

    def configure_source(self, source: str, min_interval: float) -> None:
        """
        Configure the minimum interval for a source.

        Takes effect for the next acquire; a caller already sleeping keeps
        its computed wait.
        """
        key = normalize_source(source)
        self._defaults[key] = min_interval
        if key in self._sources:
            self._sources[key].min_interval = min_interval

        logger.info(f"Configured rate limit for {key}: min_interval={min_interval:.3f}s")

    def reset_source(self, source: str) -> None:
        """Forget timing state and statistics for a source."""
        key = normalize_source(source)
        if key in self._sources:
            del self._sources[key]
            logger.info(f"Reset rate limiter for {key}")
