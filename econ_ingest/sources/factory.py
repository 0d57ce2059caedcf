"""
Adapter factory.

Owns one adapter instance per source, initializes them together and
dispatches fetch / unit-normalization calls by source tag. A provider that
fails to initialize (typically a missing API key) is marked unavailable;
the other providers are unaffected.
"""
import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Type

from econ_ingest.core.api_errors import AdapterNotFoundError, ConfigurationError
from econ_ingest.core.api_registry import SourceConfig, normalize_source
from econ_ingest.sources.alpha_vantage.adapter import AlphaVantageAdapter
from econ_ingest.sources.base import DataSourceAdapter, FetchedPoint, IndicatorDefinition
from econ_ingest.sources.bls.adapter import BLSAdapter
from econ_ingest.sources.ecb.adapter import ECBAdapter
from econ_ingest.sources.finnhub.adapter import FinnhubAdapter
from econ_ingest.sources.fmp.adapter import FMPAdapter
from econ_ingest.sources.fred.adapter import FREDAdapter
from econ_ingest.sources.imf.adapter import IMFAdapter
from econ_ingest.sources.rapidapi.adapter import RapidAPIAdapter
from econ_ingest.sources.registry import IndicatorRegistry
from econ_ingest.sources.sec.adapter import SECAdapter
from econ_ingest.sources.treasury.adapter import TreasuryAdapter
from econ_ingest.sources.world_bank.adapter import WorldBankAdapter

logger = logging.getLogger(__name__)


ADAPTER_CLASSES: Dict[str, Type[DataSourceAdapter]] = {
    "FRED": FREDAdapter,
    "ALPHA_VANTAGE": AlphaVantageAdapter,
    "BLS": BLSAdapter,
    "WORLD_BANK": WorldBankAdapter,
    "ECB": ECBAdapter,
    "IMF": IMFAdapter,
    "TREASURY": TreasuryAdapter,
    "SEC": SECAdapter,
    "RAPIDAPI": RapidAPIAdapter,
    "FINNHUB": FinnhubAdapter,
    "FMP": FMPAdapter,
}


class AdapterFactory:
    """
    Registry of initialized adapters keyed by canonical source tag.

    Usage:
        factory = AdapterFactory(registry)
        await factory.initialize(build_source_configs(settings))
        points = await factory.fetch_data("FRED", "Unemployment Rate")
    """

    def __init__(
        self,
        registry: IndicatorRegistry,
        adapter_classes: Optional[Mapping[str, Type[DataSourceAdapter]]] = None,
    ):
        self.registry = registry
        self.adapter_classes: Dict[str, Type[DataSourceAdapter]] = dict(
            adapter_classes if adapter_classes is not None else ADAPTER_CLASSES
        )
        self._adapters: Dict[str, DataSourceAdapter] = {}
        self._unavailable: Dict[str, str] = {}

    async def initialize(
        self,
        configs: Mapping[str, SourceConfig],
        http_options: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, bool]:
        """
        Construct and initialize every adapter that has a config.

        Initialization runs concurrently. A failure is logged and marks only
        that source unavailable.

        Returns:
            Mapping of source -> available
        """
        pending: Dict[str, DataSourceAdapter] = {}
        for source, adapter_cls in self.adapter_classes.items():
            config = configs.get(source)
            if config is None:
                self._unavailable[source] = "No source configuration"
                logger.warning(f"No configuration for {source}; adapter unavailable")
                continue
            pending[source] = adapter_cls(config, self.registry, http_options=http_options)

        outcomes = await asyncio.gather(
            *(adapter.initialize() for adapter in pending.values()),
            return_exceptions=True,
        )

        for (source, adapter), outcome in zip(pending.items(), outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                self._unavailable[source] = str(outcome)
                logger.warning(f"{source} adapter unavailable: {outcome}")
                continue
            self._adapters[source] = adapter
            self._unavailable.pop(source, None)

        logger.info(
            f"Adapters ready: {sorted(self._adapters)}; "
            f"unavailable: {sorted(self._unavailable)}"
        )
        return {source: source in self._adapters for source in self.adapter_classes}

    def get_adapter(self, source: str) -> DataSourceAdapter:
        """
        Look up the adapter for a source tag.

        Raises:
            AdapterNotFoundError: If no adapter is registered for source
            ConfigurationError: If the adapter exists but failed to initialize
        """
        key = normalize_source(source)
        adapter = self._adapters.get(key)
        if adapter is not None:
            return adapter
        if key in self._unavailable:
            raise ConfigurationError(
                f"{key} adapter is unavailable: {self._unavailable[key]}", source=key
            )
        raise AdapterNotFoundError(source)

    async def fetch_data(self, source: str, indicator_name: str) -> List[FetchedPoint]:
        return await self.get_adapter(source).fetch_data(indicator_name)

    def standardize_unit(self, source: str, unit: str) -> str:
        return self.get_adapter(source).standardize_unit(unit)

    def is_available(self, source: str) -> bool:
        return normalize_source(source) in self._adapters

    def available_sources(self) -> List[str]:
        return sorted(self._adapters)

    def unavailable_sources(self) -> Dict[str, str]:
        """Sources that failed to initialize, with the reason."""
        return dict(self._unavailable)

    def get_all_core_indicators(self) -> List[IndicatorDefinition]:
        """Catalog entries of every registered source, available or not."""
        return [d for d in self.registry.all() if d.source in self.adapter_classes]

    async def close(self) -> None:
        """Close all adapter HTTP clients."""
        for adapter in self._adapters.values():
            await adapter.close()
        self._adapters.clear()
