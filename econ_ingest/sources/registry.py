"""
Indicator registry.

Declarative per-source catalogs mapping canonical indicator names to
provider series. Each provider package contributes CORE_INDICATORS from
its metadata module; build_default_registry() collects them all.
"""
import logging
from typing import Dict, Iterable, List, Optional

from econ_ingest.core.api_errors import ConfigNotFoundError
from econ_ingest.core.api_registry import normalize_source
from econ_ingest.sources.base import IndicatorDefinition

logger = logging.getLogger(__name__)


class IndicatorRegistry:
    """In-memory catalog of indicator definitions, unique by name."""

    def __init__(self, definitions: Optional[Iterable[IndicatorDefinition]] = None):
        self._by_name: Dict[str, IndicatorDefinition] = {}
        if definitions:
            self.register(definitions)

    def register(self, definitions: Iterable[IndicatorDefinition]) -> None:
        """
        Add definitions to the catalog.

        Raises:
            ValueError: If a name is already registered
        """
        for definition in definitions:
            if definition.name in self._by_name:
                existing = self._by_name[definition.name]
                raise ValueError(
                    f"Duplicate indicator name '{definition.name}' "
                    f"({existing.source} and {definition.source})"
                )
            self._by_name[definition.name] = definition

    def get(self, source: str, name: str) -> IndicatorDefinition:
        """
        Look up an indicator within a source's catalog.

        Raises:
            ConfigNotFoundError: If name is not declared for source
        """
        source = normalize_source(source)
        definition = self._by_name.get(name)
        if definition is None or definition.source != source:
            raise ConfigNotFoundError(name, source)
        return definition

    def find(self, name: str) -> Optional[IndicatorDefinition]:
        return self._by_name.get(name)

    def for_source(self, source: str) -> List[IndicatorDefinition]:
        source = normalize_source(source)
        return [d for d in self._by_name.values() if d.source == source]

    def all(self) -> List[IndicatorDefinition]:
        return list(self._by_name.values())

    def sources(self) -> List[str]:
        return sorted({d.source for d in self._by_name.values()})

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name


def build_default_registry() -> IndicatorRegistry:
    """Assemble the catalogs of every bundled provider."""
    from econ_ingest.sources.alpha_vantage.metadata import CORE_INDICATORS as alpha_vantage
    from econ_ingest.sources.bls.metadata import CORE_INDICATORS as bls
    from econ_ingest.sources.ecb.metadata import CORE_INDICATORS as ecb
    from econ_ingest.sources.finnhub.metadata import CORE_INDICATORS as finnhub
    from econ_ingest.sources.fmp.metadata import CORE_INDICATORS as fmp
    from econ_ingest.sources.fred.metadata import CORE_INDICATORS as fred
    from econ_ingest.sources.imf.metadata import CORE_INDICATORS as imf
    from econ_ingest.sources.rapidapi.metadata import CORE_INDICATORS as rapidapi
    from econ_ingest.sources.sec.metadata import CORE_INDICATORS as sec
    from econ_ingest.sources.treasury.metadata import CORE_INDICATORS as treasury
    from econ_ingest.sources.world_bank.metadata import CORE_INDICATORS as world_bank

    registry = IndicatorRegistry()
    for catalog in (fred, alpha_vantage, bls, world_bank, ecb, imf, treasury, sec, rapidapi, finnhub, fmp):
        registry.register(catalog)

    logger.debug(f"Indicator registry: {len(registry)} indicators across {registry.sources()}")
    return registry
