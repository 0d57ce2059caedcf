"""
FMP adapter: daily closes and Treasury curve maturities.
"""
from typing import List

from econ_ingest.sources.base import DataSourceAdapter, FetchedPoint, IndicatorDefinition
from econ_ingest.sources.fmp.client import FMPClient
from econ_ingest.sources.fmp.metadata import (
    TREASURY,
    UNIT_MAP,
    parse_historical_prices,
    parse_treasury_curve,
)


class FMPAdapter(DataSourceAdapter):
    SOURCE = "FMP"
    UNIT_MAP = UNIT_MAP

    def _create_client(self) -> FMPClient:
        return FMPClient(**self._client_kwargs())

    async def _fetch(self, definition: IndicatorDefinition) -> List[FetchedPoint]:
        if definition.options.get("kind") == TREASURY:
            response = await self.client.get_treasury_rates()
            return parse_treasury_curve(response, definition.options["field"])

        response = await self.client.get_historical_prices(definition.series_id)
        return parse_historical_prices(response, definition.series_id)
