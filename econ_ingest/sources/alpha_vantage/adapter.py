"""
Alpha Vantage adapter: daily closes for tracked ETFs.
"""
from typing import List

from econ_ingest.sources.alpha_vantage.client import AlphaVantageClient
from econ_ingest.sources.alpha_vantage.metadata import UNIT_MAP, parse_daily_series
from econ_ingest.sources.base import DataSourceAdapter, FetchedPoint, IndicatorDefinition


class AlphaVantageAdapter(DataSourceAdapter):
    SOURCE = "ALPHA_VANTAGE"
    UNIT_MAP = UNIT_MAP

    def _create_client(self) -> AlphaVantageClient:
        return AlphaVantageClient(**self._client_kwargs())

    async def _fetch(self, definition: IndicatorDefinition) -> List[FetchedPoint]:
        response = await self.client.get_daily_series(definition.series_id)
        return parse_daily_series(response, definition.series_id)
