"""
BLS adapter: the last five years of a monthly series.
"""
from datetime import date
from typing import List

from econ_ingest.sources.base import DataSourceAdapter, FetchedPoint, IndicatorDefinition
from econ_ingest.sources.bls.client import BLSClient
from econ_ingest.sources.bls.metadata import HISTORY_YEARS, UNIT_MAP, parse_series


class BLSAdapter(DataSourceAdapter):
    SOURCE = "BLS"
    UNIT_MAP = UNIT_MAP

    def _create_client(self) -> BLSClient:
        return BLSClient(**self._client_kwargs())

    async def _fetch(self, definition: IndicatorDefinition) -> List[FetchedPoint]:
        end_year = date.today().year
        response = await self.client.fetch_series(
            [definition.series_id], start_year=end_year - HISTORY_YEARS, end_year=end_year
        )
        return parse_series(response, definition.series_id)
