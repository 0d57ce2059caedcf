"""
FRED adapter: newest 50 observations per series.
"""
from typing import List

from econ_ingest.sources.base import DataSourceAdapter, FetchedPoint, IndicatorDefinition
from econ_ingest.sources.fred.client import FREDClient
from econ_ingest.sources.fred.metadata import UNIT_MAP, parse_observations


class FREDAdapter(DataSourceAdapter):
    SOURCE = "FRED"
    UNIT_MAP = UNIT_MAP

    OBSERVATION_LIMIT = 50

    def _create_client(self) -> FREDClient:
        return FREDClient(**self._client_kwargs())

    async def _fetch(self, definition: IndicatorDefinition) -> List[FetchedPoint]:
        response = await self.client.get_series_observations(
            definition.series_id, limit=self.OBSERVATION_LIMIT, sort_order="desc"
        )
        return parse_observations(response, definition.series_id)
