"""
ECB adapter: last 100 observations of a dataflow series.
"""
from typing import List

from econ_ingest.sources.base import DataSourceAdapter, FetchedPoint, IndicatorDefinition
from econ_ingest.sources.ecb.client import ECBClient
from econ_ingest.sources.ecb.metadata import LAST_N_OBSERVATIONS, UNIT_MAP, parse_jsondata


class ECBAdapter(DataSourceAdapter):
    SOURCE = "ECB"
    UNIT_MAP = UNIT_MAP

    def _create_client(self) -> ECBClient:
        return ECBClient(**self._client_kwargs())

    async def _fetch(self, definition: IndicatorDefinition) -> List[FetchedPoint]:
        response = await self.client.get_series(
            definition.options["flow"],
            definition.options["key"],
            last_n_observations=LAST_N_OBSERVATIONS,
        )
        if response is None:
            return []
        return parse_jsondata(response, definition.series_id)
