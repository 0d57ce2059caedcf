"""
IMF adapter: WEO annual and IFS monthly series.
"""
from datetime import date
from typing import List

from econ_ingest.sources.base import DataSourceAdapter, FetchedPoint, IndicatorDefinition
from econ_ingest.sources.imf.client import IMFClient
from econ_ingest.sources.imf.metadata import (
    HISTORY_YEARS,
    UNIT_MAP,
    parse_compact_data,
    split_indicator_code,
)


class IMFAdapter(DataSourceAdapter):
    SOURCE = "IMF"
    UNIT_MAP = UNIT_MAP

    def _create_client(self) -> IMFClient:
        return IMFClient(**self._client_kwargs())

    async def _fetch(self, definition: IndicatorDefinition) -> List[FetchedPoint]:
        database = definition.options.get("database", "WEO")
        indicator, country = split_indicator_code(definition.series_id)
        end_year = date.today().year
        response = await self.client.get_compact_data(
            database, country, indicator, end_year - HISTORY_YEARS[database], end_year
        )
        if response is None:
            return []
        return parse_compact_data(response, definition.series_id)
