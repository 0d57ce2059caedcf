"""
World Bank adapter: five years of annual WDI values.
"""
from datetime import date
from typing import List

from econ_ingest.sources.base import DataSourceAdapter, FetchedPoint, IndicatorDefinition
from econ_ingest.sources.world_bank.client import WorldBankClient
from econ_ingest.sources.world_bank.metadata import (
    DEFAULT_COUNTRY,
    HISTORY_YEARS,
    UNIT_MAP,
    parse_indicator_rows,
)


class WorldBankAdapter(DataSourceAdapter):
    SOURCE = "WORLD_BANK"
    UNIT_MAP = UNIT_MAP

    def _create_client(self) -> WorldBankClient:
        return WorldBankClient(**self._client_kwargs())

    async def _fetch(self, definition: IndicatorDefinition) -> List[FetchedPoint]:
        end_year = date.today().year
        response = await self.client.get_indicator_data(
            definition.series_id,
            country=definition.options.get("country", DEFAULT_COUNTRY),
            start_year=end_year - HISTORY_YEARS,
            end_year=end_year,
        )
        return parse_indicator_rows(response, definition.series_id)
