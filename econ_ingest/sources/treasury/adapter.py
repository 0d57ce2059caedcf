"""
Treasury adapter: last two years of a Fiscal Data field.
"""
from typing import List

from econ_ingest.sources.base import DataSourceAdapter, FetchedPoint, IndicatorDefinition
from econ_ingest.sources.treasury.client import TreasuryClient
from econ_ingest.sources.treasury.metadata import HISTORY_DAYS, PAGE_SIZE, UNIT_MAP, parse_records


class TreasuryAdapter(DataSourceAdapter):
    SOURCE = "TREASURY"
    UNIT_MAP = UNIT_MAP

    def _create_client(self) -> TreasuryClient:
        return TreasuryClient(**self._client_kwargs())

    async def _fetch(self, definition: IndicatorDefinition) -> List[FetchedPoint]:
        response = await self.client.get_records(
            definition.options["endpoint"], page_size=PAGE_SIZE, history_days=HISTORY_DAYS
        )
        return parse_records(response, definition.series_id)
