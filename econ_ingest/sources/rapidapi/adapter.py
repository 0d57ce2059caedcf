"""
RapidAPI adapter: one sentiment point per sync, dated today.
"""
from datetime import date
from typing import List

from econ_ingest.sources.base import DataSourceAdapter, FetchedPoint, IndicatorDefinition
from econ_ingest.sources.rapidapi.client import RapidAPIClient
from econ_ingest.sources.rapidapi.metadata import (
    TIER_ENDPOINTS,
    UNIT_MAP,
    VOLUME_THRESHOLDS,
    compute_metric,
    extract_stocks,
)


class RapidAPIAdapter(DataSourceAdapter):
    SOURCE = "RAPIDAPI"
    UNIT_MAP = UNIT_MAP

    def _create_client(self) -> RapidAPIClient:
        return RapidAPIClient(**self._client_kwargs())

    async def _fetch(self, definition: IndicatorDefinition) -> List[FetchedPoint]:
        tier = definition.options.get("tier", "basic")
        metric = definition.options["metric"]
        response = await self.client.get_signals(
            TIER_ENDPOINTS[tier], min_volume=VOLUME_THRESHOLDS[tier]
        )
        stocks = extract_stocks(response)
        value = compute_metric(stocks, metric)
        return [
            FetchedPoint(
                date=date.today(),
                value=value,
                raw={"metric": metric, "tier": tier, "stocks": len(stocks)},
            )
        ]
