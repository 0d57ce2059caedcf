"""
Finnhub adapter: candles, forex snapshots and economic series.
"""
import time
from datetime import datetime, timezone
from typing import List

from econ_ingest.sources.base import DataSourceAdapter, FetchedPoint, IndicatorDefinition
from econ_ingest.sources.finnhub.client import FinnhubClient
from econ_ingest.sources.finnhub.metadata import (
    CRYPTO,
    ECONOMIC,
    FOREX,
    HISTORY_DAYS,
    UNIT_MAP,
    parse_candles,
    parse_economic_data,
    parse_forex_rate,
    split_pair,
)


class FinnhubAdapter(DataSourceAdapter):
    SOURCE = "FINNHUB"
    UNIT_MAP = UNIT_MAP

    def _create_client(self) -> FinnhubClient:
        return FinnhubClient(**self._client_kwargs())

    async def _fetch(self, definition: IndicatorDefinition) -> List[FetchedPoint]:
        kind = definition.options.get("kind")
        symbol = definition.series_id

        if kind == FOREX:
            base, _ = split_pair(symbol)
            response = await self.client.get_forex_rates(base)
            return parse_forex_rate(response, symbol, datetime.now(timezone.utc).date())

        if kind == ECONOMIC:
            response = await self.client.get_economic_data(symbol)
            return parse_economic_data(response, symbol)

        end = int(time.time())
        start = end - HISTORY_DAYS * 24 * 60 * 60
        response = await self.client.get_candles(symbol, start, end, crypto=kind == CRYPTO)
        return parse_candles(response, symbol)
