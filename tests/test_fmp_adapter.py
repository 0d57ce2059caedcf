"""
Unit tests for the Financial Modeling Prep adapter.
"""
from datetime import date

import pytest

from econ_ingest.core.api_errors import ConfigurationError, UpstreamError, failure_kind
from econ_ingest.sources.fmp.adapter import FMPAdapter
from econ_ingest.sources.fmp.metadata import (
    HISTORY_LIMIT,
    parse_historical_prices,
    parse_treasury_curve,
)

HISTORICAL = {
    "symbol": "GCUSD",
    "historical": [
        {"date": "2024-05-03", "open": 2305.1, "close": 2301.8, "high": 2320.0, "low": 2291.3},
        {"date": "2024-05-02", "open": 2320.4, "close": 2309.6, "high": 2326.1, "low": 2297.4},
        {"date": "2024-05-01", "close": None},
    ],
}

CURVE = [
    {"date": "2024-05-03", "month1": 5.51, "year2": 4.81, "year10": 4.51, "year30": 4.67},
    {"date": "2024-05-02", "month1": 5.51, "year2": 4.88, "year10": 4.58, "year30": None},
]


class TestParsers:

    def test_historical_closes(self):
        points = parse_historical_prices(HISTORICAL, "GCUSD")
        assert [(p.date, p.value) for p in points] == [
            (date(2024, 5, 3), 2301.8),
            (date(2024, 5, 2), 2309.6),
        ]
        assert points[0].raw["symbol"] == "GCUSD"
        assert points[0].raw["high"] == 2320.0

    def test_history_is_capped(self):
        bars = [{"date": f"2024-01-{day:02d}", "close": day} for day in range(31, 0, -1)]
        points = parse_historical_prices({"historical": bars}, "DAX")
        assert len(points) == HISTORY_LIMIT
        assert points[0].date == date(2024, 1, 31)

    def test_unknown_symbol_is_empty(self):
        assert parse_historical_prices({}, "NOPE") == []

    def test_treasury_maturity(self):
        points = parse_treasury_curve(CURVE, "year30")
        assert [(p.date, p.value) for p in points] == [(date(2024, 5, 3), 4.67)]
        assert points[0].raw == {"date": "2024-05-03", "year30": 4.67}

    def test_treasury_needs_a_list(self):
        with pytest.raises(TypeError):
            parse_treasury_curve({"Error Message": "x"}, "year10")


@pytest.mark.unit
@pytest.mark.asyncio
class TestFMPAdapter:

    async def test_commodity_history(self, build_adapter):
        adapter, transport = await build_adapter(FMPAdapter, lambda request: HISTORICAL)

        points = await adapter.fetch_data("Gold Price")

        assert len(points) == 2
        request = transport.requests[0]
        assert request.url.path == "/api/v3/historical-price-full/GCUSD"
        assert request.url.params["apikey"] == "test-key"
        await adapter.close()

    async def test_treasury_rate(self, build_adapter):
        adapter, transport = await build_adapter(FMPAdapter, lambda request: CURVE)

        points = await adapter.fetch_data("10 Year Treasury Rate")

        assert [p.value for p in points] == [4.51, 4.58]
        assert transport.requests[0].url.path == "/api/v3/treasury"
        await adapter.close()

    async def test_requires_key(self, registry, make_config):
        adapter = FMPAdapter(make_config("FMP"), registry)
        with pytest.raises(ConfigurationError, match="FMP_API_KEY"):
            await adapter.initialize()

    async def test_invalid_key_body(self, build_adapter):
        adapter, _ = await build_adapter(
            FMPAdapter,
            lambda request: {"Error Message": "Invalid API KEY. Please retry or visit our documentation."},
        )

        with pytest.raises(UpstreamError) as exc_info:
            await adapter.fetch_data("Nikkei 225")

        assert exc_info.value.retryable is False
        assert failure_kind(exc_info.value) == "UpstreamError"
        await adapter.close()

    async def test_daily_quota_counts_as_throttling(self, build_adapter):
        adapter, _ = await build_adapter(
            FMPAdapter,
            lambda request: {"Error Message": "Limit Reach . Please upgrade your plan."},
        )

        with pytest.raises(UpstreamError) as exc_info:
            await adapter.fetch_data("Silver Price")

        assert exc_info.value.status_code == 429
        assert exc_info.value.retryable is False
        assert failure_kind(exc_info.value) == "RateLimitError"
        await adapter.close()

    async def test_unit_map(self, build_adapter):
        adapter, _ = await build_adapter(FMPAdapter, lambda request: HISTORICAL)
        assert adapter.standardize_unit("USD per barrel") == "$/bbl"
        await adapter.close()
