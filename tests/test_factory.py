"""
Unit tests for econ_ingest/sources/factory.py

Covers concurrent initialization with failure isolation and dispatch by
source tag.
"""
import asyncio

import pytest

from econ_ingest.core.api_errors import AdapterNotFoundError, ConfigurationError
from econ_ingest.core.api_registry import SOURCE_REGISTRY
from econ_ingest.sources.base import DataSourceAdapter, FetchedPoint
from econ_ingest.sources.ecb.adapter import ECBAdapter
from econ_ingest.sources.factory import ADAPTER_CLASSES, AdapterFactory
from econ_ingest.sources.fred.adapter import FREDAdapter


class BrokenAdapter(DataSourceAdapter):
    SOURCE = "ECB"

    async def initialize(self):
        raise RuntimeError("ECB bootstrap exploded")

    def _create_client(self):
        raise NotImplementedError

    async def _fetch(self, definition):
        return []


class WaitingAdapter(FREDAdapter):
    """Finishes initializing only once OpeningAdapter has started."""

    gate: asyncio.Event

    async def initialize(self):
        await asyncio.wait_for(WaitingAdapter.gate.wait(), timeout=1.0)
        await super().initialize()


class OpeningAdapter(ECBAdapter):

    async def initialize(self):
        WaitingAdapter.gate.set()
        await super().initialize()


def _configs(make_config, **keys):
    return {
        source: make_config(source, api_key=keys.get(source))
        for source in SOURCE_REGISTRY
    }


@pytest.mark.unit
@pytest.mark.asyncio
class TestInitialize:

    async def test_missing_keys_mark_sources_unavailable(self, registry, make_config):
        factory = AdapterFactory(registry)

        status = await factory.initialize(_configs(make_config, FRED="k"))

        assert status["FRED"] is True
        assert status["BLS"] is True
        assert status["ALPHA_VANTAGE"] is False
        assert status["RAPIDAPI"] is False
        assert set(factory.unavailable_sources()) == {"ALPHA_VANTAGE", "RAPIDAPI", "FINNHUB", "FMP"}
        assert "ALPHA_VANTAGE_API_KEY" in factory.unavailable_sources()["ALPHA_VANTAGE"]
        assert factory.available_sources() == sorted(
            ["BLS", "ECB", "FRED", "IMF", "SEC", "TREASURY", "WORLD_BANK"]
        )
        await factory.close()

    async def test_one_failing_adapter_does_not_affect_others(self, registry, make_config):
        classes = dict(ADAPTER_CLASSES, ECB=BrokenAdapter)
        factory = AdapterFactory(registry, adapter_classes=classes)

        status = await factory.initialize(_configs(make_config, FRED="k"))

        assert status["ECB"] is False
        assert factory.unavailable_sources()["ECB"] == "ECB bootstrap exploded"
        assert status["FRED"] is True
        assert status["IMF"] is True
        await factory.close()

    async def test_missing_config(self, registry, make_config):
        factory = AdapterFactory(registry)

        status = await factory.initialize({"FRED": make_config("FRED", api_key="k")})

        assert status["FRED"] is True
        assert factory.unavailable_sources()["ECB"] == "No source configuration"
        await factory.close()

    async def test_initializes_concurrently(self, registry, make_config):
        WaitingAdapter.gate = asyncio.Event()
        factory = AdapterFactory(
            registry, adapter_classes={"FRED": WaitingAdapter, "ECB": OpeningAdapter}
        )

        status = await factory.initialize(
            {"FRED": make_config("FRED", api_key="k"), "ECB": make_config("ECB")}
        )

        assert status == {"FRED": True, "ECB": True}
        await factory.close()


@pytest.mark.unit
@pytest.mark.asyncio
class TestDispatch:

    async def test_unknown_source(self, registry, make_config):
        factory = AdapterFactory(registry)
        await factory.initialize(_configs(make_config, FRED="k"))

        with pytest.raises(AdapterNotFoundError) as exc_info:
            factory.get_adapter("unknown-source")

        assert exc_info.value.requested_source == "unknown-source"
        await factory.close()

    async def test_unavailable_source(self, registry, make_config):
        factory = AdapterFactory(registry)
        await factory.initialize(_configs(make_config))

        with pytest.raises(ConfigurationError, match="unavailable"):
            factory.get_adapter("FRED")
        await factory.close()

    async def test_lookup_normalizes_tag(self, registry, make_config):
        factory = AdapterFactory(registry)
        await factory.initialize(_configs(make_config))

        assert isinstance(factory.get_adapter("world-bank"), DataSourceAdapter)
        assert factory.get_adapter("worldBank") is factory.get_adapter("WORLD_BANK")
        await factory.close()

    async def test_fetch_data_delegates(self, registry, make_config, mock_http):
        transport = mock_http(lambda request: {"observations": [{"date": "2024-01-01", "value": "1.5"}]})
        factory = AdapterFactory(registry, adapter_classes={"FRED": FREDAdapter})
        await factory.initialize(
            {"FRED": make_config("FRED", api_key="k")},
            http_options={"transport": transport.transport, "max_retries": 1},
        )

        points = await factory.fetch_data("fred", "Unemployment Rate")

        assert points[0].value == 1.5
        assert isinstance(points[0], FetchedPoint)
        await factory.close()

    async def test_standardize_unit(self, registry, make_config):
        factory = AdapterFactory(registry)
        await factory.initialize(_configs(make_config))

        assert factory.standardize_unit("TREASURY", "Millions of Dollars") == "$M"
        await factory.close()

    async def test_core_indicators_cover_all_registered_sources(self, registry):
        factory = AdapterFactory(registry)
        assert len(factory.get_all_core_indicators()) == len(registry)

    async def test_close_releases_adapters(self, registry, make_config):
        factory = AdapterFactory(registry)
        await factory.initialize(_configs(make_config, FRED="k"))

        await factory.close()

        assert factory.available_sources() == []
