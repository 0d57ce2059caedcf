"""
Unit tests for econ_ingest/core/api_registry.py
"""
import pytest

from econ_ingest.core.api_registry import (
    SOURCE_REGISTRY,
    build_source_configs,
    get_source_config,
    normalize_source,
)
from econ_ingest.core.config import Settings


@pytest.fixture
def settings(clean_env):
    return Settings(
        _env_file=None,
        database_url="sqlite:///:memory:",
        fred_api_key="fred-key",
        sec_user_agent="Tests tests@example.com",
        http_timeout_seconds=12.0,
    )


class TestNormalizeSource:

    @pytest.mark.parametrize("raw,expected", [
        ("fred", "FRED"),
        ("FRED", "FRED"),
        ("alpha-vantage", "ALPHA_VANTAGE"),
        ("alphaVantage", "ALPHA_VANTAGE"),
        ("worldBank", "WORLD_BANK"),
        ("worldbank", "WORLD_BANK"),
        ("world bank", "WORLD_BANK"),
        ("RapidAPI", "RAPIDAPI"),
        ("finnhub", "FINNHUB"),
        ("fmp", "FMP"),
        (" ecb ", "ECB"),
    ])
    def test_known_sources(self, raw, expected):
        assert normalize_source(raw) == expected

    def test_unknown_source_passes_through_uppercased(self):
        assert normalize_source("unknown-source") == "UNKNOWN_SOURCE"


class TestSourceConfig:

    def test_every_source_registered(self):
        assert set(SOURCE_REGISTRY) == {
            "FRED", "ALPHA_VANTAGE", "BLS", "WORLD_BANK", "ECB",
            "IMF", "TREASURY", "SEC", "RAPIDAPI", "FINNHUB", "FMP",
        }

    def test_min_interval_from_per_minute(self):
        assert SOURCE_REGISTRY["FRED"].min_interval == pytest.approx(0.5)
        assert SOURCE_REGISTRY["ALPHA_VANTAGE"].min_interval == pytest.approx(12.0)

    def test_min_interval_explicit(self):
        assert SOURCE_REGISTRY["SEC"].min_interval == pytest.approx(0.11)

    def test_requires_api_key(self):
        assert SOURCE_REGISTRY["FRED"].requires_api_key
        assert not SOURCE_REGISTRY["BLS"].requires_api_key
        assert not SOURCE_REGISTRY["ECB"].requires_api_key

    def test_repr_hides_key(self, settings):
        config = build_source_configs(settings)["FRED"]
        assert "fred-key" not in repr(config)
        assert "api_key_present=True" in repr(config)

    def test_get_source_config(self):
        assert get_source_config("world-bank").source == "WORLD_BANK"
        with pytest.raises(KeyError):
            get_source_config("nope")


class TestBuildSourceConfigs:

    def test_attaches_credentials(self, settings):
        configs = build_source_configs(settings)
        assert configs["FRED"].api_key == "fred-key"
        assert configs["ALPHA_VANTAGE"].api_key is None
        assert configs["TREASURY"].api_key is None

    def test_timeouts(self, settings):
        configs = build_source_configs(settings)
        assert configs["FRED"].timeout_seconds == 12.0
        assert configs["BLS"].timeout_seconds == 60.0

    def test_sec_user_agent(self, settings):
        assert build_source_configs(settings)["SEC"].user_agent == "Tests tests@example.com"

    def test_registry_is_not_mutated(self, settings):
        build_source_configs(settings)
        assert SOURCE_REGISTRY["FRED"].api_key is None
