"""
Centralized source configuration registry.

Consolidates all provider-specific runtime settings in one place:
- Base URLs
- Declared rate limits
- Required vs optional keys

Credentials are attached at boot by build_source_configs(); the resulting
SourceConfig objects are immutable.
"""

import re
from dataclasses import dataclass, replace
from typing import Optional, Dict, TYPE_CHECKING
from enum import Enum

if TYPE_CHECKING:
    from econ_ingest.core.config import Settings


class APIKeyRequirement(Enum):
    """Whether an API key is required, recommended, or not needed."""

    REQUIRED = "required"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"


@dataclass(frozen=True)
class SourceConfig:
    """Runtime configuration for a single provider."""

    source: str
    base_url: str
    api_key_requirement: APIKeyRequirement
    config_key: Optional[str] = None  # Field name in Settings (e.g., "fred_api_key")
    signup_url: Optional[str] = None

    # Rate limiting
    rate_limit_per_minute: Optional[int] = None
    rate_limit_interval: Optional[float] = None  # Seconds between requests

    # Request settings
    timeout_seconds: Optional[float] = None  # None = deployment default (http_timeout_seconds)
    user_agent: Optional[str] = None

    api_key: Optional[str] = None
    notes: Optional[str] = None

    @property
    def min_interval(self) -> float:
        """Minimum seconds between two granted calls for this source."""
        if self.rate_limit_interval is not None:
            return self.rate_limit_interval
        if self.rate_limit_per_minute:
            return 60.0 / self.rate_limit_per_minute
        return 0.0

    @property
    def requires_api_key(self) -> bool:
        return self.api_key_requirement is APIKeyRequirement.REQUIRED

    def __repr__(self) -> str:
        return (
            f"<SourceConfig(source={self.source}, base_url={self.base_url}, "
            f"api_key_present={self.api_key is not None}, "
            f"min_interval={self.min_interval:.3f})>"
        )


def normalize_source(source: str) -> str:
    """
    Canonicalise a source tag.

    "fred" -> "FRED", "alpha-vantage" -> "ALPHA_VANTAGE",
    "worldBank" -> "WORLD_BANK".
    """
    tag = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", "_", source.strip())
    tag = re.sub(r"[\s\-]+", "_", tag).upper()
    if tag in SOURCE_REGISTRY:
        return tag
    # "RapidAPI", "worldbank" and friends
    compact = tag.replace("_", "")
    for known in SOURCE_REGISTRY:
        if known.replace("_", "") == compact:
            return known
    return tag


# =============================================================================
# SOURCE REGISTRY - All provider configurations
# =============================================================================

SOURCE_REGISTRY: Dict[str, SourceConfig] = {
    # -------------------------------------------------------------------------
    # US MACRO DATA
    # -------------------------------------------------------------------------
    "FRED": SourceConfig(
        source="FRED",
        base_url="https://api.stlouisfed.org/fred",
        api_key_requirement=APIKeyRequirement.REQUIRED,
        config_key="fred_api_key",
        signup_url="https://fred.stlouisfed.org/docs/api/api_key.html",
        rate_limit_per_minute=120,
        notes="120 req/min per key.",
    ),
    "BLS": SourceConfig(
        source="BLS",
        base_url="https://api.bls.gov/publicAPI/v2/timeseries/data/",
        api_key_requirement=APIKeyRequirement.RECOMMENDED,
        config_key="bls_api_key",
        signup_url="https://data.bls.gov/registrationEngine/",
        rate_limit_interval=0.5,
        timeout_seconds=60.0,
        notes="Without key: 25 queries/day, 10 years. With key: 500/day, 20 years.",
    ),
    "TREASURY": SourceConfig(
        source="TREASURY",
        base_url="https://api.fiscaldata.treasury.gov/services/api/fiscal_service",
        api_key_requirement=APIKeyRequirement.OPTIONAL,
        rate_limit_per_minute=60,
        notes="Public API, no key.",
    ),
    "SEC": SourceConfig(
        source="SEC",
        base_url="https://data.sec.gov",
        api_key_requirement=APIKeyRequirement.OPTIONAL,
        rate_limit_interval=0.11,
        timeout_seconds=60.0,
        notes="10 req/sec max; a descriptive User-Agent is mandatory.",
    ),
    # -------------------------------------------------------------------------
    # MARKET DATA
    # -------------------------------------------------------------------------
    "ALPHA_VANTAGE": SourceConfig(
        source="ALPHA_VANTAGE",
        base_url="https://www.alphavantage.co/query",
        api_key_requirement=APIKeyRequirement.REQUIRED,
        config_key="alpha_vantage_api_key",
        signup_url="https://www.alphavantage.co/support/#api-key",
        rate_limit_per_minute=5,
        notes="Free tier: 5 req/min, 25 req/day.",
    ),
    "RAPIDAPI": SourceConfig(
        source="RAPIDAPI",
        base_url="https://bullbear-advisor.p.rapidapi.com",
        api_key_requirement=APIKeyRequirement.REQUIRED,
        config_key="rapidapi_key",
        signup_url="https://rapidapi.com/",
        rate_limit_per_minute=60,
        timeout_seconds=15.0,
    ),
    "FINNHUB": SourceConfig(
        source="FINNHUB",
        base_url="https://finnhub.io/api/v1",
        api_key_requirement=APIKeyRequirement.REQUIRED,
        config_key="finnhub_api_key",
        signup_url="https://finnhub.io/register",
        rate_limit_per_minute=60,
        notes="Free tier: 60 req/min.",
    ),
    "FMP": SourceConfig(
        source="FMP",
        base_url="https://financialmodelingprep.com/api/v3",
        api_key_requirement=APIKeyRequirement.REQUIRED,
        config_key="fmp_api_key",
        signup_url="https://site.financialmodelingprep.com/developer/docs",
        rate_limit_per_minute=10,
        notes="Free tier: 250 req/day.",
    ),
    # -------------------------------------------------------------------------
    # INTERNATIONAL DATA
    # -------------------------------------------------------------------------
    "WORLD_BANK": SourceConfig(
        source="WORLD_BANK",
        base_url="https://api.worldbank.org/v2",
        api_key_requirement=APIKeyRequirement.OPTIONAL,
        rate_limit_per_minute=60,
    ),
    "ECB": SourceConfig(
        source="ECB",
        base_url="https://data-api.ecb.europa.eu/service/data",
        api_key_requirement=APIKeyRequirement.OPTIONAL,
        rate_limit_per_minute=60,
    ),
    "IMF": SourceConfig(
        source="IMF",
        base_url="https://dataservices.imf.org/REST/SDMX_JSON.svc",
        api_key_requirement=APIKeyRequirement.OPTIONAL,
        rate_limit_per_minute=60,
        timeout_seconds=60.0,
        notes="SDMX JSON service is slow; allow long timeouts.",
    ),
}


def get_source_config(source: str) -> SourceConfig:
    """
    Get the declared configuration for a source.

    Raises:
        KeyError: If source is not registered
    """
    key = normalize_source(source)
    if key not in SOURCE_REGISTRY:
        raise KeyError(
            f"Unknown source: {source}. Available: {list(SOURCE_REGISTRY.keys())}"
        )
    return SOURCE_REGISTRY[key]


def build_source_configs(settings: "Settings") -> Dict[str, SourceConfig]:
    """Attach credentials and per-deployment settings to every registered source."""
    configs = {}
    for source, config in SOURCE_REGISTRY.items():
        overrides = {
            "api_key": settings.get_api_key(config.config_key),
            "timeout_seconds": config.timeout_seconds or settings.http_timeout_seconds,
        }
        if source == "SEC":
            overrides["user_agent"] = settings.sec_user_agent
        configs[source] = replace(config, **overrides)
    return configs
