"""
Data source adapter contract.

Every provider implements one DataSourceAdapter subclass. The base class
owns the shared steps (credential check, catalog lookup, unit lookup,
error wrapping) so a provider only supplies its client and its parser.
"""
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, TYPE_CHECKING

from econ_ingest.core.api_errors import (
    APIError,
    ConfigurationError,
    UpstreamError,
)
from econ_ingest.core.api_registry import SourceConfig
from econ_ingest.core.http_client import BaseAPIClient

if TYPE_CHECKING:
    from econ_ingest.sources.registry import IndicatorRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndicatorDefinition:
    """
    Catalog entry: canonical indicator name -> provider series.

    options carries provider-specific lookup details (ECB dataflow,
    Treasury field, SEC aggregation method, ...).
    """

    name: str
    source: str
    series_id: str
    category: str
    frequency: str
    unit: Optional[str] = None
    description: str = ""
    options: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class FetchedPoint:
    """One normalized observation returned by an adapter."""

    date: date
    value: float
    raw: Optional[Dict[str, Any]] = None


class DataSourceAdapter(ABC):
    """
    Base class for provider adapters.

    Subclasses should:
    - Set SOURCE and UNIT_MAP class attributes
    - Implement _create_client() and _fetch()
    """

    SOURCE: str = "UNKNOWN"
    UNIT_MAP: Dict[str, str] = {}

    def __init__(
        self,
        config: SourceConfig,
        registry: "IndicatorRegistry",
        http_options: Optional[Mapping[str, Any]] = None,
    ):
        """
        Args:
            config: Provider configuration (key, base URL, limits)
            registry: Catalog used to resolve indicator names
            http_options: Extra BaseAPIClient kwargs (max_retries, transport, ...)
        """
        self.config = config
        self.registry = registry
        self.http_options = dict(http_options or {})
        self.client: Optional[BaseAPIClient] = None

    @property
    def is_initialized(self) -> bool:
        return self.client is not None

    async def initialize(self) -> None:
        """
        Construct the provider client from SourceConfig.

        Raises:
            ConfigurationError: If the provider needs a key and none is configured
        """
        if self.config.requires_api_key and not self.config.api_key:
            env_name = (self.config.config_key or "api_key").upper()
            hint = f" Get one at: {self.config.signup_url}" if self.config.signup_url else ""
            raise ConfigurationError(
                f"{env_name} is required for {self.SOURCE} ingestion.{hint}",
                source=self.SOURCE,
                missing_config=env_name,
            )

        self.client = self._create_client()
        logger.info(f"Initialized {self.SOURCE} adapter")

    @abstractmethod
    def _create_client(self) -> BaseAPIClient:
        """Build the HTTP client for this provider."""

    def _client_kwargs(self, **overrides: Any) -> Dict[str, Any]:
        """Common BaseAPIClient arguments derived from SourceConfig."""
        kwargs: Dict[str, Any] = {
            "api_key": self.config.api_key,
            "base_url": self.config.base_url,
            "timeout": self.config.timeout_seconds or BaseAPIClient.DEFAULT_TIMEOUT,
        }
        kwargs.update(self.http_options)
        kwargs.update(overrides)
        return kwargs

    def standardize_unit(self, unit: str) -> str:
        """Map a provider unit string to its canonical token; unknown input passes through."""
        if not isinstance(unit, str):
            return unit
        return self.UNIT_MAP.get(unit.strip(), unit)

    async def fetch_data(self, indicator_name: str) -> List[FetchedPoint]:
        """
        Fetch normalized observations for a catalogued indicator.

        Raises:
            ConfigNotFoundError: If the indicator is not in this source's catalog
            ConfigurationError: If the adapter has not been initialized
            UpstreamError: On provider failure or malformed payload
        """
        definition = self.registry.get(self.SOURCE, indicator_name)
        if self.client is None:
            raise ConfigurationError(
                f"{self.SOURCE} adapter used before initialize()", source=self.SOURCE
            )

        try:
            points = await self._fetch(definition)
        except APIError as e:
            raise UpstreamError.wrap(e, self.SOURCE) from e
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
            raise UpstreamError.wrap(e, self.SOURCE) from e

        logger.debug(f"[{self.SOURCE}] {indicator_name}: {len(points)} points")
        return points

    @abstractmethod
    async def _fetch(self, definition: IndicatorDefinition) -> List[FetchedPoint]:
        """Call the provider and parse its payload into points."""

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
            self.client = None


_PERIOD_PATTERNS = [
    (re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"), lambda m: date(int(m[1]), int(m[2]), int(m[3]))),
    (re.compile(r"^(\d{4})-?M?(\d{2})$"), lambda m: date(int(m[1]), int(m[2]), 1)),
    (re.compile(r"^(\d{4})-?Q([1-4])$"), lambda m: date(int(m[1]), (int(m[2]) - 1) * 3 + 1, 1)),
    (re.compile(r"^(\d{4})-?S([12])$"), lambda m: date(int(m[1]), 1 if m[2] == "1" else 7, 1)),
    (re.compile(r"^(\d{4})$"), lambda m: date(int(m[1]), 1, 1)),
]


def parse_period(period: str) -> Optional[date]:
    """
    Convert an SDMX-style time period to the first day of that period.

    Accepts YYYY-MM-DD, YYYY-MM, YYYY-MNN, YYYY-Qn, YYYYQn, YYYY-Sn and YYYY.
    Returns None for anything else.
    """
    text = (period or "").strip().upper()
    for pattern, build in _PERIOD_PATTERNS:
        match = pattern.match(text)
        if match:
            try:
                return build(match)
            except ValueError:
                return None
    return None


def parse_float(value: Any) -> Optional[float]:
    """
    Parse a provider value, treating the usual missing-data markers as None.

    Handles "." (FRED), "-" (BLS), blanks, nulls and thousands separators.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip().replace(",", "")
        if text in ("", ".", "-", "null", "NaN", "nan", "N/A"):
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    if number != number:  # NaN
        return None
    return number
