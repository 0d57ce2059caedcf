"""
Alpha Vantage API client.

Every call goes to a single query endpoint; the "function" parameter
selects the dataset. Throttling is reported in the JSON body ("Note")
with HTTP 200, so it is detected in _check_api_error.
"""
import logging
from typing import Any, Dict, Optional

from econ_ingest.core.api_errors import APIError, FatalError, RateLimitError, ValidationError
from econ_ingest.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class AlphaVantageClient(BaseAPIClient):
    """HTTP client for the Alpha Vantage query API."""

    SOURCE_NAME = "alpha_vantage"
    BASE_URL = "https://www.alphavantage.co/query"

    def _add_auth_to_params(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if self.api_key:
            params["apikey"] = self.api_key
        return params

    def _check_api_error(self, data: Any, resource_id: str) -> Optional[APIError]:
        if not isinstance(data, dict):
            return None

        if "Error Message" in data:
            return ValidationError(
                message=f"Alpha Vantage rejected {resource_id}: {self._redact(data['Error Message'])}",
                source=self.SOURCE_NAME,
            )

        if "Note" in data:
            return RateLimitError(
                message=f"Alpha Vantage throttled {resource_id}: {self._redact(data['Note'])}",
                source=self.SOURCE_NAME,
                retry_after=60,
            )

        # Daily quota exhausted or premium-only endpoint
        if "Information" in data:
            return FatalError(
                message=f"Alpha Vantage refused {resource_id}: {self._redact(data['Information'])}",
                source=self.SOURCE_NAME,
            )

        return None

    async def get_daily_series(self, symbol: str, outputsize: str = "compact") -> Dict[str, Any]:
        """
        Fetch TIME_SERIES_DAILY for a symbol.

        Args:
            symbol: Ticker (e.g., "SPY")
            outputsize: "compact" (latest 100 bars) or "full"
        """
        params = {
            "function": "TIME_SERIES_DAILY",
            "symbol": symbol,
            "outputsize": outputsize,
        }
        return await self.get("", params=params, resource_id=symbol)
