"""
Finnhub API client.

The key travels as the "token" query parameter. Finnhub answers a bad key
with 401 and a throttled key with 429, but some endpoints also return an
"error" object with HTTP 200, which is handled in _check_api_error.
"""
import logging
from typing import Any, Dict, Optional

from econ_ingest.core.api_errors import APIError, FatalError, RateLimitError
from econ_ingest.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class FinnhubClient(BaseAPIClient):
    """HTTP client for the Finnhub REST API."""

    SOURCE_NAME = "finnhub"
    BASE_URL = "https://finnhub.io/api/v1"

    def _add_auth_to_params(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if self.api_key:
            params["token"] = self.api_key
        return params

    def _check_api_error(self, data: Any, resource_id: str) -> Optional[APIError]:
        if not isinstance(data, dict) or "error" not in data:
            return None

        detail = self._redact(data["error"])
        if "limit" in detail.lower():
            return RateLimitError(
                message=f"Finnhub throttled {resource_id}: {detail}",
                source=self.SOURCE_NAME,
                retry_after=60,
            )
        return FatalError(message=f"Finnhub refused {resource_id}: {detail}", source=self.SOURCE_NAME)

    async def get_candles(self, symbol: str, start: int, end: int, crypto: bool = False) -> Dict[str, Any]:
        """
        Daily OHLCV candles between two unix timestamps.

        Stock and crypto candles share a payload shape but not an endpoint.
        """
        path = "/crypto/candle" if crypto else "/stock/candle"
        params = {"symbol": symbol, "resolution": "D", "from": start, "to": end}
        return await self.get(path, params=params, resource_id=symbol)

    async def get_forex_rates(self, base: str) -> Dict[str, Any]:
        return await self.get("/forex/rates", params={"base": base}, resource_id=f"forex:{base}")

    async def get_economic_data(self, code: str) -> Dict[str, Any]:
        return await self.get("/economic/data", params={"indicator": code}, resource_id=code)
