"""
Financial Modeling Prep (FMP) API client.

The key travels as the "apikey" query parameter. A rejected key or an
exhausted daily quota comes back as {"Error Message": ...}, sometimes with
HTTP 200, so the body is checked too.
"""
import logging
from typing import Any, Dict, List, Optional

from econ_ingest.core.api_errors import APIError, FatalError
from econ_ingest.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class FMPClient(BaseAPIClient):
    """HTTP client for the FMP v3 API."""

    SOURCE_NAME = "fmp"
    BASE_URL = "https://financialmodelingprep.com/api/v3"

    def _add_auth_to_params(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if self.api_key:
            params["apikey"] = self.api_key
        return params

    def _check_api_error(self, data: Any, resource_id: str) -> Optional[APIError]:
        if not isinstance(data, dict) or "Error Message" not in data:
            return None

        detail = self._redact(data["Error Message"])
        if "limit reach" in detail.lower():
            # Daily quota exhausted; throttling, but not retried
            return FatalError(
                message=f"FMP quota exhausted for {resource_id}: {detail}",
                source=self.SOURCE_NAME,
                status_code=429,
            )
        return FatalError(message=f"FMP refused {resource_id}: {detail}", source=self.SOURCE_NAME)

    async def get_historical_prices(self, symbol: str) -> Dict[str, Any]:
        """End-of-day price history, newest first: {"symbol", "historical": [...]}."""
        return await self.get(f"/historical-price-full/{symbol}", resource_id=symbol)

    async def get_treasury_rates(self) -> List[Dict[str, Any]]:
        """Daily Treasury yield curve, newest first, one record per date."""
        return await self.get("/treasury", resource_id="treasury")
