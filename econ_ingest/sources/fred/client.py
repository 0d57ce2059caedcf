"""
FRED API client.

Official FRED API documentation:
https://fred.stlouisfed.org/docs/api/fred/

Rate limits:
- With API key (free): 120 requests per minute
- API key available at: https://fred.stlouisfed.org/docs/api/api_key.html
"""
import logging
from typing import Any, Dict, Optional

from econ_ingest.core.api_errors import FatalError, RetryableError, APIError
from econ_ingest.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class FREDClient(BaseAPIClient):
    """
    HTTP client for the FRED API.

    Inherits retry logic, backoff, and error handling from BaseAPIClient.
    """

    SOURCE_NAME = "fred"
    BASE_URL = "https://api.stlouisfed.org/fred"

    def _add_auth_to_params(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params["file_type"] = "json"
        if self.api_key:
            params["api_key"] = self.api_key
        return params

    def _check_api_error(self, data: Any, resource_id: str) -> Optional[APIError]:
        """FRED reports errors as {"error_code": 400, "error_message": "..."}."""
        if not isinstance(data, dict) or "error_code" not in data:
            return None

        error_code = data.get("error_code")
        error_message = self._redact(data.get("error_message", "Unknown error"))
        if error_code in (400, 404):
            return FatalError(
                message=f"API error {error_code}: {error_message}",
                source=self.SOURCE_NAME,
                status_code=error_code,
            )
        return RetryableError(
            message=f"API error {error_code}: {error_message}",
            source=self.SOURCE_NAME,
            status_code=error_code,
        )

    async def get_series_observations(
        self,
        series_id: str,
        limit: int = 50,
        sort_order: str = "desc",
        observation_start: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Fetch observations for a FRED series.

        Args:
            series_id: FRED series ID (e.g., "UNRATE", "GDP")
            limit: Maximum observations to return
            sort_order: "desc" returns newest first
            observation_start: Optional start date (YYYY-MM-DD)

        Returns:
            Dict containing API response with observations
        """
        params: Dict[str, Any] = {
            "series_id": series_id,
            "limit": limit,
            "sort_order": sort_order,
        }
        if observation_start:
            params["observation_start"] = observation_start

        return await self.get("series/observations", params=params, resource_id=series_id)
