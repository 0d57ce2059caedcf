"""
RapidAPI Bull/Bear Advisor client.

Authentication is header-based (X-RapidAPI-Key / X-RapidAPI-Host).
"""
import logging
from typing import Any, Dict, Optional

from econ_ingest.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class RapidAPIClient(BaseAPIClient):
    """HTTP client for the Bull/Bear Advisor API on RapidAPI."""

    SOURCE_NAME = "rapidapi"
    BASE_URL = "https://bullbear-advisor.p.rapidapi.com"
    API_HOST = "bullbear-advisor.p.rapidapi.com"

    def _build_headers(self) -> Dict[str, str]:
        headers = super()._build_headers()
        headers["X-RapidAPI-Host"] = self.API_HOST
        if self.api_key:
            headers["X-RapidAPI-Key"] = self.api_key
        return headers

    async def get_signals(self, endpoint: str, min_volume: Optional[int] = None) -> Any:
        """
        Fetch bull/bear signals for one tier.

        Args:
            endpoint: "/basic-signals", "/pro-signals" or "/ultra-signals"
            min_volume: Volume filter for the pro and ultra tiers
        """
        params: Dict[str, Any] = {}
        if min_volume is not None:
            params["minVolume"] = min_volume
        return await self.get(endpoint, params=params, resource_id=endpoint)
