"""
World Bank Indicators API v2 client.
"""
import logging
from typing import Any, Dict, Optional

from econ_ingest.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class WorldBankClient(BaseAPIClient):
    """HTTP client for the World Bank indicators API (no key)."""

    SOURCE_NAME = "world_bank"
    BASE_URL = "https://api.worldbank.org/v2"

    def _add_auth_to_params(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params.setdefault("format", "json")
        return params

    async def get_indicator_data(
        self,
        indicator_id: str,
        country: str = "US",
        start_year: Optional[int] = None,
        end_year: Optional[int] = None,
        per_page: int = 1000,
    ) -> Any:
        """
        Fetch one indicator for one country.

        Returns:
            The raw [meta, rows] payload
        """
        params: Dict[str, Any] = {"per_page": per_page}
        if start_year and end_year:
            params["date"] = f"{start_year}:{end_year}"

        return await self.get(
            f"country/{country}/indicator/{indicator_id}",
            params=params,
            resource_id=f"{country}/{indicator_id}",
        )
