"""
IMF SDMX_JSON CompactData client.

URL format:
CompactData/{database}/{frequency}/{country}/{indicator}/{start}/{end}
"""
import logging
from typing import Any, Dict, Optional

from econ_ingest.core.api_errors import NotFoundError
from econ_ingest.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class IMFClient(BaseAPIClient):
    """HTTP client for IMF data services."""

    SOURCE_NAME = "imf"
    BASE_URL = "https://dataservices.imf.org/REST/SDMX_JSON.svc"

    FREQUENCIES = {"WEO": "A", "IFS": "M"}

    async def get_compact_data(
        self,
        database: str,
        country: str,
        indicator: str,
        start_year: int,
        end_year: int,
    ) -> Optional[Dict[str, Any]]:
        """
        Fetch one indicator for one country.

        Returns:
            The CompactData payload, or None when the series does not exist (HTTP 404)
        """
        frequency = self.FREQUENCIES[database]
        path = f"CompactData/{database}/{frequency}/{country}/{indicator}/{start_year}/{end_year}"
        try:
            return await self.get(path, resource_id=f"{database}:{indicator}.{country}")
        except NotFoundError:
            logger.warning(f"[imf] {database} series {indicator} not found for {country}")
            return None
