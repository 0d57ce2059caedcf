"""
ECB Data Portal client (SDMX 2.1 REST, jsondata format).
"""
import logging
from typing import Any, Dict, Optional

from econ_ingest.core.api_errors import NotFoundError
from econ_ingest.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class ECBClient(BaseAPIClient):
    """HTTP client for the ECB Data Portal."""

    SOURCE_NAME = "ecb"
    BASE_URL = "https://data-api.ecb.europa.eu/service/data"

    async def get_series(
        self, flow: str, key: str, last_n_observations: int = 100
    ) -> Optional[Dict[str, Any]]:
        """
        Fetch the latest observations of one series.

        Returns:
            The SDMX-JSON payload, or None when the ECB has no data (HTTP 404)
        """
        params = {"lastNObservations": last_n_observations, "format": "jsondata"}
        try:
            return await self.get(f"{flow}/{key}", params=params, resource_id=f"{flow}/{key}")
        except NotFoundError:
            logger.warning(f"[ecb] No data for {flow}/{key}")
            return None
