"""
Treasury Fiscal Data API client.
"""
import logging
from datetime import date, timedelta
from typing import Any, Dict

from econ_ingest.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class TreasuryClient(BaseAPIClient):
    """HTTP client for api.fiscaldata.treasury.gov."""

    SOURCE_NAME = "treasury"
    BASE_URL = "https://api.fiscaldata.treasury.gov/services/api/fiscal_service"

    async def get_records(
        self, endpoint: str, page_size: int = 50, history_days: int = 730
    ) -> Dict[str, Any]:
        """
        Fetch the newest records of an endpoint.

        Args:
            endpoint: Dataset path (e.g., "/v1/accounting/mts/mts_table_4")
            page_size: Records per page
            history_days: Only records on or after today minus this many days
        """
        since = date.today() - timedelta(days=history_days)
        params = {
            "sort": "-record_date",
            "page[size]": page_size,
            "filter": f"record_date:gte:{since.isoformat()}",
        }
        return await self.get(endpoint, params=params, resource_id=endpoint)
