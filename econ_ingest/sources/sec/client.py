"""
SEC EDGAR XBRL client.

SEC asks for at most 10 requests/second and a User-Agent naming the
requester: https://www.sec.gov/os/accessing-edgar-data
"""
import logging
from typing import Any, Dict, List, Optional

from econ_ingest.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)


class SECClient(BaseAPIClient):
    """HTTP client for data.sec.gov."""

    SOURCE_NAME = "sec"
    BASE_URL = "https://data.sec.gov"

    def __init__(self, user_agent: Optional[str] = None, **kwargs: Any):
        super().__init__(**kwargs)
        self.user_agent = user_agent

    def _build_headers(self) -> Dict[str, str]:
        headers = super()._build_headers()
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        return headers

    @staticmethod
    def format_cik(cik: str) -> str:
        return str(cik).zfill(10)

    async def get_company_facts(self, cik: str) -> Dict[str, Any]:
        cik = self.format_cik(cik)
        return await self.get(f"api/xbrl/companyfacts/CIK{cik}.json", resource_id=f"CIK{cik}")

    async def get_company_facts_batch(self, ciks: List[str]) -> Dict[str, Optional[Dict[str, Any]]]:
        """
        Fetch companyfacts for several companies.

        A company that fails maps to None instead of failing the batch.
        """
        return await self.fetch_multiple(ciks, self.get_company_facts)
