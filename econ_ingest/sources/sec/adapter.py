"""
SEC adapter: cross-company aggregates from XBRL companyfacts.
"""
from typing import List

from econ_ingest.core.api_errors import UpstreamError
from econ_ingest.sources.base import DataSourceAdapter, FetchedPoint, IndicatorDefinition
from econ_ingest.sources.sec.client import SECClient
from econ_ingest.sources.sec.metadata import MAJOR_COMPANY_CIKS, UNIT_MAP, aggregate_companies


class SECAdapter(DataSourceAdapter):
    SOURCE = "SEC"
    UNIT_MAP = UNIT_MAP

    def _create_client(self) -> SECClient:
        return SECClient(
            **self._client_kwargs(
                user_agent=self.config.user_agent,
                rate_limit_interval=self.config.min_interval,
            )
        )

    async def _fetch(self, definition: IndicatorDefinition) -> List[FetchedPoint]:
        ciks = list(definition.options.get("companies") or MAJOR_COMPANY_CIKS)
        company_facts = await self.client.get_company_facts_batch(ciks)
        if not any(company_facts.values()):
            raise UpstreamError(
                f"No companyfacts could be fetched for {definition.name}", source=self.SOURCE
            )
        return aggregate_companies(company_facts, definition)
