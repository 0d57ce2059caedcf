"""
BLS public data API v2 client.

Series are requested with a POST whose JSON body carries the series ids,
the year window and, when configured, the registration key. BLS answers
HTTP 200 even for failed requests; the outcome is in the "status" field.

https://www.bls.gov/developers/api_signature_v2.htm
"""
import logging
from typing import Any, Dict, List, Optional

from econ_ingest.core.api_errors import APIError, FatalError, ValidationError
from econ_ingest.core.http_client import BaseAPIClient

logger = logging.getLogger(__name__)

SUCCESS_STATUS = "REQUEST_SUCCEEDED"


class BLSClient(BaseAPIClient):
    """POST client for the BLS timeseries endpoint."""

    SOURCE_NAME = "bls"
    BASE_URL = "https://api.bls.gov/publicAPI/v2/timeseries/data/"

    # Years per request: registered keys get 20, anonymous callers 10
    MAX_YEARS = {True: 20, False: 10}

    def _check_api_error(self, data: Any, resource_id: str) -> Optional[APIError]:
        if not isinstance(data, dict) or data.get("status") == SUCCESS_STATUS:
            return None

        messages = data.get("message") or []
        if not isinstance(messages, list):
            messages = [messages]
        detail = self._redact("; ".join(str(m) for m in messages))

        if "invalid series" in detail.lower():
            return ValidationError(message=f"BLS rejected {resource_id}: {detail}", source=self.SOURCE_NAME)

        # REQUEST_NOT_PROCESSED means the daily threshold was hit
        return FatalError(
            message=f"BLS {data.get('status') or 'unknown status'} for {resource_id}: {detail}",
            source=self.SOURCE_NAME,
        )

    def _year_window(self, start_year: int, end_year: int) -> Dict[str, str]:
        max_years = self.MAX_YEARS[bool(self.api_key)]
        if end_year - start_year > max_years:
            logger.debug(f"BLS window clamped to {max_years} years")
            start_year = end_year - max_years
        return {"startyear": str(start_year), "endyear": str(end_year)}

    async def fetch_series(self, series_ids: List[str], start_year: int, end_year: int) -> Dict[str, Any]:
        """
        Fetch observations for series_ids between start_year and end_year.

        The key goes in the body as "registrationkey"; without one BLS still
        answers, with a lower daily quota and a shorter window.
        """
        payload: Dict[str, Any] = {"seriesid": list(series_ids), **self._year_window(start_year, end_year)}
        if self.api_key:
            payload["registrationkey"] = self.api_key

        return await self.post("", json_body=payload, resource_id=",".join(series_ids))
