"""
SEC EDGAR source module.

Builds cross-company indicators (aggregate revenue, debt, cash, ...)
from XBRL companyfacts of a fixed basket of large filers.

API Documentation: https://www.sec.gov/edgar/sec-api-documentation
API Key: NOT REQUIRED (a descriptive User-Agent is mandatory)
"""

__all__ = ["adapter", "client", "metadata"]
