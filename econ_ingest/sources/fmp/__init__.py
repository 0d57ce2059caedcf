"""
Financial Modeling Prep source module.

Commodity spot prices, international index levels and the daily Treasury
yield curve.

API Documentation: https://site.financialmodelingprep.com/developer/docs
API Key: REQUIRED (free tier: 250 requests/day)
"""

__all__ = ["adapter", "client", "metadata"]
