"""
U.S. Treasury Fiscal Data source module.

Provides Monthly Treasury Statement, Daily Treasury Statement and
Monthly Statement of the Public Debt series.

API Documentation: https://fiscaldata.treasury.gov/api-documentation/
API Key: NOT REQUIRED
"""

__all__ = ["adapter", "client", "metadata"]
