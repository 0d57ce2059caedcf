"""
Alpha Vantage source module.

Daily closing prices for broad-market ETFs and volatility products.

API Documentation: https://www.alphavantage.co/documentation/
API Key: REQUIRED (free tier: 5 requests/minute, 25/day)
"""

__all__ = ["adapter", "client", "metadata"]
