"""
Finnhub source module.

Daily candles for US stock indices and crypto pairs, spot forex rates and
Finnhub's economic data series.

API Documentation: https://finnhub.io/docs/api
API Key: REQUIRED (free tier: 60 requests/minute)
"""

__all__ = ["adapter", "client", "metadata"]
