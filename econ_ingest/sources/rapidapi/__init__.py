"""
RapidAPI Bull/Bear Advisor source module.

Derives daily market-sentiment indicators from bull/bear stock signals.

API Documentation: https://rapidapi.com/ (Bull/Bear Advisor)
API Key: REQUIRED (X-RapidAPI-Key header)
"""

__all__ = ["adapter", "client", "metadata"]
