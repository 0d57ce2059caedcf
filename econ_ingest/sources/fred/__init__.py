"""
FRED (Federal Reserve Economic Data) source module.

Provides access to Federal Reserve economic data including:
- Weekly claims and commercial paper series
- Labor market, prices and policy rates
- GDP

A free API key is required: https://fred.stlouisfed.org/docs/api/api_key.html
"""

__all__ = ["adapter", "client", "metadata"]
