"""
ECB (European Central Bank) source module.

Provides euro-area policy rates, reference exchange rates, monetary
aggregates, HICP inflation and unemployment from the ECB Data Portal.

API Documentation: https://data.ecb.europa.eu/help/api/overview
API Key: NOT REQUIRED
"""

__all__ = ["adapter", "client", "metadata"]
