"""
IMF (International Monetary Fund) source module.

Provides World Economic Outlook (annual) and International Financial
Statistics (monthly) series via the SDMX_JSON CompactData service.

API Documentation: https://datahelp.imf.org/knowledgebase/articles/667681
API Key: NOT REQUIRED
"""

__all__ = ["adapter", "client", "metadata"]
