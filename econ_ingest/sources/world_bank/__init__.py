"""
World Bank source module.

World Development Indicators for the United States: output, prices,
population, labour, investment, debt and trade.

API Documentation: https://datahelpdesk.worldbank.org/knowledgebase/topics/125589
API Key: NOT REQUIRED
"""

__all__ = ["adapter", "client", "metadata"]
