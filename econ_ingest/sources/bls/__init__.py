"""
BLS (Bureau of Labor Statistics) source module.

Provides access to:
- CPS labor force statistics (unemployment, participation)
- CPI and PPI price indexes
- CES real earnings

API Documentation: https://www.bls.gov/developers/api_signature_v2.htm
API Key: OPTIONAL (raises quotas from 25 to 500 queries/day)
"""

__all__ = ["adapter", "client", "metadata"]
