"""
FRED metadata utilities.

Handles:
- Core series catalog
- Unit vocabulary
- Observation parsing
"""
import logging
from datetime import datetime
from typing import Any, Dict, List

from econ_ingest.sources.base import FetchedPoint, IndicatorDefinition, parse_float

logger = logging.getLogger(__name__)

SOURCE = "FRED"


def _series(series_id: str, name: str, category: str, frequency: str, unit: str, description: str) -> IndicatorDefinition:
    return IndicatorDefinition(
        name=name,
        source=SOURCE,
        series_id=series_id,
        category=category,
        frequency=frequency,
        unit=unit,
        description=description,
    )


CORE_INDICATORS: List[IndicatorDefinition] = [
    # Weekly
    _series("ICSA", "Initial Claims", "employment", "weekly", "Number",
            "Initial claims for unemployment insurance"),
    _series("CCSA", "Continuing Claims", "employment", "weekly", "Number",
            "Insured unemployment (continued claims)"),
    _series("CPFF", "Commercial Paper Outstanding", "monetary_policy", "weekly", "Percent",
            "3-month commercial paper minus federal funds rate"),
    _series("TOTBKCR", "Assets of Commercial Banks", "monetary_policy", "weekly", "Billions of U.S. Dollars",
            "Bank credit, all commercial banks"),
    # Monthly
    _series("HOUST", "Housing Starts", "housing", "monthly", "Thousands of Units",
            "New privately-owned housing units started"),
    _series("UNRATE", "Unemployment Rate", "employment", "monthly", "Percent",
            "Civilian unemployment rate"),
    _series("CPIAUCSL", "Consumer Price Index", "inflation", "monthly", "Index 1982-1984=100",
            "CPI for all urban consumers: all items"),
    _series("FEDFUNDS", "Federal Funds Rate", "monetary_policy", "monthly", "Percent",
            "Effective federal funds rate"),
    _series("PAYEMS", "Nonfarm Payrolls", "employment", "monthly", "Thousands of Persons",
            "All employees, total nonfarm"),
    # Quarterly
    _series("GDP", "Gross Domestic Product", "economic_growth", "quarterly", "Billions of Dollars",
            "Gross domestic product, seasonally adjusted annual rate"),
]


UNIT_MAP: Dict[str, str] = {
    "Percent": "%",
    "Thousands of Persons": "K persons",
    "Thousands of Units": "K units",
    "Billions of Dollars": "$B",
    "Billions of U.S. Dollars": "$B",
    "Millions of Dollars": "$M",
    "Index": "Index",
    "Index 1982-1984=100": "Index",
    "Rate": "Rate",
    "Number": "Count",
    "Seasonally Adjusted Annual Rate": "SAAR",
    "Not Seasonally Adjusted": "NSA",
    "Seasonally Adjusted": "SA",
}


def parse_observations(api_response: Dict[str, Any], series_id: str) -> List[FetchedPoint]:
    """
    Parse a FRED /series/observations response.

    FRED marks missing observations with value "."; those are skipped.

    Args:
        api_response: Raw API response dict
        series_id: FRED series ID (for logging)

    Returns:
        Parsed points in response order
    """
    points = []
    for obs in api_response.get("observations", []):
        date_str = obs.get("date")
        if not date_str:
            logger.warning(f"Skipping {series_id} observation with missing date: {obs}")
            continue

        value = parse_float(obs.get("value"))
        if value is None:
            continue

        points.append(
            FetchedPoint(
                date=datetime.strptime(date_str, "%Y-%m-%d").date(),
                value=value,
                raw={"series_id": series_id, **obs},
            )
        )
    return points
