"""
BLS metadata utilities.

Handles:
- Core series catalog
- Unit vocabulary
- Period code -> date conversion
- Response parsing
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

from econ_ingest.sources.base import FetchedPoint, IndicatorDefinition, parse_float

logger = logging.getLogger(__name__)

SOURCE = "BLS"

# Years of history requested per call
HISTORY_YEARS = 5


def _series(series_id: str, name: str, category: str, unit: str, description: str) -> IndicatorDefinition:
    return IndicatorDefinition(
        name=name,
        source=SOURCE,
        series_id=series_id,
        category=category,
        frequency="monthly",
        unit=unit,
        description=description,
    )


# Names that collide with FRED carry a "BLS" prefix
CORE_INDICATORS: List[IndicatorDefinition] = [
    _series("LNS14000000", "BLS Unemployment Rate", "employment", "Percent",
            "Unemployment rate, 16 years and over, seasonally adjusted"),
    _series("CUUR0000SA0", "BLS Consumer Price Index", "inflation", "Index 1982-84=100",
            "CPI-U, all items, US city average"),
    _series("CUUR0000SA0L1E", "Core Consumer Price Index", "inflation", "Index 1982-84=100",
            "CPI-U, all items less food and energy"),
    _series("CUUR0000SAF", "Food CPI", "inflation", "Index 1982-84=100",
            "CPI-U, food"),
    _series("CUUR0000SAE", "Energy CPI", "inflation", "Index 1982-84=100",
            "CPI-U, energy"),
    _series("LNS11300000", "Labor Force Participation Rate", "employment", "Percent",
            "Civilian labor force participation rate"),
    _series("LNS12300000", "Employment Population Ratio", "employment", "Percent",
            "Employment-population ratio"),
    _series("WPUFD49207", "Producer Price Index", "inflation", "Index 1982=100",
            "PPI final demand: finished goods"),
    _series("CES0500000049", "Real Average Hourly Earnings", "employment", "1982-1984 Dollars",
            "Real average hourly earnings, total private"),
]


UNIT_MAP: Dict[str, str] = {
    "Percent": "%",
    "Thousands": "K",
    "12-month percent change": "12m %chg",
    "Seasonally Adjusted": "SA",
    "Not Seasonally Adjusted": "NSA",
    "Index 1982-84=100": "Index",
    "Index 1982=100": "Index",
    "1982-1984 Dollars": "$ (1982-84)",
}


def period_to_date(year: int, period: str) -> date:
    """
    Convert a BLS (year, period) pair to the first day of the period.

    M01-M12 -> that month, Qn -> first month of the quarter,
    S01/S02 -> January/July, A01 and M13 (annual average) -> January.
    Unknown codes fall back to January.
    """
    code = (period or "").upper()
    month = 1
    if code.startswith("M") and code[1:].isdigit():
        number = int(code[1:])
        if 1 <= number <= 12:
            month = number
    elif code.startswith("Q") and code[1:].isdigit():
        quarter = int(code[1:])
        if 1 <= quarter <= 4:
            month = (quarter - 1) * 3 + 1
    elif code == "S02":
        month = 7
    return date(year, month, 1)


def parse_series(api_response: Dict[str, Any], series_id: str) -> List[FetchedPoint]:
    """
    Parse the observations of one series from a BLS v2 response.

    Missing values ("-", ".", blank) are skipped.
    """
    series_list = api_response.get("Results", {}).get("series", [])
    match: Optional[Dict[str, Any]] = next(
        (s for s in series_list if s.get("seriesID") == series_id), None
    )
    if match is None:
        return []

    points = []
    for row in match.get("data", []):
        value = parse_float(row.get("value"))
        if value is None:
            continue
        points.append(
            FetchedPoint(
                date=period_to_date(int(row["year"]), row.get("period", "")),
                value=value,
                raw={"series_id": series_id, **row},
            )
        )
    return points
