"""
FMP metadata utilities.

Handles:
- Tracked commodity, index and Treasury maturity catalog
- Unit vocabulary
- Historical price and Treasury curve parsing
"""
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from econ_ingest.sources.base import FetchedPoint, IndicatorDefinition, parse_float

logger = logging.getLogger(__name__)

SOURCE = "FMP"

# Most recent records kept per sync
HISTORY_LIMIT = 30

# options["kind"] values
HISTORICAL = "historical"
TREASURY = "treasury"


def _price(symbol: str, name: str, category: str, unit: str, description: str) -> IndicatorDefinition:
    return IndicatorDefinition(
        name=name,
        source=SOURCE,
        series_id=symbol,
        category=category,
        frequency="daily",
        unit=unit,
        description=description,
        options={"kind": HISTORICAL},
    )


def _maturity(symbol: str, curve_field: str, name: str, description: str) -> IndicatorDefinition:
    return IndicatorDefinition(
        name=name,
        source=SOURCE,
        series_id=symbol,
        category="interest_rates",
        frequency="daily",
        unit="Percent",
        description=description,
        options={"kind": TREASURY, "field": curve_field},
    )


CORE_INDICATORS: List[IndicatorDefinition] = [
    _price("GCUSD", "Gold Price", "commodities", "USD per troy ounce", "Gold spot price in USD"),
    _price("SIUSD", "Silver Price", "commodities", "USD per troy ounce", "Silver spot price in USD"),
    _price("CLUSD", "Crude Oil Price", "commodities", "USD per barrel", "WTI crude oil price in USD"),
    _price("NGUSD", "Natural Gas Price", "commodities", "USD per MMBtu", "Natural gas price in USD"),
    _maturity("DGS10", "year10", "10 Year Treasury Rate", "10-Year Treasury constant maturity rate"),
    _maturity("DGS2", "year2", "2 Year Treasury Rate", "2-Year Treasury constant maturity rate"),
    _maturity("DGS30", "year30", "30 Year Treasury Rate", "30-Year Treasury constant maturity rate"),
    _price("FTSE", "FTSE 100 Index", "market_indices", "Points", "Financial Times Stock Exchange 100 Index"),
    _price("DAX", "DAX Index", "market_indices", "Points", "German stock index DAX"),
    _price("N225", "Nikkei 225", "market_indices", "Points", "Nikkei 225 index"),
]


UNIT_MAP: Dict[str, str] = {
    "USD per troy ounce": "$/oz",
    "USD per barrel": "$/bbl",
    "USD per MMBtu": "$/MMBtu",
    "Percent": "%",
    "Points": "pts",
}


def _date(value: Optional[str]) -> date:
    return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()


def parse_historical_prices(api_response: Dict[str, Any], symbol: str) -> List[FetchedPoint]:
    """
    Parse /historical-price-full into daily closes (latest HISTORY_LIMIT).

    An unknown symbol comes back as an empty object, which yields no points.
    """
    points = []
    for bar in (api_response.get("historical") or [])[:HISTORY_LIMIT]:
        close = parse_float(bar.get("close"))
        if close is None or not bar.get("date"):
            continue
        points.append(FetchedPoint(date=_date(bar["date"]), value=close, raw={"symbol": symbol, **bar}))
    return points


def parse_treasury_curve(api_response: List[Dict[str, Any]], curve_field: str) -> List[FetchedPoint]:
    """
    Pull one maturity out of the /treasury curve records.

    Raises:
        TypeError: If the response is not a list of records
    """
    if not isinstance(api_response, list):
        raise TypeError(f"Expected a list of curve records, got {type(api_response).__name__}")

    points = []
    for record in api_response[:HISTORY_LIMIT]:
        rate = parse_float(record.get(curve_field))
        if rate is None or not record.get("date"):
            continue
        points.append(
            FetchedPoint(
                date=_date(record["date"]),
                value=rate,
                raw={"date": record["date"], curve_field: record[curve_field]},
            )
        )
    return points
