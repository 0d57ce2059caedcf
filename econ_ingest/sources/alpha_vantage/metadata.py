"""
Alpha Vantage metadata utilities.

Handles:
- Tracked symbol catalog
- Unit vocabulary
- TIME_SERIES_DAILY parsing
"""
import logging
from datetime import datetime
from typing import Any, Dict, List

from econ_ingest.sources.base import FetchedPoint, IndicatorDefinition, parse_float

logger = logging.getLogger(__name__)

SOURCE = "ALPHA_VANTAGE"

DAILY_SERIES_KEY = "Time Series (Daily)"
CLOSE_FIELD = "4. close"


def _symbol(symbol: str, name: str, category: str, description: str) -> IndicatorDefinition:
    return IndicatorDefinition(
        name=name,
        source=SOURCE,
        series_id=symbol,
        category=category,
        frequency="daily",
        unit="USD",
        description=description,
    )


CORE_INDICATORS: List[IndicatorDefinition] = [
    _symbol("SPY", "SPDR S&P 500 ETF", "market_index", "S&P 500 index tracker"),
    _symbol("VTI", "Vanguard Total Stock Market ETF", "market_index", "Total US stock market"),
    _symbol("QQQ", "Invesco QQQ ETF", "market_index", "Nasdaq-100 index tracker"),
    _symbol("DIA", "SPDR Dow Jones Industrial Average ETF", "market_index", "Dow Jones Industrial Average tracker"),
    _symbol("VXX", "S&P 500 VIX Short-Term Futures ETN", "volatility", "Short-term VIX futures exposure"),
]


UNIT_MAP: Dict[str, str] = {
    "USD": "$",
    "Points": "pts",
    "Percent": "%",
    "Ratio": "Ratio",
    "Volume": "Vol",
}


def parse_daily_series(api_response: Dict[str, Any], symbol: str) -> List[FetchedPoint]:
    """
    Parse a TIME_SERIES_DAILY response into closing prices.

    Raises:
        KeyError: If the response carries no daily series
    """
    series = api_response[DAILY_SERIES_KEY]

    points = []
    for date_str, bar in series.items():
        close = parse_float(bar.get(CLOSE_FIELD))
        if close is None:
            continue
        points.append(
            FetchedPoint(
                date=datetime.strptime(date_str, "%Y-%m-%d").date(),
                value=close,
                raw={"symbol": symbol, "date": date_str, **bar},
            )
        )
    return points
