"""
Finnhub metadata utilities.

Handles:
- Tracked symbol catalog (indices, forex pairs, crypto pairs, economic codes)
- Unit vocabulary
- Candle, forex rate and economic data parsing
"""
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Tuple

from econ_ingest.sources.base import FetchedPoint, IndicatorDefinition, parse_float, parse_period

logger = logging.getLogger(__name__)

SOURCE = "FINNHUB"

# Candle history requested per sync
HISTORY_DAYS = 30

# options["kind"] values
CANDLE = "candle"
CRYPTO = "crypto"
FOREX = "forex"
ECONOMIC = "economic"


def _entry(code: str, name: str, category: str, kind: str, unit: str, description: str,
           frequency: str = "daily") -> IndicatorDefinition:
    return IndicatorDefinition(
        name=name,
        source=SOURCE,
        series_id=code,
        category=category,
        frequency=frequency,
        unit=unit,
        description=description,
        options={"kind": kind},
    )


CORE_INDICATORS: List[IndicatorDefinition] = [
    _entry("^GSPC", "S&P 500 Index", "market_indices", CANDLE, "Points",
           "Standard & Poor's 500 Index"),
    _entry("^DJI", "Dow Jones Industrial Average", "market_indices", CANDLE, "Points",
           "Dow Jones Industrial Average"),
    _entry("^IXIC", "NASDAQ Composite", "market_indices", CANDLE, "Points",
           "NASDAQ Composite Index"),
    # ECB already publishes the reference EUR/USD rate under the plain name
    _entry("EURUSD", "EUR/USD Exchange Rate (Finnhub)", "forex", FOREX, "Exchange Rate",
           "Euro to US Dollar spot rate"),
    _entry("GBPUSD", "GBP/USD Exchange Rate", "forex", FOREX, "Exchange Rate",
           "British Pound to US Dollar spot rate"),
    _entry("USDJPY", "USD/JPY Exchange Rate", "forex", FOREX, "Exchange Rate",
           "US Dollar to Japanese Yen spot rate"),
    _entry("BINANCE:BTCUSDT", "Bitcoin Price", "cryptocurrency", CRYPTO, "USD",
           "Bitcoin price in USD (Binance BTC/USDT)"),
    _entry("BINANCE:ETHUSDT", "Ethereum Price", "cryptocurrency", CRYPTO, "USD",
           "Ethereum price in USD (Binance ETH/USDT)"),
    _entry("US_GDP", "US GDP Growth Rate", "economic_growth", ECONOMIC, "Percent",
           "US Gross Domestic Product growth rate", frequency="quarterly"),
    _entry("US_CPI", "US Consumer Price Index", "inflation", ECONOMIC, "Index",
           "US Consumer Price Index", frequency="monthly"),
]


UNIT_MAP: Dict[str, str] = {
    "USD": "$",
    "Points": "pts",
    "Exchange Rate": "FX",
    "Percent": "%",
    "Index": "Index",
}


def split_pair(pair: str) -> Tuple[str, str]:
    """'EURUSD' -> ('EUR', 'USD')"""
    if len(pair) != 6:
        raise ValueError(f"Not a currency pair: {pair}")
    return pair[:3], pair[3:]


def parse_candles(api_response: Dict[str, Any], symbol: str) -> List[FetchedPoint]:
    """
    Parse a candle response into daily closes.

    Finnhub signals an empty window with s="no_data" rather than an error.

    Raises:
        ValueError: If the status is neither "ok" nor "no_data"
        KeyError: If an "ok" response lacks the close or timestamp arrays
    """
    status = api_response.get("s")
    if status == "no_data":
        logger.debug(f"[finnhub] {symbol}: no candles in window")
        return []
    if status != "ok":
        raise ValueError(f"Unexpected candle status for {symbol}: {status!r}")

    closes, stamps = api_response["c"], api_response["t"]
    extras = {key: api_response.get(key) or [] for key in ("o", "h", "l", "v")}

    points = []
    for i, (close, stamp) in enumerate(zip(closes, stamps)):
        value = parse_float(close)
        if value is None:
            continue
        raw = {"symbol": symbol, "t": stamp, "c": close}
        raw.update({key: values[i] for key, values in extras.items() if i < len(values)})
        points.append(
            FetchedPoint(
                date=datetime.fromtimestamp(stamp, tz=timezone.utc).date(),
                value=value,
                raw=raw,
            )
        )
    return points


def parse_forex_rate(api_response: Dict[str, Any], pair: str, as_of: date) -> List[FetchedPoint]:
    """
    Pick one pair out of a /forex/rates snapshot.

    The snapshot carries no date of its own; it is stamped with as_of.

    Raises:
        KeyError: If the quote currency is missing from the snapshot
    """
    base, quote = split_pair(pair)
    rate = parse_float(api_response["quote"][quote])
    if rate is None:
        return []
    return [FetchedPoint(date=as_of, value=rate, raw={"pair": pair, "base": base, "quote": quote})]


def parse_economic_data(api_response: Dict[str, Any], code: str) -> List[FetchedPoint]:
    """Parse an /economic/data response ({"data": [{"period", "value"}]})."""
    points = []
    for row in api_response.get("data") or []:
        period = parse_period(str(row.get("period", ""))[:10])
        value = parse_float(row.get("value"))
        if period is None or value is None:
            continue
        points.append(FetchedPoint(date=period, value=value, raw={"code": code, **row}))
    return points
