"""
RapidAPI metadata utilities.

Handles:
- Sentiment indicator catalog (metric + signal tier)
- Signal summary and derived metrics
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from econ_ingest.sources.base import IndicatorDefinition

logger = logging.getLogger(__name__)

SOURCE = "RAPIDAPI"

BASIC_SIGNALS = "/basic-signals"
PRO_SIGNALS = "/pro-signals"
ULTRA_SIGNALS = "/ultra-signals"

VOLUME_THRESHOLDS = {"basic": None, "pro": 100_000, "ultra": 1_000_000}
TIER_ENDPOINTS = {"basic": BASIC_SIGNALS, "pro": PRO_SIGNALS, "ultra": ULTRA_SIGNALS}

# Ratio reported when there are bulls but no bears
MAX_RATIO = 10.0


def _metric(code: str, name: str, category: str, unit: str, metric: str, tier: str,
            description: str) -> IndicatorDefinition:
    return IndicatorDefinition(
        name=name,
        source=SOURCE,
        series_id=code,
        category=category,
        frequency="daily",
        unit=unit,
        description=description,
        options={"metric": metric, "tier": tier},
    )


CORE_INDICATORS: List[IndicatorDefinition] = [
    _metric("RAPID_BULL_BEAR_RATIO", "Bull/Bear Market Ratio", "market_sentiment", "RATIO",
            "bull_bear_ratio", "basic", "Bullish signals per bearish signal"),
    _metric("RAPID_MARKET_SENTIMENT", "Market Sentiment Score", "market_psychology", "PERCENT",
            "confidence_score", "basic", "Confidence score from ratio strength and signal quality"),
    _metric("RAPID_STRONG_SIGNALS", "Strong Signal Count", "trading_signals", "COUNT",
            "strong_signal_count", "basic", "Number of strong-rated signals"),
    _metric("RAPID_BULLISH_PERCENT", "Bullish Stock Percentage", "market_sentiment", "PERCENT",
            "bullish_percent", "basic", "Share of tracked stocks with a bullish signal"),
    _metric("RAPID_VOLUME_SIGNALS", "High Volume Signal Ratio", "trading_signals", "RATIO",
            "high_volume_ratio", "pro", "Bull/bear ratio among stocks above 100K volume"),
]


UNIT_MAP: Dict[str, str] = {
    "RATIO": "Ratio",
    "PERCENT": "%",
    "COUNT": "Count",
}


def bull_bear_ratio(bulls: int, bears: int) -> float:
    if bears > 0:
        return bulls / bears
    return MAX_RATIO if bulls > 0 else 1.0


@dataclass
class SignalSummary:
    """Counts derived from one batch of stock signals."""

    total: int
    bullish: int
    bearish: int
    strong: int
    high_volume_bullish: int
    high_volume_bearish: int

    @property
    def neutral(self) -> int:
        return self.total - self.bullish - self.bearish

    @property
    def bull_bear_ratio(self) -> float:
        return bull_bear_ratio(self.bullish, self.bearish)

    @property
    def confidence_score(self) -> float:
        strong_share = self.strong / self.total if self.total else 0.0
        return float(round(min(100.0, abs(self.bull_bear_ratio - 1) * 50 + strong_share * 50)))

    @property
    def bullish_percent(self) -> float:
        return self.bullish / self.total * 100 if self.total else 50.0

    @property
    def high_volume_ratio(self) -> float:
        return bull_bear_ratio(self.high_volume_bullish, self.high_volume_bearish)


def summarize_signals(stocks: List[Dict[str, Any]], high_volume: int = VOLUME_THRESHOLDS["pro"]) -> SignalSummary:
    bulls = [s for s in stocks if s.get("signal") == "Bull"]
    bears = [s for s in stocks if s.get("signal") == "Bear"]

    def is_high_volume(stock: Dict[str, Any]) -> bool:
        return (stock.get("volume") or 0) > high_volume

    return SignalSummary(
        total=len(stocks),
        bullish=len(bulls),
        bearish=len(bears),
        strong=sum(1 for s in stocks if s.get("rating") == "Strong"),
        high_volume_bullish=sum(1 for s in bulls if is_high_volume(s)),
        high_volume_bearish=sum(1 for s in bears if is_high_volume(s)),
    )


METRICS: Dict[str, Callable[[SignalSummary], float]] = {
    "bull_bear_ratio": lambda s: s.bull_bear_ratio,
    "confidence_score": lambda s: s.confidence_score,
    "strong_signal_count": lambda s: float(s.strong),
    "bullish_percent": lambda s: s.bullish_percent,
    "high_volume_ratio": lambda s: s.high_volume_ratio,
}


def compute_metric(stocks: List[Dict[str, Any]], metric: str) -> float:
    """Compute one named metric, rounded to 2 decimals."""
    return round(METRICS[metric](summarize_signals(stocks)), 2)


def extract_stocks(api_response: Any) -> List[Dict[str, Any]]:
    """Signals arrive either as a bare list or under a "stocks" key."""
    if isinstance(api_response, list):
        return api_response
    if isinstance(api_response, dict) and isinstance(api_response.get("stocks"), list):
        return api_response["stocks"]
    raise ValueError(f"Unexpected Bull/Bear response format: {type(api_response).__name__}")
