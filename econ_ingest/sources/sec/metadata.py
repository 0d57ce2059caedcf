"""
SEC metadata utilities.

Handles:
- Indicator catalog (XBRL tag + aggregation method)
- Company basket
- companyfacts extraction and cross-company aggregation
"""
import logging
import statistics
from collections import defaultdict
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from econ_ingest.sources.base import FetchedPoint, IndicatorDefinition

logger = logging.getLogger(__name__)

SOURCE = "SEC"

MIN_COMPANIES = 3

# Large filers used for every indicator (10-digit CIKs)
MAJOR_COMPANY_CIKS: List[str] = [
    "0000051143",  # IBM
    "0000789019",  # Microsoft
    "0000320193",  # Apple
    "0001018724",  # Amazon
    "0001652044",  # Alphabet
    "0000732712",  # Verizon
    "0000019617",  # JPMorgan Chase
    "0000886982",  # Goldman Sachs
    "0000831001",  # Citigroup
    "0000064803",  # CVS Health
    "0000200406",  # Johnson & Johnson
    "0000078003",  # Pfizer
    "0000034088",  # Exxon Mobil
    "0000018230",  # Caterpillar
    "0000021344",  # Coca-Cola
]

UNIT_SCALES = {
    "USD_BILLIONS": 1_000_000_000,
    "USD_MILLIONS": 1_000_000,
}

PERIOD_END = {
    "Q1": (3, 31),
    "Q2": (6, 30),
    "Q3": (9, 30),
    "Q4": (12, 31),
    "FY": (12, 31),
}


def _series(code: str, tag: str, name: str, category: str, unit: str, method: str,
            scale: Optional[str], description: str) -> IndicatorDefinition:
    return IndicatorDefinition(
        name=name,
        source=SOURCE,
        series_id=code,
        category=category,
        frequency="quarterly",
        unit=unit,
        description=description,
        options={"tag": tag, "method": method, "scale": scale},
    )


CORE_INDICATORS: List[IndicatorDefinition] = [
    _series("SEC_SP500_REVENUE", "us-gaap:Revenues", "S&P 500 Aggregate Revenue",
            "revenue_trends", "Billions of Dollars", "aggregate", "USD_BILLIONS",
            "Sum of reported revenues across the company basket"),
    _series("SEC_CORPORATE_DEBT", "us-gaap:LongTermDebt", "Corporate Debt Levels",
            "debt_levels", "Billions of Dollars", "aggregate", "USD_BILLIONS",
            "Sum of long-term debt across the company basket"),
    _series("SEC_CASH_HOLDINGS", "us-gaap:CashAndCashEquivalentsAtCarryingValue",
            "Corporate Cash Holdings", "financial_health", "Billions of Dollars", "aggregate",
            "USD_BILLIONS", "Sum of cash and cash equivalents across the company basket"),
    _series("SEC_NET_INCOME_GROWTH", "us-gaap:NetIncomeLoss", "Net Income Growth Rate",
            "corporate_earnings", "Percent", "weighted_average", None,
            "Average reported net income across the company basket"),
    _series("SEC_ROA_MEDIAN", "us-gaap:ReturnOnAssets", "Return on Assets Median",
            "financial_health", "Percent", "median", None,
            "Median return on assets across the company basket"),
]


UNIT_MAP: Dict[str, str] = {
    "Billions of Dollars": "$B",
    "Millions of Dollars": "$M",
    "Percent": "%",
}


def period_end_date(year: int, fiscal_period: str) -> date:
    """Map a fiscal period to its calendar quarter end; unknown periods map to year end."""
    month, day = PERIOD_END.get(fiscal_period, (12, 31))
    return date(year, month, day)


def extract_metric(facts: Dict[str, Any], tag: str, preferred_unit: str = "USD") -> Dict[Tuple[int, str], float]:
    """
    Extract one company's values for an XBRL tag, keyed by (year, fiscal period).

    When a period is reported more than once, the latest filing wins.
    """
    taxonomy, _, name = tag.partition(":")
    tag_data = (facts.get("facts") or {}).get(taxonomy, {}).get(name)
    if not tag_data:
        return {}

    units = tag_data.get("units") or {}
    unit_rows = units.get(preferred_unit)
    if unit_rows is None:
        if not units:
            return {}
        unit_rows = next(iter(units.values()))

    values: Dict[Tuple[int, str], Tuple[str, float]] = {}
    for row in unit_rows:
        end, fiscal_period, value = row.get("end"), row.get("fp"), row.get("val")
        if not end or not fiscal_period or value is None:
            continue
        key = (int(end[:4]), fiscal_period)
        filed = row.get("filed") or ""
        if key not in values or filed >= values[key][0]:
            values[key] = (filed, float(value))
    return {key: value for key, (_, value) in values.items()}


def aggregate(values: List[float], method: str) -> float:
    if method == "aggregate":
        return sum(values)
    if method == "median":
        return statistics.median(values)
    return statistics.fmean(values)


def aggregate_companies(
    company_facts: Dict[str, Optional[Dict[str, Any]]],
    definition: IndicatorDefinition,
) -> List[FetchedPoint]:
    """
    Combine per-company facts into one series.

    Periods reported by fewer than MIN_COMPANIES companies are dropped.
    Points are returned newest first.
    """
    tag = definition.options["tag"]
    method = definition.options.get("method", "weighted_average")
    scale = UNIT_SCALES.get(definition.options.get("scale") or "", 1)

    by_period: Dict[Tuple[int, str], Dict[str, float]] = defaultdict(dict)
    for cik, facts in company_facts.items():
        if not facts:
            continue
        for key, value in extract_metric(facts, tag).items():
            by_period[key][cik] = value

    points = []
    for (year, fiscal_period), companies in by_period.items():
        if len(companies) < MIN_COMPANIES:
            continue
        value = aggregate(list(companies.values()), method) / scale
        points.append(
            FetchedPoint(
                date=period_end_date(year, fiscal_period),
                value=value,
                raw={
                    "tag": tag,
                    "period": f"{year}-{fiscal_period}",
                    "method": method,
                    "companies": sorted(companies),
                    "total_companies": len(companies),
                },
            )
        )

    if not points:
        logger.warning(f"No SEC periods with at least {MIN_COMPANIES} companies for {tag}")
    points.sort(key=lambda p: p.date, reverse=True)
    return points
