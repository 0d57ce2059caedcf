"""
Treasury Fiscal Data metadata utilities.

Handles:
- Endpoint/field catalog
- Value extraction with field fallbacks
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from econ_ingest.sources.base import FetchedPoint, IndicatorDefinition, parse_float

logger = logging.getLogger(__name__)

SOURCE = "TREASURY"

MTS_BALANCE = "/v1/accounting/mts/mts_table_1"
MTS_RECEIPTS = "/v1/accounting/mts/mts_table_4"
MTS_OUTLAYS = "/v1/accounting/mts/mts_table_5"
DTS_CASH_BALANCE = "/v1/accounting/dts/dts_table_1"
DEBT_OUTSTANDING = "/v1/accounting/debt/mspd/mspd_table_1"

HISTORY_DAYS = 730
PAGE_SIZE = 50

# Tried in order after the indicator's own field
FALLBACK_FIELDS = [
    "current_month_amount",
    "month_to_date_amount",
    "fiscal_year_to_date_amount",
    "close_today_bal",
    "total_receipts_mtd",
    "total_outlays_mtd",
    "total_surplus_deficit_mtd",
    "debt_held_public_amt",
    "tot_pub_debt_out_amt",
]


def _series(endpoint: str, field: str, name: str, category: str, frequency: str,
            description: str) -> IndicatorDefinition:
    return IndicatorDefinition(
        name=name,
        source=SOURCE,
        series_id=field,
        category=category,
        frequency=frequency,
        unit="Millions of Dollars",
        description=description,
        options={"endpoint": endpoint},
    )


CORE_INDICATORS: List[IndicatorDefinition] = [
    _series(MTS_BALANCE, "total_surplus_deficit_mtd", "Federal Budget Balance",
            "fiscal_policy", "monthly", "Monthly federal surplus or deficit"),
    _series(MTS_RECEIPTS, "total_receipts_mtd", "Federal Revenue",
            "fiscal_policy", "monthly", "Total federal receipts, month to date"),
    _series(MTS_OUTLAYS, "total_outlays_mtd", "Federal Spending",
            "fiscal_policy", "monthly", "Total federal outlays, month to date"),
    _series(DTS_CASH_BALANCE, "close_today_bal", "Treasury Cash Balance",
            "fiscal_policy", "daily", "Treasury General Account closing balance"),
    _series(DEBT_OUTSTANDING, "tot_pub_debt_out_amt", "Total Public Debt",
            "fiscal_policy", "monthly", "Total public debt outstanding"),
    _series(DEBT_OUTSTANDING, "debt_held_public_amt", "Debt Held by Public",
            "fiscal_policy", "monthly", "Marketable debt held by the public"),
]


UNIT_MAP: Dict[str, str] = {
    "Millions of Dollars": "$M",
    "USD": "$",
}


def extract_value(record: Dict[str, Any], field: str) -> Optional[float]:
    """Return the first populated numeric field, trying the indicator's field first."""
    candidates = [field, field.lower(), field.replace("_", "")] + FALLBACK_FIELDS
    for candidate in candidates:
        value = parse_float(record.get(candidate))
        if value is not None:
            return value
    return None


def parse_records(api_response: Dict[str, Any], field: str) -> List[FetchedPoint]:
    """
    Parse a Fiscal Data response ({"data": [...], "meta": {...}}).

    Records without record_date or a usable value are skipped.
    """
    points = []
    for record in api_response.get("data", []):
        record_date = record.get("record_date")
        value = extract_value(record, field)
        if not record_date or value is None:
            continue
        points.append(
            FetchedPoint(
                date=datetime.strptime(record_date, "%Y-%m-%d").date(),
                value=value,
                raw={"field": field, "record_date": record_date, "value": value},
            )
        )
    points.sort(key=lambda p: p.date, reverse=True)
    return points
