"""
World Bank metadata utilities.

Handles:
- WDI indicator catalog
- Unit vocabulary
- [meta, rows] response parsing
"""
import logging
from datetime import date
from typing import Any, Dict, List

from econ_ingest.sources.base import FetchedPoint, IndicatorDefinition, parse_float

logger = logging.getLogger(__name__)

SOURCE = "WORLD_BANK"

DEFAULT_COUNTRY = "US"
HISTORY_YEARS = 5


def _wdi(code: str, name: str, category: str, unit: str, description: str) -> IndicatorDefinition:
    return IndicatorDefinition(
        name=name,
        source=SOURCE,
        series_id=code,
        category=category,
        frequency="annual",
        unit=unit,
        description=description,
        options={"country": DEFAULT_COUNTRY},
    )


CORE_INDICATORS: List[IndicatorDefinition] = [
    _wdi("NY.GDP.MKTP.CD", "US GDP (World Bank)", "economic_growth", "current US$",
         "GDP in current US dollars"),
    _wdi("NY.GDP.PCAP.CD", "US GDP per Capita", "economic_growth", "current US$",
         "GDP per capita in current US dollars"),
    _wdi("FP.CPI.TOTL.ZG", "US Inflation (World Bank)", "inflation", "annual %",
         "Inflation, consumer prices"),
    _wdi("SP.POP.TOTL", "US Population", "demographics", "Number",
         "Population, total"),
    _wdi("SL.UEM.TOTL.ZS", "US Unemployment (World Bank)", "employment", "% of total labor force",
         "Unemployment, modeled ILO estimate"),
    _wdi("BX.KLT.DINV.CD.WD", "US Foreign Direct Investment", "trade", "BoP, current US$",
         "Foreign direct investment, net inflows"),
    _wdi("GC.DOD.TOTL.GD.ZS", "US Government Debt to GDP", "fiscal_policy", "% of GDP",
         "Central government debt, total"),
    _wdi("NE.RSB.GNFS.CD", "US Trade Balance", "trade", "current US$",
         "External balance on goods and services"),
]


UNIT_MAP: Dict[str, str] = {
    "current US$": "USD",
    "BoP, current US$": "USD",
    "annual %": "%",
    "% of total labor force": "%",
    "% of GDP": "% GDP",
    "Number": "Count",
}


def parse_indicator_rows(api_response: Any, code: str) -> List[FetchedPoint]:
    """
    Parse a World Bank indicator response.

    The API answers [meta, rows]; rows is null when nothing matched.
    Rows with a null value are skipped.

    Raises:
        ValueError: If the payload is an error message rather than data
    """
    if not isinstance(api_response, list):
        raise ValueError(f"Unexpected World Bank payload type: {type(api_response).__name__}")

    if len(api_response) == 1 and isinstance(api_response[0], dict) and "message" in api_response[0]:
        messages = api_response[0]["message"]
        detail = "; ".join(m.get("value", "") for m in messages) if isinstance(messages, list) else messages
        raise ValueError(f"World Bank error for {code}: {detail}")

    rows = api_response[1] if len(api_response) > 1 else None
    if not rows:
        return []

    points = []
    for row in rows:
        value = parse_float(row.get("value"))
        if value is None:
            continue
        points.append(
            FetchedPoint(
                date=date(int(row["date"][:4]), 1, 1),
                value=value,
                raw={
                    "indicator": code,
                    "country": row.get("countryiso3code"),
                    "date": row.get("date"),
                    "value": row.get("value"),
                },
            )
        )
    return points
