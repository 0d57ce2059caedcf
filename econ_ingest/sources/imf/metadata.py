"""
IMF metadata utilities.

Handles:
- WEO/IFS indicator catalog
- Indicator code parsing ("NGDP_RPCH" or "NGDP_RPCH.US")
- CompactData parsing (single-or-list Series and Obs)
"""
import logging
from typing import Any, Dict, List, Tuple

from econ_ingest.sources.base import FetchedPoint, IndicatorDefinition, parse_float, parse_period

logger = logging.getLogger(__name__)

SOURCE = "IMF"

WORLD = "W00"

# Years of history requested per database
HISTORY_YEARS = {"WEO": 10, "IFS": 5}

COUNTRY_NAMES: Dict[str, str] = {
    "W00": "World",
    "US": "United States",
    "U2": "Eurozone",
    "CN": "China",
    "JP": "Japan",
    "GB": "United Kingdom",
}


def _weo(code: str, name: str, category: str, unit: str, description: str) -> IndicatorDefinition:
    return IndicatorDefinition(
        name=name,
        source=SOURCE,
        series_id=code,
        category=category,
        frequency="annual",
        unit=unit,
        description=description,
        options={"database": "WEO"},
    )


CORE_INDICATORS: List[IndicatorDefinition] = [
    _weo("NGDP_RPCH", "World GDP Growth Rate", "economic_growth", "Percent Change",
         "Real GDP growth, world aggregate"),
    _weo("PCPIPCH", "World Inflation Rate", "inflation", "Percent Change",
         "Consumer prices, average, world aggregate"),
    _weo("LUR", "World Unemployment Rate", "employment", "Percent",
         "Unemployment rate, world aggregate"),
    _weo("NGDP_RPCH.US", "US GDP Growth (IMF)", "economic_growth", "Percent Change",
         "Real GDP growth, United States"),
    _weo("NGDP_RPCH.U2", "Eurozone GDP Growth (IMF)", "economic_growth", "Percent Change",
         "Real GDP growth, euro area"),
    _weo("NGDP_RPCH.CN", "China GDP Growth (IMF)", "economic_growth", "Percent Change",
         "Real GDP growth, China"),
    _weo("NGDP_RPCH.JP", "Japan GDP Growth (IMF)", "economic_growth", "Percent Change",
         "Real GDP growth, Japan"),
    _weo("NGDP_RPCH.GB", "UK GDP Growth (IMF)", "economic_growth", "Percent Change",
         "Real GDP growth, United Kingdom"),
]


UNIT_MAP: Dict[str, str] = {
    "Percent": "%",
    "Percent Change": "% chg",
    "Index": "Index",
    "Billions of U.S. Dollars": "$B",
}


def split_indicator_code(code: str) -> Tuple[str, str]:
    """
    Split "INDICATOR.COUNTRY" into its parts.

    A bare indicator code refers to the world aggregate.
    """
    indicator, _, country = code.partition(".")
    return indicator, (country or WORLD)


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _obs_field(obs: Dict[str, Any], name: str) -> Any:
    # Attributes appear either flattened ("@OBS_VALUE") or nested under "@attributes"
    if f"@{name}" in obs:
        return obs[f"@{name}"]
    return (obs.get("@attributes") or {}).get(name)


def parse_compact_data(api_response: Dict[str, Any], code: str) -> List[FetchedPoint]:
    """
    Parse a CompactData response.

    Series and Obs are objects when there is a single element and
    arrays otherwise. Points are returned newest first.
    """
    data_set = (api_response.get("CompactData") or {}).get("DataSet") or {}
    points = []
    for series in _as_list(data_set.get("Series")):
        for obs in _as_list(series.get("Obs")):
            period = _obs_field(obs, "TIME_PERIOD")
            value = parse_float(_obs_field(obs, "OBS_VALUE"))
            observation_date = parse_period(period) if period else None
            if value is None or observation_date is None:
                continue
            points.append(
                FetchedPoint(
                    date=observation_date,
                    value=value,
                    raw={"code": code, "period": period, "value": value},
                )
            )
    points.sort(key=lambda p: p.date, reverse=True)
    return points
