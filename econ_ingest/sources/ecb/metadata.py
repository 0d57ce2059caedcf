"""
ECB metadata utilities.

Handles:
- Dataflow/series-key catalog
- Unit vocabulary
- SDMX-JSON (jsondata) parsing
"""
import logging
from typing import Any, Dict, List

from econ_ingest.sources.base import FetchedPoint, IndicatorDefinition, parse_float, parse_period

logger = logging.getLogger(__name__)

SOURCE = "ECB"

LAST_N_OBSERVATIONS = 100


def _series(flow: str, key: str, name: str, category: str, frequency: str, unit: str,
            description: str) -> IndicatorDefinition:
    return IndicatorDefinition(
        name=name,
        source=SOURCE,
        series_id=f"{flow}.{key}",
        category=category,
        frequency=frequency,
        unit=unit,
        description=description,
        options={"flow": flow, "key": key},
    )


CORE_INDICATORS: List[IndicatorDefinition] = [
    _series("FM", "B.U2.EUR.4F.KR.MRR_FR.LEV", "ECB Main Refinancing Rate",
            "monetary_policy", "monthly", "Percent", "Main refinancing operations, fixed rate"),
    _series("FM", "B.U2.EUR.4F.KR.DFR.LEV", "ECB Deposit Facility Rate",
            "monetary_policy", "monthly", "Percent", "Deposit facility rate"),
    _series("EXR", "D.USD.EUR.SP00.A", "EUR/USD Exchange Rate",
            "forex", "daily", "Exchange Rate", "ECB reference rate, US dollar per euro"),
    _series("EXR", "D.GBP.EUR.SP00.A", "EUR/GBP Exchange Rate",
            "forex", "daily", "Exchange Rate", "ECB reference rate, pound sterling per euro"),
    _series("BSI", "M.U2.Y.V.M30.X.1.U2.2300.Z01.E", "Eurozone M3 Money Supply",
            "monetary_policy", "monthly", "Millions of Euro", "Monetary aggregate M3, outstanding amounts"),
    _series("ICP", "M.U2.N.000000.4.ANR", "Eurozone HICP Inflation",
            "inflation", "monthly", "Percent", "HICP overall index, annual rate of change"),
    _series("LFSI", "M.I8.S.UNEHRT.TOTAL0.15_74.T", "Eurozone Unemployment Rate",
            "employment", "monthly", "Percent", "Unemployment rate, age 15-74"),
]


UNIT_MAP: Dict[str, str] = {
    "Percent": "%",
    "Exchange Rate": "FX",
    "Millions of Euro": "EUR M",
    "Euro": "EUR",
}


def parse_jsondata(api_response: Dict[str, Any], series_id: str) -> List[FetchedPoint]:
    """
    Parse an ECB SDMX-JSON response for a single series.

    Observation indexes point into the TIME_PERIOD dimension values.
    """
    data_sets = api_response.get("dataSets") or []
    if not data_sets or not data_sets[0].get("series"):
        return []

    dimensions = api_response["structure"]["dimensions"]["observation"]
    time_dimension = next(d for d in dimensions if d.get("id") == "TIME_PERIOD")
    periods = [v.get("id") for v in time_dimension.get("values", [])]

    series_map = data_sets[0]["series"]
    first_key = next(iter(series_map))
    observations = series_map[first_key].get("observations", {})

    points = []
    for index, observation in observations.items():
        period = periods[int(index)]
        value = parse_float(observation[0] if observation else None)
        observation_date = parse_period(period)
        if value is None or observation_date is None:
            continue
        points.append(
            FetchedPoint(
                date=observation_date,
                value=value,
                raw={"series": series_id, "period": period, "value": observation[0]},
            )
        )
    return points
