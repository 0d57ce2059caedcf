"""
Indicator store operations.

All writes to Indicator and DataPoint go through this module. Data points
are upserted by (indicator_id, date), so repeated syncs of the same
payload update rows in place instead of duplicating them.
"""
import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from econ_ingest.core.api_errors import PersistenceError
from econ_ingest.core.models import DataPoint, Indicator
from econ_ingest.sources.base import FetchedPoint, IndicatorDefinition

logger = logging.getLogger(__name__)

UNKNOWN_UNIT = "Unknown"


def initialize_core_indicators(
    db: Session,
    definitions: Iterable[IndicatorDefinition],
    standardize_unit: Optional[Callable[[str, str], str]] = None,
) -> Dict[str, int]:
    """
    Upsert catalog entries into the indicator table by name.

    Args:
        db: Database session
        definitions: Catalog entries to seed
        standardize_unit: (source, unit) -> canonical unit; raw unit if omitted

    Returns:
        Counts of created and updated indicators
    """
    created = updated = 0
    existing = {row.name: row for row in db.query(Indicator).all()}

    for definition in definitions:
        unit = definition.unit
        if unit and standardize_unit is not None:
            unit = standardize_unit(definition.source, unit)
        unit = unit or UNKNOWN_UNIT

        indicator = existing.get(definition.name)
        if indicator is None:
            indicator = Indicator(name=definition.name, is_active=True)
            db.add(indicator)
            existing[definition.name] = indicator
            created += 1
        else:
            updated += 1

        indicator.description = definition.description
        indicator.source = definition.source
        indicator.series_id = definition.series_id
        indicator.category = definition.category
        indicator.frequency = definition.frequency
        indicator.unit = unit

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceError(f"Failed to seed indicators: {e}") from e

    logger.info(f"Seeded indicators: {created} created, {updated} updated")
    return {"created": created, "updated": updated}


def get_indicator_by_name(db: Session, name: str) -> Optional[Indicator]:
    return db.query(Indicator).filter(Indicator.name == name).first()


def _dedupe_by_date(points: Iterable[FetchedPoint]) -> Dict[date, FetchedPoint]:
    # Last occurrence of a date wins
    by_date: Dict[date, FetchedPoint] = {}
    for point in points:
        by_date[point.date] = point
    return by_date


def _apply_points(db: Session, indicator_id: int, by_date: Dict[date, FetchedPoint]) -> Dict[str, int]:
    existing = {
        row.date: row
        for row in db.query(DataPoint).filter(
            DataPoint.indicator_id == indicator_id,
            DataPoint.date.in_(list(by_date)),
        )
    }

    inserted = updated = 0
    now = datetime.utcnow()
    for point_date, point in by_date.items():
        row = existing.get(point_date)
        if row is None:
            db.add(
                DataPoint(
                    indicator_id=indicator_id,
                    date=point_date,
                    value=point.value,
                    raw_data=point.raw,
                )
            )
            inserted += 1
        else:
            row.value = point.value
            row.raw_data = point.raw
            row.updated_at = now
            updated += 1

    db.commit()
    return {"inserted": inserted, "updated": updated}


def store_indicator_data(
    db: Session, indicator: Indicator, points: Iterable[FetchedPoint]
) -> Dict[str, int]:
    """
    Upsert data points for one indicator.

    A concurrent writer can insert the same (indicator_id, date) between our
    read and our commit; the unique constraint rejects that insert, and the
    batch is retried once against a fresh read.

    Returns:
        Counts of inserted and updated rows

    Raises:
        PersistenceError: If the upsert still fails after the retry
    """
    by_date = _dedupe_by_date(points)
    if not by_date:
        return {"inserted": 0, "updated": 0}

    indicator_id, name, source = indicator.id, indicator.name, indicator.source
    for attempt in (1, 2):
        try:
            counts = _apply_points(db, indicator_id, by_date)
            logger.debug(
                f"Stored {name}: {counts['inserted']} inserted, "
                f"{counts['updated']} updated"
            )
            return counts
        except IntegrityError as e:
            db.rollback()
            if attempt == 2:
                raise PersistenceError(
                    f"Upsert conflict for {name}: {e.orig}", source=source
                ) from e
            logger.warning(f"Upsert conflict for {name}, retrying against fresh read")
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(
                f"Failed to store data for {name}: {e}", source=source
            ) from e

    return {"inserted": 0, "updated": 0}


def get_all_indicators(db: Session, active_only: bool = False) -> List[Indicator]:
    query = db.query(Indicator)
    if active_only:
        query = query.filter(Indicator.is_active.is_(True))
    return query.order_by(Indicator.category, Indicator.name).all()


def get_indicators_by_source(db: Session, source: str, active_only: bool = True) -> List[Indicator]:
    query = db.query(Indicator).filter(Indicator.source == source)
    if active_only:
        query = query.filter(Indicator.is_active.is_(True))
    return query.order_by(Indicator.name).all()


def get_latest_data(db: Session, indicator_id: int, limit: int = 1) -> List[DataPoint]:
    """Newest data points for an indicator."""
    return (
        db.query(DataPoint)
        .filter(DataPoint.indicator_id == indicator_id)
        .order_by(DataPoint.date.desc())
        .limit(limit)
        .all()
    )


def get_historical_data(
    db: Session,
    indicator_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[DataPoint]:
    """Data points in [start_date, end_date], oldest first."""
    query = db.query(DataPoint).filter(DataPoint.indicator_id == indicator_id)
    if start_date is not None:
        query = query.filter(DataPoint.date >= start_date)
    if end_date is not None:
        query = query.filter(DataPoint.date <= end_date)
    return query.order_by(DataPoint.date.asc()).all()


def get_last_write_time(db: Session, indicator_id: int) -> Optional[datetime]:
    """When any data point of the indicator was last written."""
    return (
        db.query(func.max(DataPoint.updated_at))
        .filter(DataPoint.indicator_id == indicator_id)
        .scalar()
    )


def get_last_sync_status(db: Session) -> List[Dict[str, Any]]:
    """
    Per-indicator summary for observability.

    Returns:
        One dict per indicator: name, source, last_update, latest_date,
        total_data_points
    """
    stats = {
        indicator_id: (last_update, latest_date, total)
        for indicator_id, last_update, latest_date, total in db.query(
            DataPoint.indicator_id,
            func.max(DataPoint.updated_at),
            func.max(DataPoint.date),
            func.count(DataPoint.id),
        ).group_by(DataPoint.indicator_id)
    }

    summary = []
    for indicator in get_all_indicators(db):
        last_update, latest_date, total = stats.get(indicator.id, (None, None, 0))
        summary.append(
            {
                "name": indicator.name,
                "source": indicator.source,
                "is_active": indicator.is_active,
                "last_update": last_update.isoformat() if last_update else None,
                "latest_date": latest_date.isoformat() if latest_date else None,
                "total_data_points": total,
            }
        )
    return summary
