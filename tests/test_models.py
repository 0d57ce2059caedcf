"""
Unit tests for econ_ingest/core/models.py
"""
from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from econ_ingest.core.models import DataPoint, Indicator


def _indicator(name="Unemployment Rate"):
    return Indicator(
        name=name, source="FRED", series_id="UNRATE",
        category="employment", frequency="monthly", unit="%",
    )


@pytest.mark.unit
class TestIndicator:

    def test_defaults(self, test_db):
        indicator = _indicator()
        test_db.add(indicator)
        test_db.commit()

        assert indicator.id is not None
        assert indicator.is_active is True
        assert indicator.created_at is not None
        assert "Unemployment Rate" in repr(indicator)

    def test_name_is_unique(self, test_db):
        test_db.add(_indicator())
        test_db.commit()

        test_db.add(_indicator())
        with pytest.raises(IntegrityError):
            test_db.commit()


@pytest.mark.unit
class TestDataPoint:

    def test_one_row_per_indicator_and_date(self, test_db):
        indicator = _indicator()
        test_db.add(indicator)
        test_db.commit()

        test_db.add(DataPoint(indicator_id=indicator.id, date=date(2024, 1, 1), value=3.7))
        test_db.commit()
        test_db.add(DataPoint(indicator_id=indicator.id, date=date(2024, 1, 1), value=3.9))

        with pytest.raises(IntegrityError):
            test_db.commit()

    def test_same_date_for_different_indicators(self, test_db):
        first, second = _indicator(), _indicator("Inflation Rate")
        test_db.add_all([first, second])
        test_db.commit()

        test_db.add_all([
            DataPoint(indicator_id=first.id, date=date(2024, 1, 1), value=3.7),
            DataPoint(indicator_id=second.id, date=date(2024, 1, 1), value=3.1),
        ])
        test_db.commit()

        assert len(first.data_points) == 1
        assert first.data_points[0].raw_data is None
