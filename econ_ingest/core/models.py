"""
SQLAlchemy models for the indicator store.

These tables are source-agnostic; every adapter writes through the same
two tables via the sync orchestrator.
"""
from datetime import datetime
from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Indicator(Base):
    """
    A canonical named economic time series.

    Created or updated by name when the catalog is seeded; toggled via
    is_active; never hard-deleted.
    """
    __tablename__ = "economic_indicators"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    source = Column(String(50), nullable=False, index=True)
    series_id = Column(String(255), nullable=True)  # Provider-specific identifier
    category = Column(String(100), nullable=False)
    frequency = Column(String(50), nullable=False)
    unit = Column(String(100), nullable=True)  # Canonical, post-normalization
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    data_points = relationship(
        "DataPoint",
        back_populates="indicator",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return (
            f"<Indicator(id={self.id}, name={self.name}, source={self.source}, "
            f"is_active={self.is_active})>"
        )


class DataPoint(Base):
    """
    One dated observation of an indicator.

    (indicator_id, date) is unique: a second write for the same pair is an
    update, never a second row.
    """
    __tablename__ = "indicator_data"

    id = Column(Integer, primary_key=True, autoincrement=True)
    indicator_id = Column(
        Integer,
        ForeignKey("economic_indicators.id", ondelete="CASCADE"),
        nullable=False,
    )
    date = Column(Date, nullable=False)
    value = Column(Float, nullable=False)
    raw_data = Column(JSON, nullable=True)  # Opaque source payload for audit

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    indicator = relationship("Indicator", back_populates="data_points")

    __table_args__ = (
        UniqueConstraint("indicator_id", "date", name="uq_indicator_data_indicator_date"),
        Index("idx_indicator_data_indicator_date", "indicator_id", "date"),
    )

    def __repr__(self) -> str:
        return (
            f"<DataPoint(indicator_id={self.indicator_id}, date={self.date}, "
            f"value={self.value})>"
        )
