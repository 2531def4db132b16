"""
SpecialPeriod model for school holidays and closures.

Maintained by the back-office and read by the calendar through the
special-period provider. Periods can be deactivated instead of deleted.
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Date, Text,
    CheckConstraint, Index
)

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin


class SpecialPeriodType(enum.Enum):
    """Kind of special period."""
    HOLIDAY = "holiday"
    CLOSURE = "closure"


class SpecialPeriod(Base, GuidMixin):
    """
    Holiday or closure period.

    Attributes:
        id: Primary key (internal)
        guid: GUID string property (spp_xxx, inherited from GuidMixin)
        type: holiday or closure
        start_date / end_date: Inclusive date range
        name: Display name (e.g. "Vacances de Noël")
        description: Optional free text
        zone: School holiday zone ("A", "B", "C", "all"); NULL for closures
        is_active: Inactive periods are ignored by the calendar
    """

    __tablename__ = "special_periods"

    GUID_PREFIX = "spp"

    id = Column(Integer, primary_key=True, autoincrement=True)

    type = Column(String(20), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    zone = Column(String(50), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "end_date >= start_date",
            name="ck_special_periods_date_order"
        ),
        Index("idx_special_periods_dates", "start_date", "end_date"),
        Index("idx_special_periods_type_active", "type", "is_active"),
    )

    def __repr__(self) -> str:
        return (
            f"<SpecialPeriod("
            f"id={self.id}, "
            f"type={self.type}, "
            f"{self.start_date}..{self.end_date}, "
            f"active={self.is_active}"
            f")>"
        )
