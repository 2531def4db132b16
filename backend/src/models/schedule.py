"""
Schedule model for opening hours.

Rows are either recurring weekly windows (``day_of_week`` set,
``is_exception`` false) or dated exceptions covering
[start_date, end_date]. The table is maintained by the back-office; this
application only reads it through the schedule provider.

Design Rationale:
- day_of_week uses 0 = Sunday ... 6 = Saturday
- is_closed marks a closing entry rather than an opening window
- position gives the display order chosen by staff
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Date, Time, Text,
    CheckConstraint, Index
)

from backend.src.models import Base


class AudienceType(enum.Enum):
    """Audience a schedule entry applies to."""
    PUBLIC = "public"
    MEMBER = "member"
    HOLIDAY = "holiday"


PUBLIC_AUDIENCES = (AudienceType.PUBLIC.value, AudienceType.HOLIDAY.value)


class Schedule(Base):
    """
    Opening-hours entry.

    Attributes:
        id: Primary key
        day_of_week: 0 (Sunday) to 6 (Saturday), NULL for exceptions
        start_time / end_time: Opening window
        audience_type: public, member or holiday
        start_date / end_date: Covered dates for exceptions
        is_exception: Dated exception rather than recurring entry
        is_closed: Closing entry
        description: Free text shown with the entry
        position: Display order

    Constraints:
        - Exceptions carry start_date and end_date
        - Recurring entries carry day_of_week
    """

    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, autoincrement=True)

    day_of_week = Column(Integer, nullable=True, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    audience_type = Column(String(20), nullable=False, index=True)

    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    is_exception = Column(Boolean, default=False, nullable=False)
    is_closed = Column(Boolean, default=False, nullable=False)
    description = Column(Text, nullable=True)
    position = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "is_exception = false OR (start_date IS NOT NULL AND end_date IS NOT NULL)",
            name="ck_schedules_exception_dates"
        ),
        CheckConstraint(
            "is_exception = true OR day_of_week IS NOT NULL",
            name="ck_schedules_recurring_day"
        ),
        Index("idx_schedules_dates", "start_date", "end_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Schedule("
            f"id={self.id}, "
            f"day_of_week={self.day_of_week}, "
            f"{self.start_time}-{self.end_time}, "
            f"audience={self.audience_type}, "
            f"closed={self.is_closed}"
            f")>"
        )
