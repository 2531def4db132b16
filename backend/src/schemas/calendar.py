"""
Pydantic schemas for the calendar endpoint.

One CalendarDayResponse per date of the resolved range; events inside a
day use the same shape as the event listing.
"""

import enum
from datetime import date, time
from typing import Optional, List
from pydantic import BaseModel, Field

from backend.src.schemas.event import EventResponse


class CalendarView(str, enum.Enum):
    """How the anchor date is expanded to a range."""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    RANGE = "range"


class OpeningHoursResponse(BaseModel):
    """Opening window of a day."""

    start_time: time
    end_time: time
    audience_type: str
    description: Optional[str] = None


class SpecialPeriodResponse(BaseModel):
    """Holiday or closure period covering a day."""

    id: str = Field(..., description="Special period GUID (spp_xxx)")
    name: Optional[str] = None
    start_date: date
    end_date: date
    zone: Optional[str] = None


class CalendarDayResponse(BaseModel):
    """Aggregated view of one calendar day."""

    date: date
    is_open: bool
    opening_hours: List[OpeningHoursResponse]
    paid_tickets_count: int = Field(..., ge=0)
    events: List[EventResponse]
    holiday_periods: List[SpecialPeriodResponse]
    closure_periods: List[SpecialPeriodResponse]


class CalendarResponse(BaseModel):
    """Calendar for a resolved date range."""

    days: List[CalendarDayResponse]
    start_date: date
    end_date: date
    view: CalendarView

    model_config = {
        "json_schema_extra": {
            "example": {
                "days": [
                    {
                        "date": "2024-07-01",
                        "is_open": True,
                        "opening_hours": [
                            {
                                "start_time": "10:00:00",
                                "end_time": "18:00:00",
                                "audience_type": "public",
                                "description": None,
                            }
                        ],
                        "paid_tickets_count": 12,
                        "events": [],
                        "holiday_periods": [],
                        "closure_periods": [],
                    }
                ],
                "start_date": "2024-07-01",
                "end_date": "2024-07-01",
                "view": "day",
            }
        }
    }
