"""
Pydantic schemas for API request/response validation.

This module exports all schema classes for use in API endpoints.
"""

from backend.src.schemas.event import (
    EventType,
    EventCategory,
    EventStatus,
    LocationType,
    EventCreate,
    EventUpdate,
    EventResponse,
    EventDetailResponse,
    EventListResponse,
)
from backend.src.schemas.calendar import (
    CalendarView,
    OpeningHoursResponse,
    SpecialPeriodResponse,
    CalendarDayResponse,
    CalendarResponse,
)

__all__ = [
    "EventType",
    "EventCategory",
    "EventStatus",
    "LocationType",
    "EventCreate",
    "EventUpdate",
    "EventResponse",
    "EventDetailResponse",
    "EventListResponse",
    "CalendarView",
    "OpeningHoursResponse",
    "SpecialPeriodResponse",
    "CalendarDayResponse",
    "CalendarResponse",
]
