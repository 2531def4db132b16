"""
Read-only data providers consumed by the calendar builder.

- base: Provider contracts and the entry dataclasses they return
- sql: Default implementations over the schedules, special_periods and
  tickets tables
"""

from backend.src.providers.base import (
    ScheduleEntry,
    SpecialPeriodEntry,
    ScheduleProvider,
    SpecialPeriodProvider,
    TicketCountProvider,
)
from backend.src.providers.sql import (
    SqlScheduleProvider,
    SqlSpecialPeriodProvider,
    SqlTicketCountProvider,
)

__all__ = [
    "ScheduleEntry",
    "SpecialPeriodEntry",
    "ScheduleProvider",
    "SpecialPeriodProvider",
    "TicketCountProvider",
    "SqlScheduleProvider",
    "SqlSpecialPeriodProvider",
    "SqlTicketCountProvider",
]
