"""
Abstract provider contracts for calendar inputs.

The calendar builder never reads schedules, special periods or ticket
sales directly; it asks providers implementing these interfaces. The SQL
implementations in ``backend.src.providers.sql`` are the defaults, tests
substitute fakes or mocks.

Design Pattern: Strategy pattern for pluggable read-only data sources
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, time
from typing import Dict, List, Optional


@dataclass
class ScheduleEntry:
    """
    One schedule line applicable to a given day.

    Attributes:
        start_time: Window start
        end_time: Window end
        audience_type: public, member or holiday
        description: Optional text shown with the window
        is_closed: True for closing entries (the window is not an opening)
    """
    start_time: time
    end_time: time
    audience_type: str
    description: Optional[str] = None
    is_closed: bool = False

    def to_opening_hours(self) -> dict:
        """Render as an opening-hours dictionary for a calendar day."""
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "audience_type": self.audience_type,
            "description": self.description,
        }


@dataclass
class SpecialPeriodEntry:
    """
    Active holiday or closure period.

    Attributes:
        id: Public identifier of the period (spp_xxx)
        type: holiday or closure
        start_date: First day (inclusive)
        end_date: Last day (inclusive)
        name: Display name
        zone: School holiday zone, if any
    """
    id: str
    type: str
    start_date: date
    end_date: date
    name: Optional[str] = None
    zone: Optional[str] = None

    def contains(self, day: date) -> bool:
        """Check whether ``day`` falls inside the period."""
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> dict:
        """Render as a calendar-day period dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "zone": self.zone,
        }


class ScheduleProvider(ABC):
    """Source of opening-hours entries."""

    @abstractmethod
    def get_applicable(
        self,
        day_of_week: int,
        on_date: date,
        include_exceptions: bool = True
    ) -> List[ScheduleEntry]:
        """
        Get the schedule entries that apply to a date.

        Args:
            day_of_week: 0 (Sunday) to 6 (Saturday)
            on_date: The calendar date
            include_exceptions: Also return dated exceptions covering on_date

        Returns:
            Entries in display order
        """


class SpecialPeriodProvider(ABC):
    """Source of holiday and closure periods."""

    @abstractmethod
    def get_active(self) -> List[SpecialPeriodEntry]:
        """Get every active special period."""


class TicketCountProvider(ABC):
    """Source of paid reservation counts."""

    @abstractmethod
    def count_paid_by_date(self, start_date: date, end_date: date) -> Dict[date, int]:
        """
        Count paid tickets per reservation date.

        Args:
            start_date: First date (inclusive)
            end_date: Last date (inclusive)

        Returns:
            Mapping of date to count; dates without paid tickets may be absent
        """
