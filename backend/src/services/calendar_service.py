"""
Calendar service building the per-day public calendar.

Reconciles recurring schedules and dated exceptions, special periods, paid
reservation counts and events into one entry per day.

Design:
- Range resolution: day, week (Monday..Sunday), month, or a literal range
- Inputs are fetched first, sequentially on the request session: ticket
  counts (one batched call), events (one listing per event type, paged to
  exhaustion), special periods (once), schedules (once per day)
- Events are deduplicated by GUID, then filtered on the full visibility
  set; the per-type listings only pre-filter when a single status applies
- Any provider failure aborts the build with DependencyUnavailableError;
  there is no partial result
"""

from datetime import date, time
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from sqlalchemy.orm import Session

from backend.src.config.settings import AppSettings, get_settings
from backend.src.models import EventStatus, EventType, SpecialPeriodType
from backend.src.providers.base import (
    ScheduleProvider,
    SpecialPeriodProvider,
    TicketCountProvider,
)
from backend.src.providers.sql import (
    SqlScheduleProvider,
    SqlSpecialPeriodProvider,
    SqlTicketCountProvider,
)
from backend.src.utils.dates import iter_days, resolve_view_range, sunday_based_weekday
from backend.src.utils.logging_config import get_logger
from backend.src.services.event_query_service import EventQueryService
from backend.src.services.exceptions import (
    DependencyUnavailableError,
    ServiceError,
    ValidationError,
)


logger = get_logger("services")

DEFAULT_VISIBLE_STATUSES = frozenset({EventStatus.PUBLIC.value, EventStatus.MEMBER.value})
ALL_EVENT_TYPES = tuple(t.value for t in EventType)


class CalendarService:
    """
    Service assembling calendar days.

    Providers default to the SQL implementations over the same session.

    Usage:
        >>> calendar = CalendarService(db_session)
        >>> result = calendar.build(date(2024, 7, 1), view="week")
        >>> [d["date"] for d in result["days"]]
    """

    def __init__(
        self,
        db: Session,
        schedule_provider: Optional[ScheduleProvider] = None,
        special_period_provider: Optional[SpecialPeriodProvider] = None,
        ticket_provider: Optional[TicketCountProvider] = None,
        query_service: Optional[EventQueryService] = None,
        settings: Optional[AppSettings] = None,
    ):
        """
        Initialize calendar service.

        Args:
            db: SQLAlchemy database session
            schedule_provider: Opening hours source
            special_period_provider: Holiday / closure source
            ticket_provider: Paid reservation counts source
            query_service: Event listing engine
            settings: App settings (page sizes)
        """
        self.db = db
        self.settings = settings or get_settings()
        self.schedules = schedule_provider or SqlScheduleProvider(db)
        self.special_periods = special_period_provider or SqlSpecialPeriodProvider(db)
        self.tickets = ticket_provider or SqlTicketCountProvider(db)
        self.queries = query_service or EventQueryService(db, self.settings)

    def build(
        self,
        start_date: date,
        end_date: Optional[date] = None,
        view: Optional[str] = "month",
        status: Optional[str] = None,
        include_private: bool = False,
        event_types: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """
        Build the calendar for a view anchored on ``start_date``.

        Args:
            start_date: Anchor date (or literal range start)
            end_date: Literal range end; ignored for day/week/month views
            view: "day", "week", "month"; None or "range" for a literal range
            status: Show only this status (ignored with include_private)
            include_private: Show every status
            event_types: Event types to include (default: all)

        Returns:
            Dict with days, start_date, end_date and view

        Raises:
            ValidationError: If the range is inverted or a filter is unknown
            DependencyUnavailableError: If the database or a provider fails
        """
        first, last, resolved_view = resolve_view_range(view, start_date, end_date)
        if last < first:
            raise ValidationError("end_date must be on or after start_date", field="end_date")

        visible = self._visible_statuses(status, include_private)
        types = self._event_types(event_types)

        days = [self._empty_day(d) for d in iter_days(first, last)]

        ticket_counts = self._call_provider(
            "ticket provider",
            lambda: self.tickets.count_paid_by_date(first, last),
        )
        events = self._gather_events(first, last, visible, types)
        periods = self._call_provider(
            "special period provider",
            self.special_periods.get_active,
        )
        schedules = {
            day["date"]: self._call_provider(
                "schedule provider",
                lambda d=day["date"]: self.schedules.get_applicable(
                    sunday_based_weekday(d), d, include_exceptions=True
                ),
            )
            for day in days
        }

        holidays = [p for p in periods if p.type == SpecialPeriodType.HOLIDAY.value]
        closures = [p for p in periods if p.type == SpecialPeriodType.CLOSURE.value]

        for day in days:
            current = day["date"]
            entries = schedules[current]
            windows = [e for e in entries if not e.is_closed]

            day["is_open"] = bool(windows)
            day["opening_hours"] = [e.to_opening_hours() for e in windows]
            day["paid_tickets_count"] = ticket_counts.get(current, 0)
            day["holiday_periods"] = [p.to_dict() for p in holidays if p.contains(current)]
            day["closure_periods"] = [p.to_dict() for p in closures if p.contains(current)]
            day["events"] = [e for e in events if self._occurs_on(e, current)]

        logger.info(
            f"Built {resolved_view} calendar {first}..{last}: "
            f"{len(days)} day(s), {len(events)} event(s)"
        )

        return {
            "days": days,
            "start_date": first,
            "end_date": last,
            "view": resolved_view,
        }

    # =========================================================================
    # Helpers
    # =========================================================================

    def _gather_events(
        self,
        first: date,
        last: date,
        visible: Optional[Set[str]],
        types: List[str],
    ) -> List[dict]:
        """Collect, deduplicate and visibility-filter events over the range."""
        single_status = next(iter(visible)) if visible and len(visible) == 1 else None
        page_size = self.settings.events_max_page_size

        collected = []
        seen = set()
        for event_type in types:
            page = 1
            while True:
                result = self._call_provider(
                    "event query engine",
                    lambda p=page, t=event_type: self.queries.list(
                        type=t,
                        status=single_status,
                        start_date=first,
                        end_date=last,
                        is_active=True,
                        page=p,
                        limit=page_size,
                    ),
                )
                for event in result["events"]:
                    if event["guid"] not in seen:
                        seen.add(event["guid"])
                        collected.append(event)
                if page >= result["total_pages"]:
                    break
                page += 1

        if visible is not None:
            collected = [e for e in collected if e["status"] in visible]

        collected.sort(key=lambda e: (
            e["start_date"],
            e["start_time"] is None,
            e["start_time"] or time.min,
        ))
        return collected

    def _call_provider(self, dependency: str, fn: Callable[[], Any]) -> Any:
        """Run a provider read, turning any failure into DependencyUnavailableError."""
        try:
            return fn()
        except ServiceError:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"{dependency} failed during calendar build: {e}", exc_info=True)
            raise DependencyUnavailableError(dependency, "calendar build", str(e)) from e

    @staticmethod
    def _visible_statuses(status: Optional[str], include_private: bool) -> Optional[Set[str]]:
        """None means every status is visible."""
        if include_private:
            return None
        if status is not None:
            allowed = [s.value for s in EventStatus]
            if status not in allowed:
                raise ValidationError(
                    f"Invalid status: {status}. Must be one of: {', '.join(allowed)}",
                    field="status"
                )
            return {status}
        return set(DEFAULT_VISIBLE_STATUSES)

    @staticmethod
    def _event_types(event_types: Optional[Iterable[str]]) -> List[str]:
        if event_types is None:
            return list(ALL_EVENT_TYPES)
        types = []
        for event_type in event_types:
            if event_type not in ALL_EVENT_TYPES:
                raise ValidationError(
                    f"Invalid event type: {event_type}. "
                    f"Must be one of: {', '.join(ALL_EVENT_TYPES)}",
                    field="event_types"
                )
            if event_type not in types:
                types.append(event_type)
        return types

    @staticmethod
    def _occurs_on(event: dict, day: date) -> bool:
        return event["start_date"] <= day <= (event["end_date"] or event["start_date"])

    @staticmethod
    def _empty_day(day: date) -> Dict[str, Any]:
        return {
            "date": day,
            "is_open": False,
            "opening_hours": [],
            "paid_tickets_count": 0,
            "events": [],
            "holiday_periods": [],
            "closure_periods": [],
        }
