"""
SQLAlchemy-backed calendar providers.

Read-only implementations of the provider contracts over the schedules,
special_periods and tickets tables. Each provider shares the request's
session; none of them writes or commits.
"""

from datetime import date, time
from typing import Dict, List

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from backend.src.models import (
    PUBLIC_AUDIENCES,
    Schedule,
    SpecialPeriod,
    SpecialPeriodType,
    Ticket,
    TicketStatus,
)
from backend.src.providers.base import (
    ScheduleEntry,
    SpecialPeriodEntry,
    ScheduleProvider,
    SpecialPeriodProvider,
    TicketCountProvider,
)
from backend.src.utils.logging_config import get_logger


logger = get_logger("db")

CLOSURE_DESCRIPTION = "Fermeture exceptionnelle"


def _to_entry(schedule: Schedule) -> ScheduleEntry:
    return ScheduleEntry(
        start_time=schedule.start_time,
        end_time=schedule.end_time,
        audience_type=schedule.audience_type,
        description=schedule.description,
        is_closed=schedule.is_closed,
    )


class SqlScheduleProvider(ScheduleProvider):
    """
    Public opening hours from the ``schedules`` table.

    Recurring entries match on ``day_of_week``; exceptions match when their
    date range covers the day. On a day inside an active closure period
    only closing entries are returned, and a synthetic closed entry stands
    in when none is stored, so the day always reads as closed.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_applicable(
        self,
        day_of_week: int,
        on_date: date,
        include_exceptions: bool = True
    ) -> List[ScheduleEntry]:
        day_match = and_(
            Schedule.is_exception.is_(False),
            Schedule.day_of_week == day_of_week,
        )
        if include_exceptions:
            day_match = or_(
                day_match,
                and_(
                    Schedule.is_exception.is_(True),
                    Schedule.start_date <= on_date,
                    Schedule.end_date >= on_date,
                ),
            )

        query = self.db.query(Schedule).filter(day_match)

        if self._in_closure_period(on_date):
            closed = (
                query.filter(Schedule.is_closed.is_(True))
                .order_by(*self._ordering())
                .all()
            )
            logger.debug(f"{on_date} is inside a closure period ({len(closed)} closing entries)")
            if not closed:
                return [ScheduleEntry(
                    start_time=time(0, 0),
                    end_time=time(0, 0),
                    audience_type="public",
                    description=CLOSURE_DESCRIPTION,
                    is_closed=True,
                )]
            return [_to_entry(s) for s in closed]

        schedules = (
            query.filter(Schedule.audience_type.in_(PUBLIC_AUDIENCES))
            .order_by(*self._ordering())
            .all()
        )
        return [_to_entry(s) for s in schedules]

    def _in_closure_period(self, on_date: date) -> bool:
        return self.db.query(SpecialPeriod.id).filter(
            SpecialPeriod.type == SpecialPeriodType.CLOSURE.value,
            SpecialPeriod.is_active.is_(True),
            SpecialPeriod.start_date <= on_date,
            SpecialPeriod.end_date >= on_date,
        ).first() is not None

    @staticmethod
    def _ordering():
        return (
            Schedule.position.asc(),
            Schedule.is_exception.asc(),
            Schedule.day_of_week.asc(),
            Schedule.start_time.asc(),
        )


class SqlSpecialPeriodProvider(SpecialPeriodProvider):
    """Active rows of ``special_periods``, most recent first."""

    def __init__(self, db: Session):
        self.db = db

    def get_active(self) -> List[SpecialPeriodEntry]:
        periods = (
            self.db.query(SpecialPeriod)
            .filter(SpecialPeriod.is_active.is_(True))
            .order_by(SpecialPeriod.start_date.desc(), SpecialPeriod.end_date.desc())
            .all()
        )
        return [
            SpecialPeriodEntry(
                id=p.guid,
                type=p.type,
                start_date=p.start_date,
                end_date=p.end_date,
                name=p.name,
                zone=p.zone,
            )
            for p in periods
        ]


class SqlTicketCountProvider(TicketCountProvider):
    """Paid tickets from ``tickets`` grouped by reservation date."""

    def __init__(self, db: Session):
        self.db = db

    def count_paid_by_date(self, start_date: date, end_date: date) -> Dict[date, int]:
        rows = (
            self.db.query(Ticket.reservation_date, func.count(Ticket.id))
            .filter(
                Ticket.status == TicketStatus.PAID.value,
                Ticket.reservation_date >= start_date,
                Ticket.reservation_date <= end_date,
            )
            .group_by(Ticket.reservation_date)
            .all()
        )
        return {reservation_date: count for reservation_date, count in rows}
