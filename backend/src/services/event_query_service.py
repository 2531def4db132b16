"""
Event query service for filtered, paginated event listings.

Design:
- Filters are optional and combined with AND
- Date filters use the event's effective interval
  [start_date, coalesce(end_date, start_date)], so single-day events
  overlap a range exactly when their start_date falls in it
- ``total`` counts the filtered set independently of the page
- Ordering is start_date, start_time (NULL last), then id so pages are stable
- Relation enrichment touches only the returned page
"""

import math
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from backend.src.config.settings import AppSettings, get_settings
from backend.src.models import Event, EventType, EventCategory, EventStatus, LocationType
from backend.src.utils.logging_config import get_logger
from backend.src.services.event_response import build_event_response
from backend.src.services.exceptions import (
    DATABASE_UNAVAILABLE_ERRORS,
    DependencyUnavailableError,
    ValidationError,
)
from backend.src.services.relation_service import RelationService


logger = get_logger("services")


class EventQueryService:
    """
    Service for listing events.

    Usage:
        >>> queries = EventQueryService(db_session)
        >>> page = queries.list(
        ...     type="museum",
        ...     start_date=date(2024, 7, 1),
        ...     end_date=date(2024, 7, 31),
        ...     is_active=True,
        ... )
        >>> page["total"], len(page["events"])
    """

    def __init__(self, db: Session, settings: Optional[AppSettings] = None):
        """
        Initialize event query service.

        Args:
            db: SQLAlchemy database session
            settings: Page size settings (defaults to the cached app settings)
        """
        self.db = db
        self.settings = settings or get_settings()

    def list(
        self,
        type: Optional[str] = None,
        category: Optional[str] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        on_date: Optional[date] = None,
        location_type: Optional[str] = None,
        is_active: Optional[bool] = None,
        page: int = 1,
        limit: Optional[int] = None,
        include_relations: bool = False,
        types: Optional[Iterable[str]] = None,
        statuses: Optional[Iterable[str]] = None,
    ) -> Dict[str, Any]:
        """
        List events matching every given filter.

        Args:
            type: Exact event type
            category: Exact category
            status: Exact status
            start_date: Keep events whose interval ends on or after this date
            end_date: Keep events whose interval starts on or before this date
            on_date: Keep events whose interval contains this date
            location_type: Exact location type
            is_active: Exact active flag
            page: 1-based page number (values below 1 are treated as 1)
            limit: Page size, clamped to [1, MUSCAL_EVENTS_MAX_PAGE_SIZE]
                (default MUSCAL_EVENTS_PAGE_SIZE)
            include_relations: Add related_events / parent_events to each event
            types: Any of these event types
            statuses: Any of these statuses

        Returns:
            Dict with events (response dictionaries), total, page, limit and
            total_pages

        Raises:
            ValidationError: If an enumerated filter value is unknown
            DependencyUnavailableError: If the database cannot be reached
        """
        page = max(1, page or 1)
        if limit is None:
            limit = self.settings.events_page_size
        limit = self.settings.clamp_page_size(limit)

        self._validate_choice("type", type, EventType)
        self._validate_choice("category", category, EventCategory)
        self._validate_choice("status", status, EventStatus)
        self._validate_choice("location_type", location_type, LocationType)
        types = self._validate_many("types", types, EventType)
        statuses = self._validate_many("statuses", statuses, EventStatus)

        try:
            query = self._apply_filters(
                self.db.query(Event),
                type=type,
                category=category,
                status=status,
                start_date=start_date,
                end_date=end_date,
                on_date=on_date,
                location_type=location_type,
                is_active=is_active,
                types=types,
                statuses=statuses,
            )

            total = query.count()

            events = (
                query.order_by(
                    Event.start_date.asc(),
                    Event.start_time.is_(None).asc(),
                    Event.start_time.asc(),
                    Event.id.asc(),
                )
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )

            if include_relations:
                rendered = RelationService(self.db).enrich(events)
            else:
                rendered = [build_event_response(e) for e in events]
        except DATABASE_UNAVAILABLE_ERRORS as e:
            self.db.rollback()
            logger.error(f"Database unavailable while listing events: {e}")
            raise DependencyUnavailableError("database", "list events") from e

        logger.debug(
            f"Listed events page {page} (limit {limit}): "
            f"{len(rendered)} of {total}"
        )

        return {
            "events": rendered,
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit),
        }

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _apply_filters(
        query: Query,
        type: Optional[str] = None,
        category: Optional[str] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        on_date: Optional[date] = None,
        location_type: Optional[str] = None,
        is_active: Optional[bool] = None,
        types: Optional[List[str]] = None,
        statuses: Optional[List[str]] = None,
    ) -> Query:
        effective_end = func.coalesce(Event.end_date, Event.start_date)

        if type is not None:
            query = query.filter(Event.type == type)
        if types:
            query = query.filter(Event.type.in_(types))
        if category is not None:
            query = query.filter(Event.category == category)
        if status is not None:
            query = query.filter(Event.status == status)
        if statuses:
            query = query.filter(Event.status.in_(statuses))
        if location_type is not None:
            query = query.filter(Event.location_type == location_type)
        if is_active is not None:
            query = query.filter(Event.is_active == is_active)

        if start_date is not None:
            query = query.filter(effective_end >= start_date)
        if end_date is not None:
            query = query.filter(Event.start_date <= end_date)
        if on_date is not None:
            query = query.filter(Event.start_date <= on_date, effective_end >= on_date)

        return query

    @staticmethod
    def _validate_choice(field: str, value: Optional[str], enum_cls) -> None:
        if value is None:
            return
        allowed = [member.value for member in enum_cls]
        if value not in allowed:
            raise ValidationError(
                f"Invalid {field}: {value}. Must be one of: {', '.join(allowed)}",
                field=field
            )

    @classmethod
    def _validate_many(cls, field: str, values: Optional[Iterable[str]], enum_cls) -> Optional[List[str]]:
        if values is None:
            return None
        values = list(values)
        for value in values:
            cls._validate_choice(field, value, enum_cls)
        return values
