"""
Events API endpoints for the public activity calendar.

Provides endpoints for:
- Listing events with filters and pagination
- Building the per-day calendar
- Getting, creating, updating and deleting events

Design:
- Thin adapters: all rules live in the services
- Service errors map to status codes (400 validation, 404 not found,
  503 dependency unavailable)
- All endpoints use GUID format (evt_xxx) for identifiers
- /calendar is declared before /{guid} so it is not captured as a GUID
"""

from typing import List, Optional
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.src.config.settings import get_settings
from backend.src.db.database import get_db
from backend.src.schemas.calendar import CalendarResponse, CalendarView
from backend.src.schemas.event import (
    EventCategory,
    EventCreate,
    EventDetailResponse,
    EventListResponse,
    EventStatus,
    EventType,
    EventUpdate,
    LocationType,
)
from backend.src.services.calendar_service import CalendarService
from backend.src.services.event_query_service import EventQueryService
from backend.src.services.event_service import EventService
from backend.src.services.exceptions import (
    DependencyUnavailableError,
    NotFoundError,
    ValidationError,
)
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/events",
    tags=["Events"],
)


# ============================================================================
# Dependencies
# ============================================================================


def get_event_service(db: Session = Depends(get_db)) -> EventService:
    """Create EventService instance with database session."""
    return EventService(db)


def get_event_query_service(db: Session = Depends(get_db)) -> EventQueryService:
    """Create EventQueryService instance with database session."""
    return EventQueryService(db)


def get_calendar_service(db: Session = Depends(get_db)) -> CalendarService:
    """Create CalendarService with the default SQL providers."""
    return CalendarService(db)


def _unavailable(e: DependencyUnavailableError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=e.message,
    )


# ============================================================================
# Collection endpoints
# ============================================================================


@router.get(
    "",
    response_model=EventListResponse,
    summary="List events",
    description="List events with optional filters, paginated",
)
async def list_events(
    type: Optional[EventType] = Query(default=None, description="Filter by event type"),
    category: Optional[EventCategory] = Query(default=None, description="Filter by category"),
    event_status: Optional[EventStatus] = Query(
        default=None,
        alias="status",
        description="Filter by status",
    ),
    start_date: Optional[date] = Query(
        default=None,
        description="Keep events ending on or after this date",
    ),
    end_date: Optional[date] = Query(
        default=None,
        description="Keep events starting on or before this date",
    ),
    on_date: Optional[date] = Query(
        default=None,
        alias="date",
        description="Keep events spanning this date",
    ),
    location_type: Optional[LocationType] = Query(default=None),
    is_active: Optional[bool] = Query(default=None),
    page: int = Query(default=1, description="1-based page number"),
    limit: Optional[int] = Query(default=None, description="Page size"),
    include_relations: bool = Query(default=False, description="Add related/parent events"),
    query_service: EventQueryService = Depends(get_event_query_service),
) -> EventListResponse:
    """
    List events.

    Example:
        GET /api/events?type=museum&start_date=2024-07-01&end_date=2024-07-31
    """
    try:
        result = query_service.list(
            type=type.value if type else None,
            category=category.value if category else None,
            status=event_status.value if event_status else None,
            start_date=start_date,
            end_date=end_date,
            on_date=on_date,
            location_type=location_type.value if location_type else None,
            is_active=is_active,
            page=page,
            limit=limit,
            include_relations=include_relations,
        )
        return EventListResponse(**result)

    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    except DependencyUnavailableError as e:
        raise _unavailable(e)


@router.post(
    "",
    response_model=EventDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new event",
)
async def create_event(
    event_data: EventCreate,
    event_service: EventService = Depends(get_event_service),
) -> EventDetailResponse:
    """
    Create an event, optionally linked to existing events.

    Raises:
        400: Invariant violated (museum without category, inverted dates,
             self-reference)
        404: A related event does not exist
        503: Database unavailable
    """
    try:
        event = event_service.create(**event_data.model_dump())
        return EventDetailResponse(**event_service.get(event.guid, include_relations=True))

    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{e.resource} {e.identifier} not found",
        )

    except DependencyUnavailableError as e:
        raise _unavailable(e)


@router.get(
    "/calendar",
    response_model=CalendarResponse,
    summary="Calendar view",
    description="Per-day opening hours, periods, ticket counts and events",
)
async def get_calendar(
    start_date: date = Query(..., description="Anchor date (or literal range start)"),
    end_date: Optional[date] = Query(default=None, description="Literal range end"),
    view: Optional[CalendarView] = Query(
        default=None,
        description="day, week, month or range (default from MUSCAL_CALENDAR_DEFAULT_VIEW)",
    ),
    event_status: Optional[EventStatus] = Query(default=None, alias="status"),
    include_private: bool = Query(default=False, description="Show every status"),
    event_types: Optional[List[EventType]] = Query(default=None, alias="event_type"),
    calendar_service: CalendarService = Depends(get_calendar_service),
) -> CalendarResponse:
    """
    Build the calendar.

    Example:
        GET /api/events/calendar?start_date=2024-07-03&view=week
    """
    resolved_view = view.value if view else get_settings().calendar_default_view

    try:
        result = calendar_service.build(
            start_date=start_date,
            end_date=end_date,
            view=resolved_view,
            status=event_status.value if event_status else None,
            include_private=include_private,
            event_types=[t.value for t in event_types] if event_types else None,
        )
        return CalendarResponse(**result)

    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    except DependencyUnavailableError as e:
        raise _unavailable(e)


# ============================================================================
# Item endpoints
# ============================================================================


@router.get(
    "/{guid}",
    response_model=EventDetailResponse,
    summary="Get event details",
)
async def get_event(
    guid: str,
    include_relations: bool = Query(default=True, description="Add related/parent events"),
    event_service: EventService = Depends(get_event_service),
) -> EventDetailResponse:
    """
    Get a single event by GUID.

    Raises:
        404: Event not found
    """
    try:
        event = event_service.get(guid, include_relations=include_relations)
    except DependencyUnavailableError as e:
        raise _unavailable(e)

    if event is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event {guid} not found",
        )
    return EventDetailResponse(**event)


@router.put(
    "/{guid}",
    response_model=EventDetailResponse,
    summary="Update an event",
)
async def update_event(
    guid: str,
    event_data: EventUpdate,
    event_service: EventService = Depends(get_event_service),
) -> EventDetailResponse:
    """
    Update an event. Omitted fields are left untouched; null clears a field.

    Raises:
        400: Invariant violated on the effective values
        404: Event (or a related event) not found
    """
    try:
        event = event_service.update(guid, **event_data.model_dump(exclude_unset=True))
        logger.info(f"Updated event via API: {guid}")
        return EventDetailResponse(**event_service.get(event.guid, include_relations=True))

    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)

    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{e.resource} {e.identifier} not found",
        )

    except DependencyUnavailableError as e:
        raise _unavailable(e)


@router.delete(
    "/{guid}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an event",
)
async def delete_event(
    guid: str,
    event_service: EventService = Depends(get_event_service),
) -> None:
    """
    Hard-delete an event and its relations.

    Raises:
        404: Event not found
    """
    try:
        deleted = event_service.delete(guid)
    except DependencyUnavailableError as e:
        raise _unavailable(e)

    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event {guid} not found",
        )
