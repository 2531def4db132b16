"""
Pydantic schemas for event API request/response validation.

Provides data validation and serialization for:
- Event creation and update requests
- Event API responses (single, with relations, paginated list)

Design:
- GUIDs are exposed via the guid field, never internal IDs
- Cross-field invariants (museum category, date order) are enforced by
  EventService so every caller gets the same 400 response
- EventUpdate is applied with exclude_unset: an explicit null clears a field
"""

import enum
from datetime import datetime, date, time
from typing import Optional, List
from pydantic import BaseModel, Field, field_serializer


# ============================================================================
# Enums
# ============================================================================


class EventType(str, enum.Enum):
    """Who runs the event."""
    MUSEUM = "museum"
    ASSOCIATION = "association"
    EXTERNAL = "external"


class EventCategory(str, enum.Enum):
    """Kind of museum event."""
    LIVE = "live"
    MEDIATION = "mediation"
    WORKSHOP = "workshop"
    CONFERENCE = "conference"
    EXHIBITION = "exhibition"
    OTHER = "other"


class EventStatus(str, enum.Enum):
    """Visibility tier."""
    DRAFT = "draft"
    PRIVATE = "private"
    MEMBER = "member"
    PUBLIC = "public"


class LocationType(str, enum.Enum):
    """Where the event takes place."""
    MUSEUM = "museum"
    EXTERNAL = "external"


# ============================================================================
# Request Schemas
# ============================================================================


class EventCreate(BaseModel):
    """
    Schema for creating an event.

    Required:
        type: museum, association or external
        start_date: First day of the event

    Optional:
        category: Required when type is museum
        status: Visibility (default: draft)
        end_date: Last day (on or after start_date)
        related_event_ids: GUIDs of events to link as children
    """

    type: EventType
    category: Optional[EventCategory] = Field(default=None)
    status: EventStatus = Field(default=EventStatus.DRAFT)

    start_date: date
    end_date: Optional[date] = Field(default=None)
    start_time: Optional[time] = Field(default=None)
    end_time: Optional[time] = Field(default=None)

    location_type: LocationType = Field(default=LocationType.MUSEUM)
    location_name: Optional[str] = Field(default=None, max_length=255)
    location_address: Optional[str] = Field(default=None)
    location_city: Optional[str] = Field(default=None, max_length=100)
    location_postal_code: Optional[str] = Field(default=None, max_length=10)

    public_title_fr: Optional[str] = Field(default=None, max_length=255)
    public_title_en: Optional[str] = Field(default=None, max_length=255)
    public_description_fr: Optional[str] = Field(default=None)
    public_description_en: Optional[str] = Field(default=None)
    public_image_url: Optional[str] = Field(default=None)

    private_notes: Optional[str] = Field(default=None)
    private_contact: Optional[str] = Field(default=None)

    manager_dev: bool = Field(default=False)
    manager_bureau: bool = Field(default=False)
    manager_museum: bool = Field(default=False)
    manager_com: bool = Field(default=False)

    capacity: Optional[int] = Field(default=None, ge=1)
    is_active: bool = Field(default=True)

    related_event_ids: Optional[List[str]] = Field(
        default=None,
        description="GUIDs of events to link as related children"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "type": "museum",
                "category": "live",
                "status": "public",
                "start_date": "2024-07-01",
                "start_time": "20:00",
                "public_title_fr": "Concert d'été",
                "public_title_en": "Summer concert",
            }
        }
    }


class EventUpdate(BaseModel):
    """
    Schema for updating an existing event.

    All fields are optional - only provided fields are written, and a field
    sent as null is cleared. ``related_event_ids`` replaces the event's
    outgoing relations.
    """

    type: Optional[EventType] = None
    category: Optional[EventCategory] = None
    status: Optional[EventStatus] = None

    start_date: Optional[date] = None
    end_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None

    location_type: Optional[LocationType] = None
    location_name: Optional[str] = Field(default=None, max_length=255)
    location_address: Optional[str] = None
    location_city: Optional[str] = Field(default=None, max_length=100)
    location_postal_code: Optional[str] = Field(default=None, max_length=10)

    public_title_fr: Optional[str] = Field(default=None, max_length=255)
    public_title_en: Optional[str] = Field(default=None, max_length=255)
    public_description_fr: Optional[str] = None
    public_description_en: Optional[str] = None
    public_image_url: Optional[str] = None

    private_notes: Optional[str] = None
    private_contact: Optional[str] = None

    manager_dev: Optional[bool] = None
    manager_bureau: Optional[bool] = None
    manager_museum: Optional[bool] = None
    manager_com: Optional[bool] = None

    capacity: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = None

    related_event_ids: Optional[List[str]] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "public",
                "end_date": "2024-07-03",
                "related_event_ids": ["evt_01j1z8k4y00000000000000001"],
            }
        }
    }


# ============================================================================
# Response Schemas
# ============================================================================


class EventResponse(BaseModel):
    """Schema for event API responses (no relations)."""

    guid: str = Field(..., description="Event GUID (evt_xxx)")

    type: EventType
    category: Optional[EventCategory]
    status: EventStatus

    start_date: date
    end_date: Optional[date]
    start_time: Optional[time]
    end_time: Optional[time]

    location_type: LocationType
    location_name: Optional[str]
    location_address: Optional[str]
    location_city: Optional[str]
    location_postal_code: Optional[str]

    public_title_fr: Optional[str]
    public_title_en: Optional[str]
    public_description_fr: Optional[str]
    public_description_en: Optional[str]
    public_image_url: Optional[str]

    private_notes: Optional[str]
    private_contact: Optional[str]

    manager_dev: bool
    manager_bureau: bool
    manager_museum: bool
    manager_com: bool

    capacity: Optional[int]
    is_active: bool

    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    @classmethod
    def serialize_datetime_utc(cls, v: datetime) -> str:
        """Serialize datetime as ISO 8601 with explicit UTC timezone."""
        return v.isoformat() + "Z" if v else None

    model_config = {"from_attributes": True}


class EventDetailResponse(EventResponse):
    """
    Event response with relation neighbours.

    related_events / parent_events are present when relations were
    requested and null otherwise. Neighbours carry no relations of their own.
    """

    related_events: Optional[List[EventResponse]] = Field(
        default=None, description="Children (this event is the parent)"
    )
    parent_events: Optional[List[EventResponse]] = Field(
        default=None, description="Parents (this event is the child)"
    )


class EventListResponse(BaseModel):
    """Paginated event listing."""

    events: List[EventDetailResponse]
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total_pages: int = Field(..., ge=0)
