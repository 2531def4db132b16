"""
Event model for the public activity calendar.

Events are dated entries run by the museum, by an association or by an
external organiser. Visibility is driven by ``status``; the ``manager_*``
flags record which internal teams handle the event.

Design Rationale:
- Hard delete: an event and its relation edges disappear together
- end_date NULL means a single-day event; the effective interval is
  [start_date, coalesce(end_date, start_date)]
- category is required for museum events only (enforced in EventService)
- Enumerations are stored as strings; the Enum classes list accepted values
- Bilingual public fields (fr/en) are separate columns, private fields are
  never rendered on public surfaces
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, Date, Time, Text,
    CheckConstraint, Index
)

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin


class EventType(enum.Enum):
    """Who runs the event."""
    MUSEUM = "museum"
    ASSOCIATION = "association"
    EXTERNAL = "external"


class EventCategory(enum.Enum):
    """Kind of museum event (normally null for other types)."""
    LIVE = "live"
    MEDIATION = "mediation"
    WORKSHOP = "workshop"
    CONFERENCE = "conference"
    EXHIBITION = "exhibition"
    OTHER = "other"


class EventStatus(enum.Enum):
    """Visibility tier, from least to most visible."""
    DRAFT = "draft"
    PRIVATE = "private"
    MEMBER = "member"
    PUBLIC = "public"


class LocationType(enum.Enum):
    """Where the event takes place."""
    MUSEUM = "museum"
    EXTERNAL = "external"


class Event(Base, GuidMixin):
    """
    Calendar event model.

    Attributes:
        id: Primary key (internal, never exposed)
        uuid: UUIDv7 for external identification (inherited from GuidMixin)
        guid: GUID string property (evt_xxx, inherited from GuidMixin)

        Classification:
            type: museum, association or external
            category: live, mediation, workshop, conference, exhibition, other
            status: draft, private, member or public

        Time Fields:
            start_date: First day of the event
            end_date: Last day (NULL for single-day events)
            start_time / end_time: Optional daily time window

        Location Fields:
            location_type: museum or external
            location_name, location_address, location_city,
            location_postal_code: Free-text address for external venues

        Public Content:
            public_title_fr / public_title_en
            public_description_fr / public_description_en
            public_image_url

        Private Content:
            private_notes, private_contact

        Management:
            manager_dev, manager_bureau, manager_museum, manager_com
            capacity: Optional positive seat count
            is_active: Inactive events are hidden from the calendar

        Timestamps:
            created_at: Creation timestamp
            updated_at: Last update timestamp

    Constraints:
        - end_date IS NULL OR end_date >= start_date
        - capacity IS NULL OR capacity > 0

    Indexes:
        - uuid (unique, for GUID lookups)
        - start_date, end_date (for range queries)
        - type, status (for calendar filters)
    """

    __tablename__ = "events"

    GUID_PREFIX = "evt"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Classification
    type = Column(String(20), nullable=False, index=True)
    category = Column(String(20), nullable=True)
    status = Column(String(20), default="draft", nullable=False, index=True)

    # Time fields
    start_date = Column(Date, nullable=False, index=True)
    end_date = Column(Date, nullable=True)
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)

    # Location
    location_type = Column(String(20), default="museum", nullable=False)
    location_name = Column(String(255), nullable=True)
    location_address = Column(Text, nullable=True)
    location_city = Column(String(100), nullable=True)
    location_postal_code = Column(String(10), nullable=True)

    # Public content
    public_title_fr = Column(String(255), nullable=True)
    public_title_en = Column(String(255), nullable=True)
    public_description_fr = Column(Text, nullable=True)
    public_description_en = Column(Text, nullable=True)
    public_image_url = Column(Text, nullable=True)

    # Private content
    private_notes = Column(Text, nullable=True)
    private_contact = Column(Text, nullable=True)

    # Management
    manager_dev = Column(Boolean, default=False, nullable=False)
    manager_bureau = Column(Boolean, default=False, nullable=False)
    manager_museum = Column(Boolean, default=False, nullable=False)
    manager_com = Column(Boolean, default=False, nullable=False)
    capacity = Column(Integer, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )

    __table_args__ = (
        CheckConstraint(
            "end_date IS NULL OR end_date >= start_date",
            name="ck_events_date_order"
        ),
        CheckConstraint(
            "capacity IS NULL OR capacity > 0",
            name="ck_events_capacity_positive"
        ),
        Index("idx_events_dates", "start_date", "end_date"),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<Event("
            f"id={self.id}, "
            f"type={self.type}, "
            f"start_date={self.start_date}, "
            f"status={self.status}"
            f")>"
        )

    def __str__(self) -> str:
        """Human-readable string representation."""
        title = self.public_title_fr or self.public_title_en or self.guid
        return f"{title} - {self.start_date}"
