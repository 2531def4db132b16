"""
SQLAlchemy models for the museum calendar backend.

This module provides the declarative base class and imports all models
to ensure they are registered with SQLAlchemy's metadata.
"""

from sqlalchemy.orm import declarative_base

# All models inherit from this Base class
Base = declarative_base()


# Calendar-owned tables
from backend.src.models.event import (
    Event,
    EventType,
    EventCategory,
    EventStatus,
    LocationType,
)
from backend.src.models.event_relation import EventRelation, RelationType

# Tables owned by the back-office, read through the providers
from backend.src.models.schedule import Schedule, AudienceType, PUBLIC_AUDIENCES
from backend.src.models.special_period import SpecialPeriod, SpecialPeriodType
from backend.src.models.ticket import Ticket, TicketStatus

__all__ = [
    "Base",
    "Event",
    "EventType",
    "EventCategory",
    "EventStatus",
    "LocationType",
    "EventRelation",
    "RelationType",
    "Schedule",
    "AudienceType",
    "PUBLIC_AUDIENCES",
    "SpecialPeriod",
    "SpecialPeriodType",
    "Ticket",
    "TicketStatus",
]
