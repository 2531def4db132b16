"""
Service layer for business logic.

This module exports all service classes for use in API endpoints.
"""

from backend.src.services.event_service import EventService
from backend.src.services.relation_service import RelationService
from backend.src.services.event_query_service import EventQueryService
from backend.src.services.calendar_service import CalendarService
from backend.src.services.exceptions import (
    ServiceError,
    NotFoundError,
    ValidationError,
    DependencyUnavailableError,
)

__all__ = [
    "EventService",
    "RelationService",
    "EventQueryService",
    "CalendarService",
    "ServiceError",
    "NotFoundError",
    "ValidationError",
    "DependencyUnavailableError",
]
