"""
Event service for managing calendar events.

Provides business logic for creating, retrieving, updating and deleting
events, including the maintenance of their outgoing relations.

Design:
- Validation runs first, then every write, then a single commit; any
  failure rolls the whole unit of work back
- Invariants are checked on effective values (stored record overlaid with
  the patch), so a partial update cannot break them
- Hard delete: relation edges go with the event
- Unknown or malformed GUIDs behave the same (NotFoundError / None / False)
"""

import enum
from datetime import date, datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from backend.src.models import (
    Event,
    EventType,
    EventCategory,
    EventStatus,
    LocationType,
)
from backend.src.utils.logging_config import get_logger
from backend.src.services.event_response import build_event_response
from backend.src.services.exceptions import (
    DATABASE_UNAVAILABLE_ERRORS,
    DependencyUnavailableError,
    NotFoundError,
    ValidationError,
)
from backend.src.services.guid import GuidService
from backend.src.services.relation_service import RelationService


logger = get_logger("services")

# Fields a caller may set on create/update
WRITABLE_FIELDS = frozenset({
    "type",
    "category",
    "status",
    "start_date",
    "end_date",
    "start_time",
    "end_time",
    "location_type",
    "location_name",
    "location_address",
    "location_city",
    "location_postal_code",
    "public_title_fr",
    "public_title_en",
    "public_description_fr",
    "public_description_en",
    "public_image_url",
    "private_notes",
    "private_contact",
    "manager_dev",
    "manager_bureau",
    "manager_museum",
    "manager_com",
    "capacity",
    "is_active",
})

# Fields whose column is NOT NULL; a patch may not clear them
NON_NULLABLE_FIELDS = frozenset({
    "type",
    "status",
    "start_date",
    "location_type",
    "manager_dev",
    "manager_bureau",
    "manager_museum",
    "manager_com",
    "is_active",
})

CHOICE_FIELDS = {
    "type": EventType,
    "category": EventCategory,
    "status": EventStatus,
    "location_type": LocationType,
}


class EventService:
    """
    Service for managing calendar events.

    Usage:
        >>> service = EventService(db_session)
        >>> event = service.create(
        ...     type="museum",
        ...     category="live",
        ...     status="public",
        ...     start_date=date(2024, 7, 1),
        ... )
        >>> service.get(event.guid, include_relations=True)
    """

    def __init__(self, db: Session):
        """
        Initialize event service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db
        self.relations = RelationService(db)

    # =========================================================================
    # Reads
    # =========================================================================

    def get_by_guid(self, guid: str) -> Event:
        """
        Get an event by GUID.

        Args:
            guid: Event GUID (evt_xxx format)

        Returns:
            Event instance

        Raises:
            NotFoundError: If the GUID is malformed or no event matches
            DependencyUnavailableError: If the database cannot be reached
        """
        event = self._find(guid)
        if event is None:
            raise NotFoundError("Event", guid)
        return event

    def get(self, guid: str, include_relations: bool = False) -> Optional[Dict[str, Any]]:
        """
        Get an event response dictionary by GUID.

        Args:
            guid: Event GUID
            include_relations: Add related_events / parent_events

        Returns:
            Event response dictionary, or None if absent
        """
        event = self._find(guid)
        if event is None:
            return None
        if include_relations:
            return self._read(lambda: self.relations.enrich([event])[0], "get event")
        return build_event_response(event)

    # =========================================================================
    # Writes
    # =========================================================================

    def create(self, **data: Any) -> Event:
        """
        Create an event.

        Args:
            **data: Event fields; ``type`` and ``start_date`` are required.
                ``related_event_ids`` (list of GUIDs) links the new event to
                existing ones in the same transaction.

        Returns:
            Created Event instance

        Raises:
            ValidationError: If an invariant or field value is invalid
            NotFoundError: If a related event does not exist
            DependencyUnavailableError: If the database cannot be reached
        """
        related_event_ids = data.pop("related_event_ids", None) or []
        self._check_unknown_fields(data)

        for field in ("type", "start_date"):
            if data.get(field) is None:
                raise ValidationError(f"{field} is required", field=field)

        for field in NON_NULLABLE_FIELDS:
            if field in data and data[field] is None:
                data.pop(field)

        data.setdefault("status", EventStatus.DRAFT.value)
        data.setdefault("location_type", LocationType.MUSEUM.value)

        self._validate_fields(data)
        self._validate_invariants(
            event_type=data["type"],
            category=data.get("category"),
            start_date=data["start_date"],
            end_date=data.get("end_date"),
        )

        event = Event(**data)
        children = self._read(
            lambda: self.relations.resolve_children(event, related_event_ids),
            "create event"
        )

        try:
            self.db.add(event)
            self.db.flush()
            linked = self.relations.link_events(event, children) if children else 0
            self.db.commit()
        except DATABASE_UNAVAILABLE_ERRORS as e:
            self.db.rollback()
            logger.error(f"Database unavailable while creating event: {e}")
            raise DependencyUnavailableError("database", "create event") from e
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(event)
        logger.info(
            f"Created event: {event.guid}",
            extra={"event_type": event.type, "related": linked}
        )
        return event

    def update(self, guid: str, **patch: Any) -> Event:
        """
        Update an event.

        Only keys present in ``patch`` are written; a key given as None
        clears the field. ``related_event_ids`` replaces the event's whole
        outgoing relation set; incoming edges are untouched.

        Args:
            guid: Event GUID
            **patch: Fields to change

        Returns:
            Updated Event instance (unchanged and unwritten for an empty patch)

        Raises:
            NotFoundError: If the event or a related event does not exist
            ValidationError: If the effective values break an invariant
            DependencyUnavailableError: If the database cannot be reached
        """
        event = self.get_by_guid(guid)
        if not patch:
            return event

        replace_relations = "related_event_ids" in patch
        related_event_ids = patch.pop("related_event_ids", None) or []
        self._check_unknown_fields(patch)

        for field, value in patch.items():
            if value is None and field in NON_NULLABLE_FIELDS:
                raise ValidationError(f"{field} cannot be cleared", field=field)

        self._validate_fields(patch)
        self._validate_invariants(
            event_type=patch.get("type", event.type),
            category=patch["category"] if "category" in patch else event.category,
            start_date=patch.get("start_date", event.start_date),
            end_date=patch["end_date"] if "end_date" in patch else event.end_date,
        )

        children = []
        if replace_relations:
            children = self._read(
                lambda: self.relations.resolve_children(event, related_event_ids),
                "update event"
            )

        try:
            for field, value in patch.items():
                setattr(event, field, value)
            event.updated_at = datetime.utcnow()
            self.db.flush()

            if replace_relations:
                self.relations.unlink_outgoing(event)
                self.relations.link_events(event, children)

            self.db.commit()
        except DATABASE_UNAVAILABLE_ERRORS as e:
            self.db.rollback()
            logger.error(f"Database unavailable while updating event {guid}: {e}")
            raise DependencyUnavailableError("database", "update event") from e
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(event)
        logger.info(
            f"Updated event: {event.guid}",
            extra={"fields": sorted(patch), "relations_replaced": replace_relations}
        )
        return event

    def delete(self, guid: str) -> bool:
        """
        Hard-delete an event and every relation edge touching it.

        Args:
            guid: Event GUID

        Returns:
            True if an event was removed, False if none matched
        """
        event = self._find(guid)
        if event is None:
            return False

        try:
            removed_edges = self.relations.unlink_all(event)
            self.db.delete(event)
            self.db.commit()
        except DATABASE_UNAVAILABLE_ERRORS as e:
            self.db.rollback()
            logger.error(f"Database unavailable while deleting event {guid}: {e}")
            raise DependencyUnavailableError("database", "delete event") from e
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Deleted event: {guid}", extra={"removed_relations": removed_edges})
        return True

    # =========================================================================
    # Helpers
    # =========================================================================

    def _find(self, guid: str) -> Optional[Event]:
        """Look up an event by GUID; None if malformed or absent."""
        try:
            uuid_value = GuidService.parse_guid(guid, "evt")
        except ValueError:
            return None
        return self._read(
            lambda: self.db.query(Event).filter(Event.uuid == uuid_value).first(),
            "get event"
        )

    def _read(self, fn, operation: str):
        """Run a read, translating connectivity failures."""
        try:
            return fn()
        except DATABASE_UNAVAILABLE_ERRORS as e:
            self.db.rollback()
            logger.error(f"Database unavailable during {operation}: {e}")
            raise DependencyUnavailableError("database", operation) from e

    @staticmethod
    def _check_unknown_fields(data: Dict[str, Any]) -> None:
        unknown = sorted(set(data) - WRITABLE_FIELDS)
        if unknown:
            raise ValidationError(
                f"Unknown event field(s): {', '.join(unknown)}",
                field=unknown[0]
            )

    @staticmethod
    def _validate_fields(data: Dict[str, Any]) -> None:
        """Validate enumerated values and capacity for the fields present."""
        for field, enum_cls in CHOICE_FIELDS.items():
            value = data.get(field)
            if value is None:
                continue
            if isinstance(value, enum.Enum):
                data[field] = value = value.value
            allowed = [member.value for member in enum_cls]
            if value not in allowed:
                raise ValidationError(
                    f"Invalid {field}: {value}. Must be one of: {', '.join(allowed)}",
                    field=field
                )

        capacity = data.get("capacity")
        if capacity is not None and (isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1):
            raise ValidationError("capacity must be a positive integer", field="capacity")

    @staticmethod
    def _validate_invariants(
        event_type: str,
        category: Optional[str],
        start_date: date,
        end_date: Optional[date],
    ) -> None:
        """
        Check the cross-field invariants on effective values.

        Raises:
            ValidationError: If a museum event has no category or the
                date range is inverted
        """
        if event_type == EventType.MUSEUM.value and not category:
            raise ValidationError("category is required for museum events", field="category")

        if end_date is not None and end_date < start_date:
            raise ValidationError("end_date must be on or after start_date", field="end_date")

