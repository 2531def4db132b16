"""
Relation service for the directed event graph.

Maintains ``event_relations`` edges between events and renders events with
their neighbours.

Design:
- Edges are directed: parent -> child, typed ``related`` or ``sub_event``
- All child ids are validated before the first insert
- Each insert runs in its own SAVEPOINT so one failing edge does not abort
  the surrounding transaction
- This service never commits; EventService owns the unit of work
- Enrichment costs two queries regardless of how many events are passed in
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Set

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.src.models import Event, EventRelation, RelationType
from backend.src.utils.logging_config import get_logger
from backend.src.services.event_response import build_event_response
from backend.src.services.exceptions import NotFoundError, ValidationError
from backend.src.services.guid import GuidService


logger = get_logger("services")

RELATION_TYPES = {rt.value for rt in RelationType}


class RelationService:
    """
    Service for event-to-event relations.

    Usage:
        >>> relations = RelationService(db_session)
        >>> relations.link(parent_event, ["evt_01j..."])
        >>> db_session.commit()
        >>> relations.enrich([parent_event])
    """

    def __init__(self, db: Session):
        """
        Initialize relation service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    # =========================================================================
    # Mutations
    # =========================================================================

    def resolve_children(self, parent: Event, child_guids: Iterable[str]) -> List[Event]:
        """
        Validate child GUIDs against a parent and load the child events.

        Duplicates are collapsed, keeping the first occurrence's order.

        Args:
            parent: Parent event (may be unsaved)
            child_guids: Child event GUIDs

        Returns:
            Child Event instances in request order

        Raises:
            ValidationError: If a child is the parent itself
            NotFoundError: If a child GUID is malformed or unknown
        """
        uuids = []
        guid_by_uuid = {}
        for guid in child_guids:
            try:
                uuid_value = GuidService.parse_guid(guid, "evt")
            except ValueError:
                raise NotFoundError("Event", guid)

            if uuid_value == parent.uuid:
                raise ValidationError(
                    "An event cannot be related to itself",
                    field="related_event_ids"
                )

            if uuid_value not in guid_by_uuid:
                guid_by_uuid[uuid_value] = guid
                uuids.append(uuid_value)

        if not uuids:
            return []

        found = {
            e.uuid: e
            for e in self.db.query(Event).filter(Event.uuid.in_(uuids)).all()
        }
        for uuid_value in uuids:
            if uuid_value not in found:
                raise NotFoundError("Event", guid_by_uuid[uuid_value])

        return [found[u] for u in uuids]

    def link(
        self,
        parent: Event,
        child_guids: Iterable[str],
        relation_type: str = RelationType.RELATED.value
    ) -> int:
        """
        Create parent -> child edges.

        Existing edges are left alone, so relinking is a no-op. The caller
        commits.

        Args:
            parent: Parent event
            child_guids: Child event GUIDs
            relation_type: "related" (default) or "sub_event"

        Returns:
            Number of edges actually created

        Raises:
            ValidationError: If relation_type is unknown or a child is the parent
            NotFoundError: If a child does not exist
        """
        if relation_type not in RELATION_TYPES:
            raise ValidationError(
                f"Invalid relation type: {relation_type}. "
                f"Must be one of: {', '.join(sorted(RELATION_TYPES))}",
                field="relation_type"
            )

        children = self.resolve_children(parent, child_guids)
        return self.link_events(parent, children, relation_type)

    def link_events(
        self,
        parent: Event,
        children: List[Event],
        relation_type: str = RelationType.RELATED.value
    ) -> int:
        """
        Create parent -> child edges for already validated children.

        Args:
            parent: Parent event (flushed)
            children: Children returned by ``resolve_children``
            relation_type: Edge type

        Returns:
            Number of edges actually created
        """
        if not children:
            return 0

        existing = {
            row.child_event_id
            for row in self.db.query(EventRelation.child_event_id).filter(
                EventRelation.parent_event_id == parent.id,
                EventRelation.child_event_id.in_([c.id for c in children]),
                EventRelation.relation_type == relation_type,
            ).all()
        }

        created = 0
        for child in children:
            if child.id in existing:
                continue

            nested = self.db.begin_nested()
            try:
                self.db.add(EventRelation(
                    parent_event_id=parent.id,
                    child_event_id=child.id,
                    relation_type=relation_type,
                ))
                self.db.flush()
                nested.commit()
                created += 1
            except IntegrityError as e:
                nested.rollback()
                logger.warning(
                    f"Skipped relation {parent.guid} -> {child.guid}: {e.orig}",
                    extra={"parent_event_id": parent.id, "child_event_id": child.id}
                )

        logger.info(
            f"Linked {created} event(s) to {parent.guid}",
            extra={"parent_event_id": parent.id, "relation_type": relation_type}
        )
        return created

    def unlink_outgoing(self, event: Event) -> int:
        """
        Remove every edge where ``event`` is the parent.

        Returns:
            Number of removed edges
        """
        removed = self.db.query(EventRelation).filter(
            EventRelation.parent_event_id == event.id
        ).delete(synchronize_session=False)
        logger.debug(f"Removed {removed} outgoing relation(s) of {event.guid}")
        return removed

    def unlink_all(self, event: Event) -> int:
        """
        Remove every edge where ``event`` is parent or child.

        Returns:
            Number of removed edges
        """
        removed = self.db.query(EventRelation).filter(
            or_(
                EventRelation.parent_event_id == event.id,
                EventRelation.child_event_id == event.id,
            )
        ).delete(synchronize_session=False)
        logger.debug(f"Removed {removed} relation(s) of {event.guid}")
        return removed

    # =========================================================================
    # Enrichment
    # =========================================================================

    def enrich(self, events: List[Event]) -> List[dict]:
        """
        Render events with their outgoing and incoming neighbours.

        Adds two keys to each event response:
        - related_events: children (edges where the event is the parent)
        - parent_events: parents (edges where the event is the child)

        Neighbours are rendered flat, without their own relations.

        Args:
            events: Events to render, in output order

        Returns:
            One response dictionary per input event, same order
        """
        if not events:
            return []

        input_ids: Set[int] = {e.id for e in events}
        known: Dict[int, Event] = {e.id: e for e in events}

        edges = (
            self.db.query(EventRelation)
            .filter(
                or_(
                    EventRelation.parent_event_id.in_(input_ids),
                    EventRelation.child_event_id.in_(input_ids),
                )
            )
            .order_by(EventRelation.id)
            .all()
        )

        missing = set()
        for edge in edges:
            missing.add(edge.parent_event_id)
            missing.add(edge.child_event_id)
        missing -= set(known)

        if missing:
            for neighbour in self.db.query(Event).filter(Event.id.in_(missing)).all():
                known[neighbour.id] = neighbour

        outgoing: Dict[int, List[int]] = defaultdict(list)
        incoming: Dict[int, List[int]] = defaultdict(list)
        for edge in edges:
            if edge.parent_event_id in input_ids:
                outgoing[edge.parent_event_id].append(edge.child_event_id)
            if edge.child_event_id in input_ids:
                incoming[edge.child_event_id].append(edge.parent_event_id)

        logger.debug(
            f"Enriched {len(events)} event(s) with {len(edges)} relation(s)"
        )

        results = []
        for event in events:
            response = build_event_response(event)
            response["related_events"] = [
                build_event_response(known[i]) for i in outgoing[event.id] if i in known
            ]
            response["parent_events"] = [
                build_event_response(known[i]) for i in incoming[event.id] if i in known
            ]
            results.append(response)
        return results
