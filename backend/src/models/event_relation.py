"""
EventRelation model for directed event-to-event links.

An edge points from a parent event to a child event. ``related`` edges link
events shown together; ``sub_event`` edges attach a session to a longer
programme.

Design Rationale:
- Junction table without its own GUID
- CASCADE on both foreign keys: deleting either endpoint drops the edge
- parent != child enforced by a CHECK constraint (and by RelationService)
- (parent, child, relation_type) unique, so relinking is idempotent
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, DateTime,
    ForeignKey, UniqueConstraint, CheckConstraint
)

from backend.src.models import Base


class RelationType(enum.Enum):
    """Kind of link between two events."""
    RELATED = "related"
    SUB_EVENT = "sub_event"


class EventRelation(Base):
    """
    Directed edge between two events.

    Attributes:
        id: Primary key
        parent_event_id: FK to events (CASCADE on delete)
        child_event_id: FK to events (CASCADE on delete)
        relation_type: related or sub_event
        created_at: When the edge was created

    Constraints:
        - Unique (parent_event_id, child_event_id, relation_type)
        - parent_event_id <> child_event_id

    Indexes:
        - parent_event_id (outgoing edges)
        - child_event_id (incoming edges)
    """

    __tablename__ = "event_relations"

    id = Column(Integer, primary_key=True, autoincrement=True)

    parent_event_id = Column(
        Integer,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    child_event_id = Column(
        Integer,
        ForeignKey("events.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    relation_type = Column(String(20), default="related", nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "parent_event_id",
            "child_event_id",
            "relation_type",
            name="uq_event_relation"
        ),
        CheckConstraint(
            "parent_event_id <> child_event_id",
            name="ck_event_relation_no_self_reference"
        ),
    )

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"<EventRelation("
            f"parent_event_id={self.parent_event_id}, "
            f"child_event_id={self.child_event_id}, "
            f"relation_type={self.relation_type}"
            f")>"
        )
