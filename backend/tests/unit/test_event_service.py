"""
Unit tests for EventService.

Tests creation, lookup, update and deletion of events, including the
category / date-order invariants and the handling of outgoing relations.
"""

import pytest
from datetime import date, time, timedelta
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from backend.src.models import Event, EventRelation
from backend.src.services.event_service import EventService
from backend.src.services.exceptions import (
    DependencyUnavailableError,
    NotFoundError,
    ValidationError,
)

# Well-formed event GUID that matches no row
MISSING_GUID = "evt_" + "0" * 26


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def event_service(test_db_session):
    """Create an EventService instance for testing."""
    return EventService(test_db_session)


def _edges(session):
    return {
        (r.parent_event_id, r.child_event_id, r.relation_type)
        for r in session.query(EventRelation).all()
    }


# ============================================================================
# Create Tests
# ============================================================================


class TestEventServiceCreate:
    """Tests for event creation."""

    def test_create_museum_event(self, event_service):
        """Test creating a museum event with defaults applied."""
        event = event_service.create(
            type="museum",
            category="live",
            start_date=date(2024, 7, 1),
        )

        assert event.id is not None
        assert event.guid.startswith("evt_")
        assert len(event.guid) == 30
        assert event.status == "draft"
        assert event.location_type == "museum"
        assert event.is_active is True
        assert event.manager_dev is False
        assert event.manager_com is False
        assert event.created_at is not None
        assert event.updated_at is not None

    def test_create_museum_event_requires_category(self, event_service, test_db_session):
        """A museum event without category is rejected and nothing is written."""
        with pytest.raises(ValidationError) as exc_info:
            event_service.create(type="museum", start_date=date(2024, 7, 1))

        assert exc_info.value.field == "category"
        assert test_db_session.query(Event).count() == 0

    def test_create_association_event_without_category(self, event_service):
        """Non-museum events do not need a category."""
        event = event_service.create(type="association", start_date=date(2024, 7, 1))
        assert event.category is None

    def test_create_external_event_with_category_is_accepted(self, event_service):
        """A category on a non-museum event is kept, not rejected."""
        event = event_service.create(
            type="external",
            category="conference",
            start_date=date(2024, 7, 1),
        )
        assert event.category == "conference"

    def test_create_rejects_end_before_start(self, event_service, test_db_session):
        """end_date before start_date is rejected and nothing is written."""
        with pytest.raises(ValidationError) as exc_info:
            event_service.create(
                type="association",
                start_date=date(2024, 7, 2),
                end_date=date(2024, 7, 1),
            )

        assert exc_info.value.field == "end_date"
        assert test_db_session.query(Event).count() == 0

    def test_create_accepts_same_day_end(self, event_service):
        """end_date equal to start_date is valid."""
        event = event_service.create(
            type="association",
            start_date=date(2024, 7, 2),
            end_date=date(2024, 7, 2),
        )
        assert event.end_date == date(2024, 7, 2)

    def test_create_requires_type_and_start_date(self, event_service):
        """type and start_date are mandatory."""
        with pytest.raises(ValidationError):
            event_service.create(start_date=date(2024, 7, 1))
        with pytest.raises(ValidationError):
            event_service.create(type="association")

    def test_create_rejects_unknown_enum_value(self, event_service):
        """Enumerated fields only accept known values."""
        with pytest.raises(ValidationError) as exc_info:
            event_service.create(type="party", start_date=date(2024, 7, 1))
        assert exc_info.value.field == "type"

        with pytest.raises(ValidationError) as exc_info:
            event_service.create(
                type="association", status="secret", start_date=date(2024, 7, 1)
            )
        assert exc_info.value.field == "status"

    def test_create_rejects_non_positive_capacity(self, event_service):
        """capacity must be a positive integer."""
        with pytest.raises(ValidationError) as exc_info:
            event_service.create(type="association", start_date=date(2024, 7, 1), capacity=0)
        assert exc_info.value.field == "capacity"

    def test_create_rejects_unknown_field(self, event_service):
        """Fields outside the event model are rejected."""
        with pytest.raises(ValidationError):
            event_service.create(type="association", start_date=date(2024, 7, 1), title="x")

    def test_create_with_related_events(self, event_service, sample_event, test_db_session):
        """related_event_ids are linked as outgoing edges in the same call."""
        child_a = sample_event()
        child_b = sample_event()

        event = event_service.create(
            type="association",
            start_date=date(2024, 7, 1),
            related_event_ids=[child_a.guid, child_b.guid, child_a.guid],
        )

        assert _edges(test_db_session) == {
            (event.id, child_a.id, "related"),
            (event.id, child_b.id, "related"),
        }

    def test_create_with_unknown_related_event_writes_nothing(
        self, event_service, test_db_session
    ):
        """An unknown related id aborts the whole creation."""
        missing = MISSING_GUID
        with pytest.raises(NotFoundError):
            event_service.create(
                type="association",
                start_date=date(2024, 7, 1),
                related_event_ids=[missing],
            )

        assert test_db_session.query(Event).count() == 0
        assert test_db_session.query(EventRelation).count() == 0

    def test_create_database_unavailable(self, event_service, test_db_session):
        """A connectivity failure at commit surfaces as DependencyUnavailableError."""
        error = OperationalError("COMMIT", {}, Exception("connection lost"))
        with patch.object(test_db_session, "commit", side_effect=error):
            with pytest.raises(DependencyUnavailableError) as exc_info:
                event_service.create(type="association", start_date=date(2024, 7, 1))

        assert exc_info.value.dependency == "database"
        assert exc_info.value.operation == "create event"
        assert test_db_session.query(Event).count() == 0


# ============================================================================
# Get Tests
# ============================================================================


class TestEventServiceGet:
    """Tests for event lookup."""

    def test_get_returns_response_dict(self, event_service, sample_event):
        """get renders the event keyed by guid, without internal id."""
        event = sample_event(public_title_fr="Concert")

        result = event_service.get(event.guid)

        assert result["guid"] == event.guid
        assert result["public_title_fr"] == "Concert"
        assert "id" not in result
        assert "related_events" not in result

    def test_get_unknown_returns_none(self, event_service):
        """Unknown and malformed ids return None."""
        assert event_service.get(MISSING_GUID) is None
        assert event_service.get("not-a-guid") is None
        assert event_service.get("spp_" + "0" * 26) is None

    def test_get_is_case_insensitive(self, event_service, sample_event):
        """GUIDs are accepted regardless of case."""
        event = sample_event()
        assert event_service.get(event.guid.upper())["guid"] == event.guid

    def test_get_with_relations(self, event_service, sample_event, sample_relation):
        """include_relations adds both neighbour directions."""
        parent = sample_event()
        event = sample_event()
        child = sample_event()
        sample_relation(parent, event)
        sample_relation(event, child)

        result = event_service.get(event.guid, include_relations=True)

        assert [e["guid"] for e in result["related_events"]] == [child.guid]
        assert [e["guid"] for e in result["parent_events"]] == [parent.guid]

    def test_get_by_guid_raises_not_found(self, event_service):
        """get_by_guid raises for unknown ids."""
        with pytest.raises(NotFoundError) as exc_info:
            event_service.get_by_guid(MISSING_GUID)
        assert exc_info.value.resource == "Event"


# ============================================================================
# Update Tests
# ============================================================================


class TestEventServiceUpdate:
    """Tests for event updates."""

    def test_update_changes_only_given_fields(self, event_service, sample_event):
        """Fields absent from the patch are untouched."""
        event = sample_event(public_title_fr="Avant", public_title_en="Before")

        updated = event_service.update(event.guid, public_title_fr="Après")

        assert updated.public_title_fr == "Après"
        assert updated.public_title_en == "Before"

    def test_update_none_clears_field(self, event_service, sample_event):
        """A key given as None clears the field."""
        event = sample_event(end_date=date(2024, 7, 3), capacity=30)

        updated = event_service.update(event.guid, end_date=None, capacity=None)

        assert updated.end_date is None
        assert updated.capacity is None

    def test_update_cannot_clear_required_field(self, event_service, sample_event):
        """NOT NULL fields cannot be cleared."""
        event = sample_event()
        with pytest.raises(ValidationError) as exc_info:
            event_service.update(event.guid, start_date=None)
        assert exc_info.value.field == "start_date"

    def test_update_empty_patch_is_noop(self, event_service, sample_event):
        """An empty patch returns the record unchanged and does not write."""
        event = sample_event()
        before = event.updated_at

        result = event_service.update(event.guid)

        assert result.id == event.id
        assert result.updated_at == before

    def test_update_validates_effective_category(self, event_service, sample_event):
        """Switching an association event to museum needs a category."""
        event = sample_event(type="association", category=None)

        with pytest.raises(ValidationError):
            event_service.update(event.guid, type="museum")

        updated = event_service.update(event.guid, type="museum", category="workshop")
        assert updated.type == "museum"
        assert updated.category == "workshop"

    def test_update_cannot_clear_museum_category(self, event_service, sample_event):
        """Clearing the category of a museum event is rejected."""
        event = sample_event(type="museum", category="live")
        with pytest.raises(ValidationError):
            event_service.update(event.guid, category=None)

    def test_update_validates_effective_dates(
        self, event_service, sample_event, test_db_session
    ):
        """The stored start_date is used when only end_date is patched."""
        event = sample_event(start_date=date(2024, 7, 10))

        with pytest.raises(ValidationError):
            event_service.update(event.guid, end_date=date(2024, 7, 9))

        test_db_session.refresh(event)
        assert event.end_date is None

    def test_update_moving_start_past_stored_end_rejected(self, event_service, sample_event):
        """The stored end_date is used when only start_date is patched."""
        event = sample_event(start_date=date(2024, 7, 1), end_date=date(2024, 7, 3))
        with pytest.raises(ValidationError):
            event_service.update(event.guid, start_date=date(2024, 7, 4))

    def test_update_unknown_event(self, event_service):
        """Updating an unknown event raises NotFoundError."""
        with pytest.raises(NotFoundError):
            event_service.update(MISSING_GUID, status="public")

    def test_update_replaces_outgoing_relations(
        self, event_service, sample_event, sample_relation, test_db_session
    ):
        """related_event_ids replaces outgoing edges and keeps incoming ones."""
        parent = sample_event()
        event = sample_event()
        old_child = sample_event()
        new_child = sample_event()
        sample_relation(parent, event)
        sample_relation(event, old_child)
        sample_relation(event, old_child, relation_type="sub_event")

        event_service.update(event.guid, related_event_ids=[new_child.guid])

        assert _edges(test_db_session) == {
            (parent.id, event.id, "related"),
            (event.id, new_child.id, "related"),
        }

    def test_update_relations_only_refreshes_updated_at(
        self, event_service, sample_event, test_db_session
    ):
        """A patch with only related_event_ids still counts as a write."""
        event = sample_event()
        child = sample_event()
        stale = event.updated_at - timedelta(days=1)
        event.updated_at = stale
        test_db_session.commit()

        updated = event_service.update(event.guid, related_event_ids=[child.guid])

        assert updated.updated_at > stale

    def test_update_empty_related_list_removes_outgoing(
        self, event_service, sample_event, sample_relation, test_db_session
    ):
        """An empty related_event_ids list unlinks every child."""
        event = sample_event()
        child = sample_event()
        sample_relation(event, child)

        event_service.update(event.guid, related_event_ids=[])

        assert test_db_session.query(EventRelation).count() == 0

    def test_update_self_reference_rejected_before_write(
        self, event_service, sample_event, sample_relation, test_db_session
    ):
        """A self link fails and the existing edges and fields survive."""
        event = sample_event(public_title_fr="Avant")
        child = sample_event()
        sample_relation(event, child)

        with pytest.raises(ValidationError):
            event_service.update(
                event.guid,
                public_title_fr="Après",
                related_event_ids=[event.guid],
            )

        test_db_session.refresh(event)
        assert event.public_title_fr == "Avant"
        assert _edges(test_db_session) == {(event.id, child.id, "related")}

    def test_update_unknown_related_event_keeps_existing_edges(
        self, event_service, sample_event, sample_relation, test_db_session
    ):
        """Child ids are validated before the old edges are removed."""
        event = sample_event()
        child = sample_event()
        sample_relation(event, child)

        with pytest.raises(NotFoundError):
            event_service.update(
                event.guid,
                related_event_ids=[MISSING_GUID],
            )

        assert _edges(test_db_session) == {(event.id, child.id, "related")}

    def test_update_accepts_times(self, event_service, sample_event):
        """Time fields round-trip through update."""
        event = sample_event()
        updated = event_service.update(event.guid, start_time=time(20, 0), end_time=time(22, 30))
        assert updated.start_time == time(20, 0)
        assert updated.end_time == time(22, 30)


# ============================================================================
# Delete Tests
# ============================================================================


class TestEventServiceDelete:
    """Tests for event deletion."""

    def test_delete_removes_event_and_edges(
        self, event_service, sample_event, sample_relation, test_db_session
    ):
        """Deleting removes every edge touching the event; get then returns None."""
        parent = sample_event()
        event = sample_event()
        child = sample_event()
        sample_relation(parent, event)
        sample_relation(event, child)
        sample_relation(parent, child)

        assert event_service.delete(event.guid) is True

        assert event_service.get(event.guid) is None
        assert _edges(test_db_session) == {(parent.id, child.id, "related")}

    def test_delete_unknown_returns_false(self, event_service):
        """Deleting an unknown id is not an error."""
        assert event_service.delete(MISSING_GUID) is False
        assert event_service.delete("garbage") is False

    def test_cascade_removes_edges_without_service(
        self, sample_event, sample_relation, test_db_session
    ):
        """The foreign keys cascade even when rows are deleted directly."""
        event = sample_event()
        child = sample_event()
        sample_relation(event, child)

        test_db_session.query(Event).filter(Event.id == event.id).delete()
        test_db_session.commit()

        assert test_db_session.query(EventRelation).count() == 0
