"""
Integration tests for Events API endpoints.

Tests end-to-end flows through the HTTP layer:
- Creating events, with and without related events
- Listing events with filters and pagination
- Getting, updating and deleting events by GUID
- Building the calendar
- Mapping of service errors to status codes
"""

import pytest
from datetime import date, time
from unittest.mock import Mock, patch

from backend.src.api.events import get_calendar_service
from backend.src.main import app
from backend.src.services.exceptions import DependencyUnavailableError


MISSING_GUID = "evt_" + "0" * 26


class TestEventsAPI:
    """Integration tests for Events API endpoints."""

    @pytest.fixture
    def concert(self, test_client):
        """Create a public museum event through the API."""
        response = test_client.post("/api/events", json={
            "type": "museum",
            "category": "live",
            "status": "public",
            "start_date": "2024-07-01",
            "start_time": "20:00",
            "public_title_fr": "Concert d'été",
        })
        assert response.status_code == 201
        return response.json()

    # ========================================================================
    # Create
    # ========================================================================

    def test_create_event(self, concert):
        """Test creating an event returns its detail."""
        assert concert["guid"].startswith("evt_")
        assert concert["type"] == "museum"
        assert concert["category"] == "live"
        assert concert["start_time"] == "20:00:00"
        assert concert["location_type"] == "museum"
        assert concert["created_at"].endswith("Z")
        assert concert["related_events"] == []
        assert concert["parent_events"] == []
        assert "id" not in concert

    def test_create_defaults_to_draft(self, test_client):
        """Status defaults to draft."""
        response = test_client.post("/api/events", json={
            "type": "association",
            "start_date": "2024-07-02",
        })
        assert response.status_code == 201
        assert response.json()["status"] == "draft"

    def test_create_with_related_events(self, test_client, concert):
        """related_event_ids link the new event to existing ones."""
        response = test_client.post("/api/events", json={
            "type": "museum",
            "category": "exhibition",
            "start_date": "2024-07-01",
            "end_date": "2024-08-31",
            "related_event_ids": [concert["guid"]],
        })
        assert response.status_code == 201
        festival = response.json()
        assert [e["guid"] for e in festival["related_events"]] == [concert["guid"]]

        detail = test_client.get(f"/api/events/{concert['guid']}").json()
        assert [e["guid"] for e in detail["parent_events"]] == [festival["guid"]]

    def test_create_museum_event_without_category(self, test_client):
        """A museum event without category is a 400."""
        response = test_client.post("/api/events", json={
            "type": "museum",
            "start_date": "2024-07-01",
        })
        assert response.status_code == 400
        assert "category" in response.json()["detail"]

    def test_create_inverted_dates(self, test_client):
        """end_date before start_date is a 400 and nothing is stored."""
        response = test_client.post("/api/events", json={
            "type": "association",
            "start_date": "2024-07-02",
            "end_date": "2024-07-01",
        })
        assert response.status_code == 400
        assert test_client.get("/api/events").json()["total"] == 0

    def test_create_with_unknown_related_event(self, test_client):
        """An unknown related event is a 404 and nothing is stored."""
        response = test_client.post("/api/events", json={
            "type": "association",
            "start_date": "2024-07-01",
            "related_event_ids": [MISSING_GUID],
        })
        assert response.status_code == 404
        assert test_client.get("/api/events").json()["total"] == 0

    def test_create_invalid_payload(self, test_client):
        """Schema violations are rejected before the service runs."""
        response = test_client.post("/api/events", json={
            "type": "party",
            "start_date": "2024-07-01",
        })
        assert response.status_code == 422

    # ========================================================================
    # List
    # ========================================================================

    def test_list_events_empty(self, test_client):
        """Test listing events when none exist."""
        response = test_client.get("/api/events")
        assert response.status_code == 200
        assert response.json() == {
            "events": [],
            "total": 0,
            "page": 1,
            "limit": 50,
            "total_pages": 0,
        }

    def test_list_events_with_filters(self, test_client, sample_event):
        """Filters and the status alias are applied."""
        public = sample_event(status="public", start_date=date(2024, 7, 1))
        sample_event(status="draft", start_date=date(2024, 7, 1))
        sample_event(status="public", start_date=date(2024, 8, 1))

        response = test_client.get("/api/events", params={
            "status": "public",
            "start_date": "2024-07-01",
            "end_date": "2024-07-31",
        })

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["events"][0]["guid"] == public.guid
        assert data["events"][0]["related_events"] is None

    def test_list_events_pagination(self, test_client, sample_event):
        """page and limit drive the returned slice."""
        for _ in range(3):
            sample_event()

        data = test_client.get("/api/events", params={"page": 2, "limit": 2}).json()

        assert data["total"] == 3
        assert data["total_pages"] == 2
        assert len(data["events"]) == 1

    def test_list_events_on_date(self, test_client, sample_event):
        """The date parameter keeps events spanning that day."""
        exhibition = sample_event(start_date=date(2024, 7, 1), end_date=date(2024, 7, 31))
        sample_event(start_date=date(2024, 8, 1))

        data = test_client.get("/api/events", params={"date": "2024-07-15"}).json()

        assert data["total"] == 1
        assert data["events"][0]["guid"] == exhibition.guid

    def test_list_events_include_relations(self, test_client, sample_event, sample_relation):
        """include_relations adds the neighbour lists."""
        parent = sample_event()
        child = sample_event()
        sample_relation(parent, child)

        data = test_client.get("/api/events", params={"include_relations": True}).json()

        by_guid = {e["guid"]: e for e in data["events"]}
        assert [e["guid"] for e in by_guid[parent.guid]["related_events"]] == [child.guid]

    # ========================================================================
    # Get / Update / Delete
    # ========================================================================

    def test_get_event(self, test_client, concert):
        """Test getting an event by GUID."""
        response = test_client.get(f"/api/events/{concert['guid']}")
        assert response.status_code == 200
        assert response.json()["public_title_fr"] == "Concert d'été"

    def test_get_event_without_relations(self, test_client, concert):
        """include_relations=false leaves the lists null."""
        response = test_client.get(
            f"/api/events/{concert['guid']}", params={"include_relations": False}
        )
        assert response.json()["related_events"] is None

    def test_get_event_not_found(self, test_client):
        """Unknown and malformed GUIDs are 404."""
        assert test_client.get(f"/api/events/{MISSING_GUID}").status_code == 404
        assert test_client.get("/api/events/not-a-guid").status_code == 404

    def test_update_event(self, test_client, concert):
        """Only sent fields change; null clears a field."""
        response = test_client.put(f"/api/events/{concert['guid']}", json={
            "public_title_en": "Summer concert",
            "start_time": None,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["public_title_en"] == "Summer concert"
        assert data["public_title_fr"] == "Concert d'été"
        assert data["start_time"] is None

    def test_update_event_invalid(self, test_client, concert):
        """Clearing the category of a museum event is a 400."""
        response = test_client.put(f"/api/events/{concert['guid']}", json={"category": None})
        assert response.status_code == 400

    def test_update_event_self_reference(self, test_client, concert):
        """Relating an event to itself is a 400."""
        response = test_client.put(
            f"/api/events/{concert['guid']}",
            json={"related_event_ids": [concert["guid"]]},
        )
        assert response.status_code == 400

    def test_update_event_not_found(self, test_client):
        """Updating an unknown event is a 404."""
        response = test_client.put(f"/api/events/{MISSING_GUID}", json={"status": "public"})
        assert response.status_code == 404

    def test_update_replaces_relations(self, test_client, sample_event, sample_relation):
        """related_event_ids replaces the outgoing relations."""
        event = sample_event()
        old_child = sample_event()
        new_child = sample_event()
        sample_relation(event, old_child)

        response = test_client.put(
            f"/api/events/{event.guid}",
            json={"related_event_ids": [new_child.guid]},
        )

        assert response.status_code == 200
        assert [e["guid"] for e in response.json()["related_events"]] == [new_child.guid]

    def test_delete_event(self, test_client, sample_event, sample_relation):
        """Deleting returns 204 and removes the event and its edges."""
        parent = sample_event()
        event = sample_event()
        sample_relation(parent, event)

        response = test_client.delete(f"/api/events/{event.guid}")
        assert response.status_code == 204

        assert test_client.get(f"/api/events/{event.guid}").status_code == 404
        assert test_client.get(f"/api/events/{parent.guid}").json()["related_events"] == []

    def test_delete_event_not_found(self, test_client):
        """Deleting an unknown event is a 404."""
        assert test_client.delete(f"/api/events/{MISSING_GUID}").status_code == 404

    # ========================================================================
    # Calendar
    # ========================================================================

    def test_calendar_week(
        self, test_client, sample_event, sample_schedule, sample_ticket, sample_special_period
    ):
        """The week view returns seven populated days."""
        sample_schedule(day_of_week=1, start_time=time(10, 0), end_time=time(18, 0))
        event = sample_event(start_date=date(2024, 7, 1), status="public")
        sample_ticket(reservation_date=date(2024, 7, 1))
        summer = sample_special_period(start_date=date(2024, 7, 6), end_date=date(2024, 9, 1))

        response = test_client.get(
            "/api/events/calendar",
            params={"start_date": "2024-07-03", "view": "week"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["view"] == "week"
        assert data["start_date"] == "2024-07-01"
        assert data["end_date"] == "2024-07-07"
        assert len(data["days"]) == 7

        monday = data["days"][0]
        assert monday["date"] == "2024-07-01"
        assert monday["is_open"] is True
        assert monday["opening_hours"][0]["start_time"] == "10:00:00"
        assert monday["paid_tickets_count"] == 1
        assert [e["guid"] for e in monday["events"]] == [event.guid]

        saturday = data["days"][5]
        assert [p["id"] for p in saturday["holiday_periods"]] == [summer.guid]

    def test_calendar_default_view_is_month(self, test_client):
        """Without view the configured default (month) applies."""
        data = test_client.get(
            "/api/events/calendar", params={"start_date": "2023-02-10"}
        ).json()

        assert data["view"] == "month"
        assert len(data["days"]) == 28

    def test_calendar_filters(self, test_client, sample_event):
        """status, include_private and event_type are forwarded."""
        draft = sample_event(status="draft")
        association = sample_event(type="association", category=None, status="public")

        drafts = test_client.get("/api/events/calendar", params={
            "start_date": "2024-07-01", "view": "day", "status": "draft",
        }).json()
        assert [e["guid"] for e in drafts["days"][0]["events"]] == [draft.guid]

        everything = test_client.get("/api/events/calendar", params={
            "start_date": "2024-07-01", "view": "day", "include_private": True,
        }).json()
        assert len(everything["days"][0]["events"]) == 2

        associations = test_client.get("/api/events/calendar", params=[
            ("start_date", "2024-07-01"),
            ("view", "day"),
            ("include_private", "true"),
            ("event_type", "association"),
        ]).json()
        assert [e["guid"] for e in associations["days"][0]["events"]] == [association.guid]

    def test_calendar_inverted_range(self, test_client):
        """An inverted literal range is a 400."""
        response = test_client.get("/api/events/calendar", params={
            "start_date": "2024-07-05", "end_date": "2024-07-01", "view": "range",
        })
        assert response.status_code == 400

    def test_calendar_requires_start_date(self, test_client):
        """start_date is mandatory."""
        assert test_client.get("/api/events/calendar").status_code == 422

    def test_calendar_dependency_unavailable(self, test_client):
        """A failing provider maps to 503."""
        calendar_service = Mock()
        calendar_service.build.side_effect = DependencyUnavailableError(
            "schedule provider", "calendar build", "timeout"
        )
        app.dependency_overrides[get_calendar_service] = lambda: calendar_service

        response = test_client.get(
            "/api/events/calendar", params={"start_date": "2024-07-01"}
        )

        assert response.status_code == 503
        assert "schedule provider" in response.json()["detail"]


class TestHealthAPI:
    """Tests for the health and root endpoints."""

    def test_health(self, test_client):
        """Health check reports the service."""
        response = test_client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["service"] == "muscal-backend"

    def test_root(self, test_client):
        """Root endpoint links the docs."""
        assert test_client.get("/").json()["docs"] == "/docs"

    def test_shutdown_disposes_engine(self):
        """Leaving the app lifespan releases the pooled connections."""
        from fastapi.testclient import TestClient

        with patch("backend.src.main.dispose_engine") as mock_dispose:
            with TestClient(app):
                mock_dispose.assert_not_called()
            mock_dispose.assert_called_once_with()
