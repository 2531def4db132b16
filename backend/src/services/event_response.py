"""
Response rendering for events.

Every service that returns events as dictionaries goes through
``build_event_response`` so single lookups, listings, relation neighbours
and calendar days all share the same shape.
"""

from backend.src.models import Event


# Columns copied verbatim into the response, in display order
EVENT_RESPONSE_FIELDS = (
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
    "created_at",
    "updated_at",
)


def build_event_response(event: Event) -> dict:
    """
    Build a response dictionary for an event.

    Args:
        event: Event instance

    Returns:
        Dictionary suitable for the EventResponse schema, keyed by ``guid``
        (the internal integer id is never exposed)
    """
    response = {"guid": event.guid}
    for field in EVENT_RESPONSE_FIELDS:
        response[field] = getattr(event, field)
    return response
