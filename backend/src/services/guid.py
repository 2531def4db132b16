"""
GUID service for entity identification.

Validates and decodes the prefixed identifiers used in URLs, request
bodies and API responses.

GUID Format: {prefix}_{base32_uuid}
- prefix: 3-character entity type identifier (evt, spp)
- base32_uuid: 26-character Crockford Base32 encoded UUIDv7
"""

import re
import uuid
from typing import Tuple

import base32_crockford

# Prefix mappings for entity types
#   evt - Event
#   spp - SpecialPeriod
ENTITY_PREFIXES = {
    "evt": "Event",
    "spp": "SpecialPeriod",
}

# Crockford Base32 excludes I, L, O, U
GUID_PATTERN = re.compile(
    rf"^({'|'.join(ENTITY_PREFIXES)})_[0-9A-HJKMNP-TV-Za-hjkmnp-tv-z]{{26}}$",
    re.IGNORECASE
)


class GuidService:
    """
    Static helpers for GUID validation and decoding.

    Services call ``parse_guid`` with the expected prefix and translate the
    ValueError into NotFoundError, so a malformed id behaves like an
    unknown one.
    """

    @staticmethod
    def decode_guid(guid: str) -> Tuple[str, uuid.UUID]:
        """
        Split a GUID into its prefix and UUID.

        Args:
            guid: GUID string (e.g., "evt_01j1z8k4y...")

        Returns:
            Tuple of (prefix, UUID)

        Raises:
            ValueError: If the GUID format or encoding is invalid
        """
        if not guid:
            raise ValueError("GUID cannot be empty")

        if not GUID_PATTERN.match(guid):
            raise ValueError(
                f"Invalid GUID format: {guid}. "
                f"Expected format: {{prefix}}_{{26-char base32}}"
            )

        prefix = guid[:3].lower()
        encoded_part = guid[4:]

        try:
            uuid_int = base32_crockford.decode(encoded_part.upper())
            return prefix, uuid.UUID(bytes=uuid_int.to_bytes(16, "big"))
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Invalid GUID encoding: {e}")

    @staticmethod
    def parse_guid(guid: str, expected_prefix: str) -> uuid.UUID:
        """
        Parse a GUID string to UUID, validating the prefix.

        Args:
            guid: GUID string
            expected_prefix: Expected entity prefix

        Returns:
            UUID object

        Raises:
            ValueError: If format invalid or prefix doesn't match
        """
        prefix, uuid_value = GuidService.decode_guid(guid)
        if prefix != expected_prefix.lower():
            raise ValueError(
                f"GUID prefix mismatch. "
                f"Expected '{expected_prefix}', got '{prefix}'"
            )
        return uuid_value
