"""
GUID mixin for SQLAlchemy models.

Public identifiers are UUIDv7 values (time-ordered) rendered with
Crockford's Base32 behind a three-letter entity prefix. The integer primary
key stays internal.

GUID Format: {prefix}_{base32_uuid}
Examples:
    - evt_01j1z8k4y00000000000000000 (Event)
    - spp_01j1z8k4y00000000000000001 (SpecialPeriod)
"""

import uuid as uuid_module
from typing import ClassVar, Optional

import base32_crockford
from sqlalchemy import Column, TypeDecorator, LargeBinary
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from uuid_extensions import uuid7


GUID_ENCODED_LENGTH = 26


def encode_uuid(prefix: str, value: uuid_module.UUID) -> str:
    """Render a UUID as ``{prefix}_{26 lowercase base32 chars}``."""
    encoded = base32_crockford.encode(value.int).zfill(GUID_ENCODED_LENGTH)
    return f"{prefix}_{encoded.lower()}"


class UUIDType(TypeDecorator):
    """
    Platform-independent UUID type.

    PostgreSQL gets its native UUID column; every other dialect (SQLite in
    tests) stores the 16 raw bytes. Values always load as ``uuid.UUID``.
    """

    impl = LargeBinary
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == 'postgresql':
            return dialect.type_descriptor(PG_UUID(as_uuid=True))
        return dialect.type_descriptor(LargeBinary(16))

    def process_bind_param(self, value, dialect):
        if value is None:
            return value
        if not isinstance(value, uuid_module.UUID):
            value = (
                uuid_module.UUID(bytes=value) if isinstance(value, bytes)
                else uuid_module.UUID(str(value))
            )
        if dialect.name == 'postgresql':
            return value
        return value.bytes

    def process_result_value(self, value, dialect):
        if value is None or isinstance(value, uuid_module.UUID):
            return value
        if isinstance(value, bytes):
            return uuid_module.UUID(bytes=value)
        return uuid_module.UUID(str(value))


class GuidMixin:
    """
    Mixin providing GUID support for entities.

    Adds:
    - uuid: UUID column (UUIDv7, generated on insert)
    - guid: Property returning the prefixed Base32 string
    - parse_guid: Class method decoding a GUID back to its UUID

    Usage:
        class Event(Base, GuidMixin):
            GUID_PREFIX = "evt"
    """

    GUID_PREFIX: ClassVar[str]

    uuid = Column(
        UUIDType(),
        nullable=False,
        unique=True,
        index=True,
        default=uuid7,
    )

    @property
    def guid(self) -> Optional[str]:
        """
        Get the full GUID with prefix, or None before the row is flushed.

        Crockford's Base32 is case-insensitive, excludes I, L, O and U, and
        is URL-safe without escaping.
        """
        if self.uuid is None:
            return None
        value = self.uuid
        if isinstance(value, bytes):
            value = uuid_module.UUID(bytes=value)
        return encode_uuid(self.GUID_PREFIX, value)

    @classmethod
    def parse_guid(cls, guid: str) -> uuid_module.UUID:
        """
        Parse a GUID string of this entity type to a UUID.

        Args:
            guid: GUID string (e.g., "evt_01j1z8k4y...")

        Returns:
            UUID object

        Raises:
            ValueError: If the GUID is empty, malformed or has another prefix
        """
        if not guid:
            raise ValueError("GUID cannot be empty")

        expected_prefix = f"{cls.GUID_PREFIX}_"
        if not guid.lower().startswith(expected_prefix):
            raise ValueError(
                f"Invalid prefix for {cls.__name__}. "
                f"Expected '{cls.GUID_PREFIX}', got '{guid.split('_')[0]}'"
            )

        encoded_part = guid[len(expected_prefix):]
        if len(encoded_part) != GUID_ENCODED_LENGTH:
            raise ValueError(
                f"Invalid GUID length. Expected {GUID_ENCODED_LENGTH} characters "
                f"after prefix, got {len(encoded_part)}"
            )

        try:
            uuid_int = base32_crockford.decode(encoded_part.upper())
            return uuid_module.UUID(bytes=uuid_int.to_bytes(16, "big"))
        except (ValueError, OverflowError) as e:
            raise ValueError(f"Invalid GUID encoding: {e}")
