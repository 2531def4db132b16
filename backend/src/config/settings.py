"""
Application settings configuration for the museum calendar backend.

Centralized settings loaded from environment variables (and ``.env``).
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


CALENDAR_VIEWS = ("day", "week", "month", "range")


class AppSettings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment Variables:
        MUSCAL_EVENTS_PAGE_SIZE: Default page size for event listings (default: 50)
        MUSCAL_EVENTS_MAX_PAGE_SIZE: Upper bound applied to requested page sizes (default: 500)
        MUSCAL_CALENDAR_DEFAULT_VIEW: View used when a calendar request names none
            (day, week, month or range; default: month)
        MUSCAL_CORS_ORIGINS: Comma-separated allowed CORS origins
            (default: "http://localhost:3000")
    """

    events_page_size: int = Field(
        default=50,
        validation_alias="MUSCAL_EVENTS_PAGE_SIZE",
        ge=1,
    )

    events_max_page_size: int = Field(
        default=500,
        validation_alias="MUSCAL_EVENTS_MAX_PAGE_SIZE",
        ge=1,
    )

    calendar_default_view: str = Field(
        default="month",
        validation_alias="MUSCAL_CALENDAR_DEFAULT_VIEW",
        description="Calendar view used when the request does not name one"
    )

    cors_origins: str = Field(
        default="http://localhost:3000",
        validation_alias="MUSCAL_CORS_ORIGINS",
        description="Comma-separated list of allowed CORS origins"
    )

    class Config:
        env_file = ".env"
        extra = "ignore"

    @field_validator("calendar_default_view")
    @classmethod
    def validate_calendar_default_view(cls, v: str) -> str:
        """Only known calendar views are accepted."""
        v = v.strip().lower()
        if v not in CALENDAR_VIEWS:
            raise ValueError(
                f"MUSCAL_CALENDAR_DEFAULT_VIEW must be one of: {', '.join(CALENDAR_VIEWS)}"
            )
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Get the configured CORS origins as a list.

        Returns:
            List of origin strings with surrounding whitespace removed
        """
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def clamp_page_size(self, limit: int) -> int:
        """Clamp a requested page size to [1, events_max_page_size]."""
        return max(1, min(limit, self.events_max_page_size))


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get cached application settings instance.

    Returns:
        AppSettings: Configured application settings from environment
    """
    return AppSettings()
