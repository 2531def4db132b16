"""
Utility modules for the museum calendar backend.

- logging_config: Named loggers with JSON (production) or console output
- dates: Calendar view ranges and weekday conventions
"""
