"""
Custom exceptions for service layer.

Provides specific exception types for business logic errors
that can be translated to appropriate HTTP responses.
"""

from typing import Any, Optional

from sqlalchemy.exc import InterfaceError, OperationalError


# Driver-level failures meaning the database cannot be reached or used.
# IntegrityError and friends are data errors and are handled where raised.
DATABASE_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError)


class ServiceError(Exception):
    """Base exception for service layer errors."""
    pass


class NotFoundError(ServiceError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} {identifier} not found")


class ValidationError(ServiceError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


class DependencyUnavailableError(ServiceError):
    """Raised when the database or a calendar data provider cannot be reached.

    The failed unit of work is rolled back before this is raised, so callers
    never observe a partial write or a partial calendar.
    """

    def __init__(self, dependency: str, operation: str, detail: Optional[str] = None):
        self.dependency = dependency
        self.operation = operation
        self.detail = detail
        self.message = f"{dependency} unavailable during {operation}"
        if detail:
            self.message = f"{self.message}: {detail}"
        super().__init__(self.message)
