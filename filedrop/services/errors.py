"""Typed failures raised by the registry services."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from filedrop.models import File


class SchemaError(Exception):
    """Raised when the schema cannot be ensured at bootstrap. The process must not serve."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StoreUnavailableError(Exception):
    """Raised when the database cannot be reached or the pool is exhausted. Retryable."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class IntegrityViolationError(Exception):
    """Raised when an insert breaks a constraint, e.g. the owner does not exist."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DuplicateContentError(IntegrityViolationError):
    """Raised when the owner already has a file with this content hash."""

    def __init__(self, message: str, existing: File | None = None) -> None:
        self.existing = existing
        super().__init__(message)
