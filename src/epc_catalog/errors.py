"""Exception hierarchy for the catalog engine."""

from __future__ import annotations

from typing import Iterable


class CatalogError(Exception):
    """Base exception for catalog engine errors."""
    pass


class ValidationError(CatalogError):
    """
    Local, field-keyed validation failure.

    ``errors`` maps a field key (``name``, ``category_id``,
    ``items.0.quantity``...) to a human readable message.
    """
    def __init__(self, errors: dict[str, str], message: str = "Please fix the validation errors"):
        super().__init__(message)
        self.errors = dict(errors)


class RemoteFetchError(CatalogError):
    """Failed to fetch an option page from the catalogue service."""
    def __init__(self, kind: str, message: str):
        super().__init__(f"Failed to load {kind} options: {message}")
        self.kind = kind


class CsvParseError(CatalogError):
    """The uploaded CSV could not be imported. Nothing was applied."""
    def __init__(
        self,
        message: str,
        row: int | None = None,
        missing_fields: Iterable[str] = (),
    ):
        super().__init__(message)
        self.row = row
        self.missing_fields = tuple(missing_fields)


class SubmissionError(CatalogError):
    """The catalogue service rejected a write."""
    def __init__(self, message: str, error_code: str | None = None):
        super().__init__(message)
        self.error_code = error_code


class SubmissionConflictError(SubmissionError):
    """The document name + hierarchy combination already exists."""
    pass


class NotFoundError(CatalogError):
    """Document or VIN not found."""
    pass
