"""Pydantic models for catalogue service responses."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# List responses
# =============================================================================

class PaginationModel(BaseModel):
    """Pagination block nested in ``data``."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    page: int = 1
    limit: int = 10
    total: int = 0
    total_pages: int = Field(default=0, alias="totalPages")


class LegacyPaginationModel(BaseModel):
    """Top-level pagination block used by the document list."""
    model_config = ConfigDict(extra="ignore")

    current_page: int = 1
    total_pages: int = 0
    total_items: int = 0
    has_next_page: bool = False


class ListDataModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: list[dict[str, Any]] = Field(default_factory=list)
    pagination: PaginationModel | None = None


class ListEnvelope(BaseModel):
    """
    ``POST /catalogs/<resource>/get`` response.

    Two shapes exist: ``data.items`` with ``data.pagination``, or ``data``
    as a plain array with a top-level ``pagination``.
    """
    model_config = ConfigDict(extra="ignore")

    success: bool = True
    message: str = ""
    data: ListDataModel | list[dict[str, Any]] | None = None
    pagination: LegacyPaginationModel | None = None

    def records(self) -> list[dict[str, Any]]:
        if isinstance(self.data, list):
            return self.data
        if self.data is None:
            return []
        return self.data.items

    def page_info(self, page: int, limit: int) -> tuple[int, int, bool]:
        """Return ``(total, total_pages, has_more)`` for the requested page."""
        if isinstance(self.data, ListDataModel) and self.data.pagination is not None:
            p = self.data.pagination
            return p.total, p.total_pages, page < p.total_pages
        if self.pagination is not None:
            p = self.pagination
            total = p.total_items or len(self.records())
            return total, p.total_pages, p.has_next_page or page < p.total_pages
        # No pagination block: a full page suggests there may be more
        count = len(self.records())
        return count, page, count >= limit


# =============================================================================
# Single-record and write responses
# =============================================================================

class ResultEnvelope(BaseModel):
    """Response of get/create/update/delete calls."""
    model_config = ConfigDict(extra="ignore")

    success: bool = False
    message: str = ""
    error_code: str | None = None
    data: Any = None

    def record(self) -> dict[str, Any]:
        return self.data if isinstance(self.data, dict) else {}
