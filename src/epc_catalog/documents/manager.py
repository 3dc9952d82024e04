"""Catalog document list actions: rename, delete, duplicate."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..errors import ValidationError
from ..notifications import Notifier
from .builder import translate_submission_error
from .types import DocumentPage

if TYPE_CHECKING:
    from ..backends.base import BackendResult, CatalogBackend


logger = logging.getLogger(__name__)


class CatalogDocumentManager:
    """
    Operations on saved documents, outside of an edit session.

    Every rejected call raises ``SubmissionError`` (or
    ``SubmissionConflictError`` when a rename collides with an existing
    document) and notifies the user.
    """

    def __init__(self, backend: CatalogBackend, *, notifier: Notifier | None = None, page_size: int = 10):
        self.backend = backend
        self.notifier = notifier or Notifier()
        self.page_size = page_size

    async def list(self, page: int = 1, search: str = "") -> DocumentPage:
        return await self.backend.list_documents(page, self.page_size, search=search.strip())

    async def rename(self, document_id: str, new_name: str) -> BackendResult:
        new_name = (new_name or "").strip()
        if not new_name:
            raise ValidationError({"name": "Document name is required"})
        result = await self.backend.rename_document(document_id, new_name)
        return self._check(result, f"Renamed catalog {document_id} to {new_name!r}")

    async def delete(self, document_id: str) -> BackendResult:
        result = await self.backend.delete_document(document_id)
        return self._check(result, f"Deleted catalog {document_id}")

    async def delete_item(self, item_id: str) -> BackendResult:
        result = await self.backend.delete_document_item(item_id)
        return self._check(result, f"Deleted catalog item {item_id}")

    async def duplicate(self, document_id: str) -> BackendResult:
        result = await self.backend.duplicate_document(document_id)
        return self._check(result, f"Duplicated catalog {document_id}")

    def _check(self, result: BackendResult, log_message: str) -> BackendResult:
        if not result.success:
            error = translate_submission_error(result.message, result.error_code)
            logger.warning(f"{log_message} failed: {result.message}")
            self.notifier.error(str(error))
            raise error
        logger.info(log_message)
        if result.message:
            self.notifier.success(result.message)
        return result
