"""Catalogue service interface consumed by the engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from ..documents.payload import DocumentPayload
    from ..documents.types import CatalogDocument, DocumentPage
    from ..options.mapping import OptionKind
    from ..options.types import OptionPage
    from ..vins.types import VinPage, VinProduct


@dataclass(slots=True)
class BackendResult:
    """Outcome of a write call. ``success`` False carries the server message."""
    success: bool
    message: str = ""
    error_code: str | None = None
    data: dict[str, Any] = field(default_factory=dict)


class CatalogBackend(ABC):
    """
    Base class for catalogue service access.

    Read calls raise ``RemoteFetchError`` / ``NotFoundError``. Write calls
    report rejection through ``BackendResult``; they raise
    ``SubmissionError`` only when the service could not be reached.
    """

    @abstractmethod
    async def list_options(
        self,
        kind: OptionKind,
        page: int,
        page_size: int,
        *,
        search: str = "",
        parent_id: str | None = None,
    ) -> OptionPage:
        """List one page of options, filtered by search text and parent id."""
        ...

    # Documents

    @abstractmethod
    async def get_document(self, document_id: str) -> CatalogDocument:
        ...

    @abstractmethod
    async def list_documents(self, page: int, page_size: int, *, search: str = "") -> DocumentPage:
        ...

    @abstractmethod
    async def create_document(self, payload: DocumentPayload) -> BackendResult:
        ...

    @abstractmethod
    async def update_document(self, document_id: str, payload: DocumentPayload) -> BackendResult:
        ...

    @abstractmethod
    async def rename_document(self, document_id: str, new_name: str) -> BackendResult:
        ...

    @abstractmethod
    async def delete_document(self, document_id: str) -> BackendResult:
        ...

    @abstractmethod
    async def delete_document_item(self, item_id: str) -> BackendResult:
        ...

    @abstractmethod
    async def duplicate_document(self, document_id: str) -> BackendResult:
        ...

    # VINs

    @abstractmethod
    async def list_vins(self, page: int, page_size: int, *, search: str = "") -> VinPage:
        ...

    @abstractmethod
    async def get_vin(self, vin_id: str) -> VinProduct:
        ...

    @abstractmethod
    async def create_vin(self, vin: VinProduct) -> BackendResult:
        ...

    @abstractmethod
    async def update_vin(self, vin_id: str, vin: VinProduct) -> BackendResult:
        ...

    @abstractmethod
    async def delete_vin(self, vin_id: str) -> BackendResult:
        ...

    async def aclose(self) -> None:
        """Release connections. Default does nothing."""
        return None
