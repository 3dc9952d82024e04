"""HTTP backend for the catalogue REST service."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from ..config import ServiceConfig
from ..documents.payload import DocumentPayload
from ..documents.types import CatalogDocument, DocumentPage
from ..errors import NotFoundError, RemoteFetchError, SubmissionError
from ..options.mapping import OPTION_FIELDS, OptionKind
from ..options.types import OptionPage
from ..vins.types import VinPage, VinProduct
from .base import BackendResult, CatalogBackend
from .models import ListEnvelope, ResultEnvelope


logger = logging.getLogger(__name__)

DOCUMENTS = "/catalogs/all-item-catalogs"
VINS = "/catalogs/vins"


class HttpCatalogBackend(CatalogBackend):
    """
    Catalogue service over httpx.

    Usage:
        async with HttpCatalogBackend(ServiceConfig(base_url="https://epc.example/api")) as backend:
            page = await backend.list_options(OptionKind.MASTER_CATEGORY, 1, 10)

    ``transport`` is passed to the underlying ``httpx.AsyncClient``; tests
    use ``httpx.MockTransport``.
    """

    def __init__(
        self,
        config: ServiceConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or ServiceConfig()
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url.rstrip("/"),
            timeout=self.config.timeout,
            headers=self._get_headers(),
            transport=transport,
        )

    async def __aenter__(self) -> HttpCatalogBackend:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _get_headers(self) -> dict[str, str]:
        """Build request headers."""
        headers = {"Accept": "application/json"}
        if self.config.api_token:
            headers["Authorization"] = f"Bearer {self.config.api_token}"
        return headers

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    async def _list(self, resource: str, label: str, body: dict[str, Any]) -> ListEnvelope:
        try:
            response = await self._client.post(f"/catalogs/{resource}/get", json=body)
        except httpx.HTTPError as e:
            raise RemoteFetchError(label, str(e)) from e

        if response.status_code >= 400:
            raise RemoteFetchError(label, f"HTTP {response.status_code}: {response.text}")

        try:
            envelope = ListEnvelope.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise RemoteFetchError(label, f"Unexpected response: {e}") from e

        if not envelope.success:
            raise RemoteFetchError(label, envelope.message or "request was not successful")
        return envelope

    async def _get(self, path: str, what: str) -> dict[str, Any]:
        try:
            response = await self._client.get(path)
        except httpx.HTTPError as e:
            raise RemoteFetchError(what, str(e)) from e

        if response.status_code == 404:
            raise NotFoundError(f"{what} not found: {path.rsplit('/', 1)[-1]}")
        if response.status_code >= 400:
            raise RemoteFetchError(what, f"HTTP {response.status_code}: {response.text}")

        try:
            envelope = ResultEnvelope.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise RemoteFetchError(what, f"Unexpected response: {e}") from e

        if not envelope.success or not envelope.record():
            raise NotFoundError(envelope.message or f"{what} not found")
        return envelope.record()

    async def _write(self, method: str, path: str, **kwargs) -> BackendResult:
        """Send a write; service-side rejection comes back as a failed result."""
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise SubmissionError(f"Could not reach catalogue service: {e}") from e

        try:
            envelope = ResultEnvelope.model_validate(response.json())
        except (ValueError, PydanticValidationError):
            envelope = ResultEnvelope(success=response.is_success, message=response.text)

        success = envelope.success and response.is_success
        if not success:
            logger.info(f"{method} {path} rejected ({response.status_code}): {envelope.message}")
        return BackendResult(
            success=success,
            message=envelope.message,
            error_code=envelope.error_code,
            data=envelope.record(),
        )

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    async def list_options(
        self,
        kind: OptionKind,
        page: int,
        page_size: int,
        *,
        search: str = "",
        parent_id: str | None = None,
    ) -> OptionPage:
        mapping = OPTION_FIELDS[kind]
        body: dict[str, Any] = {
            "page": page,
            "limit": page_size,
            "search": search,
            "sort_order": "desc",
        }
        if mapping.parent_filter and parent_id is not None:
            body[mapping.parent_filter] = parent_id

        envelope = await self._list(mapping.resource, kind.value, body)
        total, _, has_more = envelope.page_info(page, page_size)
        return OptionPage(
            items=[mapping.to_option(r, kind=kind.value) for r in envelope.records()],
            has_more=has_more,
            total=total,
        )

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def get_document(self, document_id: str) -> CatalogDocument:
        return CatalogDocument.from_record(await self._get(f"{DOCUMENTS}/{document_id}", "Document"))

    async def list_documents(self, page: int, page_size: int, *, search: str = "") -> DocumentPage:
        body = {"page": page, "limit": page_size, "search": search, "sort_order": "desc"}
        envelope = await self._list("all-item-catalogs", "document", body)
        total, total_pages, _ = envelope.page_info(page, page_size)
        return DocumentPage(
            items=[CatalogDocument.from_record(r) for r in envelope.records()],
            page=page,
            total=total,
            total_pages=total_pages,
        )

    async def create_document(self, payload: DocumentPayload) -> BackendResult:
        return await self._write(
            "POST", f"{DOCUMENTS}/create", data=payload.fields, files=payload.files
        )

    async def update_document(self, document_id: str, payload: DocumentPayload) -> BackendResult:
        return await self._write(
            "PUT", f"{DOCUMENTS}/{document_id}", data=payload.fields, files=payload.files
        )

    async def rename_document(self, document_id: str, new_name: str) -> BackendResult:
        return await self._write("PUT", f"{DOCUMENTS}/{document_id}/rename", json={"dokumen_name": new_name})

    async def delete_document(self, document_id: str) -> BackendResult:
        return await self._write("DELETE", f"{DOCUMENTS}/{document_id}")

    async def delete_document_item(self, item_id: str) -> BackendResult:
        return await self._write("DELETE", f"{DOCUMENTS}/items/{item_id}")

    async def duplicate_document(self, document_id: str) -> BackendResult:
        return await self._write("POST", f"{DOCUMENTS}/{document_id}/duplicate")

    # ------------------------------------------------------------------
    # VINs
    # ------------------------------------------------------------------

    async def list_vins(self, page: int, page_size: int, *, search: str = "") -> VinPage:
        body = {"page": page, "limit": page_size, "search": search, "sort_order": "desc"}
        envelope = await self._list("vins", "VIN", body)
        total, total_pages, _ = envelope.page_info(page, page_size)
        return VinPage(
            items=[VinProduct.from_record(r) for r in envelope.records()],
            page=page,
            total=total,
            total_pages=total_pages,
        )

    async def get_vin(self, vin_id: str) -> VinProduct:
        return VinProduct.from_record(await self._get(f"{VINS}/{vin_id}", "VIN"))

    async def create_vin(self, vin: VinProduct) -> BackendResult:
        return await self._write("POST", f"{VINS}/create", json=vin.to_record())

    async def update_vin(self, vin_id: str, vin: VinProduct) -> BackendResult:
        return await self._write("PUT", f"{VINS}/{vin_id}", json=vin.to_record())

    async def delete_vin(self, vin_id: str) -> BackendResult:
        return await self._write("DELETE", f"{VINS}/{vin_id}")
