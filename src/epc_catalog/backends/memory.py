"""In-memory catalogue backend for demos and testing.

Behaves like the catalogue service as seen through ``CatalogBackend``:
paginated, searchable option lists filtered by parent id, document and VIN
storage, and the service's duplicate-document rejection.
"""

from __future__ import annotations

import copy
import itertools
import logging
import math
from typing import Any

from ..documents.payload import DocumentPayload
from ..documents.types import (
    CatalogDocument,
    Category,
    DocumentPage,
    MasterCategory,
    PartTypeEntity,
    TypeCategory,
)
from ..errors import NotFoundError, RemoteFetchError
from ..options.mapping import OPTION_FIELDS, OptionKind
from ..options.source import paginate_locally
from ..options.types import OptionPage
from ..vins.types import VinPage, VinProduct
from .base import BackendResult, CatalogBackend


logger = logging.getLogger(__name__)

# What the service answers when name + hierarchy is already taken
DUPLICATE_DOCUMENT_MESSAGE = (
    "Kombinasi dokumen_name, master_category_id, category_id, dan type_category_id sudah ada"
)

HIERARCHY_FIELDS = (
    "master_category_id",
    "category_id",
    "type_category_id",
    "master_catalog",
    "part_id",
    "type_id",
)


class InMemoryCatalogBackend(CatalogBackend):
    """
    Dict-backed catalogue service.

    Usage:
        backend = InMemoryCatalogBackend()
        backend.add_master_category(MasterCategory("m1", "Truck"))
        backend.add_category(Category("c1", "Body", master_category_id="m1"))

    ``calls`` records every backend call as ``(method, *args)`` so tests can
    assert on traffic. Kinds listed in ``failing_kinds`` raise
    ``RemoteFetchError`` from ``list_options``.
    """

    def __init__(self, *, structured_errors: bool = False):
        # When True, duplicate documents are also flagged with an error code
        self.structured_errors = structured_errors
        self.records: dict[OptionKind, list[dict[str, Any]]] = {kind: [] for kind in OptionKind}
        self.documents: dict[str, dict[str, Any]] = {}
        self.vins: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple] = []
        self.failing_kinds: set[OptionKind] = set()
        self._ids = itertools.count(1)

    def _next_id(self) -> str:
        return str(next(self._ids))

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def add_master_category(self, master: MasterCategory) -> None:
        self.records[OptionKind.MASTER_CATEGORY].append(master.to_record())

    def add_category(self, category: Category) -> None:
        self.records[OptionKind.CATEGORY].append(category.to_record())

    def add_type_category(self, type_category: TypeCategory) -> None:
        self.records[OptionKind.TYPE_CATEGORY].append(type_category.to_record())

    def add_part(self, part: PartTypeEntity) -> None:
        self.records[part.kind.option_kind].append(part.to_record())

    def add_document(self, document: CatalogDocument) -> str:
        """Store a document directly, bypassing duplicate checks. Returns its id."""
        doc_id = document.id or self._next_id()
        self.documents[doc_id] = {
            "master_pdf_id": doc_id,
            "dokumen_name": document.name,
            "name_pdf": document.name,
            "master_category_id": document.master_category_id or "",
            "category_id": document.category_id or "",
            "type_category_id": document.type_category_id or "",
            "master_catalog": document.part_type or "",
            "part_id": document.part_id or "",
            "type_id": document.type_id or "",
            "file_foto": document.image_url,
            "data_items": [
                {**item.to_data_item(), "catalog_item_id": item.id} for item in document.items
            ],
        }
        return doc_id

    def add_vin(self, vin: VinProduct) -> str:
        vin_id = vin.id or self._next_id()
        self.vins[vin_id] = {"production_id": vin_id, **vin.to_record()}
        return vin_id

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
        self.calls.append(("list_options", kind, page, search, parent_id))
        if kind in self.failing_kinds:
            raise RemoteFetchError(kind.value, "service unavailable")

        mapping = OPTION_FIELDS[kind]
        if kind == OptionKind.CATALOG_DOCUMENT:
            records = list(self.documents.values())
        else:
            records = self.records[kind]
        if mapping.parent_filter and parent_id is not None:
            records = [r for r in records if str(r.get(mapping.parent_filter)) == str(parent_id)]
        options = [mapping.to_option(r, kind=kind.value) for r in records]
        return paginate_locally(options, page, page_size, search)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def _find_duplicate(self, fields: dict[str, str], exclude: str | None = None) -> str | None:
        if not fields.get("master_category_id"):
            return None
        key = (
            fields.get("dokumen_name", ""),
            fields.get("master_category_id"),
            fields.get("category_id"),
            fields.get("type_category_id"),
        )
        for doc_id, record in self.documents.items():
            if doc_id == exclude:
                continue
            existing = (
                record["dokumen_name"],
                record["master_category_id"],
                record["category_id"],
                record["type_category_id"],
            )
            if existing == key:
                return doc_id
        return None

    def _duplicate_result(self) -> BackendResult:
        return BackendResult(
            success=False,
            message=DUPLICATE_DOCUMENT_MESSAGE,
            error_code="DUPLICATE_DOCUMENT" if self.structured_errors else None,
        )

    def _document_record(self, doc_id: str, payload: DocumentPayload) -> dict[str, Any]:
        fields = payload.fields
        image = payload.files.get("file_foto")
        record: dict[str, Any] = {
            "master_pdf_id": doc_id,
            "dokumen_name": fields.get("dokumen_name", ""),
            "name_pdf": fields.get("dokumen_name", ""),
            "file_foto": image[0] if image else None,
            "data_items": [
                {**item, "catalog_item_id": f"{doc_id}-{index + 1}"}
                for index, item in enumerate(payload.data_items())
            ],
        }
        for name in HIERARCHY_FIELDS:
            record[name] = fields.get(name, "")
        return record

    async def get_document(self, document_id: str) -> CatalogDocument:
        self.calls.append(("get_document", document_id))
        if document_id not in self.documents:
            raise NotFoundError(f"Document not found: {document_id}")
        return CatalogDocument.from_record(copy.deepcopy(self.documents[document_id]))

    async def list_documents(self, page: int, page_size: int, *, search: str = "") -> DocumentPage:
        self.calls.append(("list_documents", page, search))
        term = search.strip().lower()
        records = [r for r in self.documents.values() if term in r["dokumen_name"].lower()]
        start = (page - 1) * page_size
        return DocumentPage(
            items=[CatalogDocument.from_record(copy.deepcopy(r)) for r in records[start:start + page_size]],
            page=page,
            total=len(records),
            total_pages=math.ceil(len(records) / page_size) if page_size else 0,
        )

    async def create_document(self, payload: DocumentPayload) -> BackendResult:
        self.calls.append(("create_document", payload))
        if self._find_duplicate(payload.fields) is not None:
            return self._duplicate_result()

        doc_id = self._next_id()
        self.documents[doc_id] = self._document_record(doc_id, payload)
        logger.debug(f"Created document {doc_id}")
        return BackendResult(success=True, message="Catalog created successfully", data={"master_pdf_id": doc_id})

    async def update_document(self, document_id: str, payload: DocumentPayload) -> BackendResult:
        self.calls.append(("update_document", document_id, payload))
        if document_id not in self.documents:
            return BackendResult(success=False, message=f"Document not found: {document_id}")
        if self._find_duplicate(payload.fields, exclude=document_id) is not None:
            return self._duplicate_result()

        record = self._document_record(document_id, payload)
        if record["file_foto"] is None:
            # Keep the stored image when no new one was uploaded
            record["file_foto"] = self.documents[document_id].get("file_foto")
        self.documents[document_id] = record
        return BackendResult(success=True, message="Catalog updated successfully", data={"master_pdf_id": document_id})

    async def rename_document(self, document_id: str, new_name: str) -> BackendResult:
        self.calls.append(("rename_document", document_id, new_name))
        record = self.documents.get(document_id)
        if record is None:
            return BackendResult(success=False, message=f"Document not found: {document_id}")
        fields = {name: record[name] for name in HIERARCHY_FIELDS}
        fields["dokumen_name"] = new_name
        if self._find_duplicate(fields, exclude=document_id) is not None:
            return self._duplicate_result()
        record["dokumen_name"] = record["name_pdf"] = new_name
        return BackendResult(success=True, message="Catalog renamed successfully")

    async def delete_document(self, document_id: str) -> BackendResult:
        self.calls.append(("delete_document", document_id))
        if self.documents.pop(document_id, None) is None:
            return BackendResult(success=False, message=f"Document not found: {document_id}")
        return BackendResult(success=True, message="Catalog deleted successfully")

    async def delete_document_item(self, item_id: str) -> BackendResult:
        self.calls.append(("delete_document_item", item_id))
        for record in self.documents.values():
            items = record["data_items"]
            for index, item in enumerate(items):
                if item.get("catalog_item_id") == item_id:
                    del items[index]
                    return BackendResult(success=True, message="Item deleted successfully")
        return BackendResult(success=False, message=f"Item not found: {item_id}")

    async def duplicate_document(self, document_id: str) -> BackendResult:
        self.calls.append(("duplicate_document", document_id))
        record = self.documents.get(document_id)
        if record is None:
            return BackendResult(success=False, message=f"Document not found: {document_id}")

        new_id = self._next_id()
        clone = copy.deepcopy(record)
        clone["master_pdf_id"] = new_id
        clone["dokumen_name"] = clone["name_pdf"] = f"{record['dokumen_name']} (Copy)"
        for index, item in enumerate(clone["data_items"]):
            item["catalog_item_id"] = f"{new_id}-{index + 1}"
        self.documents[new_id] = clone
        return BackendResult(success=True, message="Catalog duplicated successfully", data={"master_pdf_id": new_id})

    # ------------------------------------------------------------------
    # VINs
    # ------------------------------------------------------------------

    def _vin_number_taken(self, vin_number: str, exclude: str | None = None) -> bool:
        return any(
            r["vin_number"] == vin_number
            for vin_id, r in self.vins.items()
            if vin_id != exclude
        )

    async def list_vins(self, page: int, page_size: int, *, search: str = "") -> VinPage:
        self.calls.append(("list_vins", page, search))
        term = search.strip().lower()
        records = [
            r for r in self.vins.values()
            if term in r["vin_number"].lower() or term in r["production_name_en"].lower()
        ]
        start = (page - 1) * page_size
        return VinPage(
            items=[VinProduct.from_record(copy.deepcopy(r)) for r in records[start:start + page_size]],
            page=page,
            total=len(records),
            total_pages=math.ceil(len(records) / page_size) if page_size else 0,
        )

    async def get_vin(self, vin_id: str) -> VinProduct:
        self.calls.append(("get_vin", vin_id))
        if vin_id not in self.vins:
            raise NotFoundError(f"VIN not found: {vin_id}")
        return VinProduct.from_record(copy.deepcopy(self.vins[vin_id]))

    async def create_vin(self, vin: VinProduct) -> BackendResult:
        self.calls.append(("create_vin", vin))
        if self._vin_number_taken(vin.vin_number):
            return BackendResult(success=False, message=f"VIN number {vin.vin_number} already exists")
        vin_id = self._next_id()
        self.vins[vin_id] = {"production_id": vin_id, **vin.to_record()}
        return BackendResult(success=True, message="VIN created successfully", data={"production_id": vin_id})

    async def update_vin(self, vin_id: str, vin: VinProduct) -> BackendResult:
        self.calls.append(("update_vin", vin_id, vin))
        if vin_id not in self.vins:
            return BackendResult(success=False, message=f"VIN not found: {vin_id}")
        if self._vin_number_taken(vin.vin_number, exclude=vin_id):
            return BackendResult(success=False, message=f"VIN number {vin.vin_number} already exists")
        self.vins[vin_id] = {"production_id": vin_id, **vin.to_record()}
        return BackendResult(success=True, message="VIN updated successfully", data={"production_id": vin_id})

    async def delete_vin(self, vin_id: str) -> BackendResult:
        self.calls.append(("delete_vin", vin_id))
        if self.vins.pop(vin_id, None) is None:
            return BackendResult(success=False, message=f"VIN not found: {vin_id}")
        return BackendResult(success=True, message="VIN deleted successfully")
