"""Catalog documents - types and payload assembly.

The editing builder lives in ``documents.builder`` and list actions in
``documents.manager``.
"""

from .types import (
    MasterCategory,
    Category,
    TypeCategory,
    TypeEntity,
    PartTypeEntity,
    ImageUpload,
    PartItem,
    CatalogDocument,
    DocumentPage,
    new_item_id,
)
from .payload import DocumentPayload, build_document_payload

__all__ = [
    "MasterCategory",
    "Category",
    "TypeCategory",
    "TypeEntity",
    "PartTypeEntity",
    "ImageUpload",
    "PartItem",
    "CatalogDocument",
    "DocumentPage",
    "new_item_id",
    "DocumentPayload",
    "build_document_payload",
]
