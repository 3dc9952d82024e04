"""Catalog document types - hierarchy records, part items, documents."""

from __future__ import annotations

import mimetypes
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..options.mapping import PART_KINDS, PartKind


def new_item_id() -> str:
    """Fresh id for a part item; never derived from imported data."""
    return f"item-{uuid.uuid4().hex}"


@dataclass(frozen=True, slots=True)
class MasterCategory:
    """Top of the generic hierarchy. Read-only to this engine."""
    id: str
    name_en: str
    name_cn: str = ""
    description: str = ""

    def to_record(self) -> dict[str, Any]:
        return {
            "master_category_id": self.id,
            "master_category_name_en": self.name_en,
            "master_category_name_cn": self.name_cn,
            "master_category_description": self.description,
        }


@dataclass(frozen=True, slots=True)
class Category:
    """Belongs to exactly one master category."""
    id: str
    name_en: str
    name_cn: str = ""
    master_category_id: str = ""

    def to_record(self) -> dict[str, Any]:
        return {
            "category_id": self.id,
            "category_name_en": self.name_en,
            "category_name_cn": self.name_cn,
            "master_category_id": self.master_category_id,
        }


@dataclass(frozen=True, slots=True)
class TypeCategory:
    """Belongs to exactly one category."""
    id: str
    name_en: str
    name_cn: str = ""
    category_id: str = ""

    def to_record(self) -> dict[str, Any]:
        return {
            "type_category_id": self.id,
            "type_category_name_en": self.name_en,
            "type_category_name_cn": self.name_cn,
            "category_id": self.category_id,
        }


@dataclass(frozen=True, slots=True)
class TypeEntity:
    """Sub-type nested in a legacy part entity."""
    id: str
    name_en: str
    name_cn: str = ""


@dataclass(frozen=True, slots=True)
class PartTypeEntity:
    """A cabin, engine, axle, transmission or steering record with its sub-types."""
    kind: PartKind
    id: str
    name_en: str
    name_cn: str = ""
    description: str = ""
    types: tuple[TypeEntity, ...] = ()

    def to_record(self) -> dict[str, Any]:
        """Service record shape for this kind, per ``PART_KINDS``."""
        mapping = PART_KINDS[self.kind]
        fields, type_fields = mapping.fields, mapping.type_fields
        return {
            fields.id_field: self.id,
            fields.name_en_field: self.name_en,
            fields.name_cn_field: self.name_cn,
            fields.name_en_field.replace("_name_en", "_description"): self.description,
            mapping.types_field: [
                {
                    type_fields.id_field: t.id,
                    type_fields.name_en_field: t.name_en,
                    type_fields.name_cn_field: t.name_cn,
                }
                for t in self.types
            ],
        }


@dataclass(frozen=True, slots=True)
class ImageUpload:
    """Binary image attached to a document or an item."""
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: str | Path) -> ImageUpload:
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            content=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )


# Wire names of the item fields inside ``data_items``
ITEM_WIRE_FIELDS: dict[str, str] = {
    "target_id": "target_id",
    "part_number": "part_number",
    "name_en": "catalog_item_name_en",
    "name_cn": "catalog_item_name_ch",
    "description": "description",
    "unit": "unit",
    "quantity": "quantity",
}


@dataclass(slots=True)
class PartItem:
    """One row of a catalog document."""
    id: str
    target_id: str = ""
    part_number: str = ""
    quantity: int = 1
    name_en: str = ""
    name_cn: str = ""
    description: str = ""
    unit: str = ""
    photo: ImageUpload | None = None

    def to_data_item(self) -> dict[str, Any]:
        """Serialize for the ``data_items`` JSON array."""
        data = {wire: getattr(self, attr) for attr, wire in ITEM_WIRE_FIELDS.items()}
        data["diagram_serial_number"] = ""
        return data

    @classmethod
    def from_data_item(cls, record: dict[str, Any]) -> PartItem:
        """Build from a service record; records without an id get a fresh one."""
        raw_id = record.get("catalog_item_id") or record.get("id")
        try:
            quantity = int(record.get("quantity", 1))
        except (TypeError, ValueError):
            quantity = 1
        return cls(
            id=str(raw_id) if raw_id else new_item_id(),
            target_id=str(record.get("target_id") or ""),
            part_number=str(record.get("part_number") or ""),
            quantity=quantity,
            name_en=record.get("catalog_item_name_en") or "",
            name_cn=record.get("catalog_item_name_ch") or "",
            description=record.get("description") or "",
            unit=record.get("unit") or "",
        )


@dataclass(slots=True)
class CatalogDocument:
    """
    A saved catalog document as held by the service.

    Generic-flow documents carry the three category ids; legacy documents
    carry ``part_type`` / ``part_id`` / ``type_id`` instead.
    """
    id: str | None = None
    name: str = ""
    master_category_id: str | None = None
    category_id: str | None = None
    type_category_id: str | None = None
    part_type: str | None = None
    part_id: str | None = None
    type_id: str | None = None
    image_url: str | None = None
    items: list[PartItem] = field(default_factory=list)
    # Display names of the hierarchy levels, keyed like the id fields
    labels: dict[str, str] = field(default_factory=dict)

    def hierarchy(self) -> dict[str, str | None]:
        return {
            "master_category_id": self.master_category_id,
            "category_id": self.category_id,
            "type_category_id": self.type_category_id,
            "part_type": self.part_type,
            "part_id": self.part_id,
            "type_id": self.type_id,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> CatalogDocument:
        def _id(key: str) -> str | None:
            value = record.get(key)
            return str(value) if value not in (None, "") else None

        labels = {}
        for key, name_key in (
            ("master_category_id", "master_category_name_en"),
            ("category_id", "category_name_en"),
            ("type_category_id", "type_category_name_en"),
        ):
            if record.get(name_key):
                labels[key] = record[name_key]

        doc_id = record.get("master_pdf_id") or record.get("id")
        return cls(
            id=str(doc_id) if doc_id else None,
            name=record.get("dokumen_name") or record.get("name_pdf") or "",
            master_category_id=_id("master_category_id"),
            category_id=_id("category_id"),
            type_category_id=_id("type_category_id"),
            part_type=_id("master_catalog"),
            part_id=_id("part_id"),
            type_id=_id("type_id"),
            image_url=record.get("file_foto") or None,
            items=[PartItem.from_data_item(r) for r in record.get("data_items") or []],
            labels=labels,
        )


@dataclass(slots=True)
class DocumentPage:
    """One page of the document list."""
    items: list[CatalogDocument] = field(default_factory=list)
    page: int = 1
    total: int = 0
    total_pages: int = 0

    @property
    def has_more(self) -> bool:
        return self.page < self.total_pages
