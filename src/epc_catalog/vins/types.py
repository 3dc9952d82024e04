"""VIN product types - vehicle records linked to catalog documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class VinDetail:
    """
    Link from a VIN product to one catalog document.

    ``catalog_document_id`` may be None while the link is being drafted;
    it is required before the VIN is submitted.
    """
    catalog_document_id: str | None = None
    detail_name_en: str = ""
    detail_name_cn: str = ""
    detail_description: str = ""
    # Display label of the linked document, when known
    catalog_document_label: str | None = None

    def to_record(self) -> dict[str, Any]:
        return {
            "master_pdf_id": self.catalog_document_id or "",
            "detail_name_en": self.detail_name_en,
            "detail_name_cn": self.detail_name_cn,
            "detail_description": self.detail_description,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> VinDetail:
        doc_id = record.get("master_pdf_id")
        return cls(
            catalog_document_id=str(doc_id) if doc_id else None,
            detail_name_en=record.get("detail_name_en") or "",
            detail_name_cn=record.get("detail_name_cn") or "",
            detail_description=record.get("detail_description") or "",
            catalog_document_label=record.get("name_pdf") or None,
        )


@dataclass(slots=True)
class VinProduct:
    """A vehicle identification record."""
    vin_number: str
    product_name_en: str = ""
    product_name_cn: str = ""
    description: str = ""
    details: list[VinDetail] = field(default_factory=list)
    id: str | None = None

    def to_record(self) -> dict[str, Any]:
        """Service payload; product fields keep the service's ``production_*`` names."""
        return {
            "vin_number": self.vin_number,
            "production_name_en": self.product_name_en,
            "production_name_cn": self.product_name_cn,
            "production_description": self.description,
            "master_pdf": [d.to_record() for d in self.details],
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> VinProduct:
        vin_id = record.get("production_id") or record.get("id")
        return cls(
            id=str(vin_id) if vin_id else None,
            vin_number=record.get("vin_number") or "",
            product_name_en=record.get("production_name_en") or "",
            product_name_cn=record.get("production_name_cn") or "",
            description=record.get("production_description") or "",
            details=[VinDetail.from_record(d) for d in record.get("master_pdf") or []],
        )


@dataclass(slots=True)
class VinPage:
    """One page of the VIN list."""
    items: list[VinProduct] = field(default_factory=list)
    page: int = 1
    total: int = 0
    total_pages: int = 0

    @property
    def has_more(self) -> bool:
        return self.page < self.total_pages
