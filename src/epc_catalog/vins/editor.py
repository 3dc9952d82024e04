"""VIN editor - create or edit one VIN product and its document links."""

from __future__ import annotations

import logging
from typing import Any, TYPE_CHECKING

from ..config import Config
from ..errors import SubmissionError, ValidationError
from ..notifications import Notifier
from .linkage import VinLinkageList
from .types import VinProduct

if TYPE_CHECKING:
    from ..backends.base import BackendResult, CatalogBackend


logger = logging.getLogger(__name__)

REQUIRED_FIELDS: dict[str, str] = {
    "vin_number": "VIN number is required",
    "product_name_en": "Product name (EN) is required",
    "product_name_cn": "Product name (CN) is required",
}
EDITABLE_FIELDS = ("vin_number", "product_name_en", "product_name_cn", "description")


class VinEditor:
    """
    Editing session for a VIN product.

    Usage:
        editor = VinEditor(backend)
        editor.set_field("vin_number", "LZZ1BBND8NW123456")
        row = editor.linkage.add()
        await row.selector.refresh()
        editor.linkage.select(0, row.selector.options[0])
        await editor.submit()
    """

    def __init__(
        self,
        backend: CatalogBackend,
        *,
        config: Config | None = None,
        notifier: Notifier | None = None,
    ):
        self.backend = backend
        self.config = config or Config()
        self.notifier = notifier or Notifier()
        self.vin = VinProduct(vin_number="")
        self.linkage = VinLinkageList(backend, config=self.config.vins, notifier=self.notifier)
        self.errors: dict[str, str] = {}
        self.submitting = False

    def set_field(self, name: str, value: Any) -> None:
        if name not in EDITABLE_FIELDS:
            raise KeyError(f"Unknown VIN field: {name}")
        setattr(self.vin, name, "" if value is None else str(value))
        self.errors.pop(name, None)

    def validate(self) -> dict[str, str]:
        errors = {
            name: message
            for name, message in REQUIRED_FIELDS.items()
            if not getattr(self.vin, name).strip()
        }
        errors.update(self.linkage.validate())
        self.errors = errors
        return dict(errors)

    async def submit(self) -> BackendResult:
        if self.submitting:
            raise SubmissionError("A submission is already in progress")

        errors = self.validate()
        if errors:
            raise ValidationError(errors)

        self.vin.vin_number = self.vin.vin_number.strip()
        self.vin.details = self.linkage.to_details()

        self.submitting = True
        try:
            if self.vin.id is not None:
                result = await self.backend.update_vin(self.vin.id, self.vin)
            else:
                result = await self.backend.create_vin(self.vin)
        finally:
            self.submitting = False

        if not result.success:
            message = result.message or "Failed to save VIN"
            logger.warning(f"VIN submission failed: {message}")
            self.errors["general"] = message
            self.notifier.error(message)
            raise SubmissionError(message, error_code=result.error_code)

        if self.vin.id is None:
            new_id = result.data.get("production_id") or result.data.get("id")
            self.vin.id = str(new_id) if new_id else None

        logger.info(f"Saved VIN {self.vin.vin_number} with {len(self.vin.details)} linked documents")
        self.notifier.success(result.message or "VIN saved successfully")
        return result

    async def load(self, vin_id: str) -> VinProduct:
        vin = await self.backend.get_vin(vin_id)
        if vin.id is None:
            vin.id = vin_id
        self.vin = vin
        self.linkage.load(vin.details)
        self.errors = {}
        return vin

    def close(self) -> None:
        self.linkage.clear()
