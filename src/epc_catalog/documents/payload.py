"""Multipart payload for document create/update."""

from __future__ import annotations

import json
from dataclasses import dataclass, field

from ..selectors.graph import HierarchyFlow
from .types import ImageUpload, PartItem


@dataclass(frozen=True, slots=True)
class DocumentPayload:
    """
    Form fields and files of a multipart request.

    ``fields`` and ``files`` have the shapes httpx expects for ``data=`` and
    ``files=``.
    """
    fields: dict[str, str] = field(default_factory=dict)
    files: dict[str, tuple[str | None, bytes, str | None]] = field(default_factory=dict)

    def data_items(self) -> list[dict]:
        return json.loads(self.fields.get("data_items", "[]"))


def build_document_payload(
    name: str,
    flow: HierarchyFlow,
    hierarchy: dict[str, str | None],
    items: list[PartItem],
    image: ImageUpload | None = None,
    use_csv: bool = False,
) -> DocumentPayload:
    """Assemble header fields, hierarchy ids, the image and the JSON item array."""
    fields: dict[str, str] = {
        "dokumen_name": name.strip(),
        "use_csv": "true" if use_csv else "false",
    }

    if flow == HierarchyFlow.LEGACY:
        fields["master_catalog"] = hierarchy.get("part_type") or ""
        fields["part_id"] = hierarchy.get("part_id") or ""
        fields["type_id"] = hierarchy.get("type_id") or ""
    else:
        fields["master_category_id"] = hierarchy.get("master_category_id") or ""
        fields["category_id"] = hierarchy.get("category_id") or ""
        fields["type_category_id"] = hierarchy.get("type_category_id") or ""

    fields["data_items"] = json.dumps(
        [item.to_data_item() for item in items],
        ensure_ascii=False,
    )

    files: dict[str, tuple[str | None, bytes, str | None]] = {}
    if image is not None:
        files["file_foto"] = (image.filename, image.content, image.content_type)
    else:
        # Empty part without a filename; keeps the body multipart
        files["file_foto"] = (None, b"", None)

    for index, item in enumerate(items):
        if item.photo is not None:
            files[f"item_foto_{index}"] = (item.photo.filename, item.photo.content, item.photo.content_type)

    return DocumentPayload(fields=fields, files=files)
