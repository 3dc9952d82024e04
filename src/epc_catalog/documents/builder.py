"""Catalog document builder - one editing session for one document.

The builder is the only owner of the draft. Every change goes through one
of its operations, which keep the field-keyed error map consistent with
the data: fixing a field clears its error, removing an item shifts the
errors of the items after it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, TYPE_CHECKING

from ..config import Config
from ..errors import CsvParseError, SubmissionConflictError, SubmissionError, ValidationError
from ..ingest.csv_pipeline import CsvIngestionPipeline, CsvInput
from ..notifications import Notifier
from ..options.mapping import part_type_options
from ..options.types import Option
from ..selectors.graph import FLOW_LEVELS, LEVEL_LABELS, HierarchyFlow, SelectorGraph
from .payload import DocumentPayload, build_document_payload
from .types import CatalogDocument, ImageUpload, PartItem, new_item_id

if TYPE_CHECKING:
    from ..backends.base import BackendResult, CatalogBackend


logger = logging.getLogger(__name__)


DUPLICATE_DOCUMENT_CODE = "DUPLICATE_DOCUMENT"
CONFLICT_MESSAGE = (
    "The combination of document name, master category, category, and type category "
    "already exists. Please use a different combination."
)
# Older service builds only report the conflict as text
_CONFLICT_TEXT = "dokumen_name, master_category_id, category_id, dan type_category_id"

_ITEM_KEY = re.compile(r"^items\.(\d+)\.(\w+)$")

# Item fields checked by validate(), with the words used in their messages
ITEM_REQUIRED_FIELDS: dict[str, str] = {
    "target_id": "target",
    "part_number": "number",
    "name_en": "English name",
    "name_cn": "Chinese name",
}
ITEM_EDITABLE_FIELDS = (
    "target_id",
    "part_number",
    "quantity",
    "name_en",
    "name_cn",
    "description",
    "unit",
    "photo",
)


def _coerce_quantity(value: Any) -> int:
    """Quantity typed by the user; unparsable becomes 0 for validate() to report."""
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else 0
    try:
        return int(str(value).strip())
    except ValueError:
        return 0


class ImportMode(str, Enum):
    """What a CSV upload does with the items already in the draft."""
    REPLACE = "replace"
    APPEND = "append"


def is_conflict(message: str | None, error_code: str | None = None) -> bool:
    """True if a service rejection means "name + hierarchy already taken"."""
    if error_code:
        return error_code == DUPLICATE_DOCUMENT_CODE
    return bool(message) and _CONFLICT_TEXT in message


def translate_submission_error(message: str | None, error_code: str | None = None) -> SubmissionError:
    """Turn a service rejection into the exception shown to the user."""
    if is_conflict(message, error_code):
        return SubmissionConflictError(CONFLICT_MESSAGE, error_code=error_code or DUPLICATE_DOCUMENT_CODE)
    return SubmissionError(message or "Failed to save catalog", error_code=error_code)


@dataclass
class CatalogDraft:
    """Header fields and items of the document being edited."""
    id: str | None = None
    name: str = ""
    image: ImageUpload | None = None
    # Image already stored by the service, when editing
    image_url: str | None = None
    items: list[PartItem] = field(default_factory=list)
    use_csv: bool = False


class CatalogAggregateBuilder:
    """
    Assembles, validates and submits one catalog document.

    Usage:
        builder = CatalogAggregateBuilder(backend)
        await builder.graph.root.refresh()
        builder.select_hierarchy_level("master_category_id", builder.graph.root.options[0])
        ...
        builder.set_header_field("name", "Cabin assembly")
        builder.handle_csv_upload("parts.csv")
        await builder.submit()

    ``errors`` is the field-keyed error map from the last validation, kept
    up to date as fields are edited.
    """

    def __init__(
        self,
        backend: CatalogBackend,
        *,
        flow: HierarchyFlow = HierarchyFlow.GENERIC,
        config: Config | None = None,
        notifier: Notifier | None = None,
        csv_pipeline: CsvIngestionPipeline | None = None,
        import_mode: ImportMode = ImportMode.REPLACE,
    ):
        self.backend = backend
        self.config = config or Config()
        self.notifier = notifier or Notifier()
        self.csv_pipeline = csv_pipeline or CsvIngestionPipeline(self.config.csv)
        self.import_mode = import_mode
        self.graph = SelectorGraph.for_flow(flow, backend, self.config.selectors, self.notifier)
        self.draft = CatalogDraft()
        self.errors: dict[str, str] = {}
        self.submitting = False

    @property
    def flow(self) -> HierarchyFlow:
        return self.graph.flow

    @property
    def items(self) -> list[PartItem]:
        return list(self.draft.items)

    @property
    def is_edit(self) -> bool:
        return self.draft.id is not None

    # ------------------------------------------------------------------
    # Header
    # ------------------------------------------------------------------

    def set_header_field(self, name: str, value: Any) -> None:
        """Set a header field. Hierarchy levels go through ``select_hierarchy_level``."""
        if name in self.graph:
            raise ValueError(f"{name} is a hierarchy level; use select_hierarchy_level()")
        if name != "name":
            raise KeyError(f"Unknown header field: {name}")
        self.draft.name = "" if value is None else str(value)
        self.errors.pop("name", None)

    def select_hierarchy_level(self, level: str, option: Option | None) -> bool:
        """
        Select a hierarchy level. When the value changes, every level below
        is cleared (by the graph) and so are their errors.
        """
        changed = self.graph.select(level, option)
        if changed:
            for name in [level, *self.graph.downstream_of(level)]:
                self.errors.pop(name, None)
        return changed

    def set_image(self, image: ImageUpload | str | Path | None) -> None:
        if isinstance(image, (str, Path)):
            image = ImageUpload.from_path(image)
        self.draft.image = image

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def add_item(self, item: PartItem | None = None, **fields: Any) -> PartItem:
        """Append an item (a blank one when called without arguments)."""
        if item is None:
            if "quantity" in fields:
                fields["quantity"] = _coerce_quantity(fields["quantity"])
            item = PartItem(id=new_item_id(), **fields)
        else:
            item.quantity = _coerce_quantity(item.quantity)
        self.draft.items.append(item)
        self.errors.pop("items", None)
        return item

    def _position(self, index: int) -> int:
        try:
            return range(len(self.draft.items))[index]
        except IndexError:
            raise IndexError(f"No part item at index {index}") from None

    def remove_item(self, index: int) -> PartItem:
        """Remove an item; errors of later items move up with them."""
        index = self._position(index)
        item = self.draft.items.pop(index)
        shifted: dict[str, str] = {}
        for key, message in self.errors.items():
            match = _ITEM_KEY.match(key)
            if match is None:
                shifted[key] = message
                continue
            position, item_field = int(match.group(1)), match.group(2)
            if position < index:
                shifted[key] = message
            elif position > index:
                shifted[f"items.{position - 1}.{item_field}"] = message
        self.errors = shifted
        return item

    def update_item(self, index: int, name: str, value: Any) -> PartItem:
        if name not in ITEM_EDITABLE_FIELDS:
            raise KeyError(f"Unknown item field: {name}")
        index = self._position(index)
        item = self.draft.items[index]
        if name == "quantity":
            value = _coerce_quantity(value)
        elif name == "photo":
            if isinstance(value, (str, Path)):
                value = ImageUpload.from_path(value)
        elif value is None:
            value = ""
        setattr(item, name, value)
        self.errors.pop(f"items.{index}.{name}", None)
        return item

    def handle_csv_upload(self, file: CsvInput) -> list[PartItem]:
        """
        Import items from a CSV file.

        On success the parsed items replace (or, in APPEND mode, extend) the
        draft's items. On failure nothing changes, the user is notified and
        the CsvParseError propagates.
        """
        try:
            parsed = self.csv_pipeline.validate(file)
        except CsvParseError as e:
            logger.warning(f"CSV import rejected: {e}")
            self.notifier.error(str(e))
            raise

        if self.import_mode == ImportMode.APPEND:
            self.draft.items.extend(parsed)
        else:
            self.draft.items = list(parsed)
        self.draft.use_csv = True
        self.errors = {k: v for k, v in self.errors.items() if k != "items" and not _ITEM_KEY.match(k)}

        self.notifier.success(f"Imported {len(parsed)} items from CSV")
        return parsed

    # ------------------------------------------------------------------
    # Validation and submission
    # ------------------------------------------------------------------

    def validate(self) -> dict[str, str]:
        """Check the draft; returns (and stores) the field-keyed error map."""
        errors: dict[str, str] = {}

        if not self.draft.name.strip():
            errors["name"] = "Document name is required"

        for level in self.graph.missing_levels():
            errors[level] = f"{LEVEL_LABELS[level]} is required"
        for level in self.graph.mismatched_levels():
            parent = self.graph[level].upstream
            errors[level] = f"{LEVEL_LABELS[level]} does not belong to the selected {parent.label}"

        if not self.draft.items:
            errors["items"] = "At least one part item is required"

        for index, item in enumerate(self.draft.items):
            for name, words in ITEM_REQUIRED_FIELDS.items():
                if not str(getattr(item, name) or "").strip():
                    errors[f"items.{index}.{name}"] = f"Part {index + 1} {words} is required"
            if item.quantity <= 0:
                errors[f"items.{index}.quantity"] = f"Part {index + 1} quantity must be greater than 0"

        self.errors = errors
        return dict(errors)

    def build_payload(self) -> DocumentPayload:
        return build_document_payload(
            name=self.draft.name,
            flow=self.flow,
            hierarchy=self.graph.values(),
            items=self.draft.items,
            image=self.draft.image,
            use_csv=self.draft.use_csv,
        )

    async def submit(self) -> BackendResult:
        """
        Validate and send the document.

        Raises:
            ValidationError: The draft is incomplete; ``errors`` says where
            SubmissionConflictError: Name + hierarchy already used
            SubmissionError: Any other rejection
        """
        if self.submitting:
            raise SubmissionError("A submission is already in progress")

        errors = self.validate()
        if errors:
            raise ValidationError(errors)

        payload = self.build_payload()
        self.submitting = True
        try:
            if self.draft.id is not None:
                result = await self.backend.update_document(self.draft.id, payload)
            else:
                result = await self.backend.create_document(payload)
        except SubmissionError as e:
            raise self._submission_failed(str(e), e.error_code) from e
        finally:
            self.submitting = False

        if not result.success:
            raise self._submission_failed(result.message, result.error_code)

        if self.draft.id is None:
            new_id = result.data.get("master_pdf_id") or result.data.get("id")
            self.draft.id = str(new_id) if new_id else None

        logger.info(f"Saved catalog {self.draft.name!r} ({len(self.draft.items)} items)")
        self.notifier.success(result.message or "Catalog saved successfully")
        return result

    def _submission_failed(self, message: str | None, error_code: str | None) -> SubmissionError:
        error = translate_submission_error(message, error_code)
        logger.warning(f"Catalog submission failed: {message}")
        self.errors["general"] = str(error)
        self.notifier.error(str(error))
        return error

    # ------------------------------------------------------------------
    # Editing an existing document
    # ------------------------------------------------------------------

    async def load(self, document_id: str) -> CatalogDocument:
        """Start an edit session from a saved document."""
        document = await self.backend.get_document(document_id)

        self.graph.reset()
        hierarchy = document.hierarchy()
        if self.flow == HierarchyFlow.LEGACY:
            part_types = {o.id: o for o in part_type_options()}
            part_type = hierarchy["part_type"]
            options = [
                part_types.get(part_type) if part_type else None,
                self._stub_option("part_id", hierarchy["part_id"], document, kind=part_type),
                self._stub_option("type_id", hierarchy["type_id"], document),
            ]
        else:
            options = [
                self._stub_option(level, hierarchy[level], document, kind=level.removesuffix("_id"))
                for level in FLOW_LEVELS[HierarchyFlow.GENERIC]
            ]

        # Root first: selecting a level clears the ones below it
        for level, option in zip(FLOW_LEVELS[self.flow], options):
            if option is None:
                break
            self.graph.select(level, option)

        self.draft = CatalogDraft(
            id=document.id or document_id,
            name=document.name,
            image_url=document.image_url,
            items=list(document.items),
        )
        self.errors = {}
        logger.info(f"Loaded catalog {document_id} with {len(document.items)} items")
        return document

    @staticmethod
    def _stub_option(
        level: str,
        option_id: str | None,
        document: CatalogDocument,
        kind: str | None = None,
    ) -> Option | None:
        if not option_id:
            return None
        return Option(id=option_id, label=document.labels.get(level, option_id), kind=kind)
