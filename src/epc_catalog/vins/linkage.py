"""VIN linkage rows - each row links the VIN to one catalog document."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, TYPE_CHECKING

from ..config import VinConfig
from ..notifications import Notifier
from ..options.mapping import OptionKind
from ..options.source import RemoteOptionSource
from ..options.types import Option
from ..selectors.selector import CascadingSelector
from .types import VinDetail

if TYPE_CHECKING:
    from ..backends.base import CatalogBackend


logger = logging.getLogger(__name__)

DETAIL_TEXT_FIELDS = ("detail_name_en", "detail_name_cn", "detail_description")


@dataclass
class VinLinkRow:
    """One linkage row: its own document selector plus free-text fields."""
    selector: CascadingSelector
    detail: VinDetail


class VinLinkageList:
    """
    Ordered rows linking a VIN to catalog documents.

    Search text typed into a row's document selector is kept in
    ``search_inputs``, keyed by row position. Positions move when rows are
    added (new rows go on top) or removed, and the keys move with them.
    """

    def __init__(
        self,
        backend: CatalogBackend,
        *,
        config: VinConfig | None = None,
        notifier: Notifier | None = None,
    ):
        self.backend = backend
        self.config = config or VinConfig()
        self.notifier = notifier
        self.rows: list[VinLinkRow] = []
        self.search_inputs: dict[int, str] = {}

    def __len__(self) -> int:
        return len(self.rows)

    def __getitem__(self, index: int) -> VinLinkRow:
        return self.rows[index]

    def __iter__(self) -> Iterator[VinLinkRow]:
        return iter(self.rows)

    def _position(self, index: int) -> int:
        """Non-negative row position; negative indices count from the end."""
        try:
            return range(len(self.rows))[index]
        except IndexError:
            raise IndexError(f"No VIN detail row at index {index}") from None

    def _new_selector(self) -> CascadingSelector:
        return CascadingSelector(
            "catalog_document_id",
            RemoteOptionSource(self.backend, OptionKind.CATALOG_DOCUMENT),
            label="Catalog Document",
            page_size=self.config.page_size,
            debounce_seconds=self.config.search_debounce_seconds,
            notifier=self.notifier,
        )

    # ------------------------------------------------------------------
    # Rows
    # ------------------------------------------------------------------

    def add(self, detail: VinDetail | None = None) -> VinLinkRow:
        """Insert a row at the top."""
        row = VinLinkRow(selector=self._new_selector(), detail=detail or VinDetail())
        self.rows.insert(0, row)
        self.search_inputs = {index + 1: text for index, text in self.search_inputs.items()}
        return row

    def remove(self, index: int) -> VinLinkRow:
        """Delete a row; search text of later rows moves down by one."""
        index = self._position(index)
        row = self.rows.pop(index)
        row.selector.close()

        shifted: dict[int, str] = {}
        for position, text in self.search_inputs.items():
            if position < index:
                shifted[position] = text
            elif position > index:
                shifted[position - 1] = text
        self.search_inputs = shifted
        return row

    def clear(self) -> None:
        for row in self.rows:
            row.selector.close()
        self.rows = []
        self.search_inputs = {}

    def load(self, details: list[VinDetail]) -> None:
        """Replace all rows with saved details, keeping their order."""
        self.clear()
        for detail in details:
            row = VinLinkRow(selector=self._new_selector(), detail=detail)
            if detail.catalog_document_id:
                row.selector.select(Option(
                    id=detail.catalog_document_id,
                    label=detail.catalog_document_label or detail.catalog_document_id,
                    kind=OptionKind.CATALOG_DOCUMENT.value,
                ))
            self.rows.append(row)

    # ------------------------------------------------------------------
    # Per-row edits
    # ------------------------------------------------------------------

    def search_input(self, index: int) -> str:
        return self.search_inputs.get(self._position(index), "")

    def set_search_input(self, index: int, text: str) -> None:
        """Store the row's search text and schedule its debounced search."""
        index = self._position(index)
        row = self.rows[index]
        self.search_inputs[index] = text
        row.selector.on_input_change(text)

    def select(self, index: int, option: Option | None) -> None:
        row = self.rows[index]
        row.selector.select(option)
        row.detail.catalog_document_id = option.id if option is not None else None
        row.detail.catalog_document_label = option.label if option is not None else None

    def update_row(self, index: int, **fields: str) -> VinDetail:
        detail = self.rows[index].detail
        for name, value in fields.items():
            if name not in DETAIL_TEXT_FIELDS:
                raise KeyError(f"Unknown detail field: {name}")
            setattr(detail, name, value or "")
        return detail

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def to_details(self) -> list[VinDetail]:
        return [row.detail for row in self.rows]

    def validate(self) -> dict[str, str]:
        errors = {}
        for index, row in enumerate(self.rows):
            if not row.detail.catalog_document_id:
                errors[f"details.{index}.catalog_document_id"] = (
                    f"Catalog document for detail {index + 1} is required"
                )
        return errors
