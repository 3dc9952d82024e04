"""
CSV import of part items.

Expected columns (header row required):
    target_id, part_number, catalog_item_name_en, catalog_item_name_ch, quantity
Optional columns:
    description, unit

The import is all-or-nothing: the first bad row aborts it and nothing is
returned. Row numbers in errors are 1-based and count data rows only.
"""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import IO, Union

from ..config import CsvConfig
from ..documents.types import PartItem, new_item_id
from ..errors import CsvParseError


logger = logging.getLogger(__name__)


REQUIRED_COLUMNS = (
    "target_id",
    "part_number",
    "catalog_item_name_en",
    "catalog_item_name_ch",
    "quantity",
)
OPTIONAL_COLUMNS = ("description", "unit")

CsvInput = Union[str, bytes, Path, IO[str], IO[bytes]]


class CsvIngestionPipeline:
    """Parses an uploaded CSV into validated part items."""

    def __init__(self, config: CsvConfig | None = None):
        self.config = config or CsvConfig()

    def validate(self, file: CsvInput) -> list[PartItem]:
        """
        Parse a CSV file into part items.

        Args:
            file: Path to the file, raw bytes, CSV text, or an open
                text/binary file object. A string holding a newline or a
                comma is read as CSV content, anything else as a path.

        Returns:
            One PartItem per data row, each with a freshly generated id

        Raises:
            CsvParseError: On the first unreadable file or invalid row
        """
        if isinstance(file, (bytes, bytearray)):
            return self.validate_bytes(bytes(file))

        if isinstance(file, str) and ("\n" in file or "," in file):
            return self.validate_text(file)

        if isinstance(file, (str, Path)):
            path = Path(file)
            if not path.is_file():
                raise CsvParseError(f"CSV file not found: {path}")
            try:
                with open(path, "r", encoding=self.config.encoding, newline="") as f:
                    return self.validate_text(f.read())
            except UnicodeDecodeError as e:
                raise CsvParseError(f"CSV file is not valid {self.config.encoding}: {e}") from e
            except OSError as e:
                raise CsvParseError(f"CSV file could not be read: {e}") from e

        content = file.read()
        if isinstance(content, bytes):
            return self.validate_bytes(content)
        return self.validate_text(content)

    def validate_bytes(self, data: bytes) -> list[PartItem]:
        try:
            text = data.decode(self.config.encoding)
        except UnicodeDecodeError as e:
            raise CsvParseError(f"CSV file is not valid {self.config.encoding}: {e}") from e
        return self.validate_text(text)

    def validate_text(self, text: str) -> list[PartItem]:
        # A BOM can survive when text was decoded elsewhere
        text = text.lstrip("\ufeff")
        reader = csv.DictReader(io.StringIO(text, newline=""))

        try:
            header = reader.fieldnames
        except csv.Error as e:
            raise CsvParseError(f"CSV parsing failed: {e}") from e
        if not header or not any(h and h.strip() for h in header):
            raise CsvParseError("CSV file has no header row")
        reader.fieldnames = [h.strip() if h else "" for h in header]

        items: list[PartItem] = []
        try:
            for index, row in enumerate(reader, start=1):
                items.append(self._parse_row(index, row))
        except csv.Error as e:
            raise CsvParseError(f"CSV parsing failed at row {len(items) + 1}: {e}", row=len(items) + 1) from e

        if not items:
            raise CsvParseError("CSV file contains no part rows")

        logger.info(f"Parsed {len(items)} part items from CSV")
        return items

    def _parse_row(self, index: int, row: dict) -> PartItem:
        # Blank trailing cells are allowed, extra values are not
        if any((extra or "").strip() for extra in row.get(None) or []):
            raise CsvParseError(f"Row {index}: Too many fields", row=index)

        values = {key: (value or "").strip() for key, value in row.items() if key}

        missing = [column for column in REQUIRED_COLUMNS if not values.get(column)]
        if missing:
            raise CsvParseError(
                f"Row {index}: Missing required fields: {', '.join(missing)}",
                row=index,
                missing_fields=missing,
            )

        return PartItem(
            id=new_item_id(),
            target_id=values["target_id"],
            part_number=values["part_number"],
            quantity=self._coerce_quantity(index, values["quantity"]),
            name_en=values["catalog_item_name_en"],
            name_cn=values["catalog_item_name_ch"],
            description=values.get("description", ""),
            unit=values.get("unit", ""),
        )

    def _coerce_quantity(self, index: int, raw: str) -> int:
        """
        Quantity as an int; unparsable or non-positive values fall back to
        the configured default (logged).
        """
        try:
            quantity = int(raw)
        except ValueError:
            try:
                quantity = int(float(raw))
            except (ValueError, OverflowError):
                quantity = 0

        if quantity < 1:
            logger.warning(
                f"Row {index}: quantity {raw!r} is not a positive integer, "
                f"using {self.config.default_quantity}"
            )
            return self.config.default_quantity
        return quantity
