"""Bulk import of part items."""

from .csv_pipeline import CsvIngestionPipeline, REQUIRED_COLUMNS, OPTIONAL_COLUMNS

__all__ = [
    "CsvIngestionPipeline",
    "REQUIRED_COLUMNS",
    "OPTIONAL_COLUMNS",
]
