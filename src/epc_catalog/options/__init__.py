"""Remote options - sources, per-selector cache, debounced search."""

from .types import Option, OptionPage
from .mapping import (
    OptionKind,
    PartKind,
    OptionFieldMapping,
    PartKindMapping,
    OPTION_FIELDS,
    PART_KINDS,
    format_label,
    part_type_options,
)
from .cache import OptionCache
from .source import (
    OptionSource,
    RemoteOptionSource,
    PartEntitySource,
    StaticOptionSource,
    NestedTypeSource,
)
from .debounce import DebouncedSearchController

__all__ = [
    "Option",
    "OptionPage",
    "OptionKind",
    "PartKind",
    "OptionFieldMapping",
    "PartKindMapping",
    "OPTION_FIELDS",
    "PART_KINDS",
    "format_label",
    "part_type_options",
    "OptionCache",
    "OptionSource",
    "RemoteOptionSource",
    "PartEntitySource",
    "StaticOptionSource",
    "NestedTypeSource",
    "DebouncedSearchController",
]
