"""Option types - the entries a selector offers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Option:
    """
    One selectable entry in a dropdown.

    ``data`` keeps the raw record the option was built from; the nested
    type selector of the part hierarchy reads its choices from it.
    """
    id: str
    label: str
    kind: str | None = None
    data: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True, slots=True)
class OptionPage:
    """One page of options as returned by a source."""
    items: list[Option] = field(default_factory=list)
    has_more: bool = False
    total: int = 0
