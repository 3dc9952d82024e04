"""Selector graph - named chains of cascading selectors.

Two hierarchies exist side by side:

- GENERIC: master category -> category -> type category, all listed from
  the service and filtered by parent id.
- LEGACY: part type (cabin/engine/axle/transmission/steering) -> part of
  that kind -> sub-type nested inside the chosen part.

Both use the same selector mechanism; only the sources differ.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from ..config import SelectorConfig
from ..notifications import Notifier
from ..options.mapping import OptionKind, part_type_options
from ..options.source import (
    NestedTypeSource,
    OptionSource,
    PartEntitySource,
    RemoteOptionSource,
    StaticOptionSource,
)
from ..options.types import Option
from .selector import CascadingSelector

if TYPE_CHECKING:
    from ..backends.base import CatalogBackend


logger = logging.getLogger(__name__)


class HierarchyFlow(str, Enum):
    """Which hierarchy a catalog document is filed under."""
    GENERIC = "generic"
    LEGACY = "legacy"


# Level names double as document header field names.
LEVEL_LABELS: dict[str, str] = {
    "master_category_id": "Master Category",
    "category_id": "Category",
    "type_category_id": "Type Category",
    "part_type": "Part Type",
    "part_id": "Part",
    "type_id": "Type",
}

FLOW_LEVELS: dict[HierarchyFlow, tuple[str, ...]] = {
    HierarchyFlow.GENERIC: ("master_category_id", "category_id", "type_category_id"),
    HierarchyFlow.LEGACY: ("part_type", "part_id", "type_id"),
}


class SelectorGraph:
    """An ordered chain of selectors, root first."""

    def __init__(self, flow: HierarchyFlow, selectors: list[CascadingSelector]):
        if not selectors:
            raise ValueError("A selector graph needs at least one level")
        self.flow = flow
        self._levels: dict[str, CascadingSelector] = {}
        previous: CascadingSelector | None = None
        for selector in selectors:
            if selector.name in self._levels:
                raise ValueError(f"Duplicate level: {selector.name}")
            self._levels[selector.name] = selector
            if previous is not None:
                previous.attach(selector)
            previous = selector

    def __getitem__(self, level: str) -> CascadingSelector:
        try:
            return self._levels[level]
        except KeyError:
            raise KeyError(f"Unknown hierarchy level for {self.flow.value} flow: {level}") from None

    def __iter__(self):
        return iter(self._levels.values())

    def __contains__(self, level: object) -> bool:
        return level in self._levels

    @property
    def levels(self) -> list[str]:
        return list(self._levels)

    @property
    def root(self) -> CascadingSelector:
        return next(iter(self._levels.values()))

    def select(self, level: str, option: Option | None) -> bool:
        """Select at one level; everything below is cleared if the value changed."""
        return self[level].select(option)

    def downstream_of(self, level: str) -> list[str]:
        """Levels below ``level``, nearest first."""
        names = self.levels
        return names[names.index(self[level].name) + 1:]

    def values(self) -> dict[str, str | None]:
        return {name: s.value for name, s in self._levels.items()}

    def labels(self) -> dict[str, str | None]:
        return {
            name: s.selection.label if s.selection is not None else None
            for name, s in self._levels.items()
        }

    def missing_levels(self) -> list[str]:
        return [name for name, s in self._levels.items() if s.value is None]

    def mismatched_levels(self) -> list[str]:
        """Levels whose selection does not belong to the level above."""
        return [name for name, s in self._levels.items() if not s.belongs_to_upstream()]

    def reset(self) -> None:
        """Clear the whole chain."""
        self.root.select(None)
        self.root.reset_on_upstream_change()

    def close(self) -> None:
        for selector in self._levels.values():
            selector.close()

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def for_flow(
        cls,
        flow: HierarchyFlow,
        backend: CatalogBackend,
        config: SelectorConfig | None = None,
        notifier: Notifier | None = None,
    ) -> SelectorGraph:
        if flow == HierarchyFlow.LEGACY:
            return cls.legacy(backend, config, notifier)
        return cls.generic(backend, config, notifier)

    @classmethod
    def generic(
        cls,
        backend: CatalogBackend,
        config: SelectorConfig | None = None,
        notifier: Notifier | None = None,
    ) -> SelectorGraph:
        """Master category -> category -> type category."""
        sources: list[OptionSource] = [
            RemoteOptionSource(backend, OptionKind.MASTER_CATEGORY),
            RemoteOptionSource(backend, OptionKind.CATEGORY),
            RemoteOptionSource(backend, OptionKind.TYPE_CATEGORY),
        ]
        return cls._build(HierarchyFlow.GENERIC, sources, config, notifier)

    @classmethod
    def legacy(
        cls,
        backend: CatalogBackend,
        config: SelectorConfig | None = None,
        notifier: Notifier | None = None,
    ) -> SelectorGraph:
        """Part type -> part -> nested sub-type."""
        sources: list[OptionSource] = [
            StaticOptionSource(part_type_options()),
            PartEntitySource(backend),
            NestedTypeSource(),
        ]
        return cls._build(HierarchyFlow.LEGACY, sources, config, notifier)

    @classmethod
    def _build(
        cls,
        flow: HierarchyFlow,
        sources: list[OptionSource],
        config: SelectorConfig | None,
        notifier: Notifier | None,
    ) -> SelectorGraph:
        config = config or SelectorConfig()
        selectors = [
            CascadingSelector(
                name,
                source,
                label=LEVEL_LABELS[name],
                page_size=config.page_size,
                debounce_seconds=config.debounce_seconds,
                notifier=notifier,
            )
            for name, source in zip(FLOW_LEVELS[flow], sources)
        ]
        logger.debug(f"Built {flow.value} selector graph: {' -> '.join(FLOW_LEVELS[flow])}")
        return cls(flow, selectors)
