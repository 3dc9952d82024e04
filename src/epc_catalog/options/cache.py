"""Per-selector accumulation of fetched option pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from .types import Option, OptionPage


logger = logging.getLogger(__name__)


@dataclass
class OptionCache:
    """
    Options fetched so far for one selector instance.

    Entries are de-duplicated by id and kept in first-seen order. Each
    request is tagged with a sequence number from ``begin_request``; only
    the most recently issued request may write its result back, so a slow
    response for an old search or an old parent can never overwrite a
    newer one.

    One cache belongs to exactly one selector and is never shared.
    """
    page: int = 0              # last page applied
    has_more: bool = True
    total: int = 0
    search_term: str = ""
    loaded: bool = False       # at least one page applied since reset

    _items: list[Option] = field(default_factory=list, init=False)
    _ids: set[str] = field(default_factory=set, init=False)
    _sequence: int = field(default=0, init=False)
    _pending: int | None = field(default=None, init=False)

    @property
    def items(self) -> list[Option]:
        return list(self._items)

    @property
    def loading(self) -> bool:
        """True while the latest issued request is outstanding."""
        return self._pending is not None

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, option_id: object) -> bool:
        return option_id in self._ids

    def get(self, option_id: str) -> Option | None:
        for option in self._items:
            if option.id == option_id:
                return option
        return None

    def accumulate(self, new_items: Iterable[Option]) -> int:
        """Append options whose id is not present yet. Returns how many were added."""
        added = 0
        for option in new_items:
            if option.id in self._ids:
                continue
            self._ids.add(option.id)
            self._items.append(option)
            added += 1
        return added

    def replace(self, new_items: Iterable[Option]) -> None:
        """Swap the whole list (first page of a new search)."""
        self._items = []
        self._ids = set()
        self.accumulate(new_items)

    def reset_pagination(self) -> None:
        """
        Back to empty, page 0, ``has_more`` true.

        Any outstanding request is orphaned: its sequence number no longer
        matches, so its response is dropped. Idempotent.
        """
        self._items = []
        self._ids = set()
        self.page = 0
        self.has_more = True
        self.total = 0
        self.search_term = ""
        self.loaded = False
        self._pending = None

    def reset_on_upstream_change(self) -> None:
        """Discard everything because the parent selection changed."""
        if self._pending is not None:
            logger.debug(f"Orphaning in-flight option request #{self._pending}")
        self.reset_pagination()

    def begin_request(self) -> int:
        """Issue a new sequence number; it becomes the only one allowed to apply."""
        self._sequence += 1
        self._pending = self._sequence
        return self._sequence

    def is_current(self, seq: int) -> bool:
        return self._pending is not None and seq == self._pending

    def complete_request(
        self,
        seq: int,
        result: OptionPage,
        page: int,
        search: str,
        replace: bool,
    ) -> bool:
        """Apply a response if it is still current. Returns False when it was stale."""
        if not self.is_current(seq):
            return False

        if replace:
            self.replace(result.items)
        else:
            self.accumulate(result.items)

        self.page = page
        self.has_more = result.has_more
        self.total = result.total
        self.search_term = search
        self.loaded = True
        self._pending = None
        return True

    def fail_request(self, seq: int) -> bool:
        """Mark a request as finished without touching the options."""
        if not self.is_current(seq):
            return False
        self._pending = None
        return True

    def state(self) -> dict:
        """Snapshot of everything observable, for comparisons."""
        return {
            "ids": [o.id for o in self._items],
            "page": self.page,
            "has_more": self.has_more,
            "total": self.total,
            "search_term": self.search_term,
            "loaded": self.loaded,
            "loading": self.loading,
        }
