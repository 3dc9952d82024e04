"""Cascading selector - one level of a dependent dropdown chain."""

from __future__ import annotations

import logging
from enum import Enum

from ..notifications import Notifier
from ..options.cache import OptionCache
from ..options.debounce import DebouncedSearchController
from ..options.source import OptionSource
from ..options.types import Option


logger = logging.getLogger(__name__)


class SelectorState(str, Enum):
    """Lifecycle of a selector."""
    DISABLED = "disabled"   # upstream has no value
    IDLE = "idle"           # enabled, nothing loaded yet
    LOADING = "loading"     # latest request outstanding
    READY = "ready"         # options loaded


class CascadingSelector:
    """
    A selector bound to one hierarchy level.

    Owns its option cache and debounced search. When its selection changes,
    every downstream selector is cleared synchronously (selection, options,
    search text, pending search) before anything else can happen, so no
    child ever shows options belonging to a previous parent.

    Usage:
        master = CascadingSelector("master_category_id", master_source)
        category = CascadingSelector("category_id", category_source)
        master.attach(category)

        await master.refresh()
        master.select(master.options[0])   # category is now IDLE and empty
        await category.refresh()
    """

    def __init__(
        self,
        name: str,
        source: OptionSource,
        *,
        label: str | None = None,
        page_size: int = 10,
        debounce_seconds: float = 0.3,
        notifier: Notifier | None = None,
    ):
        self.name = name
        self.label = label or name
        self.source = source
        self.page_size = page_size
        self.notifier = notifier
        self.cache = OptionCache()
        self.selection: Option | None = None
        self.search_input = ""
        self.upstream: CascadingSelector | None = None
        self.downstream: list[CascadingSelector] = []
        self._debouncer = DebouncedSearchController(self.search, delay_seconds=debounce_seconds)

    def __repr__(self) -> str:
        return f"CascadingSelector({self.name!r}, state={self.state.value}, value={self.value!r})"

    def attach(self, child: CascadingSelector) -> CascadingSelector:
        """Make ``child`` depend on this selector. Returns the child for chaining."""
        if child.upstream is not None:
            raise ValueError(f"{child.name} already depends on {child.upstream.name}")
        child.upstream = self
        self.downstream.append(child)
        return child

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def value(self) -> str | None:
        return self.selection.id if self.selection is not None else None

    @property
    def enabled(self) -> bool:
        return self.upstream is None or self.upstream.selection is not None

    @property
    def state(self) -> SelectorState:
        if not self.enabled:
            return SelectorState.DISABLED
        if self.cache.loading:
            return SelectorState.LOADING
        if self.cache.loaded:
            return SelectorState.READY
        return SelectorState.IDLE

    @property
    def options(self) -> list[Option]:
        return self.cache.items

    @property
    def loading(self) -> bool:
        return self.cache.loading

    @property
    def has_more(self) -> bool:
        return self.cache.has_more

    @property
    def search_pending(self) -> bool:
        return self._debouncer.pending

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, option: Option | None) -> bool:
        """
        Set (or clear, with None) the selection.

        Returns True if the value changed. Re-selecting the same id keeps
        the children as they are.

        A disabled selector (upstream empty) refuses a value.
        """
        new_id = option.id if option is not None else None
        if new_id == self.value:
            return False

        if option is not None and not self.enabled:
            raise ValueError(f"{self.name} is disabled until {self.upstream.name} has a value")

        logger.debug(f"{self.name}: {self.value!r} -> {new_id!r}")
        self.selection = option
        for child in self.downstream:
            child.reset_on_upstream_change()
        return True

    def select_id(self, option_id: str | None) -> bool:
        """Select a loaded option by id."""
        if option_id is None:
            return self.select(None)
        option = self.cache.get(str(option_id))
        if option is None:
            raise KeyError(f"{self.name}: option {option_id!r} is not loaded")
        return self.select(option)

    def clear(self) -> bool:
        return self.select(None)

    def belongs_to_upstream(self) -> bool:
        """False when the selection is known to belong to another parent."""
        if self.selection is None or self.upstream is None:
            return True
        return self.source.belongs_to(self.selection, self.upstream.selection)

    def reset_on_upstream_change(self) -> None:
        """Forget selection, options and search; cascade to own children."""
        self._debouncer.cancel()
        self.cache.reset_on_upstream_change()
        self.search_input = ""
        self.selection = None
        for child in self.downstream:
            child.reset_on_upstream_change()

    def close(self) -> None:
        """Stop any scheduled search (selector is going away)."""
        self._debouncer.cancel()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def refresh(self) -> bool:
        """(Re)load page 1 for the current search term."""
        return await self._fetch(1, self.cache.search_term, replace=True)

    async def search(self, term: str) -> bool:
        """Search now: back to page 1, results replace the list."""
        return await self._fetch(1, term.strip(), replace=True)

    async def load_more(self) -> bool:
        """
        Append the next page.

        No-op while a request is outstanding, when the source reported no
        more pages, or while the selector is disabled.
        """
        if not self.enabled or self.cache.loading or not self.cache.has_more:
            return False
        if not self.cache.loaded:
            return await self.refresh()
        return await self._fetch(self.cache.page + 1, self.cache.search_term, replace=False)

    def on_input_change(self, text: str) -> None:
        """Typing in the search box; the search fires once typing pauses."""
        self.search_input = text
        if self.enabled:
            self._debouncer.on_input_change(text)

    async def flush_search(self) -> None:
        """Run a scheduled search immediately."""
        await self._debouncer.flush()

    async def wait_for_search(self) -> None:
        """Wait for the scheduled or running debounced search to finish."""
        await self._debouncer.wait()

    async def _fetch(self, page: int, search: str, replace: bool) -> bool:
        if not self.enabled:
            return False

        parent = self.upstream.selection if self.upstream is not None else None
        seq = self.cache.begin_request()

        try:
            result = await self.source.fetch_page(page, self.page_size, search=search, parent=parent)
        except Exception as e:
            if self.cache.fail_request(seq):
                logger.warning(f"{self.name}: failed to load page {page}: {e}")
                if self.notifier is not None:
                    self.notifier.error(f"Failed to load {self.label} options")
            else:
                logger.debug(f"{self.name}: ignoring failure of superseded request #{seq}")
            return False

        applied = self.cache.complete_request(seq, result, page=page, search=search, replace=replace)
        if not applied:
            logger.debug(f"{self.name}: discarded stale response #{seq} (page {page}, search {search!r})")
        return applied
