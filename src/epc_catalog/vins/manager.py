"""VIN list with debounced search."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..config import VinConfig
from ..errors import CatalogError, SubmissionError
from ..notifications import Notifier
from ..options.debounce import DebouncedSearchController
from .types import VinPage

if TYPE_CHECKING:
    from ..backends.base import BackendResult, CatalogBackend


logger = logging.getLogger(__name__)


class VinManager:
    """
    Paginated VIN list.

    Typing in the search box goes through ``on_search_input``; the list is
    refetched once typing pauses. A response for an older search never
    replaces a newer one.
    """

    def __init__(
        self,
        backend: CatalogBackend,
        *,
        config: VinConfig | None = None,
        notifier: Notifier | None = None,
        page_size: int = 10,
    ):
        self.backend = backend
        self.config = config or VinConfig()
        self.notifier = notifier or Notifier()
        self.page_size = page_size
        self.current = VinPage()
        self.search_term = ""
        self._sequence = 0
        self._debouncer = DebouncedSearchController(
            self._search_from_input,
            delay_seconds=self.config.search_debounce_seconds,
        )

    async def fetch(self, page: int = 1, search: str | None = None) -> VinPage:
        """Load a page; ``search`` None keeps the current term."""
        if search is not None:
            self.search_term = search.strip()
        self._sequence += 1
        seq = self._sequence

        try:
            result = await self.backend.list_vins(page, self.page_size, search=self.search_term)
        except CatalogError as e:
            logger.warning(f"Failed to load VINs: {e}")
            self.notifier.error("Failed to load VINs")
            return self.current

        if seq == self._sequence:
            self.current = result
        else:
            logger.debug(f"Discarded stale VIN page #{seq}")
        return self.current

    def on_search_input(self, text: str) -> None:
        self._debouncer.on_input_change(text)

    async def wait_for_search(self) -> None:
        await self._debouncer.wait()

    async def _search_from_input(self, text: str) -> None:
        await self.fetch(page=1, search=text)

    async def delete(self, vin_id: str) -> BackendResult:
        result = await self.backend.delete_vin(vin_id)
        if not result.success:
            message = result.message or "Failed to delete VIN"
            self.notifier.error(message)
            raise SubmissionError(message, error_code=result.error_code)

        logger.info(f"Deleted VIN {vin_id}")
        self.notifier.success(result.message or "VIN deleted successfully")
        # Step back when the last row of the last page went away
        page = self.current.page
        if page > 1 and len(self.current.items) <= 1:
            page -= 1
        await self.fetch(page=page)
        return result

    def close(self) -> None:
        self._debouncer.cancel()
