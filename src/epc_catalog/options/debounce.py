"""Debounced search - wait for typing to pause before fetching."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable


logger = logging.getLogger(__name__)


class DebouncedSearchController:
    """
    Delays a search until input has been quiet for ``delay_seconds``.

    Every keystroke cancels the pending search and schedules a new one.
    Once the delay has elapsed the search runs to completion; later
    keystrokes no longer cancel it (stale results are filtered by the
    option cache's sequence numbers instead).

    One controller per selector instance.
    """

    def __init__(
        self,
        callback: Callable[[str], Awaitable[object]],
        delay_seconds: float = 0.3,
    ):
        self.callback = callback
        self.delay_seconds = delay_seconds
        self.latest_text = ""
        self._task: asyncio.Task | None = None
        self._waiting = False
        # Strong references until done; the loop only keeps weak ones
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        """True while a search is scheduled but not yet started."""
        return self._task is not None and self._waiting

    @property
    def in_flight(self) -> int:
        """Scheduled or running searches not finished yet."""
        return len(self._tasks)

    def on_input_change(self, text: str) -> None:
        """Record a keystroke. Must be called from within the running event loop."""
        self.cancel()
        self.latest_text = text
        self._waiting = True
        self._task = asyncio.get_running_loop().create_task(self._run_after_delay(text))
        self._tasks.add(self._task)
        self._task.add_done_callback(self._tasks.discard)

    def cancel(self) -> None:
        """Drop a scheduled search that has not started yet."""
        if self._task is not None and self._waiting:
            self._task.cancel()
            self._task = None
            self._waiting = False

    async def flush(self) -> None:
        """Run the scheduled search now instead of waiting out the delay."""
        if not self.pending:
            return
        self.cancel()
        await self.callback(self.latest_text)

    async def wait(self) -> None:
        """Wait until every scheduled or running search has finished."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    async def _run_after_delay(self, text: str) -> None:
        await asyncio.sleep(self.delay_seconds)
        self._waiting = False
        try:
            await self.callback(text)
        except Exception as e:
            logger.error(f"Debounced search for {text!r} failed: {e}")
