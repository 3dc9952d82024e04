"""User-facing notification channel."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable


logger = logging.getLogger(__name__)


class NoticeLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Notice:
    """A message meant for the person at the keyboard."""
    level: NoticeLevel
    message: str


@dataclass
class Notifier:
    """
    Fans notices out to registered consumers (toast widget, CLI printer...).

    Consumers are called synchronously. A failing consumer is logged and
    skipped so the engine never breaks because of presentation code.
    """
    # Most recent notices, newest last
    history_size: int = 50

    _consumers: list[Callable[[Notice], None]] = field(default_factory=list, init=False)
    _history: list[Notice] = field(default_factory=list, init=False)

    def add_consumer(self, consumer: Callable[[Notice], None]) -> None:
        """Register a consumer for notices."""
        self._consumers.append(consumer)

    def notify(self, level: NoticeLevel, message: str) -> Notice:
        notice = Notice(level=level, message=message)
        self._history.append(notice)
        if len(self._history) > self.history_size:
            del self._history[0]

        for consumer in self._consumers:
            try:
                consumer(notice)
            except Exception as e:
                logger.error(f"Notice consumer failed: {e}")
        return notice

    def success(self, message: str) -> Notice:
        return self.notify(NoticeLevel.SUCCESS, message)

    def info(self, message: str) -> Notice:
        return self.notify(NoticeLevel.INFO, message)

    def error(self, message: str) -> Notice:
        return self.notify(NoticeLevel.ERROR, message)

    @property
    def history(self) -> list[Notice]:
        """Notices seen so far, oldest first."""
        return list(self._history)
