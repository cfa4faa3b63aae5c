"""User-facing notices raised by client operations."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "error": logging.WARNING,
}


@dataclass(frozen=True)
class Notice:
    level: str
    message: str


class Notifier:
    """Collects notices in order and forwards each one to an optional sink."""

    def __init__(self, sink: Optional[Callable[[Notice], None]] = None) -> None:
        self.sink = sink
        self.notices: list[Notice] = []

    def notify(self, level: str, message: str) -> Notice:
        notice = Notice(level, message)
        self.notices.append(notice)
        logger.log(_LOG_LEVELS.get(level, logging.INFO), "[%s] %s", level, message)
        if self.sink is not None:
            self.sink(notice)
        return notice

    def success(self, message: str) -> Notice:
        return self.notify("success", message)

    def info(self, message: str) -> Notice:
        return self.notify("info", message)

    def error(self, message: str) -> Notice:
        return self.notify("error", message)

    def messages(self, level: str | None = None) -> list[str]:
        return [n.message for n in self.notices if level is None or n.level == level]

    def clear(self) -> None:
        self.notices.clear()
