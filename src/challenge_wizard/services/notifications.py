from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import List, Literal

_logger = logging.getLogger("challenge_wizard.notifications")

Level = Literal["info", "success", "error"]


def _now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass
class Notification:
    level: Level
    title: str
    description: str = ""
    created_at: str = field(default_factory=_now_iso)


class NotificationCenter:
    """Transient, user-visible notices for one wizard session.

    Keeps a rolling buffer so a client polling the host API can pick up recent
    toasts; nothing here ever blocks the wizard.
    """

    def __init__(self, max_buffer: int = 50) -> None:
        self._items: List[Notification] = []
        self._max_buffer = max_buffer

    def notify(self, level: Level, title: str, description: str = "") -> Notification:
        item = Notification(level=level, title=title, description=description)
        self._items.append(item)
        if len(self._items) > self._max_buffer:
            del self._items[0 : len(self._items) - self._max_buffer]
        log = _logger.warning if level == "error" else _logger.info
        log("notification", extra={"level": level, "title": title, "description": description})
        return item

    def info(self, title: str, description: str = "") -> Notification:
        return self.notify("info", title, description)

    def success(self, title: str, description: str = "") -> Notification:
        return self.notify("success", title, description)

    def error(self, title: str, description: str = "") -> Notification:
        return self.notify("error", title, description)

    def recent(self, limit: int = 20) -> List[Notification]:
        if limit <= 0:
            return []
        return list(self._items[-limit:])

    def drain(self) -> List[Notification]:
        items, self._items = self._items, []
        return items

    def __len__(self) -> int:
        return len(self._items)
