from __future__ import annotations

import itertools
import time
from datetime import UTC, datetime
from typing import Any, Dict, Iterator, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field


Role = Literal["user", "ai", "analysis"]


class Message(BaseModel):
    id: str
    role: Role
    content: str
    payload: Optional[Dict[str, Any]] = None
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat().replace("+00:00", "Z"))


class Transcript:
    """Append-only conversation log shared by the wizard and the scoping session.

    ``append`` is the only write path. Readers receive immutable tuples so the
    sequence cannot be edited behind the owner's back.
    """

    def __init__(self) -> None:
        self._messages: List[Message] = []
        self._counter = itertools.count(1)

    def _next_id(self) -> str:
        # millisecond clock keeps ids readable, the counter keeps them unique
        return f"{int(time.time() * 1000)}-{next(self._counter):04d}"

    def append(self, role: Role, content: str, payload: Optional[Dict[str, Any]] = None) -> Message:
        message = Message(id=self._next_id(), role=role, content=content, payload=payload)
        self._messages.append(message)
        return message

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))
