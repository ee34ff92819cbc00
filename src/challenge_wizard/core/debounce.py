"""Trailing-edge debounce for asyncio.

``push`` restarts the quiet window on every call; only the timer armed by the
most recent push survives, so ``on_settle`` runs once per burst with the last
value pushed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    def __init__(
        self,
        delay: float,
        on_settle: Optional[Callable[[T], Awaitable[None]]] = None,
        initial: Optional[T] = None,
    ) -> None:
        self.delay = delay
        self._on_settle = on_settle
        self._value: Optional[T] = initial
        self._timer: Optional[asyncio.Task] = None
        self.settle_count = 0

    @property
    def value(self) -> Optional[T]:
        """The stabilized copy; lags behind ``push`` by the quiet window."""
        return self._value

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def push(self, value: T) -> None:
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._wait_then_settle(value))

    def cancel(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def flush(self) -> None:
        """Wait for the live timer, if any, to fire."""
        timer = self._timer
        if timer is None:
            return
        try:
            await timer
        except asyncio.CancelledError:
            # superseded by a newer push or cancelled on teardown
            if not timer.cancelled():
                raise

    async def _wait_then_settle(self, value: T) -> None:
        await asyncio.sleep(self.delay)
        self._value = value
        self.settle_count += 1
        if self._on_settle is None:
            return
        # a newer push must not abort a settle callback that already started
        await asyncio.shield(self._settle(value))

    async def _settle(self, value: T) -> None:
        try:
            await self._on_settle(value)  # type: ignore[misc]
        except Exception:
            logger.exception("debounce_settle_failed")
