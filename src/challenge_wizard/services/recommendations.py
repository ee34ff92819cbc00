"""Fetch-once cache for AI-generated step defaults.

Every data-collecting panel owns one ``RecommendationCache``. ``sync`` is
called each time the panel is (re)rendered; it issues a request only when the
cache is enabled and its latch is clear, then keeps the latch set until
``reset`` is called. Results that arrive after ``reset`` or ``close`` are
dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from .api_client import ApiError, ChallengeApiClient
from .notifications import NotificationCenter

logger = logging.getLogger(__name__)


class RecommendationCache:
    def __init__(
        self,
        client: ChallengeApiClient,
        endpoint: str,
        notifications: Optional[NotificationCenter] = None,
        on_data: Optional[Callable[[Dict[str, Any]], None]] = None,
    ) -> None:
        self.client = client
        self.endpoint = endpoint
        self.notifications = notifications
        self.on_data = on_data
        self._data: Optional[Dict[str, Any]] = None
        self._is_loading = False
        self._error: Optional[str] = None
        self._has_fetched = False
        self._generation = 0
        self._closed = False
        self._task: Optional[asyncio.Task] = None

    @property
    def data(self) -> Optional[Dict[str, Any]]:
        return self._data

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def has_fetched(self) -> bool:
        return self._has_fetched

    def sync(self, enabled: bool, payload: Mapping[str, Any]) -> bool:
        """Start the one fetch allowed per enablement; return True if a request went out."""
        if self._closed or not enabled or self._has_fetched:
            return False
        self._has_fetched = True
        self._is_loading = True
        self._error = None
        generation = self._generation
        self._task = asyncio.get_running_loop().create_task(self._fetch(dict(payload), generation))
        return True

    async def settled(self) -> None:
        """Wait for the outstanding request, if any."""
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    def reset(self) -> None:
        self._has_fetched = False
        self._data = None
        self._is_loading = False
        self._generation += 1

    def close(self) -> None:
        self._closed = True
        self._generation += 1
        self.on_data = None

    def _stale(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    async def _fetch(self, payload: Dict[str, Any], generation: int) -> None:
        try:
            result = await self.client.post(self.endpoint, payload)
        except ApiError as exc:
            if self._stale(generation):
                return
            self._is_loading = False
            self._error = str(exc)
            logger.warning("recommendation_fetch_failed", extra={"endpoint": self.endpoint, "err": str(exc)})
            if self.notifications is not None:
                self.notifications.error("AI Assistant Error", str(exc))
            return

        if self._stale(generation):
            logger.debug("recommendation_result_discarded", extra={"endpoint": self.endpoint})
            return
        self._is_loading = False
        self._data = result
        if self.on_data is None:
            return
        try:
            self.on_data(result)
        except (ValueError, TypeError, KeyError) as exc:
            # malformed body; pydantic ValidationError is a ValueError
            self._error = str(exc)
            logger.warning("recommendation_apply_failed", extra={"endpoint": self.endpoint, "err": str(exc)})
            if self.notifications is not None:
                self.notifications.error("AI Assistant Error", "Could not apply the AI suggestions.")
