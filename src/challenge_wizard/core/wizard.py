"""Wizard orchestrator: the single owner of progress and collected data.

Panels read their slice through ``context_for`` and write back through
``update_step_data``; nothing else mutates ``challenge_data``. Every change
restarts the validation debounce, and every backward move discards the
records downstream of the new position so their suggestions are fetched
again against the changed upstream answers.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence

from ..config import WizardSettings, load_settings
from ..domain import steps as S
from ..domain.messages import Transcript
from ..domain.records import ChallengeData, StepRecord, dump_challenge_data, record_type_for
from ..domain.steps import STEPS, StepDefinition
from ..panels import build_panels
from ..panels.base import StepContext, StepPanel
from ..services.api_client import ApiError, ChallengeApiClient
from ..services.channel import Channel, new_session_id, open_channel
from ..services.notifications import NotificationCenter
from ..services.scoping import ScopingSession
from . import state_machine as sm
from .debounce import Debouncer

logger = logging.getLogger(__name__)

ChannelFactory = Callable[[str, str], Awaitable[Channel]]


class WizardOrchestrator:
    def __init__(
        self,
        settings: Optional[WizardSettings] = None,
        client: Optional[ChallengeApiClient] = None,
        channel_factory: Optional[ChannelFactory] = None,
        steps: Sequence[StepDefinition] = STEPS,
        notifications: Optional[NotificationCenter] = None,
    ) -> None:
        self.settings = settings or load_settings()
        self._owns_client = client is None
        self.client = client or ChallengeApiClient(self.settings)
        self._channel_factory: ChannelFactory = channel_factory or open_channel
        self.steps = tuple(steps)
        self.notifications = notifications if notifications is not None else NotificationCenter()
        self.transcript = Transcript()
        self.session_id: Optional[str] = None
        self.channel: Optional[Channel] = None
        self.scoping: Optional[ScopingSession] = None

        self._current = 0
        self._data: ChallengeData = {}
        self._issues: List[str] = []
        self._last_validated: Optional[Dict[str, Any]] = None
        self._debounce: Debouncer[Dict[str, Any]] = Debouncer(self.settings.debounce_seconds, self._validate)
        self._reader: Optional[asyncio.Task] = None
        self._disposed = False
        self.panels: Dict[str, StepPanel] = build_panels(self, self.client, self.notifications)

    # -- state --------------------------------------------------------

    @property
    def current_step_index(self) -> int:
        return self._current

    @property
    def current_step(self) -> StepDefinition:
        return self.steps[self._current]

    @property
    def challenge_data(self) -> Mapping[str, StepRecord]:
        return MappingProxyType(self._data)

    @property
    def validation_issues(self) -> List[str]:
        return list(self._issues)

    @property
    def active_panel(self) -> Optional[StepPanel]:
        return self.panels.get(self.current_step.id)

    def record_for(self, step_id: str) -> Optional[StepRecord]:
        return self._data.get(step_id)

    def context_for(self, step_id: str) -> StepContext:
        scoping = self._data.get(S.PROBLEM_SCOPING)
        ctype = self._data.get(S.CHALLENGE_TYPE)
        return StepContext(
            step_id=step_id,
            record=self._data.get(step_id),
            problem_statement=getattr(scoping, "problem_statement", None) or "",
            challenge_type=getattr(ctype, "selected_type", None) or "",
        )

    def is_completed(self, index: int) -> bool:
        record = self._data.get(self.steps[index].id)
        return bool(record is not None and record.completed)

    def completed_count(self) -> int:
        return sum(1 for idx in range(len(self.steps) - 1) if self.is_completed(idx))

    def progress(self) -> float:
        flags = {step_id: record.completed for step_id, record in self._data.items()}
        return sm.progress_percent(flags, self.steps)

    def is_unlocked(self, index: int) -> bool:
        """Sidebar affordance only; ``select_step`` applies the real guard."""
        if index < 0 or index >= len(self.steps):
            return False
        return index <= self.completed_count() + 1 or index == self._current

    # -- updates ------------------------------------------------------

    def update_step_data(self, step_id: str, partial: Mapping[str, Any]) -> StepRecord:
        record = record_type_for(step_id).combine(self._data.get(step_id), partial)
        self._data = {**self._data, step_id: record}
        self._data_changed()
        return record

    def _data_changed(self) -> None:
        if self._disposed:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # outside the loop there is nothing to schedule the quiet window on
            return
        self._debounce.push(dump_challenge_data(self._data))

    async def _validate(self, snapshot: Dict[str, Any]) -> None:
        if self._disposed:
            return
        if not snapshot:
            # nothing left to validate, so earlier warnings no longer apply
            self._issues = []
            self._last_validated = None
            return
        if snapshot == self._last_validated:
            return
        try:
            warnings = await self.client.validate_challenge(snapshot)
        except ApiError as exc:
            logger.warning("validation_failed", extra={"err": str(exc), "status": exc.status_code})
            return
        if self._disposed:
            logger.debug("validation_result_discarded")
            return
        self._last_validated = snapshot
        self._issues = warnings

    # -- navigation ---------------------------------------------------

    def advance(self) -> bool:
        total = len(self.steps)
        if not sm.can_advance(self._current, total, self.is_completed(self._current)):
            return False
        self._set_current(self._current + 1)
        return True

    def retreat(self) -> bool:
        if not sm.can_retreat(self._current):
            return False
        target = self._current - 1
        self._discard_from(target)
        self._set_current(target)
        return True

    def select_step(self, target: int) -> bool:
        total = len(self.steps)
        if not sm.can_select(self._current, target, total, self.is_completed(self._current)):
            logger.debug("step_select_ignored", extra={"current": self._current, "target": target})
            return False
        if target == self._current:
            return True
        if target < self._current:
            self._discard_from(target + 1)
        self._set_current(target)
        return True

    def _set_current(self, index: int) -> None:
        previous = self.panels.get(self.current_step.id)
        if previous is not None:
            previous.deactivate()
        self._current = index
        logger.info("step_entered", extra={"step_id": self.current_step.id, "index": index})
        panel = self.active_panel
        if panel is not None:
            panel.activate()
        self.refresh()

    def _discard_from(self, start: int) -> None:
        dropped = sm.discarded_ids(self._data, self.steps, start)
        # panels past the boundary lose their latch even without a stored record
        for step in self.steps[max(start, 0):]:
            panel = self.panels.get(step.id)
            if panel is not None:
                panel.reset()
        if not dropped:
            return
        self._data = sm.discard_from(self._data, self.steps, start)
        logger.info("records_discarded", extra={"step_ids": dropped})
        self._data_changed()

    def refresh(self) -> bool:
        """Re-render the active panel; returns True when it sent a request."""
        if self._disposed:
            return False
        panel = self.active_panel
        if panel is None:
            return False
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return False
        return panel.sync()

    # -- lifecycle ----------------------------------------------------

    async def mount(self) -> None:
        self.session_id = new_session_id()
        try:
            self.channel = await self._channel_factory(self.settings.ws_base_url, self.session_id)
        except Exception as exc:
            logger.error("channel_connect_failed", extra={"session_id": self.session_id, "err": str(exc)})
            self.notifications.error("Connection Error", "Could not reach the scoping assistant.")
            self.channel = None
        if self.channel is not None:
            self.scoping = ScopingSession(
                self.channel,
                self.transcript,
                on_update=lambda partial: self.update_step_data(S.PROBLEM_SCOPING, partial),
                on_confirm=self.advance,
            )
            self._reader = asyncio.get_running_loop().create_task(self.scoping.run())
        panel = self.active_panel
        if panel is not None:
            panel.activate()
        logger.info("wizard_mounted", extra={"session_id": self.session_id})
        self.refresh()

    async def unmount(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._debounce.cancel()
        for panel in self.panels.values():
            panel.close()
        if self.channel is not None:
            try:
                await self.channel.close()
            except Exception as exc:
                logger.warning("channel_close_failed", extra={"err": str(exc)})
        if self._reader is not None:
            self._reader.cancel()
            await asyncio.gather(self._reader, return_exceptions=True)
            self._reader = None
        if self._owns_client:
            self.client.close()
        logger.info("wizard_unmounted", extra={"session_id": self.session_id})

    async def settled(self) -> None:
        """Wait for the pending debounce and any outstanding suggestion fetches."""
        for panel in self.panels.values():
            if panel.cache is not None:
                await panel.cache.settled()
        await self._debounce.flush()

    # -- views --------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        panel = self.active_panel
        return {
            "sessionId": self.session_id,
            "currentStepIndex": self._current,
            "currentStep": self.current_step.id,
            "steps": [
                {
                    "id": step.id,
                    "title": step.title,
                    "description": step.description,
                    "icon": step.icon,
                    "completed": self.is_completed(idx),
                    "unlocked": self.is_unlocked(idx),
                }
                for idx, step in enumerate(self.steps)
            ],
            "help": asdict(S.STEP_HELP[self.current_step.id]) if self.current_step.id in S.STEP_HELP else None,
            "progress": self.progress(),
            "challengeData": dump_challenge_data(self._data),
            "validationIssues": list(self._issues),
            "transcript": [msg.model_dump(mode="json") for msg in self.transcript],
            "panel": panel.view() if panel is not None else None,
            "channelOpen": bool(self.channel is not None and self.channel.is_open),
        }
