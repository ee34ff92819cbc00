"""Conversational problem scoping.

The session exchanges messages with the scoping assistant over the wizard's
channel and watches every inbound AI message for a structured work scope.
When one shows up it freezes a refined problem statement and marks the
problem-scoping step complete straight away, so forward navigation unlocks
before the user confirms the review panel.

States::

    IDLE --submit--> AWAITING_REPLY --scope--> REVIEWING_SCOPE --confirm--> CONFIRMED
                          ^    |                     |
                          |    +--no scope (waits)   |
                          +---------adjust-----------+

Showing the step again moves a confirmed session back to REVIEWING_SCOPE.
A dropped channel freezes the session wherever it is.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict

from ..domain.messages import Message, Transcript
from .channel import Channel, ChannelClosed, Frame, decode_frame

logger = logging.getLogger(__name__)

ADJUST_PROMPT = "That's not quite right, can we adjust the scope description?"

# Inbound payload locations that may hold the scope, in lookup order
SCOPE_PATHS = (
    ("work_scope",),
    ("final_spec", "scope"),
    ("specification", "scope"),
)


class ScopingState(str, enum.Enum):
    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"
    REVIEWING_SCOPE = "reviewing_scope"
    CONFIRMED = "confirmed"


class WorkScope(BaseModel):
    model_config = ConfigDict(extra="allow")

    description: str
    type: Optional[str] = None


def extract_scope(payload: Optional[Dict[str, Any]]) -> Optional[WorkScope]:
    if not isinstance(payload, dict):
        return None
    for path in SCOPE_PATHS:
        node: Any = payload
        for key in path:
            node = node.get(key) if isinstance(node, dict) else None
        if not isinstance(node, dict):
            continue
        description = node.get("description")
        if isinstance(description, str) and description.strip():
            scope_type = node.get("type")
            return WorkScope(**{**node, "type": scope_type if isinstance(scope_type, str) else None})
    return None


def refine_statement(scope: WorkScope) -> str:
    area = scope.type or "general innovation"
    return (
        f'How might we innovate on "{scope.description.lower()}"? '
        f"This challenge will focus on the area of {area}."
    )


class ScopingSession:
    def __init__(
        self,
        channel: Channel,
        transcript: Transcript,
        on_update: Callable[[Dict[str, Any]], None],
        on_confirm: Optional[Callable[[], Any]] = None,
    ) -> None:
        self.channel = channel
        self.transcript = transcript
        self._on_update = on_update
        self._on_confirm = on_confirm
        self.state = ScopingState.IDLE
        self.input_text = ""
        self.is_processing = False
        self.refined_statement = ""
        self.scope: Optional[WorkScope] = None
        self.closed = False
        # false while another wizard step is on screen
        self.active = True

    # -- user actions -------------------------------------------------

    def set_input(self, text: str) -> None:
        self.input_text = text

    @property
    def can_submit(self) -> bool:
        return (
            not self.closed
            and self.active
            and self.channel.is_open
            and not self.is_processing
            and self.state in (ScopingState.IDLE, ScopingState.AWAITING_REPLY)
        )

    async def submit(self, text: Optional[str] = None) -> Optional[Message]:
        if text is not None:
            self.input_text = text
        content = self.input_text
        if not content.strip() or not self.can_submit:
            return None
        message = self.transcript.append("user", content)
        self.input_text = ""
        self.is_processing = True
        self.state = ScopingState.AWAITING_REPLY
        await self._transmit(content)
        return message

    async def adjust(self) -> bool:
        if self.closed or not self.active or self.state is not ScopingState.REVIEWING_SCOPE:
            return False
        self.state = ScopingState.AWAITING_REPLY
        self.is_processing = True
        self._on_update({"completed": False})
        self.transcript.append("user", ADJUST_PROMPT)
        await self._transmit(ADJUST_PROMPT)
        return True

    def confirm(self) -> bool:
        if self.closed or self.state is not ScopingState.REVIEWING_SCOPE or self.scope is None:
            return False
        self._on_update(self._committed_values())
        self.state = ScopingState.CONFIRMED
        if self._on_confirm is not None:
            self._on_confirm()
        return True

    # -- channel side -------------------------------------------------

    def handle_frame(self, raw: Frame) -> Optional[Message]:
        if self.closed:
            return None
        content, payload = decode_frame(raw)
        message = self.transcript.append("ai", content, payload)
        self.is_processing = False
        if self.state is ScopingState.CONFIRMED or not self.active:
            return message
        self._take_scope(payload)
        return message

    def reopen(self) -> None:
        """Bring back the scope review when the step is shown again.

        A confirmed scope returns to review so it can be adjusted, and a scope
        that arrived while another step was on screen is picked up from the
        last assistant message.
        """
        if self.closed:
            return
        if self.state is ScopingState.CONFIRMED and self.scope is not None:
            self.state = ScopingState.REVIEWING_SCOPE
            return
        if self.state is not ScopingState.AWAITING_REPLY:
            return
        last = self.transcript.last()
        if last is not None and last.role == "ai":
            self._take_scope(last.payload)

    def _take_scope(self, payload: Optional[Dict[str, Any]]) -> bool:
        scope = extract_scope(payload)
        if scope is None:
            return False
        self.scope = scope
        self.refined_statement = refine_statement(scope)
        self.state = ScopingState.REVIEWING_SCOPE
        logger.info("scope_extracted", extra={"scope_type": scope.type})
        self._on_update(self._committed_values())
        return True

    async def run(self) -> None:
        """Consume inbound frames in arrival order until the channel closes."""
        try:
            async for raw in self.channel.frames():
                self.handle_frame(raw)
        finally:
            self.closed = True
            self.is_processing = False
            logger.info("scoping_session_closed", extra={"state": self.state.value})

    def restart(self) -> None:
        """Forget the extracted scope after the step's record was discarded."""
        if self.closed:
            return
        self.state = ScopingState.IDLE
        self.scope = None
        self.refined_statement = ""
        self.is_processing = False

    # -- helpers ------------------------------------------------------

    def _committed_values(self) -> Dict[str, Any]:
        scope = self.scope
        return {
            "messages": list(self.transcript.messages),
            "refinedStatement": self.refined_statement,
            "problemStatement": scope.description if scope else "",
            "challengeType": (scope.type or "") if scope else "",
            "completed": True,
        }

    async def _transmit(self, content: str) -> None:
        try:
            await self.channel.send_json({"role": "user", "content": content})
        except ChannelClosed:
            self.closed = True
            self.is_processing = False
            logger.warning("scoping_send_failed")

    def view(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "input": self.input_text,
            "isProcessing": self.is_processing,
            "refinedStatement": self.refined_statement,
            "scope": self.scope.model_dump() if self.scope else None,
            "closed": self.closed,
        }
