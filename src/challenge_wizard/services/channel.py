"""Bidirectional conversation channel used by the problem-scoping step.

One channel is opened per wizard session and closed when the session is torn
down. There is no reconnection: once the socket drops, the conversation is
over.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, AsyncIterator, Dict, Optional, Protocol, Tuple, Union
from urllib.parse import quote

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, ConnectionClosedOK

from ..observability.metrics import record_channel_frame

LOG = logging.getLogger("challenge_wizard.channel")

Frame = Union[str, bytes]


class ChannelClosed(Exception):
    pass


class Channel(Protocol):
    @property
    def is_open(self) -> bool: ...

    async def send_json(self, payload: Dict[str, Any]) -> None: ...

    def frames(self) -> AsyncIterator[Frame]: ...

    async def close(self) -> None: ...


def new_session_id() -> str:
    return str(uuid.uuid4())


def channel_url(ws_base_url: str, session_id: str) -> str:
    return f"{ws_base_url.rstrip('/')}/ws?session={quote(session_id)}"


def decode_frame(raw: Frame) -> Tuple[str, Optional[Dict[str, Any]]]:
    """Split an inbound frame into display text and structured payload.

    JSON objects display their ``message`` field and keep the whole object as
    payload; anything else is shown verbatim without a payload.
    """

    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else str(raw)
    try:
        parsed = json.loads(text)
    except ValueError:
        return text, None
    if not isinstance(parsed, dict):
        return text, None
    message = parsed.get("message")
    if message is None:
        content = ""
    elif isinstance(message, str):
        content = message
    else:
        content = json.dumps(message)
    return content, parsed


class WebSocketChannel:
    def __init__(self, url: str) -> None:
        self.url = url
        self._ws: Any = None
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._open

    async def connect(self) -> "WebSocketChannel":
        self._ws = await websockets.connect(self.url)
        self._open = True
        LOG.info("channel_opened", extra={"url": self.url})
        return self

    async def send_json(self, payload: Dict[str, Any]) -> None:
        if not self._open or self._ws is None:
            raise ChannelClosed("channel is not open")
        try:
            await self._ws.send(json.dumps(payload))
        except ConnectionClosed as exc:
            self._open = False
            raise ChannelClosed(str(exc)) from exc
        record_channel_frame("outbound")

    async def frames(self) -> AsyncIterator[Frame]:
        if self._ws is None:
            return
        try:
            async for raw in self._ws:
                record_channel_frame("inbound")
                yield raw
        except ConnectionClosedError as exc:
            LOG.warning("channel_dropped", extra={"url": self.url, "err": str(exc)})
        except ConnectionClosedOK:
            pass
        finally:
            self._open = False
            LOG.info("channel_closed", extra={"url": self.url})

    async def close(self) -> None:
        self._open = False
        if self._ws is not None:
            await self._ws.close()


async def open_channel(ws_base_url: str, session_id: str) -> WebSocketChannel:
    return await WebSocketChannel(channel_url(ws_base_url, session_id)).connect()
