import asyncio
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
src_str = str(ROOT / "src")
if src_str not in sys.path:
    sys.path.insert(0, src_str)

from challenge_wizard.config import WizardSettings  # noqa: E402
from challenge_wizard.services.api_client import ApiError, ChallengeApiClient  # noqa: E402
from challenge_wizard.services.channel import ChannelClosed  # noqa: E402


class FakeApiClient(ChallengeApiClient):
    """Answers from canned bodies per endpoint; records every call."""

    def __init__(self, responses=None, errors=None, delay=0.0):
        super().__init__(WizardSettings(api_base_url="http://api.test"))
        self.responses = dict(responses or {})
        self.errors = dict(errors or {})
        self.delay = delay
        self.calls = []
        self.closed = False

    def calls_to(self, endpoint):
        return [payload for name, payload in self.calls if name == endpoint]

    async def post(self, endpoint, payload):
        self.calls.append((endpoint, payload))
        if self.delay:
            await asyncio.sleep(self.delay)
        if endpoint in self.errors:
            raise ApiError(self.errors[endpoint], endpoint=endpoint, status_code=500)
        return dict(self.responses.get(endpoint, {}))

    def close(self):
        self.closed = True
        super().close()


class FakeChannel:
    """In-memory stand-in for the websocket channel."""

    def __init__(self, fail_sends=False):
        self.sent = []
        self.fail_sends = fail_sends
        self._inbox = asyncio.Queue()
        self._open = True

    @property
    def is_open(self):
        return self._open

    async def send_json(self, payload):
        if not self._open or self.fail_sends:
            raise ChannelClosed("closed")
        self.sent.append(payload)

    def push(self, frame):
        self._inbox.put_nowait(frame)

    def drop(self):
        self._open = False
        self._inbox.put_nowait(None)

    async def frames(self):
        while True:
            frame = await self._inbox.get()
            if frame is None:
                return
            yield frame

    async def close(self):
        if self._open:
            self.drop()


class FakeChannelFactory:
    def __init__(self, fail=False):
        self.fail = fail
        self.channels = []
        self.opened = []

    async def __call__(self, ws_base_url, session_id):
        self.opened.append((ws_base_url, session_id))
        if self.fail:
            raise OSError("connection refused")
        channel = FakeChannel()
        self.channels.append(channel)
        return channel


async def pump(seconds=0.02):
    """Give queued callbacks and reader tasks a chance to run."""
    await asyncio.sleep(seconds)
    await asyncio.sleep(0)


@pytest.fixture
def fast_settings():
    return WizardSettings(
        api_base_url="http://api.test",
        ws_base_url="ws://ws.test",
        debounce_seconds=0.05,
    )


@pytest.fixture
def channel_factory():
    return FakeChannelFactory()
