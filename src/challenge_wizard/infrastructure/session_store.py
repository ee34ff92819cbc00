from __future__ import annotations

from threading import RLock
from typing import Callable, Dict, List, Optional

from ..config import WizardSettings, load_settings
from ..core.wizard import ChannelFactory, WizardOrchestrator
from ..services.api_client import ChallengeApiClient


class WizardSessionStore:
    """Live wizard sessions of this process, keyed by their channel session id.

    Nothing is persisted: a restart drops every session. ``client_factory`` and
    ``channel_factory`` decide how new wizards reach the AI backend.
    """

    def __init__(
        self,
        settings: Optional[WizardSettings] = None,
        client_factory: Optional[Callable[[WizardSettings], ChallengeApiClient]] = None,
        channel_factory: Optional[ChannelFactory] = None,
    ) -> None:
        self.settings = settings
        self.client_factory = client_factory
        self.channel_factory = channel_factory
        self._sessions: Dict[str, WizardOrchestrator] = {}
        self._lock = RLock()

    def new_wizard(self) -> WizardOrchestrator:
        settings = self.settings or load_settings()
        client = self.client_factory(settings) if self.client_factory is not None else None
        return WizardOrchestrator(settings=settings, client=client, channel_factory=self.channel_factory)

    def add(self, wizard: WizardOrchestrator) -> str:
        if not wizard.session_id:
            raise ValueError("wizard must be mounted before it is stored")
        with self._lock:
            self._sessions[wizard.session_id] = wizard
            return wizard.session_id

    def get(self, session_id: str) -> Optional[WizardOrchestrator]:
        with self._lock:
            return self._sessions.get(session_id)

    def pop(self, session_id: str) -> Optional[WizardOrchestrator]:
        with self._lock:
            return self._sessions.pop(session_id, None)

    def session_ids(self) -> List[str]:
        with self._lock:
            return list(self._sessions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


_store: WizardSessionStore | None = None


def get_session_store() -> WizardSessionStore:
    global _store
    if _store is None:
        _store = WizardSessionStore()
    return _store


def set_session_store(store: Optional[WizardSessionStore]) -> None:
    """Swap the process-wide store; ``None`` lets the next lookup build a fresh one."""
    global _store
    _store = store
