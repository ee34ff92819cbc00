"""Runtime settings for the challenge wizard.

Values come from the process environment (optionally primed from a ``.env``
file by the host API). A custom mapping can be supplied instead, which keeps
the loader unit-testable without touching ``os.environ``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_API_BASE_URL = "http://localhost:8000"
DEFAULT_WS_BASE_URL = "ws://localhost:8000"
DEFAULT_DEBOUNCE_SECONDS = 1.0


@dataclass(frozen=True)
class WizardSettings:
    api_base_url: str = DEFAULT_API_BASE_URL
    ws_base_url: str = DEFAULT_WS_BASE_URL
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS
    connect_timeout: float = 3.0
    read_timeout: float = 30.0

    @property
    def request_timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)


def _env_url(env: Mapping[str, str], name: str, default: str) -> str:
    raw = (env.get(name) or "").strip()
    return (raw or default).rstrip("/")


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def load_settings(env: Optional[Mapping[str, str]] = None) -> WizardSettings:
    env = os.environ if env is None else env
    return WizardSettings(
        api_base_url=_env_url(env, "CHALLENGE_WIZARD_API_BASE_URL", DEFAULT_API_BASE_URL),
        ws_base_url=_env_url(env, "CHALLENGE_WIZARD_WS_BASE_URL", DEFAULT_WS_BASE_URL),
        debounce_seconds=_env_float(env, "CHALLENGE_WIZARD_DEBOUNCE_SECONDS", DEFAULT_DEBOUNCE_SECONDS),
        connect_timeout=_env_float(env, "CHALLENGE_WIZARD_CONNECT_TIMEOUT", 3.0),
        read_timeout=_env_float(env, "CHALLENGE_WIZARD_READ_TIMEOUT", 30.0),
    )
