"""HTTP client for the AI recommendation backend.

All endpoints are JSON ``POST`` calls relative to the configured base URL.
The client uses a plain ``requests.Session``: a failed call is reported once
and never retried behind the caller's back. Blocking I/O is moved off the
event loop with ``asyncio.to_thread`` so the wizard stays responsive while a
request is outstanding.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from ..config import WizardSettings, load_settings
from ..observability.metrics import record_ai_request

logger = logging.getLogger(__name__)

VALIDATE_ENDPOINT = "validate-challenge"
RECOMMENDATIONS_ENDPOINT = "recommendations"
IMPACT_PREVIEW_ENDPOINT = "impact-preview"

STEP_RECOMMENDATION_KINDS = (
    "audience",
    "submission",
    "prize",
    "timeline",
    "evaluation",
    "communications",
)


def step_recommendation_endpoint(kind: str) -> str:
    if kind not in STEP_RECOMMENDATION_KINDS:
        raise ValueError(f"Unknown recommendation kind '{kind}'")
    return f"{kind}-recommendations"


class ApiError(Exception):
    def __init__(self, message: str, *, endpoint: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code


class ChallengeApiClient:
    def __init__(self, settings: Optional[WizardSettings] = None, session: Optional[requests.Session] = None) -> None:
        self.settings = settings or load_settings()
        self._session = session or requests.Session()

    def url_for(self, endpoint: str) -> str:
        return f"{self.settings.api_base_url}/api/{endpoint.lstrip('/')}"

    def post_sync(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        url = self.url_for(endpoint)
        try:
            resp = self._session.post(url, json=payload, timeout=self.settings.request_timeout)
        except requests.exceptions.RequestException as exc:
            record_ai_request(endpoint, "transport_error")
            logger.warning("api_transport_failed", extra={"endpoint": endpoint, "err": str(exc)})
            raise ApiError(f"Failed to reach {endpoint}: {exc}", endpoint=endpoint) from exc

        if not resp.ok:
            record_ai_request(endpoint, "http_error")
            logger.warning("api_status_failed", extra={"endpoint": endpoint, "status": resp.status_code})
            raise ApiError(
                f"Failed to fetch AI recommendations from {endpoint}.",
                endpoint=endpoint,
                status_code=resp.status_code,
            )
        try:
            body = resp.json()
        except ValueError as exc:
            record_ai_request(endpoint, "decode_error")
            raise ApiError(f"Invalid JSON returned by {endpoint}.", endpoint=endpoint, status_code=resp.status_code) from exc
        record_ai_request(endpoint, "ok")
        return body if isinstance(body, dict) else {"data": body}

    async def post(self, endpoint: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await asyncio.to_thread(self.post_sync, endpoint, payload)

    async def validate_challenge(self, challenge_data: Dict[str, Any]) -> List[str]:
        body = await self.post(VALIDATE_ENDPOINT, {"challenge_data": challenge_data})
        warnings = body.get("warnings") or []
        return [str(w) for w in warnings]

    async def impact_preview(self, problem_statement: str, challenge_type: str) -> str:
        body = await self.post(
            IMPACT_PREVIEW_ENDPOINT,
            {"problem_statement": problem_statement, "challenge_type": challenge_type},
        )
        return str(body.get("impact_preview") or "")

    async def step_recommendations(self, kind: str, problem_statement: str, challenge_type: str) -> Dict[str, Any]:
        return await self.post(
            step_recommendation_endpoint(kind),
            {"problem_statement": problem_statement, "challenge_type": challenge_type},
        )

    def close(self) -> None:
        self._session.close()
