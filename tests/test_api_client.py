import asyncio

import pytest
import requests

from challenge_wizard.config import WizardSettings
from challenge_wizard.services.api_client import (
    ApiError,
    ChallengeApiClient,
    step_recommendation_endpoint,
)


class _Resp:
    def __init__(self, status_code=200, body=None, bad_json=False):
        self.status_code = status_code
        self._body = body
        self._bad_json = bad_json

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._bad_json:
            raise ValueError("not json")
        return self._body


class _Session:
    def __init__(self, resp=None, exc=None):
        self.resp = resp
        self.exc = exc
        self.calls = []
        self.closed = False

    def post(self, url, json=None, timeout=None):
        self.calls.append({"url": url, "json": json, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.resp

    def close(self):
        self.closed = True


def _client(session):
    return ChallengeApiClient(WizardSettings(api_base_url="http://api.test"), session=session)


def test_url_for_builds_api_paths():
    client = _client(_Session())
    assert client.url_for("recommendations") == "http://api.test/api/recommendations"
    assert client.url_for("/impact-preview") == "http://api.test/api/impact-preview"


def test_post_sends_json_with_timeouts():
    session = _Session(_Resp(body={"recommendations": []}))
    body = _client(session).post_sync("recommendations", {"problem_statement": "x"})
    assert body == {"recommendations": []}
    [call] = session.calls
    assert call["url"] == "http://api.test/api/recommendations"
    assert call["json"] == {"problem_statement": "x"}
    assert call["timeout"] == (3.0, 30.0)


def test_error_status_raises_api_error():
    client = _client(_Session(_Resp(status_code=503)))
    with pytest.raises(ApiError) as info:
        client.post_sync("prize-recommendations", {})
    assert info.value.status_code == 503
    assert info.value.endpoint == "prize-recommendations"
    assert str(info.value) == "Failed to fetch AI recommendations from prize-recommendations."


def test_transport_error_raises_api_error():
    client = _client(_Session(exc=requests.exceptions.ConnectionError("refused")))
    with pytest.raises(ApiError) as info:
        client.post_sync("recommendations", {})
    assert info.value.status_code is None


def test_invalid_json_raises_api_error():
    client = _client(_Session(_Resp(bad_json=True)))
    with pytest.raises(ApiError):
        client.post_sync("recommendations", {})


def test_non_object_body_is_wrapped():
    client = _client(_Session(_Resp(body=["a", "b"])))
    assert client.post_sync("recommendations", {}) == {"data": ["a", "b"]}


def test_async_helpers_shape_requests_and_results():
    session = _Session(_Resp(body={"warnings": ["Missing dates", 3]}))
    client = _client(session)
    warnings = asyncio.run(client.validate_challenge({"timeline-milestones": {"completed": False}}))
    assert warnings == ["Missing dates", "3"]
    assert session.calls[0]["json"] == {"challenge_data": {"timeline-milestones": {"completed": False}}}

    session.resp = _Resp(body={"impact_preview": "Faster onboarding."})
    assert asyncio.run(client.impact_preview("p", "rtp")) == "Faster onboarding."
    assert session.calls[1]["json"] == {"problem_statement": "p", "challenge_type": "rtp"}

    session.resp = _Resp(body={"types": ["video"]})
    assert asyncio.run(client.step_recommendations("submission", "p", "rtp")) == {"types": ["video"]}
    assert session.calls[2]["url"] == "http://api.test/api/submission-recommendations"


def test_step_recommendation_endpoint_rejects_unknown_kind():
    assert step_recommendation_endpoint("timeline") == "timeline-recommendations"
    with pytest.raises(ValueError):
        step_recommendation_endpoint("budget")


def test_close_closes_session():
    session = _Session()
    _client(session).close()
    assert session.closed
