import asyncio
import logging

from conftest import FakeApiClient

from challenge_wizard.core.wizard import WizardOrchestrator
from challenge_wizard.domain import steps as S

VALIDATE = "validate-challenge"


def _wizard(settings, channel_factory, client):
    return WizardOrchestrator(settings=settings, client=client, channel_factory=channel_factory)


def test_rapid_edits_validate_once_with_final_data(fast_settings, channel_factory):
    async def scenario():
        client = FakeApiClient(responses={VALIDATE: {"warnings": ["Budget is missing"]}})
        wizard = _wizard(fast_settings, channel_factory, client)
        for name in ("a", "ab", "abc", "abcd", "abcde"):
            wizard.update_step_data(S.TIMELINE_MILESTONES, {"milestones": [{"name": name}]})
            await asyncio.sleep(0.01)
        assert client.calls_to(VALIDATE) == []

        await wizard.settled()
        [payload] = client.calls_to(VALIDATE)
        milestones = payload["challenge_data"][S.TIMELINE_MILESTONES]["milestones"]
        assert milestones[0]["name"] == "abcde"
        assert wizard.validation_issues == ["Budget is missing"]

    asyncio.run(scenario())


def test_unchanged_data_is_not_revalidated(fast_settings, channel_factory):
    async def scenario():
        client = FakeApiClient(responses={VALIDATE: {"warnings": []}})
        wizard = _wizard(fast_settings, channel_factory, client)
        wizard.update_step_data(S.AUDIENCE_REGISTRATION, {"audiences": ["internal"]})
        await wizard.settled()
        wizard.update_step_data(S.AUDIENCE_REGISTRATION, {"audiences": ["internal"]})
        await wizard.settled()
        assert len(client.calls_to(VALIDATE)) == 1

    asyncio.run(scenario())


def test_empty_data_never_calls_the_service(fast_settings, channel_factory):
    async def scenario():
        client = FakeApiClient(responses={VALIDATE: {"warnings": ["x"]}})
        wizard = _wizard(fast_settings, channel_factory, client)
        wizard.update_step_data(S.PROBLEM_SCOPING, {"completed": True})
        assert wizard.advance()
        assert wizard.retreat()
        assert dict(wizard.challenge_data) == {}
        await wizard.settled()
        assert client.calls_to(VALIDATE) == []
        assert wizard.validation_issues == []

    asyncio.run(scenario())


def test_emptied_data_clears_earlier_issues(fast_settings, channel_factory):
    async def scenario():
        client = FakeApiClient(responses={VALIDATE: {"warnings": ["Missing dates"]}})
        wizard = _wizard(fast_settings, channel_factory, client)
        wizard.update_step_data(S.PROBLEM_SCOPING, {"completed": True})
        await wizard.settled()
        assert wizard.validation_issues == ["Missing dates"]
        assert wizard.advance()
        assert wizard.retreat()
        await wizard.settled()
        assert wizard.validation_issues == []
        assert len(client.calls_to(VALIDATE)) == 1

    asyncio.run(scenario())


def test_failure_keeps_previous_issues(fast_settings, channel_factory, caplog):
    async def scenario():
        client = FakeApiClient(responses={VALIDATE: {"warnings": ["Dates overlap"]}})
        wizard = _wizard(fast_settings, channel_factory, client)
        wizard.update_step_data(S.TIMELINE_MILESTONES, {"startDate": "2025-01-01"})
        await wizard.settled()
        assert wizard.validation_issues == ["Dates overlap"]

        client.errors[VALIDATE] = "Failed to fetch AI recommendations from validate-challenge."
        wizard.update_step_data(S.TIMELINE_MILESTONES, {"endDate": "2025-02-01"})
        await wizard.settled()
        assert wizard.validation_issues == ["Dates overlap"]
        assert len(client.calls_to(VALIDATE)) == 2

    with caplog.at_level(logging.WARNING):
        asyncio.run(scenario())
    assert any(r.getMessage() == "validation_failed" for r in caplog.records)


def test_missing_warnings_empties_the_list(fast_settings, channel_factory):
    async def scenario():
        client = FakeApiClient(responses={VALIDATE: {"warnings": ["one"]}})
        wizard = _wizard(fast_settings, channel_factory, client)
        wizard.update_step_data(S.PRIZE_CONFIGURATION, {"prizeType": "monetary"})
        await wizard.settled()
        client.responses[VALIDATE] = {}
        wizard.update_step_data(S.PRIZE_CONFIGURATION, {"prizeType": "mixed"})
        await wizard.settled()
        assert wizard.validation_issues == []

    asyncio.run(scenario())


def test_result_after_unmount_is_discarded(fast_settings, channel_factory):
    async def scenario():
        client = FakeApiClient(responses={VALIDATE: {"warnings": ["late"]}}, delay=0.05)
        wizard = _wizard(fast_settings, channel_factory, client)
        wizard.update_step_data(S.AUDIENCE_REGISTRATION, {"audiences": ["global"]})
        # let the quiet window pass so the request is in flight
        await asyncio.sleep(fast_settings.debounce_seconds + 0.02)
        assert len(client.calls_to(VALIDATE)) == 1
        await wizard.unmount()
        await asyncio.sleep(0.08)
        assert wizard.validation_issues == []
        wizard.update_step_data(S.AUDIENCE_REGISTRATION, {"audiences": ["internal"]})
        await asyncio.sleep(fast_settings.debounce_seconds + 0.02)
        assert len(client.calls_to(VALIDATE)) == 1

    asyncio.run(scenario())
