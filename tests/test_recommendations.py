import asyncio

from conftest import FakeApiClient

from challenge_wizard.services.notifications import NotificationCenter
from challenge_wizard.services.recommendations import RecommendationCache

ENDPOINT = "audience-recommendations"
PAYLOAD = {"problem_statement": "reduce churn", "challenge_type": "ideation"}
BODY = {"audiences": ["internal"], "aiCommentary": "Start with your own staff."}


def test_one_request_per_enablement_and_reset_rearms():
    async def scenario():
        client = FakeApiClient(responses={ENDPOINT: BODY})
        cache = RecommendationCache(client, ENDPOINT)

        assert cache.sync(False, PAYLOAD) is False
        assert cache.data is None
        for _ in range(3):
            cache.sync(True, PAYLOAD)
            await cache.settled()
        assert len(client.calls) == 1
        assert cache.data == BODY
        assert not cache.is_loading

        cache.reset()
        assert cache.data is None
        cache.sync(False, PAYLOAD)
        cache.sync(True, PAYLOAD)
        await cache.settled()
        assert len(client.calls) == 2

    asyncio.run(scenario())


def test_latch_holds_when_payload_changes():
    async def scenario():
        client = FakeApiClient(responses={ENDPOINT: BODY})
        cache = RecommendationCache(client, ENDPOINT)
        cache.sync(True, PAYLOAD)
        await cache.settled()
        assert cache.sync(True, {**PAYLOAD, "challenge_type": "rtp"}) is False
        assert len(client.calls) == 1

    asyncio.run(scenario())


def test_failure_sets_error_and_notifies():
    async def scenario():
        client = FakeApiClient(errors={ENDPOINT: "Failed to fetch AI recommendations from audience-recommendations."})
        notifications = NotificationCenter()
        cache = RecommendationCache(client, ENDPOINT, notifications)
        cache.sync(True, PAYLOAD)
        assert cache.is_loading
        await cache.settled()
        assert cache.data is None
        assert not cache.is_loading
        assert cache.error == "Failed to fetch AI recommendations from audience-recommendations."
        [notice] = notifications.recent()
        assert notice.level == "error"
        assert notice.title == "AI Assistant Error"
        # no automatic retry
        cache.sync(True, PAYLOAD)
        await cache.settled()
        assert len(client.calls) == 1

    asyncio.run(scenario())


def test_results_after_reset_are_discarded():
    async def scenario():
        received = []
        client = FakeApiClient(responses={ENDPOINT: BODY}, delay=0.02)
        cache = RecommendationCache(client, ENDPOINT, on_data=received.append)
        cache.sync(True, PAYLOAD)
        cache.reset()
        await cache.settled()
        assert cache.data is None
        assert received == []

    asyncio.run(scenario())


def test_closed_cache_ignores_sync_and_late_results():
    async def scenario():
        received = []
        client = FakeApiClient(responses={ENDPOINT: BODY}, delay=0.02)
        cache = RecommendationCache(client, ENDPOINT, on_data=received.append)
        cache.sync(True, PAYLOAD)
        cache.close()
        await cache.settled()
        assert received == []
        cache.reset()
        assert cache.sync(True, PAYLOAD) is False

    asyncio.run(scenario())


def test_success_hands_data_to_consumer():
    async def scenario():
        received = []
        client = FakeApiClient(responses={ENDPOINT: BODY})
        cache = RecommendationCache(client, ENDPOINT, on_data=received.append)
        cache.sync(True, PAYLOAD)
        await cache.settled()
        assert received == [BODY]
        assert client.calls == [(ENDPOINT, PAYLOAD)]

    asyncio.run(scenario())


def test_malformed_body_is_reported_not_raised():
    def reject(_data):
        raise ValueError("audiences: Input should be a valid list")

    async def scenario():
        client = FakeApiClient(responses={ENDPOINT: BODY})
        notifications = NotificationCenter()
        cache = RecommendationCache(client, ENDPOINT, notifications, on_data=reject)
        cache.sync(True, PAYLOAD)
        await cache._task
        assert cache.data == BODY
        assert not cache.is_loading
        assert cache.error == "audiences: Input should be a valid list"
        [notice] = notifications.recent()
        assert notice.title == "AI Assistant Error"

    asyncio.run(scenario())
