import asyncio

import pytest
from conftest import FakeApiClient

from challenge_wizard.infrastructure.session_store import (
    WizardSessionStore,
    get_session_store,
    set_session_store,
)


def test_store_requires_mounted_wizard(fast_settings, channel_factory):
    store = WizardSessionStore(settings=fast_settings, client_factory=lambda _s: FakeApiClient(), channel_factory=channel_factory)
    wizard = store.new_wizard()
    with pytest.raises(ValueError):
        store.add(wizard)

    async def scenario():
        await wizard.mount()
        sid = store.add(wizard)
        assert store.get(sid) is wizard
        assert store.session_ids() == [sid]
        assert store.pop(sid) is wizard
        assert store.pop(sid) is None
        assert len(store) == 0
        await wizard.unmount()

    asyncio.run(scenario())


def test_new_wizard_uses_configured_factories(fast_settings, channel_factory):
    api = FakeApiClient()
    store = WizardSessionStore(settings=fast_settings, client_factory=lambda _s: api, channel_factory=channel_factory)
    wizard = store.new_wizard()
    assert wizard.client is api
    assert wizard.settings is fast_settings


def test_singleton_can_be_swapped():
    original = get_session_store()
    assert get_session_store() is original
    replacement = WizardSessionStore()
    set_session_store(replacement)
    try:
        assert get_session_store() is replacement
    finally:
        set_session_store(original)
