from challenge_wizard.services.notifications import NotificationCenter


def test_buffer_is_bounded():
    center = NotificationCenter(max_buffer=3)
    for idx in range(5):
        center.info(f"notice {idx}")
    assert [n.title for n in center.recent()] == ["notice 2", "notice 3", "notice 4"]
    assert center.recent(0) == []


def test_levels_and_drain():
    center = NotificationCenter()
    center.success("Challenge Launched!", "Your challenge has been successfully launched.")
    center.error("AI Assistant Error", "down")
    assert [n.level for n in center.recent()] == ["success", "error"]
    assert center.recent()[0].created_at.endswith("Z")
    drained = center.drain()
    assert len(drained) == 2
    assert len(center) == 0
