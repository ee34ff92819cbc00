from challenge_wizard.core import state_machine as sm
from challenge_wizard.domain import steps as S


def test_forward_transitions_follow_step_order():
    assert sm.next_step(S.PROBLEM_SCOPING) == S.CHALLENGE_TYPE
    assert sm.next_step(S.COMMUNICATIONS_MONITORING) == S.REVIEW_LAUNCH
    assert sm.next_step(S.REVIEW_LAUNCH) is None
    assert sm.is_valid_transition(S.CHALLENGE_TYPE, S.AUDIENCE_REGISTRATION)
    assert not sm.is_valid_transition(S.CHALLENGE_TYPE, S.PRIZE_CONFIGURATION)


def test_can_advance_requires_completion_and_non_terminal():
    total = len(S.STEPS)
    assert sm.can_advance(0, total, True)
    assert not sm.can_advance(0, total, False)
    assert not sm.can_advance(total - 1, total, True)


def test_can_retreat_only_above_zero():
    assert not sm.can_retreat(0)
    assert sm.can_retreat(3)


def test_can_select_rules():
    total = len(S.STEPS)
    assert sm.can_select(3, 3, total, False)
    assert sm.can_select(3, 0, total, False)
    assert sm.can_select(3, 4, total, True)
    assert not sm.can_select(3, 4, total, False)
    assert not sm.can_select(3, 5, total, True)
    assert not sm.can_select(3, -1, total, True)
    assert not sm.can_select(3, total, total, True)


def test_discard_from_returns_new_mapping():
    data = {step.id: idx for idx, step in enumerate(S.STEPS[:5])}
    kept = sm.discard_from(data, S.STEPS, 2)
    assert kept == {S.PROBLEM_SCOPING: 0, S.CHALLENGE_TYPE: 1}
    assert len(data) == 5
    assert sm.discarded_ids(data, S.STEPS, 3) == [S.SUBMISSION_REQUIREMENTS, S.PRIZE_CONFIGURATION]


def test_progress_percent_ignores_terminal_step():
    assert sm.progress_percent({}, S.STEPS) == 0
    flags = {step.id: True for step in S.STEPS}
    assert sm.progress_percent(flags, S.STEPS) == 100
    assert sm.progress_percent({S.PROBLEM_SCOPING: True, S.CHALLENGE_TYPE: False}, S.STEPS) == 12.5
