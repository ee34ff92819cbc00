from __future__ import annotations

from typing import Dict, List, Mapping, Optional, Sequence, TypeVar

from ..domain.steps import STEPS, StepDefinition

T = TypeVar("T")

# Forward transitions follow the fixed step order; the terminal step has none.
STEP_TRANSITIONS: Dict[str, List[str]] = {
    step.id: [STEPS[idx + 1].id] for idx, step in enumerate(STEPS[:-1])
}


def next_step(current: str) -> Optional[str]:
    options = STEP_TRANSITIONS.get(current, [])
    return options[0] if options else None


def is_valid_transition(current: str, target: str) -> bool:
    return target in STEP_TRANSITIONS.get(current, [])


def is_terminal(index: int, total: int) -> bool:
    return index == total - 1


def can_advance(current: int, total: int, current_completed: bool) -> bool:
    return not is_terminal(current, total) and current_completed


def can_retreat(current: int) -> bool:
    return current > 0


def can_select(current: int, target: int, total: int, current_completed: bool) -> bool:
    """Sidebar jump guard: stay, go back, or move exactly one step past a completed one."""
    if target < 0 or target >= total:
        return False
    if target <= current:
        return True
    return target == current + 1 and current_completed


def discard_from(
    challenge_data: Mapping[str, T],
    steps: Sequence[StepDefinition],
    start_index: int,
) -> Dict[str, T]:
    """Return a copy of ``challenge_data`` without the records of ``steps[start_index:]``."""
    dropped = {step.id for step in steps[max(start_index, 0):]}
    return {step_id: record for step_id, record in challenge_data.items() if step_id not in dropped}


def discarded_ids(
    challenge_data: Mapping[str, T],
    steps: Sequence[StepDefinition],
    start_index: int,
) -> List[str]:
    return [step.id for step in steps[max(start_index, 0):] if step.id in challenge_data]


def progress_percent(completed_flags: Mapping[str, bool], steps: Sequence[StepDefinition]) -> float:
    if len(steps) < 2:
        return 0.0
    countable = {step.id for step in steps[:-1]}
    done = sum(1 for step_id, flag in completed_flags.items() if flag and step_id in countable)
    return done / (len(steps) - 1) * 100
