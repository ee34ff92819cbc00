from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..domain import steps as S
from ..domain.records import StepRecord
from ..services.api_client import step_recommendation_endpoint
from .base import StepPanel, as_dicts, remove_at, replace_at

DEFAULT_PRIZES = [{"position": "1st Place", "amount": "", "description": ""}]


class PrizePanel(StepPanel):
    step_id = S.PRIZE_CONFIGURATION
    endpoint = step_recommendation_endpoint("prize")
    suggestion_field = "prize_type"
    options = {"prizeTypes": S.PRIZE_TYPES}

    def suggestion_update(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return {
            "prizeType": data.get("prizeType"),
            "totalBudget": data.get("totalBudget"),
            "prizes": data.get("prizes") or [],
            "recognitionPlan": data.get("recognitionPlan"),
            "completed": True,
        }

    def is_complete(self, record: StepRecord) -> bool:
        # any deliberate edit of the reward setup completes the step
        return True

    @property
    def prizes(self) -> List[Dict[str, Any]]:
        stored = self.field("prizes")
        return as_dicts(stored) if stored is not None else [dict(p) for p in DEFAULT_PRIZES]

    def update(self, **changes: Any) -> StepRecord:
        return self.commit(changes)

    def add_prize(self) -> StepRecord:
        return self.commit({"prizes": [*self.prizes, {"position": "", "amount": "", "description": ""}]})

    def remove_prize(self, index: int) -> StepRecord:
        return self.commit({"prizes": remove_at(self.prizes, index)})

    def update_prize(self, index: int, field: str, value: str) -> StepRecord:
        return self.commit({"prizes": replace_at(self.prizes, index, field, value)})
