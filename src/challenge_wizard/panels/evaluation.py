from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from ..domain import steps as S
from ..domain.records import StepRecord
from ..services.api_client import step_recommendation_endpoint
from .base import StepPanel, as_dicts, remove_at, replace_at

REQUIRED_TOTAL_WEIGHT = 100


def total_weight(criteria: Iterable[Any]) -> float:
    total = 0.0
    for item in criteria:
        raw = item.get("weight") if isinstance(item, dict) else getattr(item, "weight", 0)
        try:
            total += float(raw or 0)
        except (TypeError, ValueError):
            continue
    return total


class EvaluationPanel(StepPanel):
    step_id = S.EVALUATION_CRITERIA
    endpoint = step_recommendation_endpoint("evaluation")
    suggestion_field = "scoring_model"
    options = {"models": S.SCORING_MODELS}

    def suggestion_update(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return {
            "model": data.get("scoringModel"),
            "criteria": data.get("criteria") or [],
            "completed": True,
        }

    def is_complete(self, record: StepRecord) -> bool:
        # weighted scoring needs weights that add up exactly; other models are free-form
        model = getattr(record, "scoring_model", None) or "weighted"
        if model != "weighted":
            return True
        return total_weight(getattr(record, "criteria", None) or []) == REQUIRED_TOTAL_WEIGHT

    @property
    def scoring_model(self) -> str:
        return self.field("scoring_model", "weighted")

    @property
    def criteria(self) -> List[Dict[str, Any]]:
        return as_dicts(self.field("criteria", []))

    def total_weight(self) -> float:
        return total_weight(self.criteria)

    def set_model(self, model: str) -> StepRecord:
        return self.commit({"model": model})

    def add_criterion(self) -> StepRecord:
        return self.commit({"criteria": [*self.criteria, {"name": "", "weight": 0, "description": ""}]})

    def remove_criterion(self, index: int) -> StepRecord:
        return self.commit({"criteria": remove_at(self.criteria, index)})

    def update_criterion(self, index: int, field: str, value: Any) -> StepRecord:
        return self.commit({"criteria": replace_at(self.criteria, index, field, value)})

    def apply_suggested(self) -> Optional[StepRecord]:
        data = self.suggestions
        if not data:
            return None
        return self.commit({"model": data.get("scoringModel"), "criteria": data.get("criteria") or []})

    def view(self) -> Dict[str, Any]:
        view = super().view()
        view["totalWeight"] = self.total_weight()
        return view
