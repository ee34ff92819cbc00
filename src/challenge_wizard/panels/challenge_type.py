from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..domain import steps as S
from ..domain.records import StepRecord
from ..services.api_client import ApiError, RECOMMENDATIONS_ENDPOINT
from .base import StepContext, StepPanel, as_dicts

logger = logging.getLogger(__name__)


def _type_info(type_id: str) -> Optional[Dict[str, str]]:
    return S.CHALLENGE_TYPES.get(type_id.lower())


def rank_recommendations(raw: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Seed weights from confidence, drop unknown types, best match first."""
    ranked: List[Dict[str, Any]] = []
    for rec in raw:
        if not isinstance(rec, dict) or not isinstance(rec.get("id"), str):
            continue
        if _type_info(rec["id"]) is None:
            logger.warning("unknown_challenge_type", extra={"type_id": rec["id"]})
            continue
        ranked.append({**rec, "weight": rec.get("confidence", 0)})
    ranked.sort(key=lambda rec: rec.get("confidence", 0), reverse=True)
    return ranked


class ChallengeTypePanel(StepPanel):
    step_id = S.CHALLENGE_TYPE
    endpoint = RECOMMENDATIONS_ENDPOINT
    suggestion_field = "recommendations"
    options = {"types": S.CHALLENGE_TYPES}

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.impact_previews: Dict[str, str] = {}
        self.loading_impact: Optional[str] = None

    def is_enabled(self, ctx: StepContext) -> bool:
        return bool(ctx.problem_statement)

    def request_payload(self, ctx: StepContext) -> Dict[str, Any]:
        return {"problem_statement": ctx.problem_statement}

    def suggestion_update(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ranked = rank_recommendations(data.get("recommendations") or [])
        if not ranked:
            return None
        top = ranked[0]["id"]
        return {
            "recommendations": ranked,
            "selectedType": top,
            "selectedTypeDetails": _type_info(top),
            "completed": True,
        }

    def is_complete(self, record: StepRecord) -> bool:
        return bool(getattr(record, "selected_type", None))

    def select_type(self, type_id: str) -> StepRecord:
        return self.host.update_step_data(
            self.step_id,
            {"selectedType": type_id, "selectedTypeDetails": _type_info(type_id), "completed": True},
        )

    def set_weight(self, type_id: str, weight: float) -> StepRecord:
        recs = as_dicts(self.field("recommendations", []))
        for rec in recs:
            if rec["id"] == type_id:
                rec["weight"] = weight
        recs.sort(key=lambda rec: rec.get("weight", 0), reverse=True)
        return self.host.update_step_data(self.step_id, {"recommendations": recs})

    async def impact_preview(self, type_id: str) -> Optional[str]:
        """Fetch the impact blurb for one type; cached per type, never retried automatically."""
        if type_id in self.impact_previews:
            return self.impact_previews[type_id]
        if self.loading_impact == type_id or self.client is None:
            return None
        ctx = self.context()
        self.loading_impact = type_id
        if self.notifications is not None:
            self.notifications.info("Generating impact preview...")
        try:
            preview = await self.client.impact_preview(ctx.problem_statement, type_id)
        except ApiError as exc:
            if self.notifications is not None:
                self.notifications.error("Error generating impact preview", str(exc))
            return None
        finally:
            if self.loading_impact == type_id:
                self.loading_impact = None
        self.impact_previews[type_id] = preview
        return preview

    def reset(self) -> None:
        super().reset()
        self.impact_previews.clear()
        self.loading_impact = None

    def view(self) -> Dict[str, Any]:
        view = super().view()
        view["impactPreviews"] = dict(self.impact_previews)
        view["loadingImpact"] = self.loading_impact
        return view
