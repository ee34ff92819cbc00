from __future__ import annotations

from typing import Any, Dict, Optional

from ..domain import steps as S
from ..domain.records import RegistrationSettings, StepRecord
from ..services.api_client import step_recommendation_endpoint
from .base import StepPanel, toggle


class AudiencePanel(StepPanel):
    step_id = S.AUDIENCE_REGISTRATION
    endpoint = step_recommendation_endpoint("audience")
    suggestion_field = "audiences"
    options = {"audiences": S.AUDIENCE_TYPES, "participationTypes": S.PARTICIPATION_TYPES}

    def suggestion_update(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        audiences = list(data.get("audiences") or [])
        update: Dict[str, Any] = {"audiences": audiences, "completed": len(audiences) > 0}
        if data.get("participationType"):
            update["participationType"] = data["participationType"]
        return update

    def is_complete(self, record: StepRecord) -> bool:
        return len(getattr(record, "audiences", None) or []) > 0

    @property
    def audiences(self) -> list:
        return list(self.field("audiences", []))

    @property
    def participation_type(self) -> str:
        return self.field("participation_type", "individual")

    @property
    def registration_settings(self) -> RegistrationSettings:
        return self.field("registration_settings", RegistrationSettings())

    def toggle_audience(self, audience_id: str) -> StepRecord:
        return self.commit({"audiences": toggle(self.audiences, audience_id)})

    def set_participation_type(self, value: str) -> StepRecord:
        return self.commit({"participationType": value})

    def update_registration_settings(self, **updates: Any) -> StepRecord:
        current = self.registration_settings.model_dump()
        merged = RegistrationSettings.model_validate({**current, **updates})
        return self.commit({"registrationSettings": merged})
