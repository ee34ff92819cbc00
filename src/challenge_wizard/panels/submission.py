from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from ..domain import steps as S
from ..domain.records import StepRecord
from ..services.api_client import step_recommendation_endpoint
from .base import StepPanel, toggle


def validate_form(schema: Optional[Mapping[str, Any]], values: Mapping[str, Any]) -> Dict[str, str]:
    """Check dynamic form values against a ``{field: {type, required, description}}`` schema."""
    errors: Dict[str, str] = {}
    for name, spec in (schema or {}).items():
        spec = spec if isinstance(spec, Mapping) else {}
        value = values.get(name, "")
        if value is None:
            value = ""
        if not isinstance(value, str):
            errors[name] = f"{name} must be text"
            continue
        if spec.get("required") and len(value) < 1:
            errors[name] = f"{name} is required"
    return errors


class SubmissionPanel(StepPanel):
    step_id = S.SUBMISSION_REQUIREMENTS
    endpoint = step_recommendation_endpoint("submission")
    suggestion_field = "types"
    options = {"types": S.SUBMISSION_TYPES}

    def suggestion_update(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        types = list(data.get("types") or [])
        return {
            "types": types,
            "deliverables": data.get("instructions") or "",
            "schema": data.get("schema"),
            "completed": len(types) > 0,
        }

    def is_complete(self, record: StepRecord) -> bool:
        return len(getattr(record, "types", None) or []) > 0

    @property
    def selected_types(self) -> list:
        return list(self.field("types", []))

    @property
    def form_values(self) -> Dict[str, Any]:
        values = dict(self.field("form_values", {}))
        values["deliverables"] = self.field("deliverables", "")
        return values

    def toggle_type(self, type_id: str) -> StepRecord:
        return self.commit({"types": toggle(self.selected_types, type_id)})

    def update_form(self, values: Mapping[str, Any]) -> StepRecord:
        values = dict(values)
        changes: Dict[str, Any] = {}
        if "deliverables" in values:
            changes["deliverables"] = values.pop("deliverables")
        if values:
            changes["formValues"] = {**self.field("form_values", {}), **values}
        return self.commit(changes)

    def form_errors(self) -> Dict[str, str]:
        return validate_form(self.field("form_schema"), self.form_values)

    def view(self) -> Dict[str, Any]:
        view = super().view()
        view["formErrors"] = self.form_errors()
        return view
