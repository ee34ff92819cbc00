from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol

from ..domain import steps as S
from ..domain.records import StepRecord
from .base import StepPanel


class ReviewHost(Protocol):
    @property
    def challenge_data(self) -> Mapping[str, StepRecord]: ...

    @property
    def validation_issues(self) -> List[str]: ...


def _labels(ids: Optional[List[str]], catalogue: Mapping[str, str]) -> List[str]:
    return [catalogue.get(item, item) for item in ids or []]


class ReviewPanel(StepPanel):
    """Terminal step: read-only summary of everything collected so far."""

    step_id = S.REVIEW_LAUNCH

    @property
    def _data(self) -> Mapping[str, StepRecord]:
        return self.host.challenge_data  # type: ignore[attr-defined]

    def section_status(self, step_id: str) -> str:
        record = self._data.get(step_id)
        if record is None or not record.completed:
            return "incomplete"
        return "complete"

    def sections(self) -> List[Dict[str, str]]:
        return [
            {"key": step.id, "title": step.title, "status": self.section_status(step.id)}
            for step in S.STEPS[:-1]
        ]

    def completion_percentage(self) -> int:
        sections = self.sections()
        done = sum(1 for section in sections if section["status"] == "complete")
        return round(done / len(sections) * 100)

    def summary(self) -> Dict[str, Any]:
        data = self._data
        scoping = data.get(S.PROBLEM_SCOPING)
        ctype = data.get(S.CHALLENGE_TYPE)
        audience = data.get(S.AUDIENCE_REGISTRATION)
        submission = data.get(S.SUBMISSION_REQUIREMENTS)
        evaluation = data.get(S.EVALUATION_CRITERIA)
        comms = data.get(S.COMMUNICATIONS_MONITORING)
        selected = getattr(ctype, "selected_type", None) or ""
        return {
            "refinedStatement": getattr(scoping, "refined_statement", None) or "",
            "challengeType": S.CHALLENGE_TYPES.get(selected.lower(), {}).get("name", selected),
            "audiences": _labels(getattr(audience, "audiences", None), S.AUDIENCE_TYPES),
            "submissionTypes": _labels(getattr(submission, "types", None), S.SUBMISSION_TYPES),
            "scoringModel": S.SCORING_MODELS.get(getattr(evaluation, "scoring_model", None) or "", ""),
            "channels": _labels(getattr(comms, "channels", None), S.PROMOTION_CHANNELS),
        }

    def launch(self) -> Dict[str, Any]:
        if self.notifications is not None:
            self.notifications.success("Challenge Launched!", "Your challenge has been successfully launched.")
        return {"launched": True, "completion": self.completion_percentage()}

    def view(self) -> Dict[str, Any]:
        return {
            "stepId": self.step_id,
            "sections": self.sections(),
            "completion": self.completion_percentage(),
            "summary": self.summary(),
            "validationIssues": list(self.host.validation_issues),  # type: ignore[attr-defined]
        }
