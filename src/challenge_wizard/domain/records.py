"""Per-step data records.

``ChallengeData`` maps a step id to exactly one record variant. Each variant
declares its own fields; ``combine`` merges a partial update into the stored
record (creating it when absent) and leaves untouched fields as they were.
Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .messages import Message
from . import steps as S


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def _stringify(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    return value


class TypeRecommendation(WireModel):
    id: str
    confidence: float = 0
    ai_commentary: str = ""
    weight: float = 0


class ChallengeTypeDetails(WireModel):
    name: str
    description: str


class RegistrationSettings(WireModel):
    require_approval: bool = False
    max_participants: str = ""
    registration_deadline: str = ""

    @field_validator("max_participants", mode="before")
    @classmethod
    def _number_as_text(cls, value: Any) -> Any:
        return _stringify(value)


class Prize(WireModel):
    position: str = ""
    amount: str = ""
    description: str = ""

    @field_validator("amount", mode="before")
    @classmethod
    def _number_as_text(cls, value: Any) -> Any:
        return _stringify(value)


class Milestone(WireModel):
    name: str = ""
    date: str = ""
    description: str = ""


class Criterion(WireModel):
    name: str = ""
    weight: float = 0
    description: str = ""

    @field_validator("weight", mode="before")
    @classmethod
    def _blank_weight(cls, value: Any) -> Any:
        # an emptied numeric input counts as zero
        if value in ("", None):
            return 0
        return value


class StepRecord(WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    STEP_ID: ClassVar[str] = ""

    completed: bool = False

    @classmethod
    def field_lookup(cls) -> Dict[str, str]:
        """Map both wire aliases and Python names to the Python field name."""
        lookup: Dict[str, str] = {}
        for name, info in cls.model_fields.items():
            lookup[name] = name
            if info.alias:
                lookup[info.alias] = name
        return lookup

    @classmethod
    def combine(cls, existing: Optional["StepRecord"], partial: Mapping[str, Any]) -> "StepRecord":
        lookup = cls.field_lookup()
        updates: Dict[str, Any] = {}
        for key, value in partial.items():
            name = lookup.get(key)
            if name is None:
                raise ValueError(f"Unknown field '{key}' for step '{cls.STEP_ID}'")
            updates[name] = value
        base: Dict[str, Any] = {}
        if existing is not None:
            base = {name: getattr(existing, name) for name in cls.model_fields}
        base.update(updates)
        return cls.model_validate(base)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ProblemScopingRecord(StepRecord):
    STEP_ID = S.PROBLEM_SCOPING

    messages: Optional[List[Message]] = None
    refined_statement: Optional[str] = None
    problem_statement: Optional[str] = None
    challenge_type: Optional[str] = None


class ChallengeTypeRecord(StepRecord):
    STEP_ID = S.CHALLENGE_TYPE

    recommendations: Optional[List[TypeRecommendation]] = None
    selected_type: Optional[str] = None
    selected_type_details: Optional[ChallengeTypeDetails] = None


class AudienceRecord(StepRecord):
    STEP_ID = S.AUDIENCE_REGISTRATION

    audiences: Optional[List[str]] = None
    participation_type: Optional[str] = None
    registration_settings: Optional[RegistrationSettings] = None


class SubmissionRecord(StepRecord):
    STEP_ID = S.SUBMISSION_REQUIREMENTS

    types: Optional[List[str]] = None
    deliverables: Optional[str] = None
    form_schema: Optional[Dict[str, Any]] = Field(default=None, alias="schema")
    form_values: Optional[Dict[str, Any]] = None


class PrizeRecord(StepRecord):
    STEP_ID = S.PRIZE_CONFIGURATION

    prize_type: Optional[str] = None
    total_budget: Optional[str] = None
    prizes: Optional[List[Prize]] = None
    recognition_plan: Optional[str] = None

    @field_validator("total_budget", mode="before")
    @classmethod
    def _number_as_text(cls, value: Any) -> Any:
        return _stringify(value)


class TimelineRecord(StepRecord):
    STEP_ID = S.TIMELINE_MILESTONES

    start_date: Optional[str] = None
    end_date: Optional[str] = None
    milestones: Optional[List[Milestone]] = None


class EvaluationRecord(StepRecord):
    STEP_ID = S.EVALUATION_CRITERIA

    scoring_model: Optional[str] = Field(default=None, alias="model")
    criteria: Optional[List[Criterion]] = None


class CommunicationsRecord(StepRecord):
    STEP_ID = S.COMMUNICATIONS_MONITORING

    channels: Optional[List[str]] = None
    metrics: Optional[List[str]] = None
    kickoff_message: Optional[str] = None
    reporting_frequency: Optional[str] = None


RECORD_TYPES: Dict[str, Type[StepRecord]] = {
    cls.STEP_ID: cls
    for cls in (
        ProblemScopingRecord,
        ChallengeTypeRecord,
        AudienceRecord,
        SubmissionRecord,
        PrizeRecord,
        TimelineRecord,
        EvaluationRecord,
        CommunicationsRecord,
    )
}


ChallengeData = Dict[str, StepRecord]


def record_type_for(step_id: str) -> Type[StepRecord]:
    try:
        return RECORD_TYPES[step_id]
    except KeyError:
        raise KeyError(f"Step '{step_id}' does not collect data") from None


def dump_challenge_data(data: Mapping[str, StepRecord]) -> Dict[str, Dict[str, Any]]:
    return {step_id: record.to_wire() for step_id, record in data.items()}


def has_value(value: Any) -> bool:
    """True when a suggestion target field already holds user or AI data."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value)
    return True
