import pytest
from pydantic import ValidationError

from challenge_wizard.domain import steps as S
from challenge_wizard.domain.messages import Transcript
from challenge_wizard.domain.records import (
    AudienceRecord,
    EvaluationRecord,
    PrizeRecord,
    ProblemScopingRecord,
    SubmissionRecord,
    dump_challenge_data,
    has_value,
    record_type_for,
)


def test_combine_creates_record_when_absent():
    record = AudienceRecord.combine(None, {"audiences": ["internal"], "completed": True})
    assert record.audiences == ["internal"]
    assert record.participation_type is None
    assert record.completed is True


def test_combine_preserves_untouched_fields():
    first = AudienceRecord.combine(None, {"audiences": ["internal"], "participationType": "team"})
    second = AudienceRecord.combine(first, {"audiences": ["global"]})
    assert second.audiences == ["global"]
    assert second.participation_type == "team"
    assert first.audiences == ["internal"]


def test_combine_accepts_python_names_and_wire_aliases():
    record = EvaluationRecord.combine(None, {"model": "weighted"})
    record = EvaluationRecord.combine(record, {"scoring_model": "checklist"})
    assert record.scoring_model == "checklist"
    assert record.to_wire()["model"] == "checklist"


def test_combine_rejects_unknown_field():
    with pytest.raises(ValueError):
        AudienceRecord.combine(None, {"prizes": []})


def test_combine_rejects_bad_types():
    with pytest.raises(ValidationError):
        AudienceRecord.combine(None, {"audiences": "internal"})


def test_numeric_inputs_are_kept_as_text():
    record = PrizeRecord.combine(None, {"totalBudget": 5000, "prizes": [{"position": "1st", "amount": 2500}]})
    wire = record.to_wire()
    assert wire["totalBudget"] == "5000"
    assert wire["prizes"][0]["amount"] == "2500"


def test_blank_criterion_weight_counts_as_zero():
    record = EvaluationRecord.combine(None, {"criteria": [{"name": "Impact", "weight": ""}]})
    assert record.criteria[0].weight == 0


def test_submission_schema_alias_round_trips_on_wire():
    schema = {"summary": {"type": "text", "required": True}}
    record = SubmissionRecord.combine(None, {"types": ["document"], "schema": schema})
    assert record.form_schema == schema
    assert record.to_wire()["schema"] == schema


def test_problem_scoping_record_keeps_transcript_messages():
    transcript = Transcript()
    transcript.append("user", "reduce churn")
    record = ProblemScopingRecord.combine(None, {"messages": list(transcript.messages), "refinedStatement": "x"})
    wire = dump_challenge_data({S.PROBLEM_SCOPING: record})
    assert wire[S.PROBLEM_SCOPING]["messages"][0]["content"] == "reduce churn"
    assert wire[S.PROBLEM_SCOPING]["refinedStatement"] == "x"


def test_review_step_has_no_record_type():
    assert record_type_for(S.AUDIENCE_REGISTRATION) is AudienceRecord
    with pytest.raises(KeyError):
        record_type_for(S.REVIEW_LAUNCH)


def test_has_value():
    assert not has_value(None)
    assert not has_value("")
    assert has_value("weighted")
    assert has_value([])
    assert has_value(0)


def test_transcript_ids_are_unique_and_ordered():
    transcript = Transcript()
    first = transcript.append("user", "a")
    second = transcript.append("ai", "b", {"message": "b"})
    assert first.id != second.id
    assert [m.content for m in transcript] == ["a", "b"]
    assert transcript.last() is second
    assert len(transcript) == 2
    assert isinstance(transcript.messages, tuple)


def test_step_index_rejects_unknown_ids():
    assert S.step_index(S.REVIEW_LAUNCH) == len(S.STEPS) - 1
    with pytest.raises(KeyError):
        S.step_index("nope")
