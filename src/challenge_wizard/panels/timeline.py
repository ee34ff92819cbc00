from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..domain import steps as S
from ..domain.records import StepRecord
from ..services.api_client import step_recommendation_endpoint
from .base import StepPanel, as_dicts, remove_at, replace_at


def _parse(value: str) -> Optional[datetime]:
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return None
    return parsed.replace(tzinfo=None)


def duration_label(start: str, end: str) -> str:
    """``"N days"`` between two dates, or "" when either is missing or out of order."""
    if not start or not end:
        return ""
    start_dt, end_dt = _parse(start), _parse(end)
    if start_dt is None or end_dt is None or end_dt < start_dt:
        return ""
    days = math.ceil((end_dt - start_dt).total_seconds() / 86400)
    return f"{days} days"


class TimelinePanel(StepPanel):
    step_id = S.TIMELINE_MILESTONES
    endpoint = step_recommendation_endpoint("timeline")
    suggestion_field = "start_date"

    def suggestion_update(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        start, end = data.get("startDate"), data.get("endDate")
        return {
            "startDate": start,
            "endDate": end,
            "milestones": data.get("milestones") or [],
            "completed": bool(start and end),
        }

    def is_complete(self, record: StepRecord) -> bool:
        return bool(getattr(record, "start_date", None) and getattr(record, "end_date", None))

    @property
    def milestones(self) -> List[Dict[str, Any]]:
        return as_dicts(self.field("milestones", []))

    def duration(self) -> str:
        return duration_label(self.field("start_date", ""), self.field("end_date", ""))

    def set_dates(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> StepRecord:
        changes: Dict[str, Any] = {}
        if start_date is not None:
            changes["startDate"] = start_date
        if end_date is not None:
            changes["endDate"] = end_date
        return self.commit(changes)

    def add_milestone(self) -> StepRecord:
        return self.commit({"milestones": [*self.milestones, {"name": "", "date": "", "description": ""}]})

    def remove_milestone(self, index: int) -> StepRecord:
        return self.commit({"milestones": remove_at(self.milestones, index)})

    def update_milestone(self, index: int, field: str, value: str) -> StepRecord:
        return self.commit({"milestones": replace_at(self.milestones, index, field, value)})

    def apply_suggested(self) -> Optional[StepRecord]:
        data = self.suggestions
        if not data:
            return None
        return self.commit(
            {
                "startDate": data.get("startDate"),
                "endDate": data.get("endDate"),
                "milestones": data.get("milestones") or [],
            }
        )

    def view(self) -> Dict[str, Any]:
        view = super().view()
        view["duration"] = self.duration()
        return view
