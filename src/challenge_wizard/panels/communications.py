from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..domain import steps as S
from ..domain.records import StepRecord
from ..services.api_client import step_recommendation_endpoint
from .base import StepPanel, toggle

DEFAULT_METRICS = ["participation", "engagement"]
DEFAULT_FREQUENCY = "weekly"


class CommunicationsPanel(StepPanel):
    step_id = S.COMMUNICATIONS_MONITORING
    endpoint = step_recommendation_endpoint("communications")
    suggestion_field = "channels"
    options = {
        "channels": S.PROMOTION_CHANNELS,
        "metrics": S.MONITORING_METRICS,
        "reportingFrequencies": list(S.REPORTING_FREQUENCIES),
    }

    def suggestion_update(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        channels = list(data.get("channels") or [])
        metrics = list(data.get("metrics") or [])
        return {
            "channels": channels,
            "metrics": metrics,
            "kickoffMessage": data.get("kickoffMessage"),
            "reportingFrequency": data.get("reportingFrequency"),
            "completed": len(channels) > 0 and len(metrics) > 0,
        }

    def is_complete(self, record: StepRecord) -> bool:
        channels = getattr(record, "channels", None) or []
        metrics = getattr(record, "metrics", None) or []
        return len(channels) > 0 and len(metrics) > 0

    @property
    def channels(self) -> List[str]:
        return list(self.field("channels", []))

    @property
    def metrics(self) -> List[str]:
        return list(self.field("metrics", DEFAULT_METRICS))

    @property
    def reporting_frequency(self) -> str:
        return self.field("reporting_frequency", DEFAULT_FREQUENCY)

    def _commit_with_defaults(self, changes: Dict[str, Any]) -> StepRecord:
        # the metric defaults shown to the user are stored with the first edit
        if self.field("metrics") is None and "metrics" not in changes:
            changes = {**changes, "metrics": list(DEFAULT_METRICS)}
        return self.commit(changes)

    def toggle_channel(self, channel_id: str) -> StepRecord:
        return self._commit_with_defaults({"channels": toggle(self.channels, channel_id)})

    def toggle_metric(self, metric_id: str) -> StepRecord:
        return self._commit_with_defaults({"metrics": toggle(self.metrics, metric_id)})

    def set_kickoff_message(self, message: str) -> StepRecord:
        return self._commit_with_defaults({"kickoffMessage": message})

    def set_reporting_frequency(self, frequency: str) -> StepRecord:
        if frequency not in S.REPORTING_FREQUENCIES:
            raise ValueError(f"Unknown reporting frequency '{frequency}'")
        return self._commit_with_defaults({"reportingFrequency": frequency})

    def apply_suggested_message(self) -> Optional[StepRecord]:
        data = self.suggestions
        if not data:
            return None
        return self._commit_with_defaults({"kickoffMessage": data.get("kickoffMessage")})
