"""Shared plumbing for step panels.

A panel is the controller half of one wizard step: it reads its own record
plus read-only upstream context from the host, and asks the host to store
every change through ``update_step_data``. Panels never keep wizard data of
their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Protocol, Type

from ..domain.records import StepRecord, has_value, record_type_for
from ..services.api_client import ChallengeApiClient
from ..services.notifications import NotificationCenter
from ..services.recommendations import RecommendationCache


@dataclass(frozen=True)
class StepContext:
    """What a panel may see: its own record and the two upstream answers."""

    step_id: str
    record: Optional[StepRecord]
    problem_statement: str = ""
    challenge_type: str = ""

    def as_payload(self) -> Dict[str, Any]:
        return {
            "stepId": self.step_id,
            "data": self.record.to_wire() if self.record is not None else {},
            "problemStatement": self.problem_statement,
            "challengeType": self.challenge_type,
        }


class PanelHost(Protocol):
    def context_for(self, step_id: str) -> StepContext: ...

    def update_step_data(self, step_id: str, partial: Mapping[str, Any]) -> StepRecord: ...


class StepPanel:
    step_id: str = ""
    endpoint: Optional[str] = None
    # record field that, once set, blocks a late suggestion from overwriting it
    suggestion_field: Optional[str] = None
    # option catalogues the step offers, shown alongside the record
    options: Dict[str, Any] = {}

    def __init__(
        self,
        host: PanelHost,
        client: Optional[ChallengeApiClient] = None,
        notifications: Optional[NotificationCenter] = None,
    ) -> None:
        self.host = host
        self.client = client
        self.notifications = notifications
        self.cache: Optional[RecommendationCache] = None
        if self.endpoint and client is not None:
            self.cache = RecommendationCache(client, self.endpoint, notifications, on_data=self._receive)

    # -- context ------------------------------------------------------

    @property
    def record_type(self) -> Type[StepRecord]:
        return record_type_for(self.step_id)

    def context(self) -> StepContext:
        return self.host.context_for(self.step_id)

    @property
    def record(self) -> Optional[StepRecord]:
        return self.context().record

    def field(self, name: str, default: Any = None) -> Any:
        record = self.record
        value = getattr(record, name, None) if record is not None else None
        return default if value is None else value

    # -- recommendations ----------------------------------------------

    def is_enabled(self, ctx: StepContext) -> bool:
        return bool(ctx.problem_statement) and bool(ctx.challenge_type)

    def request_payload(self, ctx: StepContext) -> Dict[str, Any]:
        return {"problem_statement": ctx.problem_statement, "challenge_type": ctx.challenge_type}

    def sync(self) -> bool:
        """Render hook: let the cache fetch once the upstream answers exist."""
        if self.cache is None:
            return False
        ctx = self.context()
        return self.cache.sync(self.is_enabled(ctx), self.request_payload(ctx))

    @property
    def suggestions(self) -> Optional[Dict[str, Any]]:
        return self.cache.data if self.cache is not None else None

    @property
    def ai_commentary(self) -> str:
        data = self.suggestions or {}
        commentary = data.get("aiCommentary")
        return commentary if isinstance(commentary, str) else ""

    def _receive(self, data: Dict[str, Any]) -> None:
        record = self.record
        if self.suggestion_field and record is not None and has_value(getattr(record, self.suggestion_field, None)):
            return
        update = self.suggestion_update(data)
        if update:
            self.host.update_step_data(self.step_id, update)

    def suggestion_update(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Translate a suggestion body into a partial record update."""
        return None

    def reset(self) -> None:
        if self.cache is not None:
            self.cache.reset()

    def activate(self) -> None:
        pass

    def deactivate(self) -> None:
        # leaving a step drops its fetch latch and any in-flight suggestion
        self.reset()

    def close(self) -> None:
        if self.cache is not None:
            self.cache.close()

    # -- updates ------------------------------------------------------

    def is_complete(self, record: StepRecord) -> bool:
        return bool(record.completed)

    def commit(self, changes: Mapping[str, Any]) -> StepRecord:
        """Store ``changes`` with a freshly computed completion flag."""
        preview = self.record_type.combine(self.record, changes)
        return self.host.update_step_data(self.step_id, {**changes, "completed": self.is_complete(preview)})

    def view(self) -> Dict[str, Any]:
        cache = self.cache
        return {
            "stepId": self.step_id,
            "isLoading": cache.is_loading if cache is not None else False,
            "error": cache.error if cache is not None else None,
            "aiCommentary": self.ai_commentary,
            "suggestions": self.suggestions,
            "options": self.options,
        }


def toggle(values: List[str], item: str) -> List[str]:
    return [v for v in values if v != item] if item in values else [*values, item]


def replace_at(items: List[Dict[str, Any]], index: int, field: str, value: Any) -> List[Dict[str, Any]]:
    if index < 0 or index >= len(items):
        raise IndexError(index)
    updated = [dict(item) for item in items]
    updated[index][field] = value
    return updated


def remove_at(items: List[Any], index: int) -> List[Any]:
    return [item for i, item in enumerate(items) if i != index]


def as_dicts(items: Optional[List[Any]]) -> List[Dict[str, Any]]:
    return [item.model_dump(by_alias=True) if hasattr(item, "model_dump") else dict(item) for item in items or []]
