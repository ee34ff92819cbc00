from __future__ import annotations

from typing import Any, Dict, Optional

from ..domain import steps as S
from ..services.scoping import ScopingSession
from .base import StepPanel


class ProblemScopingPanel(StepPanel):
    """Thin view over the wizard's scoping session; suggestions arrive over the channel."""

    step_id = S.PROBLEM_SCOPING

    @property
    def session(self) -> Optional[ScopingSession]:
        return getattr(self.host, "scoping", None)

    def activate(self) -> None:
        session = self.session
        if session is not None:
            session.active = True
            session.reopen()

    def deactivate(self) -> None:
        # the extracted scope survives until the record itself is discarded
        session = self.session
        if session is not None:
            session.active = False

    def reset(self) -> None:
        session = self.session
        if session is not None:
            session.restart()

    def view(self) -> Dict[str, Any]:
        session = self.session
        return {
            "stepId": self.step_id,
            "scoping": session.view() if session is not None else None,
        }
