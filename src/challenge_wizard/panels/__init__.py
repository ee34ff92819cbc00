from __future__ import annotations

from typing import Dict, Optional

from ..services.api_client import ChallengeApiClient
from ..services.notifications import NotificationCenter
from .audience import AudiencePanel
from .base import PanelHost, StepContext, StepPanel
from .challenge_type import ChallengeTypePanel
from .communications import CommunicationsPanel
from .evaluation import EvaluationPanel
from .prize import PrizePanel
from .problem_scoping import ProblemScopingPanel
from .review import ReviewPanel
from .submission import SubmissionPanel
from .timeline import TimelinePanel

PANEL_TYPES = (
    ProblemScopingPanel,
    ChallengeTypePanel,
    AudiencePanel,
    SubmissionPanel,
    PrizePanel,
    TimelinePanel,
    EvaluationPanel,
    CommunicationsPanel,
    ReviewPanel,
)


def build_panels(
    host: PanelHost,
    client: Optional[ChallengeApiClient] = None,
    notifications: Optional[NotificationCenter] = None,
) -> Dict[str, StepPanel]:
    return {cls.step_id: cls(host, client, notifications) for cls in PANEL_TYPES}


__all__ = [
    "PANEL_TYPES",
    "PanelHost",
    "StepContext",
    "StepPanel",
    "build_panels",
]
