from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, cast

from fastapi import APIRouter, Body, HTTPException, Query, Response, status
from pydantic import BaseModel, Field

from ...core.wizard import WizardOrchestrator
from ...domain import steps as S
from ...domain.records import RECORD_TYPES
from ...infrastructure.session_store import get_session_store
from ...panels.challenge_type import ChallengeTypePanel
from ...panels.review import ReviewPanel
from ...services.scoping import ScopingSession

router = APIRouter(prefix="/wizard", tags=["wizard"])


class ScopingMessageIn(BaseModel):
    content: str = Field(min_length=1)


def _wizard(session_id: str) -> WizardOrchestrator:
    wizard = get_session_store().get(session_id)
    if wizard is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return wizard


def _scoping(wizard: WizardOrchestrator) -> ScopingSession:
    if wizard.scoping is None:
        raise HTTPException(status_code=409, detail="Scoping channel is not connected")
    return wizard.scoping


def _moved(wizard: WizardOrchestrator, moved: bool) -> Dict[str, Any]:
    return {"moved": moved, "wizard": wizard.snapshot()}


@router.post("/sessions", status_code=status.HTTP_201_CREATED)
async def create_session() -> Dict[str, Any]:
    store = get_session_store()
    wizard = store.new_wizard()
    await wizard.mount()
    store.add(wizard)
    return wizard.snapshot()


@router.get("/sessions/{session_id}")
async def get_session(session_id: str) -> Dict[str, Any]:
    wizard = _wizard(session_id)
    wizard.refresh()
    return wizard.snapshot()


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str) -> Response:
    wizard = get_session_store().pop(session_id)
    if wizard is None:
        raise HTTPException(status_code=404, detail="Session not found")
    await wizard.unmount()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/sessions/{session_id}/steps/{step_id}")
async def update_step(session_id: str, step_id: str, changes: Dict[str, Any] = Body(...)) -> Dict[str, Any]:
    wizard = _wizard(session_id)
    if step_id not in RECORD_TYPES:
        raise HTTPException(status_code=404, detail="Step not found")
    if step_id != wizard.current_step.id:
        raise HTTPException(status_code=409, detail="Only the current step can be updated")
    panel = wizard.panels[step_id]
    try:
        panel.commit(changes)
    except ValueError as exc:
        # pydantic ValidationError is a ValueError too
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    wizard.refresh()
    return wizard.snapshot()


@router.post("/sessions/{session_id}/next")
async def next_step(session_id: str) -> Dict[str, Any]:
    wizard = _wizard(session_id)
    return _moved(wizard, wizard.advance())


@router.post("/sessions/{session_id}/back")
async def previous_step(session_id: str) -> Dict[str, Any]:
    wizard = _wizard(session_id)
    return _moved(wizard, wizard.retreat())


@router.post("/sessions/{session_id}/select/{index}")
async def select_step(session_id: str, index: int) -> Dict[str, Any]:
    wizard = _wizard(session_id)
    return _moved(wizard, wizard.select_step(index))


@router.post("/sessions/{session_id}/scoping/messages")
async def send_scoping_message(session_id: str, req: ScopingMessageIn) -> Dict[str, Any]:
    wizard = _wizard(session_id)
    message = await _scoping(wizard).submit(req.content)
    return {
        "accepted": message is not None,
        "message": message.model_dump(mode="json") if message is not None else None,
        "wizard": wizard.snapshot(),
    }


@router.post("/sessions/{session_id}/scoping/continue")
async def continue_scoping(session_id: str) -> Dict[str, Any]:
    wizard = _wizard(session_id)
    accepted = _scoping(wizard).confirm()
    return {"accepted": accepted, "wizard": wizard.snapshot()}


@router.post("/sessions/{session_id}/scoping/adjust")
async def adjust_scoping(session_id: str) -> Dict[str, Any]:
    wizard = _wizard(session_id)
    accepted = await _scoping(wizard).adjust()
    return {"accepted": accepted, "wizard": wizard.snapshot()}


@router.post("/sessions/{session_id}/impact-preview/{type_id}")
async def impact_preview(session_id: str, type_id: str) -> Dict[str, Any]:
    wizard = _wizard(session_id)
    if type_id.lower() not in S.CHALLENGE_TYPES:
        raise HTTPException(status_code=404, detail="Challenge type not found")
    panel = cast(ChallengeTypePanel, wizard.panels[S.CHALLENGE_TYPE])
    preview = await panel.impact_preview(type_id)
    return {"typeId": type_id, "impactPreview": preview}


@router.post("/sessions/{session_id}/launch")
async def launch(session_id: str) -> Dict[str, Any]:
    wizard = _wizard(session_id)
    if wizard.current_step.id != S.REVIEW_LAUNCH:
        raise HTTPException(status_code=409, detail="Launch is only available from the review step")
    panel = cast(ReviewPanel, wizard.panels[S.REVIEW_LAUNCH])
    return panel.launch()


@router.get("/sessions/{session_id}/notifications")
async def list_notifications(session_id: str, limit: int = Query(20, ge=1, le=50)) -> List[Dict[str, Any]]:
    wizard = _wizard(session_id)
    return [asdict(item) for item in wizard.notifications.recent(limit)]
