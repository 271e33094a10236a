"""FastAPI routes for interview session control."""
from __future__ import annotations

import base64
import binascii
from threading import Lock
from typing import Any

from fastapi import APIRouter, HTTPException

from agents.bullet_writer import write_bullets
from agents.types import FinalizeResult, InvalidInput, InvalidState, TranscriptionFailed
from api.schemas import ApiResp, AudioTurnReq, SnapshotResp, StartReq, TurnReq
from config.settings import settings
from interview_session.interview_session import ConversationStateMachine
from services.sessions import SessionNotFoundError, new_session, store


router = APIRouter(prefix="/api/interview-sessions")


def _load(session_id: str) -> ConversationStateMachine:
    try:
        return store.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="session not found")


def _turn_lock(session_id: str) -> Lock:
    try:
        return store.turn_lock(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="session not found")


def _resp_from_result(session: ConversationStateMachine, result: Any) -> ApiResp:
    if isinstance(result, InvalidInput):
        raise HTTPException(status_code=400, detail=result.detail)
    if isinstance(result, InvalidState):
        raise HTTPException(status_code=409, detail=result.detail)
    if isinstance(result, TranscriptionFailed):
        raise HTTPException(status_code=422, detail=result.detail)
    if isinstance(result, FinalizeResult):
        store.delete(session.session_id)
        bullets = []
        if settings.GENERATE_BULLETS_ON_FINALIZE:
            bullets = write_bullets(result, session.composer.generator, role=session.role)
        return ApiResp(
            session_id=session.session_id,
            status=result.status,
            message=result.message,
            reason=result.reason,
            transcript=result.transcript,
            bullets=bullets,
        )
    return ApiResp(session_id=session.session_id, status=result.status, message=result.message)


@router.post("/start", response_model=ApiResp)
def start(req: StartReq) -> ApiResp:
    session = new_session(req.prior_context, role=req.role, budget_seconds=req.budget_seconds)
    result = session.start()
    if isinstance(result, InvalidState):  # pragma: no cover - fresh sessions are idle
        raise HTTPException(status_code=409, detail=result.detail)
    store.create(session)
    return ApiResp(session_id=session.session_id, status=result.status, message=result.message)


@router.post("/respond", response_model=ApiResp)
def respond(req: TurnReq) -> ApiResp:
    session = _load(req.session_id)
    with _turn_lock(req.session_id):
        result = session.submit_response(req.text)
    return _resp_from_result(session, result)


@router.post("/respond-audio", response_model=ApiResp)
def respond_audio(req: AudioTurnReq) -> ApiResp:
    try:
        audio = base64.b64decode(req.audio_b64, validate=True)
    except (binascii.Error, ValueError):
        raise HTTPException(status_code=400, detail="audio_b64 is not valid base64")
    session = _load(req.session_id)
    with _turn_lock(req.session_id):
        result = session.submit_audio(audio)
    return _resp_from_result(session, result)


@router.get("/{session_id}", response_model=SnapshotResp)
def snapshot(session_id: str) -> SnapshotResp:
    snap = _load(session_id).snapshot()
    return SnapshotResp(
        session_id=session_id,
        state=snap.state,
        elapsed_seconds=snap.elapsed_seconds,
        respondent_turn_count=snap.respondent_turn_count,
        transcript=snap.transcript,
    )
