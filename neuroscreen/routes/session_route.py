import uuid
from typing import Dict

from fastapi import APIRouter, HTTPException, Request

from neuroscreen.config import ScreeningConfig
from neuroscreen.models.landmark_model import LandmarkFrame
from neuroscreen.models.speech_model import SpeechMetrics
from neuroscreen.session.session import AssessmentSession
from neuroscreen.session.timer import AsyncioScheduler
from neuroscreen.utils.logger import info

router = APIRouter(prefix="/sessions")


class SessionRegistry:
    """Live sessions keyed by id. Process memory only."""

    def __init__(self, config: ScreeningConfig):
        self.config = config
        self._sessions: Dict[str, AssessmentSession] = {}

    def create(self) -> str:
        sid = uuid.uuid4().hex
        self._sessions[sid] = AssessmentSession(self.config, scheduler=AsyncioScheduler())
        info(f"[SESSION] created {sid}")
        return sid

    def get(self, sid: str) -> AssessmentSession:
        session = self._sessions.get(sid)
        if session is None:
            raise HTTPException(status_code=404, detail=f"Unknown session: {sid}")
        return session

    def remove(self, sid: str):
        session = self.get(sid)
        session.reset()
        del self._sessions[sid]

    def __len__(self):
        return len(self._sessions)


def _registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def _state(sid: str, session: AssessmentSession):
    return {"session_id": sid, **session.state.model_dump(mode="json")}


def _event(request: Request, sid: str, name: str):
    session = _registry(request).get(sid)
    if not getattr(session, name)():
        raise HTTPException(
            status_code=409,
            detail=f"'{name}' not allowed in phase {session.phase.value}",
        )
    return _state(sid, session)


# ---------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------

@router.post("")
async def create_session(request: Request):
    reg = _registry(request)
    sid = reg.create()
    return _state(sid, reg.get(sid))


@router.get("/{sid}")
async def get_session(request: Request, sid: str):
    return _state(sid, _registry(request).get(sid))


@router.delete("/{sid}")
async def delete_session(request: Request, sid: str):
    _registry(request).remove(sid)
    return {"session_id": sid, "deleted": True}


@router.post("/{sid}/start")
async def start(request: Request, sid: str):
    return _event(request, sid, "start")


@router.post("/{sid}/skip")
async def skip(request: Request, sid: str):
    return _event(request, sid, "skip")


@router.post("/{sid}/speech-complete")
async def speech_complete(request: Request, sid: str):
    return _event(request, sid, "complete_speech")


@router.post("/{sid}/reset")
async def reset(request: Request, sid: str):
    return _event(request, sid, "reset")


# ---------------------------------------------------------
# Inputs
# ---------------------------------------------------------

async def _frame(request: Request, sid: str, frame: LandmarkFrame, stream: str):
    session = _registry(request).get(sid)

    publish = session.publish_face if stream == "face" else session.publish_pose
    if not publish(frame):
        raise HTTPException(
            status_code=409,
            detail=f"{stream} frames not accepted in phase {session.phase.value}",
        )

    applied = session.process_pending()
    metrics = session.state.asymmetry if stream == "face" else session.state.posture
    return {
        "session_id": sid,
        "applied": applied,
        "metrics": metrics.model_dump(mode="json"),
        "risk": session.state.risk.model_dump(mode="json"),
    }


@router.post("/{sid}/face")
async def face_frame(request: Request, sid: str, frame: LandmarkFrame):
    return await _frame(request, sid, frame, "face")


@router.post("/{sid}/pose")
async def pose_frame(request: Request, sid: str, frame: LandmarkFrame):
    return await _frame(request, sid, frame, "pose")


@router.post("/{sid}/speech")
async def speech(request: Request, sid: str, metrics: SpeechMetrics):
    session = _registry(request).get(sid)
    if not session.submit_speech(metrics):
        raise HTTPException(
            status_code=409,
            detail=f"speech metrics not accepted in phase {session.phase.value}",
        )
    return _state(sid, session)


@router.get("/{sid}/snapshot")
async def snapshot(request: Request, sid: str):
    session = _registry(request).get(sid)
    return session.snapshot().model_dump(mode="json")
