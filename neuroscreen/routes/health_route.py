from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/")
def health(request: Request):
    timing = request.app.state.config.timing
    return {
        "status": "ok",
        "service": "NeuroScreen",
        "active_sessions": len(request.app.state.sessions),
        "face_seconds": timing.face_seconds,
        "pose_seconds": timing.pose_seconds,
    }
