# neuroscreen/session/streams.py

from dataclasses import dataclass
from typing import Any, Optional

from neuroscreen.models.session_model import AssessmentPhase


@dataclass
class PendingFrame:
    frame: Any
    phase: AssessmentPhase     # phase active when the frame was captured
    captured_at: float


class LatestFrameSlot:
    """
    Holds at most one pending frame. Publishing overwrites whatever is
    waiting: only the newest frame matters for real-time screening.
    """

    def __init__(self, name: str):
        self.name = name
        self._pending: Optional[PendingFrame] = None
        self.overwritten = 0

    def publish(self, frame, phase: AssessmentPhase, captured_at: float):
        if self._pending is not None:
            self.overwritten += 1
        self._pending = PendingFrame(frame, phase, captured_at)

    def take(self) -> Optional[PendingFrame]:
        pending, self._pending = self._pending, None
        return pending

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def clear(self):
        self._pending = None
