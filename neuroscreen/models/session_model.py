from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, Set
from datetime import datetime

from neuroscreen.models.asymmetry_model import AsymmetryMetrics
from neuroscreen.models.posture_model import PostureMetrics
from neuroscreen.models.speech_model import SpeechMetrics
from neuroscreen.models.risk_model import RiskAssessment


class AssessmentPhase(str, Enum):
    INSTRUCTION = "instruction"
    FACE = "face"
    POSE = "pose"
    SPEECH = "speech"
    RESULTS = "results"

    @property
    def order(self) -> int:
        return PHASE_ORDER.index(self)

    def next(self) -> Optional["AssessmentPhase"]:
        i = self.order
        return PHASE_ORDER[i + 1] if i + 1 < len(PHASE_ORDER) else None


PHASE_ORDER = [
    AssessmentPhase.INSTRUCTION,
    AssessmentPhase.FACE,
    AssessmentPhase.POSE,
    AssessmentPhase.SPEECH,
    AssessmentPhase.RESULTS,
]


class AssessmentState(BaseModel):
    """
    Mutable per-session progress. Owned by AssessmentSession; rebuilt on reset.
    """

    current_phase: AssessmentPhase = AssessmentPhase.INSTRUCTION
    completed_phases: Set[AssessmentPhase] = Field(default_factory=set)

    # Seconds left in the active timed phase (0 when untimed)
    phase_timer: int = 0

    # -------------------------
    # Latest metric snapshots
    # -------------------------
    asymmetry: AsymmetryMetrics = Field(default_factory=AsymmetryMetrics)
    posture: PostureMetrics = Field(default_factory=PostureMetrics)
    speech: Optional[SpeechMetrics] = None

    risk: RiskAssessment = Field(default_factory=RiskAssessment)
    risk_frozen: bool = False


class SessionSnapshot(BaseModel):
    """Handed to an external save operation; the core stores nothing."""

    asymmetry: AsymmetryMetrics
    posture: PostureMetrics
    speech: Optional[SpeechMetrics] = None
    risk: RiskAssessment
    timestamp: datetime
