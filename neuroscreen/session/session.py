# neuroscreen/session/session.py
"""
AssessmentSession owns every piece of mutable state for one screening run:
phase controller, timers, capture sink, analyzers, frame slots and the
AssessmentState they feed.

Detector callbacks hand frames to publish_face()/publish_pose(); the host
loop calls process_pending() to analyze the newest frame of each stream,
at most once per min_analysis_interval_ms per stream.
"""

from datetime import datetime, timezone
from typing import Optional

from neuroscreen.analysis.facial_asymmetry import FacialAsymmetryAnalyzer
from neuroscreen.analysis.posture import PostureAnalyzer
from neuroscreen.config import ScreeningConfig
from neuroscreen.models.session_model import (
    AssessmentPhase,
    AssessmentState,
    SessionSnapshot,
)
from neuroscreen.models.speech_model import SpeechMetrics
from neuroscreen.risk.aggregator import RiskAggregator
from neuroscreen.session.capture import CaptureSink
from neuroscreen.session.controller import AssessmentPhaseController
from neuroscreen.session.streams import LatestFrameSlot
from neuroscreen.session.timer import ManualScheduler
from neuroscreen.utils.logger import debug, info, warn

P = AssessmentPhase

_RATIO_FIELDS = {
    "asymmetry": (
        "eye_asymmetry",
        "mouth_asymmetry",
        "eyebrow_asymmetry",
        "overall_asymmetry",
    ),
    "posture": (
        "shoulder_imbalance",
        "head_tilt",
        "body_lean",
        "postural_stability",
        "coordination_score",
    ),
}


class AssessmentSession:

    def __init__(
        self,
        config: Optional[ScreeningConfig] = None,
        scheduler=None,
        capture: Optional[CaptureSink] = None,
    ):
        self.config = config or ScreeningConfig()
        self.scheduler = scheduler or ManualScheduler()

        self.controller = AssessmentPhaseController(
            self.scheduler, capture=capture, timing=self.config.timing
        )
        self.controller.add_listener(self._on_phase_change)

        self.face_analyzer = FacialAsymmetryAnalyzer()
        self.posture_analyzer = PostureAnalyzer()
        self.aggregator = RiskAggregator()

        self.face_slot = LatestFrameSlot("face")
        self.pose_slot = LatestFrameSlot("pose")
        self._last_analysis = {"face": None, "pose": None}

        self.stale_dropped = 0

    # -----------------------------------------------------
    # State access
    # -----------------------------------------------------

    @property
    def state(self) -> AssessmentState:
        return self.controller.state

    @property
    def phase(self) -> AssessmentPhase:
        return self.controller.phase

    # -----------------------------------------------------
    # Phase events
    # -----------------------------------------------------

    def start(self) -> bool:
        return self.controller.start()

    def skip(self) -> bool:
        return self.controller.skip()

    def complete_speech(self) -> bool:
        return self.controller.complete_speech()

    def reset(self) -> bool:
        return self.controller.reset()

    # -----------------------------------------------------
    # Landmark streams
    # -----------------------------------------------------

    def publish_face(self, frame) -> bool:
        return self._publish(self.face_slot, P.FACE, frame)

    def publish_pose(self, frame) -> bool:
        return self._publish(self.pose_slot, P.POSE, frame)

    def _publish(self, slot, phase, frame) -> bool:
        if self.phase != phase:
            debug(f"[SESSION] {slot.name} frame outside {phase.value} phase ignored")
            return False
        slot.publish(frame, self.phase, self.scheduler.time())
        return True

    def process_pending(self) -> int:
        """
        Analyze the newest pending frame of each stream if its throttle
        window has elapsed. Returns the number of results applied.
        """
        applied = 0
        if self._process(self.face_slot, self.face_analyzer, "asymmetry"):
            applied += 1
        if self._process(self.pose_slot, self.posture_analyzer, "posture"):
            applied += 1
        return applied

    def _process(self, slot, analyzer, field) -> bool:
        if not slot.has_pending:
            return False

        now = self.scheduler.time()
        last = self._last_analysis[slot.name]
        interval = self.config.timing.min_analysis_interval_ms / 1000.0
        if last is not None and now - last < interval:
            return False

        pending = slot.take()

        if pending.phase != self.phase:
            if self.config.session.stale_result_policy == "drop":
                self.stale_dropped += 1
                warn(
                    f"[SESSION] dropping {slot.name} frame captured in "
                    f"{pending.phase.value}, now {self.phase.value}"
                )
                return False
            debug(f"[SESSION] applying stale {slot.name} frame from {pending.phase.value}")

        if self.state.risk_frozen:
            return False

        self._last_analysis[slot.name] = now
        metrics = analyzer.analyze(pending.frame)
        self._apply(field, metrics)
        return True

    # -----------------------------------------------------
    # Speech
    # -----------------------------------------------------

    def submit_speech(self, metrics: SpeechMetrics) -> bool:
        if self.phase != P.SPEECH:
            warn(f"[SESSION] speech result outside speech phase ({self.phase.value}) ignored")
            return False
        self._apply("speech", metrics)
        return True

    # -----------------------------------------------------
    # Risk
    # -----------------------------------------------------

    def _apply(self, field, metrics):
        previous = getattr(self.state, field)
        setattr(self.state, field, metrics)

        if self._is_material_change(field, previous, metrics):
            self._recompute_risk()

    def _is_material_change(self, field, old, new) -> bool:
        if old is None or new is None:
            return old is not new
        if field == "speech":
            return old != new

        if old.data_quality != new.data_quality:
            return True
        if old.clinical_indicators != new.clinical_indicators:
            return True

        eps = self.config.session.material_change_epsilon
        return any(
            abs(getattr(old, name) - getattr(new, name)) > eps
            for name in _RATIO_FIELDS[field]
        )

    def _recompute_risk(self):
        if self.state.risk_frozen:
            return
        s = self.state
        s.risk = self.aggregator.aggregate(s.asymmetry, s.posture, s.speech)

    def _on_phase_change(self, old, new):
        # Frames waiting in a slot belong to the phase that just ended
        if new == P.INSTRUCTION:
            self.face_slot.clear()
            self.pose_slot.clear()
            self._last_analysis = {"face": None, "pose": None}
            return

        if new == P.RESULTS:
            self._recompute_risk()
            self.state.risk_frozen = True
            info(f"[SESSION] final risk {self.state.risk.overall_risk}")

    # -----------------------------------------------------
    # Persistence hand-off
    # -----------------------------------------------------

    def snapshot(self) -> SessionSnapshot:
        s = self.state
        return SessionSnapshot(
            asymmetry=s.asymmetry,
            posture=s.posture,
            speech=s.speech,
            risk=s.risk,
            timestamp=datetime.now(timezone.utc),
        )
