# neuroscreen/session/controller.py
"""
Assessment phase state machine.

    instruction --start--> face --timer|skip--> pose --timer|skip--> speech
        ^                                                              |
        |                                                      complete_speech
        +------------------------- reset (any phase) <---- results <---+

Face and pose are timed and own the capture lifetime: capture starts on
entering them and stops on leaving them or on reset. Every transition
cancels the active timer before the phase changes.
"""

from typing import Callable, List, Optional

from neuroscreen.config import TimingConfig
from neuroscreen.models.session_model import AssessmentPhase, AssessmentState
from neuroscreen.session.capture import CaptureSink, LoggingCaptureSink
from neuroscreen.session.timer import CancellableTimer
from neuroscreen.utils.logger import info, warn

P = AssessmentPhase

CAPTURE_PHASES = (P.FACE, P.POSE)

PhaseListener = Callable[[AssessmentPhase, AssessmentPhase], None]


class AssessmentPhaseController:

    def __init__(
        self,
        scheduler,
        capture: Optional[CaptureSink] = None,
        timing: Optional[TimingConfig] = None,
    ):
        self.scheduler = scheduler
        self.capture = capture or LoggingCaptureSink()
        self.timing = timing or TimingConfig()

        self.state = AssessmentState()
        self._timer: Optional[CancellableTimer] = None
        self._listeners: List[PhaseListener] = []

    # -----------------------------------------------------
    # Queries
    # -----------------------------------------------------

    @property
    def phase(self) -> AssessmentPhase:
        return self.state.current_phase

    @property
    def timer(self) -> Optional[CancellableTimer]:
        return self._timer

    def duration_for(self, phase: AssessmentPhase) -> int:
        if phase == P.FACE:
            return self.timing.face_seconds
        if phase == P.POSE:
            return self.timing.pose_seconds
        return 0

    def add_listener(self, listener: PhaseListener):
        """listener(old_phase, new_phase) runs after every transition and reset."""
        self._listeners.append(listener)

    # -----------------------------------------------------
    # Events (all return False when not valid now)
    # -----------------------------------------------------

    def start(self) -> bool:
        if self.phase != P.INSTRUCTION:
            return self._reject("start")
        self._advance(P.FACE)
        return True

    def skip(self) -> bool:
        if self.phase not in CAPTURE_PHASES:
            return self._reject("skip")
        self._advance(self.phase.next())
        return True

    def complete_speech(self) -> bool:
        if self.phase != P.SPEECH:
            return self._reject("complete_speech")
        self._advance(P.RESULTS)
        return True

    def reset(self) -> bool:
        old = self.phase
        self._cancel_timer()

        if old in CAPTURE_PHASES:
            self.capture.stop_capture(old)

        self.state = AssessmentState()
        info(f"[PHASE] reset from {old.value}")
        self._notify(old, P.INSTRUCTION)
        return True

    # -----------------------------------------------------
    # Transitions
    # -----------------------------------------------------

    def _advance(self, target: AssessmentPhase):
        old = self.phase

        # Cancel first: no tick of the old phase may run after this point
        self._cancel_timer()

        if old in CAPTURE_PHASES:
            self.capture.stop_capture(old)

        self.state.completed_phases.add(old)
        self.state.current_phase = target
        self.state.phase_timer = self.duration_for(target)

        info(f"[PHASE] {old.value} -> {target.value}")

        if target in CAPTURE_PHASES:
            self.capture.start_capture(target)
            self._start_timer(target)

        self._notify(old, target)

    def _start_timer(self, phase: AssessmentPhase):
        timer = CancellableTimer(
            self.scheduler,
            self.duration_for(phase),
            on_expire=lambda: self._on_timer_expired(phase, timer),
            on_tick=lambda remaining: self._on_timer_tick(phase, timer, remaining),
            name=f"{phase.value}-timer",
        )
        self._timer = timer
        timer.start()

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer_tick(self, phase, timer, remaining):
        if timer is self._timer and self.phase == phase:
            self.state.phase_timer = remaining

    def _on_timer_expired(self, phase, timer):
        # Only the live timer of the live phase may advance
        if timer is not self._timer or self.phase != phase:
            warn(f"[PHASE] ignoring stale {phase.value} timer expiry")
            return
        self._advance(phase.next())

    def _notify(self, old, new):
        for listener in list(self._listeners):
            listener(old, new)

    def _reject(self, event: str) -> bool:
        warn(f"[PHASE] '{event}' not valid in {self.phase.value}")
        return False
