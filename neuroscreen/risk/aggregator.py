# neuroscreen/risk/aggregator.py

from typing import Iterable, Optional

from neuroscreen.models.asymmetry_model import AsymmetryMetrics
from neuroscreen.models.posture_model import PostureMetrics
from neuroscreen.models.risk_model import RiskAssessment
from neuroscreen.models.speech_model import SpeechMetrics
from neuroscreen.risk.recommendations import recommendations_for
from neuroscreen.utils.logger import debug


def aggregate_risks(levels: Iterable[str], elevated: int = 0) -> str:
    """
    Combine per-modality levels conservatively.

    Rules:
    - any HIGH => high
    - any MEDIUM, or >= 2 modalities with sub-threshold elevation => medium
    - otherwise low
    """
    overall = "low"

    for level in levels:
        level = (level or "").lower()
        if level == "high":
            return "high"
        if level == "medium":
            overall = "medium"

    if overall == "low" and elevated >= 2:
        overall = "medium"

    return overall


class RiskAggregator:
    """
    Multimodal screening risk from facial, postural and speech metrics.
    Pure: no state, no side effects.
    """

    # Facial overall asymmetry
    FACIAL_HIGH = 0.15
    FACIAL_MEDIUM = 0.08
    FACIAL_ELEVATED = 0.04

    # Postural shoulder imbalance
    POSTURE_HIGH = 0.12
    POSTURE_MEDIUM = 0.06
    POSTURE_ELEVATED = 0.03

    # Slurred-speech score (0-100) counted as elevation under a "low" label
    SPEECH_SLURRED_ELEVATED = 30.0

    def aggregate(
        self,
        asymmetry: AsymmetryMetrics,
        posture: PostureMetrics,
        speech: Optional[SpeechMetrics] = None,
    ) -> RiskAssessment:
        facial_level, facial_elev = self._classify(
            asymmetry.overall_asymmetry,
            self.FACIAL_HIGH, self.FACIAL_MEDIUM, self.FACIAL_ELEVATED,
        )
        posture_level, posture_elev = self._classify(
            posture.shoulder_imbalance,
            self.POSTURE_HIGH, self.POSTURE_MEDIUM, self.POSTURE_ELEVATED,
        )
        speech_level, speech_elev = self._classify_speech(speech)

        elevated = sum((facial_elev, posture_elev, speech_elev))
        overall = aggregate_risks((facial_level, posture_level, speech_level), elevated)

        findings = [
            *asymmetry.clinical_indicators,
            *posture.clinical_indicators,
            *(speech.clinical_indicators if speech else []),
        ]

        debug(
            f"[RISK] facial={facial_level} posture={posture_level} "
            f"speech={speech_level} elevated={elevated} -> {overall}"
        )

        return RiskAssessment(
            overall_risk=overall,
            findings=findings,
            modality_risks={
                "facial": facial_level,
                "postural": posture_level,
                "speech": speech_level,
            },
            recommendations=recommendations_for(overall),
        )

    @staticmethod
    def _classify(value, high, medium, elevated):
        """Return (level, elevated_below_medium)."""
        if value > high:
            return "high", False
        if value > medium:
            return "medium", False
        return "low", value > elevated

    def _classify_speech(self, speech: Optional[SpeechMetrics]):
        if speech is None:
            return "low", False

        if speech.overall_risk != "low":
            return speech.overall_risk, False

        return "low", speech.slurred_speech_score > self.SPEECH_SLURRED_ELEVATED
