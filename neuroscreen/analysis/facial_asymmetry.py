# neuroscreen/analysis/facial_asymmetry.py

from datetime import datetime, timezone

from neuroscreen.models.asymmetry_model import AsymmetryMetrics
from neuroscreen.models.common import ANALYSIS_ERROR_NOTE, quality_from_confidence
from neuroscreen.models.landmark_model import LandmarkFrame
from neuroscreen.utils.geometry import (
    asymmetry_ratio,
    clamp,
    distance,
    is_valid,
    to_vec,
)
from neuroscreen.utils.landmarks import FACE_LANDMARK_COUNT, FaceLandmarkMap
from neuroscreen.utils.logger import debug, exception


class FacialAsymmetryAnalyzer:
    """
    Per-frame facial asymmetry from 468 face-mesh landmarks.

    Bilateral distances are taken against a midline (mean x of forehead,
    nose tip and chin) rather than point-to-point across the face, which
    keeps the ratios stable under moderate head yaw.
    """

    # Group weights for overall asymmetry
    EYE_WEIGHT = 0.4
    MOUTH_WEIGHT = 0.4
    EYEBROW_WEIGHT = 0.2

    # Screening cutoffs (not diagnostic)
    OVERALL_THRESHOLD = 0.15
    EYE_THRESHOLD = 0.12
    MOUTH_THRESHOLD = 0.10
    EYEBROW_THRESHOLD = 0.08

    # Confidence deductions
    MIN_VALID_LANDMARKS = 400
    DROPOUT_PENALTY = 0.2
    FRONTAL_TOLERANCE = 0.05
    FRONTAL_PENALTY = 200
    FACE_WIDTH_RANGE = (0.1, 0.8)
    FACE_SIZE_PENALTY = 20

    def analyze(self, frame) -> AsymmetryMetrics:
        landmarks = frame.landmarks if isinstance(frame, LandmarkFrame) else frame

        if landmarks is None or len(landmarks) < FACE_LANDMARK_COUNT:
            return self.insufficient()

        try:
            return self._analyze(landmarks)
        except Exception as e:
            exception(f"[FACE] analysis failed: {e}")
            return self.failed(str(e))

    # -----------------------------------------------------
    # Canonical degraded results
    # -----------------------------------------------------

    @staticmethod
    def insufficient() -> AsymmetryMetrics:
        return AsymmetryMetrics(data_quality="insufficient")

    @staticmethod
    def failed(reason: str) -> AsymmetryMetrics:
        return AsymmetryMetrics(
            data_quality="error",
            clinical_indicators=[ANALYSIS_ERROR_NOTE],
            error=reason,
        )

    # -----------------------------------------------------
    # Core
    # -----------------------------------------------------

    def _analyze(self, landmarks) -> AsymmetryMetrics:
        fm = FaceLandmarkMap(landmarks)

        forehead = fm.point(fm.FOREHEAD_MID)
        nose_tip = fm.point(fm.NOSE_TIP)
        chin = fm.point(fm.CHIN_BOTTOM)

        midline_x = self._midline_x(forehead, nose_tip, chin)

        eye = self._eye_ratios(fm, midline_x)
        mouth = self._mouth_ratios(fm, midline_x)
        brow = self._eyebrow_ratios(fm, forehead, chin)

        eye_asym = _mean(eye.values())
        mouth_asym = _mean(mouth.values())
        brow_asym = _mean(brow.values())

        overall = clamp(
            self.EYE_WEIGHT * eye_asym
            + self.MOUTH_WEIGHT * mouth_asym
            + self.EYEBROW_WEIGHT * brow_asym
        )

        confidence = self._confidence(fm)

        metrics = AsymmetryMetrics(
            eye_asymmetry=eye_asym,
            mouth_asymmetry=mouth_asym,
            eyebrow_asymmetry=brow_asym,
            overall_asymmetry=overall,
            confidence=confidence,
            data_quality=quality_from_confidence(confidence),
            detailed_metrics={**eye, **mouth, **brow},
            timestamp=datetime.now(timezone.utc),
        )
        metrics.clinical_indicators = self._clinical_indicators(metrics)

        debug(
            f"[FACE] eye={eye_asym:.3f} mouth={mouth_asym:.3f} "
            f"brow={brow_asym:.3f} overall={overall:.3f} conf={confidence:.0f}"
        )
        return metrics

    @staticmethod
    def _midline_x(*axial):
        xs = [to_vec(p)[0] for p in axial if is_valid(p)]
        return sum(xs) / len(xs) if xs else 0.0

    def _eye_ratios(self, fm, midline_x):
        l_outer, r_outer = fm.pair("eye_outer")
        l_inner, r_inner = fm.pair("eye_inner")
        l_top, r_top = fm.pair("eye_top")
        l_bot, r_bot = fm.pair("eye_bottom")
        l_up, r_up = fm.pair("upper_lid")
        l_low, r_low = fm.pair("lower_lid")

        return {
            "eye_width_asymmetry": asymmetry_ratio(
                distance(l_outer, l_inner), distance(r_outer, r_inner)
            ),
            "eye_height_asymmetry": asymmetry_ratio(
                distance(l_top, l_bot), distance(r_top, r_bot)
            ),
            "eyelid_asymmetry": asymmetry_ratio(
                distance(l_up, l_low), distance(r_up, r_low)
            ),
            "eye_position_asymmetry": asymmetry_ratio(
                _offset_from_midline(midline_x, l_outer, l_inner),
                _offset_from_midline(midline_x, r_outer, r_inner),
            ),
        }

    def _mouth_ratios(self, fm, midline_x):
        out = {}
        for key, name in (
            ("mouth_corner", "mouth_corner_asymmetry"),
            ("upper_lip", "upper_lip_asymmetry"),
            ("lower_lip", "lower_lip_asymmetry"),
        ):
            left, right = fm.pair(key)
            out[name] = asymmetry_ratio(
                _offset_from_midline(midline_x, left),
                _offset_from_midline(midline_x, right),
            )
        return out

    def _eyebrow_ratios(self, fm, forehead, chin):
        l_outer, r_outer = fm.pair("brow_outer")
        l_inner, r_inner = fm.pair("brow_inner")

        length_asym = asymmetry_ratio(
            distance(l_outer, l_inner), distance(r_outer, r_inner)
        )

        height_asym = 0.0
        face_height = distance(forehead, chin)
        if face_height > 0 and all(map(is_valid, (l_outer, l_inner, r_outer, r_inner))):
            left_y = (to_vec(l_outer)[1] + to_vec(l_inner)[1]) / 2
            right_y = (to_vec(r_outer)[1] + to_vec(r_inner)[1]) / 2
            height_asym = clamp(abs(left_y - right_y) / face_height)

        return {
            "eyebrow_length_asymmetry": length_asym,
            "eyebrow_height_asymmetry": height_asym,
        }

    def _confidence(self, fm) -> float:
        score = 100.0

        valid = sum(1 for p in fm.landmarks[:FACE_LANDMARK_COUNT] if is_valid(p))
        if valid < self.MIN_VALID_LANDMARKS:
            score -= (FACE_LANDMARK_COUNT - valid) * self.DROPOUT_PENALTY

        nose = fm.point(fm.NOSE_BRIDGE)
        left_edge = fm.point(fm.FACE_LEFT_EDGE)
        right_edge = fm.point(fm.FACE_RIGHT_EDGE)

        if is_valid(nose) and is_valid(left_edge) and is_valid(right_edge):
            yaw = abs(distance(nose, left_edge) - distance(nose, right_edge))
            if yaw > self.FRONTAL_TOLERANCE:
                score -= yaw * self.FRONTAL_PENALTY

        face_width = distance(left_edge, right_edge)
        lo, hi = self.FACE_WIDTH_RANGE
        if face_width < lo or face_width > hi:
            score -= self.FACE_SIZE_PENALTY

        return clamp(score, 0.0, 100.0)

    def _clinical_indicators(self, m: AsymmetryMetrics):
        indicators = []

        if m.overall_asymmetry > self.OVERALL_THRESHOLD:
            indicators.append("Significant facial asymmetry detected")
        if m.eye_asymmetry > self.EYE_THRESHOLD:
            indicators.append("Possible eyelid droop (ptosis)")
        if m.mouth_asymmetry > self.MOUTH_THRESHOLD:
            indicators.append("Possible mouth droop")
        if m.eyebrow_asymmetry > self.EYEBROW_THRESHOLD:
            indicators.append("Forehead muscle weakness")

        return indicators


def _offset_from_midline(midline_x, *points):
    """Horizontal distance from the midline to the mean x of points."""
    vs = [to_vec(p) for p in points]
    if any(v is None for v in vs):
        return 0.0
    x = sum(v[0] for v in vs) / len(vs)
    return abs(midline_x - x)


def _mean(values):
    values = list(values)
    return clamp(sum(values) / len(values)) if values else 0.0
