# neuroscreen/analysis/posture.py

import math
from datetime import datetime, timezone

from neuroscreen.models.common import ANALYSIS_ERROR_NOTE, quality_from_confidence
from neuroscreen.models.landmark_model import LandmarkFrame
from neuroscreen.models.posture_model import PostureMetrics
from neuroscreen.utils.geometry import (
    clamp,
    deviation_from_vertical,
    distance,
    is_valid,
    midpoint,
    normalize,
    slope,
    to_vec,
    visibility,
)
from neuroscreen.utils.landmarks import POSE_LANDMARK_COUNT, PoseLandmarkMap
from neuroscreen.utils.logger import debug, exception


class PostureAnalyzer:
    """
    Per-frame upper-body posture from 33 pose landmarks.

    Signals:
    - shoulder imbalance (one side drooping)
    - head tilt (ear/nose axis and eye line)
    - body lean (spine against vertical)
    - coordination (left/right arm segment symmetry)
    """

    # Normalization ceilings
    SHOULDER_SLOPE_MAX_RAD = 0.36     # ~20 degrees
    HEAD_ANGLE_MAX_DEG = 15.0
    EYE_SLOPE_MAX_RAD = 0.26          # ~15 degrees
    SPINE_ANGLE_MAX_DEG = 10.0
    ARM_DIFF_PENALTY = 2.0

    # Stability weights
    SHOULDER_WEIGHT = 0.4
    HEAD_WEIGHT = 0.3
    LEAN_WEIGHT = 0.3

    # Screening cutoffs
    SHOULDER_THRESHOLD = 0.15
    HEAD_THRESHOLD = 0.12
    LEAN_THRESHOLD = 0.10
    COMBINED_THRESHOLD = 0.08
    STABILITY_FLOOR = 0.6

    # Confidence
    VISIBILITY_MIN = 0.5
    HIDDEN_KEY_PENALTY = 15
    MIN_VALID_LANDMARKS = 25
    MISSING_PENALTY = 2

    def analyze(self, frame) -> PostureMetrics:
        landmarks = frame.landmarks if isinstance(frame, LandmarkFrame) else frame

        if landmarks is None or len(landmarks) < POSE_LANDMARK_COUNT:
            return self.insufficient()

        try:
            return self._analyze(landmarks)
        except Exception as e:
            exception(f"[POSE] analysis failed: {e}")
            return self.failed(str(e))

    @staticmethod
    def insufficient() -> PostureMetrics:
        return PostureMetrics(data_quality="insufficient")

    @staticmethod
    def failed(reason: str) -> PostureMetrics:
        return PostureMetrics(
            data_quality="error",
            clinical_indicators=[ANALYSIS_ERROR_NOTE],
            error=reason,
        )

    # -----------------------------------------------------
    # Core
    # -----------------------------------------------------

    def _analyze(self, landmarks) -> PostureMetrics:
        pm = PoseLandmarkMap(landmarks)

        ls, rs = pm.shoulders_pair()
        lh, rh = pm.hips_pair()
        l_ear, r_ear = pm.pair("ear")
        l_eye, r_eye = pm.pair("eye")
        nose = pm.nose()

        # 1) Shoulders: line angle and height gap relative to width
        slope_imbalance = normalize(math.atan(slope(ls, rs)), self.SHOULDER_SLOPE_MAX_RAD)

        shoulder_width = distance(ls, rs)
        height_diff = 0.0
        if shoulder_width > 0:
            height_diff = clamp(abs(to_vec(ls)[1] - to_vec(rs)[1]) / shoulder_width)

        shoulder_imbalance = max(slope_imbalance, height_diff)

        # 2) Head: ear-midpoint -> nose against vertical, plus eye line
        head_angle = deviation_from_vertical(midpoint(l_ear, r_ear), nose)
        eye_tilt = normalize(math.atan(slope(l_eye, r_eye)), self.EYE_SLOPE_MAX_RAD)
        head_tilt = max(normalize(head_angle, self.HEAD_ANGLE_MAX_DEG), eye_tilt)

        # 3) Trunk: hip-midpoint -> shoulder-midpoint against vertical
        spine_angle = deviation_from_vertical(midpoint(lh, rh), midpoint(ls, rs))
        body_lean = normalize(spine_angle, self.SPINE_ANGLE_MAX_DEG)

        coordination = self._coordination(pm)
        stability = clamp(
            1.0
            - (
                self.SHOULDER_WEIGHT * shoulder_imbalance
                + self.HEAD_WEIGHT * head_tilt
                + self.LEAN_WEIGHT * body_lean
            )
        )

        confidence = self._confidence(pm)

        metrics = PostureMetrics(
            shoulder_imbalance=shoulder_imbalance,
            head_tilt=head_tilt,
            body_lean=body_lean,
            postural_stability=stability,
            coordination_score=coordination,
            confidence=confidence,
            data_quality=quality_from_confidence(confidence),
            detailed_metrics={
                "shoulder_height_diff": height_diff,
                "eye_tilt": eye_tilt,
                "head_angle": head_angle,
                "spine_angle": spine_angle,
                "shoulder_width": shoulder_width,
                "hip_width": distance(lh, rh),
            },
            landmark_quality={
                "shoulders_visible": pm.both_present("shoulder"),
                "hips_visible": pm.both_present("hip"),
                "head_visible": pm.both_present("ear") and is_valid(nose),
            },
            timestamp=datetime.now(timezone.utc),
        )
        metrics.clinical_indicators = self._clinical_indicators(metrics)

        debug(
            f"[POSE] shoulder={shoulder_imbalance:.3f} head={head_tilt:.3f} "
            f"lean={body_lean:.3f} stability={stability:.3f} conf={confidence:.0f}"
        )
        return metrics

    def _coordination(self, pm) -> float:
        ls, rs = pm.shoulders_pair()
        le, re = pm.pair("elbow")
        lw, rw = pm.pair("wrist")

        if not all(map(is_valid, (ls, rs, le, re))):
            return 1.0

        upper_diff = abs(distance(ls, le) - distance(rs, re))

        # Without both wrists there is nothing to compare
        if not (is_valid(lw) and is_valid(rw)):
            return 1.0

        fore_diff = abs(distance(le, lw) - distance(re, rw))
        return clamp(1.0 - (upper_diff + fore_diff) * self.ARM_DIFF_PENALTY)

    def _confidence(self, pm) -> float:
        score = 100.0

        hidden = 0
        for idx in pm.KEY_POINTS:
            p = pm.point(idx)
            if not is_valid(p):
                hidden += 1
                continue
            vis = visibility(p)
            if vis is not None and vis <= self.VISIBILITY_MIN:
                hidden += 1
        score -= hidden * self.HIDDEN_KEY_PENALTY

        valid = sum(1 for p in pm.landmarks[:POSE_LANDMARK_COUNT] if is_valid(p))
        if valid < self.MIN_VALID_LANDMARKS:
            score -= (self.MIN_VALID_LANDMARKS - valid) * self.MISSING_PENALTY

        return clamp(score, 0.0, 100.0)

    def _clinical_indicators(self, m: PostureMetrics):
        indicators = []

        if m.shoulder_imbalance > self.SHOULDER_THRESHOLD:
            indicators.append("Significant shoulder imbalance detected")
        if m.head_tilt > self.HEAD_THRESHOLD:
            indicators.append("Possible head tilt or neck weakness")
        if m.body_lean > self.LEAN_THRESHOLD:
            indicators.append("Postural instability or trunk weakness")
        if (
            m.shoulder_imbalance > self.COMBINED_THRESHOLD
            and m.head_tilt > self.COMBINED_THRESHOLD
        ):
            indicators.append("Combined upper body asymmetry")
        if m.postural_stability < self.STABILITY_FLOOR:
            indicators.append("Significant postural instability")

        return indicators
