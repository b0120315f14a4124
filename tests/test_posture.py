"""
Posture analyzer tests on synthetic MediaPipe Pose landmarks.
"""

import sys
import os
import random
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from neuroscreen.analysis.posture import PostureAnalyzer
from tests.fixtures.synthetic_landmarks import (
    make_dropped_shoulder_pose,
    make_pose_landmarks,
)

RATIO_FIELDS = (
    "shoulder_imbalance", "head_tilt", "body_lean",
    "postural_stability", "coordination_score",
)


class TestUprightPose(unittest.TestCase):

    def setUp(self):
        self.m = PostureAnalyzer().analyze(make_pose_landmarks())

    def test_no_imbalance(self):
        self.assertAlmostEqual(self.m.shoulder_imbalance, 0.0, places=6)
        self.assertAlmostEqual(self.m.head_tilt, 0.0, places=6)
        self.assertAlmostEqual(self.m.body_lean, 0.0, places=6)

    def test_fully_stable_and_coordinated(self):
        self.assertAlmostEqual(self.m.postural_stability, 1.0, places=6)
        self.assertAlmostEqual(self.m.coordination_score, 1.0, places=6)
        self.assertEqual(self.m.clinical_indicators, [])

    def test_confidence_and_quality(self):
        self.assertEqual(self.m.confidence, 100.0)
        self.assertEqual(self.m.data_quality, "excellent")
        self.assertTrue(all(self.m.landmark_quality.values()))


class TestDroppedShoulder(unittest.TestCase):

    def test_shoulder_finding(self):
        m = PostureAnalyzer().analyze(make_dropped_shoulder_pose())
        self.assertGreater(m.shoulder_imbalance, 0.15)
        self.assertIn("Significant shoulder imbalance detected", m.clinical_indicators)

    def test_height_diff_over_width(self):
        m = PostureAnalyzer().analyze(make_dropped_shoulder_pose())
        # 0.15 drop over sqrt(0.30^2 + 0.15^2)
        self.assertAlmostEqual(m.detailed_metrics["shoulder_height_diff"], 0.15 / (0.1125 ** 0.5), places=6)

    def test_stability_follows_weights(self):
        m = PostureAnalyzer().analyze(make_dropped_shoulder_pose())
        expected = 1 - (0.4 * m.shoulder_imbalance + 0.3 * m.head_tilt + 0.3 * m.body_lean)
        self.assertAlmostEqual(m.postural_stability, max(0.0, expected), places=9)


class TestHeadAndTrunk(unittest.TestCase):

    def test_tilted_head(self):
        # Nose pushed sideways off the ear axis
        m = PostureAnalyzer().analyze(make_pose_landmarks({0: (0.53, 0.33)}))
        self.assertGreater(m.head_tilt, 0.12)
        self.assertIn("Possible head tilt or neck weakness", m.clinical_indicators)

    def test_eye_line_tilt(self):
        m = PostureAnalyzer().analyze(make_pose_landmarks({2: (0.47, 0.30), 5: (0.53, 0.27)}))
        self.assertGreater(m.detailed_metrics["eye_tilt"], 0.0)
        self.assertGreaterEqual(m.head_tilt, m.detailed_metrics["eye_tilt"])

    def test_trunk_lean(self):
        # Shoulders shifted right of the hips
        m = PostureAnalyzer().analyze(make_pose_landmarks({11: (0.40, 0.45), 12: (0.70, 0.45)}))
        self.assertGreater(m.body_lean, 0.10)
        self.assertIn("Postural instability or trunk weakness", m.clinical_indicators)

    def test_combined_upper_body(self):
        lm = make_pose_landmarks({11: (0.35, 0.44), 12: (0.65, 0.46), 0: (0.52, 0.33)})
        m = PostureAnalyzer().analyze(lm)
        self.assertGreater(m.shoulder_imbalance, 0.08)
        self.assertGreater(m.head_tilt, 0.08)
        self.assertIn("Combined upper body asymmetry", m.clinical_indicators)


class TestCoordination(unittest.TestCase):

    def test_uneven_forearms_lower_score(self):
        m = PostureAnalyzer().analyze(make_pose_landmarks({16: (0.72, 0.70)}))
        self.assertLess(m.coordination_score, 1.0)
        self.assertGreaterEqual(m.coordination_score, 0.0)

    def test_missing_wrists_skip_penalty(self):
        lm = make_pose_landmarks({13: (0.20, 0.60)})
        lm[15] = None
        m = PostureAnalyzer().analyze(lm)
        self.assertEqual(m.coordination_score, 1.0)


class TestConfidence(unittest.TestCase):

    def test_low_visibility_key_points(self):
        lm = make_pose_landmarks()
        lm[7]["visibility"] = 0.2
        lm[8]["visibility"] = 0.2
        m = PostureAnalyzer().analyze(lm)
        self.assertEqual(m.confidence, 70.0)
        self.assertEqual(m.data_quality, "good")

    def test_missing_visibility_counts_as_visible(self):
        lm = make_pose_landmarks()
        for p in lm:
            p.pop("visibility")
        self.assertEqual(PostureAnalyzer().analyze(lm).confidence, 100.0)

    def test_sparse_frame(self):
        lm = make_pose_landmarks()
        for i in range(17, 33):
            lm[i] = None
        m = PostureAnalyzer().analyze(lm)
        # hips hidden (-30), 17 valid of 25 (-16)
        self.assertEqual(m.confidence, 54.0)
        self.assertFalse(m.landmark_quality["hips_visible"])


class TestDegradedInput(unittest.TestCase):

    def test_short_frame(self):
        m = PostureAnalyzer().analyze(make_pose_landmarks()[:20])
        self.assertEqual(m.data_quality, "insufficient")
        for name in RATIO_FIELDS:
            self.assertEqual(getattr(m, name), 0.0)
        self.assertEqual(m.confidence, 0.0)
        self.assertEqual(m.clinical_indicators, [])

    def test_internal_fault(self):
        with patch.object(PostureAnalyzer, "_coordination", side_effect=TypeError("bad")):
            m = PostureAnalyzer().analyze(make_pose_landmarks())
        self.assertEqual(m.data_quality, "error")
        self.assertEqual(m.clinical_indicators, ["Analysis error - please retry"])
        for name in RATIO_FIELDS:
            self.assertEqual(getattr(m, name), 0.0)

    def test_random_frames_stay_in_range(self):
        rng = random.Random(11)
        analyzer = PostureAnalyzer()
        for _ in range(50):
            lm = [
                {"x": rng.random(), "y": rng.random(), "visibility": rng.random()}
                for _ in range(33)
            ]
            m = analyzer.analyze(lm)
            for name in RATIO_FIELDS:
                self.assertTrue(0.0 <= getattr(m, name) <= 1.0, name)
            self.assertTrue(0.0 <= m.confidence <= 100.0)


if __name__ == "__main__":
    unittest.main()
