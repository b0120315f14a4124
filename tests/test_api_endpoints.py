"""
HTTP adapter tests.

Uses the FastAPI TestClient; no running server needed. The client is
entered as a context manager so every request shares one event loop, which
is where session timers are scheduled.
"""

import sys
import os
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from tests.fixtures.synthetic_landmarks import (
    make_dropped_shoulder_pose,
    make_drooping_face,
    make_face_landmarks,
)


def get_app_client():
    """Create the app client lazily to avoid import-time side effects."""
    from neuroscreen.main import app
    client = TestClient(app)
    client.__enter__()
    return client


class ApiTestCase(unittest.TestCase):

    def setUp(self):
        self.client = get_app_client()
        self.addCleanup(self.client.__exit__, None, None, None)

    def _create(self):
        r = self.client.post("/sessions")
        self.assertEqual(r.status_code, 200)
        return r.json()["session_id"]

    def _post(self, sid, event):
        return self.client.post(f"/sessions/{sid}/{event}")


class TestHealth(ApiTestCase):

    def test_health(self):
        r = self.client.get("/")
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["face_seconds"], 10)
        self.assertIn("active_sessions", body)


class TestLifecycle(ApiTestCase):

    def test_create_returns_instruction_state(self):
        r = self.client.post("/sessions")
        body = r.json()
        self.assertEqual(body["current_phase"], "instruction")
        self.assertEqual(body["completed_phases"], [])
        self.assertEqual(body["risk"]["overall_risk"], "low")

    def test_start_and_skip(self):
        sid = self._create()
        body = self._post(sid, "start").json()
        self.assertEqual(body["current_phase"], "face")
        self.assertEqual(body["phase_timer"], 10)

        body = self._post(sid, "skip").json()
        self.assertEqual(body["current_phase"], "pose")
        self.assertEqual(body["phase_timer"], 15)

    def test_invalid_event_is_conflict(self):
        sid = self._create()
        r = self._post(sid, "skip")
        self.assertEqual(r.status_code, 409)
        r = self._post(sid, "speech-complete")
        self.assertEqual(r.status_code, 409)

    def test_unknown_session_is_404(self):
        self.assertEqual(self.client.get("/sessions/nope").status_code, 404)
        self.assertEqual(self._post("nope", "start").status_code, 404)

    def test_delete(self):
        sid = self._create()
        self._post(sid, "start")
        r = self.client.delete(f"/sessions/{sid}")
        self.assertTrue(r.json()["deleted"])
        self.assertEqual(self.client.get(f"/sessions/{sid}").status_code, 404)

    def test_reset(self):
        sid = self._create()
        self._post(sid, "start")
        body = self._post(sid, "reset").json()
        self.assertEqual(body["current_phase"], "instruction")
        self.assertEqual(body["completed_phases"], [])


class TestFrames(ApiTestCase):

    def test_face_frame_analyzed(self):
        sid = self._create()
        self._post(sid, "start")

        r = self.client.post(f"/sessions/{sid}/face", json={"landmarks": make_drooping_face()})
        self.assertEqual(r.status_code, 200)
        body = r.json()
        self.assertEqual(body["applied"], 1)
        self.assertIn("Possible mouth droop", body["metrics"]["clinical_indicators"])
        self.assertEqual(body["risk"]["overall_risk"], "high")

    def test_frame_in_wrong_phase_is_conflict(self):
        sid = self._create()
        r = self.client.post(f"/sessions/{sid}/face", json={"landmarks": make_face_landmarks()})
        self.assertEqual(r.status_code, 409)

        self._post(sid, "start")
        r = self.client.post(f"/sessions/{sid}/pose", json={"landmarks": make_dropped_shoulder_pose()})
        self.assertEqual(r.status_code, 409)

    def test_pose_frame_analyzed(self):
        sid = self._create()
        self._post(sid, "start")
        self._post(sid, "skip")

        r = self.client.post(f"/sessions/{sid}/pose", json={"landmarks": make_dropped_shoulder_pose()})
        body = r.json()
        self.assertEqual(body["applied"], 1)
        self.assertGreater(body["metrics"]["shoulder_imbalance"], 0.12)

    def test_short_frame_reports_insufficient(self):
        sid = self._create()
        self._post(sid, "start")
        r = self.client.post(f"/sessions/{sid}/face", json={"landmarks": make_face_landmarks()[:10]})
        self.assertEqual(r.json()["metrics"]["data_quality"], "insufficient")


class TestSpeechAndResults(ApiTestCase):

    def _to_speech(self):
        sid = self._create()
        self._post(sid, "start")
        self._post(sid, "skip")
        self._post(sid, "skip")
        return sid

    def test_speech_submission(self):
        sid = self._to_speech()
        r = self.client.post(
            f"/sessions/{sid}/speech",
            json={"slurred_speech_score": 55, "overall_risk": "Moderate"},
        )
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["risk"]["overall_risk"], "medium")

    def test_speech_outside_phase_is_conflict(self):
        sid = self._create()
        r = self.client.post(f"/sessions/{sid}/speech", json={"overall_risk": "low"})
        self.assertEqual(r.status_code, 409)

    def test_invalid_speech_payload(self):
        sid = self._to_speech()
        r = self.client.post(f"/sessions/{sid}/speech", json={"coherence_score": 150})
        self.assertEqual(r.status_code, 422)

    def test_results_snapshot(self):
        sid = self._to_speech()
        self.client.post(f"/sessions/{sid}/speech", json={"overall_risk": "critical"})
        body = self._post(sid, "speech-complete").json()
        self.assertEqual(body["current_phase"], "results")
        self.assertTrue(body["risk_frozen"])

        snap = self.client.get(f"/sessions/{sid}/snapshot").json()
        self.assertEqual(snap["risk"]["overall_risk"], "high")
        self.assertEqual(snap["speech"]["overall_risk"], "high")
        self.assertIn("timestamp", snap)


if __name__ == "__main__":
    unittest.main()
