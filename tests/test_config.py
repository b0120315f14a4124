"""
Configuration loading tests.
"""

import sys
import os
import tempfile
import unittest
from unittest.mock import patch

from pydantic import ValidationError

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from neuroscreen.config import CONFIG_ENV_VAR, ScreeningConfig, load_config


def _write_yaml(text):
    f = tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False)
    f.write(text)
    f.close()
    return f.name


class TestLoadConfig(unittest.TestCase):

    def setUp(self):
        self._paths = []

    def tearDown(self):
        for p in self._paths:
            os.unlink(p)

    def _tmp(self, text):
        path = _write_yaml(text)
        self._paths.append(path)
        return path

    def test_packaged_defaults(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop(CONFIG_ENV_VAR, None)
            cfg = load_config()
        self.assertEqual(cfg.timing.face_seconds, 10)
        self.assertEqual(cfg.timing.pose_seconds, 15)
        self.assertEqual(cfg.timing.min_analysis_interval_ms, 100)
        self.assertEqual(cfg.session.stale_result_policy, "drop")

    def test_explicit_path(self):
        path = self._tmp("timing:\n  face_seconds: 4\n")
        cfg = load_config(path)
        self.assertEqual(cfg.timing.face_seconds, 4)
        # Unset keys keep their defaults
        self.assertEqual(cfg.timing.pose_seconds, 15)

    def test_env_var_path(self):
        path = self._tmp("session:\n  stale_result_policy: apply\n")
        with patch.dict(os.environ, {CONFIG_ENV_VAR: path}):
            cfg = load_config()
        self.assertEqual(cfg.session.stale_result_policy, "apply")

    def test_empty_file_gives_defaults(self):
        cfg = load_config(self._tmp(""))
        self.assertEqual(cfg, ScreeningConfig())

    def test_invalid_values_rejected(self):
        with self.assertRaises(ValidationError):
            load_config(self._tmp("timing:\n  face_seconds: 0\n"))
        with self.assertRaises(ValidationError):
            load_config(self._tmp("session:\n  stale_result_policy: queue\n"))

    def test_missing_file_raises(self):
        with self.assertRaises(FileNotFoundError):
            load_config("/nonexistent/screening.yaml")


if __name__ == "__main__":
    unittest.main()
