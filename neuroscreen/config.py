"""
Session configuration.

Values come from (first match wins):
  1. an explicit path passed to load_config()
  2. the file named by NEUROSCREEN_CONFIG
  3. the packaged screening.yaml

Screening thresholds are NOT configurable here; they are fixed class
constants on the analyzers and the aggregator.
"""

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field

from neuroscreen.utils.logger import debug

DEFAULT_CONFIG_PATH = Path(__file__).parent / "screening.yaml"
CONFIG_ENV_VAR = "NEUROSCREEN_CONFIG"


class TimingConfig(BaseModel):
    face_seconds: int = Field(10, gt=0)
    pose_seconds: int = Field(15, gt=0)
    min_analysis_interval_ms: int = Field(100, ge=0)


class SessionConfig(BaseModel):
    stale_result_policy: Literal["drop", "apply"] = "drop"
    material_change_epsilon: float = Field(0.01, ge=0.0)


class ScreeningConfig(BaseModel):
    timing: TimingConfig = Field(default_factory=TimingConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)


def load_config(path: Optional[str] = None) -> ScreeningConfig:
    cfg_path = Path(path or os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)

    with open(cfg_path, "r") as f:
        raw = yaml.safe_load(f) or {}

    debug(f"[CONFIG] loaded {cfg_path}")
    return ScreeningConfig.model_validate(raw)
