from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime

from neuroscreen.models.common import DataQuality


class PostureMetrics(BaseModel):
    shoulder_imbalance: float = Field(0.0, ge=0.0, le=1.0)
    head_tilt: float = Field(0.0, ge=0.0, le=1.0)
    body_lean: float = Field(0.0, ge=0.0, le=1.0)

    # Higher is better for these two
    postural_stability: float = Field(0.0, ge=0.0, le=1.0)
    coordination_score: float = Field(0.0, ge=0.0, le=1.0)

    confidence: float = Field(0.0, ge=0.0, le=100.0)
    data_quality: DataQuality = "insufficient"

    clinical_indicators: List[str] = Field(default_factory=list)
    detailed_metrics: Dict[str, float] = Field(default_factory=dict)
    landmark_quality: Dict[str, bool] = Field(default_factory=dict)

    error: Optional[str] = None
    timestamp: Optional[datetime] = None
