from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime

from neuroscreen.models.common import DataQuality


class AsymmetryMetrics(BaseModel):
    eye_asymmetry: float = Field(0.0, ge=0.0, le=1.0)
    mouth_asymmetry: float = Field(0.0, ge=0.0, le=1.0)
    eyebrow_asymmetry: float = Field(0.0, ge=0.0, le=1.0)
    overall_asymmetry: float = Field(0.0, ge=0.0, le=1.0)

    confidence: float = Field(0.0, ge=0.0, le=100.0)
    data_quality: DataQuality = "insufficient"

    clinical_indicators: List[str] = Field(default_factory=list)

    # Per-feature sub-ratios feeding the group means
    detailed_metrics: Dict[str, float] = Field(default_factory=dict)

    error: Optional[str] = None
    timestamp: Optional[datetime] = None
