from pydantic import BaseModel, Field, field_validator
from typing import List

from neuroscreen.models.common import RiskLevel

# Labels some speech analysers emit for the same three tiers
_RISK_ALIASES = {
    "moderate": "medium",
    "critical": "high",
}


class SpeechMetrics(BaseModel):
    """
    Produced by the external speech-analysis collaborator; read-only here.
    Scores are 0-100. Coherence and word finding: higher is better.
    Slurred speech: higher is worse.
    """
    coherence_score: float = Field(0.0, ge=0.0, le=100.0)
    slurred_speech_score: float = Field(0.0, ge=0.0, le=100.0)
    word_finding_score: float = Field(0.0, ge=0.0, le=100.0)
    overall_risk: RiskLevel = "low"

    clinical_indicators: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("overall_risk", mode="before")
    @classmethod
    def _normalize_risk(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
            return _RISK_ALIASES.get(v, v)
        return v
