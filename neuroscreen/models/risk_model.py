from pydantic import BaseModel, Field
from typing import Dict, List

from neuroscreen.models.common import RiskLevel


class RiskAssessment(BaseModel):
    """
    Aggregated screening risk.

    - overall_risk: low / medium / high
    - findings: facial, then postural, then speech indicators (duplicates kept)
    - modality_risks: per-modality level that fed the aggregate
    - recommendations: tiered guidance for the overall level
    """

    overall_risk: RiskLevel = "low"
    findings: List[str] = Field(default_factory=list)
    modality_risks: Dict[str, RiskLevel] = Field(default_factory=dict)
    recommendations: List[str] = Field(default_factory=list)
