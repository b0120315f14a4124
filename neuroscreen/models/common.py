from typing import Literal

DataQuality = Literal["excellent", "good", "fair", "poor", "insufficient", "error"]
RiskLevel = Literal["low", "medium", "high"]

# Qualities under which every ratio is forced to zero
DEGRADED_QUALITIES = ("insufficient", "error")

ANALYSIS_ERROR_NOTE = "Analysis error - please retry"


def quality_from_confidence(confidence: float) -> DataQuality:
    if confidence > 80:
        return "excellent"
    if confidence > 60:
        return "good"
    if confidence > 40:
        return "fair"
    return "poor"
