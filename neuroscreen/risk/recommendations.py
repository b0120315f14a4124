# neuroscreen/risk/recommendations.py

BASE_RECOMMENDATIONS = [
    "Continue regular health monitoring",
    "Maintain healthy lifestyle habits",
    "Stay hydrated and exercise regularly",
]

_BY_LEVEL = {
    "high": [
        "Consult healthcare provider immediately",
        "Monitor symptoms closely",
        "Avoid strenuous activities until cleared",
    ],
    "medium": [
        "Schedule a check-up with your healthcare provider",
        "Repeat this screening in a few days",
    ],
    "low": [],
}


def recommendations_for(level: str):
    """Tiered guidance for an overall risk level; most urgent first."""
    return [*_BY_LEVEL.get(level, []), *BASE_RECOMMENDATIONS]
