from __future__ import annotations
from typing import Any, Dict
import math


# Job knowledge carries half the weight; the rest is split across the other areas.
WEIGHTS: Dict[str, float] = {
    "job_knowledge": 0.50,
    "quality_of_work": 0.20,
    "communication": 0.15,
    "initiative": 0.15,
}


def _as_number(value: Any) -> float:
    """Coerce a rating to float; anything unusable counts as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        num = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(num) or math.isinf(num):
        return 0.0
    return num


def composite_score(job_knowledge: Any, quality_of_work: Any, communication: Any, initiative: Any) -> float:
    """Weighted sum of the four core ratings, at full precision.

    Inputs are not range-checked here; submissions are validated before a
    record is built.
    """
    return (
        _as_number(job_knowledge) * WEIGHTS["job_knowledge"]
        + _as_number(quality_of_work) * WEIGHTS["quality_of_work"]
        + _as_number(communication) * WEIGHTS["communication"]
        + _as_number(initiative) * WEIGHTS["initiative"]
    )


def round_score(value: float) -> float:
    """Round a composite score for storage. Apply once, when the record is created."""
    return round(float(value), 2)


def score_class(score: float) -> str:
    if score >= 4.0:
        return "score-high"
    if score >= 3.0:
        return "score-medium"
    return "score-low"


def score_label(score: float) -> str:
    return {"score-high": "High", "score-medium": "Medium", "score-low": "Low"}[score_class(score)]
