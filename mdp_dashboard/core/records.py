from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .scoring import composite_score, round_score


FUNCTIONS: Tuple[str, ...] = ("Planning", "Digital Merch", "Replenishment", "Member's Mark")

# Labels of the two function-specific questions, in functionSpecific1/2 order.
FUNCTION_QUESTIONS: Dict[str, Tuple[str, str]] = {
    "Planning": ("Financial Planning", "Math & Analytics"),
    "Digital Merch": ("Digital Framework", "SEO"),
    "Replenishment": ("Forecasting", "Inventory Management"),
    "Member's Mark": ("Brand Strategy", "Brand Guidelines"),
}

ASSESSMENT_AREAS: Tuple[str, ...] = (
    "Job Knowledge",
    "Quality of Work",
    "Communication Skills & Teamwork",
    "Initiative & Productivity",
)

REQUIRED_FIELDS: Tuple[str, ...] = ("mdpName", "function", "managerName", "rotation")
CORE_RATINGS: Tuple[str, ...] = ("jobKnowledge", "qualityOfWork", "communication", "initiative")
OPTIONAL_RATINGS: Tuple[str, ...] = ("functionSpecific1", "functionSpecific2")

RATING_MIN = 1
RATING_MAX = 5


class ValidationFault(ValueError):
    """A submission was rejected before any record was built."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


@dataclass(frozen=True)
class Submission:
    mdp_name: str
    function: str
    manager_name: str
    rotation: str
    job_knowledge: int
    quality_of_work: int
    communication: int
    initiative: int
    function_specific_1: Optional[int] = None
    function_specific_2: Optional[int] = None


@dataclass(frozen=True)
class ResponseRecord:
    id: str
    mdp_name: str
    function: str
    manager_name: str
    rotation: str
    job_knowledge: int
    quality_of_work: int
    communication: int
    initiative: int
    function_specific_1: Optional[int]
    function_specific_2: Optional[int]
    composite_score: float
    timestamp: str

    @property
    def core_ratings(self) -> Tuple[int, int, int, int]:
        return (self.job_knowledge, self.quality_of_work, self.communication, self.initiative)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ResponseRecord":
        """Build a record from its persisted layout. Unknown keys are ignored."""
        score = raw.get("compositeScore")
        if score is None:
            # older files stored no score; derive it once on load
            score = round_score(composite_score(
                raw.get("jobKnowledge"), raw.get("qualityOfWork"),
                raw.get("communication"), raw.get("initiative"),
            ))
        return cls(
            id=str(raw["id"]),
            mdp_name=str(raw.get("mdpName", "")),
            function=str(raw.get("function", "")),
            manager_name=str(raw.get("managerName", "")),
            rotation=str(raw.get("rotation", "")),
            job_knowledge=_int_or_zero(raw.get("jobKnowledge")),
            quality_of_work=_int_or_zero(raw.get("qualityOfWork")),
            communication=_int_or_zero(raw.get("communication")),
            initiative=_int_or_zero(raw.get("initiative")),
            function_specific_1=_int_or_none(raw.get("functionSpecific1")),
            function_specific_2=_int_or_none(raw.get("functionSpecific2")),
            composite_score=float(score),
            timestamp=str(raw.get("timestamp", "")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "mdpName": self.mdp_name,
            "function": self.function,
            "managerName": self.manager_name,
            "rotation": self.rotation,
            "jobKnowledge": self.job_knowledge,
            "qualityOfWork": self.quality_of_work,
            "communication": self.communication,
            "initiative": self.initiative,
            "functionSpecific1": self.function_specific_1,
            "functionSpecific2": self.function_specific_2,
            "compositeScore": self.composite_score,
            "timestamp": self.timestamp,
        }


def _int_or_zero(value: Any) -> int:
    parsed = _int_or_none(value)
    return 0 if parsed is None else parsed


def _int_or_none(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return None


def _parse_rating(name: str, value: Any, problems: List[str]) -> Optional[int]:
    if isinstance(value, bool):
        problems.append(f"{name} must be a whole number")
        return None
    try:
        num = float(str(value).strip())
    except (TypeError, ValueError):
        problems.append(f"{name} must be a whole number")
        return None
    if not num.is_integer():
        problems.append(f"{name} must be a whole number")
        return None
    rating = int(num)
    if rating < RATING_MIN or rating > RATING_MAX:
        problems.append(f"{name} must be between {RATING_MIN} and {RATING_MAX}")
        return None
    return rating


def validate_submission(raw: Dict[str, Any], require_function_specific: bool = False) -> Submission:
    """Check raw form input and normalize it.

    Raises ValidationFault listing every problem found: empty required
    fields, an unknown function, and missing, non-integer or out-of-range
    ratings. With require_function_specific, both function-specific ratings
    must be present once a known function is chosen.
    """
    problems: List[str] = []

    text: Dict[str, str] = {}
    for field in REQUIRED_FIELDS:
        value = raw.get(field)
        value = "" if value is None else str(value).strip()
        if not value:
            problems.append(f"{field} is required")
        text[field] = value

    if text["function"] and text["function"] not in FUNCTIONS:
        problems.append(f"function must be one of: {', '.join(FUNCTIONS)}")

    ratings: Dict[str, Optional[int]] = {}
    for field in CORE_RATINGS:
        value = raw.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            problems.append(f"{field} is required")
            ratings[field] = None
            continue
        ratings[field] = _parse_rating(field, value, problems)

    for field in OPTIONAL_RATINGS:
        value = raw.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            if require_function_specific and text["function"] in FUNCTIONS:
                problems.append(f"{field} is required")
            ratings[field] = None
            continue
        ratings[field] = _parse_rating(field, value, problems)

    if problems:
        raise ValidationFault(problems)

    return Submission(
        mdp_name=text["mdpName"],
        function=text["function"],
        manager_name=text["managerName"],
        rotation=text["rotation"],
        job_knowledge=ratings["jobKnowledge"],
        quality_of_work=ratings["qualityOfWork"],
        communication=ratings["communication"],
        initiative=ratings["initiative"],
        function_specific_1=ratings["functionSpecific1"],
        function_specific_2=ratings["functionSpecific2"],
    )
