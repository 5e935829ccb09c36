from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
import math

from .filters import rotation_sort_key
from .records import ResponseRecord


BUCKET_COUNT = 8
BUCKET_WIDTH = 0.5
BUCKET_FLOOR = 1.0
BUCKET_LABELS: Tuple[str, ...] = tuple(
    f"{BUCKET_FLOOR + i * BUCKET_WIDTH:.1f}-{BUCKET_FLOOR + (i + 1) * BUCKET_WIDTH:.1f}"
    for i in range(BUCKET_COUNT)
)

NO_TOP_PERFORMER = "N/A"
RECENT_LIMIT = 5


@dataclass(frozen=True)
class CohortStats:
    total_responses: int
    unique_mdps: int
    unique_managers: int
    unique_functions: int
    average_score: float
    top_performer: str
    top_score: float
    top_record: Optional[ResponseRecord]
    assessment_area_averages: Tuple[float, float, float, float]
    function_breakdown: Dict[str, int]
    rotation_breakdown: Dict[str, int]
    function_averages: Dict[str, float]
    score_distribution: Tuple[int, ...]
    recent_submissions: Tuple[ResponseRecord, ...] = field(default_factory=tuple)
    last_submission: Optional[str] = None

    @property
    def total_mdps(self) -> int:
        # counts records, not people: one MDP across several rotations counts once per record
        return self.total_responses

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalResponses": self.total_responses,
            "totalMdps": self.total_mdps,
            "uniqueMDPs": self.unique_mdps,
            "uniqueManagers": self.unique_managers,
            "uniqueFunctions": self.unique_functions,
            "averageScore": self.average_score,
            "topPerformer": self.top_performer,
            "topScore": self.top_score,
            "assessmentAreaAverages": list(self.assessment_area_averages),
            "functionBreakdown": dict(self.function_breakdown),
            "rotationBreakdown": dict(self.rotation_breakdown),
            "functionAverages": dict(self.function_averages),
            "scoreDistribution": list(self.score_distribution),
            "recentSubmissions": [r.to_dict() for r in self.recent_submissions],
            "lastSubmission": self.last_submission,
        }


@dataclass(frozen=True)
class MdpComparison:
    mdp_a: str
    mdp_b: str
    areas_a: Tuple[float, float, float, float]
    areas_b: Tuple[float, float, float, float]
    average_a: float
    average_b: float
    count_a: int
    count_b: int

    @property
    def difference(self) -> Tuple[float, float, float, float]:
        return tuple(a - b for a, b in zip(self.areas_a, self.areas_b))


def bucket_index(score: float) -> int:
    idx = int(math.floor((score - BUCKET_FLOOR) / BUCKET_WIDTH))
    return min(max(idx, 0), BUCKET_COUNT - 1)


def score_distribution(records: Iterable[ResponseRecord]) -> Tuple[int, ...]:
    buckets = [0] * BUCKET_COUNT
    for r in records:
        buckets[bucket_index(r.composite_score)] += 1
    return tuple(buckets)


def area_averages(records: Sequence[ResponseRecord]) -> Tuple[float, float, float, float]:
    if not records:
        return (0.0, 0.0, 0.0, 0.0)
    totals = [0, 0, 0, 0]
    for r in records:
        for i, rating in enumerate(r.core_ratings):
            totals[i] += rating
    n = len(records)
    return tuple(t / n for t in totals)


def average_score(records: Sequence[ResponseRecord]) -> float:
    if not records:
        return 0.0
    return sum(r.composite_score for r in records) / len(records)


def function_breakdown(records: Iterable[ResponseRecord]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for r in records:
        counts[r.function] = counts.get(r.function, 0) + 1
    return counts


def rotation_breakdown(records: Iterable[ResponseRecord]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for r in records:
        counts[r.rotation] = counts.get(r.rotation, 0) + 1
    return counts


def function_averages(records: Iterable[ResponseRecord]) -> Dict[str, float]:
    grouped: Dict[str, List[float]] = {}
    for r in records:
        grouped.setdefault(r.function, []).append(r.composite_score)
    return {fn: sum(scores) / len(scores) for fn, scores in grouped.items()}


def top_record(records: Sequence[ResponseRecord]) -> Optional[ResponseRecord]:
    """Highest composite score; ties go to the earliest record."""
    best: Optional[ResponseRecord] = None
    for r in records:
        if best is None or r.composite_score > best.composite_score:
            best = r
    return best


def compute_stats(records: Iterable[ResponseRecord]) -> CohortStats:
    records = list(records)
    top = top_record(records)
    return CohortStats(
        total_responses=len(records),
        unique_mdps=len({r.mdp_name for r in records}),
        unique_managers=len({r.manager_name for r in records}),
        unique_functions=len({r.function for r in records}),
        average_score=average_score(records),
        top_performer=top.mdp_name if top else NO_TOP_PERFORMER,
        top_score=top.composite_score if top else 0.0,
        top_record=top,
        assessment_area_averages=area_averages(records),
        function_breakdown=function_breakdown(records),
        rotation_breakdown=rotation_breakdown(records),
        function_averages=function_averages(records),
        score_distribution=score_distribution(records),
        recent_submissions=tuple(reversed(records[-RECENT_LIMIT:])),
        last_submission=max((r.timestamp for r in records if r.timestamp), default=None),
    )


# ----------------------------
# Per-MDP views
# ----------------------------
def mdp_history(records: Iterable[ResponseRecord], mdp_name: str) -> List[ResponseRecord]:
    """One MDP's records, by rotation and then submission time."""
    mine = [r for r in records if r.mdp_name == mdp_name]
    return sorted(mine, key=lambda r: (rotation_sort_key(r.rotation), r.timestamp))


def compare_mdps(records: Iterable[ResponseRecord], mdp_a: str, mdp_b: str) -> MdpComparison:
    records = list(records)
    a = [r for r in records if mdp_a and r.mdp_name == mdp_a]
    b = [r for r in records if mdp_b and r.mdp_name == mdp_b]
    return MdpComparison(
        mdp_a=mdp_a,
        mdp_b=mdp_b,
        areas_a=area_averages(a),
        areas_b=area_averages(b),
        average_a=average_score(a),
        average_b=average_score(b),
        count_a=len(a),
        count_b=len(b),
    )
