from __future__ import annotations
from typing import Dict, List, Sequence, Tuple
import math
import matplotlib.pyplot as plt

from ..core.analytics import BUCKET_LABELS
from ..core.filters import rotation_sort_key
from ..core.records import ASSESSMENT_AREAS

PRIMARY = "#0062AD"
PALETTE = ["#0062AD", "#00358E", "#35C4EC", "#11224B", "#97EAFF", "#FFC220"]
ROTATIONS = [str(n) for n in range(1, 7)]


def _empty(ax, message: str = "No data for the current filters") -> None:
    ax.text(0.5, 0.5, message, ha="center", va="center", transform=ax.transAxes)
    ax.set_xticks([])
    ax.set_yticks([])


def assessment_area_chart(averages: Sequence[float]):
    """Bar chart of the mean rating per assessment area, on the 0-5 scale."""
    fig, ax = plt.subplots(figsize=(7, 4))
    labels = [a.replace(" & ", " &\n") for a in ASSESSMENT_AREAS]
    ax.bar(labels, list(averages), color=PRIMARY, alpha=0.8)
    ax.set_ylim(0, 5)
    ax.set_ylabel("Average Score")
    ax.set_title("Performance by Assessment Area")
    fig.tight_layout()
    return fig


def function_chart(breakdown: Dict[str, int]):
    """Doughnut of records per function."""
    fig, ax = plt.subplots(figsize=(5, 5))
    if not breakdown:
        _empty(ax)
        return fig
    ax.pie(
        list(breakdown.values()),
        labels=list(breakdown.keys()),
        colors=PALETTE[: len(breakdown)],
        wedgeprops={"width": 0.4, "edgecolor": "white", "linewidth": 3},
        autopct="%d%%",
        pctdistance=0.8,
    )
    ax.set_title("Function Distribution")
    ax.axis("equal")
    return fig


def rotation_chart(breakdown: Dict[str, int]):
    """Bar chart of records per rotation. Rotations 1-6 are always shown."""
    labels: List[str] = list(ROTATIONS)
    for rotation in sorted(breakdown, key=rotation_sort_key):
        if rotation not in labels:
            labels.append(rotation)
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.bar([f"Rotation {r}" for r in labels], [breakdown.get(r, 0) for r in labels], color=PALETTE[1])
    ax.set_ylabel("Responses")
    ax.set_title("Responses by Rotation")
    ax.tick_params(axis="x", rotation=30)
    fig.tight_layout()
    return fig


def score_distribution_chart(distribution: Sequence[int]):
    fig, ax = plt.subplots(figsize=(7, 4))
    xs = list(range(len(BUCKET_LABELS)))
    ax.plot(xs, list(distribution), color=PRIMARY, marker="o", linewidth=2)
    ax.fill_between(xs, list(distribution), color=PRIMARY, alpha=0.1)
    ax.set_xticks(xs)
    ax.set_xticklabels(BUCKET_LABELS, rotation=30)
    ax.set_ylim(bottom=0)
    ax.set_ylabel("Number of MDPs")
    ax.set_title("Composite Score Distribution")
    fig.tight_layout()
    return fig


def radar_chart(series: List[Tuple[str, Sequence[float]]]):
    """Return a matplotlib Figure with one radar trace per (label, area averages) pair."""
    domain_labels = list(ASSESSMENT_AREAS)
    for name, values in series:
        if len(values) != len(domain_labels):
            raise ValueError(f"{name}: expected {len(domain_labels)} values, got {len(values)}")

    angles = [n / float(len(domain_labels)) * 2 * math.pi for n in range(len(domain_labels))]
    angles += angles[:1]

    fig = plt.figure(figsize=(6, 6))
    ax = plt.subplot(111, polar=True)
    ax.set_theta_offset(math.pi / 2)
    ax.set_theta_direction(-1)

    ax.set_thetagrids([a * 180 / math.pi for a in angles[:-1]], domain_labels)
    ax.set_ylim(0, 5)
    for i, (name, values) in enumerate(series):
        # close the loop
        scores = list(values) + [values[0]]
        color = PALETTE[i % len(PALETTE)]
        ax.plot(angles, scores, linewidth=2, color=color, label=name)
        ax.fill(angles, scores, alpha=0.2, color=color)
    if len(series) > 1:
        ax.legend(loc="upper right", bbox_to_anchor=(1.25, 1.1))
    ax.grid(True)
    return fig
