from __future__ import annotations
from datetime import date
from typing import Iterable
import csv
import io

from ..core.records import ResponseRecord


HEADERS = [
    "MDP Name",
    "Function",
    "Manager",
    "Rotation",
    "Composite Score",
    "Job Knowledge",
    "Quality of Work",
    "Communication",
    "Initiative",
]


def records_to_csv(records: Iterable[ResponseRecord]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(HEADERS)
    for r in records:
        writer.writerow([
            r.mdp_name,
            r.function,
            r.manager_name,
            r.rotation,
            f"{r.composite_score:.2f}",
            r.job_knowledge or "",
            r.quality_of_work or "",
            r.communication or "",
            r.initiative or "",
        ])
    return buf.getvalue()


def csv_filename(today: date) -> str:
    return f"mdp-performance-{today.isoformat()}.csv"
