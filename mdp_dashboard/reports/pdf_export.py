from __future__ import annotations
from typing import BinaryIO, Optional, Union
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas
from reportlab.lib.units import inch

from ..core.analytics import BUCKET_LABELS, CohortStats
from ..core.filters import RecordFilter, describe
from ..core.records import ASSESSMENT_AREAS


def export_pdf(target: Union[str, BinaryIO], stats: CohortStats, record_filter: Optional[RecordFilter] = None,
               total_records: Optional[int] = None, generated_at: str = "") -> None:
    """Write a plain-text summary of the dashboard statistics to a PDF.

    `target` is a file path or a writable binary file object.
    """
    record_filter = record_filter or RecordFilter()
    c = canvas.Canvas(target, pagesize=letter)
    width, height = letter
    x = 0.75 * inch
    y = height - 0.75 * inch

    def line(txt: str, dy: float = 14):
        nonlocal y
        c.drawString(x, y, txt[:120])
        y -= dy
        if y < 0.75 * inch:
            c.showPage()
            y = height - 0.75 * inch

    line("MDP Performance Dashboard")
    line(f"Generated: {generated_at}")
    total = stats.total_responses if total_records is None else total_records
    line(describe(stats.total_responses, total, record_filter))
    line("")
    line(f"Total MDPs: {stats.total_mdps}  |  Unique MDPs: {stats.unique_mdps}  |  Managers: {stats.unique_managers}")
    line(f"Average Score: {stats.average_score:.2f}  |  Functions: {stats.unique_functions}")
    line(f"Top Performer: {stats.top_performer} ({stats.top_score:.2f})")

    line("")
    line("Assessment Area Averages:")
    for name, avg in zip(ASSESSMENT_AREAS, stats.assessment_area_averages):
        line(f" - {name}: {avg:.2f}")

    line("")
    line("By Function:")
    if not stats.function_breakdown:
        line(" - No responses")
    for fn, count in stats.function_breakdown.items():
        line(f" - {fn}: {count} response(s), average {stats.function_averages.get(fn, 0.0):.2f}")

    line("")
    line("By Rotation:")
    if not stats.rotation_breakdown:
        line(" - No responses")
    for rotation, count in stats.rotation_breakdown.items():
        line(f" - Rotation {rotation}: {count}")

    line("")
    line("Score Distribution:")
    for label, count in zip(BUCKET_LABELS, stats.score_distribution):
        line(f" - {label}: {count}")

    c.save()
