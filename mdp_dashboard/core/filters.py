from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List

from .records import ResponseRecord


@dataclass(frozen=True)
class RecordFilter:
    """Dashboard filter selection. An empty option matches everything."""
    function: str = ""
    manager: str = ""
    rotation: str = ""
    search: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.function or self.manager or self.rotation or self.search)


def matches(record: ResponseRecord, record_filter: RecordFilter) -> bool:
    if record_filter.function and record.function != record_filter.function:
        return False
    if record_filter.manager and record.manager_name != record_filter.manager:
        return False
    if record_filter.rotation and record.rotation != record_filter.rotation:
        return False
    if record_filter.search:
        if record_filter.search.lower() not in record.mdp_name.lower():
            return False
    return True


def apply_filter(records: Iterable[ResponseRecord], record_filter: RecordFilter) -> List[ResponseRecord]:
    return [r for r in records if matches(r, record_filter)]


def filter_options(records: Iterable[ResponseRecord]) -> Dict[str, List[str]]:
    """Sorted distinct values for each filter select box, plus MDP names."""
    records = list(records)
    return {
        "functions": sorted({r.function for r in records}),
        "managers": sorted({r.manager_name for r in records}),
        "rotations": sorted({r.rotation for r in records}, key=rotation_sort_key),
        "mdp_names": sorted({r.mdp_name for r in records}),
    }


def rotation_sort_key(rotation: str):
    # numeric labels first, in numeric order
    # isdecimal, not isdigit: superscripts like "²" are digits int() rejects
    return (0, int(rotation), rotation) if rotation.isdecimal() else (1, 0, rotation)


def describe(filtered_count: int, total_count: int, record_filter: RecordFilter) -> str:
    text = f"Showing {filtered_count} of {total_count} MDPs"
    if record_filter.function:
        text += f" • Function: {record_filter.function}"
    if record_filter.manager:
        text += f" • Manager: {record_filter.manager}"
    if record_filter.rotation:
        text += f" • Rotation: {record_filter.rotation}"
    if record_filter.search:
        text += f' • Search: "{record_filter.search}"'
    return text
