"""Shared fixtures for the survey store and analytics tests."""

import itertools

import matplotlib

matplotlib.use("Agg")

import pytest

from mdp_dashboard.core.records import ResponseRecord
from mdp_dashboard.core.scoring import composite_score, round_score
from mdp_dashboard.core.store import RecordStore


@pytest.fixture
def store(tmp_path):
    s = RecordStore(tmp_path / "data" / "survey-responses.json")
    s.ensure()
    return s


@pytest.fixture
def make_record():
    """Factory for ResponseRecord with sensible defaults.

    Pass composite_score to pin the score; otherwise it is derived from the
    core ratings the way the store does it.
    """
    counter = itertools.count(1)

    def _make(**overrides):
        n = next(counter)
        fields = {
            "id": f"mdp_test_{n}",
            "mdp_name": f"MDP {n}",
            "function": "Planning",
            "manager_name": "Alex Morgan",
            "rotation": "1",
            "job_knowledge": 3,
            "quality_of_work": 3,
            "communication": 3,
            "initiative": 3,
            "function_specific_1": None,
            "function_specific_2": None,
            "timestamp": f"2026-01-01T00:00:{n:02d}.000Z",
        }
        fields.update(overrides)
        if "composite_score" not in fields:
            fields["composite_score"] = round_score(composite_score(
                fields["job_knowledge"], fields["quality_of_work"],
                fields["communication"], fields["initiative"],
            ))
        return ResponseRecord(**fields)

    return _make


@pytest.fixture
def valid_form():
    return {
        "mdpName": "  Jordan Lee ",
        "function": "Replenishment",
        "managerName": "Sam Rivera",
        "rotation": 2,
        "jobKnowledge": "4",
        "qualityOfWork": 3,
        "communication": 2,
        "initiative": 1,
        "functionSpecific1": "5",
        "functionSpecific2": 4,
    }
