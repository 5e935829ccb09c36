"""Tests for the dashboard filter predicate."""

import pytest

from mdp_dashboard.core.filters import (
    RecordFilter,
    apply_filter,
    describe,
    filter_options,
    matches,
)


@pytest.fixture
def records(make_record):
    return [
        make_record(mdp_name="Jordan Lee", function="Planning", manager_name="Alice", rotation="1"),
        make_record(mdp_name="Casey Jordan", function="Replenishment", manager_name="Bob", rotation="2"),
        make_record(mdp_name="Riley Park", function="Planning", manager_name="Bob", rotation="10"),
        make_record(mdp_name="Jordan Lee", function="Planning", manager_name="Alice", rotation="2"),
    ]


class TestMatches:

    def test_empty_filter_is_identity(self, records):
        assert apply_filter(records, RecordFilter()) == records
        assert RecordFilter().is_empty

    def test_function_exact_match(self, records):
        out = apply_filter(records, RecordFilter(function="Planning"))
        assert [r.mdp_name for r in out] == ["Jordan Lee", "Riley Park", "Jordan Lee"]

    def test_manager_exact_match(self, records):
        out = apply_filter(records, RecordFilter(manager="Bob"))
        assert {r.manager_name for r in out} == {"Bob"}
        assert len(out) == 2

    def test_rotation_is_text_equality(self, records):
        assert len(apply_filter(records, RecordFilter(rotation="1"))) == 1
        assert len(apply_filter(records, RecordFilter(rotation="10"))) == 1

    def test_search_is_case_insensitive_substring(self, records):
        out = apply_filter(records, RecordFilter(search="JORDAN"))
        assert [r.mdp_name for r in out] == ["Jordan Lee", "Casey Jordan", "Jordan Lee"]

    def test_search_does_not_match_manager(self, records):
        assert apply_filter(records, RecordFilter(search="alice")) == []

    def test_criteria_are_conjunctive(self, records):
        out = apply_filter(records, RecordFilter(function="Planning", manager="Alice", rotation="2"))
        assert out == [records[3]]

    def test_unknown_manager_yields_nothing(self, records):
        assert apply_filter(records, RecordFilter(manager="Nobody")) == []

    def test_idempotent(self, records):
        f = RecordFilter(function="Planning", search="lee")
        once = apply_filter(records, f)
        assert apply_filter(once, f) == once

    def test_does_not_mutate_input(self, records):
        before = list(records)
        apply_filter(records, RecordFilter(manager="Bob"))
        assert records == before

    def test_single_record(self, records):
        assert matches(records[0], RecordFilter(function="Planning", search="lee"))
        assert not matches(records[0], RecordFilter(function="Digital Merch"))


class TestFilterOptions:

    def test_sorted_distinct_values(self, records):
        opts = filter_options(records)
        assert opts["functions"] == ["Planning", "Replenishment"]
        assert opts["managers"] == ["Alice", "Bob"]
        assert opts["mdp_names"] == ["Casey Jordan", "Jordan Lee", "Riley Park"]

    def test_rotations_sort_numerically(self, records):
        assert filter_options(records)["rotations"] == ["1", "2", "10"]

    def test_non_decimal_digit_rotation_sorts_as_text(self, make_record):
        records = [make_record(rotation="²"), make_record(rotation="B"), make_record(rotation="1")]
        assert filter_options(records)["rotations"] == ["1", "B", "²"]

    def test_empty(self):
        assert filter_options([]) == {"functions": [], "managers": [], "rotations": [], "mdp_names": []}


class TestDescribe:

    def test_no_filters(self):
        assert describe(4, 4, RecordFilter()) == "Showing 4 of 4 MDPs"

    def test_lists_active_filters(self):
        text = describe(1, 4, RecordFilter(function="Planning", rotation="2", search="lee"))
        assert text == 'Showing 1 of 4 MDPs • Function: Planning • Rotation: 2 • Search: "lee"'
