# tests/test_ranges.py
from study_planner.ranges import merge_ranges, merge_units_to_ranges, range_length


def test_adjacent_ranges_merge():
    assert merge_ranges([(1, 3), (4, 6)]) == [(1, 6)]


def test_gap_keeps_ranges_apart():
    assert merge_ranges([(1, 3), (5, 6)]) == [(1, 3), (5, 6)]


def test_overlapping_unsorted_ranges_merge():
    assert merge_ranges([(8, 10), (1, 5), (3, 7)]) == [(1, 10)]


def test_contained_range_is_absorbed():
    assert merge_ranges([(1, 10), (3, 4)]) == [(1, 10)]


def test_merge_does_not_mutate_input():
    ranges = [(4, 6), (1, 3)]
    merge_ranges(ranges)
    assert ranges == [(4, 6), (1, 3)]


def test_merge_empty():
    assert merge_ranges([]) == []


def test_units_collapse_to_runs():
    runs = merge_units_to_ranges([9, 3, 5, 4])
    assert runs == [
        {"start": 3, "end": 5, "count": 3},
        {"start": 9, "end": 9, "count": 1},
    ]


def test_duplicate_units_counted_once():
    assert merge_units_to_ranges([2, 2, 3]) == [{"start": 2, "end": 3, "count": 2}]


def test_range_length():
    assert range_length(3, 5) == 3
    assert range_length(5, 5) == 1
    assert range_length(6, 5) == 0


def test_merging_is_idempotent():
    once = merge_ranges([(5, 7), (1, 2), (3, 3), (10, 12)])
    assert once == [(1, 7), (10, 12)]
    assert merge_ranges(once) == once
