"""Integer interval helpers for unit ranges.

Ranges are inclusive ``(start, end)`` pairs. Two ranges merge when they
overlap or touch: ``(1, 3)`` and ``(4, 6)`` become ``(1, 6)``.
"""
from typing import Iterable


def merge_units_to_ranges(units: Iterable[int]) -> list[dict]:
    """Collapse unit numbers into consecutive runs.

    Returns dicts with ``start``, ``end`` and ``count`` keys, ascending.
    """
    ranges = []
    for unit in sorted(set(units)):
        if ranges and unit == ranges[-1]["end"] + 1:
            ranges[-1]["end"] = unit
            ranges[-1]["count"] += 1
        else:
            ranges.append({"start": unit, "end": unit, "count": 1})
    return ranges


def merge_ranges(ranges: Iterable[tuple[int, int]]) -> list[tuple[int, int]]:
    """Merge overlapping or adjacent ranges, sorted by start."""
    merged: list[tuple[int, int]] = []
    for start, end in sorted(ranges):
        if merged and start <= merged[-1][1] + 1:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def range_length(start: int, end: int) -> int:
    return max(0, end - start + 1)
