"""How much of a task's unit range the recorded sessions already cover."""
from study_planner.models import StudySession
from study_planner.ranges import merge_ranges, range_length


def extract_completed_ranges(
    sessions: list[StudySession], task_start: int, task_end: int
) -> list[tuple[int, int]]:
    """Clip each ranged session to the task range.

    Sessions recorded without an explicit range contribute nothing.
    """
    completed = []
    for session in sessions:
        if not session.has_range:
            continue
        start = max(task_start, session.start_unit)
        end = min(task_end, session.end_unit)
        if start <= end:
            completed.append((start, end))
    return completed


def calculate_completed_units(merged_ranges: list[tuple[int, int]]) -> int:
    return sum(range_length(start, end) for start, end in merged_ranges)


def calculate_task_progress(completed_units: int, total_units: int) -> float:
    """Fraction complete, clamped to [0, 1]. A task with no units counts as done."""
    if total_units <= 0:
        return 1.0
    return min(max(completed_units, 0) / total_units, 1.0)


def task_completion(
    sessions: list[StudySession], task_start: int, task_end: int, total_units: int
) -> float:
    merged = merge_ranges(extract_completed_ranges(sessions, task_start, task_end))
    return calculate_task_progress(calculate_completed_units(merged), total_units)
