"""Daily quota scheduling: which unit range a plan asks for on a given day."""
import math
from datetime import date, datetime, time, timedelta

from study_planner.completion import extract_completed_ranges
from study_planner.models import DailyTask, StudyPlan, StudySession, day_of
from study_planner.plans import get_active_plans
from study_planner.ranges import merge_ranges
from study_planner.sessions import get_sessions_by_plan


def study_days_left(plan: StudyPlan, day: date) -> int:
    """Allowed study weekdays from ``day`` through the deadline, at least 1."""
    count = 0
    current = day
    while current <= plan.deadline:
        if plan.is_study_day(current.isoweekday()):
            count += 1
        current += timedelta(days=1)
    return max(count, 1)


def _round_cursor(plan: StudyPlan, sessions: list[StudySession]) -> tuple[int, int]:
    """Return (next unit to study, units still open) for one round's sessions."""
    merged = merge_ranges(extract_completed_ranges(sessions, plan.unit_start, plan.unit_end))
    cursor = plan.unit_start
    for start, end in merged:
        if start <= cursor <= end:
            cursor = end + 1
    covered = sum(end - start + 1 for start, end in merged)
    # Sessions without a range only tell us how many units were done
    unranged = sum(s.units_completed for s in sessions if not s.has_range)
    cursor += unranged
    return cursor, max(plan.total_units - covered - unranged, 0)


def current_round(plan: StudyPlan, sessions: list[StudySession]) -> int | None:
    learning = [s for s in sessions if not s.is_review]
    for round_number in range(1, plan.effective_rounds + 1):
        _, remaining = _round_cursor(plan, [s for s in learning if s.round == round_number])
        if remaining > 0:
            return round_number
    return None


def generate_daily_task(plan: StudyPlan, sessions: list[StudySession], day: date) -> DailyTask | None:
    """The day's assignment, computed from sessions recorded before that day."""
    if not plan.is_active or day < plan.created_at:
        return None
    if not plan.is_study_day(day.isoweekday()):
        return None

    prior = [s for s in sessions if s.plan_id == plan.id and day_of(s.date) < day]
    round_number = current_round(plan, prior)
    if round_number is None:
        return None
    round_sessions = [s for s in prior if s.round == round_number and not s.is_review]
    cursor, remaining = _round_cursor(plan, round_sessions)
    if remaining <= 0 or cursor > plan.unit_end:
        return None

    quota = max(1, math.ceil(remaining / study_days_left(plan, day)))
    end = min(cursor + quota - 1, plan.unit_end)
    units = end - cursor + 1
    return DailyTask(
        id=f"task-{plan.id}-{day.isoformat()}",
        plan_id=plan.id,
        date=day,
        start_unit=cursor,
        end_unit=end,
        units=units,
        estimated_minutes=math.ceil(units * plan.minutes_per_unit),
        round=round_number,
    )


def get_tasks_for_date(db_path: str, user_id: str, day: date | None = None) -> list[DailyTask]:
    day = day or date.today()
    tasks = []
    for plan in get_active_plans(db_path, user_id):
        task = generate_daily_task(plan, get_sessions_by_plan(db_path, plan.id), day)
        if task:
            tasks.append(task)
    return tasks


def get_upcoming_tasks(db_path: str, user_id: str, days: int = 7, today: date | None = None) -> list[DailyTask]:
    """Assignments for the next ``days`` days, assuming each one gets done as planned."""
    today = today or date.today()
    tasks = []
    for plan in get_active_plans(db_path, user_id):
        sessions = get_sessions_by_plan(db_path, plan.id)
        for offset in range(days):
            day = today + timedelta(days=offset)
            task = generate_daily_task(plan, sessions, day)
            if task is None:
                continue
            tasks.append(task)
            sessions = sessions + [
                StudySession(
                    id=f"planned-{task.id}",
                    user_id=plan.user_id,
                    plan_id=plan.id,
                    date=datetime.combine(day, time.min),
                    units_completed=task.units,
                    duration_minutes=task.estimated_minutes,
                    round=task.round,
                    start_unit=task.start_unit,
                    end_unit=task.end_unit,
                    mode="range",
                )
            ]
    return sorted(tasks, key=lambda t: (t.date, t.plan_id))
