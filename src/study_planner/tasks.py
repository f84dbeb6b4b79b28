"""Open task lists: daily assignments not yet covered plus review tasks."""
from datetime import date

from study_planner.completion import task_completion
from study_planner.daily_tasks import get_tasks_for_date
from study_planner.models import ActiveTask, DailyTask, ReviewItem, StudyPlan, StudySession, day_of
from study_planner.plans import get_plans_by_user
from study_planner.progress import evaluate_achievability
from study_planner.review_tasks import build_review_tasks
from study_planner.reviews import get_review_items_by_user
from study_planner.sessions import get_sessions_by_user


def _open_daily_tasks(
    daily_tasks: list[DailyTask],
    plans: list[StudyPlan],
    sessions: list[StudySession],
    day: date | None,
    today: date,
    evaluate,
) -> list[ActiveTask]:
    """Daily tasks still short of full coverage.

    ``day`` limits the sessions that count toward completion; ``None`` counts all.
    """
    plans_by_id = {p.id: p for p in plans}
    result = []
    for task in daily_tasks:
        plan = plans_by_id.get(task.plan_id)
        if plan is None:
            continue
        plan_sessions = [
            s for s in sessions
            if s.plan_id == plan.id and (day is None or day_of(s.date) == day)
        ]
        progress = task_completion(plan_sessions, task.start_unit, task.end_unit, task.units)
        if progress >= 1:
            continue
        plan_history = [s for s in sessions if s.plan_id == plan.id]
        result.append(ActiveTask("daily", task, plan, progress, evaluate(plan, plan_history, today)))
    return result


def get_active_tasks(
    daily_tasks: list[DailyTask],
    plans: list[StudyPlan],
    sessions: list[StudySession],
    due_review_items: list[ReviewItem],
    today: date | None = None,
    evaluate=evaluate_achievability,
) -> list[ActiveTask]:
    """Every open daily task, judged against the whole session history, plus today's reviews."""
    today = today or date.today()
    daily = _open_daily_tasks(daily_tasks, plans, sessions, None, today, evaluate)
    reviews = build_review_tasks(due_review_items, plans, sessions, today=today, evaluate=evaluate)
    return daily + reviews


def get_today_active_tasks(
    daily_tasks: list[DailyTask],
    plans: list[StudyPlan],
    sessions: list[StudySession],
    due_review_items: list[ReviewItem],
    today: date | None = None,
    evaluate=evaluate_achievability,
) -> list[ActiveTask]:
    today = today or date.today()
    daily = _open_daily_tasks(daily_tasks, plans, sessions, today, today, evaluate)
    reviews = build_review_tasks(due_review_items, plans, sessions, today=today, evaluate=evaluate)
    return daily + reviews


def get_active_tasks_for_date(
    daily_tasks: list[DailyTask],
    plans: list[StudyPlan],
    sessions: list[StudySession],
    filter_date: date,
    review_items: list[ReviewItem] | None = None,
    today: date | None = None,
    evaluate=evaluate_achievability,
) -> list[ActiveTask]:
    """Open tasks for one calendar day; reviews only when review items are given."""
    today = today or date.today()
    daily = _open_daily_tasks(daily_tasks, plans, sessions, filter_date, today, evaluate)
    if not review_items:
        return daily
    reviews = build_review_tasks(
        review_items, plans, sessions, filter_date=filter_date, today=today, evaluate=evaluate
    )
    return daily + reviews


def load_today_tasks(db_path: str, user_id: str, today: date | None = None) -> list[ActiveTask]:
    """Snapshot the store and compute today's open tasks."""
    today = today or date.today()
    return get_today_active_tasks(
        get_tasks_for_date(db_path, user_id, today),
        get_plans_by_user(db_path, user_id),
        get_sessions_by_user(db_path, user_id),
        get_review_items_by_user(db_path, user_id),
        today=today,
    )


def load_tasks_for_date(db_path: str, user_id: str, day: date) -> list[ActiveTask]:
    return get_active_tasks_for_date(
        get_tasks_for_date(db_path, user_id, day),
        get_plans_by_user(db_path, user_id),
        get_sessions_by_user(db_path, user_id),
        day,
        review_items=get_review_items_by_user(db_path, user_id),
    )
