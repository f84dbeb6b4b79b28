"""Turn due review items into range-shaped review tasks.

Items are grouped by plan and review day, their unit numbers collapsed into
consecutive runs, and each run becomes one ReviewTask. The task keeps the ids
of the items it stands for so completing it advances exactly those items.
"""
from datetime import date

from study_planner.completion import task_completion
from study_planner.config import REVIEW_MINUTES_PER_UNIT
from study_planner.models import ActiveTask, ReviewItem, ReviewTask, StudyPlan, StudySession, day_of
from study_planner.progress import evaluate_achievability
from study_planner.ranges import merge_units_to_ranges


def group_review_items(items: list[ReviewItem], target_day: date) -> dict:
    """Group items due exactly on ``target_day`` by (plan_id, day).

    Overdue items from earlier days are left out.
    """
    groups: dict[tuple[str, date], list[ReviewItem]] = {}
    for item in items:
        review_day = day_of(item.next_review_date)
        if review_day != target_day:
            continue
        groups.setdefault((item.plan_id, review_day), []).append(item)
    return groups


def build_review_tasks(
    due_items: list[ReviewItem],
    plans: list[StudyPlan],
    sessions: list[StudySession],
    filter_date: date | None = None,
    today: date | None = None,
    evaluate=evaluate_achievability,
) -> list[ActiveTask]:
    target_day = filter_date or today or date.today()
    plans_by_id = {p.id: p for p in plans}
    result = []

    for (plan_id, review_day), items in group_review_items(due_items, target_day).items():
        plan = plans_by_id.get(plan_id)
        if plan is None:
            continue
        plan_history = [s for s in sessions if s.plan_id == plan_id]
        same_day = [s for s in plan_history if day_of(s.date) == review_day]
        achievability = evaluate(plan, plan_history, target_day)

        for idx, run in enumerate(merge_units_to_ranges(i.unit_number for i in items)):
            task = ReviewTask(
                id=f"review-{plan_id}-{review_day.isoformat()}-{run['start']}-{run['end']}-{idx}",
                plan_id=plan_id,
                date=review_day,
                start_unit=run["start"],
                end_unit=run["end"],
                units=run["count"],
                estimated_minutes=run["count"] * REVIEW_MINUTES_PER_UNIT,
                round=1,
                advice="Time to review!",
                review_item_ids=[
                    i.id for i in items if run["start"] <= i.unit_number <= run["end"]
                ],
            )
            progress = task_completion(same_day, task.start_unit, task.end_unit, task.units)
            if progress < 1:
                result.append(ActiveTask("review", task, plan, progress, achievability))
    return result
