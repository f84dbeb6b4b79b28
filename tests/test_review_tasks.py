# tests/test_review_tasks.py
from datetime import date, datetime

from study_planner.models import ReviewItem, StudyPlan, StudySession
from study_planner.review_tasks import build_review_tasks, group_review_items

DAY = date(2026, 1, 6)


def _plan(plan_id="p1"):
    return StudyPlan(
        id=plan_id, user_id="u1", title="Law", total_units=20, unit_start=1, unit_end=20,
        deadline=date(2026, 2, 1), created_at=date(2026, 1, 1),
    )


def _item(unit, due=datetime(2026, 1, 6, 10), plan_id="p1"):
    return ReviewItem(
        id=f"r{unit}", user_id="u1", plan_id=plan_id, unit_number=unit,
        last_review_date=datetime(2026, 1, 5, 10), next_review_date=due,
    )


def _on_track(plan, sessions, today):
    return "onTrack"


def test_grouping_keeps_only_items_due_that_day():
    items = [_item(1), _item(2, due=datetime(2026, 1, 5)), _item(3, plan_id="p2")]
    groups = group_review_items(items, DAY)
    assert {k: [i.id for i in v] for k, v in groups.items()} == {
        ("p1", DAY): ["r1"],
        ("p2", DAY): ["r3"],
    }


def test_consecutive_units_become_one_task():
    items = [_item(u) for u in (3, 4, 5, 9)]
    tasks = build_review_tasks(items, [_plan()], [], today=DAY, evaluate=_on_track)
    assert [(t.task.start_unit, t.task.end_unit) for t in tasks] == [(3, 5), (9, 9)]
    first, second = tasks
    assert first.kind == "review"
    assert first.task.review_item_ids == ["r3", "r4", "r5"]
    assert second.task.review_item_ids == ["r9"]
    assert first.task.estimated_minutes == 15
    assert first.task.advice == "Time to review!"
    assert first.task.id == "review-p1-2026-01-06-3-5-0"
    assert second.task.id == "review-p1-2026-01-06-9-9-1"
    assert first.achievability == "onTrack"


def test_reviewed_ranges_are_dropped():
    items = [_item(u) for u in (3, 4, 5, 9)]
    done = StudySession(
        id="s1", user_id="u1", plan_id="p1", date=datetime(2026, 1, 6, 18),
        units_completed=3, duration_minutes=15, start_unit=3, end_unit=5, intent="review",
    )
    tasks = build_review_tasks(items, [_plan()], [done], today=DAY, evaluate=_on_track)
    assert [t.task.start_unit for t in tasks] == [9]


def test_partial_review_keeps_task_open():
    items = [_item(u) for u in (3, 4, 5, 6)]
    done = StudySession(
        id="s1", user_id="u1", plan_id="p1", date=datetime(2026, 1, 6, 18),
        units_completed=2, duration_minutes=10, start_unit=3, end_unit=4, intent="review",
    )
    tasks = build_review_tasks(items, [_plan()], [done], today=DAY, evaluate=_on_track)
    assert tasks[0].progress == 0.5


def test_items_of_unknown_plans_are_skipped():
    tasks = build_review_tasks([_item(1, plan_id="gone")], [_plan()], [], today=DAY, evaluate=_on_track)
    assert tasks == []


def test_filter_date_selects_another_day():
    items = [_item(1, due=datetime(2026, 1, 8, 9))]
    tasks = build_review_tasks(
        items, [_plan()], [], filter_date=date(2026, 1, 8), today=DAY, evaluate=_on_track,
    )
    assert tasks[0].task.date == date(2026, 1, 8)
