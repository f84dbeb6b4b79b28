"""Study plan storage and lifecycle."""
import logging
import uuid
from datetime import date

from study_planner.errors import NotFoundError, StoreError, ValidationError
from study_planner.models import PLAN_STATUSES, StudyPlan
from study_planner.store import delete_value, get_value, list_values, set_value

logger = logging.getLogger(__name__)

PLAN_PREFIX = "plan:"


def _key(plan_id: str) -> str:
    return f"{PLAN_PREFIX}{plan_id}"


def validate_plan(plan: StudyPlan) -> None:
    if plan.total_units <= 0:
        raise ValidationError("total_units must be positive")
    if plan.unit_start > plan.unit_end:
        raise ValidationError(f"unit range {plan.unit_start}-{plan.unit_end} is inverted")
    if plan.unit_end - plan.unit_start + 1 != plan.total_units:
        raise ValidationError("unit range length must equal total_units")
    if not plan.study_days or any(d not in range(1, 8) for d in plan.study_days):
        raise ValidationError("study_days must be a non-empty subset of 1..7")
    if plan.target_rounds < 1 or plan.rounds < 1:
        raise ValidationError("rounds must be at least 1")
    if plan.status not in PLAN_STATUSES:
        raise ValidationError(f"unknown plan status: {plan.status}")
    if plan.deadline < plan.created_at:
        raise ValidationError("deadline is before the plan start")


def create_plan(
    db_path: str,
    user_id: str,
    title: str,
    total_units: int,
    deadline: date,
    unit_start: int = 1,
    difficulty: str = "normal",
    target_rounds: int = 1,
    study_days: list | None = None,
    minutes_per_unit: float = 5.0,
    unit_label: str = "units",
    created_at: date | None = None,
) -> StudyPlan:
    plan = StudyPlan(
        id=f"plan-{uuid.uuid4().hex[:12]}",
        user_id=user_id,
        title=title,
        total_units=total_units,
        unit_start=unit_start,
        unit_end=unit_start + total_units - 1,
        deadline=deadline,
        created_at=created_at or date.today(),
        difficulty=difficulty,
        target_rounds=target_rounds,
        study_days=sorted(set(study_days)) if study_days else [1, 2, 3, 4, 5],
        minutes_per_unit=minutes_per_unit,
        unit_label=unit_label,
    )
    validate_plan(plan)
    set_value(db_path, _key(plan.id), plan.to_dict())
    logger.info("Created plan %s (%s units) for %s", plan.id, total_units, user_id)
    return plan


def get_plan(db_path: str, plan_id: str) -> StudyPlan | None:
    data = get_value(db_path, _key(plan_id))
    return StudyPlan.from_dict(data) if data else None


def require_plan(db_path: str, plan_id: str) -> StudyPlan:
    plan = get_plan(db_path, plan_id)
    if plan is None:
        raise NotFoundError(f"Plan not found: {plan_id}")
    return plan


def get_plans_by_user(db_path: str, user_id: str) -> list[StudyPlan]:
    try:
        rows = list_values(db_path, PLAN_PREFIX)
    except StoreError as e:
        logger.warning("Listing plans for %s failed: %s", user_id, e)
        return []
    plans = [StudyPlan.from_dict(r) for r in rows if r["user_id"] == user_id]
    return sorted(plans, key=lambda p: (p.created_at, p.id))


def get_active_plans(db_path: str, user_id: str) -> list[StudyPlan]:
    return [p for p in get_plans_by_user(db_path, user_id) if p.is_active]


def _set_status(db_path: str, plan_id: str, status: str) -> StudyPlan:
    plan = require_plan(db_path, plan_id)
    plan.status = status
    set_value(db_path, _key(plan.id), plan.to_dict())
    return plan


def pause_plan(db_path: str, plan_id: str) -> StudyPlan:
    return _set_status(db_path, plan_id, "paused")


def resume_plan(db_path: str, plan_id: str) -> StudyPlan:
    return _set_status(db_path, plan_id, "active")


def complete_plan(db_path: str, plan_id: str) -> StudyPlan:
    return _set_status(db_path, plan_id, "completed")


def delete_plan(db_path: str, plan_id: str) -> None:
    require_plan(db_path, plan_id)
    delete_value(db_path, _key(plan_id))
