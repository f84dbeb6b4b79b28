"""Recording and editing study sessions.

Saving the session is the primary effect and its failures propagate. What
follows (advancing or minting review items, points, study hours) is applied
best-effort: each failure is logged and reported in the returned
RecordOutcome instead of undoing the saved session.
"""
import logging
import uuid
from datetime import date, datetime

from study_planner.completion import extract_completed_ranges
from study_planner.config import DEFAULT_CONCENTRATION, DEFAULT_DIFFICULTY
from study_planner.daily_tasks import current_round
from study_planner.errors import NotFoundError, PlannerError, ValidationError
from study_planner.ledger import add_points, add_study_hours, crossed_level, get_or_create_points, points_for_session
from study_planner.models import (
    DailyTask, NewLearning, RecordOutcome, Review, SecondaryFailure, SessionIntent,
    StudyPlan, StudySession, day_of,
)
from study_planner.plans import require_plan
from study_planner.progress import calculate_round_progress
from study_planner.ranges import merge_ranges
from study_planner.reviews import (
    create_initial_review_schedule, get_review_item, get_review_items_by_plan, record_review,
)
from study_planner.sessions import get_session, get_sessions_by_plan, save_session
from study_planner.sm2 import quality_from_difficulty

logger = logging.getLogger(__name__)


def _validate_ratings(duration_minutes, concentration: float, difficulty: int) -> None:
    if not isinstance(duration_minutes, int) or isinstance(duration_minutes, bool) or duration_minutes <= 0:
        raise ValidationError("duration_minutes must be a positive integer")
    if not 0 <= concentration <= 1:
        raise ValidationError("concentration must be between 0 and 1")
    if difficulty not in range(1, 6):
        raise ValidationError("difficulty must be between 1 and 5")


def _validate_units(units) -> None:
    if not isinstance(units, int) or isinstance(units, bool) or units <= 0:
        raise ValidationError("units must be a positive integer")


def _task_cursor(task: DailyTask, sessions: list[StudySession]) -> tuple[int, int]:
    """Return (first uncovered unit, units still open) for a task given that day's sessions."""
    same_day = [s for s in sessions if s.plan_id == task.plan_id and day_of(s.date) == task.date]
    merged = merge_ranges(extract_completed_ranges(same_day, task.start_unit, task.end_unit))
    cursor = task.start_unit
    for start, end in merged:
        if start <= cursor <= end:
            cursor = end + 1
    covered = sum(end - start + 1 for start, end in merged)
    return cursor, max(task.units - covered, 0)


def _check_in_plan(plan: StudyPlan, start: int, end: int) -> None:
    if start > end:
        raise ValidationError(f"start unit {start} is after end unit {end}")
    if start < plan.unit_start or end > plan.unit_end:
        raise ValidationError(
            f"units {start}-{end} fall outside the plan range {plan.unit_start}-{plan.unit_end}"
        )


def _resolve_range(
    plan: StudyPlan,
    prior: list[StudySession],
    round_number: int,
    units: int | None,
    unit_range: tuple[int, int] | None,
    task: DailyTask | None,
) -> tuple[str, int, int]:
    """Return (mode, start, end) in absolute unit numbers."""
    if (units is None) == (unit_range is None):
        raise ValidationError("give either a unit count or an explicit unit range")
    if unit_range is not None:
        start, end = unit_range
        _check_in_plan(plan, start, end)
        return "range", start, end

    _validate_units(units)
    if task is not None:
        start, remaining = _task_cursor(task, prior)
        if units > remaining:
            raise ValidationError(f"completed {units} units but the task only has {remaining} left")
    else:
        start = plan.unit_start + calculate_round_progress(plan, prior, round_number).completed
    end = start + units - 1
    _check_in_plan(plan, start, end)
    return "quantity", start, end


def _review_targets(db_path: str, session: StudySession, today: date) -> list[str]:
    """Ids of the plan's items inside the session range that are due by ``today``."""
    return [
        item.id
        for item in get_review_items_by_plan(db_path, session.plan_id)
        if session.start_unit <= item.unit_number <= session.end_unit and item.is_due(today)
    ]


def _advance_reviews(db_path: str, session: StudySession, outcome: RecordOutcome) -> None:
    quality = quality_from_difficulty(session.difficulty)
    for item_id in session.review_item_ids:
        try:
            record_review(db_path, item_id, quality, reviewed_at=session.date)
            outcome.advanced_review_ids.append(item_id)
        except (PlannerError, ValueError) as e:
            logger.warning("Advancing review %s for session %s failed: %s", item_id, session.id, e)
            outcome.secondary_failures.append(SecondaryFailure("advance_review", item_id, str(e)))


def _mint_reviews(db_path: str, plan: StudyPlan, session: StudySession, outcome: RecordOutcome) -> None:
    quality = quality_from_difficulty(session.difficulty)
    known_units = {i.unit_number for i in get_review_items_by_plan(db_path, plan.id)}
    for unit in range(session.start_unit, session.end_unit + 1):
        if unit in known_units:
            continue
        try:
            item = create_initial_review_schedule(db_path, plan, unit, quality, studied_at=session.date)
            outcome.minted_review_ids.append(item.id)
        except PlannerError as e:
            logger.warning("Minting review for unit %s of %s failed: %s", unit, plan.id, e)
            outcome.secondary_failures.append(SecondaryFailure("mint_review", str(unit), str(e)))
    logger.debug("Minted %d review items for session %s", len(outcome.minted_review_ids), session.id)


def _award(db_path: str, session: StudySession, outcome: RecordOutcome) -> None:
    try:
        before = get_or_create_points(db_path, session.user_id)
        after = add_points(db_path, session.user_id, points_for_session(session.duration_minutes))
        outcome.points_awarded = after.points - before.points
        outcome.level = after.level
        outcome.leveled_up = crossed_level(before.points, after.points)
    except PlannerError as e:
        logger.warning("Awarding points for session %s failed: %s", session.id, e)
        outcome.secondary_failures.append(SecondaryFailure("award_points", session.user_id, str(e)))
    try:
        add_study_hours(db_path, session.user_id, session.duration_minutes / 60)
    except PlannerError as e:
        logger.warning("Updating study hours for session %s failed: %s", session.id, e)
        outcome.secondary_failures.append(SecondaryFailure("study_hours", session.user_id, str(e)))


def record_session(
    db_path: str,
    user_id: str,
    plan_id: str,
    duration_minutes: int,
    units: int | None = None,
    unit_range: tuple[int, int] | None = None,
    intent: SessionIntent | None = None,
    task: DailyTask | None = None,
    concentration: float = DEFAULT_CONCENTRATION,
    difficulty: int = DEFAULT_DIFFICULTY,
    round_number: int | None = None,
    recorded_at: datetime | None = None,
) -> RecordOutcome:
    """Save a new session and apply its review and ledger side effects.

    ``units`` records a count continuing from the plan's (or ``task``'s)
    position; ``unit_range`` records explicit absolute units. A ``Review``
    intent advances existing review items, ``NewLearning`` mints new ones.
    """
    intent = intent or NewLearning()
    _validate_ratings(duration_minutes, concentration, difficulty)
    plan = require_plan(db_path, plan_id)
    recorded_at = recorded_at or datetime.now()
    today = day_of(recorded_at)

    if isinstance(intent, Review) and units is None and unit_range is None and intent.item_ids:
        items = [get_review_item(db_path, item_id) for item_id in intent.item_ids]
        found = [i.unit_number for i in items if i is not None]
        if not found:
            raise NotFoundError("none of the given review items exist")
        unit_range = (min(found), max(found))

    prior = get_sessions_by_plan(db_path, plan.id)
    if round_number is None:
        round_number = task.round if task else (current_round(plan, prior) or plan.effective_rounds)
    mode, start, end = _resolve_range(plan, prior, round_number, units, unit_range, task)

    session = StudySession(
        id=f"session-{uuid.uuid4().hex[:12]}",
        user_id=user_id,
        plan_id=plan.id,
        date=recorded_at,
        units_completed=end - start + 1,
        duration_minutes=duration_minutes,
        concentration=concentration,
        difficulty=difficulty,
        round=round_number,
        start_unit=start,
        end_unit=end,
        mode=mode,
        intent="review" if isinstance(intent, Review) else "learning",
    )
    if session.is_review:
        session.pinned_review_items = bool(intent.item_ids)
        session.review_item_ids = list(intent.item_ids) or _review_targets(db_path, session, today)

    save_session(db_path, session)
    logger.info("Recorded %s session %s on %s units %s-%s", session.intent, session.id, plan.id, start, end)

    outcome = RecordOutcome(session=session)
    if session.is_review:
        _advance_reviews(db_path, session, outcome)
    else:
        _mint_reviews(db_path, plan, session, outcome)
    _award(db_path, session, outcome)
    return outcome


def edit_session(
    db_path: str,
    session_id: str,
    duration_minutes: int | None = None,
    units: int | None = None,
    unit_range: tuple[int, int] | None = None,
    concentration: float | None = None,
    difficulty: int | None = None,
    round_number: int | None = None,
) -> RecordOutcome:
    """Update a recorded session in place.

    The session keeps its mode and intent. Review sessions re-score their
    review items with the (possibly new) difficulty; learning sessions never
    mint items on edit, and no points are awarded.
    """
    session = get_session(db_path, session_id)
    if session is None:
        raise NotFoundError(f"Session not found: {session_id}")
    plan = require_plan(db_path, session.plan_id)

    duration_minutes = session.duration_minutes if duration_minutes is None else duration_minutes
    concentration = session.concentration if concentration is None else concentration
    difficulty = session.difficulty if difficulty is None else difficulty
    _validate_ratings(duration_minutes, concentration, difficulty)

    start, end = session.start_unit, session.end_unit
    if unit_range is not None:
        start, end = unit_range
    elif units is not None:
        _validate_units(units)
        if start is None:
            start = plan.unit_start
        end = start + units - 1
    if start is not None and end is not None:
        _check_in_plan(plan, start, end)

    range_changed = (start, end) != (session.start_unit, session.end_unit)
    session.duration_minutes = duration_minutes
    session.concentration = concentration
    session.difficulty = difficulty
    session.start_unit, session.end_unit = start, end
    session.units_completed = end - start + 1 if start is not None else (units or session.units_completed)
    if round_number is not None:
        session.round = round_number

    retarget = not session.review_item_ids or (range_changed and not session.pinned_review_items)
    if session.is_review and retarget:
        session.review_item_ids = _review_targets(db_path, session, day_of(session.date))

    save_session(db_path, session)
    outcome = RecordOutcome(session=session, created=False)
    if session.is_review:
        _advance_reviews(db_path, session, outcome)
    return outcome
