"""Review item scheduling with SM-2."""
import logging
import uuid
from collections import Counter
from datetime import date, datetime, timedelta

from study_planner.errors import NotFoundError, StoreError
from study_planner.models import ReviewItem, StudyPlan, day_of
from study_planner.sm2 import adjusted_ease_factor, sm2_update
from study_planner.store import get_value, list_values, set_value

logger = logging.getLogger(__name__)

REVIEW_PREFIX = "review:"


def _key(item_id: str) -> str:
    return f"{REVIEW_PREFIX}{item_id}"


def save_review_item(db_path: str, item: ReviewItem) -> ReviewItem:
    set_value(db_path, _key(item.id), item.to_dict())
    return item


def get_review_item(db_path: str, item_id: str) -> ReviewItem | None:
    data = get_value(db_path, _key(item_id))
    return ReviewItem.from_dict(data) if data else None


def _all_items(db_path: str) -> list[ReviewItem]:
    try:
        rows = list_values(db_path, REVIEW_PREFIX)
    except StoreError as e:
        logger.warning("Listing review items failed: %s", e)
        return []
    items = [ReviewItem.from_dict(r) for r in rows]
    return sorted(items, key=lambda i: (i.next_review_date, i.unit_number))


def get_review_items_by_plan(db_path: str, plan_id: str) -> list[ReviewItem]:
    return [i for i in _all_items(db_path) if i.plan_id == plan_id]


def get_review_items_by_user(db_path: str, user_id: str) -> list[ReviewItem]:
    return [i for i in _all_items(db_path) if i.user_id == user_id]


def get_due_review_items(db_path: str, user_id: str, today: date | None = None) -> list[ReviewItem]:
    """Items whose next review falls on or before today, backlog included."""
    today = today or date.today()
    return [i for i in get_review_items_by_user(db_path, user_id) if i.is_due(today)]


def create_initial_review_schedule(
    db_path: str,
    plan: StudyPlan,
    unit: int,
    quality: int,
    studied_at: datetime | None = None,
) -> ReviewItem:
    """First review entry for a freshly studied unit, due the next day."""
    studied_at = studied_at or datetime.now()
    item = ReviewItem(
        id=f"review-{plan.id}-{unit}-{uuid.uuid4().hex[:6]}",
        user_id=plan.user_id,
        plan_id=plan.id,
        unit_number=unit,
        last_review_date=studied_at,
        next_review_date=studied_at + timedelta(days=1),
        ease_factor=adjusted_ease_factor(quality),
        repetitions=0,
        interval_days=1,
    )
    return save_review_item(db_path, item)


def record_review(
    db_path: str, item_id: str, quality: int, reviewed_at: datetime | None = None
) -> ReviewItem:
    item = get_review_item(db_path, item_id)
    if item is None:
        raise NotFoundError(f"Review item not found: {item_id}")
    updated = sm2_update(
        quality=quality,
        repetitions=item.repetitions,
        ease_factor=item.ease_factor,
        interval=item.interval_days,
    )
    reviewed_at = reviewed_at or datetime.now()
    item.last_review_date = reviewed_at
    item.next_review_date = reviewed_at + timedelta(days=updated["interval"])
    item.ease_factor = updated["ease_factor"]
    item.repetitions = updated["repetitions"]
    item.interval_days = updated["interval"]
    logger.debug("Review %s scored %s, next in %s days", item_id, quality, item.interval_days)
    return save_review_item(db_path, item)


def upcoming_reviews_summary(
    items: list[ReviewItem], today: date | None = None, limit: int = 7
) -> list[tuple[date, int]]:
    """Review counts for the next days that have anything scheduled after today."""
    today = today or date.today()
    counts = Counter(day_of(i.next_review_date) for i in items if day_of(i.next_review_date) > today)
    return sorted(counts.items())[:limit]
