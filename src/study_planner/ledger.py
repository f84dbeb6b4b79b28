"""Points, levels, study hours, friends and shared goals."""
import logging
import math
import uuid
from datetime import date, datetime

from study_planner.config import (
    CONTINUITY_MINUTES, CONTINUITY_MULTIPLIER, POINTS_PER_LEVEL, POINTS_PER_MINUTE,
)
from study_planner.errors import NotFoundError, StoreError, ValidationError
from study_planner.models import CooperationGoal, Friend, RankingEntry, UserPoints, UserProfile
from study_planner.store import get_value, set_value

logger = logging.getLogger(__name__)


def level_for(points: int) -> int:
    return points // POINTS_PER_LEVEL + 1


def crossed_level(old_points: int, new_points: int) -> bool:
    return level_for(new_points) > level_for(old_points)


def points_for_session(duration_minutes: int) -> int:
    multiplier = CONTINUITY_MULTIPLIER if duration_minutes >= CONTINUITY_MINUTES else 1
    # Round half up, not Python's banker's rounding
    return math.floor(duration_minutes * POINTS_PER_MINUTE * multiplier + 0.5)


# --- Points ---


def get_points(db_path: str, user_id: str) -> UserPoints | None:
    data = get_value(db_path, f"points:{user_id}")
    return UserPoints.from_dict(data) if data else None


def _save_points(db_path: str, record: UserPoints) -> UserPoints:
    set_value(db_path, f"points:{record.user_id}", record.to_dict())
    return record


def get_or_create_points(db_path: str, user_id: str) -> UserPoints:
    existing = get_points(db_path, user_id)
    if existing:
        return existing
    return _save_points(db_path, UserPoints(user_id=user_id, last_updated=datetime.now()))


def add_points(db_path: str, user_id: str, delta: int) -> UserPoints:
    record = get_or_create_points(db_path, user_id)
    record.points += delta
    record.weekly_points += delta
    record.level = level_for(record.points)
    record.last_updated = datetime.now()
    return _save_points(db_path, record)


def reset_weekly_points(db_path: str, user_id: str) -> UserPoints:
    record = get_points(db_path, user_id)
    if record is None:
        raise NotFoundError(f"No points record for {user_id}")
    record.weekly_points = 0
    record.last_updated = datetime.now()
    return _save_points(db_path, record)


# --- Study hours ---


def get_profile(db_path: str, user_id: str) -> UserProfile:
    data = get_value(db_path, f"profile:{user_id}")
    return UserProfile.from_dict(data) if data else UserProfile(user_id=user_id)


def add_study_hours(db_path: str, user_id: str, hours: float) -> UserProfile:
    profile = get_profile(db_path, user_id)
    profile.total_study_hours = round(profile.total_study_hours + hours, 2)
    profile.sessions_recorded += 1
    set_value(db_path, f"profile:{user_id}", profile.to_dict())
    return profile


# --- Friends ---


def get_friends(db_path: str, user_id: str) -> list[Friend]:
    try:
        rows = get_value(db_path, f"friends:{user_id}") or []
    except StoreError as e:
        logger.warning("Loading friends of %s failed: %s", user_id, e)
        return []
    return [Friend.from_dict(r) for r in rows]


def add_friend(
    db_path: str, user_id: str, friend_user_id: str, name: str, avatar: str = "👤"
) -> Friend:
    friends = get_friends(db_path, user_id)
    if friend_user_id == user_id:
        raise ValidationError("Cannot befriend yourself")
    if any(f.user_id == friend_user_id for f in friends):
        raise ValidationError(f"{friend_user_id} is already a friend")
    friend = Friend(
        id=f"friend-{uuid.uuid4().hex[:8]}",
        user_id=friend_user_id,
        name=name,
        avatar=avatar,
        added_at=datetime.now(),
    )
    friends.append(friend)
    set_value(db_path, f"friends:{user_id}", [f.to_dict() for f in friends])
    return friend


def remove_friend(db_path: str, user_id: str, friend_id: str) -> None:
    friends = get_friends(db_path, user_id)
    set_value(db_path, f"friends:{user_id}", [f.to_dict() for f in friends if f.id != friend_id])


# --- Cooperation goals ---
# One record per goal under goal:<id>; each participant's goal-index:<user>
# lists the goal ids they take part in.


def get_goal(db_path: str, goal_id: str) -> CooperationGoal | None:
    data = get_value(db_path, f"goal:{goal_id}")
    return CooperationGoal.from_dict(data) if data else None


def _goal_index(db_path: str, user_id: str) -> list[str]:
    return get_value(db_path, f"goal-index:{user_id}") or []


def create_cooperation_goal(
    db_path: str,
    creator_id: str,
    title: str,
    participant_ids: list[str],
    target_progress: int,
    deadline: date,
    description: str = "",
) -> CooperationGoal:
    if not title.strip():
        raise ValidationError("Goal title is required")
    if target_progress <= 0:
        raise ValidationError("target_progress must be positive")
    participants = list(dict.fromkeys([creator_id, *participant_ids]))
    goal = CooperationGoal(
        id=f"goal-{uuid.uuid4().hex[:12]}",
        title=title,
        creator_id=creator_id,
        participant_ids=participants,
        target_progress=target_progress,
        deadline=deadline,
        description=description,
        created_at=datetime.now(),
    )
    set_value(db_path, f"goal:{goal.id}", goal.to_dict())
    for user_id in participants:
        index = _goal_index(db_path, user_id)
        if goal.id not in index:
            set_value(db_path, f"goal-index:{user_id}", index + [goal.id])
    return goal


def get_cooperation_goals(db_path: str, user_id: str) -> list[CooperationGoal]:
    try:
        goal_ids = _goal_index(db_path, user_id)
        goals = [get_goal(db_path, goal_id) for goal_id in goal_ids]
    except StoreError as e:
        logger.warning("Loading goals of %s failed: %s", user_id, e)
        return []
    return [g for g in goals if g is not None]


def update_goal_progress(db_path: str, goal_id: str, progress: int) -> CooperationGoal:
    goal = get_goal(db_path, goal_id)
    if goal is None:
        raise NotFoundError(f"Goal not found: {goal_id}")
    goal.current_progress = progress
    goal.status = "completed" if progress >= goal.target_progress else "active"
    set_value(db_path, f"goal:{goal.id}", goal.to_dict())
    return goal


# --- Ranking ---


def get_ranking(db_path: str, user_ids: list[str]) -> list[RankingEntry]:
    """Weekly-points leaderboard. Names come from the first user's friend list."""
    if not user_ids:
        return []
    viewer = user_ids[0]
    friends = {f.user_id: f for f in get_friends(db_path, viewer)}
    entries = []
    for user_id in user_ids:
        try:
            record = get_points(db_path, user_id)
        except StoreError as e:
            logger.warning("Skipping %s in ranking: %s", user_id, e)
            continue
        if record is None:
            continue
        friend = friends.get(user_id)
        if friend:
            name, avatar, status = friend.name, friend.avatar, friend.status
        else:
            name = "You" if user_id == viewer else "Unknown"
            avatar, status = "👤", "offline"
        entries.append(RankingEntry(
            rank=0,
            user_id=user_id,
            name=name,
            avatar=avatar,
            points=record.weekly_points,
            level=record.level,
            status=status,
        ))
    entries.sort(key=lambda e: e.points, reverse=True)
    for rank, entry in enumerate(entries, 1):
        entry.rank = rank
    return entries
