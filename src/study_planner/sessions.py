"""Study session storage."""
import logging
from datetime import date

from study_planner.errors import NotFoundError, StoreError
from study_planner.models import StudySession, day_of
from study_planner.store import delete_value, get_value, list_values, set_value

logger = logging.getLogger(__name__)

SESSION_PREFIX = "session:"


def _key(session_id: str) -> str:
    return f"{SESSION_PREFIX}{session_id}"


def save_session(db_path: str, session: StudySession) -> StudySession:
    set_value(db_path, _key(session.id), session.to_dict())
    return session


def get_session(db_path: str, session_id: str) -> StudySession | None:
    data = get_value(db_path, _key(session_id))
    return StudySession.from_dict(data) if data else None


def _all_sessions(db_path: str) -> list[StudySession]:
    try:
        rows = list_values(db_path, SESSION_PREFIX)
    except StoreError as e:
        logger.warning("Listing sessions failed: %s", e)
        return []
    return sorted((StudySession.from_dict(r) for r in rows), key=lambda s: (s.date, s.id))


def get_sessions_by_plan(db_path: str, plan_id: str) -> list[StudySession]:
    return [s for s in _all_sessions(db_path) if s.plan_id == plan_id]


def get_sessions_by_user(db_path: str, user_id: str) -> list[StudySession]:
    return [s for s in _all_sessions(db_path) if s.user_id == user_id]


def get_sessions_for_day(db_path: str, user_id: str, day: date) -> list[StudySession]:
    return [s for s in get_sessions_by_user(db_path, user_id) if day_of(s.date) == day]


def delete_session(db_path: str, session_id: str) -> None:
    if get_session(db_path, session_id) is None:
        raise NotFoundError(f"Session not found: {session_id}")
    delete_value(db_path, _key(session_id))
