# tests/test_sessions.py
from datetime import date, datetime

import pytest

from study_planner.db import init_db
from study_planner.errors import NotFoundError
from study_planner.models import StudySession
from study_planner.sessions import (
    delete_session, get_session, get_sessions_by_plan, get_sessions_by_user,
    get_sessions_for_day, save_session,
)


def _session(session_id, plan_id="p1", user_id="u1", when=datetime(2026, 1, 5, 9)):
    return StudySession(
        id=session_id, user_id=user_id, plan_id=plan_id, date=when,
        units_completed=2, duration_minutes=20, start_unit=1, end_unit=2,
    )


def test_save_and_get(tmp_db):
    init_db(tmp_db)
    session = save_session(tmp_db, _session("s1"))
    assert get_session(tmp_db, "s1") == session


def test_sessions_by_plan_and_user(tmp_db):
    init_db(tmp_db)
    save_session(tmp_db, _session("s1", plan_id="p1"))
    save_session(tmp_db, _session("s2", plan_id="p2"))
    save_session(tmp_db, _session("s3", plan_id="p1", user_id="u2"))
    assert [s.id for s in get_sessions_by_plan(tmp_db, "p1")] == ["s1", "s3"]
    assert [s.id for s in get_sessions_by_user(tmp_db, "u1")] == ["s1", "s2"]


def test_sessions_are_sorted_by_date(tmp_db):
    init_db(tmp_db)
    save_session(tmp_db, _session("a", when=datetime(2026, 1, 6)))
    save_session(tmp_db, _session("b", when=datetime(2026, 1, 5)))
    assert [s.id for s in get_sessions_by_user(tmp_db, "u1")] == ["b", "a"]


def test_sessions_for_day(tmp_db):
    init_db(tmp_db)
    save_session(tmp_db, _session("s1", when=datetime(2026, 1, 5, 23, 0)))
    save_session(tmp_db, _session("s2", when=datetime(2026, 1, 6, 0, 30)))
    assert [s.id for s in get_sessions_for_day(tmp_db, "u1", date(2026, 1, 5))] == ["s1"]


def test_delete_session(tmp_db):
    init_db(tmp_db)
    save_session(tmp_db, _session("s1"))
    delete_session(tmp_db, "s1")
    assert get_session(tmp_db, "s1") is None
    with pytest.raises(NotFoundError):
        delete_session(tmp_db, "s1")
