# tests/test_ledger.py
from datetime import date

import pytest

from study_planner.db import init_db
from study_planner.errors import NotFoundError, ValidationError
from study_planner.ledger import (
    add_friend, add_points, add_study_hours, create_cooperation_goal, crossed_level,
    get_cooperation_goals, get_friends, get_goal, get_or_create_points, get_points, get_profile,
    get_ranking, level_for, points_for_session, remove_friend, reset_weekly_points,
    update_goal_progress,
)


def test_level_for():
    assert level_for(0) == 1
    assert level_for(99) == 1
    assert level_for(100) == 2
    assert level_for(250) == 3


def test_crossed_level():
    assert crossed_level(99, 100)
    assert not crossed_level(100, 199)


def test_points_for_session():
    assert points_for_session(29) == 0
    assert points_for_session(30) == 1
    assert points_for_session(90) == 2  # 90 * 0.017 * 1.2 = 1.836


def test_add_points_is_additive(tmp_path):
    split = str(tmp_path / "split.db")
    single = str(tmp_path / "single.db")
    init_db(split)
    init_db(single)
    add_points(split, "u1", 5)
    add_points(split, "u1", 3)
    add_points(single, "u1", 8)
    a, b = get_points(split, "u1"), get_points(single, "u1")
    assert (a.points, a.weekly_points, a.level) == (b.points, b.weekly_points, b.level) == (8, 8, 1)


def test_get_or_create_points(tmp_db):
    init_db(tmp_db)
    assert get_points(tmp_db, "u1") is None
    record = get_or_create_points(tmp_db, "u1")
    assert (record.points, record.level) == (0, 1)
    assert get_points(tmp_db, "u1") is not None


def test_reset_weekly_points(tmp_db):
    init_db(tmp_db)
    add_points(tmp_db, "u1", 40)
    record = reset_weekly_points(tmp_db, "u1")
    assert (record.points, record.weekly_points) == (40, 0)
    with pytest.raises(NotFoundError):
        reset_weekly_points(tmp_db, "nobody")


def test_add_study_hours(tmp_db):
    init_db(tmp_db)
    add_study_hours(tmp_db, "u1", 0.5)
    add_study_hours(tmp_db, "u1", 1.25)
    profile = get_profile(tmp_db, "u1")
    assert profile.total_study_hours == 1.75
    assert profile.sessions_recorded == 2


def test_friends(tmp_db):
    init_db(tmp_db)
    friend = add_friend(tmp_db, "u1", "u2", "Sam")
    assert [f.name for f in get_friends(tmp_db, "u1")] == ["Sam"]
    with pytest.raises(ValidationError):
        add_friend(tmp_db, "u1", "u2", "Sam again")
    with pytest.raises(ValidationError):
        add_friend(tmp_db, "u1", "u1", "Me")
    remove_friend(tmp_db, "u1", friend.id)
    assert get_friends(tmp_db, "u1") == []


def test_cooperation_goal_is_shared(tmp_db):
    init_db(tmp_db)
    goal = create_cooperation_goal(tmp_db, "u1", "100 pages", ["u2", "u2", "u1"], 100, date(2026, 3, 1))
    assert goal.participant_ids == ["u1", "u2"]
    assert [g.id for g in get_cooperation_goals(tmp_db, "u1")] == [goal.id]
    assert [g.id for g in get_cooperation_goals(tmp_db, "u2")] == [goal.id]

    update_goal_progress(tmp_db, goal.id, 100)
    # One record: both participants see the update
    assert get_cooperation_goals(tmp_db, "u2")[0].status == "completed"
    assert get_goal(tmp_db, goal.id).current_progress == 100


def test_cooperation_goal_validation(tmp_db):
    init_db(tmp_db)
    with pytest.raises(ValidationError):
        create_cooperation_goal(tmp_db, "u1", " ", [], 10, date(2026, 3, 1))
    with pytest.raises(NotFoundError):
        update_goal_progress(tmp_db, "goal-missing", 5)


def test_ranking_orders_by_weekly_points(tmp_db):
    init_db(tmp_db)
    add_friend(tmp_db, "me", "u2", "Sam", avatar="🦊")
    add_friend(tmp_db, "me", "u3", "Alex")
    add_points(tmp_db, "me", 30)
    add_points(tmp_db, "u2", 50)
    add_points(tmp_db, "u3", 10)
    ranking = get_ranking(tmp_db, ["me", "u2", "u3", "u4"])
    assert [(e.rank, e.user_id, e.points) for e in ranking] == [
        (1, "u2", 50), (2, "me", 30), (3, "u3", 10),
    ]
    assert ranking[0].name == "Sam"
    assert ranking[0].avatar == "🦊"
    assert ranking[1].name == "You"


def test_ranking_ties_keep_input_order(tmp_db):
    init_db(tmp_db)
    add_points(tmp_db, "a", 10)
    add_points(tmp_db, "b", 10)
    assert [e.user_id for e in get_ranking(tmp_db, ["a", "b"])] == ["a", "b"]


def test_ranking_of_nobody():
    assert get_ranking("unused.db", []) == []
