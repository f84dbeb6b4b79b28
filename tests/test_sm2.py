# tests/test_sm2.py
import pytest

from study_planner.sm2 import adjusted_ease_factor, quality_from_difficulty, sm2_update


def test_sm2_first_review_correct():
    """First correct answer: interval=1, repetitions=1."""
    result = sm2_update(quality=4, repetitions=0, ease_factor=2.5, interval=0)
    assert result["interval"] == 1
    assert result["repetitions"] == 1
    assert result["ease_factor"] == 2.5


def test_sm2_second_review_correct():
    """Second correct answer: interval=6."""
    result = sm2_update(quality=4, repetitions=1, ease_factor=2.5, interval=1)
    assert result["interval"] == 6
    assert result["repetitions"] == 2


def test_sm2_third_review_uses_ease():
    result = sm2_update(quality=4, repetitions=2, ease_factor=2.5, interval=6)
    assert result["interval"] == 15  # round(6 * 2.5)
    assert result["repetitions"] == 3


def test_sm2_failed_recall_resets():
    result = sm2_update(quality=1, repetitions=5, ease_factor=2.5, interval=30)
    assert result["repetitions"] == 0
    assert result["interval"] == 1


def test_sm2_ease_factor_minimum():
    result = sm2_update(quality=0, repetitions=0, ease_factor=1.3, interval=0)
    assert result["ease_factor"] == 1.3


def test_sm2_rejects_out_of_range_quality():
    with pytest.raises(ValueError):
        sm2_update(quality=6, repetitions=0, ease_factor=2.5, interval=1)


def test_adjusted_ease_factor():
    assert adjusted_ease_factor(5) == 2.6
    assert adjusted_ease_factor(3) == 2.36


def test_quality_from_difficulty():
    """Easier sessions score higher quality."""
    assert quality_from_difficulty(1) == 5
    assert quality_from_difficulty(2) == 4
    assert quality_from_difficulty(5) == 1
