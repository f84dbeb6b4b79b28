"""SM-2 spaced repetition algorithm."""
from study_planner.config import DEFAULT_EASE_FACTOR, MIN_EASE_FACTOR


def adjusted_ease_factor(quality: int, ease_factor: float = DEFAULT_EASE_FACTOR) -> float:
    """Apply the SM-2 ease adjustment for one answer, floored at 1.3."""
    new_ef = ease_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
    return round(max(MIN_EASE_FACTOR, new_ef), 2)


def sm2_update(
    quality: int,
    repetitions: int,
    ease_factor: float,
    interval: int,
) -> dict:
    """Calculate next review parameters using SM-2.

    Args:
        quality: Recall rating 0-5 (0=complete blackout, 5=perfect)
        repetitions: Number of consecutive successful reviews
        ease_factor: Current ease factor (minimum 1.3)
        interval: Current interval in days

    Returns:
        Dict with updated interval, repetitions, ease_factor.
    """
    if not 0 <= quality <= 5:
        raise ValueError(f"quality must be between 0 and 5, got {quality}")

    if quality >= 3:
        if repetitions == 0:
            new_interval = 1
        elif repetitions == 1:
            new_interval = 6
        else:
            new_interval = round(interval * ease_factor)
        new_repetitions = repetitions + 1
    else:
        # Failed recall starts the schedule over
        new_repetitions = 0
        new_interval = 1

    return {
        "interval": new_interval,
        "repetitions": new_repetitions,
        "ease_factor": adjusted_ease_factor(quality, ease_factor),
    }


def quality_from_difficulty(difficulty: int) -> int:
    """Map a 1-5 difficulty rating onto SM-2 quality (easier => higher)."""
    return max(0, min(5, 6 - difficulty))
