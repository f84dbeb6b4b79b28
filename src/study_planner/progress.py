"""Plan progress and deadline achievability."""
from dataclasses import dataclass
from datetime import date

from study_planner.config import STUDY_HOURS_PER_DAY
from study_planner.models import StudyPlan, StudySession


@dataclass
class Progress:
    completed: int
    target: int

    @property
    def ratio(self) -> float:
        if self.target <= 0:
            return 1.0
        return min(self.completed / self.target, 1.0)

    @property
    def remaining(self) -> int:
        return max(self.target - self.completed, 0)

    @property
    def is_complete(self) -> bool:
        return self.completed >= self.target


def _session_units(session: StudySession) -> int:
    if session.has_range:
        return max(0, session.end_unit - session.start_unit + 1)
    return session.units_completed


def calculate_progress(plan: StudyPlan, sessions: list[StudySession]) -> Progress:
    """Units done across all rounds against total_units * rounds."""
    completed = sum(_session_units(s) for s in sessions if not s.is_review)
    return Progress(completed=completed, target=plan.total_units * plan.effective_rounds)


def calculate_round_progress(plan: StudyPlan, sessions: list[StudySession], round_number: int) -> Progress:
    completed = sum(
        _session_units(s) for s in sessions if s.round == round_number and not s.is_review
    )
    return Progress(completed=completed, target=plan.total_units)


def _minutes_per_unit(plan: StudyPlan, sessions: list[StudySession]) -> float:
    units = sum(s.units_completed for s in sessions)
    if not sessions or units == 0:
        return plan.minutes_per_unit
    return sum(s.duration_minutes for s in sessions) / units


def evaluate_achievability(
    plan: StudyPlan, sessions: list[StudySession], today: date | None = None
) -> str:
    today = today or date.today()
    progress = calculate_progress(plan, sessions)
    if progress.is_complete:
        return "achieved"
    if plan.is_overdue(today):
        return "overdue"

    lead = progress.ratio - plan.time_progress(today)
    if lead >= 0.2:
        return "comfortable"
    if lead >= -0.1:
        return "onTrack"

    needed = progress.remaining * _minutes_per_unit(plan, sessions)
    available = plan.remaining_days(today) * STUDY_HOURS_PER_DAY * 60
    if available <= 0:
        return "impossible"
    ratio = needed / available
    if ratio <= 1.2:
        return "challenging"
    elif ratio <= 1.5:
        return "atRisk"
    return "impossible"


def achievability_color(label: str) -> str:
    if label in ("achieved", "comfortable"):
        return "green"
    elif label == "onTrack":
        return "cyan"
    elif label == "challenging":
        return "yellow"
    elif label == "atRisk":
        return "dark_orange"
    return "red"
