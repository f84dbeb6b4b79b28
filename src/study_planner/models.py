"""Data classes for the planner domain model."""
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from typing import Optional, Union

PLAN_STATUSES = ("active", "paused", "completed")
ACHIEVABILITY_LABELS = (
    "achieved", "comfortable", "onTrack", "challenging", "atRisk", "overdue", "impossible",
)


def day_of(value: Union[date, datetime]) -> date:
    """Truncate a timestamp to its calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


class _Record:
    """JSON round-tripping for dataclasses stored in the key-value store."""

    _date_fields: tuple = ()
    _datetime_fields: tuple = ()

    def to_dict(self) -> dict:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, (date, datetime)):
                value = value.isoformat()
            elif isinstance(value, tuple):
                value = list(value)
            data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: dict):
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        for name in cls._date_fields:
            if kwargs.get(name):
                kwargs[name] = date.fromisoformat(kwargs[name])
        for name in cls._datetime_fields:
            if kwargs.get(name):
                kwargs[name] = datetime.fromisoformat(kwargs[name])
        return cls(**kwargs)


@dataclass
class StudyPlan(_Record):
    id: str
    user_id: str
    title: str
    total_units: int
    unit_start: int
    unit_end: int
    deadline: date
    created_at: date
    difficulty: str = "normal"
    target_rounds: int = 1
    rounds: int = 1
    study_days: list = field(default_factory=lambda: [1, 2, 3, 4, 5])
    status: str = "active"
    unit_label: str = "units"
    minutes_per_unit: float = 5.0

    _date_fields = ("deadline", "created_at")

    @property
    def effective_rounds(self) -> int:
        return max(self.rounds, self.target_rounds)

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def is_study_day(self, weekday: int) -> bool:
        """weekday uses ISO numbering: 1=Monday .. 7=Sunday."""
        return weekday in self.study_days

    def is_overdue(self, today: date) -> bool:
        return today > self.deadline

    def remaining_days(self, today: date) -> int:
        if today > self.deadline:
            return 0
        return (self.deadline - max(today, self.created_at)).days + 1

    def time_progress(self, today: date) -> float:
        total = (self.deadline - self.created_at).days + 1
        if total <= 0:
            return 1.0
        elapsed = (min(today, self.deadline) - self.created_at).days + 1
        return min(max(elapsed, 0) / total, 1.0)


@dataclass
class StudySession(_Record):
    id: str
    user_id: str
    plan_id: str
    date: datetime
    units_completed: int
    duration_minutes: int
    concentration: float = 0.8
    difficulty: int = 3
    round: int = 1
    start_unit: Optional[int] = None
    end_unit: Optional[int] = None
    mode: str = "quantity"  # quantity | range
    intent: str = "learning"  # learning | review
    review_item_ids: list = field(default_factory=list)
    # Review ids came from a review task and stay fixed on edit
    pinned_review_items: bool = False

    _datetime_fields = ("date",)

    def __post_init__(self):
        # A stored range is authoritative for the unit count.
        if self.has_range:
            self.units_completed = max(0, self.end_unit - self.start_unit + 1)

    @property
    def has_range(self) -> bool:
        return self.start_unit is not None and self.end_unit is not None

    @property
    def is_review(self) -> bool:
        return self.intent == "review"


@dataclass
class ReviewItem(_Record):
    id: str
    user_id: str
    plan_id: str
    unit_number: int
    last_review_date: datetime
    next_review_date: datetime
    ease_factor: float = 2.5
    repetitions: int = 0
    interval_days: int = 1

    _datetime_fields = ("last_review_date", "next_review_date")

    def is_due(self, today: date) -> bool:
        return day_of(self.next_review_date) <= today


@dataclass
class DailyTask:
    id: str
    plan_id: str
    date: date
    start_unit: int
    end_unit: int
    units: int
    estimated_minutes: int
    round: int = 1
    advice: str = ""


@dataclass
class ReviewTask(DailyTask):
    review_item_ids: list = field(default_factory=list)


@dataclass
class ActiveTask:
    kind: str  # daily | review
    task: DailyTask
    plan: StudyPlan
    progress: float
    achievability: str


@dataclass(frozen=True)
class NewLearning:
    """Session studies units for the first time; review items get minted."""


@dataclass(frozen=True)
class Review:
    """Session re-studies units; existing review items advance.

    ``item_ids`` pins the exact review items a review task was built from.
    Left empty, targets are found by unit range among items due today.
    """
    item_ids: tuple = ()


SessionIntent = Union[NewLearning, Review]


@dataclass
class SecondaryFailure:
    step: str  # mint_review | advance_review | award_points | study_hours
    target: str
    message: str


@dataclass
class RecordOutcome:
    session: StudySession
    created: bool = True
    points_awarded: int = 0
    level: Optional[int] = None
    leveled_up: bool = False
    minted_review_ids: list = field(default_factory=list)
    advanced_review_ids: list = field(default_factory=list)
    secondary_failures: list = field(default_factory=list)

    @property
    def fully_applied(self) -> bool:
        return not self.secondary_failures


@dataclass
class UserPoints(_Record):
    user_id: str
    points: int = 0
    weekly_points: int = 0
    level: int = 1
    last_updated: Optional[datetime] = None

    _datetime_fields = ("last_updated",)


@dataclass
class UserProfile(_Record):
    user_id: str
    total_study_hours: float = 0.0
    sessions_recorded: int = 0


@dataclass
class Friend(_Record):
    id: str
    user_id: str
    name: str
    avatar: str = "👤"
    level: int = 1
    points: int = 0
    status: str = "offline"
    added_at: Optional[datetime] = None

    _datetime_fields = ("added_at",)


@dataclass
class CooperationGoal(_Record):
    id: str
    title: str
    creator_id: str
    participant_ids: list
    target_progress: int
    deadline: date
    description: str = ""
    current_progress: int = 0
    created_at: Optional[datetime] = None
    status: str = "active"  # active | completed | cancelled

    _date_fields = ("deadline",)
    _datetime_fields = ("created_at",)


@dataclass
class RankingEntry:
    rank: int
    user_id: str
    name: str
    avatar: str
    points: int
    level: int
    status: str = "offline"
