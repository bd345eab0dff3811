from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Weekday(str, Enum):
    MONDAY = 'Monday'
    TUESDAY = 'Tuesday'
    WEDNESDAY = 'Wednesday'
    THURSDAY = 'Thursday'
    FRIDAY = 'Friday'

    @property
    def position(self) -> int:
        return WEEKDAYS.index(self)


WEEKDAYS: Tuple[Weekday, ...] = tuple(Weekday)

MAX_EXAMS_PER_WEEK = 2
DEFAULT_DURATION_MIN = 90

# week_id -> day -> blocked
BlockedDays = Dict[str, Dict[Weekday, bool]]
# class_name -> week_id -> day -> blocked
BlockedClassDays = Dict[str, Dict[str, Dict[Weekday, bool]]]


@dataclass(frozen=True)
class Week:
    id: str
    week_number: int
    year: int
    is_blocked: bool = False
    week_type: str = 'A'  # 'A' or 'B'


@dataclass
class ClassTimetable:
    class_name: str
    weekly_subjects: Dict[Weekday, List[str]] = field(default_factory=dict)
    # alternating-week variant; not consulted for placement
    weekly_subjects_b: Optional[Dict[Weekday, List[str]]] = None

    def subjects_on(self, day: Weekday) -> List[str]:
        return list(self.weekly_subjects.get(day, []))

    def all_subjects(self) -> List[str]:
        """Distinct subjects of the primary variant, in first-seen order."""
        seen: List[str] = []
        for day in WEEKDAYS:
            for subject in self.weekly_subjects.get(day, []):
                if subject not in seen:
                    seen.append(subject)
        return seen


@dataclass(frozen=True)
class Exam:
    id: str
    class_name: str
    subject: str
    duration_minutes: int = DEFAULT_DURATION_MIN
    is_pinned: bool = False
    assigned_week_id: Optional[str] = None
    assigned_day: Optional[Weekday] = None

    def __post_init__(self):
        if (self.assigned_week_id is None) != (self.assigned_day is None):
            raise ValueError(
                f"Exam {self.id}: week and day must both be set or both be empty"
            )

    @property
    def is_assigned(self) -> bool:
        return self.assigned_week_id is not None


@dataclass(frozen=True)
class MoveCheck:
    valid: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


class PlacementParams:
    def __init__(self, max_per_week=MAX_EXAMS_PER_WEEK, duration_minutes=DEFAULT_DURATION_MIN, seed=None):
        self.max_per_week = max_per_week
        self.duration_minutes = duration_minutes
        self.seed = seed


@dataclass
class PdfSettings:
    title: str = 'Klausurplanung'
    makeup_exam_info: Optional[str] = None
    grades_due_date: Optional[str] = None
    footnotes: Tuple[str, ...] = (
        '*Absprache mit KuK',
        '**individuell (gegebenenfalls gemeinsamer Termin nach den Ferien)',
    )
