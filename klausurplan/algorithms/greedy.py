import logging
import random
import uuid
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from ..models import (
    BlockedClassDays, BlockedDays, ClassTimetable, Exam, Week, Weekday, WEEKDAYS,
    DEFAULT_DURATION_MIN, MAX_EXAMS_PER_WEEK,
)
from ..scheduling.validation import (
    count_exams_in_week, is_class_day_blocked, is_day_blocked, is_subject_taught,
)

logger = logging.getLogger(__name__)


def find_slot(class_name: str, subject: str, timetable: Optional[ClassTimetable], weeks: Sequence[Week],
              placed: Sequence[Exam], blocked_days: Optional[BlockedDays],
              blocked_class_days: Optional[BlockedClassDays], rng: random.Random,
              max_per_week: int = MAX_EXAMS_PER_WEEK) -> Optional[Tuple[str, Weekday]]:
    """First-fit search for a (week_id, day) slot.

    Weeks are scanned in order, weekdays in a fresh shuffled order per week.
    `placed` holds the exams already fixed in this run; only those count
    towards the week cap and the same-day check.
    """
    if timetable is None:
        return None
    for week in weeks:
        if week.is_blocked:
            continue
        week_load = count_exams_in_week(placed, class_name, week.id)
        taken = {e.assigned_day for e in placed if e.class_name == class_name and e.assigned_week_id == week.id}
        days = list(WEEKDAYS)
        rng.shuffle(days)
        for day in days:
            if is_day_blocked(blocked_days, week.id, day):
                continue
            if is_class_day_blocked(blocked_class_days, class_name, week.id, day):
                continue
            if not is_subject_taught(timetable, subject, day):
                continue
            if week_load >= max_per_week:
                # week is full, no point trying its other days
                break
            if day in taken:
                continue
            return week.id, day
    return None


def selected_subjects_for(timetable: ClassTimetable, selection: Sequence[str]) -> List[str]:
    taught = set(timetable.all_subjects())
    subjects: List[str] = []
    for s in selection:
        if s in taught and s not in subjects:
            subjects.append(s)
    return subjects


def distribute_exams(class_timetables: Sequence[ClassTimetable], weeks: Sequence[Week],
                     blocked_days: Optional[BlockedDays], selected_subjects: Dict[str, Sequence[str]],
                     blocked_class_days: Optional[BlockedClassDays] = None,
                     rng: Optional[random.Random] = None, max_per_week: int = MAX_EXAMS_PER_WEEK,
                     duration_minutes: int = DEFAULT_DURATION_MIN) -> List[Exam]:
    """Fresh greedy distribution: one new exam per selected (class, subject).

    Previous placements and pins are not consulted; the result replaces them.
    """
    rng = rng or random.Random()
    exams: List[Exam] = []
    for timetable in class_timetables:
        subjects = selected_subjects_for(timetable, selected_subjects.get(timetable.class_name, []))
        for subject in subjects:
            exam = Exam(id=str(uuid.uuid4()), class_name=timetable.class_name, subject=subject,
                        duration_minutes=duration_minutes)
            slot = find_slot(timetable.class_name, subject, timetable, weeks, exams,
                             blocked_days, blocked_class_days, rng, max_per_week)
            if slot is None:
                logger.debug("No slot for %s / %s", timetable.class_name, subject)
                exams.append(exam)
                continue
            week_id, day = slot
            logger.debug("Placed %s / %s in week %s on %s", timetable.class_name, subject, week_id, day.value)
            exams.append(replace(exam, assigned_week_id=week_id, assigned_day=day))

    unassigned = sum(1 for e in exams if not e.is_assigned)
    logger.info("Distributed %d exams (%d unassigned)", len(exams), unassigned)
    return exams
