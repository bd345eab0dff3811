from typing import Dict, Iterable, List, Optional

from ..models import (
    BlockedClassDays, BlockedDays, ClassTimetable, Exam, MoveCheck, Week, Weekday,
    MAX_EXAMS_PER_WEEK,
)


def is_subject_taught(timetable: Optional[ClassTimetable], subject: str, day: Weekday) -> bool:
    # unknown class: nothing is taught, so nothing can be placed
    if timetable is None:
        return False
    return subject in timetable.weekly_subjects.get(day, [])


def count_exams_in_week(exams: Iterable[Exam], class_name: str, week_id: str) -> int:
    return sum(1 for e in exams if e.class_name == class_name and e.assigned_week_id == week_id)


def is_day_blocked(blocked_days: Optional[BlockedDays], week_id: str, day: Weekday) -> bool:
    return bool((blocked_days or {}).get(week_id, {}).get(day, False))


def is_class_day_blocked(blocked_class_days: Optional[BlockedClassDays], class_name: str,
                         week_id: str, day: Weekday) -> bool:
    return bool((blocked_class_days or {}).get(class_name, {}).get(week_id, {}).get(day, False))


def validate_move(exam: Exam, target_week_id: str, target_day: Weekday, all_exams: List[Exam],
                  class_timetable: Optional[ClassTimetable], blocked_days: Optional[BlockedDays],
                  blocked_class_days: Optional[BlockedClassDays] = None,
                  max_per_week: int = MAX_EXAMS_PER_WEEK) -> MoveCheck:
    """Can `exam` sit at (target_week_id, target_day)?

    Checks run in a fixed order and the first failure decides the reason:
    global block, class block, timetable, week cap, same-day collision.
    The exam itself is ignored when counting, so re-validating its current
    slot succeeds.
    """
    if is_day_blocked(blocked_days, target_week_id, target_day):
        return MoveCheck(False, 'Day is blocked globally.')
    if is_class_day_blocked(blocked_class_days, exam.class_name, target_week_id, target_day):
        return MoveCheck(False, 'Day is blocked for this class.')
    if not is_subject_taught(class_timetable, exam.subject, target_day):
        return MoveCheck(False, f"{exam.subject} is not taught on {target_day.value}.")

    others = [e for e in all_exams if e.id != exam.id]
    if count_exams_in_week(others, exam.class_name, target_week_id) >= max_per_week:
        return MoveCheck(False, f"Max {max_per_week} exams reached for this week.")
    if any(e.class_name == exam.class_name and e.assigned_week_id == target_week_id
           and e.assigned_day == target_day for e in others):
        return MoveCheck(False, 'Another exam is already scheduled for this day.')
    return MoveCheck(True)


# Whole-schedule checks

def pairing_ok(exams: Iterable[Exam]) -> bool:
    return all((e.assigned_week_id is None) == (e.assigned_day is None) for e in exams)


def week_cap_ok(exams: Iterable[Exam], max_per_week: int = MAX_EXAMS_PER_WEEK) -> bool:
    load: Dict[tuple, int] = {}
    for e in exams:
        if e.assigned_week_id is None:
            continue
        key = (e.class_name, e.assigned_week_id)
        load[key] = load.get(key, 0) + 1
        if load[key] > max_per_week:
            return False
    return True


def day_collisions_ok(exams: Iterable[Exam]) -> bool:
    used = set()
    for e in exams:
        if e.assigned_week_id is None:
            continue
        key = (e.class_name, e.assigned_week_id, e.assigned_day)
        if key in used:
            return False
        used.add(key)
    return True


def timetable_ok(exams: Iterable[Exam], timetables: Dict[str, ClassTimetable]) -> bool:
    """Pinned exams are trusted and not checked."""
    for e in exams:
        if e.is_pinned or e.assigned_day is None:
            continue
        if not is_subject_taught(timetables.get(e.class_name), e.subject, e.assigned_day):
            return False
    return True


def blocked_weeks_ok(exams: Iterable[Exam], weeks: Iterable[Week]) -> bool:
    blocked = {w.id for w in weeks if w.is_blocked}
    return not any(e.assigned_week_id in blocked for e in exams if not e.is_pinned)
