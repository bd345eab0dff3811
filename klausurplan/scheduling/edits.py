"""Edits a host applies between engine runs.

All functions return new containers and leave their inputs alone.
"""
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from ..models import BlockedClassDays, BlockedDays, ClassTimetable, Exam, Week, Weekday


def move_exam(exams: Sequence[Exam], exam_id: str, week_id: Optional[str], day: Optional[Weekday]) -> List[Exam]:
    """Put one exam at (week_id, day), or back to unassigned with (None, None).

    Not validated; run validate_move first for feedback. A pinned exam keeps
    its pin at the new slot.
    """
    return [replace(e, assigned_week_id=week_id, assigned_day=day) if e.id == exam_id else e for e in exams]


def toggle_pin(exams: Sequence[Exam], exam_id: str) -> List[Exam]:
    return [replace(e, is_pinned=not e.is_pinned) if e.id == exam_id else e for e in exams]


def toggle_day_block(blocked_days: BlockedDays, week_id: str, day: Weekday) -> BlockedDays:
    updated = {wid: dict(days) for wid, days in blocked_days.items()}
    week_blocks = updated.setdefault(week_id, {})
    week_blocks[day] = not week_blocks.get(day, False)
    return updated


def toggle_class_day_block(blocked_class_days: BlockedClassDays, class_name: str,
                           week_id: str, day: Weekday) -> BlockedClassDays:
    updated = {
        cls: {wid: dict(days) for wid, days in weeks.items()}
        for cls, weeks in blocked_class_days.items()
    }
    week_blocks = updated.setdefault(class_name, {}).setdefault(week_id, {})
    week_blocks[day] = not week_blocks.get(day, False)
    return updated


def toggle_week_block(weeks: Sequence[Week], week_id: str) -> List[Week]:
    return [replace(w, is_blocked=not w.is_blocked) if w.id == week_id else w for w in weeks]


def toggle_week_type(weeks: Sequence[Week], week_id: str) -> List[Week]:
    return [replace(w, week_type='B' if w.week_type == 'A' else 'A') if w.id == week_id else w for w in weeks]


def merge_timetables(existing: Sequence[ClassTimetable],
                     imported: Sequence[ClassTimetable]) -> List[ClassTimetable]:
    """Imported classes replace same-named ones in place; new ones are appended."""
    merged = list(existing)
    index = {t.class_name: i for i, t in enumerate(merged)}
    for t in imported:
        if t.class_name in index:
            merged[index[t.class_name]] = t
        else:
            index[t.class_name] = len(merged)
            merged.append(t)
    return merged


def remove_subject(timetables: Sequence[ClassTimetable], class_name: str, day: Weekday,
                   subject: str) -> List[ClassTimetable]:
    """Drop one entry of `subject` from a class's day.

    A double lesson listed twice keeps its other entry. Unknown class or
    subject leaves the list as it was.
    """
    updated: List[ClassTimetable] = []
    for t in timetables:
        lessons = t.weekly_subjects.get(day, [])
        if t.class_name == class_name and subject in lessons:
            lessons = list(lessons)
            lessons.remove(subject)
            t = replace(t, weekly_subjects={**t.weekly_subjects, day: lessons})
        updated.append(t)
    return updated


def default_selection(timetables: Sequence[ClassTimetable]) -> Dict[str, List[str]]:
    return {t.class_name: t.all_subjects() for t in timetables}
