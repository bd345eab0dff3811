import csv
import io
import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, IO, List, Optional, Union

from .dates import exam_date, week_label
from .models import BlockedClassDays, BlockedDays, ClassTimetable, Exam, Week, Weekday, WEEKDAYS

logger = logging.getLogger(__name__)

TextOrPath = Union[str, os.PathLike, IO]


@dataclass
class PlannerState:
    """Everything the planner document holds."""
    classes: List[ClassTimetable] = field(default_factory=list)
    weeks: List[Week] = field(default_factory=list)
    exams: List[Exam] = field(default_factory=list)
    blocked_days: BlockedDays = field(default_factory=dict)
    blocked_class_days: BlockedClassDays = field(default_factory=dict)
    selected_subjects: Dict[str, List[str]] = field(default_factory=dict)


def _open_text(src: TextOrPath):
    """Return a text-mode file handle and a flag indicating whether to close it.

    Accepts a filesystem path, a text IO object, or a BytesIO buffer.
    """
    if isinstance(src, (str, os.PathLike)):
        return open(src, 'r', encoding='utf-8', newline=''), True
    if isinstance(src, io.BytesIO):
        src.seek(0)
        return io.TextIOWrapper(src, encoding='utf-8', newline=''), True
    if hasattr(src, 'read'):
        if hasattr(src, 'seek'):
            src.seek(0)
        return src, False
    raise TypeError("Unsupported input type; expected path or file-like object")


def _read_json(src: TextOrPath) -> Any:
    f, should_close = _open_text(src)
    try:
        return json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}") from e
    finally:
        if should_close:
            f.close()


def _weekday(name: str) -> Weekday:
    try:
        return Weekday(name)
    except ValueError:
        raise ValueError(f"Unknown weekday {name!r}; expected one of {[d.value for d in WEEKDAYS]}") from None


def _day_map(raw: Dict[str, List[str]]) -> Dict[Weekday, List[str]]:
    days = {day: [] for day in WEEKDAYS}
    for name, subjects in raw.items():
        if not isinstance(subjects, list):
            raise ValueError(f"Subjects for {name!r} must be a list, got {type(subjects).__name__}")
        days[_weekday(name)] = [str(s).strip() for s in subjects]
    return days


def _day_map_out(days: Dict[Weekday, List[str]]) -> Dict[str, List[str]]:
    return {day.value: list(days.get(day, [])) for day in WEEKDAYS}


def timetable_from_dict(raw: Dict[str, Any]) -> ClassTimetable:
    if not isinstance(raw, dict) or not raw.get('className') or not isinstance(raw.get('subjects'), dict):
        raise ValueError("Invalid timetable; expected an object with 'className' and 'subjects'")
    raw_b = raw.get('subjectsB')
    return ClassTimetable(
        class_name=str(raw['className']).strip(),
        weekly_subjects=_day_map(raw['subjects']),
        weekly_subjects_b=_day_map(raw_b) if raw_b else None,
    )


def timetable_to_dict(t: ClassTimetable) -> Dict[str, Any]:
    out = {'className': t.class_name, 'subjects': _day_map_out(t.weekly_subjects)}
    if t.weekly_subjects_b is not None:
        out['subjectsB'] = _day_map_out(t.weekly_subjects_b)
    return out


def load_timetables(src: TextOrPath) -> List[ClassTimetable]:
    """Timetable JSON: a single class object or a list of them."""
    data = _read_json(src)
    if not isinstance(data, list):
        data = [data]
    timetables = [timetable_from_dict(raw) for raw in data]
    logger.info("Loaded %d class timetables", len(timetables))
    return timetables


def _week_from_dict(raw: Dict[str, Any]) -> Week:
    week_type = raw.get('weekType', 'A')
    if week_type not in ('A', 'B'):
        raise ValueError(f"Week {raw.get('id')}: weekType must be 'A' or 'B'")
    return Week(id=str(raw['id']), week_number=int(raw['weekNumber']), year=int(raw['year']),
                is_blocked=bool(raw.get('isBlocked', False)), week_type=week_type)


def _exam_from_dict(raw: Dict[str, Any]) -> Exam:
    day = raw.get('assignedDay')
    return Exam(
        id=str(raw['id']),
        class_name=str(raw['className']),
        subject=str(raw['subject']),
        duration_minutes=int(raw.get('durationMinutes', 90)),
        is_pinned=bool(raw.get('isPinned', False)),
        assigned_week_id=raw.get('assignedWeekId'),
        assigned_day=_weekday(day) if day else None,
    )


def _exam_to_dict(e: Exam) -> Dict[str, Any]:
    return {
        'id': e.id,
        'className': e.class_name,
        'subject': e.subject,
        'durationMinutes': e.duration_minutes,
        'isPinned': e.is_pinned,
        'assignedWeekId': e.assigned_week_id,
        'assignedDay': e.assigned_day.value if e.assigned_day else None,
    }


def _blocks_in(raw: Dict[str, Dict[str, bool]]) -> Dict[str, Dict[Weekday, bool]]:
    return {wid: {_weekday(d): bool(v) for d, v in days.items()} for wid, days in raw.items()}


def _blocks_out(blocks: Dict[str, Dict[Weekday, bool]]) -> Dict[str, Dict[str, bool]]:
    return {wid: {d.value: v for d, v in days.items()} for wid, days in blocks.items()}


def load_state(src: TextOrPath) -> PlannerState:
    data = _read_json(src)
    if not isinstance(data, dict):
        raise ValueError("Planner document must be a JSON object")
    try:
        state = PlannerState(
            classes=[timetable_from_dict(c) for c in data.get('classes', [])],
            weeks=[_week_from_dict(w) for w in data.get('weeks', [])],
            exams=[_exam_from_dict(e) for e in data.get('exams', [])],
            blocked_days=_blocks_in(data.get('blockedDays', {})),
            blocked_class_days={cls: _blocks_in(weeks) for cls, weeks in data.get('blockedClassDays', {}).items()},
            selected_subjects={cls: list(s) for cls, s in data.get('selectedSubjects', {}).items()},
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise ValueError(f"Malformed planner document: {e!r}") from e
    logger.info("Loaded state: %d classes, %d weeks, %d exams", len(state.classes), len(state.weeks), len(state.exams))
    return state


def state_to_dict(state: PlannerState) -> Dict[str, Any]:
    return {
        'classes': [timetable_to_dict(t) for t in state.classes],
        'weeks': [
            {'id': w.id, 'weekNumber': w.week_number, 'year': w.year,
             'isBlocked': w.is_blocked, 'weekType': w.week_type}
            for w in state.weeks
        ],
        'exams': [_exam_to_dict(e) for e in state.exams],
        'blockedDays': _blocks_out(state.blocked_days),
        'blockedClassDays': {cls: _blocks_out(weeks) for cls, weeks in state.blocked_class_days.items()},
        'selectedSubjects': state.selected_subjects,
    }


def save_state(path: str, state: PlannerState):
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(state_to_dict(state), f, indent=2, ensure_ascii=False)


def save_exams_csv(path: str, exams: List[Exam], weeks: List[Week]):
    by_id: Dict[str, Week] = {w.id: w for w in weeks}
    with open(path, 'w', newline='', encoding='utf-8') as f:
        w = csv.writer(f)
        w.writerow(['class', 'subject', 'week', 'year', 'day', 'date', 'pinned', 'exam_id'])
        for e in exams:
            week: Optional[Week] = by_id.get(e.assigned_week_id) if e.assigned_week_id else None
            if week is not None and e.assigned_day is not None:
                row = [week_label(week), week.year, e.assigned_day.value, exam_date(week, e.assigned_day).isoformat()]
            else:
                row = ['', '', '', '']
            w.writerow([e.class_name, e.subject, *row, int(e.is_pinned), e.id])
