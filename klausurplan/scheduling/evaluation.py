from typing import Dict, Optional, Sequence
import networkx as nx
import pandas as pd

from ..dates import exam_date, week_label
from ..graph_build import SINK, SOURCE, build_slot_graph
from ..models import BlockedClassDays, BlockedDays, ClassTimetable, Exam, Week, MAX_EXAMS_PER_WEEK
from .validation import blocked_weeks_ok, day_collisions_ok, pairing_ok, timetable_ok, week_cap_ok


def placement_upper_bound(exams: Sequence[Exam], class_timetables: Sequence[ClassTimetable],
                          weeks: Sequence[Week], blocked_days: Optional[BlockedDays] = None,
                          blocked_class_days: Optional[BlockedClassDays] = None,
                          max_per_week: int = MAX_EXAMS_PER_WEEK) -> Dict[str, int]:
    """Most unpinned exams per class that any placement could fit.

    Classes do not share capacity, so a max-flow per class is exact. The
    greedy engines may place fewer; this is the yardstick, not a solver.
    """
    by_class = {t.class_name: t for t in class_timetables}
    bounds: Dict[str, int] = {}
    for class_name in sorted({e.class_name for e in exams}):
        G = build_slot_graph(by_class.get(class_name), class_name, exams, weeks,
                             blocked_days, blocked_class_days, max_per_week)
        bounds[class_name] = int(nx.maximum_flow_value(G, SOURCE, SINK))
    return bounds


def summary(exams: Sequence[Exam], class_timetables: Sequence[ClassTimetable], weeks: Sequence[Week],
            blocked_days: Optional[BlockedDays] = None, blocked_class_days: Optional[BlockedClassDays] = None,
            max_per_week: int = MAX_EXAMS_PER_WEEK) -> str:
    timetables = {t.class_name: t for t in class_timetables}
    total = len(exams)
    placed = sum(1 for e in exams if e.is_assigned)
    pinned = sum(1 for e in exams if e.is_pinned)
    weeks_used = len({e.assigned_week_id for e in exams if e.is_assigned})
    open_weeks = sum(1 for w in weeks if not w.is_blocked)

    bounds = placement_upper_bound(exams, class_timetables, weeks, blocked_days, blocked_class_days, max_per_week)
    best = sum(bounds.values()) + sum(1 for e in exams if e.is_pinned and e.is_assigned)
    warning = ""
    if placed < best:
        warning = f"Note: up to {best} exams could be placed; greedy placed {placed}. Try auto-fix again.\n"
    short = [c for c, b in bounds.items() if b < sum(1 for e in exams if e.class_name == c and not e.is_pinned)]
    if short:
        warning += f"Not enough free slots for: {', '.join(short)}\n"
    return (
        f"Exams: {total}  Placed: {placed}  Unassigned: {total - placed}  Pinned: {pinned}\n"
        f"Weeks available: {open_weeks}  Used: {weeks_used}\n"
        f"Best possible placed: {best}\n"
        f"Valid (pairing): {pairing_ok(exams)}  Valid (cap): {week_cap_ok(exams, max_per_week)}  "
        f"Valid (collisions): {day_collisions_ok(exams)}  Valid (timetable): {timetable_ok(exams, timetables)}  "
        f"Valid (blocked weeks): {blocked_weeks_ok(exams, weeks)}\n"
        f"{warning}"
    )


def exams_frame(exams: Sequence[Exam], weeks: Sequence[Week]) -> pd.DataFrame:
    by_id = {w.id: w for w in weeks}
    rows = []
    for e in exams:
        week = by_id.get(e.assigned_week_id) if e.assigned_week_id else None
        placed = week is not None and e.assigned_day is not None
        rows.append({
            'class': e.class_name,
            'subject': e.subject,
            'week': week_label(week) if placed else None,
            'day': e.assigned_day.value if placed else None,
            'date': exam_date(week, e.assigned_day) if placed else None,
            'pinned': e.is_pinned,
            'exam_id': e.id,
        })
    return pd.DataFrame(rows, columns=['class', 'subject', 'week', 'day', 'date', 'pinned', 'exam_id'])
