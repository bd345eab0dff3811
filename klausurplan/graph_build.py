from typing import Dict, Optional, Sequence
import networkx as nx

from .models import BlockedClassDays, BlockedDays, ClassTimetable, Exam, Week, WEEKDAYS, MAX_EXAMS_PER_WEEK
from .scheduling.validation import is_class_day_blocked, is_day_blocked, is_subject_taught

SOURCE = 'source'
SINK = 'sink'


def build_slot_graph(timetable: Optional[ClassTimetable], class_name: str, exams: Sequence[Exam],
                     weeks: Sequence[Week], blocked_days: Optional[BlockedDays],
                     blocked_class_days: Optional[BlockedClassDays],
                     max_per_week: int = MAX_EXAMS_PER_WEEK) -> nx.DiGraph:
    """Flow network for one class: source -> exam -> slot -> week -> sink.

    Unpinned exams of the class are the supply. Pinned exams are not nodes;
    they take their slot out of the graph and reduce their week's capacity.
    """
    G = nx.DiGraph()
    G.add_node(SOURCE)
    G.add_node(SINK)
    mine = [e for e in exams if e.class_name == class_name]
    pinned = [e for e in mine if e.is_pinned and e.is_assigned]
    pinned_slots = {(e.assigned_week_id, e.assigned_day) for e in pinned}
    pinned_load: Dict[str, int] = {}
    for e in pinned:
        pinned_load[e.assigned_week_id] = pinned_load.get(e.assigned_week_id, 0) + 1

    for week in weeks:
        if week.is_blocked:
            continue
        room = max(0, max_per_week - pinned_load.get(week.id, 0))
        G.add_edge(('week', week.id), SINK, capacity=room)

    for exam in mine:
        if exam.is_pinned:
            continue
        G.add_edge(SOURCE, ('exam', exam.id), capacity=1)
        for week in weeks:
            if week.is_blocked:
                continue
            for day in WEEKDAYS:
                if (week.id, day) in pinned_slots:
                    continue
                if is_day_blocked(blocked_days, week.id, day):
                    continue
                if is_class_day_blocked(blocked_class_days, class_name, week.id, day):
                    continue
                if not is_subject_taught(timetable, exam.subject, day):
                    continue
                G.add_edge(('exam', exam.id), ('slot', week.id, day), capacity=1)
                G.add_edge(('slot', week.id, day), ('week', week.id), capacity=1)
    return G
