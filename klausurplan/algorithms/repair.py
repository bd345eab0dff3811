import logging
import random
from dataclasses import replace
from typing import List, Optional, Sequence

from ..models import BlockedClassDays, BlockedDays, ClassTimetable, Exam, Week, MAX_EXAMS_PER_WEEK
from .greedy import find_slot

logger = logging.getLogger(__name__)


def auto_fix(existing_exams: Sequence[Exam], class_timetables: Sequence[ClassTimetable], weeks: Sequence[Week],
             blocked_days: Optional[BlockedDays], blocked_class_days: Optional[BlockedClassDays] = None,
             rng: Optional[random.Random] = None, max_per_week: int = MAX_EXAMS_PER_WEEK) -> List[Exam]:
    """Re-place every unpinned exam around the pinned ones.

    Pinned exams come first, untouched and not re-validated, and occupy
    their slots. Unpinned exams follow in input order; each is cleared and
    searched again against what has been placed so far. Nothing is added
    or dropped.
    """
    rng = rng or random.Random()
    by_class = {t.class_name: t for t in class_timetables}

    result: List[Exam] = [e for e in existing_exams if e.is_pinned]
    moved = 0
    for exam in existing_exams:
        if exam.is_pinned:
            continue
        cleared = replace(exam, assigned_week_id=None, assigned_day=None)
        timetable = by_class.get(exam.class_name)
        if timetable is None:
            logger.warning("Exam %s references unknown class %s; left unassigned", exam.id, exam.class_name)
        slot = find_slot(exam.class_name, exam.subject, timetable, weeks, result,
                         blocked_days, blocked_class_days, rng, max_per_week)
        if slot is None:
            result.append(cleared)
            continue
        week_id, day = slot
        if (week_id, day) != (exam.assigned_week_id, exam.assigned_day):
            moved += 1
        result.append(replace(cleared, assigned_week_id=week_id, assigned_day=day))

    pinned = sum(1 for e in result if e.is_pinned)
    logger.info("Auto-fix: %d pinned, %d re-placed (%d moved), %d unassigned",
                pinned, len(result) - pinned, moved, sum(1 for e in result if not e.is_assigned))
    return result
