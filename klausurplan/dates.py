import uuid
from datetime import date, timedelta
from typing import List

from .models import Week, Weekday


def weeks_between(start: date, end: date) -> List[Week]:
    """One Week per ISO calendar week touched by the two dates, in order.

    The dates may come in either order.
    """
    if end < start:
        start, end = end, start
    weeks: List[Week] = []
    current = start - timedelta(days=start.weekday())  # Monday of start's week
    seen = set()
    while current <= end:
        iso_year, iso_week, _ = current.isocalendar()
        if (iso_year, iso_week) not in seen:
            seen.add((iso_year, iso_week))
            weeks.append(Week(id=str(uuid.uuid4()), week_number=iso_week, year=iso_year))
        current += timedelta(days=7)
    return weeks


def exam_date(week: Week, day: Weekday) -> date:
    return date.fromisocalendar(week.year, week.week_number, day.position + 1)


def week_label(week: Week) -> str:
    return f"KW{week.week_number}"
