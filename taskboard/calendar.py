"""
Month calendar: a fixed 6x7 grid (Sunday first) and tasks keyed by due date.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Tuple

from .schema import Task

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
DAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

GRID_CELLS = 42


@dataclass
class CalendarDay:
    date: date
    is_current_month: bool
    is_today: bool = False
    tasks: List[Task] = field(default_factory=list)

    @property
    def day(self) -> int:
        return self.date.day

    def to_dict(self) -> Dict[str, object]:
        return {
            "date": self.date.isoformat(),
            "day": self.day,
            "isCurrentMonth": self.is_current_month,
            "isToday": self.is_today,
            "tasks": [t.to_dict() for t in self.tasks],
        }


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """(year, month) moved by ``delta`` months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_title(year: int, month: int) -> str:
    return f"{MONTH_NAMES[month - 1]} {year}"


def month_grid(
    year: int,
    month: int,
    tasks: Iterable[Task] = (),
    today: Optional[date] = None,
) -> List[CalendarDay]:
    """
    The 42 cells shown for a month: trailing days of the previous month,
    the month itself, then leading days of the next month.
    """
    first = date(year, month, 1)
    # date.weekday() is Monday=0; shift so Sunday starts the week
    leading = (first.weekday() + 1) % 7
    start = first - timedelta(days=leading)
    by_date = tasks_by_date(tasks)
    today = today or date.today()

    cells = []
    for offset in range(GRID_CELLS):
        day = start + timedelta(days=offset)
        cells.append(CalendarDay(
            date=day,
            is_current_month=(day.year, day.month) == (year, month),
            is_today=day == today,
            tasks=by_date.get(day.isoformat(), []),
        ))
    return cells


def tasks_by_date(tasks: Iterable[Task]) -> Dict[str, List[Task]]:
    """Non-archived tasks grouped by their YYYY-MM-DD due date."""
    grouped: Dict[str, List[Task]] = {}
    for task in tasks:
        if task.is_archived or not task.due_date:
            continue
        grouped.setdefault(task.due_date[:10], []).append(task)
    return grouped


def tasks_on(tasks: Iterable[Task], day: date) -> List[Task]:
    return tasks_by_date(tasks).get(day.isoformat(), [])
