"""
Board analytics: completion, due-date pressure, breakdowns and activity.

Computed over live tasks (not archived, not deleted). A task counts as
done when it is completed or sits in a completion-status column.
"""
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional

from .schema import Task, Category, Column, Priority
from .views import parse_date, is_done

PRIORITY_LABELS = {
    Priority.URGENT: "Urgent",
    Priority.HIGH: "High",
    Priority.MEDIUM: "Medium",
    Priority.LOW: "Low",
}


@dataclass
class BoardStats:
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    todo: int = 0
    overdue: List[Task] = field(default_factory=list)
    due_today: List[Task] = field(default_factory=list)
    due_this_week: List[Task] = field(default_factory=list)
    priority_breakdown: List[Dict[str, Any]] = field(default_factory=list)
    category_breakdown: List[Dict[str, Any]] = field(default_factory=list)
    status_breakdown: List[Dict[str, Any]] = field(default_factory=list)
    streak: int = 0
    completion_rate: int = 0
    avg_estimate: int = 0
    total_estimated_time: int = 0
    remaining_estimated_time: int = 0
    favorites: int = 0
    pinned: int = 0
    created_today: int = 0
    created_this_week: int = 0
    productivity_score: int = 0
    high_priority_incomplete: int = 0
    weekly_activity: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalTasks": self.total,
            "completedTasks": self.completed,
            "inProgressTasks": self.in_progress,
            "todoTasks": self.todo,
            "overdueTasks": len(self.overdue),
            "overdueTasksList": [t.to_dict() for t in self.overdue],
            "dueTodayTasks": len(self.due_today),
            "dueTodayTasksList": [t.to_dict() for t in self.due_today],
            "dueThisWeekTasks": len(self.due_this_week),
            "priorityBreakdown": self.priority_breakdown,
            "categoryBreakdown": self.category_breakdown,
            "statusBreakdown": self.status_breakdown,
            "streak": self.streak,
            "completionRate": self.completion_rate,
            "avgEstimate": self.avg_estimate,
            "totalEstimatedTime": self.total_estimated_time,
            "remainingEstimatedTime": self.remaining_estimated_time,
            "favoriteTasks": self.favorites,
            "pinnedTasks": self.pinned,
            "createdToday": self.created_today,
            "createdThisWeek": self.created_this_week,
            "productivityScore": self.productivity_score,
            "highPriorityIncomplete": self.high_priority_incomplete,
            "weeklyActivity": self.weekly_activity,
        }


def _percent(part: int, whole: int) -> int:
    # Round half up, matching the displayed percentages
    return int(part * 100 / whole + 0.5) if whole else 0


def completion_streak(done_dates: Iterable[date], today: date) -> int:
    """
    Consecutive days with at least one completion, ending today or
    yesterday (a streak survives until the end of the following day).
    """
    days = set(done_dates)
    if today in days:
        check = today
    elif today - timedelta(days=1) in days:
        check = today - timedelta(days=1)
    else:
        return 0
    streak = 0
    while check in days:
        streak += 1
        check -= timedelta(days=1)
    return streak


def productivity_score(total: int, completion_rate: int, overdue: int, streak: int) -> int:
    """0-100: 40% completion rate, up to 30 for no overdue work, up to 30 for streak."""
    if total == 0:
        return 0
    score = completion_rate * 0.4 + max(0, 30 - overdue * 10) + min(30, streak * 5)
    return int(score + 0.5)


def compute_stats(
    tasks: Iterable[Task],
    categories: Iterable[Category],
    columns: Iterable[Column],
    today: Optional[date] = None,
) -> BoardStats:
    today = today or date.today()
    tasks = list(tasks)
    columns = list(columns)
    completion_ids = {c.id for c in columns if c.is_completion_status}

    def done(t: Task) -> bool:
        return is_done(t, completion_ids)

    active = [t for t in tasks if not t.is_archived and not t.is_deleted]
    stats = BoardStats(total=len(active))
    stats.completed = sum(1 for t in active if done(t))
    stats.in_progress = sum(1 for t in active if t.status == "in-progress")
    stats.todo = sum(1 for t in active if t.status == "todo")

    week_ahead = today + timedelta(days=7)
    for t in active:
        due = parse_date(t.due_date)
        if due is None or done(t):
            continue
        if due < today:
            stats.overdue.append(t)
        elif due == today:
            stats.due_today.append(t)
        elif due <= week_ahead:
            stats.due_this_week.append(t)

    stats.priority_breakdown = [
        {
            "value": p.value,
            "label": PRIORITY_LABELS[p],
            "count": sum(1 for t in active if t.priority == p and not done(t)),
            "total": sum(1 for t in active if t.priority == p),
            "completed": sum(1 for t in active if t.priority == p and done(t)),
        }
        for p in Priority
    ]
    stats.category_breakdown = [
        {
            "id": c.id,
            "name": c.name,
            "color": c.color,
            "total": sum(1 for t in active if t.category == c.id),
            "completed": sum(1 for t in active if t.category == c.id and done(t)),
            "inProgress": sum(1 for t in active if t.category == c.id and t.status == "in-progress"),
        }
        for c in categories
    ]
    stats.status_breakdown = []
    for col in columns:
        count = sum(1 for t in active if t.status == col.id)
        stats.status_breakdown.append({
            "id": col.id,
            "title": col.title,
            "color": col.color,
            "count": count,
            "percentage": _percent(count, stats.total),
        })

    done_dates = []
    for t in tasks:
        if t.is_deleted or not done(t):
            continue
        day = parse_date(t.completed_at or t.created_at)
        if day is not None:
            done_dates.append(day)
    stats.streak = completion_streak(done_dates, today)
    stats.completion_rate = _percent(stats.completed, stats.total)

    estimated = [t for t in active if t.time_estimate]
    stats.total_estimated_time = sum(t.time_estimate for t in estimated)
    if estimated:
        stats.avg_estimate = int(stats.total_estimated_time / len(estimated) + 0.5)
    stats.remaining_estimated_time = sum(t.time_estimate for t in estimated if not done(t))

    stats.favorites = sum(1 for t in active if t.is_favorite)
    stats.pinned = sum(1 for t in active if t.is_pinned)
    week_ago = today - timedelta(days=7)
    created = [parse_date(t.created_at) for t in active]
    stats.created_today = sum(1 for d in created if d == today)
    stats.created_this_week = sum(1 for d in created if d is not None and d >= week_ago)

    stats.productivity_score = productivity_score(
        stats.total, stats.completion_rate, len(stats.overdue), stats.streak)
    stats.high_priority_incomplete = sum(
        1 for t in active if t.priority in (Priority.HIGH, Priority.URGENT) and not done(t))

    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        day_tasks = [t for t in tasks if not t.is_deleted and parse_date(t.created_at) == day]
        stats.weekly_activity.append({
            "day": day.strftime("%a"),
            "date": day.day,
            "created": len(day_tasks),
            "completed": sum(1 for t in day_tasks if done(t)),
        })
    return stats
