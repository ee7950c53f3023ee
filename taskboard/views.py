"""
View composition: everything the board renders is derived here.

All functions are pure over (tasks, lists, columns, categories, filters):
  - active column resolution (list override / global / union of all scopes)
  - the filter predicate chain and multi-criteria stable sort
  - badge counts for the sidebar and status bar
  - lane grouping for the alternative board view types
"""
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from functools import cmp_to_key
from typing import Optional, List, Dict, Iterable, Set

from .schema import (
    Task, Column, CustomList, Priority, ViewMode, SortBy, SortOrder,
    BoardViewType, StatusId,
)
from .state import AppState, FilterState


# ── Columns ──────────────────────────────────────────────────────────────────


def active_columns(
    columns: List[Column],
    custom_lists: List[CustomList],
    selected_list_id: Optional[str] = None,
) -> List[Column]:
    """
    Resolve the column set for the current scope.

    A selected list with a non-empty override uses it verbatim; a selected
    list without one uses the global sequence. With no list selected the
    result is the union of every scope: global columns first, then each
    list's columns in list order, first id seen wins.
    """
    if selected_list_id:
        selected = next((l for l in custom_lists if l.id == selected_list_id), None)
        if selected and selected.columns:
            return list(selected.columns)
        return list(columns)

    result = list(columns)
    seen = {c.id for c in columns}
    for lst in custom_lists:
        for column in lst.columns or []:
            if column.id not in seen:
                seen.add(column.id)
                result.append(column)
    return result


def completion_status_ids(state: AppState) -> Set[str]:
    """Ids of every column, in any scope, flagged as a completion status."""
    return {c.id for c in active_columns(state.columns, state.custom_lists) if c.is_completion_status}


def is_done(task: Task, completion_ids: Iterable[str] = ()) -> bool:
    return task.is_completed or task.status in completion_ids


def default_status(state: AppState, selected_list_id: Optional[str] = None) -> StatusId:
    """Status a new task starts in for the current scope."""
    selected = state.find_list(selected_list_id)
    if selected_list_id and selected and selected.columns:
        return selected.columns[0].id
    if state.columns:
        return state.columns[0].id
    return StatusId("todo")


# ── Filtering ────────────────────────────────────────────────────────────────


def task_matches(task: Task, filters: FilterState) -> bool:
    """Predicate chain; each step rejects early, search is the final term."""
    mode = filters.view_mode

    if mode == ViewMode.TRASH:
        if not task.is_deleted:
            return False
    elif task.is_deleted:
        return False

    if mode == ViewMode.FAVORITES and not task.is_favorite:
        return False

    if mode == ViewMode.ARCHIVED:
        if not task.is_archived:
            return False
    elif task.is_archived:
        return False

    if filters.selected_list_id and task.list_id != filters.selected_list_id:
        return False
    if filters.selected_category and task.category != filters.selected_category:
        return False
    if filters.selected_status and task.status != filters.selected_status:
        return False

    priority = filters.priority_filter
    if priority != "all":
        wanted = priority if isinstance(priority, Priority) else Priority.from_str(priority)
        if task.priority != wanted:
            return False

    if filters.search_query:
        query = filters.search_query.lower()
        return (
            query in task.title.lower()
            or query in task.description.lower()
            or any(query in tag.lower() for tag in task.tags)
        )
    return True


def filter_tasks(tasks: Iterable[Task], filters: FilterState) -> List[Task]:
    return [t for t in tasks if task_matches(t, filters)]


# ── Sorting ──────────────────────────────────────────────────────────────────


def parse_timestamp(value: Optional[str]) -> float:
    """Epoch seconds for an ISO date or datetime string; naive values are UTC."""
    if not value:
        return 0.0
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return 0.0
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


def parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _sign(value: float) -> int:
    return (value > 0) - (value < 0)


def compare_tasks(a: Task, b: Task, sort_by: SortBy, sort_order: SortOrder) -> int:
    """
    Comparator for the board sort.

    Pinned tasks always lead and undated tasks always trail a due-date sort;
    neither rule is inverted by ``sort_order``. ASC inverts the key's
    natural direction (priority high→low, due date soonest first,
    title A→Z, newest created first).
    """
    if a.is_pinned != b.is_pinned:
        return -1 if a.is_pinned else 1

    if sort_by == SortBy.DUE_DATE:
        if not a.due_date and not b.due_date:
            return 0
        if not a.due_date:
            return 1
        if not b.due_date:
            return -1
        comparison = _sign(parse_timestamp(a.due_date) - parse_timestamp(b.due_date))
    elif sort_by == SortBy.PRIORITY:
        comparison = _sign(b.priority.rank - a.priority.rank)
    elif sort_by == SortBy.TITLE:
        ka, kb = (a.title.casefold(), a.title), (b.title.casefold(), b.title)
        comparison = (ka > kb) - (ka < kb)
    else:
        comparison = _sign(parse_timestamp(b.created_at) - parse_timestamp(a.created_at))

    return -comparison if sort_order == SortOrder.ASC else comparison


def sort_tasks(
    tasks: Iterable[Task],
    sort_by: SortBy = SortBy.PRIORITY,
    sort_order: SortOrder = SortOrder.DESC,
) -> List[Task]:
    """Stable sort; equal tasks keep their input order."""
    return sorted(tasks, key=cmp_to_key(lambda a, b: compare_tasks(a, b, sort_by, sort_order)))


def visible_tasks(state: AppState, filters: FilterState) -> List[Task]:
    return sort_tasks(filter_tasks(state.tasks, filters), state.sort_by, state.sort_order)


def tasks_for_column(tasks: Iterable[Task], column_id: str, view_mode: ViewMode = ViewMode.ALL) -> List[Task]:
    if view_mode == ViewMode.ARCHIVED:
        return [t for t in tasks if t.status == column_id]
    return [t for t in tasks if t.status == column_id and not t.is_archived]


# ── Counts ───────────────────────────────────────────────────────────────────


@dataclass
class TaskCounts:
    by_category: Dict[str, int] = field(default_factory=dict)
    by_status: Dict[str, int] = field(default_factory=dict)
    favorites: int = 0
    archived: int = 0
    trash: int = 0
    total: int = 0
    completed: int = 0

    def to_dict(self) -> Dict[str, object]:
        return {
            "byCategory": self.by_category,
            "byStatus": self.by_status,
            "favorites": self.favorites,
            "archived": self.archived,
            "trash": self.trash,
            "total": self.total,
            "completed": self.completed,
        }


def task_counts(
    tasks: Iterable[Task],
    selected_list_id: Optional[str] = None,
    completion_ids: Iterable[str] = (),
) -> TaskCounts:
    """
    Sidebar and status-bar badges.

    Category and status counts cover non-archived, non-deleted tasks; status
    counts only include the selected list's tasks when one is selected.
    Favorites/archived/trash/total ignore the list selection.
    """
    tasks = list(tasks)
    completion_ids = set(completion_ids)
    counts = TaskCounts()
    for task in tasks:
        if task.is_deleted:
            counts.trash += 1
            continue
        if task.is_archived:
            counts.archived += 1
            continue
        counts.total += 1
        if task.is_favorite:
            counts.favorites += 1
        if is_done(task, completion_ids):
            counts.completed += 1
        counts.by_category[task.category] = counts.by_category.get(task.category, 0) + 1
        if not selected_list_id or task.list_id == selected_list_id:
            counts.by_status[task.status] = counts.by_status.get(task.status, 0) + 1
    return counts


# ── Lanes ────────────────────────────────────────────────────────────────────


@dataclass
class Lane:
    id: str
    title: str
    color: str
    tasks: List[Task] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "title": self.title,
            "color": self.color,
            "tasks": [t.to_dict() for t in self.tasks],
        }


PRIORITY_LANES = [
    (Priority.URGENT, "Urgent", "#ef4444"),
    (Priority.HIGH, "High", "#f97316"),
    (Priority.MEDIUM, "Medium", "#eab308"),
    (Priority.LOW, "Low", "#22c55e"),
]

DUE_DATE_LANES = [
    ("overdue", "Overdue", "#ef4444"),
    ("today", "Today", "#f97316"),
    ("this-week", "This Week", "#eab308"),
    ("later", "Later", "#3b82f6"),
    ("no-date", "No Due Date", "#6b7280"),
]


def due_bucket(task: Task, today: date) -> str:
    due = parse_date(task.due_date)
    if due is None:
        return "no-date"
    if due < today:
        return "overdue"
    if due == today:
        return "today"
    if due <= today + timedelta(days=7):
        return "this-week"
    return "later"


def board_lanes(state: AppState, filters: FilterState, today: Optional[date] = None) -> List[Lane]:
    """Group the visible tasks into lanes according to the board view type."""
    tasks = visible_tasks(state, filters)
    view_type = state.board_view_type

    if view_type == BoardViewType.PRIORITY:
        return [Lane(p.value, title, color, [t for t in tasks if t.priority == p])
                for p, title, color in PRIORITY_LANES]

    if view_type == BoardViewType.CATEGORY:
        return [Lane(c.id, c.name, c.color, [t for t in tasks if t.category == c.id])
                for c in state.categories]

    if view_type == BoardViewType.DUE_DATE:
        today = today or date.today()
        return [Lane(key, title, color, [t for t in tasks if due_bucket(t, today) == key])
                for key, title, color in DUE_DATE_LANES]

    columns = active_columns(state.columns, state.custom_lists, filters.selected_list_id)
    return [Lane(c.id, c.title, c.color, tasks_for_column(tasks, c.id, filters.view_mode))
            for c in columns]


def view_title(state: AppState, filters: FilterState) -> str:
    if filters.selected_list_id:
        lst = state.find_list(filters.selected_list_id)
        return lst.name if lst else "Tasks"
    if filters.selected_category:
        category = state.find_category(filters.selected_category)
        return f"{category.name if category else filters.selected_category} Tasks"
    if filters.selected_status:
        column = state.find_column(filters.selected_status)
        return f"{column.title if column else filters.selected_status} Tasks"
    return {
        ViewMode.FAVORITES: "Favorite Tasks",
        ViewMode.ARCHIVED: "Archived Tasks",
        ViewMode.TRASH: "Trash",
        ViewMode.CALENDAR: "Calendar",
    }.get(filters.view_mode, "All Tasks")
