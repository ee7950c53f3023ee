"""
Bento dashboard widgets: the catalog, the active layout and widget settings.

The layout is a list of ActiveWidget placements (at most MAX_ACTIVE_WIDGETS).
Layout reducers return new lists; the store helpers read and write the
layout and per-widget settings under their own storage keys.
"""
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .schema import Task, Category, Column, Priority, generate_id
from .store import KeyValueStore, StorageKeys
from .views import is_done, parse_date, parse_timestamp

MAX_ACTIVE_WIDGETS = 10
WIDGET_SIZES = ["small", "medium", "large", "wide", "tall"]
CLOCK_FORMATS = ("12h", "24h")

POMODORO_DEFAULT = 25
POMODORO_MIN = 1
POMODORO_MAX = 120


@dataclass(frozen=True)
class Widget:
    """Catalog entry."""
    id: str
    name: str
    description: str
    category: str  # productivity | knowledge | motivation | utilities | fun
    icon: str
    default_size: str = "small"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "icon": self.icon,
            "defaultSize": self.default_size,
        }


AVAILABLE_WIDGETS: List[Widget] = [
    # Productivity
    Widget("task-overview", "Task Overview", "Completion rate and task summary", "productivity", "LayoutDashboard", "large"),
    Widget("total-tasks", "Total Tasks", "Total tasks count with top category", "productivity", "ListTodo", "medium"),
    Widget("priority-tower", "Priority Tower", "Tasks grouped by priority level", "productivity", "Flag", "medium"),
    Widget("completed", "Completed", "Completed tasks count", "productivity", "CheckCircle2"),
    Widget("upcoming", "Upcoming", "Upcoming tasks list", "productivity", "Calendar", "medium"),
    Widget("new-task", "New Task", "Quick add new task button", "productivity", "Plus"),
    Widget("streak", "Streak", "Your productivity streak", "productivity", "Zap"),
    Widget("in-progress", "In Progress", "Tasks currently in progress", "productivity", "Clock"),
    Widget("categories", "Categories", "Task categories breakdown", "productivity", "FolderOpen", "medium"),
    Widget("recent-tasks", "Recent Tasks", "Recently created tasks", "productivity", "Clock", "large"),
    Widget("todays-tasks", "Today's Tasks", "Tasks due today", "productivity", "Sun", "medium"),
    Widget("upcoming-deadlines", "Upcoming Deadlines", "Next 3 urgent tasks", "productivity", "AlertCircle", "medium"),
    Widget("pomodoro", "Pomodoro Timer", "Focus session timer", "productivity", "Timer", "medium"),
    Widget("quick-notes", "Quick Notes", "Sticky-note style scratchpad", "productivity", "StickyNote", "medium"),
    Widget("recently-completed", "Recently Completed", "Small win recap", "productivity", "Trophy", "medium"),
    # Knowledge & curiosity
    Widget("random-wiki-fact", "Random Wiki Fact", "One surprising fact, refreshes daily", "knowledge", "BookOpen", "medium"),
    Widget("on-this-day", "On This Day", "Historical events that happened today", "knowledge", "History", "medium"),
    Widget("word-of-day", "Word of the Day", "Meaning, usage, pronunciation", "knowledge", "Type", "medium"),
    Widget("did-you-know", "Did You Know?", "Science, tech, space, or math nuggets", "knowledge", "Lightbulb"),
    Widget("mini-trivia", "Mini Trivia", "One question, tap to reveal answer", "knowledge", "HelpCircle", "medium"),
    # Motivation & mind
    Widget("random-quote", "Random Quote", "Motivation, philosophy, or humor", "motivation", "Quote", "medium"),
    Widget("daily-intention", "Daily Intention", "One short focus for the day", "motivation", "Target"),
    Widget("mood-check", "Mood Check", "Select mood, track over time", "motivation", "Smile"),
    Widget("breathing-box", "Breathing Box", "30-second guided breathing", "motivation", "Wind", "medium"),
    # Utilities & live data
    Widget("weather", "Weather", "Full weather with hourly chart, 7-day forecast, humidity, wind", "utilities", "Cloud", "large"),
    Widget("clock", "Clock", "Local time or chosen city", "utilities", "Clock"),
    Widget("location", "Location", "City, country, sunrise/sunset", "utilities", "MapPin"),
    # Fun & personal
    Widget("random-emoji", "Random Emoji", "Changes every refresh", "fun", "Smile"),
    Widget("mini-poll", "Mini Poll", "Simple this or that", "fun", "Vote"),
    Widget("surprise-me", "Surprise Me", "Randomly swaps between tiles", "fun", "Shuffle"),
]

WIDGETS_BY_ID: Dict[str, Widget] = {w.id: w for w in AVAILABLE_WIDGETS}


@dataclass
class ActiveWidget:
    """A widget placed on the dashboard."""
    id: str
    widget_id: str
    position: int
    size: str = "small"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "widgetId": self.widget_id, "position": self.position, "size": self.size}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActiveWidget":
        size = data.get("size", "small")
        return cls(
            id=str(data.get("id", "")),
            widget_id=data.get("widgetId", ""),
            position=int(data.get("position", 0)),
            size=size if size in WIDGET_SIZES else "small",
        )


DEFAULT_ACTIVE_WIDGETS: List[ActiveWidget] = [
    ActiveWidget(str(i + 1), widget_id, i)
    for i, widget_id in enumerate([
        "task-overview", "total-tasks", "priority-tower", "completed", "upcoming",
        "new-task", "streak", "in-progress", "categories", "recent-tasks",
    ])
]


# ── Layout reducers ──────────────────────────────────────────────────────────


def add_widget(widgets: List[ActiveWidget], widget_id: str) -> List[ActiveWidget]:
    """
    Append a widget; a full layout drops its last placement to make room.
    Unknown catalog ids are ignored.
    """
    if widget_id not in WIDGETS_BY_ID:
        return list(widgets)
    kept = list(widgets[:MAX_ACTIVE_WIDGETS - 1]) if len(widgets) >= MAX_ACTIVE_WIDGETS else list(widgets)
    return kept + [ActiveWidget(generate_id(), widget_id, len(kept))]


def remove_widget(widgets: List[ActiveWidget], placement_id: str) -> List[ActiveWidget]:
    return [w for w in widgets if w.id != placement_id]


def move_widget(widgets: List[ActiveWidget], dragged_id: str, target_id: str) -> List[ActiveWidget]:
    """Swap two placements and renumber positions."""
    ids = [w.id for w in widgets]
    if dragged_id == target_id or dragged_id not in ids or target_id not in ids:
        return list(widgets)
    result = list(widgets)
    i, j = ids.index(dragged_id), ids.index(target_id)
    result[i], result[j] = result[j], result[i]
    return [replace(w, position=n) for n, w in enumerate(result)]


def resize_widget(widgets: List[ActiveWidget], placement_id: str, size: Optional[str] = None) -> List[ActiveWidget]:
    """Set a placement's size, or cycle to the next size when none is given."""
    def resized(w: ActiveWidget) -> ActiveWidget:
        if size in WIDGET_SIZES:
            return replace(w, size=size)
        index = WIDGET_SIZES.index(w.size) if w.size in WIDGET_SIZES else -1
        return replace(w, size=WIDGET_SIZES[(index + 1) % len(WIDGET_SIZES)])

    return [resized(w) if w.id == placement_id else w for w in widgets]


# ── Settings ─────────────────────────────────────────────────────────────────


def clamp_pomodoro_duration(minutes) -> int:
    try:
        value = int(minutes)
    except (TypeError, ValueError):
        return POMODORO_DEFAULT
    return min(max(POMODORO_MIN, value), POMODORO_MAX)


def toggle_clock_format(fmt: str) -> str:
    return "24h" if fmt == "12h" else "12h"


def load_widgets(store: KeyValueStore) -> List[ActiveWidget]:
    saved = store.get(StorageKeys.BENTO_WIDGETS)
    if isinstance(saved, list) and saved:
        return [ActiveWidget.from_dict(w) for w in saved if isinstance(w, dict)]
    return [replace(w) for w in DEFAULT_ACTIVE_WIDGETS]


def save_widgets(store: KeyValueStore, widgets: List[ActiveWidget]) -> bool:
    # An empty layout is never persisted; the defaults come back on reload
    if not widgets:
        return False
    return store.set(StorageKeys.BENTO_WIDGETS, [w.to_dict() for w in widgets])


def load_pomodoro_duration(store: KeyValueStore) -> int:
    return clamp_pomodoro_duration(store.get(StorageKeys.POMODORO_DURATION, POMODORO_DEFAULT))


def save_pomodoro_duration(store: KeyValueStore, minutes) -> int:
    clamped = clamp_pomodoro_duration(minutes)
    store.set(StorageKeys.POMODORO_DURATION, clamped)
    return clamped


def load_clock_format(store: KeyValueStore) -> str:
    fmt = store.get(StorageKeys.CLOCK_FORMAT, "12h")
    return fmt if fmt in CLOCK_FORMATS else "12h"


def save_clock_format(store: KeyValueStore, fmt: str) -> bool:
    if fmt not in CLOCK_FORMATS:
        raise ValueError(f"Invalid clock format: {fmt}")
    return store.set(StorageKeys.CLOCK_FORMAT, fmt)


def format_clock(hour: int, minute: int, fmt: str = "12h") -> str:
    if fmt == "24h":
        return f"{hour:02d}:{minute:02d}"
    suffix = "AM" if hour < 12 else "PM"
    return f"{(hour % 12) or 12:02d}:{minute:02d} {suffix}"


# ── Dashboard summary ────────────────────────────────────────────────────────


def widget_stats(
    tasks: Iterable[Task],
    categories: Iterable[Category],
    columns: Iterable[Column] = (),
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Figures the productivity widgets display, over non-archived tasks.

    A task counts as done when it is completed or sits in any of the given
    completion columns.
    """
    today = today or date.today()
    live = [t for t in tasks if not t.is_archived and not t.is_deleted]
    categories = list(categories)

    completion_ids = {c.id for c in columns if c.is_completion_status}

    def done(t: Task) -> bool:
        return is_done(t, completion_ids)

    total = len(live)
    completed = sum(1 for t in live if done(t))
    category_count: Dict[str, int] = {}
    for t in live:
        category_count[t.category] = category_count.get(t.category, 0) + 1
    top = max(category_count.items(), key=lambda kv: kv[1], default=None)
    names = {c.id: c.name for c in categories}

    upcoming = sorted((t for t in live if t.due_date and not done(t)), key=lambda t: t.due_date)[:5]
    recent = sorted(live, key=lambda t: parse_timestamp(t.created_at), reverse=True)[:4]

    return {
        "totalTasks": total,
        "completedTasks": completed,
        "inProgressTasks": sum(1 for t in live if t.status == "in-progress"),
        "completionRate": int(completed * 100 / total + 0.5) if total else 0,
        "priorityCounts": {p.value: sum(1 for t in live if t.priority == p) for p in Priority},
        "topCategoryName": (names.get(top[0], top[0]) if top else "None"),
        "topCategoryCount": top[1] if top else 0,
        "upcomingTasks": [t.to_dict() for t in upcoming],
        "todaysTasks": [t.to_dict() for t in live if parse_date(t.due_date) == today],
        "recentTasks": [t.to_dict() for t in recent],
        "recentlyCompleted": [t.to_dict() for t in live if done(t)][:3],
        "categories": [
            {"id": c.id, "name": c.name, "color": c.color, "count": category_count[c.id]}
            for c in categories if category_count.get(c.id)
        ],
    }
