"""
Taskboard schema: tasks, columns (statuses), categories, lists, templates.

Statuses are dynamic: a task's ``status`` is a ``StatusId`` referencing a
Column id, either from the global column sequence or from the override
sequence carried by a CustomList.

Every record serializes to the persisted camelCase JSON shape
(``dueDate``, ``isFavorite``, ``listId`` ...) so stored and exported data
stay compatible across versions.
"""
from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any, NewType
import random
import string


StatusId = NewType("StatusId", str)


class Priority(Enum):
    """Task priority, ranked urgent > high > medium > low."""
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return PRIORITY_RANK[self]

    @classmethod
    def from_str(cls, value: str) -> "Priority":
        try:
            return cls(value)
        except ValueError:
            return cls.MEDIUM


PRIORITY_RANK: Dict[Priority, int] = {
    Priority.URGENT: 4,
    Priority.HIGH: 3,
    Priority.MEDIUM: 2,
    Priority.LOW: 1,
}


class ViewMode(Enum):
    """Top-level task partition selector."""
    ALL = "all"
    FAVORITES = "favorites"
    CALENDAR = "calendar"
    ARCHIVED = "archived"
    TRASH = "trash"

    @classmethod
    def from_str(cls, value: str) -> "ViewMode":
        try:
            return cls(value)
        except ValueError:
            return cls.ALL


class RecurrenceType(Enum):
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @classmethod
    def from_str(cls, value: str) -> "RecurrenceType":
        try:
            return cls(value)
        except ValueError:
            return cls.NONE


class BoardViewType(Enum):
    """How the board groups tasks into lanes."""
    STATUS = "status"
    PRIORITY = "priority"
    CATEGORY = "category"
    DUE_DATE = "dueDate"

    @classmethod
    def from_str(cls, value: str) -> "BoardViewType":
        try:
            return cls(value)
        except ValueError:
            return cls.STATUS


class SortBy(Enum):
    PRIORITY = "priority"
    DUE_DATE = "dueDate"
    TITLE = "title"
    CREATED_AT = "createdAt"

    @classmethod
    def from_str(cls, value: str) -> "SortBy":
        try:
            return cls(value)
        except ValueError:
            return cls.PRIORITY


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def from_str(cls, value: str) -> "SortOrder":
        try:
            return cls(value)
        except ValueError:
            return cls.DESC


# Symbolic icon names a category may carry
CATEGORY_ICONS = (
    "briefcase", "user", "palette", "code", "home", "heart",
    "book", "star", "shopping-cart", "music",
)

LIST_COLORS = [
    "#6366f1", "#8b5cf6", "#ec4899", "#f43f5e",
    "#f97316", "#eab308", "#22c55e", "#14b8a6",
    "#3b82f6", "#06b6d4",
]


def generate_id() -> str:
    """Short random base-36 identifier."""
    alphabet = string.ascii_lowercase + string.digits
    return "".join(random.choice(alphabet) for _ in range(7))


def utc_now() -> str:
    """ISO-8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()


def _opt(data: Dict[str, Any], key: str, value: Any) -> None:
    # Optional fields are omitted from the persisted shape when unset
    if value is not None:
        data[key] = value


@dataclass
class Subtask:
    id: str
    title: str
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "completed": self.completed}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Subtask":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            completed=bool(data.get("completed", False)),
        )


@dataclass
class Task:
    """A single task card."""

    id: str
    title: str
    description: str = ""
    status: StatusId = StatusId("todo")
    priority: Priority = Priority.MEDIUM
    category: str = ""
    due_date: Optional[str] = None          # calendar date, YYYY-MM-DD
    tags: List[str] = field(default_factory=list)
    created_at: str = field(default_factory=utc_now)
    reminder: Optional[str] = None
    subtasks: Optional[List[Subtask]] = None

    # Flags
    is_favorite: bool = False
    is_archived: bool = False
    is_deleted: bool = False
    is_pinned: bool = False
    is_completed: bool = False
    deleted_at: Optional[str] = None
    completed_at: Optional[str] = None

    list_id: Optional[str] = None
    time_estimate: Optional[int] = None     # minutes
    time_spent: Optional[int] = None        # minutes
    recurrence: Optional[RecurrenceType] = None
    recurrence_end_date: Optional[str] = None
    depends_on: Optional[List[str]] = None
    blocked_by: Optional[List[str]] = None

    def add_tag(self, tag: str) -> None:
        """Append a tag unless already present (insertion order kept)."""
        tag = tag.strip()
        if tag and tag not in self.tags:
            self.tags.append(tag)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority.value,
            "category": self.category,
            "tags": list(self.tags),
            "createdAt": self.created_at,
            "isFavorite": self.is_favorite,
            "isArchived": self.is_archived,
            "isDeleted": self.is_deleted,
            "isPinned": self.is_pinned,
            "isCompleted": self.is_completed,
        }
        _opt(data, "dueDate", self.due_date)
        _opt(data, "reminder", self.reminder)
        if self.subtasks is not None:
            data["subtasks"] = [s.to_dict() for s in self.subtasks]
        _opt(data, "deletedAt", self.deleted_at)
        _opt(data, "completedAt", self.completed_at)
        _opt(data, "listId", self.list_id)
        _opt(data, "timeEstimate", self.time_estimate)
        _opt(data, "timeSpent", self.time_spent)
        if self.recurrence is not None:
            data["recurrence"] = self.recurrence.value
        _opt(data, "recurrenceEndDate", self.recurrence_end_date)
        if self.depends_on is not None:
            data["dependsOn"] = list(self.depends_on)
        if self.blocked_by is not None:
            data["blockedBy"] = list(self.blocked_by)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """Deserialize from the persisted shape. Missing flags default to False."""
        subtasks = data.get("subtasks")
        recurrence = data.get("recurrence")
        depends_on = data.get("dependsOn")
        blocked_by = data.get("blockedBy")
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", ""),
            description=data.get("description") or "",
            status=StatusId(data.get("status") or "todo"),
            priority=Priority.from_str(data.get("priority", "medium")),
            category=data.get("category", ""),
            due_date=data.get("dueDate") or None,
            tags=list(data.get("tags") or []),
            created_at=data.get("createdAt") or utc_now(),
            reminder=data.get("reminder"),
            subtasks=[Subtask.from_dict(s) for s in subtasks] if subtasks is not None else None,
            is_favorite=bool(data.get("isFavorite", False)),
            is_archived=bool(data.get("isArchived", False)),
            is_deleted=bool(data.get("isDeleted", False)),
            is_pinned=bool(data.get("isPinned", False)),
            is_completed=bool(data.get("isCompleted", False)),
            deleted_at=data.get("deletedAt"),
            completed_at=data.get("completedAt"),
            list_id=data.get("listId"),
            time_estimate=data.get("timeEstimate"),
            time_spent=data.get("timeSpent"),
            recurrence=RecurrenceType.from_str(recurrence) if recurrence else None,
            recurrence_end_date=data.get("recurrenceEndDate"),
            depends_on=list(depends_on) if depends_on is not None else None,
            blocked_by=list(blocked_by) if blocked_by is not None else None,
        )


@dataclass
class Column:
    """A status a task can occupy."""
    id: StatusId
    title: str
    color: str = "#6366f1"
    is_custom: bool = False
    is_completion_status: bool = False   # landing here marks a task completed

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "title": self.title, "color": self.color}
        if self.is_custom:
            data["isCustom"] = True
        if self.is_completion_status:
            data["isCompletionStatus"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Column":
        return cls(
            id=StatusId(data.get("id", "")),
            title=data.get("title", ""),
            color=data.get("color", "#6366f1"),
            is_custom=bool(data.get("isCustom", False)),
            is_completion_status=bool(data.get("isCompletionStatus", False)),
        )


@dataclass
class Category:
    id: str
    name: str
    color: str = "#6366f1"
    icon: str = "briefcase"
    is_custom: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "name": self.name, "color": self.color, "icon": self.icon}
        if self.is_custom:
            data["isCustom"] = True
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Category":
        icon = data.get("icon", "briefcase")
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            color=data.get("color", "#6366f1"),
            icon=icon if icon in CATEGORY_ICONS else "briefcase",
            is_custom=bool(data.get("isCustom", False)),
        )


@dataclass
class CustomList:
    """A named partition over tasks, optionally with its own column set."""
    id: str
    name: str
    color: str = "#6366f1"
    created_at: str = field(default_factory=utc_now)
    columns: Optional[List[Column]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "createdAt": self.created_at,
        }
        if self.columns is not None:
            data["columns"] = [c.to_dict() for c in self.columns]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CustomList":
        columns = data.get("columns")
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            color=data.get("color", "#6366f1"),
            created_at=data.get("createdAt") or utc_now(),
            columns=[Column.from_dict(c) for c in columns] if columns is not None else None,
        )


@dataclass
class TaskTemplate:
    """Default field values used to pre-populate a new task."""
    id: str
    name: str
    title: str = ""
    description: str = ""
    priority: Priority = Priority.MEDIUM
    category: str = ""
    tags: List[str] = field(default_factory=list)
    subtasks: Optional[List[Subtask]] = None
    time_estimate: Optional[int] = None
    recurrence: Optional[RecurrenceType] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "title": self.title,
            "description": self.description,
            "priority": self.priority.value,
            "category": self.category,
            "tags": list(self.tags),
        }
        if self.subtasks is not None:
            data["subtasks"] = [s.to_dict() for s in self.subtasks]
        _opt(data, "timeEstimate", self.time_estimate)
        if self.recurrence is not None:
            data["recurrence"] = self.recurrence.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TaskTemplate":
        subtasks = data.get("subtasks")
        recurrence = data.get("recurrence")
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            title=data.get("title", ""),
            description=data.get("description", ""),
            priority=Priority.from_str(data.get("priority", "medium")),
            category=data.get("category", ""),
            tags=list(data.get("tags") or []),
            subtasks=[Subtask.from_dict(s) for s in subtasks] if subtasks is not None else None,
            time_estimate=data.get("timeEstimate"),
            recurrence=RecurrenceType.from_str(recurrence) if recurrence else None,
        )


@dataclass
class Notification:
    """Activity-log entry shown in the notification tray."""
    id: str
    title: str
    message: str
    time: str = "Just now"
    type: str = "info"
    unread: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "message": self.message,
            "time": self.time,
            "type": self.type,
            "unread": self.unread,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Notification":
        return cls(
            id=data.get("id", ""),
            title=data.get("title", ""),
            message=data.get("message", ""),
            time=data.get("time", "Just now"),
            type=data.get("type", "info"),
            unread=bool(data.get("unread", True)),
        )


# ── Defaults ─────────────────────────────────────────────────────────────────

DEFAULT_COLUMNS: List[Column] = [
    Column(StatusId("todo"), "To Do", "#6366f1"),
    Column(StatusId("in-progress"), "In Progress", "#f59e0b"),
    Column(StatusId("review"), "Review", "#ec4899"),
    Column(StatusId("done"), "Done", "#22c55e", is_completion_status=True),
]

DEFAULT_CATEGORIES: List[Category] = [
    Category("work", "Work", "#6366f1", "briefcase"),
    Category("personal", "Personal", "#22c55e", "user"),
    Category("design", "Design", "#f43f5e", "palette"),
    Category("development", "Development", "#3b82f6", "code"),
]

INITIAL_LISTS: List[CustomList] = [
    CustomList("default", "My Tasks", "#6366f1", "2026-01-01"),
]

DEFAULT_TEMPLATES: List[TaskTemplate] = [
    TaskTemplate(
        id="template-1",
        name="Bug Fix",
        title="Fix: ",
        description="Bug description and steps to reproduce",
        priority=Priority.HIGH,
        category="development",
        tags=["bug"],
        subtasks=[
            Subtask("s1", "Investigate issue"),
            Subtask("s2", "Write fix"),
            Subtask("s3", "Test fix"),
        ],
    ),
    TaskTemplate(
        id="template-2",
        name="Feature Request",
        title="Feature: ",
        description="Feature description and requirements",
        priority=Priority.MEDIUM,
        category="development",
        tags=["feature"],
        subtasks=[
            Subtask("s1", "Design solution"),
            Subtask("s2", "Implement"),
            Subtask("s3", "Test"),
            Subtask("s4", "Document"),
        ],
    ),
    TaskTemplate(
        id="template-3",
        name="Meeting Notes",
        title="Meeting: ",
        description="Attendees:\n\nAgenda:\n\nNotes:\n\nAction Items:",
        priority=Priority.LOW,
        category="work",
        tags=["meeting"],
    ),
]

INITIAL_TASKS: List[Task] = [
    Task(
        id="1",
        title="Design new dashboard layout",
        description="Create wireframes and mockups for the new admin dashboard with modern bento-style layout",
        status=StatusId("in-progress"),
        priority=Priority.HIGH,
        category="design",
        due_date="2026-01-30",
        tags=["ui", "dashboard", "priority"],
        created_at="2026-01-20",
        is_favorite=True,
        subtasks=[
            Subtask("1-1", "Create wireframes", True),
            Subtask("1-2", "Design mockups"),
            Subtask("1-3", "Get feedback"),
        ],
    ),
    Task(
        id="2",
        title="Implement authentication flow",
        description="Set up OAuth integration with Google and GitHub providers.",
        status=StatusId("todo"),
        priority=Priority.URGENT,
        category="development",
        due_date="2026-01-28",
        tags=["backend", "security"],
        created_at="2026-01-21",
        reminder="2026-01-27T09:00:00",
        is_favorite=True,
    ),
    Task(
        id="3",
        title="Review Q4 reports",
        description="Analyze quarterly performance metrics and prepare summary for stakeholders",
        status=StatusId("review"),
        priority=Priority.MEDIUM,
        category="work",
        due_date="2026-01-29",
        tags=["reports", "analysis"],
        created_at="2026-01-19",
    ),
    Task(
        id="4",
        title="Update user documentation",
        description="Refresh the getting started guide and API documentation",
        status=StatusId("done"),
        priority=Priority.LOW,
        category="development",
        due_date="2026-01-25",
        tags=["docs", "maintenance"],
        created_at="2026-01-15",
        is_completed=True,
    ),
    Task(
        id="5",
        title="Plan team offsite",
        description="Organize the annual team building event",
        status=StatusId("todo"),
        priority=Priority.MEDIUM,
        category="personal",
        due_date="2026-02-15",
        tags=["team", "planning"],
        created_at="2026-01-22",
    ),
]
