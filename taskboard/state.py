"""
Explicit application state.

AppState is the whole persisted domain (tasks, lists, categories, columns,
templates, preferences, notifications). Commands never mutate it in place:
they return a new AppState built with ``dataclasses.replace``.

FilterState and SelectionState are session-only UI state; they are not
persisted.
"""
import copy
from dataclasses import dataclass, field, replace
from typing import Optional, List, Union

from .schema import (
    Task, Column, Category, CustomList, TaskTemplate, Notification,
    ViewMode, BoardViewType, Priority, SortBy, SortOrder, StatusId,
    DEFAULT_COLUMNS, DEFAULT_CATEGORIES, DEFAULT_TEMPLATES, INITIAL_LISTS, INITIAL_TASKS,
)


VIEWS = ("board", "bento", "analytics")

NOTIFICATION_CAP = 50


@dataclass
class AppState:
    """Everything that is written to the persistent store."""
    tasks: List[Task] = field(default_factory=list)
    custom_lists: List[CustomList] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    columns: List[Column] = field(default_factory=list)
    collapsed_columns: List[str] = field(default_factory=list)
    templates: List[TaskTemplate] = field(default_factory=list)
    view: str = "board"
    compact_view: bool = False
    board_view_type: BoardViewType = BoardViewType.STATUS
    notifications: List[Notification] = field(default_factory=list)
    sort_by: SortBy = SortBy.PRIORITY
    sort_order: SortOrder = SortOrder.DESC

    @classmethod
    def initial(cls) -> "AppState":
        """Fresh state seeded with the built-in defaults."""
        return cls(
            tasks=copy.deepcopy(INITIAL_TASKS),
            custom_lists=copy.deepcopy(INITIAL_LISTS),
            categories=copy.deepcopy(DEFAULT_CATEGORIES),
            columns=copy.deepcopy(DEFAULT_COLUMNS),
            templates=copy.deepcopy(DEFAULT_TEMPLATES),
        )

    def find_task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)

    def find_list(self, list_id: Optional[str]) -> Optional[CustomList]:
        if not list_id:
            return None
        return next((l for l in self.custom_lists if l.id == list_id), None)

    def find_category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self.categories if c.id == category_id), None)

    def find_column(self, column_id: str) -> Optional[Column]:
        """Look a status up globally, then in every list override."""
        for column in self.columns:
            if column.id == column_id:
                return column
        for lst in self.custom_lists:
            for column in lst.columns or []:
                if column.id == column_id:
                    return column
        return None

    def effective_columns(self, list_id: Optional[str]) -> List[Column]:
        """Column set that applies to tasks of a list (override, else global)."""
        lst = self.find_list(list_id)
        if lst and lst.columns:
            return lst.columns
        return self.columns

    def with_tasks(self, tasks: List[Task]) -> "AppState":
        return replace(self, tasks=tasks)


@dataclass
class FilterState:
    """Current view / filter / search selection."""
    view_mode: ViewMode = ViewMode.ALL
    selected_list_id: Optional[str] = None
    selected_category: Optional[str] = None
    selected_status: Optional[StatusId] = None
    priority_filter: Union[Priority, str] = "all"
    search_query: str = ""

    @property
    def has_active_filters(self) -> bool:
        return bool(
            self.selected_category
            or self.selected_list_id
            or self.selected_status
            or self.priority_filter != "all"
            or self.search_query
        )

    # Sidebar selections are mutually exclusive: choosing one clears the others

    def select_list(self, list_id: Optional[str]) -> "FilterState":
        if list_id:
            return replace(self, selected_list_id=list_id,
                           selected_status=None, selected_category=None)
        return replace(self, selected_list_id=None)

    def select_category(self, category_id: Optional[str]) -> "FilterState":
        if category_id:
            return replace(self, selected_category=category_id,
                           selected_status=None, selected_list_id=None)
        return replace(self, selected_category=None)

    def select_status(self, status_id: Optional[str]) -> "FilterState":
        if status_id:
            return replace(self, selected_status=StatusId(status_id),
                           selected_category=None, selected_list_id=None)
        return replace(self, selected_status=None)

    def clear(self) -> "FilterState":
        return FilterState()


@dataclass
class SelectionState:
    """Bulk-selection mode and the ids currently selected."""
    selected_task_ids: List[str] = field(default_factory=list)
    is_selection_mode: bool = False

    def toggle_mode(self) -> "SelectionState":
        if self.is_selection_mode:
            return SelectionState()
        return SelectionState(is_selection_mode=True)

    def select(self, task_id: str, selected: bool = True) -> "SelectionState":
        ids = [i for i in self.selected_task_ids if i != task_id]
        if selected:
            ids.append(task_id)
        return replace(self, selected_task_ids=ids)

    def select_all(self, tasks: List[Task]) -> "SelectionState":
        return replace(self, selected_task_ids=[t.id for t in tasks])

    def deselect_all(self) -> "SelectionState":
        return replace(self, selected_task_ids=[])
