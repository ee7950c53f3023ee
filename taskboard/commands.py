"""
Mutation layer: named commands over AppState.

Every command is a pure reducer ``f(state, ...) -> CommandResult``. The
result carries the new state (never an alias of a mutated input), an
explicit Outcome and, when the user should hear about it, a Notification.
Notifications that belong in the activity log are also pushed at the head
of ``state.notifications`` (capped at NOTIFICATION_CAP).

Outcomes:
    APPLIED    the state changed (or the command was a valid no-change)
    NOT_FOUND  an id did not resolve; state returned unchanged
    REJECTED   the change would break an invariant (last column, last
               category, permanent delete outside trash); state unchanged
"""
import copy
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, List, Callable, Tuple

from .schema import (
    Task, Column, Category, CustomList, TaskTemplate, Notification, Subtask,
    SortBy, SortOrder, BoardViewType, StatusId, generate_id, utc_now,
)
from .state import AppState, SelectionState, VIEWS, NOTIFICATION_CAP

logger = logging.getLogger(__name__)


class Outcome(Enum):
    APPLIED = "applied"
    NOT_FOUND = "not_found"
    REJECTED = "rejected"


@dataclass
class CommandResult:
    state: AppState
    outcome: Outcome
    notification: Optional[Notification] = None
    selection: Optional[SelectionState] = None
    count: int = 0

    @property
    def applied(self) -> bool:
        return self.outcome == Outcome.APPLIED


# ── Result helpers ───────────────────────────────────────────────────────────


def push_notification(
    state: AppState,
    title: str,
    message: str,
    type: str = "info",
    now: Optional[str] = None,
) -> Tuple[AppState, Notification]:
    """Insert a notification at the head of the activity log."""
    note = Notification(id=generate_id(), title=title, message=message,
                        time=now or utc_now(), type=type, unread=True)
    notifications = [note] + state.notifications[:NOTIFICATION_CAP - 1]
    return replace(state, notifications=notifications), note


def _applied(
    state: AppState,
    title: Optional[str] = None,
    message: str = "",
    log: bool = True,
    now: Optional[str] = None,
    **extra,
) -> CommandResult:
    note = None
    if title:
        logger.info("%s: %s", title, message)
        if log:
            state, note = push_notification(state, title, message, now=now)
        else:
            note = Notification(id=generate_id(), title=title, message=message,
                                time=now or utc_now(), unread=False)
    return CommandResult(state, Outcome.APPLIED, note, **extra)


def _rejected(state: AppState, title: str, message: str, now: Optional[str] = None) -> CommandResult:
    logger.info("Rejected: %s (%s)", title, message)
    note = Notification(id=generate_id(), title=title, message=message,
                        time=now or utc_now(), type="error", unread=False)
    return CommandResult(state, Outcome.REJECTED, note)


def _not_found(state: AppState, kind: str, ident: Optional[str]) -> CommandResult:
    logger.debug("%s %s not found", kind, ident)
    return CommandResult(state, Outcome.NOT_FOUND)


def _map_task(state: AppState, task_id: str, fn: Callable[[Task], Task]) -> Tuple[AppState, Optional[Task], Optional[Task]]:
    """Replace one task through ``fn``. Returns (state, old, new)."""
    old = state.find_task(task_id)
    if old is None:
        return state, None, None
    new = fn(old)
    tasks = [new if t.id == task_id else t for t in state.tasks]
    return state.with_tasks(tasks), old, new


def _land(task: Task, column: Optional[Column], now: str) -> Task:
    """Set a task's status; a completion column marks it completed (sticky)."""
    if column is None:
        return task
    updated = replace(task, status=column.id)
    if column.is_completion_status and not task.is_completed:
        updated = replace(updated, is_completed=True, completed_at=now)
    return updated


def _unique_task_id(state: AppState) -> str:
    existing = {t.id for t in state.tasks}
    new_id = generate_id()
    while new_id in existing:
        new_id = generate_id()
    return new_id


# ── Task commands ────────────────────────────────────────────────────────────


def create_task(state: AppState, task: Task, selected_list_id: Optional[str] = None,
                now: Optional[str] = None) -> CommandResult:
    if state.find_task(task.id) is not None:
        return _rejected(state, "Cannot create task", f"Task id {task.id} already exists", now)
    if selected_list_id:
        task = replace(task, list_id=selected_list_id)
    state = state.with_tasks(state.tasks + [task])
    return _applied(state, "Task Created", f"Created new task: {task.title}", now=now)


def update_task(state: AppState, task: Task, now: Optional[str] = None) -> CommandResult:
    state, old, _ = _map_task(state, task.id, lambda t: task)
    if old is None:
        return _not_found(state, "Task", task.id)
    return _applied(state, "Task Updated", f"Updated task: {task.title}", now=now)


def rename_task(state: AppState, task_id: str, title: str, now: Optional[str] = None) -> CommandResult:
    state, old, _ = _map_task(state, task_id, lambda t: replace(t, title=title))
    if old is None:
        return _not_found(state, "Task", task_id)
    return _applied(state, "Task renamed", title, log=False, now=now)


def soft_delete_task(state: AppState, task_id: str, now: Optional[str] = None) -> CommandResult:
    now = now or utc_now()
    state, old, _ = _map_task(state, task_id, lambda t: replace(t, is_deleted=True, deleted_at=now))
    if old is None:
        return _not_found(state, "Task", task_id)
    return _applied(state, "Task Deleted", f"Moved to trash: {old.title}", now=now)


def restore_task(state: AppState, task_id: str, now: Optional[str] = None) -> CommandResult:
    state, old, _ = _map_task(state, task_id, lambda t: replace(t, is_deleted=False, deleted_at=None))
    if old is None:
        return _not_found(state, "Task", task_id)
    return _applied(state, "Task Restored", old.title, now=now)


def permanent_delete_task(state: AppState, task_id: str, now: Optional[str] = None) -> CommandResult:
    task = state.find_task(task_id)
    if task is None:
        return _not_found(state, "Task", task_id)
    if not task.is_deleted:
        return _rejected(state, "Cannot delete", "Only tasks in the trash can be permanently deleted", now)
    state = state.with_tasks([t for t in state.tasks if t.id != task_id])
    return _applied(state, "Task Permanently Deleted", task.title, now=now)


def empty_trash(state: AppState, now: Optional[str] = None) -> CommandResult:
    count = sum(1 for t in state.tasks if t.is_deleted)
    state = state.with_tasks([t for t in state.tasks if not t.is_deleted])
    return _applied(state, "Trash Emptied", f"{count} tasks permanently deleted", now=now, count=count)


def toggle_archive(state: AppState, task_id: str, now: Optional[str] = None) -> CommandResult:
    state, old, _ = _map_task(state, task_id, lambda t: replace(t, is_archived=not t.is_archived))
    if old is None:
        return _not_found(state, "Task", task_id)
    title = "Task unarchived" if old.is_archived else "Task archived"
    return _applied(state, title, old.title, now=now)


def toggle_favorite(state: AppState, task_id: str, now: Optional[str] = None) -> CommandResult:
    state, old, _ = _map_task(state, task_id, lambda t: replace(t, is_favorite=not t.is_favorite))
    if old is None:
        return _not_found(state, "Task", task_id)
    title = "Removed from favorites" if old.is_favorite else "Added to favorites"
    return _applied(state, title, old.title, now=now)


def toggle_pin(state: AppState, task_id: str, now: Optional[str] = None) -> CommandResult:
    state, old, _ = _map_task(state, task_id, lambda t: replace(t, is_pinned=not t.is_pinned))
    if old is None:
        return _not_found(state, "Task", task_id)
    title = "Task unpinned" if old.is_pinned else "Task pinned"
    return _applied(state, title, old.title, log=False, now=now)


def toggle_complete(state: AppState, task_id: str, now: Optional[str] = None) -> CommandResult:
    now = now or utc_now()

    def flip(t: Task) -> Task:
        if t.is_completed:
            return replace(t, is_completed=False, completed_at=None)
        return replace(t, is_completed=True, completed_at=now)

    state, old, new = _map_task(state, task_id, flip)
    if old is None:
        return _not_found(state, "Task", task_id)
    title = "Task Completed" if new.is_completed else "Task Reopened"
    return _applied(state, title, old.title, now=now)


def toggle_subtask(state: AppState, task_id: str, subtask_id: str) -> CommandResult:
    task = state.find_task(task_id)
    if task is None or not any(s.id == subtask_id for s in task.subtasks or []):
        return _not_found(state, "Subtask", f"{task_id}/{subtask_id}")
    subtasks = [replace(s, completed=not s.completed) if s.id == subtask_id else s
                for s in task.subtasks]
    state, _, _ = _map_task(state, task_id, lambda t: replace(t, subtasks=subtasks))
    return _applied(state)


def move_task_status(state: AppState, task_id: str, status: str, now: Optional[str] = None) -> CommandResult:
    """Drop a task on a column."""
    now = now or utc_now()
    column = state.find_column(status)
    if column is None:
        return _not_found(state, "Status", status)
    state, old, _ = _map_task(state, task_id, lambda t: _land(t, column, now))
    if old is None:
        return _not_found(state, "Task", task_id)
    if old.status == column.id:
        return _applied(state)
    return _applied(state, "Task Moved", f'Moved "{old.title}" to {column.title}', now=now)


def move_task_to_list(state: AppState, task_id: str, list_id: Optional[str],
                      now: Optional[str] = None) -> CommandResult:
    """
    Re-parent a task onto a list (``None`` = unassigned).

    A status foreign to the destination's effective column set is remapped
    to that set's first column.
    """
    now = now or utc_now()
    target = state.find_list(list_id)
    if list_id and target is None:
        return _not_found(state, "List", list_id)
    columns = state.effective_columns(list_id)

    def move(t: Task) -> Task:
        moved = replace(t, list_id=list_id)
        if columns and t.status not in {c.id for c in columns}:
            moved = _land(moved, columns[0], now)
        return moved

    state, old, _ = _map_task(state, task_id, move)
    if old is None:
        return _not_found(state, "Task", task_id)
    name = target.name if target else "No List"
    return _applied(state, "Task Moved", f'Moved "{old.title}" to "{name}"', now=now)


def duplicate_task(state: AppState, task_id: str, now: Optional[str] = None) -> CommandResult:
    """Clone a task. Subtask ids are copied as-is."""
    now = now or utc_now()
    task = state.find_task(task_id)
    if task is None:
        return _not_found(state, "Task", task_id)
    clone = replace(
        copy.deepcopy(task),
        id=_unique_task_id(state),
        title=f"{task.title} (Copy)",
        created_at=now,
        is_favorite=False,
        is_pinned=False,
    )
    state = state.with_tasks(state.tasks + [clone])
    return _applied(state, "Task Duplicated", f"Duplicated: {task.title}", now=now)


def apply_template(
    template: TaskTemplate,
    status: str = "todo",
    list_id: Optional[str] = None,
    now: Optional[str] = None,
) -> Task:
    """Build a new task from a template. Subtasks get fresh ids."""
    subtasks = None
    if template.subtasks is not None:
        subtasks = [Subtask(id=generate_id(), title=s.title, completed=s.completed)
                    for s in template.subtasks]
    return Task(
        id=generate_id(),
        title=template.title,
        description=template.description,
        status=StatusId(status),
        priority=template.priority,
        category=template.category,
        tags=list(template.tags),
        created_at=now or utc_now(),
        subtasks=subtasks,
        list_id=list_id,
        time_estimate=template.time_estimate,
        recurrence=template.recurrence,
    )


def create_task_from_template(
    state: AppState,
    template_id: str,
    status: Optional[str] = None,
    selected_list_id: Optional[str] = None,
    now: Optional[str] = None,
) -> CommandResult:
    template = next((t for t in state.templates if t.id == template_id), None)
    if template is None:
        return _not_found(state, "Template", template_id)
    if status is None:
        columns = state.effective_columns(selected_list_id)
        status = columns[0].id if columns else "todo"
    task = apply_template(template, status, selected_list_id, now)
    task = replace(task, id=_unique_task_id(state))
    return create_task(state, task, selected_list_id, now)


def add_template(state: AppState, template: TaskTemplate, now: Optional[str] = None) -> CommandResult:
    state = replace(state, templates=state.templates + [template])
    return _applied(state, "Template Created", template.name, log=False, now=now)


def delete_template(state: AppState, template_id: str, now: Optional[str] = None) -> CommandResult:
    template = next((t for t in state.templates if t.id == template_id), None)
    if template is None:
        return _not_found(state, "Template", template_id)
    state = replace(state, templates=[t for t in state.templates if t.id != template_id])
    return _applied(state, "Template Deleted", template.name, log=False, now=now)


# ── Bulk commands ────────────────────────────────────────────────────────────


def _bulk(state: AppState, selection: SelectionState, fn: Callable[[Task], Task]) -> Tuple[AppState, int]:
    ids = set(selection.selected_task_ids)
    count = sum(1 for t in state.tasks if t.id in ids)
    tasks = [fn(t) if t.id in ids else t for t in state.tasks]
    return state.with_tasks(tasks), count


def bulk_delete(state: AppState, selection: SelectionState, now: Optional[str] = None) -> CommandResult:
    now = now or utc_now()
    state, count = _bulk(state, selection, lambda t: replace(t, is_deleted=True, deleted_at=now))
    return _applied(state, "Bulk Delete", f"{count} tasks moved to trash", now=now,
                    selection=SelectionState(), count=count)


def bulk_archive(state: AppState, selection: SelectionState, now: Optional[str] = None) -> CommandResult:
    state, count = _bulk(state, selection, lambda t: replace(t, is_archived=True))
    return _applied(state, "Bulk Archive", f"{count} tasks archived", now=now,
                    selection=SelectionState(), count=count)


def bulk_favorite(state: AppState, selection: SelectionState, now: Optional[str] = None) -> CommandResult:
    state, count = _bulk(state, selection, lambda t: replace(t, is_favorite=True))
    return _applied(state, "Bulk Favorite", f"{count} tasks added to favorites", log=False, now=now,
                    selection=SelectionState(), count=count)


def bulk_move(state: AppState, selection: SelectionState, status: str,
              now: Optional[str] = None) -> CommandResult:
    now = now or utc_now()
    column = state.find_column(status)
    if column is None:
        return _not_found(state, "Status", status)
    state, count = _bulk(state, selection, lambda t: _land(t, column, now))
    return _applied(state, "Bulk Move", f"{count} tasks moved to {column.title}", log=False, now=now,
                    selection=SelectionState(), count=count)


# ── Lists ────────────────────────────────────────────────────────────────────


def add_list(state: AppState, lst: CustomList, now: Optional[str] = None) -> CommandResult:
    state = replace(state, custom_lists=state.custom_lists + [lst])
    return _applied(state, "List Created", f"Created new list: {lst.name}", now=now)


def update_list(state: AppState, lst: CustomList, now: Optional[str] = None) -> CommandResult:
    if state.find_list(lst.id) is None:
        return _not_found(state, "List", lst.id)
    lists = [lst if l.id == lst.id else l for l in state.custom_lists]
    state = replace(state, custom_lists=lists)
    return _applied(state, "List Updated", f"Updated list: {lst.name}", now=now)


def delete_list(state: AppState, list_id: str, now: Optional[str] = None) -> CommandResult:
    """Remove a list; its tasks become unassigned, never deleted.

    Unassigned tasks fall back to the global columns, so any status that
    only existed in the list's override is repaired.
    """
    lst = state.find_list(list_id)
    if lst is None:
        return _not_found(state, "List", list_id)
    tasks = [replace(t, list_id=None) if t.list_id == list_id else t for t in state.tasks]
    state = replace(state, tasks=tasks,
                    custom_lists=[l for l in state.custom_lists if l.id != list_id])
    state, _ = reconcile_statuses(state)
    return _applied(state, "List Deleted", f"Deleted list: {lst.name}", now=now)


# ── Categories ───────────────────────────────────────────────────────────────


def add_category(state: AppState, category: Category, now: Optional[str] = None) -> CommandResult:
    state = replace(state, categories=state.categories + [category])
    return _applied(state, "Category Created", f"Created new category: {category.name}", now=now)


def update_category(state: AppState, category: Category, now: Optional[str] = None) -> CommandResult:
    if state.find_category(category.id) is None:
        return _not_found(state, "Category", category.id)
    categories = [category if c.id == category.id else c for c in state.categories]
    state = replace(state, categories=categories)
    return _applied(state, "Category Updated", f"Updated category: {category.name}", now=now)


def delete_category(state: AppState, category_id: str, now: Optional[str] = None) -> CommandResult:
    """Remove a category; its tasks move to the first remaining category."""
    category = state.find_category(category_id)
    if category is None:
        return _not_found(state, "Category", category_id)
    remaining = [c for c in state.categories if c.id != category_id]
    if not remaining:
        return _rejected(state, "Cannot delete", "At least one category is required", now)
    target = remaining[0]
    tasks = [replace(t, category=target.id) if t.category == category_id else t for t in state.tasks]
    state = replace(state, tasks=tasks, categories=remaining)
    return _applied(state, "Category Deleted", f"Deleted category: {category.name}", now=now)


# ── Columns (statuses) ───────────────────────────────────────────────────────


def reconcile_statuses(state: AppState) -> Tuple[AppState, int]:
    """
    Referential-integrity pass over task statuses.

    Any task whose status is absent from its effective column set (its
    list's override, else the global columns) moves to that set's first
    column. Returns the new state and the number of tasks repaired.
    """
    repaired = 0
    tasks = []
    for task in state.tasks:
        columns = state.effective_columns(task.list_id)
        if columns and task.status not in {c.id for c in columns}:
            task = replace(task, status=columns[0].id)
            repaired += 1
        tasks.append(task)
    if repaired:
        logger.info("Reconciled %d task statuses", repaired)
        state = state.with_tasks(tasks)
    return state, repaired


def _uses_global_columns(state: AppState, task: Task) -> bool:
    lst = state.find_list(task.list_id)
    return not (lst and lst.columns)


def add_column(state: AppState, column: Column, now: Optional[str] = None) -> CommandResult:
    if any(c.id == column.id for c in state.columns):
        return _rejected(state, "Cannot create status", f"Status {column.id} already exists", now)
    state = replace(state, columns=state.columns + [column])
    return _applied(state, "Status Created", f"Created new status: {column.title}", now=now)


def update_column(state: AppState, column: Column, now: Optional[str] = None) -> CommandResult:
    if not any(c.id == column.id for c in state.columns):
        return _not_found(state, "Status", column.id)
    columns = [column if c.id == column.id else c for c in state.columns]
    state = replace(state, columns=columns)
    return _applied(state, "Status Updated", f"Updated status: {column.title}", now=now)


def delete_column(state: AppState, column_id: str, now: Optional[str] = None) -> CommandResult:
    """Delete a global status; its tasks move to the new first global column."""
    column = next((c for c in state.columns if c.id == column_id), None)
    if column is None:
        return _not_found(state, "Status", column_id)
    if len(state.columns) <= 1:
        return _rejected(state, "Cannot delete", "At least one status is required", now)
    remaining = [c for c in state.columns if c.id != column_id]
    target = remaining[0]
    tasks = [
        replace(t, status=target.id)
        if t.status == column_id and _uses_global_columns(state, t) else t
        for t in state.tasks
    ]
    state = replace(
        state,
        tasks=tasks,
        columns=remaining,
        collapsed_columns=[c for c in state.collapsed_columns if c != column_id],
    )
    state, _ = reconcile_statuses(state)
    return _applied(state, "Status Deleted",
                    f"Deleted status: {column.title}. Tasks moved to {target.title}", now=now)


def add_list_column(state: AppState, list_id: str, column: Column, now: Optional[str] = None) -> CommandResult:
    lst = state.find_list(list_id)
    if lst is None:
        return _not_found(state, "List", list_id)
    existing = lst.columns or []
    if any(c.id == column.id for c in existing):
        return _rejected(state, "Cannot create status", f"Status {column.id} already exists", now)
    lists = [replace(l, columns=existing + [column]) if l.id == list_id else l
             for l in state.custom_lists]
    state = replace(state, custom_lists=lists)
    return _applied(state, "List Status Created",
                    f'Created "{column.title}" in list "{lst.name}"', now=now)


def update_list_column(state: AppState, list_id: str, column: Column, now: Optional[str] = None) -> CommandResult:
    lst = state.find_list(list_id)
    if lst is None or not any(c.id == column.id for c in lst.columns or []):
        return _not_found(state, "List status", f"{list_id}/{column.id}")
    columns = [column if c.id == column.id else c for c in lst.columns]
    lists = [replace(l, columns=columns) if l.id == list_id else l for l in state.custom_lists]
    state = replace(state, custom_lists=lists)
    return _applied(state, "List Status Updated", f"Updated status: {column.title}", now=now)


def delete_list_column(state: AppState, list_id: str, column_id: str, now: Optional[str] = None) -> CommandResult:
    """Delete a list-scoped status; that list's tasks move to its new first column."""
    lst = state.find_list(list_id)
    columns = (lst.columns or []) if lst else []
    column = next((c for c in columns if c.id == column_id), None)
    if column is None:
        return _not_found(state, "List status", f"{list_id}/{column_id}")
    if len(columns) <= 1:
        return _rejected(state, "Cannot delete", "At least one status is required", now)
    remaining = [c for c in columns if c.id != column_id]
    target = remaining[0]
    lists = [replace(l, columns=remaining) if l.id == list_id else l for l in state.custom_lists]
    tasks = [
        replace(t, status=target.id) if t.list_id == list_id and t.status == column_id else t
        for t in state.tasks
    ]
    state = replace(state, custom_lists=lists, tasks=tasks)
    state, _ = reconcile_statuses(state)
    return _applied(state, "List Status Deleted",
                    f"Deleted status: {column.title}. Tasks moved to {target.title}", now=now)


def move_status_to_list(state: AppState, status_id: str, list_id: str,
                        now: Optional[str] = None) -> CommandResult:
    """
    Migrate a status onto a list.

    The column is cloned into the target list's column set under the same
    id, removed from its source scope unless it is the last column there,
    and every live (non-archived, non-deleted) task on that status moves
    to the target list.
    """
    target = state.find_list(list_id)
    if target is None:
        return _not_found(state, "List", list_id)
    column = state.find_column(status_id)
    if column is None:
        return _not_found(state, "Status", status_id)
    if any(c.id == status_id for c in target.columns or []):
        return _rejected(state, "Cannot move status", f'"{column.title}" already belongs to "{target.name}"', now)

    columns = state.columns
    in_global = any(c.id == status_id for c in columns)
    if in_global and len(columns) > 1:
        columns = [c for c in columns if c.id != status_id]

    source = None
    if not in_global:
        source = next((l for l in state.custom_lists
                       if l.id != list_id and any(c.id == status_id for c in l.columns or [])), None)

    lists = []
    for lst in state.custom_lists:
        if lst.id == list_id:
            lst = replace(lst, columns=(lst.columns or []) + [copy.deepcopy(column)])
        elif source is not None and lst.id == source.id and len(lst.columns) > 1:
            lst = replace(lst, columns=[c for c in lst.columns if c.id != status_id])
        lists.append(lst)

    moved = 0
    tasks = []
    for task in state.tasks:
        if task.status == status_id and not task.is_archived and not task.is_deleted:
            task = replace(task, list_id=list_id)
            moved += 1
        tasks.append(task)

    state = replace(state, columns=columns, custom_lists=lists, tasks=tasks)
    return _applied(state, "Status Moved",
                    f'Moved "{column.title}" to "{target.name}" ({moved} tasks)', now=now, count=moved)


def toggle_column_collapse(state: AppState, column_id: str) -> CommandResult:
    collapsed = state.collapsed_columns
    if column_id in collapsed:
        collapsed = [c for c in collapsed if c != column_id]
    else:
        collapsed = collapsed + [column_id]
    return _applied(replace(state, collapsed_columns=collapsed))


# ── Notifications ────────────────────────────────────────────────────────────


def mark_notification_read(state: AppState, notification_id: str) -> CommandResult:
    if not any(n.id == notification_id for n in state.notifications):
        return _not_found(state, "Notification", notification_id)
    notifications = [replace(n, unread=False) if n.id == notification_id else n
                     for n in state.notifications]
    return _applied(replace(state, notifications=notifications))


def clear_notification(state: AppState, notification_id: str) -> CommandResult:
    if not any(n.id == notification_id for n in state.notifications):
        return _not_found(state, "Notification", notification_id)
    notifications = [n for n in state.notifications if n.id != notification_id]
    return _applied(replace(state, notifications=notifications))


def clear_all_notifications(state: AppState) -> CommandResult:
    return _applied(replace(state, notifications=[]))


# ── Preferences ──────────────────────────────────────────────────────────────


def set_sort(state: AppState, sort_by: SortBy, sort_order: Optional[SortOrder] = None) -> CommandResult:
    return _applied(replace(state, sort_by=sort_by, sort_order=sort_order or state.sort_order))


def toggle_sort_order(state: AppState) -> CommandResult:
    order = SortOrder.DESC if state.sort_order == SortOrder.ASC else SortOrder.ASC
    return _applied(replace(state, sort_order=order))


def set_view(state: AppState, view: str, now: Optional[str] = None) -> CommandResult:
    if view not in VIEWS:
        return _rejected(state, "Unknown view", f"View must be one of {', '.join(VIEWS)}", now)
    return _applied(replace(state, view=view))


def set_board_view_type(state: AppState, view_type: BoardViewType) -> CommandResult:
    return _applied(replace(state, board_view_type=view_type))


def set_compact_view(state: AppState, compact: bool) -> CommandResult:
    return _applied(replace(state, compact_view=compact))
