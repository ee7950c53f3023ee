"""
Tests for the command layer.

Covers:
    - task lifecycle: create, update, trash, restore, permanent delete
    - toggles, completion rule, status and list moves
    - duplicate / templates
    - bulk commands over a selection
    - list, category and column management (including last-of-scope rejection)
    - status-to-list migration and status reconciliation
    - notifications and preferences
"""
from dataclasses import replace

from conftest import NOW, make_task

from taskboard import commands, views
from taskboard.commands import Outcome
from taskboard.schema import (
    Category, Column, CustomList, Subtask, Priority, SortBy, SortOrder, BoardViewType,
    StatusId, DEFAULT_TEMPLATES,
)
from taskboard.state import AppState, FilterState, SelectionState, NOTIFICATION_CAP


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Task lifecycle
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestTaskLifecycle:

    def test_create_assigns_selected_list(self, state):
        result = commands.create_task(state, make_task("new"), "home", now=NOW)
        assert result.outcome == Outcome.APPLIED
        assert result.state.find_task("new").list_id == "home"
        assert result.state.notifications[0].title == "Task Created"
        assert state.find_task("new") is None

    def test_create_duplicate_id_rejected(self, state):
        result = commands.create_task(state, make_task("a"))
        assert result.outcome == Outcome.REJECTED
        assert result.state is state

    def test_update_unknown_is_not_found(self, state):
        result = commands.update_task(state, make_task("zzz"))
        assert result.outcome == Outcome.NOT_FOUND
        assert result.state is state
        assert result.notification is None

    def test_rename(self, state):
        result = commands.rename_task(state, "a", "Renamed")
        assert result.state.find_task("a").title == "Renamed"
        assert result.state.notifications == state.notifications

    def test_soft_delete_then_restore_round_trip(self, state):
        before = state.find_task("a")
        deleted = commands.soft_delete_task(state, "a", now=NOW).state
        task = deleted.find_task("a")
        assert task.is_deleted and task.deleted_at == NOW
        restored = commands.restore_task(deleted, "a").state.find_task("a")
        assert restored == before

    def test_restore_keeps_archived_flag(self, state):
        s = commands.toggle_archive(state, "a").state
        s = commands.soft_delete_task(s, "a").state
        s = commands.restore_task(s, "a").state
        assert s.find_task("a").is_archived

    def test_permanent_delete_requires_trash(self, state):
        result = commands.permanent_delete_task(state, "a")
        assert result.outcome == Outcome.REJECTED
        assert result.state.find_task("a") is not None

        result = commands.permanent_delete_task(state, "f")
        assert result.outcome == Outcome.APPLIED
        assert result.state.find_task("f") is None

    def test_empty_trash(self, state):
        result = commands.empty_trash(state)
        assert result.count == 1
        assert not any(t.is_deleted for t in result.state.tasks)
        assert len(result.state.tasks) == len(state.tasks) - 1

    def test_toggles_flip_flags(self, state):
        s = commands.toggle_favorite(state, "a").state
        s = commands.toggle_pin(s, "a").state
        s = commands.toggle_archive(s, "a").state
        task = s.find_task("a")
        assert task.is_favorite and task.is_pinned and task.is_archived
        s = commands.toggle_favorite(s, "a").state
        assert not s.find_task("a").is_favorite

    def test_archive_twice_restores_task(self, state):
        s = commands.toggle_archive(state, "a", now=NOW).state
        assert s.find_task("a").is_archived
        s = commands.toggle_archive(s, "a", now=NOW).state
        assert s.find_task("a").to_dict() == state.find_task("a").to_dict()

    def test_toggle_subtask(self, state):
        s = commands.update_task(state, replace(state.find_task("a"), subtasks=[Subtask("s1", "one")])).state
        s = commands.toggle_subtask(s, "a", "s1").state
        assert s.find_task("a").subtasks[0].completed
        assert commands.toggle_subtask(s, "a", "nope").outcome == Outcome.NOT_FOUND

    def test_toggle_complete_sets_and_clears_timestamp(self, state):
        s = commands.toggle_complete(state, "a", now=NOW).state
        assert s.find_task("a").is_completed and s.find_task("a").completed_at == NOW
        s = commands.toggle_complete(s, "a").state
        assert not s.find_task("a").is_completed and s.find_task("a").completed_at is None

    def test_commands_do_not_mutate_input(self, state):
        snapshot = [t.to_dict() for t in state.tasks]
        commands.toggle_favorite(state, "a")
        commands.soft_delete_task(state, "b")
        commands.move_task_status(state, "a", "done")
        assert [t.to_dict() for t in state.tasks] == snapshot


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Moves
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestMoves:

    def test_move_to_completion_column_completes(self, state):
        result = commands.move_task_status(state, "a", "done", now=NOW)
        task = result.state.find_task("a")
        assert task.status == "done"
        assert task.is_completed and task.completed_at == NOW
        assert result.notification.title == "Task Moved"

    def test_completion_is_sticky(self, state):
        s = commands.move_task_status(state, "a", "done", now=NOW).state
        s = commands.move_task_status(s, "a", "todo").state
        assert s.find_task("a").is_completed

    def test_move_to_unknown_status(self, state):
        assert commands.move_task_status(state, "a", "nowhere").outcome == Outcome.NOT_FOUND

    def test_move_to_list_remaps_foreign_status(self, state):
        result = commands.move_task_to_list(state, "a", "sprint")
        task = result.state.find_task("a")
        assert task.list_id == "sprint"
        assert task.status == "backlog"

    def test_move_to_list_keeps_valid_status(self, state):
        task = commands.move_task_to_list(state, "a", "home").state.find_task("a")
        assert task.list_id == "home" and task.status == "todo"

    def test_move_to_unknown_list(self, state):
        assert commands.move_task_to_list(state, "a", "nope").outcome == Outcome.NOT_FOUND

    def test_unassign_from_list(self, state):
        task = commands.move_task_to_list(state, "c", None).state.find_task("c")
        assert task.list_id is None
        assert task.status == "todo"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Duplicate and templates
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_duplicate_task(state):
    original = replace(state.find_task("a"), is_favorite=True, is_pinned=True,
                       subtasks=[Subtask("s1", "one", True)])
    s = commands.update_task(state, original).state
    result = commands.duplicate_task(s, "a", now=NOW)
    clone = result.state.tasks[-1]
    assert clone.id != "a"
    assert clone.title == f"{original.title} (Copy)"
    assert clone.created_at == NOW
    assert not clone.is_favorite and not clone.is_pinned
    assert clone.subtasks == original.subtasks
    assert clone.subtasks is not original.subtasks


def test_apply_template_generates_fresh_subtask_ids():
    template = DEFAULT_TEMPLATES[0]
    task = commands.apply_template(template, "todo", "home", now=NOW)
    assert task.title == template.title
    assert task.priority == template.priority
    assert task.list_id == "home"
    assert [s.title for s in task.subtasks] == [s.title for s in template.subtasks]
    assert not {s.id for s in task.subtasks} & {s.id for s in template.subtasks}


def test_create_task_from_template_uses_scope_first_column(state):
    state = replace(state, templates=list(DEFAULT_TEMPLATES))
    result = commands.create_task_from_template(state, "template-1", selected_list_id="sprint")
    task = result.state.tasks[-1]
    assert task.status == "backlog"
    assert task.list_id == "sprint"
    assert commands.create_task_from_template(state, "nope").outcome == Outcome.NOT_FOUND


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Bulk
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestBulk:

    def selection(self, *task_ids):
        return SelectionState(selected_task_ids=list(task_ids), is_selection_mode=True)

    def test_bulk_delete_clears_selection(self, state):
        result = commands.bulk_delete(state, self.selection("a", "b"), now=NOW)
        assert result.count == 2
        assert all(result.state.find_task(i).is_deleted for i in ("a", "b"))
        assert result.selection == SelectionState()
        assert "2 tasks" in result.notification.message

    def test_bulk_archive_and_favorite(self, state):
        s = commands.bulk_archive(state, self.selection("a")).state
        s = commands.bulk_favorite(s, self.selection("b", "c")).state
        assert s.find_task("a").is_archived
        assert s.find_task("b").is_favorite and s.find_task("c").is_favorite

    def test_bulk_move_applies_completion_rule(self, state):
        result = commands.bulk_move(state, self.selection("a", "b"), "done", now=NOW)
        assert all(result.state.find_task(i).is_completed for i in ("a", "b"))
        assert result.selection.is_selection_mode is False


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Lists and categories
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_delete_list_unassigns_tasks(state):
    result = commands.delete_list(state, "home")
    assert result.state.find_list("home") is None
    task = result.state.find_task("d")
    assert task is not None and task.list_id is None


def test_delete_list_repairs_override_statuses(state):
    result = commands.delete_list(state, "sprint", now=NOW)
    task = result.state.find_task("c")
    assert task.list_id is None
    assert task.status == "todo"
    lanes = views.board_lanes(result.state, FilterState())
    assert "c" in {t.id for lane in lanes for t in lane.tasks}


def test_add_and_update_list(state):
    s = commands.add_list(state, CustomList("new", "New", created_at=NOW)).state
    s = commands.update_list(s, CustomList("new", "Renamed", created_at=NOW)).state
    assert s.find_list("new").name == "Renamed"
    assert commands.update_list(s, CustomList("ghost", "x")).outcome == Outcome.NOT_FOUND


def test_delete_category_reassigns_to_first_remaining(state):
    result = commands.delete_category(state, "work")
    assert result.outcome == Outcome.APPLIED
    assert all(t.category == "personal" for t in result.state.tasks)


def test_delete_only_category_rejected():
    state = AppState(categories=[Category("solo", "Solo")], tasks=[make_task("x", category="solo")])
    result = commands.delete_category(state, "solo")
    assert result.outcome == Outcome.REJECTED
    assert result.state is state
    assert result.notification.type == "error"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Columns
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestColumns:

    def test_delete_column_reassigns_to_new_first(self, state):
        result = commands.delete_column(state, "todo")
        assert result.outcome == Outcome.APPLIED
        assert [c.id for c in result.state.columns] == ["doing", "done"]
        assert not any(t.status == "todo" for t in result.state.tasks)
        assert result.state.find_task("a").status == "doing"

    def test_delete_last_column_rejected(self):
        state = AppState(columns=[Column(StatusId("only"), "Only")], tasks=[make_task("x", status=StatusId("only"))])
        result = commands.delete_column(state, "only")
        assert result.outcome == Outcome.REJECTED
        assert result.state is state

    def test_delete_column_drops_collapsed_entry(self, state):
        s = commands.toggle_column_collapse(state, "todo").state
        assert s.collapsed_columns == ["todo"]
        s = commands.delete_column(s, "todo").state
        assert s.collapsed_columns == []

    def test_add_column_duplicate_rejected(self, state):
        assert commands.add_column(state, Column(StatusId("todo"), "Again")).outcome == Outcome.REJECTED

    def test_delete_list_column(self, state):
        result = commands.delete_list_column(state, "sprint", "backlog")
        assert [c.id for c in result.state.find_list("sprint").columns] == ["shipped"]
        assert result.state.find_task("c").status == "shipped"

    def test_delete_last_list_column_rejected(self, state):
        s = commands.delete_list_column(state, "sprint", "backlog").state
        assert commands.delete_list_column(s, "sprint", "shipped").outcome == Outcome.REJECTED

    def test_add_and_update_list_column(self, state):
        s = commands.add_list_column(state, "sprint", Column(StatusId("qa"), "QA")).state
        s = commands.update_list_column(s, "sprint", Column(StatusId("qa"), "Quality")).state
        assert s.find_list("sprint").columns[-1].title == "Quality"

    def test_reconcile_statuses_repairs_dangling(self, state):
        broken = commands.update_task(state, replace(state.find_task("a"), status=StatusId("ghost"))).state
        repaired, count = commands.reconcile_statuses(broken)
        assert count == 1
        assert repaired.find_task("a").status == "todo"

    def test_reconcile_uses_list_scope(self, state):
        broken = commands.update_task(state, replace(state.find_task("c"), status=StatusId("todo"))).state
        repaired, _ = commands.reconcile_statuses(broken)
        assert repaired.find_task("c").status == "backlog"


class TestMoveStatusToList:

    def test_migrates_column_and_tasks(self, state):
        result = commands.move_status_to_list(state, "doing", "home")
        s = result.state
        assert "doing" not in [c.id for c in s.columns]
        assert [c.id for c in s.find_list("home").columns] == ["doing"]
        assert s.find_task("b").list_id == "home"
        assert result.count == 1

    def test_skips_archived_and_deleted(self, state):
        s = commands.move_status_to_list(state, "todo", "home").state
        assert s.find_task("a").list_id == "home"
        assert s.find_task("e").list_id is None
        assert s.find_task("f").list_id is None

    def test_never_removes_last_column_of_source_list(self):
        state = AppState(
            columns=[Column(StatusId("todo"), "To Do")],
            custom_lists=[
                CustomList("src", "Src", created_at=NOW, columns=[Column(StatusId("solo"), "Solo")]),
                CustomList("dst", "Dst", created_at=NOW),
            ],
            tasks=[make_task("x", status=StatusId("solo"), list_id="src")],
        )
        s = commands.move_status_to_list(state, "solo", "dst").state
        assert [c.id for c in s.find_list("src").columns] == ["solo"]
        assert [c.id for c in s.find_list("dst").columns] == ["solo"]
        assert s.find_task("x").list_id == "dst"

    def test_unknown_ids(self, state):
        assert commands.move_status_to_list(state, "nope", "home").outcome == Outcome.NOT_FOUND
        assert commands.move_status_to_list(state, "todo", "nope").outcome == Outcome.NOT_FOUND


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Notifications and preferences
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_notifications_capped_newest_first():
    state = AppState()
    for i in range(NOTIFICATION_CAP + 5):
        state, _ = commands.push_notification(state, "n", str(i))
    assert len(state.notifications) == NOTIFICATION_CAP
    assert state.notifications[0].message == str(NOTIFICATION_CAP + 4)


def test_notification_read_and_clear():
    state, note = commands.push_notification(AppState(), "hello", "world")
    state = commands.mark_notification_read(state, note.id).state
    assert state.notifications[0].unread is False
    state = commands.clear_notification(state, note.id).state
    assert state.notifications == []
    assert commands.clear_notification(state, note.id).outcome == Outcome.NOT_FOUND


def test_preferences(state):
    s = commands.set_sort(state, SortBy.TITLE).state
    assert s.sort_by == SortBy.TITLE and s.sort_order == SortOrder.DESC
    s = commands.toggle_sort_order(s).state
    assert s.sort_order == SortOrder.ASC
    s = commands.set_board_view_type(s, BoardViewType.CATEGORY).state
    s = commands.set_compact_view(s, True).state
    assert s.board_view_type == BoardViewType.CATEGORY and s.compact_view
    assert commands.set_view(s, "analytics").state.view == "analytics"
    assert commands.set_view(s, "spreadsheet").outcome == Outcome.REJECTED
