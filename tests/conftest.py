"""Shared test fixtures for taskboard tests."""

import sys
import tempfile
from pathlib import Path

import pytest

# Ensure the repository root (taskboard/, taskboard_server.py) is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from taskboard.schema import Task, Column, Category, CustomList, Priority, StatusId
from taskboard.state import AppState
from taskboard.store import KeyValueStore


NOW = "2026-03-10T12:00:00+00:00"


@pytest.fixture
def db_path():
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as tmp:
        path = tmp.name
    try:
        yield path
    finally:
        for suffix in ("", "-wal", "-shm"):
            Path(path + suffix).unlink(missing_ok=True)


@pytest.fixture
def store(db_path):
    return KeyValueStore(db_path)


def make_task(task_id, **kwargs):
    kwargs.setdefault("title", f"Task {task_id}")
    kwargs.setdefault("category", "work")
    kwargs.setdefault("created_at", "2026-03-01T09:00:00+00:00")
    return Task(id=task_id, **kwargs)


@pytest.fixture
def state():
    """Small board: global todo/doing/done, one list with its own columns."""
    columns = [
        Column(StatusId("todo"), "To Do"),
        Column(StatusId("doing"), "Doing"),
        Column(StatusId("done"), "Done", is_completion_status=True),
    ]
    sprint = CustomList(
        "sprint", "Sprint", created_at="2026-01-01",
        columns=[Column(StatusId("backlog"), "Backlog"), Column(StatusId("shipped"), "Shipped")],
    )
    home = CustomList("home", "Home", created_at="2026-01-01")
    categories = [
        Category("work", "Work", "#6366f1", "briefcase"),
        Category("personal", "Personal", "#22c55e", "user"),
    ]
    tasks = [
        make_task("a", status=StatusId("todo"), priority=Priority.LOW),
        make_task("b", status=StatusId("doing"), priority=Priority.URGENT, category="personal"),
        make_task("c", status=StatusId("backlog"), list_id="sprint"),
        make_task("d", status=StatusId("done"), is_completed=True, list_id="home"),
        make_task("e", status=StatusId("todo"), is_archived=True),
        make_task("f", status=StatusId("todo"), is_deleted=True, deleted_at=NOW),
    ]
    return AppState(tasks=tasks, custom_lists=[sprint, home], categories=categories, columns=columns)
