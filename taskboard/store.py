"""
Persistent key/value store (SQLite).

Each logical key holds one JSON document in the ``system_state`` table.
Writes are last-write-wins per key; there are no transactions across
keys. Storage failures never propagate: reads fall back to the caller's
default and writes are logged and reported as ``False``.
"""
import sqlite3
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Callable
from datetime import datetime, timezone

from .schema import (
    Task, CustomList, Category, Column, TaskTemplate, Notification,
    BoardViewType, SortBy, SortOrder,
    INITIAL_TASKS, INITIAL_LISTS, DEFAULT_CATEGORIES, DEFAULT_COLUMNS, DEFAULT_TEMPLATES,
)
from .state import AppState, VIEWS, NOTIFICATION_CAP

logger = logging.getLogger(__name__)


class StorageKeys:
    """Logical keys in the store."""
    TASKS = "bento-tasks"
    CUSTOM_LISTS = "bento-custom-lists"
    CUSTOM_CATEGORIES = "bento-custom-categories"
    CUSTOM_COLUMNS = "bento-custom-columns"
    COLLAPSED_COLUMNS = "bento-collapsed-columns"
    TASK_TEMPLATES = "bento-task-templates"
    VIEW_PREFERENCE = "bento-view"
    COMPACT_VIEW = "bento-compact-view"
    BOARD_VIEW_TYPE = "bento-board-view-type"
    NOTIFICATIONS = "bento-notifications"
    SORT_PREFERENCE = "bento-sort"
    BENTO_WIDGETS = "bento-active-widgets"
    QUICK_NOTES = "bento-quick-notes"
    DAILY_INTENTION = "bento-daily-intention"
    MOOD = "bento-mood"
    POMODORO_DURATION = "bento-pomodoro-duration"
    CLOCK_FORMAT = "bento-clock-format"
    USER_LOCATION = "bento-user-location"
    STORAGE_VERSION = "bento-storage-version"

    @classmethod
    def all(cls) -> List[str]:
        return [v for k, v in vars(cls).items() if k.isupper()]


def _connect(db_path: str) -> sqlite3.Connection:
    """Open a connection in WAL mode."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode = WAL")
    return conn


class KeyValueStore:
    """SQLite-backed JSON key/value store."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _init_schema(self):
        with _connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS system_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.commit()

    def get(self, key: str, default: Any = None) -> Any:
        """Decoded value for ``key``; ``default`` when absent, empty or unreadable."""
        try:
            with _connect(self.db_path) as conn:
                row = conn.execute(
                    "SELECT value FROM system_state WHERE key = ?", (key,)
                ).fetchone()
        except sqlite3.Error as e:
            logger.warning("Error reading %s: %s", key, e)
            return default
        if not row or not row["value"]:
            return default
        try:
            return json.loads(row["value"])
        except (json.JSONDecodeError, TypeError) as e:
            logger.warning("Discarding undecodable value for %s: %s", key, e)
            return default

    def set(self, key: str, value: Any) -> bool:
        try:
            encoded = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error("Error encoding %s: %s", key, e)
            return False
        now = datetime.now(timezone.utc).isoformat()
        try:
            with _connect(self.db_path) as conn:
                conn.execute(
                    """
                    INSERT INTO system_state (key, value, updated_at) VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                                   updated_at = excluded.updated_at
                    """,
                    (key, encoded, now),
                )
                conn.commit()
            return True
        except sqlite3.Error as e:
            logger.error("Error saving %s: %s", key, e)
            return False

    def remove(self, key: str) -> bool:
        try:
            with _connect(self.db_path) as conn:
                conn.execute("DELETE FROM system_state WHERE key = ?", (key,))
                conn.commit()
            return True
        except sqlite3.Error as e:
            logger.error("Error removing %s: %s", key, e)
            return False

    def clear_all(self) -> bool:
        """Remove every known logical key."""
        ok = True
        for key in StorageKeys.all():
            ok = self.remove(key) and ok
        return ok

    def keys(self) -> List[str]:
        try:
            with _connect(self.db_path) as conn:
                rows = conn.execute("SELECT key FROM system_state ORDER BY key").fetchall()
        except sqlite3.Error as e:
            logger.warning("Error listing keys: %s", e)
            return []
        return [r["key"] for r in rows]


# ── AppState mapping ─────────────────────────────────────────────────────────


def _records(raw: Any, parse: Callable, default: list) -> list:
    if not isinstance(raw, list):
        return default
    return [parse(item) for item in raw if isinstance(item, dict)]


def encode_state(state: AppState) -> Dict[str, Any]:
    """Map an AppState onto its storage keys and JSON values."""
    return {
        StorageKeys.TASKS: [t.to_dict() for t in state.tasks],
        StorageKeys.CUSTOM_LISTS: [l.to_dict() for l in state.custom_lists],
        StorageKeys.CUSTOM_CATEGORIES: [c.to_dict() for c in state.categories],
        StorageKeys.CUSTOM_COLUMNS: [c.to_dict() for c in state.columns],
        StorageKeys.COLLAPSED_COLUMNS: list(state.collapsed_columns),
        StorageKeys.TASK_TEMPLATES: [t.to_dict() for t in state.templates],
        StorageKeys.VIEW_PREFERENCE: state.view,
        StorageKeys.COMPACT_VIEW: state.compact_view,
        StorageKeys.BOARD_VIEW_TYPE: state.board_view_type.value,
        StorageKeys.NOTIFICATIONS: [n.to_dict() for n in state.notifications[:NOTIFICATION_CAP]],
        StorageKeys.SORT_PREFERENCE: {
            "sortBy": state.sort_by.value,
            "sortOrder": state.sort_order.value,
        },
    }


def load_state(store: KeyValueStore, storage_version: str = "v4") -> AppState:
    """
    Hydrate an AppState from the store.

    A stored version different from ``storage_version`` wipes the tasks key
    only (lists, categories, columns and preferences survive) and records
    the new version. Each missing key falls back to its built-in default.
    """
    if store.get(StorageKeys.STORAGE_VERSION) != storage_version:
        logger.info("Storage version changed to %s, resetting tasks", storage_version)
        store.remove(StorageKeys.TASKS)
        store.set(StorageKeys.STORAGE_VERSION, storage_version)

    defaults = AppState.initial()
    sort = store.get(StorageKeys.SORT_PREFERENCE, {})
    if not isinstance(sort, dict):
        sort = {}
    view = store.get(StorageKeys.VIEW_PREFERENCE, "board")
    collapsed = store.get(StorageKeys.COLLAPSED_COLUMNS, [])

    return AppState(
        tasks=_records(store.get(StorageKeys.TASKS), Task.from_dict, defaults.tasks),
        custom_lists=_records(store.get(StorageKeys.CUSTOM_LISTS), CustomList.from_dict, defaults.custom_lists),
        categories=_records(store.get(StorageKeys.CUSTOM_CATEGORIES), Category.from_dict, defaults.categories),
        columns=_records(store.get(StorageKeys.CUSTOM_COLUMNS), Column.from_dict, defaults.columns),
        collapsed_columns=[str(c) for c in collapsed] if isinstance(collapsed, list) else [],
        templates=_records(store.get(StorageKeys.TASK_TEMPLATES), TaskTemplate.from_dict, defaults.templates),
        view=view if view in VIEWS else "board",
        compact_view=bool(store.get(StorageKeys.COMPACT_VIEW, False)),
        board_view_type=BoardViewType.from_str(store.get(StorageKeys.BOARD_VIEW_TYPE, "status")),
        notifications=_records(store.get(StorageKeys.NOTIFICATIONS), Notification.from_dict, [])[:NOTIFICATION_CAP],
        sort_by=SortBy.from_str(sort.get("sortBy", "priority")),
        sort_order=SortOrder.from_str(sort.get("sortOrder", "desc")),
    )


def save_state(store: KeyValueStore, state: AppState, previous: Optional[AppState] = None) -> List[str]:
    """
    Write each key whose value differs from ``previous`` (all keys when
    ``previous`` is None). Returns the keys written successfully.
    """
    current = encode_state(state)
    before = encode_state(previous) if previous is not None else {}
    written = []
    for key, value in current.items():
        if key in before and before[key] == value:
            continue
        if store.set(key, value):
            written.append(key)
    return written
