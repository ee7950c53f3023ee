"""
Import / export of board data.

JSON exports bundle the whole domain (tasks, lists, categories, columns,
templates) with an ``exportDate``; CSV exports carry tasks only. Import
reads the JSON bundle back and replaces the task collection wholesale.
"""
import csv
import io
import json
import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from .commands import CommandResult, Outcome, push_notification
from .errors import ImportFormatError
from .schema import Task, Notification, generate_id, utc_now
from .state import AppState

logger = logging.getLogger(__name__)

CSV_HEADER = ["Title", "Description", "Status", "Priority", "Category", "Due Date", "Tags", "Created"]


def export_data(state: AppState, now: Optional[str] = None) -> Dict[str, Any]:
    return {
        "tasks": [t.to_dict() for t in state.tasks],
        "customLists": [l.to_dict() for l in state.custom_lists],
        "categories": [c.to_dict() for c in state.categories],
        "columns": [c.to_dict() for c in state.columns],
        "templates": [t.to_dict() for t in state.templates],
        "exportDate": now or utc_now(),
    }


def export_json(state: AppState, now: Optional[str] = None) -> str:
    return json.dumps(export_data(state, now), indent=2)


def export_csv(tasks: Iterable[Task]) -> str:
    """Tasks as CSV; every field quoted, embedded quotes doubled."""
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for t in tasks:
        writer.writerow([
            t.title,
            t.description,
            t.status,
            t.priority.value,
            t.category,
            t.due_date or "",
            ";".join(t.tags),
            t.created_at,
        ])
    return buf.getvalue().rstrip("\n")


def export_filename(kind: str, now: Optional[str] = None) -> str:
    """``task-manager-export-<date>.json`` or ``tasks-export-<date>.csv``."""
    day = (now or utc_now())[:10]
    if kind == "csv":
        return f"tasks-export-{day}.csv"
    return f"task-manager-export-{day}.json"


def parse_import(text: str) -> List[Task]:
    """Tasks from an exported JSON bundle. Raises ImportFormatError."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ImportFormatError(f"Invalid file format: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("tasks"), list):
        raise ImportFormatError("Invalid file format: no tasks array")
    tasks = data["tasks"]
    if not all(isinstance(t, dict) for t in tasks):
        raise ImportFormatError("Invalid file format: tasks must be objects")
    return [Task.from_dict(t) for t in tasks]


def import_tasks(state: AppState, text: str, now: Optional[str] = None) -> CommandResult:
    """Replace the task collection with the imported tasks (no merge)."""
    try:
        tasks = parse_import(text)
    except ImportFormatError as e:
        logger.info("Import rejected: %s", e)
        note = Notification(id=generate_id(), title="Import failed", message="Invalid file format",
                            time=now or utc_now(), type="error", unread=False)
        return CommandResult(state, Outcome.REJECTED, note)
    state = replace(state, tasks=tasks)
    message = f"{len(tasks)} tasks imported"
    logger.info("Data Imported: %s", message)
    state, note = push_notification(state, "Data Imported", message, now=now)
    return CommandResult(state, Outcome.APPLIED, note, count=len(tasks))
