#!/usr/bin/env python3
"""
Taskboard Server
----------------
JSON API over the taskboard engine, backed by the SQLite key/value store,
plus the weather proxy used by the dashboard's weather widget.

Usage:
    python taskboard_server.py --port 8080 --db ~/.local/share/taskboard/taskboard.db

API:
    GET  /api/weather?lat=&lng=      → reshaped forecast
    GET  /api/board                  → { tasks, columns, lanes, counts, title }
         ?view=all|favorites|archived|trash  &list=  &category=  &status=
         &priority=  &q=  &sort=priority|dueDate|title|createdAt  &order=asc|desc
    GET  /api/stats                  → analytics
    GET  /api/calendar?year=&month=  → 42-cell month grid (board filters apply)
    GET  /api/widgets                → bento layout, settings and widget figures
    GET  /api/tasks/<id>             → task + rendered description
    GET  /api/export?format=json|csv → file download
    POST /api/import                 → replace tasks from an exported JSON file
    POST /api/tasks                  → create
    PUT  /api/tasks/<id>             → update fields
    POST /api/tasks/<id>/move        → { status?, listId? }
    DELETE /api/tasks/<id>           → move to trash (?permanent=1 from trash)
    POST /api/tasks/<id>/restore     → restore from trash
    POST /api/trash/empty            → purge the trash
    GET  /health

Mutating routes require an X-API-Key header matching TASKBOARD_API_SECRET.
"""

import hmac
import os
from datetime import date
from functools import wraps

from flask import Flask, Response, jsonify, request

from taskboard import commands
from taskboard.analytics import compute_stats
from taskboard.calendar import month_grid, month_title, shift_month
from taskboard.commands import CommandResult, Outcome
from taskboard.config import Config
from taskboard.exporter import export_csv, export_filename, export_json, import_tasks
from taskboard.markdown import render_markdown
from taskboard.schema import Priority, SortBy, SortOrder, Task, ViewMode, generate_id
from taskboard.session import BoardSession
from taskboard.state import FilterState
from taskboard.store import KeyValueStore
from taskboard.views import active_columns, default_status, filter_tasks, sort_tasks
from taskboard.weather import fetch_weather
from taskboard.widgets import (
    AVAILABLE_WIDGETS, load_clock_format, load_pomodoro_duration, load_widgets, widget_stats,
)

app = Flask(__name__)
app.config["TASKBOARD"] = Config.load()

OUTCOME_STATUS = {
    Outcome.APPLIED: 200,
    Outcome.NOT_FOUND: 404,
    Outcome.REJECTED: 409,
}


def get_config() -> Config:
    return app.config["TASKBOARD"]


def get_session() -> BoardSession:
    config = get_config()
    return BoardSession(KeyValueStore(config.db_path), config)


# ── Auth ─────────────────────────────────────────────────────────────────────


def require_api_key(f):
    """Decorator: reject requests without a valid X-API-Key header."""
    @wraps(f)
    def decorated(*args, **kwargs):
        secret = get_config().api_secret
        if not secret:
            return jsonify({"error": "API secret not set"}), 503
        provided = request.headers.get("X-API-Key", "").strip()
        if not hmac.compare_digest(provided, secret):
            code = 401 if not provided else 403
            return jsonify({"error": "Unauthorized"}), code
        return f(*args, **kwargs)
    return decorated


def _result_response(result: CommandResult, success_code: int = 200, **extra):
    body = {"outcome": result.outcome.value}
    if result.notification is not None:
        body["notification"] = result.notification.to_dict()
    if result.outcome == Outcome.NOT_FOUND:
        body["error"] = "Not found"
    elif result.outcome == Outcome.REJECTED and result.notification is not None:
        body["error"] = result.notification.message
    body.update(extra)
    code = success_code if result.outcome == Outcome.APPLIED else OUTCOME_STATUS[result.outcome]
    return jsonify(body), code


# ── Weather ──────────────────────────────────────────────────────────────────


@app.route("/api/weather")
def api_weather():
    try:
        lat = float(request.args.get("lat", ""))
        lng = float(request.args.get("lng", ""))
    except ValueError:
        return jsonify({"error": "Latitude and longitude are required"}), 400
    try:
        return jsonify(fetch_weather(lat, lng, get_config()))
    except Exception:
        app.logger.exception("Weather API error")
        return jsonify({"error": "Failed to fetch weather data"}), 500


# ── Board ────────────────────────────────────────────────────────────────────


def _filters_from_args(args) -> FilterState:
    filters = FilterState(view_mode=ViewMode.from_str(args.get("view", "all")))
    if args.get("list"):
        filters = filters.select_list(args["list"])
    if args.get("category"):
        filters = filters.select_category(args["category"])
    if args.get("status"):
        filters = filters.select_status(args["status"])
    priority = args.get("priority", "all")
    if priority != "all":
        filters.priority_filter = Priority.from_str(priority)
    filters.search_query = args.get("q", "")
    return filters


@app.route("/api/board")
def api_board():
    session = get_session()
    session.filters = _filters_from_args(request.args)
    state = session.state
    sort_by = SortBy.from_str(request.args["sort"]) if "sort" in request.args else state.sort_by
    sort_order = SortOrder.from_str(request.args["order"]) if "order" in request.args else state.sort_order

    tasks = sort_tasks(filter_tasks(state.tasks, session.filters), sort_by, sort_order)
    return jsonify({
        "title": session.title(),
        "tasks": [t.to_dict() for t in tasks],
        "columns": [c.to_dict() for c in session.active_columns()],
        "lanes": [lane.to_dict() for lane in session.lanes()],
        "counts": session.counts().to_dict(),
        "boardViewType": state.board_view_type.value,
        "sort": {"sortBy": sort_by.value, "sortOrder": sort_order.value},
    })


@app.route("/api/stats")
def api_stats():
    state = get_session().state
    columns = active_columns(state.columns, state.custom_lists)
    return jsonify(compute_stats(state.tasks, state.categories, columns).to_dict())


@app.route("/api/calendar")
def api_calendar():
    """Month grid; defaults to the current month."""
    today = date.today()
    try:
        year = int(request.args.get("year", today.year))
        month = int(request.args.get("month", today.month))
        date(year, month, 1)
    except ValueError:
        return jsonify({"error": "Invalid year or month"}), 400
    session = get_session()
    session.filters = _filters_from_args(request.args)
    tasks = filter_tasks(session.state.tasks, session.filters)
    prev_year, prev_month = shift_month(year, month, -1)
    next_year, next_month = shift_month(year, month, 1)
    return jsonify({
        "title": month_title(year, month),
        "days": [cell.to_dict() for cell in month_grid(year, month, tasks, today)],
        "prev": {"year": prev_year, "month": prev_month},
        "next": {"year": next_year, "month": next_month},
    })


@app.route("/api/widgets")
def api_widgets():
    session = get_session()
    store, state = session.store, session.state
    return jsonify({
        "active": [w.to_dict() for w in load_widgets(store)],
        "available": [w.to_dict() for w in AVAILABLE_WIDGETS],
        "pomodoroDuration": load_pomodoro_duration(store),
        "clockFormat": load_clock_format(store),
        "stats": widget_stats(state.tasks, state.categories, active_columns(state.columns, state.custom_lists)),
    })


# ── Import / export ──────────────────────────────────────────────────────────


@app.route("/api/export")
def api_export():
    fmt = request.args.get("format", "json")
    if fmt not in ("json", "csv"):
        return jsonify({"error": f"Invalid format: {fmt}"}), 400
    state = get_session().state
    if fmt == "csv":
        body, mimetype = export_csv(state.tasks), "text/csv"
    else:
        body, mimetype = export_json(state), "application/json"
    return Response(
        body,
        mimetype=mimetype,
        headers={"Content-Disposition": f"attachment; filename={export_filename(fmt)}"},
    )


@app.route("/api/import", methods=["POST"])
@require_api_key
def api_import():
    session = get_session()
    result = session.dispatch(import_tasks, request.get_data(as_text=True))
    if result.outcome == Outcome.REJECTED:
        return jsonify({"error": "Import failed", "message": "Invalid file format"}), 400
    return _result_response(result, imported=result.count)


# ── Tasks ────────────────────────────────────────────────────────────────────


@app.route("/api/tasks", methods=["POST"])
@require_api_key
def api_create_task():
    data = request.get_json(force=True, silent=True) or {}
    title = str(data.get("title", "")).strip()
    if not title:
        return jsonify({"error": "title is required"}), 400

    session = get_session()
    state = session.state
    list_id = data.get("listId") or None
    data = dict(data, title=title)
    data.setdefault("id", generate_id())
    data.setdefault("status", default_status(state, list_id))
    if not data.get("category") and state.categories:
        data["category"] = state.categories[0].id
    task = Task.from_dict(data)

    result = session.dispatch(commands.create_task, task, list_id)
    created = session.state.find_task(task.id)
    return _result_response(result, 201, task=created.to_dict() if created else None)


@app.route("/api/tasks/<task_id>")
def api_get_task(task_id):
    task = get_session().state.find_task(task_id)
    if task is None:
        return jsonify({"error": "Task not found"}), 404
    return jsonify({"task": task.to_dict(), "descriptionHtml": render_markdown(task.description)})


@app.route("/api/tasks/<task_id>", methods=["PUT"])
@require_api_key
def api_update_task(task_id):
    data = request.get_json(force=True, silent=True) or {}
    session = get_session()
    task = session.state.find_task(task_id)
    if task is None:
        return jsonify({"error": "Task not found"}), 404
    merged = dict(task.to_dict(), **data)
    merged["id"] = task_id
    result = session.dispatch(commands.update_task, Task.from_dict(merged))
    return _result_response(result, task=session.state.find_task(task_id).to_dict())


@app.route("/api/tasks/<task_id>/move", methods=["POST"])
@require_api_key
def api_move_task(task_id):
    """Move a task to another status and/or list."""
    data = request.get_json(force=True, silent=True) or {}
    status = str(data.get("status", "")).strip()
    if not status and "listId" not in data:
        return jsonify({"error": "status or listId is required"}), 400

    session = get_session()
    state = session.state
    list_id = data.get("listId") or None
    # Task, list and status are all checked before anything is applied
    if state.find_task(task_id) is None:
        return jsonify({"outcome": Outcome.NOT_FOUND.value, "error": "Task not found"}), 404
    if list_id and state.find_list(list_id) is None:
        return jsonify({"outcome": Outcome.NOT_FOUND.value, "error": "List not found"}), 404
    if status and state.find_column(status) is None:
        return jsonify({"outcome": Outcome.NOT_FOUND.value, "error": "Status not found"}), 404

    result = None
    if "listId" in data:
        result = session.dispatch(commands.move_task_to_list, task_id, list_id)
        if result.outcome != Outcome.APPLIED:
            return _result_response(result)
    if status:
        result = session.dispatch(commands.move_task_status, task_id, status)
    task = session.state.find_task(task_id)
    return _result_response(result, task=task.to_dict() if task else None)


@app.route("/api/tasks/<task_id>", methods=["DELETE"])
@require_api_key
def api_delete_task(task_id):
    session = get_session()
    if request.args.get("permanent") in ("1", "true"):
        result = session.dispatch(commands.permanent_delete_task, task_id)
    else:
        result = session.dispatch(commands.soft_delete_task, task_id)
    return _result_response(result)


@app.route("/api/tasks/<task_id>/restore", methods=["POST"])
@require_api_key
def api_restore_task(task_id):
    session = get_session()
    result = session.dispatch(commands.restore_task, task_id)
    task = session.state.find_task(task_id)
    return _result_response(result, task=task.to_dict() if task else None)


@app.route("/api/trash/empty", methods=["POST"])
@require_api_key
def api_empty_trash():
    result = get_session().dispatch(commands.empty_trash)
    return _result_response(result, deleted=result.count)


@app.route("/health")
def health():
    return jsonify({"status": "ok", "db": get_config().db_path})


# ── Main ─────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    import argparse
    import logging

    parser = argparse.ArgumentParser(description="Taskboard Server")
    parser.add_argument("--host", help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int)
    parser.add_argument("--db", help="Path to taskboard.db (overrides TASKBOARD_DB env var)")
    parser.add_argument("--config", help="Path to config.yaml (overrides TASKBOARD_CONFIG)")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    if args.db:
        os.environ["TASKBOARD_DB"] = args.db
    config = Config.load(args.config, strict=bool(args.config))
    app.config["TASKBOARD"] = config
    host = args.host or config.host
    port = args.port or config.port

    print(f"""
╔═══════════════════════════════════════╗
║  Taskboard Server                     ║
╠═══════════════════════════════════════╣
║  URL:  http://{host}:{port:<20}║
║  DB:   {config.db_path:<31}║
╚═══════════════════════════════════════╝
""")

    app.run(host=host, port=port, debug=False, threaded=True)
