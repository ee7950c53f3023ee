"""
Tests for the HTTP API (Flask test client).

Covers:
    - API key gate on mutating routes
    - weather proxy parameter validation and error mapping
    - board / stats / export reads
    - task create, update, move, delete, restore, empty trash, import
    - calendar grid, widget dashboard and task detail reads
"""
import json
from unittest.mock import patch

import pytest

import taskboard_server
from taskboard.config import Config
from taskboard.errors import UpstreamError

KEY = {"X-API-Key": "s"}


@pytest.fixture
def client(db_path):
    original = taskboard_server.app.config["TASKBOARD"]
    taskboard_server.app.config["TASKBOARD"] = Config(db_path=db_path, api_secret="s")
    taskboard_server.app.config["TESTING"] = True
    try:
        with taskboard_server.app.test_client() as c:
            yield c
    finally:
        taskboard_server.app.config["TASKBOARD"] = original


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Auth
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestAuth:

    def test_missing_key(self, client):
        assert client.post("/api/trash/empty").status_code == 401

    def test_wrong_key(self, client):
        assert client.post("/api/trash/empty", headers={"X-API-Key": "nope"}).status_code == 403

    def test_secret_not_configured(self, client, db_path):
        taskboard_server.app.config["TASKBOARD"] = Config(db_path=db_path)
        assert client.post("/api/trash/empty", headers=KEY).status_code == 503

    def test_reads_are_open(self, client):
        assert client.get("/api/board").status_code == 200
        assert client.get("/health").get_json()["status"] == "ok"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Weather
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestWeather:

    def test_requires_coordinates(self, client):
        r = client.get("/api/weather?lat=48.8")
        assert r.status_code == 400
        assert r.get_json() == {"error": "Latitude and longitude are required"}
        assert client.get("/api/weather?lat=abc&lng=2").status_code == 400

    @patch("taskboard_server.fetch_weather")
    def test_success(self, mock_fetch, client):
        mock_fetch.return_value = {"location": {"city": "Paris", "timezone": "Europe/Paris"}}
        r = client.get("/api/weather?lat=48.8&lng=2.3")
        assert r.status_code == 200
        assert r.get_json()["location"]["city"] == "Paris"
        assert mock_fetch.call_args.args[:2] == (48.8, 2.3)

    @patch("taskboard_server.fetch_weather")
    def test_upstream_failure(self, mock_fetch, client):
        mock_fetch.side_effect = UpstreamError("Weather API error: 502", status_code=502)
        r = client.get("/api/weather?lat=1&lng=2")
        assert r.status_code == 500
        assert r.get_json() == {"error": "Failed to fetch weather data"}


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Reads
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_board_defaults(client):
    data = client.get("/api/board").get_json()
    assert data["title"] == "All Tasks"
    assert {t["id"] for t in data["tasks"]} == {"1", "2", "3", "4", "5"}
    assert [c["id"] for c in data["columns"]][:4] == ["todo", "in-progress", "review", "done"]
    assert data["sort"] == {"sortBy": "priority", "sortOrder": "desc"}
    assert data["counts"]["total"] == 5


def test_board_filters(client):
    data = client.get("/api/board?view=favorites&sort=title&order=asc").get_json()
    assert data["title"] == "Favorite Tasks"
    assert all(t["isFavorite"] for t in data["tasks"])
    assert data["sort"] == {"sortBy": "title", "sortOrder": "asc"}
    assert client.get("/api/board?status=todo").get_json()["title"] == "To Do Tasks"


def test_stats(client):
    data = client.get("/api/stats").get_json()
    assert data["totalTasks"] == 5
    assert "productivityScore" in data


def test_export(client):
    r = client.get("/api/export?format=csv")
    assert r.status_code == 200
    assert r.mimetype == "text/csv"
    assert "tasks-export-" in r.headers["Content-Disposition"]
    assert r.get_data(as_text=True).startswith('"Title"')

    r = client.get("/api/export")
    assert r.mimetype == "application/json"
    assert len(json.loads(r.get_data(as_text=True))["tasks"]) == 5

    assert client.get("/api/export?format=xml").status_code == 400


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Task mutations
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestTaskRoutes:

    def test_create(self, client):
        r = client.post("/api/tasks", json={"title": "  Buy milk  ", "priority": "high"}, headers=KEY)
        assert r.status_code == 201
        task = r.get_json()["task"]
        assert task["title"] == "Buy milk"
        assert task["status"] == "todo"
        assert task["priority"] == "high"
        ids = {t["id"] for t in client.get("/api/board").get_json()["tasks"]}
        assert task["id"] in ids

    def test_create_requires_title(self, client):
        assert client.post("/api/tasks", json={"title": " "}, headers=KEY).status_code == 400

    def test_create_duplicate_id(self, client):
        r = client.post("/api/tasks", json={"id": "1", "title": "Again"}, headers=KEY)
        assert r.status_code == 409
        assert r.get_json()["outcome"] == "rejected"

    def test_update(self, client):
        r = client.put("/api/tasks/1", json={"title": "Renamed"}, headers=KEY)
        assert r.status_code == 200
        assert r.get_json()["task"]["title"] == "Renamed"
        assert client.put("/api/tasks/zzz", json={}, headers=KEY).status_code == 404

    def test_move_to_completion_column(self, client):
        r = client.post("/api/tasks/2/move", json={"status": "done"}, headers=KEY)
        assert r.status_code == 200
        task = r.get_json()["task"]
        assert task["status"] == "done" and task["isCompleted"] is True
        assert task["completedAt"]

    def test_move_validation(self, client):
        assert client.post("/api/tasks/2/move", json={}, headers=KEY).status_code == 400
        assert client.post("/api/tasks/2/move", json={"status": "nowhere"}, headers=KEY).status_code == 404

    def test_move_to_list(self, client):
        r = client.post("/api/tasks/2/move", json={"listId": "default"}, headers=KEY)
        assert r.get_json()["task"]["listId"] == "default"

    def test_move_with_unknown_status_leaves_list_untouched(self, client):
        r = client.post("/api/tasks/2/move", json={"listId": "default", "status": "nope"}, headers=KEY)
        assert r.status_code == 404
        assert r.get_json()["error"] == "Status not found"
        task = client.get("/api/tasks/2").get_json()["task"]
        assert "listId" not in task

    def test_move_unknown_task_or_list(self, client):
        assert client.post("/api/tasks/zzz/move", json={"status": "done"}, headers=KEY).status_code == 404
        r = client.post("/api/tasks/2/move", json={"listId": "ghost"}, headers=KEY)
        assert r.status_code == 404
        assert r.get_json()["error"] == "List not found"

    def test_delete_restore_and_empty_trash(self, client):
        assert client.delete("/api/tasks/1?permanent=1", headers=KEY).status_code == 409
        assert client.delete("/api/tasks/1", headers=KEY).status_code == 200
        trash = client.get("/api/board?view=trash").get_json()["tasks"]
        assert [t["id"] for t in trash] == ["1"]

        r = client.post("/api/tasks/1/restore", headers=KEY)
        assert r.get_json()["task"]["isDeleted"] is False

        client.delete("/api/tasks/2", headers=KEY)
        r = client.post("/api/trash/empty", headers=KEY)
        assert r.get_json()["deleted"] == 1
        assert client.delete("/api/tasks/2", headers=KEY).status_code == 404

    def test_import(self, client):
        exported = client.get("/api/export").get_data(as_text=True)
        data = json.loads(exported)
        data["tasks"] = data["tasks"][:2]
        r = client.post("/api/import", data=json.dumps(data), headers=KEY)
        assert r.status_code == 200
        assert r.get_json()["imported"] == 2
        assert len(client.get("/api/board").get_json()["tasks"]) == 2

    def test_import_garbage(self, client):
        r = client.post("/api/import", data="not json", headers=KEY)
        assert r.status_code == 400
        assert r.get_json()["error"] == "Import failed"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Calendar, widgets, task detail
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_calendar(client):
    data = client.get("/api/calendar?year=2026&month=1").get_json()
    assert data["title"] == "January 2026"
    assert len(data["days"]) == 42
    assert data["prev"] == {"year": 2025, "month": 12}
    assert data["next"] == {"year": 2026, "month": 2}
    assert client.get("/api/calendar?year=2026&month=13").status_code == 400


def test_widgets(client):
    data = client.get("/api/widgets").get_json()
    assert len(data["active"]) == 10
    assert data["pomodoroDuration"] == 25
    assert data["clockFormat"] == "12h"
    assert data["stats"]["totalTasks"] == 5


def test_task_detail_renders_description(client):
    client.put("/api/tasks/1", json={"description": "**ship** <it>"}, headers=KEY)
    data = client.get("/api/tasks/1").get_json()
    assert data["descriptionHtml"] == "<strong>ship</strong> &lt;it&gt;"
    assert client.get("/api/tasks/zzz").status_code == 404
