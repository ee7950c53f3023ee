#!/usr/bin/env python3
"""
Quick verification that the taskboard engine works end-to-end.
"""
from taskboard import commands
from taskboard.config import Config
from taskboard.exporter import export_json, parse_import
from taskboard.schema import Task, Priority, StatusId
from taskboard.session import BoardSession
from taskboard.store import KeyValueStore

DB_PATH = "/tmp/taskboard_verify.db"


def main():
    print("=" * 60)
    print("Taskboard Verification")
    print("=" * 60)

    print("\n[1/6] Creating SQLite store...")
    store = KeyValueStore(DB_PATH)
    store.clear_all()
    print("✅ Store created")

    print("\n[2/6] Loading board session...")
    session = BoardSession(store, Config(db_path=DB_PATH))
    session.subscribe("toast", lambda notification: print(f"   🔔 {notification.title}: {notification.message}"))
    print(f"✅ Loaded {len(session.state.tasks)} tasks, {len(session.state.columns)} columns")

    print("\n[3/6] Creating a task...")
    task = Task(
        id="verify-1",
        title="Ship the weekly report",
        priority=Priority.HIGH,
        category="work",
        status=StatusId("todo"),
        tags=["report"],
    )
    result = session.dispatch(commands.create_task, task)
    print(f"✅ Outcome: {result.outcome.value}")

    print("\n[4/6] Moving it through the board...")
    session.dispatch(commands.move_task_status, "verify-1", "in-progress")
    session.dispatch(commands.move_task_status, "verify-1", "done")
    done = session.state.find_task("verify-1")
    print(f"✅ Status: {done.status}, completed: {done.is_completed}")

    print("\n[5/6] Reloading from the store...")
    reloaded = BoardSession(store, Config(db_path=DB_PATH))
    assert reloaded.state.find_task("verify-1") == done
    counts = reloaded.counts()
    print(f"✅ Total: {counts.total}, completed: {counts.completed}, trash: {counts.trash}")

    print("\n[6/6] Export / import round trip...")
    assert parse_import(export_json(reloaded.state)) == reloaded.state.tasks
    print("✅ Round trip preserved every task")

    print("\n" + "=" * 60)
    print("✅ ALL CHECKS PASSED")
    print("=" * 60)
    print(f"\nTest database: {DB_PATH}")


if __name__ == "__main__":
    main()
