"""
Tests for the month calendar grid.
"""
from datetime import date

from conftest import make_task

from taskboard.calendar import (
    GRID_CELLS, month_grid, month_title, shift_month, tasks_by_date, tasks_on,
)


def test_grid_always_has_42_cells():
    for month in range(1, 13):
        assert len(month_grid(2026, month)) == GRID_CELLS


def test_grid_starts_on_sunday():
    # 2026-04-01 is a Wednesday
    cells = month_grid(2026, 4, today=date(2026, 4, 15))
    assert cells[0].date == date(2026, 3, 29)
    assert cells[0].date.weekday() == 6
    assert not cells[0].is_current_month
    assert cells[3].date == date(2026, 4, 1) and cells[3].is_current_month
    assert cells[-1].date == date(2026, 5, 9)


def test_month_starting_on_sunday_has_no_leading_days():
    cells = month_grid(2026, 3)
    assert cells[0].date == date(2026, 3, 1)
    assert sum(1 for c in cells if c.is_current_month) == 31


def test_today_flag_and_tasks():
    tasks = [
        make_task("1", due_date="2026-03-15"),
        make_task("2", due_date="2026-03-15T10:00:00"),
        make_task("3", due_date="2026-03-15", is_archived=True),
        make_task("4"),
    ]
    cells = month_grid(2026, 3, tasks, today=date(2026, 3, 10))
    today = [c for c in cells if c.is_today]
    assert len(today) == 1 and today[0].day == 10
    cell = next(c for c in cells if c.date == date(2026, 3, 15))
    assert [t.id for t in cell.tasks] == ["1", "2"]
    assert cell.to_dict()["date"] == "2026-03-15"


def test_tasks_by_date_skips_archived_and_undated():
    grouped = tasks_by_date([make_task("a", due_date="2026-01-02"), make_task("b"),
                             make_task("c", due_date="2026-01-02", is_archived=True)])
    assert list(grouped) == ["2026-01-02"]
    assert [t.id for t in tasks_on([make_task("a", due_date="2026-01-02")], date(2026, 1, 2))] == ["a"]


def test_shift_month_wraps_years():
    assert shift_month(2026, 1, -1) == (2025, 12)
    assert shift_month(2026, 12, 1) == (2027, 1)
    assert shift_month(2026, 3, 0) == (2026, 3)
    assert shift_month(2026, 3, -15) == (2024, 12)


def test_month_title():
    assert month_title(2026, 3) == "March 2026"
