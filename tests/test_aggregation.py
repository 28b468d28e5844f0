from datetime import datetime, timedelta, timezone

import pytest

import aggregation
from schemas import Timeframe

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def log(seconds, project="p1", user="u1", task="t1", start=T0, **extra):
    row = {"user_id": user, "project_id": project, "task_id": task,
           "start_time": start, "end_time": start + timedelta(seconds=seconds)}
    row.update(extra)
    return row


def test_duration_is_floored_to_whole_seconds():
    row = {"start_time": T0, "end_time": T0 + timedelta(milliseconds=2999)}
    assert aggregation.duration_seconds(row) == 2


def test_duration_of_equal_timestamps_is_zero():
    assert aggregation.duration_seconds({"start_time": T0, "end_time": T0}) == 0


def test_duration_never_negative():
    row = {"start_time": T0, "end_time": T0 - timedelta(minutes=5)}
    assert aggregation.duration_seconds(row) == 0


def test_duration_accepts_naive_and_iso_values():
    row = {"start_time": T0.replace(tzinfo=None), "end_time": (T0 + timedelta(seconds=90)).isoformat()}
    assert aggregation.duration_seconds(row) == 90


def test_three_logs_total_exactly_three_hours():
    logs = [log(1800), log(3600), log(5400)]
    assert aggregation.total_hours(logs, "p1") == 3.0


def test_project_totals_partition_all_logs():
    logs = [log(1800, "a"), log(3600, "b"), log(900, "a"), log(45, "c")]
    by_project = aggregation.hours_by_project(logs)
    assert by_project == {"a": 2700 / 3600, "b": 1.0, "c": 45 / 3600}
    for project in ("a", "b", "c"):
        assert aggregation.total_hours(logs, project) == by_project[project]
    assert aggregation.total_seconds(logs) == 1800 + 3600 + 900 + 45


def test_hours_by_day_uses_utc_start_date():
    late = datetime(2026, 3, 2, 23, 30, tzinfo=timezone.utc)
    logs = [log(3600, start=late), log(1800, start=late + timedelta(hours=1))]
    assert aggregation.hours_by_day(logs) == {"2026-03-02": 1.0, "2026-03-03": 0.5}


@pytest.mark.parametrize("statuses", [
    [],
    ["To Do"],
    ["Completed", "Completed", "Review", "On Hold", "In Progress", "To Do"],
    ["Review"] * 7,
])
def test_status_counts_sum_to_task_count(statuses):
    tasks = [{"status": s} for s in statuses]
    counts = aggregation.status_counts(tasks)
    assert sum(counts.values()) == len(tasks)


def test_project_task_counts_buckets():
    tasks = [{"status": s} for s in ["Completed", "Completed", "In Progress", "On Hold", "Review", "To Do"]]
    assert aggregation.project_task_counts(tasks) == {
        "Total": 6, "Completed": 2, "In Progress": 1, "On Hold": 1,
    }


def test_project_overview_rows():
    projects = [{"id": "p1", "name": "Site", "status": "In Progress"},
                {"id": "p2", "name": "Logo", "status": "Completed"}]
    tasks = [{"project_id": "p1", "status": "Completed"}, {"project_id": "p1", "status": "To Do"}]
    rows = aggregation.project_overview(projects, tasks, [log(7200, "p1")])
    assert rows[0]["total_hours"] == 2.0
    assert rows[0]["tasks"]["Total"] == 2
    assert rows[1]["total_hours"] == 0
    assert rows[1]["tasks"]["Total"] == 0


def test_overdue_threshold_is_thirty_days():
    now = T0
    old = {"status": "In Progress", "assigned_user_id": "u1", "created_at": now - timedelta(days=31)}
    recent = dict(old, created_at=now - timedelta(days=29))
    assert aggregation.is_overdue(old, now)
    assert not aggregation.is_overdue(recent, now)


def test_overdue_requires_assignee_and_open_status():
    created = T0 - timedelta(days=40)
    assert not aggregation.is_overdue({"status": "Completed", "assigned_user_id": "u1", "created_at": created}, T0)
    assert not aggregation.is_overdue({"status": "To Do", "assigned_user_id": None, "created_at": created}, T0)


def test_team_productivity_groups_by_project_and_type():
    users = [{"_id": "u1", "name": "Sarah"}, {"_id": "u2", "name": "Sam"}]
    tasks = [
        {"_id": "t1", "type": "design", "status": "In Progress", "assigned_user_id": "u1",
         "created_at": T0 - timedelta(days=31)},
        {"_id": "t2", "type": None, "status": "To Do", "assigned_user_id": "u1",
         "created_at": T0 - timedelta(days=29)},
    ]
    logs = [log(3600, "p1", "u1", "t1"), log(1800, "p2", "u1", "t2"), log(900, "p1", "u1", "gone"),
            log(600, "p1", "stranger", "t1")]
    rows = {r["user_id"]: r for r in aggregation.team_productivity(users, logs, tasks, T0)}

    sarah = rows["u1"]
    assert sarah["total_hours"] == (3600 + 1800 + 900) / 3600
    assert sarah["by_project"] == {"p1": 4500 / 3600, "p2": 0.5}
    assert sarah["by_type"] == {"design": 1.0, "Other": (1800 + 900) / 3600}
    assert sarah["overdue_tasks"] == 1
    assert rows["u2"]["total_hours"] == 0
    assert rows["u2"]["overdue_tasks"] == 0


def test_completion_trend_buckets_by_day():
    now = T0
    tasks = [
        {"status": "Completed", "created_at": now - timedelta(days=1)},
        {"status": "Completed", "created_at": now - timedelta(days=1, hours=2)},
        {"status": "Completed", "created_at": now - timedelta(days=3)},
        {"status": "Completed", "created_at": now - timedelta(days=45)},
        {"status": "In Progress", "created_at": now - timedelta(days=1)},
    ]
    assert aggregation.completion_trend(tasks, now) == [
        {"date": "2026-02-27", "completed": 1},
        {"date": "2026-03-01", "completed": 2},
    ]


def test_timeframe_windows():
    now = datetime(2026, 3, 31, 12, 0, tzinfo=timezone.utc)
    assert aggregation.timeframe_start(Timeframe.DAY, now) == now - timedelta(days=1)
    assert aggregation.timeframe_start("week", now) == now - timedelta(days=7)
    # one calendar month back, clamped to the shorter month
    assert aggregation.timeframe_start(Timeframe.MONTH, now) == datetime(2026, 2, 28, 12, 0, tzinfo=timezone.utc)


def test_logs_to_csv_strips_separators_from_notes():
    text = aggregation.logs_to_csv([log(60, note="fixed nav,\nthen tests")])
    lines = text.strip().split("\n")
    assert lines[0] == "user_id,project_id,task_id,start_time,end_time,note"
    assert lines[1].endswith("fixed nav  then tests")
    assert len(lines) == 2
