"""
Read-only summaries over fetched rows.

Rows are plain dicts as they come out of Mongo (ids may be ObjectId or str,
datetimes may be naive UTC or aware). Nothing here does I/O.
"""
import csv
import io
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from dateutil.relativedelta import relativedelta

from schemas import TaskStatus, Timeframe

OVERDUE_AFTER = timedelta(days=30)
SECONDS_PER_HOUR = 3600
OTHER_TYPE = "Other"

Row = Dict[str, Any]


def as_utc(value: Any) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _key(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def _status(value: Any) -> str:
    return value.value if isinstance(value, TaskStatus) else str(value)


def duration_seconds(log: Row) -> int:
    """floor((end_ms - start_ms) / 1000), never negative."""
    delta = as_utc(log["end_time"]) - as_utc(log["start_time"])
    millis = delta // timedelta(milliseconds=1)
    return max(0, millis // 1000)


def seconds_to_hours(seconds: int) -> float:
    return seconds / SECONDS_PER_HOUR


def total_seconds(logs: Iterable[Row], project_id: Any = None) -> int:
    wanted = _key(project_id)
    return sum(duration_seconds(log) for log in logs
               if wanted is None or _key(log.get("project_id")) == wanted)


def total_hours(logs: Iterable[Row], project_id: Any = None) -> float:
    return seconds_to_hours(total_seconds(logs, project_id))


def _hours_by(logs: Iterable[Row], key_fn) -> Dict[str, float]:
    seconds: Dict[str, int] = defaultdict(int)
    for log in logs:
        seconds[key_fn(log)] += duration_seconds(log)
    return {k: seconds_to_hours(v) for k, v in seconds.items()}


def hours_by_project(logs: Iterable[Row]) -> Dict[str, float]:
    return _hours_by(logs, lambda log: _key(log.get("project_id")))


def hours_by_day(logs: Iterable[Row]) -> Dict[str, float]:
    """Keyed by the UTC date the session started on."""
    by_day = _hours_by(logs, lambda log: as_utc(log["start_time"]).date().isoformat())
    return dict(sorted(by_day.items()))


def project_task_counts(tasks: Iterable[Row]) -> Dict[str, int]:
    counts = {"Total": 0, "Completed": 0, "In Progress": 0, "On Hold": 0}
    for task in tasks:
        counts["Total"] += 1
        status = _status(task.get("status"))
        if status in counts:
            counts[status] += 1
    return counts


def status_counts(tasks: Iterable[Row]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for task in tasks:
        status = _status(task.get("status"))
        counts[status] = counts.get(status, 0) + 1
    return counts


def project_overview(projects: Iterable[Row], tasks: Iterable[Row],
                     logs: Iterable[Row]) -> List[Row]:
    tasks_by_project: Dict[str, List[Row]] = defaultdict(list)
    for task in tasks:
        tasks_by_project[_key(task.get("project_id"))].append(task)
    seconds = defaultdict(int)
    for log in logs:
        seconds[_key(log.get("project_id"))] += duration_seconds(log)

    rows = []
    for project in projects:
        pid = _key(project.get("id", project.get("_id")))
        rows.append({
            "project_id": pid,
            "name": project.get("name"),
            "status": project.get("status"),
            "total_hours": seconds_to_hours(seconds[pid]),
            "tasks": project_task_counts(tasks_by_project[pid]),
        })
    return rows


def timeframe_start(timeframe: Timeframe, now: datetime) -> datetime:
    timeframe = Timeframe(timeframe)
    if timeframe == Timeframe.DAY:
        return now - timedelta(days=1)
    if timeframe == Timeframe.WEEK:
        return now - timedelta(days=7)
    if timeframe == Timeframe.MONTH:
        return now - relativedelta(months=1)
    raise ValueError(f"unknown timeframe {timeframe!r}")


def is_overdue(task: Row, now: datetime) -> bool:
    if _status(task.get("status")) == TaskStatus.COMPLETED.value:
        return False
    if not task.get("assigned_user_id"):
        return False
    return as_utc(now) - as_utc(task["created_at"]) > OVERDUE_AFTER


def team_productivity(users: Iterable[Row], logs: Iterable[Row], tasks: Iterable[Row],
                      now: datetime) -> List[Row]:
    """Hours per user, split by project and task type, plus overdue counts.

    Logs are expected to be pre-filtered to the reporting window. Users not
    in `users` are ignored.
    """
    tasks_by_id = {_key(t.get("id", t.get("_id"))): t for t in tasks}
    rows: Dict[str, Row] = {}
    seconds: Dict[str, Dict[str, Any]] = {}
    for user in users:
        uid = _key(user.get("id", user.get("_id")))
        rows[uid] = {"user_id": uid, "name": user.get("name"), "total_hours": 0.0,
                     "by_project": {}, "by_type": {}, "overdue_tasks": 0}
        seconds[uid] = {"total": 0, "project": defaultdict(int), "type": defaultdict(int)}

    for log in logs:
        acc = seconds.get(_key(log.get("user_id")))
        if acc is None:
            continue
        dur = duration_seconds(log)
        task = tasks_by_id.get(_key(log.get("task_id")))
        acc["total"] += dur
        acc["project"][_key(log.get("project_id"))] += dur
        acc["type"][(task or {}).get("type") or OTHER_TYPE] += dur

    for uid, acc in seconds.items():
        row = rows[uid]
        row["total_hours"] = seconds_to_hours(acc["total"])
        row["by_project"] = {k: seconds_to_hours(v) for k, v in acc["project"].items()}
        row["by_type"] = {k: seconds_to_hours(v) for k, v in acc["type"].items()}

    for task in tasks_by_id.values():
        assignee = _key(task.get("assigned_user_id"))
        if assignee in rows and is_overdue(task, now):
            rows[assignee]["overdue_tasks"] += 1
    return list(rows.values())


def completion_trend(tasks: Iterable[Row], now: datetime, days: int = 30) -> List[Row]:
    """Completed tasks per UTC day, using created_at as the completion date."""
    since = as_utc(now) - timedelta(days=days)
    buckets: Dict[str, int] = defaultdict(int)
    for task in tasks:
        if _status(task.get("status")) != TaskStatus.COMPLETED.value:
            continue
        created = as_utc(task["created_at"])
        if created >= since:
            buckets[created.date().isoformat()] += 1
    return [{"date": day, "completed": n} for day, n in sorted(buckets.items())]


CSV_COLUMNS = ["user_id", "project_id", "task_id", "start_time", "end_time", "note"]


def logs_to_csv(logs: Iterable[Row]) -> str:
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for log in logs:
        note = log.get("note") or ""
        for ch in ("\r", "\n", ","):
            note = note.replace(ch, " ")
        writer.writerow([
            _key(log.get("user_id")) or "",
            _key(log.get("project_id")) or "",
            _key(log.get("task_id")) or "",
            as_utc(log["start_time"]).isoformat(),
            as_utc(log["end_time"]).isoformat(),
            note,
        ])
    return out.getvalue()
