from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from database import insert_work_log, create_document, get_documents
from schemas import ProjectStatus, Role, User, WorkLog, TaskCreate, SignupRequest

START = datetime(2026, 4, 1, 10, 0, tzinfo=timezone.utc)
IDS = {"user_id": "65f000000000000000000001", "project_id": "65f000000000000000000002",
       "task_id": "65f000000000000000000003"}


@pytest.mark.parametrize("label, expected", [
    ("Admin", Role.ADMIN), ("User", Role.USER), ("PM", Role.ADMIN), ("Team", Role.USER),
])
def test_role_labels_collapse_to_one_enum(label, expected):
    assert Role.parse(label) is expected


def test_unknown_role_rejected():
    with pytest.raises(ValidationError):
        User(name="X", email="x@example.com", password="secret123", role="Owner")


def test_legacy_role_normalised_on_user():
    user = User(name="X", email="x@example.com", password="secret123", role="PM")
    assert user.role is Role.ADMIN


def test_signup_passwords_must_match():
    with pytest.raises(ValidationError):
        SignupRequest(name="X", email="x@example.com", password="secret123",
                      confirm_password="other123", role="User")


def test_task_estimate_bounds():
    with pytest.raises(ValidationError):
        TaskCreate(project_id="p", name="t", estimate_hours=0)
    with pytest.raises(ValidationError):
        TaskCreate(project_id="p", name="t", estimate_hours=1000)
    assert TaskCreate(project_id="p", name="t", estimate_hours=999.99).estimate_hours == 999.99


@pytest.mark.parametrize("delta", [timedelta(0), timedelta(seconds=-1)])
def test_work_log_end_must_follow_start(delta):
    with pytest.raises(ValidationError):
        WorkLog(start_time=START, end_time=START + delta, **IDS)


def test_insert_work_log_rejects_bad_ordering(mongo):
    with pytest.raises(ValueError, match="end_time must be after start_time"):
        insert_work_log(dict(IDS, start_time=START, end_time=START))
    assert mongo["work_log"].count_documents({}) == 0


def test_insert_work_log_stores_utc_millis(mongo):
    end = START + timedelta(minutes=45, microseconds=123456)
    stored = insert_work_log(dict(IDS, start_time=START, end_time=end, note="review"))
    assert stored["end_time"] == end.replace(tzinfo=None, microsecond=123000)
    assert str(stored["task_id"]) == IDS["task_id"]
    assert stored["note"] == "review"
    assert "created_at" in stored


def test_create_and_get_documents(mongo):
    create_document("project", {"name": "Logo", "status": ProjectStatus.ON_HOLD})
    docs = get_documents("project", {"name": "Logo"})
    assert len(docs) == 1
    assert docs[0]["status"] == "On Hold"
    assert docs[0]["updated_at"] == docs[0]["created_at"]
