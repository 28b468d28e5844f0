"""
Shared fixtures: an in-memory Mongo (mongomock) patched into the app, a
controllable clock for the timer, and per-user API clients.
"""
from datetime import datetime, timedelta, timezone

import mongomock
import pytest
from fastapi.testclient import TestClient

import database
import main
from timer import TimerRegistry


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def mongo(monkeypatch):
    test_db = mongomock.MongoClient()["project_tracker_test"]
    monkeypatch.setattr(database, "db", test_db)
    monkeypatch.setattr(main, "db", test_db)
    return test_db


@pytest.fixture
def clock():
    # a couple of hours in the past so logged sessions fall inside report windows
    start = datetime.now(timezone.utc).replace(microsecond=0) - timedelta(hours=2)
    return FakeClock(start)


@pytest.fixture
def timers(monkeypatch, clock):
    registry = TimerRegistry(clock=clock)
    monkeypatch.setattr(main, "timers", registry)
    return registry


@pytest.fixture
def signup(mongo, timers):
    """Factory: sign up a user and return (client, user) with the session cookie set."""
    def _signup(name, role="User", email=None):
        client = TestClient(main.app)
        email = email or f"{name.lower()}@example.com"
        r = client.post("/api/auth/signup", json={
            "name": name,
            "email": email,
            "password": "secret123",
            "confirm_password": "secret123",
            "role": role,
        })
        assert r.status_code == 201, r.text
        return client, r.json()["user"]
    return _signup


@pytest.fixture
def workspace(signup):
    """An admin owning one project with one task assigned to a regular user."""
    admin_client, admin = signup("Alex", role="Admin")
    user_client, user = signup("Sarah")
    project = admin_client.post("/api/projects", json={"name": "Website Redesign", "type": "webflow"}).json()
    task = admin_client.post("/api/tasks", json={
        "project_id": project["id"],
        "name": "Build navigation",
        "type": "development",
        "assigned_user_id": user["id"],
        "estimate_hours": 12,
    }).json()
    return {
        "admin_client": admin_client, "admin": admin,
        "user_client": user_client, "user": user,
        "project": project, "task": task,
    }
