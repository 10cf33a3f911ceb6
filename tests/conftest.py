# tests/conftest.py
# Environment is set BEFORE any app import so Settings() sees it:
# in-memory stores, a fixed JWT secret, no Firestore.

import os

os.environ.setdefault("USE_MOCK_DB", "true")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.complaint_lifecycle import ComplaintLifecycleCoordinator, get_complaint_lifecycle
from app.services.notification_fanout import InProcessFanout, Notifier, get_notification_fanout
from app.services.stores.memory_store import (
    InMemoryComplaintStore,
    InMemoryTeamRegistry,
    InMemoryUserAccumulator,
)
from app.utils.security import create_access_token


USERS = [
    {"id": "citizen-1", "name": "Asha", "email": "asha@example.com", "role": "citizen"},
    {"id": "citizen-2", "name": "Ravi", "email": "ravi@example.com", "role": "citizen"},
    {"id": "admin-1", "name": "Meera", "email": "meera@example.com", "role": "admin"},
    {"id": "staff-1", "name": "Kiran", "email": "kiran@example.com", "role": "staff"},
    {"id": "staff-2", "name": "Dev", "email": "dev@example.com", "role": "staff"},
]

TEAMS = [
    {"name": "TeamA", "status": "Active", "members": ["staff-1", "staff-2"]},
    {"name": "TeamB", "status": "Break", "members": ["staff-2"]},
    {"name": "TeamC", "status": "Active", "members": []},
]


class RecordingNotifier(Notifier):
    """Keeps every published (topic, payload) in order."""

    def __init__(self):
        self.events = []

    def publish(self, topic, payload):
        self.events.append((topic, payload))

    def topics(self):
        return [topic for topic, _ in self.events]

    def payloads(self, topic):
        return [payload for t, payload in self.events if t == topic]


@pytest.fixture
def users():
    return InMemoryUserAccumulator(USERS)


@pytest.fixture
def teams():
    return InMemoryTeamRegistry(TEAMS)


@pytest.fixture
def complaints():
    return InMemoryComplaintStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def lifecycle(complaints, teams, users, notifier):
    return ComplaintLifecycleCoordinator(
        complaints=complaints,
        teams=teams,
        users=users,
        notifier=notifier,
        eco_points_reward=10,
        page_size=200,
    )


@pytest.fixture
def client(lifecycle):
    app.dependency_overrides[get_complaint_lifecycle] = lambda: lifecycle
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def fanout():
    return InProcessFanout()


@pytest.fixture
def live_client(complaints, teams, users, fanout):
    """Client whose coordinator publishes into a real fan-out, for WebSocket tests."""
    coordinator = ComplaintLifecycleCoordinator(
        complaints=complaints, teams=teams, users=users, notifier=fanout,
    )
    app.dependency_overrides[get_complaint_lifecycle] = lambda: coordinator
    app.dependency_overrides[get_notification_fanout] = lambda: fanout
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def auth_headers(user_id, role):
    return {"Authorization": f"Bearer {create_access_token(user_id, role)}"}


@pytest.fixture
def as_user():
    """as_user("admin-1", "admin") -> Authorization headers."""
    return auth_headers
