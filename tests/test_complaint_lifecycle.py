"""
Lifecycle coordinator tests against in-memory stores and a recording notifier.
"""

import pytest

from app.core.errors import (
    ConflictError,
    InfrastructureError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from app.models.complaint import ComplaintCreate
from app.models.user import Actor
from app.services.complaint_lifecycle import ComplaintLifecycleCoordinator
from app.services.stores.memory_store import (
    InMemoryComplaintStore,
    InMemoryTeamRegistry,
    InMemoryUserAccumulator,
)

pytestmark = pytest.mark.unit

CITIZEN = Actor(id="citizen-1", role="citizen")
OTHER_CITIZEN = Actor(id="citizen-2", role="citizen")
ADMIN = Actor(id="admin-1", role="admin")
STAFF = Actor(id="staff-1", role="staff")


def _create(lifecycle, actor=CITIZEN, **fields):
    fields.setdefault("title", "Overflowing bin")
    return lifecycle.create_complaint(actor, ComplaintCreate(**fields))


# ----------------------------------------------------------------------
# Create
# ----------------------------------------------------------------------

def test_create_sets_defaults_and_status_open(lifecycle):
    complaint = _create(lifecycle)

    assert complaint["id"]
    assert complaint["status"] == "open"
    assert complaint["category"] == "Garbage Collection"
    assert complaint["priority"] == "Medium"
    # Unset priority is stored as Medium but scored as an unrecognised label
    assert complaint["severity_score"] == 10
    assert complaint["user_id"] == "citizen-1"
    assert complaint["assigned_team"] is None
    assert complaint["status_history"][0]["to"] == "open"


@pytest.mark.parametrize("priority, score", [("High", 50), ("Medium", 30), ("Low", 10)])
def test_create_derives_severity_from_priority(lifecycle, priority, score):
    assert _create(lifecycle, priority=priority)["severity_score"] == score


@pytest.mark.parametrize("title", [None, "", "   "])
def test_create_without_title_fails_and_persists_nothing(lifecycle, complaints, users, notifier, title):
    with pytest.raises(ValidationError):
        lifecycle.create_complaint(CITIZEN, ComplaintCreate(title=title))

    assert complaints.list() == []
    assert users.get_user("citizen-1")["eco_points"] == 0
    assert notifier.events == []


def test_create_keeps_unknown_priority_label_at_lowest_score(lifecycle, complaints):
    complaint = _create(lifecycle, priority="Urgent")

    assert complaint["priority"] == "Urgent"
    assert complaint["severity_score"] == 10
    assert complaints.get(complaint["id"])["priority"] == "Urgent"


def test_create_blank_priority_scores_lowest(lifecycle):
    complaint = _create(lifecycle, priority="")

    assert complaint["priority"] == "Medium"
    assert complaint["severity_score"] == 10


@pytest.mark.parametrize(
    "longitude, latitude, expected",
    [
        ("abc", "xyz", [0.0, 0.0]),
        (None, None, [0.0, 0.0]),
        ("", "  ", [0.0, 0.0]),
        ("73.8077", 18.5074, [73.8077, 18.5074]),
        (float("nan"), "12.5", [0.0, 12.5]),
    ],
)
def test_create_normalizes_coordinates(lifecycle, longitude, latitude, expected):
    complaint = _create(lifecycle, longitude=longitude, latitude=latitude)

    assert complaint["location"] == {"type": "Point", "coordinates": expected}


def test_create_rewards_reporter_and_broadcasts_once(lifecycle, users, notifier):
    complaint = _create(lifecycle, category="Illegal Dumping", priority="High")

    user = users.get_user("citizen-1")
    assert user["eco_points"] == 10
    assert user["complaints_count"] == 1

    assert notifier.topics() == ["complaint:new"]
    assert notifier.payloads("complaint:new") == [{
        "id": complaint["id"],
        "title": "Overflowing bin",
        "userId": "citizen-1",
        "reporterName": "Asha",
        "category": "Illegal Dumping",
        "priority": "High",
    }]


def test_create_by_unknown_user_fails(lifecycle, complaints):
    with pytest.raises(NotFoundError):
        _create(lifecycle, actor=Actor(id="ghost", role="citizen"))
    assert complaints.list() == []


def test_create_rejects_unknown_role(lifecycle):
    with pytest.raises(PermissionDeniedError):
        _create(lifecycle, actor=Actor(id="citizen-1", role="guest"))


def test_create_storage_failure_skips_reward_and_notification(teams, users, notifier):
    class BrokenStore(InMemoryComplaintStore):
        def create(self, data):
            raise RuntimeError("firestore unavailable")

    lifecycle = ComplaintLifecycleCoordinator(BrokenStore(), teams, users, notifier)

    with pytest.raises(InfrastructureError):
        _create(lifecycle)

    assert users.get_user("citizen-1")["eco_points"] == 0
    assert notifier.events == []


def test_create_reward_failure_keeps_complaint(complaints, teams, notifier):
    class BrokenUsers(InMemoryUserAccumulator):
        def increment(self, user_id, eco_points=0, complaints_count=0):
            raise RuntimeError("users collection locked")

    from tests.conftest import USERS

    lifecycle = ComplaintLifecycleCoordinator(complaints, teams, BrokenUsers(USERS), notifier)

    complaint = _create(lifecycle)

    assert complaints.get(complaint["id"]) is not None
    assert notifier.topics() == ["complaint:new"]


# ----------------------------------------------------------------------
# Assign
# ----------------------------------------------------------------------

def test_assign_moves_to_in_progress_and_counts_task(lifecycle, teams, notifier):
    complaint = _create(lifecycle)
    notifier.events.clear()

    updated = lifecycle.assign_complaint(ADMIN, complaint["id"], "TeamA")

    assert updated["status"] == "in_progress"
    assert updated["assigned_team"] == "TeamA"
    assert updated["assigned_by"] == "admin-1"
    assert [entry["to"] for entry in updated["status_history"]] == ["open", "in_progress"]
    assert teams.get_team("TeamA")["active_tasks"] == 1


def test_assign_notifies_every_team_member(lifecycle, notifier):
    complaint = _create(lifecycle)
    notifier.events.clear()

    lifecycle.assign_complaint(ADMIN, complaint["id"], "TeamA")

    assert notifier.payloads("complaint:assigned") == [{"id": complaint["id"], "team": "TeamA"}]
    member_topics = [topic for topic in notifier.topics() if topic.startswith("user:")]
    assert member_topics == ["user:staff-1:notification", "user:staff-2:notification"]
    for payload in notifier.payloads("user:staff-1:notification"):
        assert payload == {
            "type": "task_assigned",
            "message": "New task assigned to TeamA: Overflowing bin",
            "complaintId": complaint["id"],
        }


def test_assign_to_team_on_break_changes_nothing(lifecycle, complaints, teams, notifier):
    complaint = _create(lifecycle)
    notifier.events.clear()

    with pytest.raises(ConflictError):
        lifecycle.assign_complaint(ADMIN, complaint["id"], "TeamB")

    assert complaints.get(complaint["id"]) == complaint
    assert teams.get_team("TeamB")["active_tasks"] == 0
    assert notifier.events == []


def test_assign_unknown_complaint(lifecycle):
    with pytest.raises(NotFoundError):
        lifecycle.assign_complaint(ADMIN, "missing", "TeamA")


def test_assign_checks_team_break_before_complaint(lifecycle):
    with pytest.raises(ConflictError):
        lifecycle.assign_complaint(ADMIN, "missing", "TeamB")


def test_assign_unknown_team(lifecycle, complaints):
    complaint = _create(lifecycle)

    with pytest.raises(NotFoundError):
        lifecycle.assign_complaint(ADMIN, complaint["id"], "TeamZ")
    assert complaints.get(complaint["id"])["status"] == "open"


def test_assign_resolved_complaint_is_not_found(lifecycle):
    complaint = _create(lifecycle)
    lifecycle.resolve_complaint(STAFF, complaint["id"], "proof.jpg")

    with pytest.raises(NotFoundError):
        lifecycle.assign_complaint(ADMIN, complaint["id"], "TeamA")


def test_assign_requires_team_name(lifecycle):
    complaint = _create(lifecycle)

    with pytest.raises(ValidationError):
        lifecycle.assign_complaint(ADMIN, complaint["id"], "  ")


def test_citizen_cannot_assign(lifecycle):
    complaint = _create(lifecycle)

    with pytest.raises(PermissionDeniedError):
        lifecycle.assign_complaint(CITIZEN, complaint["id"], "TeamA")


def test_reassignment_increments_new_team_and_leaves_previous(lifecycle, teams):
    complaint = _create(lifecycle)
    lifecycle.assign_complaint(ADMIN, complaint["id"], "TeamA")

    updated = lifecycle.assign_complaint(STAFF, complaint["id"], "TeamC")

    assert updated["assigned_team"] == "TeamC"
    assert updated["assigned_by"] == "staff-1"
    assert teams.get_team("TeamA")["active_tasks"] == 1
    assert teams.get_team("TeamC")["active_tasks"] == 1


def test_assign_counter_failure_does_not_fail_assignment(complaints, users, notifier):
    from tests.conftest import TEAMS

    class BrokenTeams(InMemoryTeamRegistry):
        def increment_counters(self, name, active_delta=0, completed_delta=0):
            raise RuntimeError("teams collection locked")

    lifecycle = ComplaintLifecycleCoordinator(complaints, BrokenTeams(TEAMS), users, notifier)
    complaint = _create(lifecycle)

    updated = lifecycle.assign_complaint(ADMIN, complaint["id"], "TeamA")

    assert updated["status"] == "in_progress"
    assert "complaint:assigned" in notifier.topics()


# ----------------------------------------------------------------------
# Resolve
# ----------------------------------------------------------------------

@pytest.mark.parametrize("proof", [None, "", "  "])
def test_resolve_requires_proof(lifecycle, complaints, proof):
    complaint = _create(lifecycle)

    with pytest.raises(ValidationError):
        lifecycle.resolve_complaint(STAFF, complaint["id"], proof)
    assert complaints.get(complaint["id"])["status"] == "open"


def test_resolve_unknown_complaint(lifecycle):
    with pytest.raises(NotFoundError):
        lifecycle.resolve_complaint(STAFF, "missing", "proof.jpg")


def test_resolve_assigned_complaint_updates_team_and_notifies(lifecycle, teams, notifier):
    complaint = _create(lifecycle)
    lifecycle.assign_complaint(ADMIN, complaint["id"], "TeamA")
    notifier.events.clear()

    updated = lifecycle.resolve_complaint(STAFF, complaint["id"], "proof.jpg")

    assert updated["status"] == "resolved"
    assert updated["proof_image_url"] == "proof.jpg"
    assert updated["resolved_by"] == "staff-1"

    team = teams.get_team("TeamA")
    assert team["active_tasks"] == 0
    assert team["completed"] == 1

    assert notifier.topics() == [
        "complaint:resolved",
        "user:citizen-1:notification",
        "user:admin-1:notification",
    ]
    assert notifier.payloads("complaint:resolved")[0]["message"] == 'Your complaint "Overflowing bin" has been resolved!'
    assert notifier.payloads("user:citizen-1:notification")[0]["type"] == "complaint_resolved"
    assert notifier.payloads("user:admin-1:notification") == [{
        "type": "task_resolved",
        "message": 'Task for complaint "Overflowing bin" has been resolved by team TeamA',
        "complaintId": complaint["id"],
    }]


def test_resolve_open_complaint_directly(lifecycle, teams, notifier):
    complaint = _create(lifecycle)
    notifier.events.clear()

    updated = lifecycle.resolve_complaint(ADMIN, complaint["id"], "proof.jpg")

    assert updated["status"] == "resolved"
    assert teams.get_team("TeamA")["completed"] == 0
    # No assigner recorded, so only the broadcast and the creator notification
    assert notifier.topics() == ["complaint:resolved", "user:citizen-1:notification"]


def test_resolve_twice_replaces_proof_and_moves_counters_again(lifecycle, teams, notifier):
    complaint = _create(lifecycle)
    lifecycle.assign_complaint(ADMIN, complaint["id"], "TeamA")
    lifecycle.resolve_complaint(STAFF, complaint["id"], "proof.jpg")
    notifier.events.clear()

    updated = lifecycle.resolve_complaint(ADMIN, complaint["id"], "again.jpg")

    assert updated["status"] == "resolved"
    assert updated["proof_image_url"] == "again.jpg"
    assert updated["resolved_by"] == "admin-1"
    assert [entry["to"] for entry in updated["status_history"]] == ["open", "in_progress", "resolved", "resolved"]
    assert teams.get_team("TeamA")["active_tasks"] == -1
    assert teams.get_team("TeamA")["completed"] == 2
    assert notifier.topics() == [
        "complaint:resolved",
        "user:citizen-1:notification",
        "user:admin-1:notification",
    ]


def test_resolve_counter_failure_is_swallowed(complaints, users, notifier):
    from tests.conftest import TEAMS

    class BrokenTeams(InMemoryTeamRegistry):
        def increment_counters(self, name, active_delta=0, completed_delta=0):
            if active_delta < 0:
                raise RuntimeError("teams collection locked")
            return super().increment_counters(name, active_delta, completed_delta)

    lifecycle = ComplaintLifecycleCoordinator(complaints, BrokenTeams(TEAMS), users, notifier)
    complaint = _create(lifecycle)
    lifecycle.assign_complaint(ADMIN, complaint["id"], "TeamA")

    updated = lifecycle.resolve_complaint(STAFF, complaint["id"], "proof.jpg")

    assert updated["status"] == "resolved"
    assert "complaint:resolved" in notifier.topics()


def test_citizen_cannot_resolve(lifecycle):
    complaint = _create(lifecycle)

    with pytest.raises(PermissionDeniedError):
        lifecycle.resolve_complaint(CITIZEN, complaint["id"], "proof.jpg")


# ----------------------------------------------------------------------
# Listing
# ----------------------------------------------------------------------

def test_citizen_sees_only_own_complaints(lifecycle):
    _create(lifecycle, title="Mine")
    _create(lifecycle, actor=OTHER_CITIZEN, title="Theirs")

    listed = lifecycle.list_complaints(CITIZEN)

    assert [c["title"] for c in listed] == ["Mine"]
    assert all(c["user_id"]["id"] == "citizen-1" for c in listed)


@pytest.mark.parametrize("actor", [ADMIN, STAFF])
def test_operators_see_all_complaints_newest_first(lifecycle, actor):
    _create(lifecycle, title="First")
    _create(lifecycle, actor=OTHER_CITIZEN, title="Second")
    _create(lifecycle, actor=ADMIN, title="Third")

    listed = lifecycle.list_complaints(actor)

    assert [c["title"] for c in listed] == ["Third", "Second", "First"]


def test_listing_joins_display_attributes(lifecycle):
    complaint = _create(lifecycle)
    lifecycle.assign_complaint(ADMIN, complaint["id"], "TeamA")
    lifecycle.resolve_complaint(STAFF, complaint["id"], "proof.jpg")

    listed = lifecycle.list_complaints(ADMIN)[0]

    assert listed["user_id"] == {"id": "citizen-1", "name": "Asha", "email": "asha@example.com", "role": "citizen"}
    assert listed["assigned_by"]["name"] == "Meera"
    assert listed["resolved_by"]["role"] == "staff"


def test_listing_is_capped_at_page_size(complaints, teams, users, notifier):
    lifecycle = ComplaintLifecycleCoordinator(complaints, teams, users, notifier, page_size=3)
    for i in range(5):
        _create(lifecycle, title=f"Bin {i}")

    assert len(lifecycle.list_complaints(ADMIN)) == 3


# ----------------------------------------------------------------------
# End to end
# ----------------------------------------------------------------------

def test_full_lifecycle_scenario(lifecycle, teams):
    complaint = _create(lifecycle, title="Overflowing bin", priority="High")
    assert complaint["severity_score"] == 50
    assert complaint["status"] == "open"

    assigned = lifecycle.assign_complaint(ADMIN, complaint["id"], "TeamA")
    assert assigned["status"] == "in_progress"
    assert teams.get_team("TeamA")["active_tasks"] == 1

    resolved = lifecycle.resolve_complaint(STAFF, complaint["id"], "x.jpg")
    assert resolved["status"] == "resolved"
    assert resolved["proof_image_url"] == "x.jpg"
    team = teams.get_team("TeamA")
    assert team["active_tasks"] == 0
    assert team["completed"] == 1
