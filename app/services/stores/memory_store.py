"""
In-memory stores - used with USE_MOCK_DB=true and in tests.

Same contracts as the Firestore stores, no persistence across restarts.
"""

from copy import deepcopy
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional
import logging
import uuid

from app.models.user import Team, User
from app.services.stores.base import ComplaintStore, TeamRegistry, UserAccumulator

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _created_at(record: Dict) -> datetime:
    created_at = record.get("created_at") or _EPOCH
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at


class InMemoryComplaintStore(ComplaintStore):

    def __init__(self):
        self._complaints: Dict[str, Dict] = {}

    def create(self, data: Dict) -> Dict:
        record = deepcopy(data)
        record["id"] = record.get("id") or uuid.uuid4().hex
        self._complaints[record["id"]] = record
        return deepcopy(record)

    def get(self, complaint_id: str) -> Optional[Dict]:
        record = self._complaints.get(complaint_id)
        return deepcopy(record) if record is not None else None

    def update(self, complaint_id: str, fields: Dict) -> Optional[Dict]:
        record = self._complaints.get(complaint_id)
        if record is None:
            return None
        record.update(deepcopy(fields))
        return deepcopy(record)

    def list(self, creator_id: Optional[str] = None, limit: int = 200) -> List[Dict]:
        # Insertion order breaks ties between identical timestamps
        matches = [
            (position, record) for position, record in enumerate(self._complaints.values())
            if creator_id is None or record.get("user_id") == creator_id
        ]
        matches.sort(key=lambda item: (_created_at(item[1]), item[0]), reverse=True)
        return [deepcopy(record) for _, record in matches[:limit]]


class InMemoryTeamRegistry(TeamRegistry):

    def __init__(self, teams: Optional[Iterable[Dict]] = None):
        self._teams: Dict[str, Dict] = {}
        for team in teams or []:
            self.add_team(team)

    def add_team(self, team: Dict) -> Dict:
        record = Team.model_validate(team).model_dump()
        self._teams[record["name"]] = record
        return deepcopy(record)

    def get_team(self, name: str) -> Optional[Dict]:
        team = self._teams.get(name)
        return deepcopy(team) if team is not None else None

    def increment_counters(self, name: str, active_delta: int = 0, completed_delta: int = 0) -> Optional[Dict]:
        team = self._teams.get(name)
        if team is None:
            return None
        team["active_tasks"] += active_delta
        team["completed"] += completed_delta
        return deepcopy(team)


class InMemoryUserAccumulator(UserAccumulator):

    def __init__(self, users: Optional[Iterable[Dict]] = None):
        self._users: Dict[str, Dict] = {}
        for user in users or []:
            self.add_user(user)

    def add_user(self, user: Dict) -> Dict:
        record = User.model_validate(user).model_dump(mode="json")
        self._users[record["id"]] = record
        return deepcopy(record)

    def get_user(self, user_id: str) -> Optional[Dict]:
        user = self._users.get(user_id)
        return deepcopy(user) if user is not None else None

    def get_users(self, user_ids: Iterable[str]) -> Dict[str, Dict]:
        return {
            user_id: deepcopy(self._users[user_id])
            for user_id in set(user_ids)
            if user_id in self._users
        }

    def increment(self, user_id: str, eco_points: int = 0, complaints_count: int = 0) -> None:
        user = self._users.get(user_id)
        if user is None:
            raise KeyError(f"User {user_id} not found")
        user["eco_points"] += eco_points
        user["complaints_count"] += complaints_count
