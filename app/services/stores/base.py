"""
Store Interfaces - collaborators injected into the lifecycle coordinator.

All stores work with plain snake_case dict records that carry their `id`
(teams are identified by `name`). Implementations must return copies:
callers are free to mutate what they get back.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional


class ComplaintStore(ABC):
    """Persistence for complaint records (the lifecycle aggregate root)."""

    @abstractmethod
    def create(self, data: Dict) -> Dict:
        """
        Persist a new complaint.

        Returns:
            The stored record, including its generated `id`
        """
        pass

    @abstractmethod
    def get(self, complaint_id: str) -> Optional[Dict]:
        pass

    @abstractmethod
    def update(self, complaint_id: str, fields: Dict) -> Optional[Dict]:
        """
        Merge fields into an existing complaint.

        Returns:
            Updated record, or None if the complaint does not exist
        """
        pass

    @abstractmethod
    def list(self, creator_id: Optional[str] = None, limit: int = 200) -> List[Dict]:
        """Complaints newest first, optionally restricted to one creator."""
        pass


class TeamRegistry(ABC):
    """Response teams and their workload counters."""

    @abstractmethod
    def get_team(self, name: str) -> Optional[Dict]:
        pass

    @abstractmethod
    def increment_counters(self, name: str, active_delta: int = 0, completed_delta: int = 0) -> Optional[Dict]:
        """
        Add deltas to active_tasks / completed.

        Returns:
            Updated team, or None if no team has that name
        """
        pass


class UserAccumulator(ABC):
    """Read access to users plus their reward counters."""

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[Dict]:
        pass

    @abstractmethod
    def get_users(self, user_ids: Iterable[str]) -> Dict[str, Dict]:
        """Bulk lookup; unknown IDs are simply missing from the result."""
        pass

    @abstractmethod
    def increment(self, user_id: str, eco_points: int = 0, complaints_count: int = 0) -> None:
        pass
