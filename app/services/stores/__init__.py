"""
Complaint, team and user stores.

Firestore in production, in-memory for local development and tests.
"""

from app.services.stores.base import ComplaintStore, TeamRegistry, UserAccumulator
from app.services.stores.memory_store import (
    InMemoryComplaintStore,
    InMemoryTeamRegistry,
    InMemoryUserAccumulator,
)
from app.services.stores.registry import StoreBundle, get_stores

__all__ = [
    "ComplaintStore",
    "TeamRegistry",
    "UserAccumulator",
    "InMemoryComplaintStore",
    "InMemoryTeamRegistry",
    "InMemoryUserAccumulator",
    "StoreBundle",
    "get_stores",
]
