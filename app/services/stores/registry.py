"""
Store Registry - picks the store implementations from configuration.

USE_MOCK_DB=true → in-memory stores (users and teams loaded from
SEED_PATH when that file exists), otherwise Firestore.
"""

from typing import Optional
import logging

from app.core.settings import settings
from app.services.stores.base import ComplaintStore, TeamRegistry, UserAccumulator

logger = logging.getLogger(__name__)


class StoreBundle:
    """The three collaborators the lifecycle coordinator needs."""

    def __init__(self, complaints: ComplaintStore, teams: TeamRegistry, users: UserAccumulator):
        self.complaints = complaints
        self.teams = teams
        self.users = users


def build_stores() -> StoreBundle:
    if settings.USE_MOCK_DB:
        from app.services.stores.memory_store import (
            InMemoryComplaintStore,
            InMemoryTeamRegistry,
            InMemoryUserAccumulator,
        )
        from app.services.stores.seed import read_seed_file

        logger.info("⚠️ USE_MOCK_DB=true, using in-memory stores")
        seed = read_seed_file(settings.SEED_PATH)
        return StoreBundle(
            InMemoryComplaintStore(),
            InMemoryTeamRegistry(seed["teams"].values()),
            InMemoryUserAccumulator(seed["users"].values()),
        )

    from app.config.firebase import get_db
    from app.services.stores.firestore_store import (
        FirestoreComplaintStore,
        FirestoreTeamRegistry,
        FirestoreUserAccumulator,
    )
    db = get_db()
    logger.info("✅ Firestore stores registered")
    return StoreBundle(FirestoreComplaintStore(db), FirestoreTeamRegistry(db), FirestoreUserAccumulator(db))


# Global registry instance (singleton)
_stores: Optional[StoreBundle] = None


def get_stores() -> StoreBundle:
    global _stores
    if _stores is None:
        _stores = build_stores()
    return _stores
