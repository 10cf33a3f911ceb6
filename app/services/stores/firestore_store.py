"""
Firestore-backed stores.

Collections:
- complaints: one document per complaint, auto-generated IDs
- teams: queried by the `name` field
- users: document ID is the user ID

Counters use firestore.Increment so concurrent bumps on the same document
are not lost. The complaint write and the team counter write are still two
separate operations.
"""

from typing import Dict, Iterable, List, Optional
import logging

from firebase_admin import firestore
from google.api_core.exceptions import NotFound

from app.services.stores.base import ComplaintStore, TeamRegistry, UserAccumulator
from app.utils.firestore_helpers import snapshot_to_dict, where_filter

logger = logging.getLogger(__name__)


class FirestoreComplaintStore(ComplaintStore):

    COLLECTION = "complaints"

    def __init__(self, db):
        self.db = db

    def create(self, data: Dict) -> Dict:
        doc_ref = self.db.collection(self.COLLECTION).document()  # Auto-generate unique ID
        record = dict(data, id=doc_ref.id)
        doc_ref.set(record)
        logger.info(f"Complaint saved to Firestore: {doc_ref.id}")
        return record

    def get(self, complaint_id: str) -> Optional[Dict]:
        doc = self.db.collection(self.COLLECTION).document(complaint_id).get()
        return snapshot_to_dict(doc)

    def update(self, complaint_id: str, fields: Dict) -> Optional[Dict]:
        doc_ref = self.db.collection(self.COLLECTION).document(complaint_id)
        try:
            doc_ref.update(fields)
        except NotFound:
            return None
        return snapshot_to_dict(doc_ref.get())

    def list(self, creator_id: Optional[str] = None, limit: int = 200) -> List[Dict]:
        query = self.db.collection(self.COLLECTION)
        if creator_id is not None:
            query = where_filter(query, "user_id", "==", creator_id)
        query = query.order_by("created_at", direction=firestore.Query.DESCENDING).limit(limit)
        return [snapshot_to_dict(doc) for doc in query.stream()]


class FirestoreTeamRegistry(TeamRegistry):

    COLLECTION = "teams"

    def __init__(self, db):
        self.db = db

    def _find(self, name: str):
        query = where_filter(self.db.collection(self.COLLECTION), "name", "==", name).limit(1)
        docs = list(query.stream())
        return docs[0] if docs else None

    def get_team(self, name: str) -> Optional[Dict]:
        return snapshot_to_dict(self._find(name))

    def increment_counters(self, name: str, active_delta: int = 0, completed_delta: int = 0) -> Optional[Dict]:
        doc = self._find(name)
        if doc is None:
            return None
        doc.reference.update({
            "active_tasks": firestore.Increment(active_delta),
            "completed": firestore.Increment(completed_delta),
        })
        return snapshot_to_dict(doc.reference.get())


class FirestoreUserAccumulator(UserAccumulator):

    COLLECTION = "users"

    def __init__(self, db):
        self.db = db

    def get_user(self, user_id: str) -> Optional[Dict]:
        doc = self.db.collection(self.COLLECTION).document(user_id).get()
        return snapshot_to_dict(doc)

    def get_users(self, user_ids: Iterable[str]) -> Dict[str, Dict]:
        refs = [self.db.collection(self.COLLECTION).document(user_id) for user_id in set(user_ids)]
        if not refs:
            return {}
        users = {}
        for doc in self.db.get_all(refs):
            data = snapshot_to_dict(doc)
            if data is not None:
                users[data["id"]] = data
        return users

    def increment(self, user_id: str, eco_points: int = 0, complaints_count: int = 0) -> None:
        self.db.collection(self.COLLECTION).document(user_id).update({
            "eco_points": firestore.Increment(eco_points),
            "complaints_count": firestore.Increment(complaints_count),
        })
