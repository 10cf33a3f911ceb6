"""
Seed documents for users and teams.

`db_seed.json` is shaped as
    {"users": {"<id>": {...}}, "teams": {"<doc id>": {...}}}
and is shared by scripts/seed_db.py (Firestore) and the in-memory stores
built with USE_MOCK_DB=true.
"""

from typing import Dict
import json
import logging
import os

from app.models.user import Team, User

logger = logging.getLogger(__name__)

MODELS = {
    "users": User,
    "teams": Team,
}


def load_seed(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def normalize_seed(seed: dict) -> Dict[str, Dict[str, dict]]:
    """Validate and convert documents to the stored snake_case shape."""
    normalized = {}
    for collection, docs in seed.items():
        model = MODELS.get(collection)
        if model is None:
            logger.warning(f"⚠️ Skipping unknown seed collection: {collection}")
            continue
        normalized[collection] = {}
        for doc_id, data in docs.items():
            if collection == "users":
                data = dict(data, id=doc_id)
            normalized[collection][doc_id] = model.model_validate(data).model_dump(mode="json")
    return normalized


def read_seed_file(path: str) -> Dict[str, Dict[str, dict]]:
    """
    Load and normalize a seed file.

    A missing file yields empty collections. A malformed file raises.
    """
    if not path or not os.path.exists(path):
        logger.info(f"No seed file at {path}, starting without users or teams")
        return {"users": {}, "teams": {}}

    seed = normalize_seed(load_seed(path))
    seed.setdefault("users", {})
    seed.setdefault("teams", {})
    logger.info(f"✅ Loaded {len(seed['users'])} users and {len(seed['teams'])} teams from {path}")
    return seed
