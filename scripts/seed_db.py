"""
Seed script for response teams and users in Firestore.

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to Firestore: python scripts/seed_db.py --apply
  - Also print a bearer token per seeded user: python scripts/seed_db.py --tokens

Behavior:
  - Loads `db_seed.json` from repo root, shaped as
    {"users": {"<id>": {...}}, "teams": {"<doc id>": {...}}}
  - Validates every document against the User / Team models.
  - Writes each document with .collection(name).document(id).set(data).

NOTE: Requires FIREBASE_CREDENTIALS_PATH and USE_MOCK_DB=false. With
USE_MOCK_DB=true the API process loads the same file into its in-memory
stores at startup (see SEED_PATH), so there is nothing to apply here.
"""

import argparse
import os
from typing import Any

from app.core.settings import settings
from app.services.stores.seed import load_seed, normalize_seed
from app.utils.security import create_access_token


def write_to_db(db: Any, seed: dict, apply: bool = False):
    for collection, docs in seed.items():
        for doc_id, data in docs.items():
            print(f"Preparing: {collection}/{doc_id}")
            if not apply:
                continue
            try:
                db.collection(collection).document(doc_id).set(data)
                print(f"Wrote: {collection}/{doc_id}")
            except Exception as e:
                print(f"Failed to write {collection}/{doc_id}: {e}")


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to Firestore instead of dry-run")
    parser.add_argument("--tokens", action="store_true", help="Print a bearer token for every seeded user")
    args = parser.parse_args()

    seed_path = os.path.join(os.getcwd(), "db_seed.json")
    if not os.path.exists(seed_path):
        print(f"Seed file not found: {seed_path}")
        return

    seed = normalize_seed(load_seed(seed_path))

    if args.tokens:
        for user_id, user in seed.get("users", {}).items():
            print(f"{user_id} ({user['role']}): {create_access_token(user_id, user['role'])}")

    if args.apply and settings.USE_MOCK_DB:
        print(f"USE_MOCK_DB=true: the API loads {settings.SEED_PATH} into its in-memory stores on startup.")
        return

    db = None
    if args.apply:
        from app.config.firebase import get_db
        db = get_db()

    write_to_db(db, seed, apply=args.apply)

    if args.apply:
        print("Seeding completed.")
    else:
        print("Dry run complete. Re-run with --apply to write to Firestore.")


if __name__ == "__main__":
    main()
