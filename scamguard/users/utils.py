"""
Profile rows in the persistent store. One profile per verified account,
keyed by the account id.
"""

from typing import List, Optional
from scamguard.authentication.schemas import Identity
from scamguard.storage import utils as store

PROFILES = "profiles"


def _to_identity(row: dict) -> Identity:
    return Identity(**{k: v for k, v in row.items() if k != "created_at"})


def get_profile(user_id: str) -> Optional[Identity]:
    row = store.get(PROFILES, user_id)
    return _to_identity(row) if row else None


def get_profile_by_identifier(identifier: str) -> Optional[Identity]:
    rows = store.select(PROFILES, lambda r: r["identifier"] == identifier)
    return _to_identity(rows[0]) if rows else None


def create_profile(user_id: str, identifier: str, is_admin: bool = False) -> Identity:
    row = store.insert(
        PROFILES,
        {
            "identifier": identifier,
            "is_admin": is_admin,
            "is_banned": False,
            "is_verified": True,
            "full_name": None,
            "phone_number": None,
            "avatar_url": None,
        },
        row_id=user_id,
    )
    return _to_identity(row)


def load_profiles() -> List[Identity]:
    rows = sorted(store.load_collection(PROFILES), key=lambda r: r["created_at"])
    return [_to_identity(r) for r in rows]


def update_profile(user_id: str, changes: dict) -> Optional[Identity]:
    """Single atomic write of ``changes``. Returns None for unknown users."""
    row = store.update(PROFILES, user_id, changes)
    return _to_identity(row) if row else None
