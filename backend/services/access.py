"""
access.py — Read/write scope for a caller.
Every service filters on the ids returned here, so a caller only ever sees
their own rows plus, for couple reads, those of an accepted partner.
"""

import logging

from datastore import DataHandle

logger = logging.getLogger(__name__)

RELATIONSHIPS_TABLE = "couple_relationships"


class AccessGuard:
    @staticmethod
    def own(user_id: str) -> list[str]:
        return [user_id]

    @staticmethod
    def find_partner(db: DataHandle, user_id: str) -> str | None:
        """Partner id of the caller's accepted relationship, if any."""
        rows = db.select(
            RELATIONSHIPS_TABLE,
            filters={"status": "accepted"},
            any_of=[("user1_id", user_id), ("user2_id", user_id)],
            order="created_at",
        )
        if not rows:
            return None
        if len(rows) > 1:
            logger.warning(f"User {user_id} has {len(rows)} accepted relationships; using the oldest")
        rel = rows[0]
        return rel["user2_id"] if rel["user1_id"] == user_id else rel["user1_id"]

    @staticmethod
    def read_scope(db: DataHandle, user_id: str) -> list[str]:
        """{self} plus the accepted partner."""
        scope = [user_id]
        partner_id = AccessGuard.find_partner(db, user_id)
        if partner_id:
            scope.append(partner_id)
        return scope
