"""
couple_service.py — Couple pairing lifecycle and couple-scoped reads.

    request  ->  pending  --accept (recipient only)-->  accepted

`rejected` exists in the schema but no transition sets it. Deleting the row
is the only way to dissolve a pairing.
"""

import logging

from datastore import DataHandle
from errors import AppError, ConflictError, NotFoundError, NotImplementedTransition, ValidationError
from identity import IdentityProvider
from services.access import AccessGuard, RELATIONSHIPS_TABLE
from services.category_service import CategoryService
from services.profile_service import ProfileService

logger = logging.getLogger(__name__)

ALREADY_EXISTS = "A relationship or request already exists with this user."


class CoupleService:
    @staticmethod
    def find_between(db: DataHandle, user_a: str, user_b: str) -> dict | None:
        """The relationship row for an unordered pair, whatever its direction."""
        for first, second in ((user_a, user_b), (user_b, user_a)):
            rows = db.select(RELATIONSHIPS_TABLE, filters={"user1_id": first, "user2_id": second})
            if rows:
                return rows[0]
        return None

    @staticmethod
    def request(db: DataHandle, admin_db: DataHandle, identity: IdentityProvider,
                user_id: str, partner_email: str) -> dict:
        partner_id = identity.find_user_id_by_email(partner_email)
        if not partner_id:
            raise NotFoundError("Partner not found.")
        partner_id = str(partner_id)

        if partner_id == user_id:
            raise ValidationError("You cannot send a request to yourself.")

        if CoupleService.find_between(db, user_id, partner_id):
            raise ConflictError(ALREADY_EXISTS)

        # The partner has not signed in during this flow, so their profile is
        # written with the privileged handle
        created_profile = ProfileService.ensure_exists(admin_db, partner_id, partner_email)

        try:
            rel = db.insert(RELATIONSHIPS_TABLE, {
                "user1_id": user_id,
                "user2_id": partner_id,
                "status": "pending",
            })
        except AppError as e:
            if created_profile:
                ProfileService.remove_placeholder(admin_db, partner_id)
            if isinstance(e, ConflictError):
                raise ConflictError(ALREADY_EXISTS) from e
            raise

        logger.info(f"Pairing request {rel.get('id')} sent by {user_id} to {partner_id}")
        return rel

    @staticmethod
    def accept(db: DataHandle, user_id: str, relationship_id: str) -> dict:
        """Only the recipient can accept.
        A wrong recipient and a missing row both surface as NotFound."""
        rows = db.update(
            RELATIONSHIPS_TABLE,
            {"id": relationship_id, "user2_id": user_id},
            {"status": "accepted"},
        )
        if not rows:
            raise NotFoundError("Request not found or permission denied.")
        logger.info(f"Pairing {relationship_id} accepted by {user_id}")
        return rows[0]

    @staticmethod
    def reject(db: DataHandle, user_id: str, relationship_id: str) -> dict:
        raise NotImplementedTransition("Rejecting a request is not supported yet.")

    @staticmethod
    def get_all(db: DataHandle, user_id: str) -> list:
        """Relationships where the caller is either side, with both profile names."""
        rows = db.select(
            RELATIONSHIPS_TABLE,
            any_of=[("user1_id", user_id), ("user2_id", user_id)],
            order="created_at",
        )
        ids = sorted({r["user1_id"] for r in rows} | {r["user2_id"] for r in rows})
        names = ProfileService.names_for(db, ids)
        for r in rows:
            r["user1_profile"] = {"full_name": names.get(r["user1_id"])}
            r["user2_profile"] = {"full_name": names.get(r["user2_id"])}
        return rows

    @staticmethod
    def delete(db: DataHandle, user_id: str, relationship_id: str) -> None:
        """Either participant may remove the relationship."""
        rows = db.select(
            RELATIONSHIPS_TABLE,
            filters={"id": relationship_id},
            any_of=[("user1_id", user_id), ("user2_id", user_id)],
        )
        if not rows:
            raise NotFoundError("Relationship not found.")
        db.delete(RELATIONSHIPS_TABLE, {"id": relationship_id})
        logger.info(f"Pairing {relationship_id} removed by {user_id}")

    @staticmethod
    def find_partner(db: DataHandle, user_id: str) -> str | None:
        return AccessGuard.find_partner(db, user_id)

    @staticmethod
    def dashboard(db: DataHandle, user_id: str) -> dict:
        """Raw transactions and goals of the caller and their accepted partner."""
        scope = AccessGuard.read_scope(db, user_id)
        transactions = db.select("transactions", filters={"user_id__in": scope}, order="date", desc=True)
        goals = db.select("goals", filters={"user_id__in": scope})
        return {
            "partner_id": scope[1] if len(scope) > 1 else None,
            "transactions": CategoryService.attach_names(db, transactions),
            "goals": goals,
        }
