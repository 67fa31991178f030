import logging

from datastore import DataHandle
from errors import AppError, ConflictError

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"


class ProfileService:
    @staticmethod
    def get(db: DataHandle, user_id: str) -> dict | None:
        rows = db.select(PROFILES_TABLE, filters={"id": user_id}, columns="full_name,avatar_url")
        return rows[0] if rows else None

    @staticmethod
    def update(db: DataHandle, user_id: str, data: dict) -> dict:
        """Apply the given fields, creating the profile row if it does not exist yet."""
        rows = db.update(PROFILES_TABLE, {"id": user_id}, data) if data else db.select(PROFILES_TABLE, filters={"id": user_id})
        if rows:
            return rows[0]
        return db.insert(PROFILES_TABLE, {"id": user_id, **data})

    @staticmethod
    def ensure_exists(admin_db: DataHandle, user_id: str, email: str) -> bool:
        """Create a minimal profile named after the email's local part.
        Returns True only when this call created it."""
        if admin_db.select(PROFILES_TABLE, filters={"id": user_id}, columns="id"):
            return False
        try:
            admin_db.insert(PROFILES_TABLE, {"id": user_id, "full_name": email.split("@")[0]})
        except ConflictError:
            # Created concurrently by someone else
            return False
        logger.info(f"Created placeholder profile for {user_id}")
        return True

    @staticmethod
    def remove_placeholder(admin_db: DataHandle, user_id: str) -> None:
        """Undo ensure_exists() when the step that needed the profile failed."""
        try:
            admin_db.delete(PROFILES_TABLE, {"id": user_id})
        except AppError as e:
            logger.error(f"Could not remove orphaned profile {user_id}: {e}")

    @staticmethod
    def names_for(db: DataHandle, user_ids: list) -> dict:
        if not user_ids:
            return {}
        rows = db.select(PROFILES_TABLE, filters={"id__in": user_ids}, columns="id,full_name")
        return {r["id"]: r["full_name"] for r in rows}
