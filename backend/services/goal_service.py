"""
goal_service.py — Monthly category goals and personal savings goals.
"""

from datetime import datetime, timezone

from datastore import DataHandle
from errors import NotFoundError

GOALS_TABLE = "goals"
PERSONAL_GOALS_TABLE = "personal_goals"
GOAL_COLUMNS = "id,user_id,category_id,amount,month,created_at"


def month_start(day: str) -> str:
    """Goals are keyed by month; any day of the month names it."""
    return day[:8] + "01"


class GoalService:
    @staticmethod
    def get_for_month(db: DataHandle, user_id: str, month: str) -> list:
        return db.select(GOALS_TABLE, filters={"user_id": user_id, "month": month_start(month)}, columns=GOAL_COLUMNS)

    @staticmethod
    def save(db: DataHandle, user_id: str, data: dict) -> dict:
        """Saving the same (category, month) again overwrites the amount."""
        row = db.upsert(
            GOALS_TABLE,
            {**data, "month": month_start(data["month"]), "user_id": user_id},
            on_conflict=["user_id", "category_id", "month"],
        )
        return {k: row.get(k) for k in GOAL_COLUMNS.split(",")}

    @staticmethod
    def delete(db: DataHandle, user_id: str, goal_id: str) -> None:
        if not db.delete(GOALS_TABLE, {"id": goal_id, "user_id": user_id}):
            raise NotFoundError("Goal not found.")


class PersonalGoalService:
    @staticmethod
    def get_all(db: DataHandle, user_id: str) -> list:
        return db.select(PERSONAL_GOALS_TABLE, filters={"user_id": user_id}, order="created_at")

    @staticmethod
    def create(db: DataHandle, user_id: str, data: dict) -> dict:
        data = {k: v for k, v in data.items() if v is not None}
        data.setdefault("current_amount", 0.0)
        return db.insert(PERSONAL_GOALS_TABLE, {**data, "user_id": user_id})

    @staticmethod
    def replace(db: DataHandle, user_id: str, goal_id: str, data: dict) -> dict:
        """Full replacement; the client sends the new current_amount, not a delta."""
        data = {**data, "updated_at": datetime.now(timezone.utc).isoformat()}
        rows = db.update(PERSONAL_GOALS_TABLE, {"id": goal_id, "user_id": user_id}, data)
        if not rows:
            raise NotFoundError("Personal goal not found.")
        return rows[0]

    @staticmethod
    def delete(db: DataHandle, user_id: str, goal_id: str) -> None:
        if not db.delete(PERSONAL_GOALS_TABLE, {"id": goal_id, "user_id": user_id}):
            raise NotFoundError("Personal goal not found.")
