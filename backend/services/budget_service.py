"""
budget_service.py — Budgets and their derived spend.
Current spend is never stored: every read sums the owner's transactions in
the budget's category whose date falls inside [start_date, end_date].
"""

from datastore import DataHandle
from errors import NotFoundError

BUDGETS_TABLE = "budgets"


class BudgetService:
    @staticmethod
    def current_spend(db: DataHandle, budget: dict) -> float:
        rows = db.select(
            "transactions",
            filters={
                "user_id": budget["user_id"],
                "category_id": budget["category_id"],
                "date__gte": budget["start_date"],
                "date__lte": budget["end_date"],
            },
            columns="amount",
        )
        return round(sum(r["amount"] for r in rows), 2)

    @staticmethod
    def with_spend(db: DataHandle, budget: dict) -> dict:
        spend = BudgetService.current_spend(db, budget)
        return {**budget, "current_spend": spend, "exceeded": spend > budget["budget_amount"]}

    @staticmethod
    def create(db: DataHandle, user_id: str, data: dict) -> dict:
        return db.insert(BUDGETS_TABLE, {**data, "user_id": user_id})

    @staticmethod
    def get_all(db: DataHandle, user_id: str, filters: dict = None) -> list:
        filters = filters or {}
        query = {"user_id": user_id}
        if filters.get("category_id"):
            query["category_id"] = filters["category_id"]
        if filters.get("start_date"):
            query["start_date__gte"] = filters["start_date"]
        if filters.get("end_date"):
            query["end_date__lte"] = filters["end_date"]
        budgets = db.select(BUDGETS_TABLE, filters=query, order="start_date", desc=True)
        return [BudgetService.with_spend(db, b) for b in budgets]

    @staticmethod
    def get(db: DataHandle, user_id: str, budget_id: str) -> dict:
        rows = db.select(BUDGETS_TABLE, filters={"id": budget_id, "user_id": user_id})
        if not rows:
            raise NotFoundError("Budget not found.")
        return BudgetService.with_spend(db, rows[0])

    @staticmethod
    def update(db: DataHandle, user_id: str, budget_id: str, data: dict) -> dict:
        rows = db.update(BUDGETS_TABLE, {"id": budget_id, "user_id": user_id}, data)
        if not rows:
            raise NotFoundError("Budget not found.")
        return rows[0]

    @staticmethod
    def delete(db: DataHandle, user_id: str, budget_id: str) -> None:
        if not db.delete(BUDGETS_TABLE, {"id": budget_id, "user_id": user_id}):
            raise NotFoundError("Budget not found.")
