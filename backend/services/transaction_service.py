"""
transaction_service.py — Ledger and scheduled ledger.
New transactions are routed by calendar day: anything dated after today goes
to the scheduled ledger, everything else to the immediate one. Updates never
move a row between ledgers.
"""

import logging
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from datastore import DataHandle
from errors import NotFoundError
from services.access import AccessGuard
from services.category_service import CategoryService

logger = logging.getLogger(__name__)

LEDGER_TABLE = "transactions"
SCHEDULED_TABLE = "scheduled_transactions"


def today_in(zone_name: str) -> date:
    """Current calendar day in the given IANA zone."""
    return datetime.now(ZoneInfo(zone_name)).date()


def route_ledger(date_str: str, today: date) -> str:
    """Table a new transaction belongs to, compared at day granularity."""
    if date.fromisoformat(date_str) > today:
        return SCHEDULED_TABLE
    return LEDGER_TABLE


class TransactionService:
    @staticmethod
    def create(db: DataHandle, user_id: str, data: dict, today: date) -> tuple[str, dict]:
        """Insert into the routed ledger. Returns (table, stored row)."""
        table = route_ledger(data["date"], today)
        row = db.insert(table, {**data, "user_id": user_id})
        logger.info(f"Transaction {row.get('id')} stored in {table}")
        return table, row

    @staticmethod
    def get_all(db: DataHandle, user_id: str, filters: dict = None, couple: bool = False) -> list:
        filters = filters or {}
        if couple:
            query = {"user_id__in": AccessGuard.read_scope(db, user_id)}
        else:
            query = {"user_id": user_id}

        if filters.get("type"):
            query["type"] = filters["type"]
        if filters.get("category_id"):
            query["category_id"] = filters["category_id"]
        if filters.get("start_date"):
            query["date__gte"] = filters["start_date"]
        if filters.get("end_date"):
            query["date__lte"] = filters["end_date"]

        rows = db.select(LEDGER_TABLE, filters=query, order="date", desc=True)
        return CategoryService.attach_names(db, rows)

    @staticmethod
    def update(db: DataHandle, user_id: str, tx_id: str, data: dict, table: str = LEDGER_TABLE) -> dict:
        rows = db.update(table, {"id": tx_id, "user_id": user_id}, data)
        if not rows:
            raise NotFoundError("Transaction not found.")
        return CategoryService.attach_names(db, rows)[0]

    @staticmethod
    def delete(db: DataHandle, user_id: str, tx_id: str, table: str = LEDGER_TABLE) -> None:
        rows = db.delete(table, {"id": tx_id, "user_id": user_id})
        if not rows:
            raise NotFoundError("Transaction not found.")

    # ------------------------------------------------------------------
    @staticmethod
    def get_scheduled(db: DataHandle, user_id: str) -> list:
        rows = db.select(SCHEDULED_TABLE, filters={"user_id": user_id}, order="date")
        return CategoryService.attach_names(db, rows)

    @staticmethod
    def get_upcoming(db: DataHandle, user_id: str, today: date, days: int) -> list:
        """Still-scheduled entries dated within [today, today + days]."""
        rows = db.select(
            SCHEDULED_TABLE,
            filters={
                "user_id": user_id,
                "status": "scheduled",
                "date__gte": today.isoformat(),
                "date__lte": (today + timedelta(days=days)).isoformat(),
            },
            order="date",
        )
        return CategoryService.attach_names(db, rows)
