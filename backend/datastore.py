"""
datastore.py — The scoped data-access handle.

Every read and write a request performs goes through a handle obtained from
the configured DataStore. Two implementations exist:

  * supabase_rest.PostgrestStore — PostgREST over HTTP, bound to the caller's
    bearer token so the store's row-level policies also apply.
  * sql_store.SqlStore — SQLAlchemy against DATABASE_URL.

Filters are plain dicts. A bare column name means equality; suffixes select
another operator:

    {"user_id": uid}                 user_id = uid
    {"user_id__in": [a, b]}          user_id IN (a, b)
    {"date__gte": "2024-01-01"}      date >= '2024-01-01'
    {"date__lte": "2024-01-31"}      date <= '2024-01-31'
    {"user_id__is": None}            user_id IS NULL
    {"status__neq": "cancelled"}     status <> 'cancelled'

`any_of` is an OR over equality pairs, e.g. [("user1_id", me), ("user2_id", me)].
"""

import logging

from config import DATA_BACKEND

logger = logging.getLogger(__name__)

OPERATORS = ("eq", "neq", "in", "gte", "lte", "is")


def split_filter(key: str) -> tuple[str, str]:
    """'date__gte' -> ('date', 'gte'); 'user_id' -> ('user_id', 'eq')."""
    column, sep, op = key.rpartition("__")
    if not sep:
        return key, "eq"
    if op not in OPERATORS:
        raise ValueError(f"Unsupported filter operator: {op}")
    return column, op


class DataHandle:
    """Operations every store backend provides."""

    def select(self, table: str, filters: dict = None, columns: str = "*",
               order: str = None, desc: bool = False, any_of: list = None) -> list[dict]:
        raise NotImplementedError

    def insert(self, table: str, data: dict) -> dict:
        raise NotImplementedError

    def upsert(self, table: str, data: dict, on_conflict: list[str]) -> dict:
        raise NotImplementedError

    def update(self, table: str, filters: dict, data: dict) -> list[dict]:
        """Update matching rows and return them. An empty list means nothing matched."""
        raise NotImplementedError

    def delete(self, table: str, filters: dict) -> list[dict]:
        """Delete matching rows and return them."""
        raise NotImplementedError


class DataStore:
    def scoped(self, access_token: str) -> DataHandle:
        """Handle bound to one caller's credentials."""
        raise NotImplementedError

    def admin(self) -> DataHandle:
        """Privileged handle that bypasses row-level policies."""
        raise NotImplementedError


# Global store instance, built on first use
_store: DataStore = None


def build_store(backend: str = DATA_BACKEND) -> DataStore:
    if backend == "supabase":
        from supabase_rest import PostgrestStore
        return PostgrestStore()
    if backend == "sql":
        from database import SessionLocal, init_db
        from sql_store import SqlStore
        init_db()
        return SqlStore(SessionLocal)
    raise ValueError(f"Unknown DATA_BACKEND: {backend}")


def get_store() -> DataStore:
    """FastAPI dependency — the process-wide DataStore."""
    global _store

    if _store is None:
        _store = build_store()
        logger.info(f"Data store ready ({DATA_BACKEND}).")

    return _store
