"""
notification_service.py — Once-per-session alerts.
Budget-exceeded and upcoming-scheduled-transaction alerts are delivered at
most once per login session. Delivery marks live only in memory and are gone
after a restart; they are never written to the store.
"""

import threading
import time
from datetime import date

from config import JWT_EXPIRY_HOURS
from datastore import DataHandle
from services.budget_service import BudgetService
from services.category_service import UNKNOWN_CATEGORY, CategoryService
from services.transaction_service import TransactionService


class SessionNotifier:
    """In-memory map of (session, kind, entity) keys already delivered.

    Marks expire after `ttl_seconds`, one access-token lifetime by default, so
    the map only holds sessions seen recently. A session kept alive past that
    by token refreshes may see an alert once more.
    """

    def __init__(self, ttl_seconds: float = JWT_EXPIRY_HOURS * 3600, clock=time.time):
        # key → time it was marked
        self._delivered: dict[tuple[str, str, str], float] = {}
        self._lock = threading.Lock()
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    # ------------------------------------------------------------------
    def _evict_expired(self, now: float):
        """Drop marks older than the TTL. Caller holds the lock."""
        stale = [k for k, marked_at in self._delivered.items() if now - marked_at > self.ttl_seconds]
        for k in stale:
            del self._delivered[k]

    # ------------------------------------------------------------------
    def has_delivered(self, session_key: str, kind: str, entity_id: str) -> bool:
        with self._lock:
            self._evict_expired(self._clock())
            return (session_key, kind, entity_id) in self._delivered

    # ------------------------------------------------------------------
    def mark(self, session_key: str, kind: str, entity_id: str):
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            self._delivered[(session_key, kind, entity_id)] = now

    # ------------------------------------------------------------------
    def first_time(self, session_key: str, kind: str, entity_id: str) -> bool:
        """Mark the key; True only if it was not marked before."""
        key = (session_key, kind, entity_id)
        with self._lock:
            now = self._clock()
            self._evict_expired(now)
            if key in self._delivered:
                return False
            self._delivered[key] = now
            return True

    # ------------------------------------------------------------------
    def size(self) -> int:
        with self._lock:
            return len(self._delivered)

    # ------------------------------------------------------------------
    def clear(self):
        with self._lock:
            self._delivered.clear()


session_notifier = SessionNotifier()


def get_session_notifier() -> SessionNotifier:
    """FastAPI dependency — the process-wide notifier."""
    return session_notifier


class NotificationService:
    @staticmethod
    def collect(db: DataHandle, user_id: str, session_key: str, today: date,
                upcoming_days: int, notifier: SessionNotifier) -> list:
        """Alerts not yet delivered in this session; returned ones count as delivered."""
        alerts = []

        budgets = BudgetService.get_all(db, user_id)
        CategoryService.attach_names(db, budgets)
        for b in budgets:
            if b["exceeded"] and notifier.first_time(session_key, "budget_exceeded", b["id"]):
                name = (b.get("categories") or {}).get("name") or UNKNOWN_CATEGORY
                alerts.append({
                    "type": "budget_exceeded",
                    "budget_id": b["id"],
                    "message": f"{name} budget exceeded! Spent {b['current_spend']:.2f} of {b['budget_amount']:.2f}",
                    "current_spend": b["current_spend"],
                    "budget_amount": b["budget_amount"],
                })

        if not notifier.has_delivered(session_key, "scheduled_upcoming", user_id):
            upcoming = TransactionService.get_upcoming(db, user_id, today, upcoming_days)
            # Only counts as delivered once there was something to show
            if upcoming:
                notifier.mark(session_key, "scheduled_upcoming", user_id)
                alerts.append({
                    "type": "scheduled_upcoming",
                    "message": f"{len(upcoming)} scheduled transaction(s) due in the next {upcoming_days} days",
                    "transactions": upcoming,
                })

        return alerts
