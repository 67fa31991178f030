"""
report_service.py — Aggregations behind the dashboards and reports.
"""

from datastore import DataHandle
from services.access import AccessGuard
from services.category_service import UNKNOWN_CATEGORY, CategoryService


def summarize(transactions: list) -> dict:
    """Income/expense totals overall and per month (YYYY-MM, oldest first)."""
    months = {}
    income = expenses = 0.0
    for t in transactions:
        bucket = months.setdefault(t["date"][:7], {"month": t["date"][:7], "income": 0.0, "expense": 0.0})
        if t["type"] == "income":
            income += t["amount"]
            bucket["income"] += t["amount"]
        else:
            expenses += t["amount"]
            bucket["expense"] += t["amount"]

    monthly = []
    for key in sorted(months):
        m = months[key]
        monthly.append({
            "month": key,
            "income": round(m["income"], 2),
            "expense": round(m["expense"], 2),
            "balance": round(m["income"] - m["expense"], 2),
        })

    return {
        "total_income": round(income, 2),
        "total_expenses": round(expenses, 2),
        "balance": round(income - expenses, 2),
        "monthly": monthly,
    }


class ReportService:
    @staticmethod
    def expenses_by_category(db: DataHandle, user_id: str, start_date: str = None,
                             end_date: str = None, category: str = None) -> dict:
        query = {"user_id": user_id, "type": "expense"}
        if start_date:
            query["date__gte"] = start_date
        if end_date:
            query["date__lte"] = end_date

        rows = db.select("transactions", filters=query, columns="category_id,amount")
        CategoryService.attach_names(db, rows)

        totals = {}
        for t in rows:
            name = (t.get("categories") or {}).get("name") or UNKNOWN_CATEGORY
            if category and name != category:
                continue
            totals[name] = round(totals.get(name, 0) + t["amount"], 2)
        return totals

    @staticmethod
    def monthly_summary(db: DataHandle, user_id: str, couple: bool = False) -> dict:
        scope = AccessGuard.read_scope(db, user_id) if couple else AccessGuard.own(user_id)
        rows = db.select("transactions", filters={"user_id__in": scope}, columns="type,amount,date")
        return {"scope": scope, **summarize(rows)}
