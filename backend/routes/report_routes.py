import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from auth import CurrentUser, get_current_user
from errors import UpstreamError
from schemas import CalendarDate
from services.report_service import ReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.get("/expenses-by-category")
async def expenses_by_category(
    start_date: Optional[CalendarDate] = Query(None, alias="startDate"),
    end_date: Optional[CalendarDate] = Query(None, alias="endDate"),
    category: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
):
    """Total expense per category name."""
    try:
        return ReportService.expenses_by_category(user.db, user.id, start_date, end_date, category)
    except UpstreamError as e:
        logger.error(f"Error fetching expenses by category: {e}")
        raise UpstreamError("Could not fetch expenses by category.") from e


@router.get("/monthly-summary")
async def monthly_summary(scope: Optional[str] = None, user: CurrentUser = Depends(get_current_user)):
    try:
        return ReportService.monthly_summary(user.db, user.id, couple=(scope == "couple"))
    except UpstreamError as e:
        logger.error(f"Error building monthly summary: {e}")
        raise UpstreamError("Could not build the monthly summary.") from e
