import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Response

from auth import CurrentUser, get_current_user
from errors import UpstreamError
from schemas import CalendarDate, BudgetIn
from services.budget_service import BudgetService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/budgets", tags=["Budgets"])


@router.post("", status_code=201)
async def create_budget(budget_data: BudgetIn, user: CurrentUser = Depends(get_current_user)):
    try:
        budget = BudgetService.create(user.db, user.id, budget_data.model_dump(mode="json"))
        return {"message": "Budget created successfully!", "budget": budget}
    except UpstreamError as e:
        logger.error(f"Error creating budget: {e}")
        raise UpstreamError("Could not create the budget.") from e


@router.get("")
async def list_budgets(
    category_id: Optional[UUID] = None,
    start_date: Optional[CalendarDate] = None,
    end_date: Optional[CalendarDate] = None,
    user: CurrentUser = Depends(get_current_user),
):
    """Budgets with their spend recomputed from the ledger."""
    filters = {
        "category_id": str(category_id) if category_id else None,
        "start_date": start_date,
        "end_date": end_date,
    }
    try:
        return BudgetService.get_all(user.db, user.id, filters)
    except UpstreamError as e:
        logger.error(f"Error fetching budgets: {e}")
        raise UpstreamError("Could not fetch the budgets.") from e


@router.get("/{budget_id}")
async def get_budget(budget_id: UUID, user: CurrentUser = Depends(get_current_user)):
    try:
        return BudgetService.get(user.db, user.id, str(budget_id))
    except UpstreamError as e:
        logger.error(f"Error fetching budget: {e}")
        raise UpstreamError("Could not fetch the budget.") from e


@router.put("/{budget_id}")
async def update_budget(budget_id: UUID, budget_data: BudgetIn, user: CurrentUser = Depends(get_current_user)):
    try:
        budget = BudgetService.update(user.db, user.id, str(budget_id), budget_data.model_dump(mode="json"))
        return {"message": "Budget updated successfully!", "budget": budget}
    except UpstreamError as e:
        logger.error(f"Error updating budget: {e}")
        raise UpstreamError("Could not update the budget.") from e


@router.delete("/{budget_id}", status_code=204)
async def delete_budget(budget_id: UUID, user: CurrentUser = Depends(get_current_user)):
    try:
        BudgetService.delete(user.db, user.id, str(budget_id))
        return Response(status_code=204)
    except UpstreamError as e:
        logger.error(f"Error deleting budget: {e}")
        raise UpstreamError("Could not delete the budget.") from e
