import logging
from datetime import date
from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response

from auth import CurrentUser, get_current_user
from clock import get_today
from config import UPCOMING_WINDOW_DAYS
from errors import UpstreamError
from schemas import CalendarDate, ScheduledTransactionUpdate, TransactionIn
from services.transaction_service import SCHEDULED_TABLE, TransactionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/transactions", tags=["Transactions"])
scheduled_router = APIRouter(prefix="/api/scheduled-transactions", tags=["Scheduled Transactions"])


@router.post("", status_code=201)
async def create_transaction(
    tx_data: TransactionIn,
    user: CurrentUser = Depends(get_current_user),
    today: date = Depends(get_today),
):
    """Store a transaction; future-dated ones land in the scheduled ledger."""
    try:
        _, row = TransactionService.create(user.db, user.id, tx_data.model_dump(mode="json"), today)
        return row
    except UpstreamError as e:
        logger.error(f"Error adding transaction: {e}")
        raise UpstreamError("Could not add the transaction.") from e


@router.get("")
async def list_transactions(
    type: Optional[Literal["income", "expense"]] = None,
    category_id: Optional[UUID] = None,
    start_date: Optional[CalendarDate] = Query(None, alias="startDate"),
    end_date: Optional[CalendarDate] = Query(None, alias="endDate"),
    scope: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
):
    filters = {
        "type": type,
        "category_id": str(category_id) if category_id else None,
        "start_date": start_date,
        "end_date": end_date,
    }
    try:
        return TransactionService.get_all(user.db, user.id, filters, couple=(scope == "couple"))
    except UpstreamError as e:
        logger.error(f"Error fetching transactions: {e}")
        raise UpstreamError("Could not fetch the transactions.") from e


@router.put("/{tx_id}")
async def update_transaction(tx_id: UUID, tx_data: TransactionIn, user: CurrentUser = Depends(get_current_user)):
    try:
        result = TransactionService.update(user.db, user.id, str(tx_id), tx_data.model_dump(mode="json"))
        return {"message": "Transaction updated successfully!", "transaction": result}
    except UpstreamError as e:
        logger.error(f"Error updating transaction: {e}")
        raise UpstreamError("Could not update the transaction.") from e


@router.delete("/{tx_id}", status_code=204)
async def delete_transaction(tx_id: UUID, user: CurrentUser = Depends(get_current_user)):
    try:
        TransactionService.delete(user.db, user.id, str(tx_id))
        return Response(status_code=204)
    except UpstreamError as e:
        logger.error(f"Error deleting transaction: {e}")
        raise UpstreamError("Could not delete the transaction.") from e


# ── Scheduled transactions ────────────────────────────────────────
@scheduled_router.get("")
async def list_scheduled(user: CurrentUser = Depends(get_current_user)):
    try:
        return TransactionService.get_scheduled(user.db, user.id)
    except UpstreamError as e:
        logger.error(f"Error fetching scheduled transactions: {e}")
        raise UpstreamError("Could not fetch the scheduled transactions.") from e


@scheduled_router.get("/upcoming")
async def list_upcoming(
    days: int = Query(UPCOMING_WINDOW_DAYS, ge=0, le=366),
    user: CurrentUser = Depends(get_current_user),
    today: date = Depends(get_today),
):
    """Scheduled entries due between today and `days` from now."""
    try:
        return TransactionService.get_upcoming(user.db, user.id, today, days)
    except UpstreamError as e:
        logger.error(f"Error fetching upcoming transactions: {e}")
        raise UpstreamError("Could not fetch the upcoming transactions.") from e


@scheduled_router.put("/{tx_id}")
async def update_scheduled(tx_id: UUID, tx_data: ScheduledTransactionUpdate,
                           user: CurrentUser = Depends(get_current_user)):
    try:
        result = TransactionService.update(
            user.db, user.id, str(tx_id), tx_data.model_dump(mode="json"), table=SCHEDULED_TABLE
        )
        return {"message": "Scheduled transaction updated successfully!", "transaction": result}
    except UpstreamError as e:
        logger.error(f"Error updating scheduled transaction: {e}")
        raise UpstreamError("Could not update the scheduled transaction.") from e


@scheduled_router.delete("/{tx_id}", status_code=204)
async def delete_scheduled(tx_id: UUID, user: CurrentUser = Depends(get_current_user)):
    try:
        TransactionService.delete(user.db, user.id, str(tx_id), table=SCHEDULED_TABLE)
        return Response(status_code=204)
    except UpstreamError as e:
        logger.error(f"Error deleting scheduled transaction: {e}")
        raise UpstreamError("Could not delete the scheduled transaction.") from e
