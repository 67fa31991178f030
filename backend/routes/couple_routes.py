import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response

from auth import CurrentUser, get_current_user
from datastore import DataStore, get_store
from errors import UpstreamError
from identity import IdentityProvider, get_identity_provider
from schemas import CoupleRequest
from services.couple_service import CoupleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/couple-relationships", tags=["Couple"])
dashboard_router = APIRouter(prefix="/api/couple-dashboard", tags=["Couple"])


@router.post("/request", status_code=201)
async def request_pairing(
    body: CoupleRequest,
    user: CurrentUser = Depends(get_current_user),
    store: DataStore = Depends(get_store),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    """Send a pairing request to the account registered under partner_email."""
    try:
        rel = CoupleService.request(user.db, store.admin(), identity, user.id, str(body.partner_email))
        return {"message": "Connection request sent successfully!", "relationship": rel}
    except UpstreamError as e:
        logger.error(f"Error sending connection request: {e}")
        raise UpstreamError("Could not send the connection request.") from e


@router.put("/{relationship_id}/accept")
async def accept_pairing(relationship_id: UUID, user: CurrentUser = Depends(get_current_user)):
    try:
        rel = CoupleService.accept(user.db, user.id, str(relationship_id))
        return {"message": "Request accepted successfully!", "relationship": rel}
    except UpstreamError as e:
        logger.error(f"Error accepting request: {e}")
        raise UpstreamError("Could not accept the request.") from e


@router.put("/{relationship_id}/reject")
async def reject_pairing(relationship_id: UUID, user: CurrentUser = Depends(get_current_user)):
    return CoupleService.reject(user.db, user.id, str(relationship_id))


@router.get("")
async def list_relationships(user: CurrentUser = Depends(get_current_user)):
    try:
        return CoupleService.get_all(user.db, user.id)
    except UpstreamError as e:
        logger.error(f"Error fetching couple relationships: {e}")
        raise UpstreamError("Could not fetch the couple relationships.") from e


@router.delete("/{relationship_id}", status_code=204)
async def delete_relationship(relationship_id: UUID, user: CurrentUser = Depends(get_current_user)):
    try:
        CoupleService.delete(user.db, user.id, str(relationship_id))
        return Response(status_code=204)
    except UpstreamError as e:
        logger.error(f"Error deleting couple relationship: {e}")
        raise UpstreamError("Could not delete the couple relationship.") from e


@dashboard_router.get("")
async def couple_dashboard(user: CurrentUser = Depends(get_current_user)):
    """Transactions and goals of the caller and, once accepted, their partner."""
    try:
        return CoupleService.dashboard(user.db, user.id)
    except UpstreamError as e:
        logger.error(f"Error building couple dashboard: {e}")
        raise UpstreamError("Could not fetch the couple's data.") from e
