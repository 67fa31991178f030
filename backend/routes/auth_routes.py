# ---------- routes/auth_routes.py ----------
"""
Auth routes. Credentials are checked by the configured Identity Provider
(Supabase Auth, or the local users table in development).
"""
import logging

from fastapi import APIRouter, Depends

from auth import CurrentUser, get_current_user
from errors import UpstreamError
from identity import IdentityProvider, get_identity_provider
from schemas import Credentials, PasswordReset

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", status_code=201)
async def register(body: Credentials, identity: IdentityProvider = Depends(get_identity_provider)):
    """Create an account and return its first access token."""
    return identity.sign_up(str(body.email), body.password)


@router.post("/login")
async def login(body: Credentials, identity: IdentityProvider = Depends(get_identity_provider)):
    return identity.sign_in(str(body.email), body.password)


@router.post("/reset-password")
async def reset_password(
    body: PasswordReset,
    user: CurrentUser = Depends(get_current_user),
    identity: IdentityProvider = Depends(get_identity_provider),
):
    """Set a new password for the signed-in user."""
    try:
        identity.update_password(user.id, body.new_password)
    except UpstreamError as e:
        logger.error(f"Error resetting password: {e}")
        raise UpstreamError("Could not reset the password.") from e
    return {"message": "Password reset successfully!"}
