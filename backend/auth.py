from dataclasses import dataclass

from fastapi import Depends, Request

from datastore import DataHandle, DataStore, get_store
from errors import AuthenticationError
from identity import IdentityProvider, get_identity_provider


@dataclass
class CurrentUser:
    id: str
    email: str | None
    token: str
    session_key: str
    db: DataHandle  # scoped data-access handle for this request


def extract_bearer_token(auth_header: str | None) -> str | None:
    """Return the token from 'Bearer <token>', or None if the header is malformed."""
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


async def get_current_user(
    request: Request,
    identity: IdentityProvider = Depends(get_identity_provider),
    store: DataStore = Depends(get_store),
) -> CurrentUser:
    """
    FastAPI dependency — extracts the Bearer token from the Authorization
    header, verifies it with the Identity Provider, and returns the caller
    together with a data handle scoped to their credentials.
    Raises 401 if the token is missing or invalid.
    """
    token = extract_bearer_token(request.headers.get("Authorization"))
    if token is None:
        raise AuthenticationError("Missing or malformed authorization token.")

    user = identity.verify(token)
    if user is None:
        raise AuthenticationError("Invalid or expired token.")

    return CurrentUser(
        id=user.id,
        email=user.email,
        token=token,
        session_key=user.session_key,
        db=store.scoped(token),
    )
