"""
identity.py — Identity Provider adapters.

SupabaseIdentityProvider asks Supabase Auth to validate every token.
LocalIdentityProvider verifies the same HS256 token format offline with the
project's JWT secret and keeps accounts in the local `users` table.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import jwt, JWTError

from config import (
    AUTH_BACKEND, SUPABASE_JWT_SECRET, JWT_ALGORITHM, JWT_AUDIENCE, JWT_EXPIRY_HOURS,
)
from errors import AuthenticationError, ConflictError, NotFoundError, UpstreamError

logger = logging.getLogger(__name__)


@dataclass
class Identity:
    id: str
    email: str | None
    session_key: str


def session_key_for(token: str, user_id: str) -> str:
    """The token's session_id claim, or the user id for tokens without one."""
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return str(user_id)
    return str(claims.get("session_id") or user_id)


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt."""
    # Ensure it doesn't exceed 72 bytes to prevent bcrypt ValueError
    pw_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(pw_bytes, bcrypt.gensalt())
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain-text password against a bcrypt hash."""
    try:
        pw_bytes = plain_password.encode('utf-8')[:72]
        return bcrypt.checkpw(pw_bytes, hashed_password.encode('utf-8'))
    except ValueError as e:
        logger.warning(f"Bcrypt verification error: {e}")
        return False


class IdentityProvider:
    def verify(self, token: str) -> Identity | None:
        raise NotImplementedError

    def find_user_id_by_email(self, email: str) -> str | None:
        raise NotImplementedError

    def update_password(self, user_id: str, new_password: str) -> None:
        raise NotImplementedError

    def sign_in(self, email: str, password: str) -> dict:
        raise NotImplementedError

    def sign_up(self, email: str, password: str) -> dict:
        raise NotImplementedError


class SupabaseIdentityProvider(IdentityProvider):
    def verify(self, token):
        from supabase_client import get_user_from_token

        try:
            response = get_user_from_token(token)
        except Exception as e:
            # gotrue raises for expired, malformed and revoked tokens alike
            logger.info(f"Token rejected by Supabase Auth: {e}")
            return None
        user = getattr(response, "user", None)
        if user is None:
            return None
        return Identity(id=str(user.id), email=user.email, session_key=session_key_for(token, user.id))

    def find_user_id_by_email(self, email):
        from supabase_client import get_user_id_by_email

        try:
            return get_user_id_by_email(email)
        except Exception as e:
            raise UpstreamError(f"User lookup failed: {e}") from e

    def update_password(self, user_id, new_password):
        from supabase_client import update_user_password

        try:
            update_user_password(user_id, new_password)
        except Exception as e:
            raise UpstreamError(f"Password update failed: {e}") from e

    def sign_in(self, email, password):
        from supabase_client import sign_in_user

        try:
            response = sign_in_user(email, password)
        except Exception as e:
            logger.info(f"Supabase sign-in failed for {email}: {e}")
            raise AuthenticationError("Invalid email or password.") from e
        return {
            "access_token": response.session.access_token,
            "token_type": "bearer",
            "user": {"id": str(response.user.id), "email": response.user.email},
        }

    def sign_up(self, email, password):
        from supabase_client import sign_up_user

        try:
            response = sign_up_user(email, password)
        except Exception as e:
            raise UpstreamError(f"Sign-up failed: {e}") from e
        session = response.session
        return {
            "access_token": session.access_token if session else None,
            "token_type": "bearer",
            "user": {"id": str(response.user.id), "email": response.user.email},
        }


class LocalIdentityProvider(IdentityProvider):
    def __init__(self, session_factory, secret: str = SUPABASE_JWT_SECRET):
        self.session_factory = session_factory
        self.secret = secret

    def create_token(self, user_id: str, email: str, session_id: str = None) -> str:
        """Issue a token shaped like a Supabase access token."""
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "email": email,
            "aud": JWT_AUDIENCE,
            "role": "authenticated",
            "session_id": session_id or str(uuid.uuid4()),
            "iat": now,
            "exp": now + timedelta(hours=JWT_EXPIRY_HOURS),
        }
        return jwt.encode(claims, self.secret, algorithm=JWT_ALGORITHM)

    def verify(self, token):
        try:
            payload = jwt.decode(token, self.secret, algorithms=[JWT_ALGORITHM], audience=JWT_AUDIENCE)
        except JWTError:
            return None
        user_id = payload.get("sub")
        if not user_id:
            return None
        return Identity(
            id=str(user_id),
            email=payload.get("email"),
            session_key=str(payload.get("session_id") or user_id),
        )

    def _find_user(self, session, email: str):
        from models.user import User
        return session.query(User).filter(User.email == email.strip().lower()).first()

    def find_user_id_by_email(self, email):
        with self.session_factory() as session:
            user = self._find_user(session, email)
            return user.id if user else None

    def update_password(self, user_id, new_password):
        from models.user import User

        with self.session_factory() as session:
            user = session.query(User).filter(User.id == user_id).first()
            if user is None:
                raise NotFoundError("User not found.")
            user.hashed_password = hash_password(new_password)
            session.commit()

    def create_user(self, email: str, password: str, user_id: str = None) -> str:
        from models.user import User

        with self.session_factory() as session:
            if self._find_user(session, email):
                raise ConflictError("A user with this email already exists.")
            user = User(email=email.strip().lower(), hashed_password=hash_password(password))
            if user_id:
                user.id = user_id
            session.add(user)
            session.commit()
            return user.id

    def sign_in(self, email, password):
        with self.session_factory() as session:
            user = self._find_user(session, email)
            if user is None or not verify_password(password, user.hashed_password):
                raise AuthenticationError("Invalid email or password.")
            user_id, user_email = user.id, user.email
        return {
            "access_token": self.create_token(user_id, user_email),
            "token_type": "bearer",
            "user": {"id": user_id, "email": user_email},
        }

    def sign_up(self, email, password):
        user_id = self.create_user(email, password)
        return {
            "access_token": self.create_token(user_id, email.strip().lower()),
            "token_type": "bearer",
            "user": {"id": user_id, "email": email.strip().lower()},
        }


# Global provider instance, built on first use
_identity_provider: IdentityProvider = None


def build_identity_provider(backend: str = AUTH_BACKEND) -> IdentityProvider:
    if backend == "supabase":
        return SupabaseIdentityProvider()
    if backend == "local":
        from database import SessionLocal, init_db
        init_db()
        return LocalIdentityProvider(SessionLocal)
    raise ValueError(f"Unknown AUTH_BACKEND: {backend}")


def get_identity_provider() -> IdentityProvider:
    """FastAPI dependency — the process-wide Identity Provider."""
    global _identity_provider

    if _identity_provider is None:
        _identity_provider = build_identity_provider()

    return _identity_provider
