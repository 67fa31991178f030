# supabase_client.py — Supabase Auth helpers used by SupabaseIdentityProvider

from supabase import create_client, Client
from config import SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, SUPABASE_ANON_KEY

# Global Supabase client instances
_supabase_admin: Client = None
_supabase_client: Client = None


def get_supabase_admin() -> Client:
    """Service-role client. Bypasses row-level security; used for admin auth calls and
    the email lookup rpc."""
    global _supabase_admin

    if _supabase_admin is None:
        if not SUPABASE_URL or not SUPABASE_SERVICE_ROLE_KEY:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in environment variables")

        _supabase_admin = create_client(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)

    return _supabase_admin


def get_supabase_client() -> Client:
    """Anon-key client for sign-in, sign-up and token verification."""
    global _supabase_client

    if _supabase_client is None:
        if not SUPABASE_URL or not SUPABASE_ANON_KEY:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be set in environment variables")

        _supabase_client = create_client(SUPABASE_URL, SUPABASE_ANON_KEY)

    return _supabase_client


# Authentication helpers
def sign_up_user(email: str, password: str, metadata: dict = None):
    """Register a new user with Supabase Auth."""
    supabase = get_supabase_client()
    return supabase.auth.sign_up({
        "email": email,
        "password": password,
        "options": {
            "data": metadata or {}
        }
    })


def sign_in_user(email: str, password: str):
    """Sign in a user with Supabase Auth."""
    supabase = get_supabase_client()
    return supabase.auth.sign_in_with_password({
        "email": email,
        "password": password
    })


def get_user_from_token(access_token: str):
    """Get user information from JWT token."""
    supabase = get_supabase_client()
    return supabase.auth.get_user(access_token)


def update_user_password(user_id: str, new_password: str):
    """Set a new password for a user through the admin API."""
    supabase = get_supabase_admin()
    return supabase.auth.admin.update_user_by_id(user_id, {"password": new_password})


def get_user_id_by_email(email: str) -> str | None:
    """Look up an auth user id through the `get_user_id_by_email` database function."""
    supabase = get_supabase_admin()
    response = supabase.rpc("get_user_id_by_email", {"user_email": email}).execute()
    return response.data or None
