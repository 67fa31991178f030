"""
supabase_rest.py — HTTP-based database client using Supabase's PostgREST API.
Requests carry the caller's access token, so the project's row-level security
policies are evaluated for that user. The admin handle uses the service role key.
"""
import logging

import httpx

from config import SUPABASE_URL, SUPABASE_ANON_KEY, SUPABASE_SERVICE_ROLE_KEY, HTTP_TIMEOUT
from datastore import DataHandle, DataStore, split_filter
from errors import ConflictError, UpstreamError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"


def _format_value(value) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_params(filters: dict = None, any_of: list = None) -> list[tuple[str, str]]:
    """Translate a filter dict into PostgREST query parameters."""
    params = []
    for key, value in (filters or {}).items():
        column, op = split_filter(key)
        if op == "in":
            quoted = ",".join(f'"{_format_value(v)}"' for v in value)
            params.append((column, f"in.({quoted})"))
        else:
            params.append((column, f"{op}.{_format_value(value)}"))
    if any_of:
        clauses = ",".join(f"{column}.eq.{_format_value(value)}" for column, value in any_of)
        params.append(("or", f"({clauses})"))
    return params


def _raise_for_status(resp: httpx.Response):
    if resp.is_success:
        return
    try:
        body = resp.json()
    except ValueError:
        body = {}
    code = body.get("code") if isinstance(body, dict) else None
    message = body.get("message", resp.text) if isinstance(body, dict) else resp.text
    if code == UNIQUE_VIOLATION or resp.status_code == 409:
        raise ConflictError(message)
    raise UpstreamError(f"PostgREST {resp.status_code}: {message}")


class PostgrestHandle(DataHandle):
    def __init__(self, base_url: str, api_key: str, access_token: str, transport: httpx.BaseTransport = None):
        self.base_url = base_url
        self.api_key = api_key
        self.access_token = access_token
        self.transport = transport

    def _headers(self, prefer: str = "return=representation"):
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
            "Prefer": prefer,
        }

    def _request(self, method: str, table: str, params=None, json=None, prefer: str = "return=representation"):
        url = f"{self.base_url}/rest/v1/{table}"
        try:
            with httpx.Client(timeout=HTTP_TIMEOUT, transport=self.transport) as client:
                resp = client.request(method, url, params=params, json=json, headers=self._headers(prefer))
        except httpx.HTTPError as e:
            raise UpstreamError(f"PostgREST request failed: {e}") from e
        _raise_for_status(resp)
        if not resp.content:
            return []
        return resp.json()

    def select(self, table, filters=None, columns="*", order=None, desc=False, any_of=None):
        params = [("select", columns)] + build_params(filters, any_of)
        if order:
            params.append(("order", f"{order}.{'desc' if desc else 'asc'}"))
        return self._request("GET", table, params=params)

    def insert(self, table, data):
        result = self._request("POST", table, json=data)
        return result[0] if isinstance(result, list) and result else {}

    def upsert(self, table, data, on_conflict):
        params = [("on_conflict", ",".join(on_conflict))]
        result = self._request("POST", table, params=params, json=data,
                               prefer="resolution=merge-duplicates,return=representation")
        return result[0] if isinstance(result, list) and result else {}

    def update(self, table, filters, data):
        # PostgREST refuses unfiltered updates; so do we
        if not filters:
            raise ValueError("update() requires at least one filter")
        return self._request("PATCH", table, params=build_params(filters), json=data)

    def delete(self, table, filters):
        if not filters:
            raise ValueError("delete() requires at least one filter")
        return self._request("DELETE", table, params=build_params(filters))


class PostgrestStore(DataStore):
    def __init__(self, base_url: str = SUPABASE_URL, anon_key: str = SUPABASE_ANON_KEY,
                 service_key: str = SUPABASE_SERVICE_ROLE_KEY, transport: httpx.BaseTransport = None):
        if not base_url or not anon_key or not service_key:
            raise ValueError("SUPABASE_URL, SUPABASE_ANON_KEY and SUPABASE_SERVICE_ROLE_KEY must be set in environment variables")
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.service_key = service_key
        self.transport = transport

    def scoped(self, access_token):
        return PostgrestHandle(self.base_url, self.anon_key, access_token, self.transport)

    def admin(self):
        return PostgrestHandle(self.base_url, self.service_key, self.service_key, self.transport)
