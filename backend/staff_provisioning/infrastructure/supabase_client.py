"""Supabase Client — GoTrue (auth) and PostgREST (records) calls over httpx with error mapping.

Invariants:
    - The caller's token is only ever sent with the anon key (token verification)
    - The service role key is only ever sent for profile reads/writes and identity admin calls
    - Every failure (transport, timeout, non-2xx, malformed payload) raised as BackendAPIError
    - No retries: one request per operation, failures are terminal for the invocation
    - Tokens, keys and passwords are never logged

Design Decisions:
    - Plain httpx over a platform SDK: four REST calls, one shared AsyncClient
      opened in the app lifespan (ADR: connection pooling across requests)
    - Three capability classes over one shared SupabaseClient: each satisfies one
      Protocol in core/capability_protocols.py, so the handler sees only what it needs
    - Upstream error message extracted verbatim (msg / message / error_description / error)
      because it is surfaced to the caller as UpstreamError
"""

import logging
from dataclasses import dataclass

import httpx

from staff_provisioning.config import BackendConfig
from staff_provisioning.core.domain_types import (
    CallerIdentity, IdentityId, IdentityRecord,
)
from staff_provisioning.core.errors import BackendAPIError

logger = logging.getLogger(__name__)

PROFILES_PATH = "/rest/v1/profiles"
PROFILE_AUTH_COLUMNS = "is_admin,role"

# GoTrue and PostgREST disagree on the error field name
_ERROR_MESSAGE_KEYS = ("msg", "message", "error_description", "error")


def extract_error_message(response: httpx.Response) -> str:
    """Best-effort human message from a GoTrue/PostgREST error response."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        for key in _ERROR_MESSAGE_KEYS:
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    text = response.text.strip()
    return text or f"HTTP {response.status_code}"


def _identity_from_payload(payload: object, operation: str) -> IdentityRecord:
    """GoTrue returns either the user object or {"user": {...}}."""
    user = payload.get("user") if isinstance(payload, dict) else None
    if user is None:
        user = payload
    if not isinstance(user, dict) or not user.get("id"):
        raise BackendAPIError("Backend returned no user", operation)
    return IdentityRecord(id=IdentityId(str(user["id"])), email=user.get("email"))


class SupabaseClient:
    """Shared request plumbing: URL building, auth headers, error mapping."""

    def __init__(self, http: httpx.AsyncClient, config: BackendConfig):
        self.http = http
        self.config = config

    def headers(self, api_key: str, bearer: str | None = None) -> dict[str, str]:
        return {
            "apikey": api_key,
            "Authorization": f"Bearer {bearer or api_key}",
        }

    async def request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        headers: dict[str, str],
        params: dict[str, str] | None = None,
        json: dict | None = None,
    ) -> httpx.Response:
        """Send one request. Raises BackendAPIError on any failure."""
        try:
            response = await self.http.request(
                method,
                f"{self.config.url}{path}",
                headers=headers,
                params=params,
                json=json,
                timeout=self.config.timeout_seconds,
            )
        except httpx.TimeoutException:
            logger.warning(
                f"Backend {operation} timed out",
                extra={"operation": operation},
            )
            raise BackendAPIError("Backend request timed out", operation)
        except httpx.HTTPError as e:
            logger.warning(
                f"Backend {operation} transport error: {e}",
                extra={"operation": operation},
            )
            raise BackendAPIError(f"Backend request failed: {e}", operation)

        if response.is_error:
            message = extract_error_message(response)
            logger.warning(
                f"Backend {operation} rejected: {message}",
                extra={"operation": operation, "status_code": response.status_code},
            )
            raise BackendAPIError(message, operation, response.status_code)

        logger.debug(
            f"Backend {operation} succeeded",
            extra={"operation": operation, "status_code": response.status_code},
        )
        return response

    @staticmethod
    def json_body(response: httpx.Response, operation: str) -> object:
        try:
            return response.json()
        except ValueError:
            raise BackendAPIError("Backend returned invalid JSON", operation, response.status_code)


class SupabaseTokenVerifier:
    """TokenVerifier bound to GoTrue GET /auth/v1/user (anon key + caller token)."""

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def get_user(self, token: str) -> CallerIdentity:
        operation = "get_user"
        response = await self.client.request(
            "GET", "/auth/v1/user",
            operation=operation,
            headers=self.client.headers(self.client.config.anon_key, bearer=token),
        )
        identity = _identity_from_payload(
            self.client.json_body(response, operation), operation,
        )
        return CallerIdentity(id=identity.id, email=identity.email)


class SupabaseProfileStore:
    """ProfileStore bound to PostgREST /rest/v1/profiles (service role key)."""

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def get_profile(self, identity_id: IdentityId) -> dict | None:
        operation = "get_profile"
        response = await self.client.request(
            "GET", PROFILES_PATH,
            operation=operation,
            headers=self.client.headers(self.client.config.service_role_key),
            params={"select": PROFILE_AUTH_COLUMNS, "id": f"eq.{identity_id}"},
        )
        rows = self.client.json_body(response, operation)
        if not isinstance(rows, list):
            raise BackendAPIError("Unexpected profile payload", operation)
        if len(rows) > 1:
            raise BackendAPIError(
                f"Expected at most one profile, got {len(rows)}", operation,
            )
        return rows[0] if rows else None

    async def upsert_profile(self, row: dict) -> None:
        headers = self.client.headers(self.client.config.service_role_key)
        headers["Prefer"] = "resolution=merge-duplicates,return=minimal"
        await self.client.request(
            "POST", PROFILES_PATH,
            operation="upsert_profile",
            headers=headers,
            params={"on_conflict": "id"},
            json=row,
        )


class SupabaseIdentityAdmin:
    """IdentityAdmin bound to GoTrue admin endpoints (service role key)."""

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def create_user(
        self, email: str, password: str, metadata: dict,
    ) -> IdentityRecord:
        operation = "create_user"
        response = await self.client.request(
            "POST", "/auth/v1/admin/users",
            operation=operation,
            headers=self.client.headers(self.client.config.service_role_key),
            json={
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": metadata,
            },
        )
        return _identity_from_payload(
            self.client.json_body(response, operation), operation,
        )

    async def invite_user_by_email(
        self, email: str, metadata: dict, redirect_to: str | None = None,
    ) -> IdentityRecord:
        operation = "invite_user"
        response = await self.client.request(
            "POST", "/auth/v1/invite",
            operation=operation,
            headers=self.client.headers(self.client.config.service_role_key),
            params={"redirect_to": redirect_to} if redirect_to else None,
            json={"email": email, "data": metadata},
        )
        return _identity_from_payload(
            self.client.json_body(response, operation), operation,
        )


@dataclass(frozen=True)
class SupabaseBackend:
    """The three capabilities bound to one shared client."""
    token_verifier: SupabaseTokenVerifier
    profile_store: SupabaseProfileStore
    identity_admin: SupabaseIdentityAdmin

    @classmethod
    def from_config(
        cls, http: httpx.AsyncClient, config: BackendConfig,
    ) -> "SupabaseBackend":
        client = SupabaseClient(http, config)
        return cls(
            token_verifier=SupabaseTokenVerifier(client),
            profile_store=SupabaseProfileStore(client),
            identity_admin=SupabaseIdentityAdmin(client),
        )
