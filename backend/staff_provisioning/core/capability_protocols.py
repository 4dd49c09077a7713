"""Boundary Protocols — contracts between the provisioning handler and the backend.

Invariants:
    - The handler NEVER imports infrastructure — dependency arrows point inward only
    - All IO goes through these Protocol types
    - Implementations raise BackendAPIError on any failure; the handler maps it per stage

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no base class
    - One Protocol per capability (verify, profile store, identity admin): the
      caller token and the service key never share a client
"""

from typing import Protocol

from staff_provisioning.core.domain_types import (
    CallerIdentity, IdentityId, IdentityRecord,
)


class TokenVerifier(Protocol):
    """Resolve a bearer token to the caller's identity."""
    async def get_user(self, token: str) -> CallerIdentity: ...


class ProfileStore(Protocol):
    """Profile rows keyed by identity id."""
    async def get_profile(self, identity_id: IdentityId) -> dict | None: ...
    async def upsert_profile(self, row: dict) -> None: ...


class IdentityAdmin(Protocol):
    """Privileged identity operations."""
    async def create_user(
        self, email: str, password: str, metadata: dict,
    ) -> IdentityRecord: ...
    async def invite_user_by_email(
        self, email: str, metadata: dict, redirect_to: str | None = None,
    ) -> IdentityRecord: ...
