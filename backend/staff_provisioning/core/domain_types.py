"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - IdentityId wraps the backend's opaque user id — never a bare str in domain logic
    - StaffRole.STAFF is the only role strict mode ever provisions
    - CallerIdentity and IdentityRecord are immutable once resolved

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from dataclasses import dataclass
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

IdentityId = NewType("IdentityId", str)


# ─── Enums ───────────────────────────────────────────────────────

class StaffRole(str, Enum):
    """Roles with meaning to this service. Permissive mode accepts any string."""
    STAFF = "staff"
    ADMIN = "admin"


class ProvisioningMode(str, Enum):
    """How the identity record is created."""
    DIRECT = "direct"    # create with password, email pre-confirmed
    INVITE = "invite"    # invitation email, no password


class ProvisioningStage(str, Enum):
    """Handler stages — used as the `stage` log/error context field."""
    VALIDATE = "validate"
    AUTHENTICATE = "authenticate"
    AUTHORIZE = "authorize"
    CREATE_IDENTITY = "create_identity"
    UPSERT_PROFILE = "upsert_profile"


# ─── Value Objects ───────────────────────────────────────────────

@dataclass(frozen=True)
class CallerIdentity:
    """Caller resolved from a bearer token."""
    id: IdentityId
    email: str | None = None


@dataclass(frozen=True)
class IdentityRecord:
    """Identity created by the identity service."""
    id: IdentityId
    email: str | None = None
