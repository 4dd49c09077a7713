"""Provisioning Policy — turns a validated request into a provisioning plan.

Invariants:
    - PURE: no IO, no async
    - Strict mode: role forced "staff", is_admin forced False, always DIRECT
    - Permissive mode: caller's role/is_admin/send_invite honored;
      DIRECT without a password is rejected before any backend call
    - The plan carries the supplied password untouched; the password policy
      (core/passwords.py) runs only after the caller is authorized

Design Decisions:
    - One plan builder parameterized by strict_role_mode instead of two handler
      variants (ADR: remove duplication, keep both behaviors)
"""

from dataclasses import dataclass

from staff_provisioning.core.domain_types import (
    ProvisioningMode, ProvisioningStage, StaffRole,
)
from staff_provisioning.core.errors import BadRequestError, ErrorContext


@dataclass(frozen=True)
class ProvisioningPlan:
    """What to provision, after mode policy is applied."""
    email: str
    full_name: str
    role: str
    is_admin: bool
    mode: ProvisioningMode
    supplied_password: str | None = None

    @property
    def invited(self) -> bool:
        return self.mode == ProvisioningMode.INVITE

    def metadata(self) -> dict:
        """user_metadata sent to the identity service."""
        return {
            "full_name": self.full_name,
            "role": self.role,
            "is_admin": self.is_admin,
        }

    def profile_row(self, identity_id: str) -> dict:
        """Profile row upserted on id."""
        return {"id": identity_id, **self.metadata()}


def build_plan(
    *,
    email: str,
    full_name: str,
    password: str | None,
    role: str,
    is_admin: bool,
    send_invite: bool,
    strict_role_mode: bool,
) -> ProvisioningPlan:
    """Apply strict/permissive policy. Raises BadRequestError on violation."""
    if strict_role_mode:
        return ProvisioningPlan(
            email=email,
            full_name=full_name,
            role=StaffRole.STAFF.value,
            is_admin=False,
            mode=ProvisioningMode.DIRECT,
            supplied_password=password,
        )

    if not send_invite and not password:
        raise BadRequestError(
            "password is required when send_invite is false",
            ErrorContext(stage=ProvisioningStage.VALIDATE.value),
        )
    return ProvisioningPlan(
        email=email,
        full_name=full_name,
        role=role,
        is_admin=is_admin,
        mode=ProvisioningMode.INVITE if send_invite else ProvisioningMode.DIRECT,
        supplied_password=None if send_invite else password,
    )
