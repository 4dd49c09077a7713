"""Staff Provisioning Handler — authenticate, authorize, create identity, upsert profile.

Invariants:
    - Straight-line pass, first failure wins: validate → authenticate → authorize →
      password → create identity → upsert profile → respond
    - No backend call happens before the request is fully validated
    - Every backend call awaited before the next begins; nothing retried
    - BackendAPIError never escapes: mapped per stage to Unauthorized (verify),
      InternalError (profile read) or UpstreamError (identity create, profile upsert)
    - Identity created but profile upsert failed → UpstreamError naming both facts;
      the orphaned identity is left for manual reconciliation

Design Decisions:
    - One handler parameterized by strict_role_mode (ADR: collapse two near-duplicate variants)
    - Capabilities injected at construction (core/capability_protocols.py): tests use fakes,
      production binds the Supabase implementations
    - Missing profile treated as non-admin → 403, not a data-integrity 500
"""

import logging

from staff_provisioning.core.authorization import is_admin_profile
from staff_provisioning.core.capability_protocols import (
    IdentityAdmin, ProfileStore, TokenVerifier,
)
from staff_provisioning.core.domain_types import (
    CallerIdentity, IdentityRecord, ProvisioningMode, ProvisioningStage,
)
from staff_provisioning.core.errors import (
    BackendAPIError, ErrorContext, ForbiddenError, InternalError,
    UnauthorizedError, UpstreamError,
)
from staff_provisioning.core.passwords import choose_password
from staff_provisioning.core.provisioning_policy import ProvisioningPlan, build_plan
from staff_provisioning.schemas.staff import StaffCreatedResponse, parse_staff_request

logger = logging.getLogger(__name__)


class StaffProvisioningHandler:
    """Provision one staff account per call to handle()."""

    def __init__(
        self,
        token_verifier: TokenVerifier,
        profile_store: ProfileStore,
        identity_admin: IdentityAdmin,
        *,
        strict_role_mode: bool = False,
        invite_redirect_to: str | None = None,
    ):
        self.token_verifier = token_verifier
        self.profile_store = profile_store
        self.identity_admin = identity_admin
        self.strict_role_mode = strict_role_mode
        self.invite_redirect_to = invite_redirect_to

    async def handle(
        self, raw_body: bytes, bearer_token: str | None,
    ) -> StaffCreatedResponse:
        """Run the full provisioning pass. Raises ProvisioningError subclasses."""
        plan = self._validate(raw_body)
        caller = await self._authenticate(bearer_token)
        await self._authorize(caller)

        password = None
        if plan.mode == ProvisioningMode.DIRECT:
            password = choose_password(plan.supplied_password)

        identity = await self._create_identity(plan, password, caller)
        await self._upsert_profile(plan, identity, caller)

        logger.info(
            "Staff account provisioned",
            extra={
                "caller_id": caller.id,
                "identity_id": identity.id,
                "invited": plan.invited,
                "strict_role_mode": self.strict_role_mode,
            },
        )
        return StaffCreatedResponse(
            id=identity.id,
            email=plan.email,
            full_name=plan.full_name,
            role=plan.role,
            is_admin=plan.is_admin,
            invited=plan.invited,
            password=password,
        )

    def _validate(self, raw_body: bytes) -> ProvisioningPlan:
        request = parse_staff_request(raw_body)
        return build_plan(
            email=request.email,
            full_name=request.full_name,
            password=request.password,
            role=request.role,
            is_admin=request.is_admin,
            send_invite=request.send_invite,
            strict_role_mode=self.strict_role_mode,
        )

    async def _authenticate(self, bearer_token: str | None) -> CallerIdentity:
        context = ErrorContext(stage=ProvisioningStage.AUTHENTICATE.value)
        if not bearer_token:
            raise UnauthorizedError("Missing Authorization header", context)
        try:
            return await self.token_verifier.get_user(bearer_token)
        except BackendAPIError:
            raise UnauthorizedError("Invalid token", context)

    async def _authorize(self, caller: CallerIdentity) -> None:
        context = ErrorContext(
            stage=ProvisioningStage.AUTHORIZE.value, caller_id=caller.id,
        )
        try:
            profile = await self.profile_store.get_profile(caller.id)
        except BackendAPIError as e:
            context.debug_info = {"backend_message": e.message}
            raise InternalError("Failed to read caller profile", context)
        if not is_admin_profile(profile):
            raise ForbiddenError(context=context)

    async def _create_identity(
        self, plan: ProvisioningPlan, password: str | None, caller: CallerIdentity,
    ) -> IdentityRecord:
        try:
            if plan.mode == ProvisioningMode.INVITE:
                return await self.identity_admin.invite_user_by_email(
                    plan.email, plan.metadata(), redirect_to=self.invite_redirect_to,
                )
            return await self.identity_admin.create_user(
                plan.email, password, plan.metadata(),
            )
        except BackendAPIError as e:
            raise UpstreamError(
                e.message or "Failed to create auth user",
                upstream_status=e.status_code,
                context=ErrorContext(
                    stage=ProvisioningStage.CREATE_IDENTITY.value,
                    caller_id=caller.id,
                ),
            )

    async def _upsert_profile(
        self, plan: ProvisioningPlan, identity: IdentityRecord, caller: CallerIdentity,
    ) -> None:
        try:
            await self.profile_store.upsert_profile(plan.profile_row(identity.id))
        except BackendAPIError as e:
            raise UpstreamError(
                f"Auth user created, but profile upsert failed: {e.message}",
                upstream_status=e.status_code,
                context=ErrorContext(
                    stage=ProvisioningStage.UPSERT_PROFILE.value,
                    caller_id=caller.id,
                    identity_id=identity.id,
                ),
            )
