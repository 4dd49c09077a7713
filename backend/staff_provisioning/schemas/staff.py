"""Staff Schemas — Pydantic models for the create-staff request and response.

Invariants:
    - StaffCreateRequest.email / full_name: required, stripped, non-empty
    - Unknown request fields ignored (Pydantic default extra="ignore")
    - is_admin / send_invite accept JSON booleans only: "yes", "false", 1 are rejected
    - StaffCreatedResponse.password is None for invitations and dropped from the payload

Design Decisions:
    - field_validator for side-effect-free transforms (strip) — keeps models pure
    - Mode-dependent rules (strict vs permissive) live in core/provisioning_policy.py,
      not here: the schema does not know the handler's configuration
"""

import json

from pydantic import BaseModel, StrictBool, ValidationError, field_validator

from staff_provisioning.core.domain_types import ProvisioningStage
from staff_provisioning.core.errors import BadRequestError, ErrorContext

REQUIRED_FIELDS = ("email", "full_name")


class StaffCreateRequest(BaseModel):
    """Raw create-staff command, before strict/permissive policy is applied."""
    email: str
    full_name: str
    password: str | None = None
    role: str = "staff"
    is_admin: StrictBool = False
    send_invite: StrictBool = True

    @field_validator("email", "full_name")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty or whitespace")
        return v


class StaffCreatedResponse(BaseModel):
    """Successful provisioning result."""
    ok: bool = True
    id: str
    email: str
    full_name: str
    role: str
    is_admin: bool
    invited: bool
    password: str | None = None

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)


def parse_staff_request(raw_body: bytes) -> StaffCreateRequest:
    """Decode and validate the request body. Empty body counts as {}.

    Raises BadRequestError for unparseable JSON, a non-object body, missing
    email/full_name, or a wrongly typed optional field.
    """
    context = ErrorContext(stage=ProvisioningStage.VALIDATE.value)
    try:
        data = json.loads(raw_body or b"{}")
    except (ValueError, RecursionError):
        raise BadRequestError("Bad JSON", context)
    if not isinstance(data, dict):
        raise BadRequestError("Bad JSON", context)

    try:
        return StaffCreateRequest.model_validate(data)
    except ValidationError as e:
        raise BadRequestError(_describe_validation_error(e), context)


def _describe_validation_error(exc: ValidationError) -> str:
    """Collapse Pydantic errors into one client message."""
    fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
    if any(name in REQUIRED_FIELDS for name in fields):
        return "email and full_name are required"
    if fields:
        return f"Invalid value for {fields[0]}"
    return "Invalid request data"
