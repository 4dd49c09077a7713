"""Staff Provisioning Route — POST /api/v1/staff.

Invariants:
    - POST only; any other method → 405 {"error": "Method not allowed"} (error_handlers.py)
    - Body read raw and validated by the handler, so malformed JSON is a 400
      with the endpoint's own error shape, after the configuration check
    - Success → 200 with Cache-Control: no-store; password key only for direct creation

Design Decisions:
    - Thin route: all logic in services/provision_staff.py
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials

from staff_provisioning.api.dependencies import bearer_scheme, get_provisioning_handler
from staff_provisioning.api.responses import json_response
from staff_provisioning.schemas.staff import StaffCreatedResponse
from staff_provisioning.services.provision_staff import StaffProvisioningHandler

router = APIRouter(prefix="/api/v1/staff", tags=["staff"])


@router.post(
    "", response_model=StaffCreatedResponse, status_code=status.HTTP_200_OK,
)
async def create_staff(
    request: Request,
    handler: StaffProvisioningHandler = Depends(get_provisioning_handler),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
):
    """Provision a staff account (direct creation or invitation). Admin only."""
    token = credentials.credentials if credentials else None
    result = await handler.handle(await request.body(), token)
    return json_response(status.HTTP_200_OK, result.to_payload())
