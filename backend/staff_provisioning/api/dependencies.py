"""Route Dependencies — builds the provisioning handler for one request.

Invariants:
    - Backend configuration checked before anything else touches the request:
      missing settings → ConfigurationError (500)
    - The shared httpx.AsyncClient comes from app.state (opened in the lifespan)
    - bearer_scheme never raises: a missing/non-bearer header yields None and the
      handler answers 401 itself, after validating the body

Design Decisions:
    - Handler built per request from cached Settings: overridable with
      app.dependency_overrides in tests
"""

import httpx
from fastapi import Depends, Request
from fastapi.security import HTTPBearer

from staff_provisioning.config import Settings, get_settings
from staff_provisioning.infrastructure.supabase_client import SupabaseBackend
from staff_provisioning.services.provision_staff import StaffProvisioningHandler

bearer_scheme = HTTPBearer(auto_error=False)


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_provisioning_handler(
    settings: Settings = Depends(get_settings),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> StaffProvisioningHandler:
    """Handler bound to the Supabase backend. Raises ConfigurationError."""
    config = settings.backend_config()
    backend = SupabaseBackend.from_config(http, config)
    return StaffProvisioningHandler(
        backend.token_verifier,
        backend.profile_store,
        backend.identity_admin,
        strict_role_mode=config.strict_role_mode,
        invite_redirect_to=config.invite_redirect_to,
    )
