"""Service test fixtures — fake backend + handler factory.

Invariants:
    - Every test gets a fresh FakeBackend with one admin caller (ADMIN_TOKEN)
    - make_handler builds a StaffProvisioningHandler bound to that backend
"""

import pytest

from staff_provisioning.services.provision_staff import StaffProvisioningHandler

from tests.services.fake_backend import ADMIN_ID, ADMIN_TOKEN, FakeBackend


@pytest.fixture
def backend():
    fake = FakeBackend()
    fake.add_caller(ADMIN_TOKEN, ADMIN_ID, {"is_admin": True, "role": "admin"})
    return fake


@pytest.fixture
def make_handler(backend):
    def _make(strict_role_mode=False, invite_redirect_to=None):
        return StaffProvisioningHandler(
            backend, backend, backend,
            strict_role_mode=strict_role_mode,
            invite_redirect_to=invite_redirect_to,
        )
    return _make
