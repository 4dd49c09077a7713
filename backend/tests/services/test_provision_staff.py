"""Provisioning Handler — straight-line flow, stage ordering and error mapping.

Invariants:
    - Validation failures raise BadRequestError before any backend call
    - Missing/invalid token → UnauthorizedError; non-admin → ForbiddenError
    - Profile read failure → InternalError (500), distinct from a missing profile (403)
    - Identity service rejection → UpstreamError carrying the upstream message verbatim
    - Upsert failure after creation → UpstreamError naming both facts, no rollback
    - Strict mode forces role "staff" / is_admin False / direct creation

Design Decisions:
    - FakeBackend call log asserts ordering without patching
"""

import pytest

from staff_provisioning.core.errors import (
    BadRequestError, ForbiddenError, InternalError,
    UnauthorizedError, UpstreamError,
)
from staff_provisioning.core.passwords import GENERATED_LENGTH

from tests.services.fake_backend import ADMIN_ID, ADMIN_TOKEN, body


# ─── Validation ─────────────────────────────────────────────────

@pytest.mark.parametrize("payload", [
    {"full_name": "A B"},
    {"email": "a@b.com"},
    {"email": "", "full_name": "A B"},
    {"email": "a@b.com", "full_name": "   "},
    {"send_invite": False, "password": "long-enough-pw"},
])
async def test_missing_email_or_full_name_is_bad_request(make_handler, backend, payload):
    for strict in (False, True):
        with pytest.raises(BadRequestError) as exc:
            await make_handler(strict_role_mode=strict).handle(body(**payload), ADMIN_TOKEN)
        assert exc.value.message == "email and full_name are required"
        assert exc.value.http_status == 400
    assert backend.calls == []


async def test_unparseable_body_is_bad_request(make_handler, backend):
    with pytest.raises(BadRequestError) as exc:
        await make_handler().handle(b"{not json", ADMIN_TOKEN)
    assert exc.value.message == "Bad JSON"
    assert backend.calls == []


async def test_permissive_direct_without_password_rejected_before_backend(make_handler, backend):
    with pytest.raises(BadRequestError) as exc:
        await make_handler().handle(
            body(email="a@b.com", full_name="A B", send_invite=False), ADMIN_TOKEN,
        )
    assert exc.value.message == "password is required when send_invite is false"
    assert backend.calls == []


async def test_validation_runs_before_authentication(make_handler, backend):
    """A bad body with no token is still a 400, not a 401."""
    with pytest.raises(BadRequestError):
        await make_handler().handle(body(email="a@b.com"), None)


# ─── Authentication / authorization ─────────────────────────────

async def test_missing_token_is_unauthorized(make_handler, backend):
    with pytest.raises(UnauthorizedError) as exc:
        await make_handler().handle(body(email="a@b.com", full_name="A B"), None)
    assert exc.value.message == "Missing Authorization header"
    assert exc.value.http_status == 401
    assert backend.calls == []


async def test_invalid_token_is_unauthorized(make_handler, backend):
    with pytest.raises(UnauthorizedError) as exc:
        await make_handler().handle(body(email="a@b.com", full_name="A B"), "forged")
    assert exc.value.message == "Invalid token"
    assert backend.call_names() == ["get_user"]


@pytest.mark.parametrize("profile", [
    None,
    {"is_admin": False, "role": "staff"},
    {"is_admin": None, "role": None},
    {"is_admin": "true", "role": "manager"},
])
async def test_non_admin_caller_is_forbidden(make_handler, backend, profile):
    backend.add_caller("staff-token", "staff-0001", profile)
    with pytest.raises(ForbiddenError) as exc:
        await make_handler().handle(body(email="a@b.com", full_name="A B"), "staff-token")
    assert exc.value.message == "Forbidden: admin only"
    assert exc.value.http_status == 403
    assert backend.call_names() == ["get_user", "get_profile"]


async def test_role_admin_without_flag_is_authorized(make_handler, backend):
    backend.add_caller("role-token", "role-0001", {"is_admin": False, "role": "ADMIN"})
    result = await make_handler().handle(
        body(email="a@b.com", full_name="A B"), "role-token",
    )
    assert result.ok is True


async def test_profile_read_failure_is_internal_error(make_handler, backend):
    backend.fail_get_profile = "connection reset"
    with pytest.raises(InternalError) as exc:
        await make_handler().handle(body(email="a@b.com", full_name="A B"), ADMIN_TOKEN)
    assert exc.value.message == "Failed to read caller profile"
    assert exc.value.http_status == 500
    assert "create_user" not in backend.call_names()


# ─── Strict mode ────────────────────────────────────────────────

async def test_strict_creates_staff_with_generated_password(make_handler, backend):
    result = await make_handler(strict_role_mode=True).handle(
        body(email="a@b.com", full_name="A B"), ADMIN_TOKEN,
    )

    assert result.role == "staff"
    assert result.is_admin is False
    assert result.invited is False
    assert len(result.password) == GENERATED_LENGTH
    assert backend.call_names() == [
        "get_user", "get_profile", "create_user", "upsert_profile",
    ]
    _, (email, password, metadata) = backend.calls[2]
    assert (email, password) == ("a@b.com", result.password)
    assert metadata == {"full_name": "A B", "role": "staff", "is_admin": False}
    assert backend.profiles[result.id] == {
        "full_name": "A B", "role": "staff", "is_admin": False,
    }


async def test_strict_ignores_role_admin_and_invite_fields(make_handler, backend):
    result = await make_handler(strict_role_mode=True).handle(
        body(
            email="a@b.com", full_name="A B",
            role="admin", is_admin=True, send_invite=True,
        ),
        ADMIN_TOKEN,
    )
    assert (result.role, result.is_admin, result.invited) == ("staff", False, False)
    assert "invite_user_by_email" not in backend.call_names()


async def test_strict_uses_long_supplied_password_trimmed(make_handler, backend):
    result = await make_handler(strict_role_mode=True).handle(
        body(email="a@b.com", full_name="A B", password="  s3cret-pass  "),
        ADMIN_TOKEN,
    )
    assert result.password == "s3cret-pass"


async def test_strict_replaces_short_supplied_password(make_handler, backend):
    result = await make_handler(strict_role_mode=True).handle(
        body(email="a@b.com", full_name="A B", password="  short  "),
        ADMIN_TOKEN,
    )
    assert result.password != "short"
    assert len(result.password) == GENERATED_LENGTH


# ─── Permissive mode ────────────────────────────────────────────

async def test_permissive_invite_is_default(make_handler, backend):
    result = await make_handler(invite_redirect_to="https://app.test/welcome").handle(
        body(email="a@b.com", full_name="A B"), ADMIN_TOKEN,
    )

    assert result.invited is True
    assert result.password is None
    assert "password" not in result.to_payload()
    assert backend.call_names() == [
        "get_user", "get_profile", "invite_user_by_email", "upsert_profile",
    ]
    _, (email, metadata, redirect_to) = backend.calls[2]
    assert email == "a@b.com"
    assert metadata == {"full_name": "A B", "role": "staff", "is_admin": False}
    assert redirect_to == "https://app.test/welcome"


async def test_permissive_honors_role_and_admin_flag(make_handler, backend):
    result = await make_handler().handle(
        body(
            email="boss@b.com", full_name="Boss", role="manager",
            is_admin=True, send_invite=False, password="managerpass1",
        ),
        ADMIN_TOKEN,
    )
    assert (result.role, result.is_admin, result.invited) == ("manager", True, False)
    assert result.password == "managerpass1"
    assert backend.profiles[result.id]["role"] == "manager"


async def test_permissive_direct_short_password_replaced(make_handler, backend):
    result = await make_handler().handle(
        body(email="a@b.com", full_name="A B", send_invite=False, password="abc"),
        ADMIN_TOKEN,
    )
    assert len(result.password) == GENERATED_LENGTH


async def test_unknown_fields_ignored(make_handler, backend):
    result = await make_handler().handle(
        body(email="a@b.com", full_name="A B", favourite_colour="teal"),
        ADMIN_TOKEN,
    )
    assert result.email == "a@b.com"


# ─── Upstream failures ──────────────────────────────────────────

async def test_identity_service_error_passed_through(make_handler, backend):
    backend.fail_create = "Email address is invalid"
    with pytest.raises(UpstreamError) as exc:
        await make_handler().handle(body(email="bad", full_name="A B"), ADMIN_TOKEN)
    assert exc.value.message == "Email address is invalid"
    assert exc.value.http_status == 400
    assert "upsert_profile" not in backend.call_names()


async def test_second_attempt_same_email_fails_upstream(make_handler, backend):
    handler = make_handler(strict_role_mode=True)
    await handler.handle(body(email="a@b.com", full_name="A B"), ADMIN_TOKEN)

    with pytest.raises(UpstreamError) as exc:
        await handler.handle(body(email="a@b.com", full_name="A B"), ADMIN_TOKEN)
    assert "already been registered" in exc.value.message
    assert backend.call_names().count("create_user") == 2


async def test_upsert_failure_reports_partial_provisioning(make_handler, backend):
    backend.fail_upsert = "duplicate key value violates unique constraint"
    with pytest.raises(UpstreamError) as exc:
        await make_handler(strict_role_mode=True).handle(
            body(email="a@b.com", full_name="A B"), ADMIN_TOKEN,
        )

    assert exc.value.http_status == 400
    assert exc.value.message == (
        "Auth user created, but profile upsert failed: "
        "duplicate key value violates unique constraint"
    )
    assert exc.value.context.identity_id == "user-0001"
    assert exc.value.context.caller_id == ADMIN_ID
    # no rollback: the identity stays
    assert "user-0001" in backend.users
