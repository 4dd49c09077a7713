"""Health probes — liveness always up, readiness follows backend configuration."""

from staff_provisioning import __version__


async def test_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json() == {
        "status": "healthy",
        "service": "staff-provisioning-api",
        "version": __version__,
    }


async def test_ready_when_configured(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["status"] == "ready"


async def test_not_ready_without_service_key(client, use_settings):
    use_settings(supabase_service_role_key=None)
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 503
    assert res.json() == {"status": "not_ready", "reason": "backend_not_configured"}
