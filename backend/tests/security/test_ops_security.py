import pytest

from app.settings import settings


@pytest.fixture
def metrics_settings():
    original = (settings.obs_metrics_public, settings.obs_admin_token)
    try:
        yield settings
    finally:
        settings.obs_metrics_public, settings.obs_admin_token = original


@pytest.mark.asyncio
async def test_metrics_fail_closed_without_token(api_client, metrics_settings):
    metrics_settings.obs_metrics_public = False
    metrics_settings.obs_admin_token = None
    resp = await api_client.get("/metrics")
    assert resp.status_code == 403
    assert resp.json()["detail"] == "admin_token_not_configured"


@pytest.mark.asyncio
async def test_metrics_rejects_wrong_token(api_client, metrics_settings):
    metrics_settings.obs_metrics_public = False
    metrics_settings.obs_admin_token = "s3cret"
    resp = await api_client.get("/metrics", headers={"X-Admin-Token": "guess"})
    assert resp.status_code == 403
    assert resp.json()["detail"] == "forbidden"


@pytest.mark.asyncio
async def test_metrics_with_bearer_token(api_client, metrics_settings):
    metrics_settings.obs_metrics_public = False
    metrics_settings.obs_admin_token = "s3cret"
    resp = await api_client.get("/metrics", headers={"Authorization": "Bearer s3cret"})
    assert resp.status_code == 200
    assert "femconnect_http_requests_total" in resp.text


@pytest.mark.asyncio
async def test_liveness_is_public(api_client):
    resp = await api_client.get("/health/live")
    assert resp.status_code == 200
    assert resp.headers["X-Request-Id"]


@pytest.mark.asyncio
async def test_request_id_is_echoed(api_client):
    resp = await api_client.get("/health/live", headers={"X-Request-Id": "abc-123"})
    assert resp.headers["X-Request-Id"] == "abc-123"
