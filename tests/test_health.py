import pytest


@pytest.mark.anyio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


@pytest.mark.anyio
async def test_metrics_exposes_lifecycle_counters(client):
    resp = await client.get("/metrics")
    assert resp.status_code == 200
    assert "branchcomics_validation_runs" in resp.text
    assert "branchcomics_publish_duration_seconds" in resp.text
