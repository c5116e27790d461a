"""Tests for the health endpoint."""

import pytest

from warroom.app import main


async def _ping_ok():
    return True


async def _ping_down():
    return False


@pytest.mark.asyncio
async def test_health_ok(client, monkeypatch):
    monkeypatch.setattr(main, "ping_database", _ping_ok)

    response = await client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    components = body["components"]
    assert components["database"] == {"status": "ok"}
    assert components["cache"]["status"] == "ok"
    assert "hit_rate" in components["cache"]
    assert components["rate_limiter"]["status"] == "ok"
    assert components["mentionlytics"]["configured"] in (True, False)


@pytest.mark.asyncio
async def test_health_degraded_when_database_down(client, monkeypatch):
    monkeypatch.setattr(main, "ping_database", _ping_down)

    body = (await client.get("/health")).json()

    assert body["status"] == "degraded"
    assert body["components"]["database"] == {"status": "error"}


@pytest.mark.asyncio
async def test_health_reports_inbound_limiter_records(client, monkeypatch):
    monkeypatch.setattr(main, "ping_database", _ping_ok)
    await client.get("/campaigns")

    body = (await client.get("/health")).json()

    assert body["components"]["rate_limiter"]["api_records"] == 1


@pytest.mark.asyncio
async def test_health_is_not_rate_limited(client, monkeypatch):
    monkeypatch.setattr(main, "ping_database", _ping_ok)
    monkeypatch.setattr(main.settings, "api_rate_limit", 1)

    for _ in range(5):
        assert (await client.get("/health")).status_code == 200

    assert (await client.get("/campaigns")).status_code == 200
    limited = await client.get("/campaigns")
    assert limited.status_code == 429
    assert limited.headers["Retry-After"] == "60"


def test_create_sweeps():
    names = [sweep.name for sweep in main.create_sweeps()]
    assert names == ["cache-cleanup", "outbound-rate-limit-cleanup", "api-rate-limit-cleanup"]
