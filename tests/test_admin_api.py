"""Tests for the security dashboard endpoints."""

from httpx import AsyncClient


async def _lock(guard, identifier: str, failures: int = 5) -> None:
    for _ in range(failures):
        await guard.record_failure(identifier)


class TestSecurityDashboard:
    async def test_dashboard_counts_blocked_and_active(self, client: AsyncClient, guard):
        await _lock(guard, "203.0.113.7")
        await _lock(guard, "203.0.113.8", failures=2)

        resp = await client.get("/api/admin/security/dashboard")

        assert resp.status_code == 200
        body = resp.json()
        assert body["stats"] == {"total_tracked": 2, "blocked": 1, "active": 1}
        assert [item["identifier"] for item in body["locked"]] == ["203.0.113.7"]
        assert [item["identifier"] for item in body["recent"]] == ["203.0.113.8"]
        assert body["recent"][0]["is_blocked"] is False

    async def test_empty_dashboard(self, client: AsyncClient):
        resp = await client.get("/api/admin/security/dashboard")

        assert resp.status_code == 200
        assert resp.json()["stats"] == {"total_tracked": 0, "blocked": 0, "active": 0}

    async def test_locked_list_shows_remaining_time(self, client: AsyncClient, guard, clock):
        await _lock(guard, "203.0.113.7")
        clock.advance(seconds=75)

        resp = await client.get("/api/admin/security/locked")

        assert resp.status_code == 200
        body = resp.json()
        assert body["total"] == 1
        locked = body["locked"][0]
        assert locked["identifier"] == "203.0.113.7"
        assert locked["attempt_count"] == 5
        assert locked["retry_after_seconds"] == 825
        assert locked["time_remaining"] == "13m 45s"

    async def test_unblock_clears_lockout(self, client: AsyncClient, guard):
        await _lock(guard, "203.0.113.7")

        resp = await client.post("/api/admin/security/unblock/203.0.113.7")

        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "identifier": "203.0.113.7",
            "message": "203.0.113.7 has been unblocked",
        }
        assert (await guard.check("203.0.113.7")).allowed

        resp = await client.get("/api/admin/security/locked")
        assert resp.json()["total"] == 0

    async def test_unblock_unknown_identifier(self, client: AsyncClient):
        resp = await client.post("/api/admin/security/unblock/192.0.2.1")

        assert resp.status_code == 404
        assert resp.json()["detail"]["error_code"] == "lockout_not_found"


class TestSecurityDashboardAuth:
    async def test_dashboard_requires_authentication(self, unauthenticated_client: AsyncClient):
        resp = await unauthenticated_client.get("/api/admin/security/locked")
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == "Bearer"

    async def test_unblock_requires_authentication(self, unauthenticated_client: AsyncClient):
        resp = await unauthenticated_client.post("/api/admin/security/unblock/203.0.113.7")
        assert resp.status_code == 401
        assert resp.headers["www-authenticate"] == "Bearer"
