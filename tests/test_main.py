"""Tests for the backlog API."""

from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from git_backlog.config import Settings
from git_backlog.main import create_app
from git_backlog.store import BacklogStore, seed_items


@pytest.fixture
def app():
    """Fresh application with the default seed items."""
    return create_app(settings=Settings(), store=BacklogStore(seed_items()))


@pytest.fixture
def test_client(app):
    """Create async test client for FastAPI."""
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


def _failing_client(environment: str) -> AsyncClient:
    """Client for an app whose store raises an unexpected error."""
    store = MagicMock(spec=BacklogStore)
    store.stats.side_effect = RuntimeError("stats exploded")
    app = create_app(settings=Settings(environment=environment), store=store)
    return AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    )


class TestServiceEndpoints:
    """Test / and /health."""

    async def test_root_returns_banner(self, test_client):
        async with test_client as client:
            response = await client.get("/")

            assert response.status_code == 200
            assert response.json() == {
                "message": "Git Backlog API",
                "version": "1.0.0",
                "status": "running",
            }

    async def test_health_returns_timestamp(self, test_client):
        async with test_client as client:
            response = await client.get("/health")

            assert response.status_code == 200
            data = response.json()
            assert data["status"] == "healthy"
            assert "T" in data["timestamp"]


class TestListEndpoint:
    """Test GET /api/backlog."""

    async def test_list_returns_items(self, test_client):
        async with test_client as client:
            response = await client.get("/api/backlog")

            assert response.status_code == 200
            items = response.json()["items"]
            assert [item["id"] for item in items] == [1, 2, 3]
            assert items[0]["priority"] == "high"
            assert "createdAt" in items[0]

    async def test_list_filters_by_status(self, test_client):
        async with test_client as client:
            response = await client.get("/api/backlog", params={"status": "done"})

            assert response.status_code == 200
            assert [item["id"] for item in response.json()["items"]] == [3]

    async def test_list_filters_by_priority_case_insensitively(self, test_client):
        async with test_client as client:
            response = await client.get("/api/backlog", params={"priority": "HIGH"})

            assert [item["id"] for item in response.json()["items"]] == [1]

    async def test_list_combines_filters(self, test_client):
        async with test_client as client:
            response = await client.get("/api/backlog", params={"status": "todo", "priority": "low"})

            assert response.json() == {"items": []}

    async def test_list_rejects_invalid_filter(self, test_client):
        async with test_client as client:
            response = await client.get("/api/backlog", params={"status": "blocked"})

            assert response.status_code == 400
            assert "Invalid status" in response.json()["error"]


class TestStatsEndpoint:
    """Test GET /api/backlog/stats."""

    async def test_stats_uses_camel_case_keys(self, test_client):
        async with test_client as client:
            response = await client.get("/api/backlog/stats")

            assert response.status_code == 200
            assert response.json() == {
                "total": 3,
                "byStatus": {"todo": 1, "in-progress": 1, "done": 1},
                "byPriority": {"high": 1, "medium": 1, "low": 1},
            }


class TestItemEndpoints:
    """Test single-item CRUD endpoints."""

    async def test_get_item(self, test_client):
        async with test_client as client:
            response = await client.get("/api/backlog/2")

            assert response.status_code == 200
            assert response.json()["title"] == "Add authentication"

    @pytest.mark.parametrize("item_id", ["999", "abc"])
    async def test_get_missing_item_returns_404(self, test_client, item_id):
        async with test_client as client:
            response = await client.get(f"/api/backlog/{item_id}")

            assert response.status_code == 404
            assert response.json() == {"error": "Item not found"}

    async def test_create_item(self, test_client):
        async with test_client as client:
            response = await client.post(
                "/api/backlog", json={"title": "  New feature ", "priority": "Medium"}
            )

            assert response.status_code == 201
            data = response.json()
            assert data["id"] == 4
            assert data["title"] == "New feature"
            assert data["priority"] == "medium"
            assert data["status"] == "todo"
            assert data["updatedAt"] is None

    @pytest.mark.parametrize(
        ("body", "message"),
        [
            ({"title": "", "priority": "high"}, "Title"),
            ({"title": "   ", "priority": "high"}, "Title"),
            ({"priority": "high"}, "Title"),
            ({"title": "T", "priority": "urgent"}, "Priority"),
            ({"title": "T"}, "Priority"),
        ],
    )
    async def test_create_invalid_item_returns_400(self, test_client, body, message):
        async with test_client as client:
            response = await client.post("/api/backlog", json=body)

            assert response.status_code == 400
            assert message in response.json()["error"]

    async def test_create_without_body_returns_400(self, test_client):
        async with test_client as client:
            response = await client.post("/api/backlog")

            assert response.status_code == 400
            assert "Title" in response.json()["error"]

    async def test_update_item(self, test_client):
        async with test_client as client:
            response = await client.put("/api/backlog/1", json={"status": "done"})

            assert response.status_code == 200
            data = response.json()
            assert data["status"] == "done"
            assert data["title"] == "Setup CI/CD pipeline"
            assert data["updatedAt"] is not None

    async def test_update_invalid_field_returns_400(self, test_client):
        async with test_client as client:
            response = await client.put("/api/backlog/1", json={"invalidField": "x"})

            assert response.status_code == 400
            assert response.json() == {"error": "Invalid update fields: invalidField"}

    async def test_update_invalid_status_returns_400(self, test_client):
        async with test_client as client:
            response = await client.put("/api/backlog/1", json={"status": "blocked"})

            assert response.status_code == 400
            assert "Status must be one of" in response.json()["error"]

    async def test_update_non_object_body_returns_400(self, test_client):
        async with test_client as client:
            response = await client.put("/api/backlog/1", json=["status", "done"])

            assert response.status_code == 400
            assert response.json() == {"error": "Invalid request body"}

    async def test_update_missing_item_returns_404(self, test_client):
        async with test_client as client:
            response = await client.put("/api/backlog/999", json={"status": "done"})

            assert response.status_code == 404

    async def test_delete_item(self, test_client):
        async with test_client as client:
            response = await client.delete("/api/backlog/3")

            assert response.status_code == 200
            data = response.json()
            assert data["message"] == "Item deleted successfully"
            assert data["item"]["id"] == 3
            assert "createdAt" in data["item"]

    async def test_delete_missing_item_returns_404(self, test_client):
        async with test_client as client:
            response = await client.delete("/api/backlog/999")

            assert response.status_code == 404
            assert response.json() == {"error": "Item not found"}


class TestErrorHandling:
    """Test unmatched routes and unexpected failures."""

    async def test_unknown_route_returns_404(self, test_client):
        async with test_client as client:
            response = await client.get("/api/unknown")

            assert response.status_code == 404
            assert response.json() == {"error": "Route not found"}

    async def test_internal_error_hides_detail_in_production(self):
        async with _failing_client("production") as client:
            response = await client.get("/api/backlog/stats")

            assert response.status_code == 500
            assert response.json() == {
                "error": "Something went wrong!",
                "message": "Internal server error",
            }

    async def test_internal_error_shows_detail_in_development(self):
        async with _failing_client("development") as client:
            response = await client.get("/api/backlog/stats")

            assert response.status_code == 500
            assert response.json()["message"] == "stats exploded"


class TestBacklogWorkflow:
    """End-to-end flow over the HTTP surface."""

    async def test_complete_backlog_workflow(self, test_client):
        async with test_client as client:
            initial = await client.get("/api/backlog")
            initial_count = len(initial.json()["items"])

            stats = await client.get("/api/backlog/stats")
            assert stats.json()["total"] == initial_count

            created = await client.post(
                "/api/backlog", json={"title": "Integration test task", "priority": "medium"}
            )
            assert created.status_code == 201
            item_id = created.json()["id"]

            fetched = await client.get(f"/api/backlog/{item_id}")
            assert fetched.status_code == 200
            assert fetched.json() == created.json()

            updated = await client.put(f"/api/backlog/{item_id}", json={"status": "in-progress"})
            assert updated.status_code == 200
            assert updated.json()["status"] == "in-progress"

            fetched = await client.get(f"/api/backlog/{item_id}")
            assert fetched.json()["status"] == "in-progress"

            stats = await client.get("/api/backlog/stats")
            assert stats.json()["total"] == initial_count + 1
            assert stats.json()["byStatus"]["in-progress"] == 2

            deleted = await client.delete(f"/api/backlog/{item_id}")
            assert deleted.status_code == 200

            missing = await client.get(f"/api/backlog/{item_id}")
            assert missing.status_code == 404

            final = await client.get("/api/backlog")
            assert len(final.json()["items"]) == initial_count
