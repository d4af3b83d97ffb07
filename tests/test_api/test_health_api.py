"""Tests for the root and health endpoints, middleware and error envelope"""


class TestHealth:

    def test_root(self, client):
        data = client.get("/").json()

        assert data["name"] == "Storyboard Studio API"
        assert data["status"] == "operational"
        assert data["docs"] == "/docs"

    def test_health_mock(self, client):
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["image_generation"] == "mock"
        assert data["providers"] == []
        assert "timestamp" in data

    def test_health_with_provider(self, client, fal_key):
        data = client.get("/health").json()

        assert data["image_generation"] == "fal-flux-turbo"
        assert "fal-flux-turbo" in data["providers"]


class TestMiddleware:

    def test_request_id_generated(self, client):
        response = client.get("/health")

        assert response.headers["x-request-id"].startswith("req_")
        assert float(response.headers["x-process-time"]) >= 0

    def test_request_id_propagated(self, client):
        response = client.get("/health", headers={"X-Request-ID": "trace-123"})
        assert response.headers["x-request-id"] == "trace-123"

    def test_unknown_route(self, client):
        response = client.get("/nothing-here")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "HTTP_ERROR"

    def test_malformed_body(self, client):
        response = client.post("/projects", content="not json", headers={"Content-Type": "application/json"})

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
