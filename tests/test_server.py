"""
Tests for the Flask JSON API.
"""

import pytest

from frontend.ratelimit import SlidingWindowRateLimiter
from frontend.server import SECURITY_HEADERS, create_app
from tests.test_pipeline import DownLLM


@pytest.fixture
def app_factory(courses_dir, make_pipeline):
    def _factory(llm=None, max_requests=20, app_env="production", pipeline=None):
        p = pipeline or make_pipeline(courses_dir, llm)
        app = create_app(
            p,
            rate_limiter=SlidingWindowRateLimiter(window=60, max_requests=max_requests),
            app_env=app_env,
        )
        return app.test_client(), p
    return _factory


@pytest.fixture
def client(app_factory):
    test_client, p = app_factory()
    p.initialize()
    return test_client


class BrokenPipeline:
    def ask(self, payload):
        raise RuntimeError("database on fire")


# ── Chat ──────────────────────────────────────────────────────────────────

class TestChat:

    def test_answer(self, client):
        resp = client.post("/api/chat", json={"message": "Which bootcamp covers data science?"})

        assert resp.status_code == 200
        data = resp.get_json()
        assert data["has_context"] is True
        assert data["sources"] == ["courses.txt"]
        assert "$700" in data["response"]

    def test_missing_message(self, client):
        resp = client.post("/api/chat", json={})

        assert resp.status_code == 400
        error = resp.get_json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["field"] == "message"
        assert "timestamp" in error

    def test_non_json_body(self, client):
        resp = client.post("/api/chat", data="hello", content_type="text/plain")

        assert resp.status_code == 400
        assert resp.get_json()["error"]["message"] == "Request body must be a valid object"

    @pytest.mark.parametrize("body", ["Which bootcamp covers data science?", ["hello"], 42, None])
    def test_body_must_be_json_object(self, client, body):
        resp = client.post("/api/chat", json=body)

        assert resp.status_code == 400
        error = resp.get_json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == "Request body must be a valid object"

    def test_rate_limited(self, app_factory):
        test_client, _ = app_factory(max_requests=2)
        for _ in range(2):
            assert test_client.post("/api/chat", json={"message": "hello"}).status_code == 200

        resp = test_client.post("/api/chat", json={"message": "hello"})

        assert resp.status_code == 429
        error = resp.get_json()["error"]
        assert error["code"] == "RATE_LIMIT_EXCEEDED"
        assert error["retry_after"] == 60

    def test_model_unavailable(self, app_factory):
        test_client, _ = app_factory(llm=DownLLM())
        resp = test_client.post("/api/chat", json={"message": "What courses do you offer?"})

        assert resp.status_code == 502
        assert resp.get_json()["error"]["code"] == "OLLAMA_ERROR"

    def test_unexpected_error_hides_detail(self, app_factory):
        test_client, _ = app_factory(pipeline=BrokenPipeline())
        resp = test_client.post("/api/chat", json={"message": "hi"})

        assert resp.status_code == 500
        error = resp.get_json()["error"]
        assert error["message"] == "An internal server error occurred"
        assert "detail" not in error

    def test_unexpected_error_detail_in_development(self, app_factory):
        test_client, _ = app_factory(pipeline=BrokenPipeline(), app_env="development")
        error = test_client.post("/api/chat", json={"message": "hi"}).get_json()["error"]
        assert "database on fire" in error["detail"]


# ── Operational endpoints ─────────────────────────────────────────────────

class TestOperations:

    def test_ping_headers(self, client):
        resp = client.get("/ping")

        assert resp.status_code == 200
        assert resp.get_json()["status"] == "ok"
        for name, value in SECURITY_HEADERS.items():
            assert resp.headers[name] == value
        assert resp.headers["Access-Control-Allow-Origin"] == "*"

    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "healthy"

    def test_health_degraded(self, app_factory):
        test_client, _ = app_factory(llm=DownLLM())
        resp = test_client.get("/api/health")
        assert resp.status_code == 503
        assert resp.get_json()["status"] == "degraded"

    def test_stats_and_status(self, client):
        stats = client.get("/api/stats").get_json()
        assert stats["documents_loaded"] == 1
        assert stats["is_initialized"] is True
        assert client.get("/api/status").get_json()["status"] == "operational"

    def test_refresh(self, client, courses_dir):
        (courses_dir / "faqs.txt").write_text("Do you offer refunds? Yes, within 14 days.", encoding="utf-8")

        resp = client.post("/api/refresh")

        assert resp.status_code == 200
        assert resp.get_json()["stats"]["documents_loaded"] == 2

    def test_refresh_failure(self, client, courses_dir):
        (courses_dir / "courses.txt").unlink()

        resp = client.post("/api/refresh")

        assert resp.status_code == 503
        assert resp.get_json()["error"]["code"] == "RAG_ERROR"
        stats = client.get("/api/stats").get_json()
        assert stats["is_initialized"] is False
        assert stats["chunks_created"] == 1

    def test_unknown_route(self, client):
        resp = client.get("/api/nope")
        assert resp.status_code == 404
        assert resp.get_json()["error"]["code"] == "NOT_FOUND"

    def test_wrong_method(self, client):
        assert client.get("/api/chat").status_code == 405
