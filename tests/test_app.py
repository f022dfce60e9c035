import asyncio
import json
import logging

import pytest
from fastapi import Request, Response
from fastapi.testclient import TestClient
from pydantic import BaseModel

import backend_utils.middleware.rate_limit as rate_limit_module
from backend_utils.main import create_app
from backend_utils.middleware import RateLimit as RateLimitMiddleware
from backend_utils.shared import Settings, get_config
from backend_utils.shared.config import Network, RateLimit


DEVELOPMENT_TOKEN = "IgnoreRateLimit_2004"


class Item(BaseModel):
    name: str
    quantity: int


def make_client(app_config, requests_per_second: int = 100) -> TestClient:
    settings = Settings(
        network=Network(rate_limit=RateLimit(timeout_period=60, requests_per_second=requests_per_second))
    )
    return TestClient(create_app(settings=settings, app_config=app_config))


def test_health(app_config):
    client = make_client(app_config)
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_create_app_keeps_existing_configuration(app_config):
    make_client(app_config)
    assert get_config() == app_config


def test_validation_handlers_are_installed(app_config):
    app = create_app(settings=Settings(), app_config=app_config)

    @app.post("/items")
    async def create_item(item: Item):
        return {"name": item.name}

    client = TestClient(app)

    response = client.post("/items", json={"quantity": 1})
    assert response.status_code == 400
    assert response.json()["errors"][0]["loc"] == ["body", "name"]

    response = client.post(
        "/items", content=b"{", headers={"content-type": "application/json"}
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid JSON format."


class TestRateLimit:
    def test_requests_over_the_limit_are_rejected(self, app_config):
        client = make_client(app_config, requests_per_second=3)

        responses = [client.get("/health") for _ in range(10)]

        assert responses[0].status_code == 200
        assert any(resp.status_code == 429 for resp in responses)

    def test_client_stays_in_timeout(self, app_config):
        client = make_client(app_config, requests_per_second=1)

        statuses = [client.get("/health").status_code for _ in range(5)]

        first_rejection = statuses.index(429)
        assert all(status == 429 for status in statuses[first_rejection:])

    def test_development_token_bypasses_limit(self, app_config):
        client = make_client(app_config, requests_per_second=1)
        headers = {"x-development-token": DEVELOPMENT_TOKEN}

        responses = [client.get("/health", headers=headers) for _ in range(10)]

        assert all(resp.status_code == 200 for resp in responses)

    def test_wrong_development_token_is_limited(self, app_config):
        client = make_client(app_config, requests_per_second=1)
        headers = {"x-development-token": "guess"}

        responses = [client.get("/health", headers=headers) for _ in range(10)]

        assert any(resp.status_code == 429 for resp in responses)


class TestRequestLogging:
    @pytest.fixture
    def records(self, caplog):
        caplog.set_level(logging.INFO, logger="backend_utils.middleware.request_logging")
        return caplog

    def incoming(self, caplog) -> list[dict]:
        prefix = "Incoming request: "
        return [
            json.loads(record.getMessage()[len(prefix):])
            for record in caplog.records
            if record.getMessage().startswith(prefix)
        ]

    def test_logs_sanitised_request(self, app_config, records):
        client = make_client(app_config)
        client.get(
            "/health?email=someone",
            headers={
                "Authorization": "Bearer secret",
                "x-development-token": DEVELOPMENT_TOKEN,
            },
        )

        (logged,) = self.incoming(records)
        assert logged["method"] == "GET"
        assert logged["path"] == "/health"
        assert logged["headers"]["authorization"] == "****"
        assert logged["headers"]["x-development-token"] == "****"
        assert logged["query"] == {"email": "****"}
        assert "secret" not in records.text

    def test_logs_sanitised_json_body(self, app_config, records):
        client = make_client(app_config)
        client.post("/health", json={"password": "hunter2", "city": "Oslo"})

        (logged,) = self.incoming(records)
        assert logged["body"] == {"password": "****", "city": "Oslo"}
        assert "hunter2" not in records.text

    def test_malformed_json_body_is_not_logged(self, app_config, records):
        client = make_client(app_config)
        client.post(
            "/health", content=b"{oops", headers={"content-type": "application/json"}
        )

        (logged,) = self.incoming(records)
        assert logged["body"] is None


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def http_request(ip: str) -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "server": ("testserver", 80),
            "path": "/health",
            "query_string": b"",
            "headers": [],
            "client": (ip, 1),
        }
    )


async def ok(request: Request) -> Response:
    return Response(status_code=200)


async def noop_app(scope, receive, send): ...


class TestRateLimitMemory:
    @pytest.fixture
    def clock(self, monkeypatch):
        clock = FakeClock()
        monkeypatch.setattr(rate_limit_module, "monotonic", clock)
        return clock

    def send(self, limiter: RateLimitMiddleware, ip: str) -> int:
        return asyncio.run(limiter.dispatch(http_request(ip), ok)).status_code

    def test_idle_clients_are_forgotten(self, clock):
        limiter = RateLimitMiddleware(noop_app, timeout_period_s=5, max_per_second=10)

        for i in range(500):
            assert self.send(limiter, f"10.0.{i // 256}.{i % 256}") == 200
        assert limiter.tracked_clients == 500

        clock.now += 2
        assert self.send(limiter, "10.9.9.9") == 200

        assert limiter.tracked_clients == 1

    def test_served_timeouts_are_forgotten(self, clock):
        limiter = RateLimitMiddleware(noop_app, timeout_period_s=5, max_per_second=1)

        statuses = [self.send(limiter, "10.0.0.1") for _ in range(3)]
        assert 429 in statuses
        assert limiter.tracked_clients == 1

        clock.now += 10
        assert self.send(limiter, "10.0.0.2") == 200

        assert limiter.tracked_clients == 1
        assert self.send(limiter, "10.0.0.1") == 200
