"""HTTP tests for the health endpoint and request correlation."""

from __future__ import annotations


def test_health_reports_db_ok(client):
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    assert resp.get_json()["db"] == "ok"


def test_request_id_is_echoed(client):
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"


def test_each_request_gets_its_own_request_id(client):
    first = client.get("/api/v1/health", headers={"X-Request-ID": "one"})
    second = client.get("/api/v1/health", headers={"X-Request-ID": "two"})
    third = client.get("/api/v1/health")

    assert first.headers["X-Request-ID"] == "one"
    assert second.headers["X-Request-ID"] == "two"
    assert third.headers["X-Request-ID"] not in {"one", "two"}


def test_request_id_is_generated(client):
    assert client.get("/api/v1/health").headers.get("X-Request-ID")


def test_unknown_route_is_problem_json(client):
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert resp.headers["Content-Type"].startswith("application/problem+json")
