"""
tests/test_system.py
"""
from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from app.api.v1.endpoints import health as health_endpoint
from app.core.config import Settings
from app.core.runtime import Runtime


PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


# ────────────────────────── health ──────────────────────────
def test_health_connected(client):
    rv = client.get("/health")

    assert rv.status_code == 200
    body = rv.json()
    assert body["status"] == "healthy"
    assert body["services"] == {"database": "connected", "environment": "development"}
    assert body["version"] == "1.0.0"
    assert body["availability"] == "unprobed"


def test_health_not_configured_is_healthy(make_client, settings):
    rv = make_client(replace(settings, database_url=None)).get("/health")

    assert rv.status_code == 200
    assert rv.json()["services"]["database"] == "not_configured"


def test_health_degraded_when_ping_fails(make_client, settings, clock):
    class DownStore:
        async def ping(self) -> bool:
            raise OSError("connection refused")

        async def close(self) -> None:
            return None

    runtime = Runtime.from_settings(settings, clock=clock)
    runtime.store = DownStore()
    rv = make_client(settings, runtime).get("/health")

    assert rv.status_code == 206
    assert rv.json()["status"] == "degraded"
    assert rv.json()["services"]["database"] == "disconnected"


def test_health_unexpected_failure_is_unhealthy(client, monkeypatch):
    async def explode(runtime):
        raise RuntimeError("boom")

    monkeypatch.setattr(health_endpoint, "_database_status", explode)
    rv = client.get("/health")

    assert rv.status_code == 503
    body = rv.json()
    assert body["status"] == "unhealthy"
    assert body["services"] == {"database": "disconnected", "environment": "unknown"}
    assert body["version"] == "1.0.0"


def test_health_reports_availability_after_first_data_request(client):
    client.get("/posts")
    assert client.get("/health").json()["availability"] == "available"


# ────────────────────────── uploads ──────────────────────────
def test_upload_stores_locally_and_serves_file(client, admin_headers, settings):
    rv = client.post(
        "/upload",
        files={"image": ("photo.PNG", PNG, "image/png")},
        headers=admin_headers,
    )

    assert rv.status_code == 200, rv.text
    body = rv.json()
    assert body["success"] is True
    assert body["storage"] == "local"
    assert body["originalName"] == "photo.PNG"
    assert body["size"] == len(PNG)
    assert body["filename"].endswith(".png")
    assert body["url"] == f"/uploads/{body['filename']}"
    assert (Path(settings.upload_dir) / body["filename"]).read_bytes() == PNG
    assert client.get(body["url"]).content == PNG


def test_upload_rejects_non_images(client, admin_headers):
    rv = client.post("/upload", files={"image": ("notes.txt", b"hello", "text/plain")}, headers=admin_headers)

    assert rv.status_code == 400
    assert rv.json()["error"] == "INVALID_FILE_TYPE"


def test_upload_rejects_large_files(client, admin_headers):
    big = b"\x00" * (5 * 1024 * 1024 + 1)
    rv = client.post("/upload", files={"image": ("big.jpg", big, "image/jpeg")}, headers=admin_headers)

    assert rv.status_code == 400
    assert rv.json() == {"error": "FILE_TOO_LARGE", "message": "File too large. Maximum size is 5MB."}


def test_upload_without_file(client, admin_headers):
    rv = client.post("/upload", headers=admin_headers)

    assert rv.status_code == 400
    assert rv.json()["error"] == "NO_FILE_UPLOADED"


def test_upload_needs_admin(client):
    rv = client.post("/upload", files={"image": ("photo.png", PNG, "image/png")})
    assert rv.status_code == 401


# ────────────────────────── config & errors ──────────────────────────
def test_settings_from_env():
    env = {
        "DATABASE_URL": " postgres://u:p@db/blog ",
        "ADMIN_PASSWORD": "s3cret",
        "CORS_ALLOW_ORIGINS": "https://a.example, ,https://b.example",
        "DB_POOL_SIZE": "not-a-number",
        "DB_QUERY_TIMEOUT": "2.5",
        "REQUIRE_ADMIN_TOKEN": "false",
        "SEED_SAMPLE_POSTS": "yes",
        "APP_ENV": "production",
        "LOG_LEVEL": "debug",
    }
    s = Settings.from_env(env)

    assert s.database_url == "postgres://u:p@db/blog"
    assert s.database_configured
    assert s.admin_password == "s3cret"
    assert s.cors_origins == ["https://a.example", "https://b.example"]
    assert s.db_pool_size == 5
    assert s.db_query_timeout == 2.5
    assert s.require_admin_token is False
    assert s.seed_sample_posts is True
    assert s.is_production
    assert s.log_level == "DEBUG"


def test_settings_defaults_and_placeholder():
    s = Settings.from_env({})
    assert s.database_url is None and not s.database_configured
    assert s.require_admin_token is True
    assert not Settings(database_url="postgresql://placeholder").database_configured


def test_unknown_route_has_error_body(client):
    rv = client.get("/nope")
    assert rv.status_code == 404
    assert rv.json()["error"] == "HTTP_404"


def test_malformed_json_is_400(client, admin_headers):
    rv = client.post(
        "/posts",
        content=b"{not json",
        headers={**admin_headers, "Content-Type": "application/json"},
    )
    assert rv.status_code == 400
    assert rv.json()["error"] == "VALIDATION_ERROR"


def test_sample_posts_seeded_on_first_probe(make_client, settings):
    client = make_client(replace(settings, seed_sample_posts=True))

    body = client.get("/posts").json()
    featured = client.get("/posts", params={"featured": "true"}).json()

    assert body["total"] == 2
    assert featured["total"] == 1
    assert "welcome" in featured["items"][0]["tags"]
