"""Tests for the HTTP API."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from smartcv.app.main import SmartCVApp

from conftest import SAMPLE_FEEDBACK


@pytest.fixture
def client(fake_platform, test_settings):
    app = SmartCVApp(settings=test_settings, probe=lambda: fake_platform).app
    with TestClient(app) as c:
        yield c


def _submit(client, pdf: bytes):
    return client.post(
        "/analyze",
        data={"company_name": "Acme", "job_title": "Engineer", "job_description": "Build things."},
        files={"file": ("resume.pdf", pdf, "application/pdf")},
    )


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "capabilities_ready": True}


def test_auth_status_after_startup(client):
    body = client.get("/auth/status").json()
    assert body["status"] == "authenticated"
    assert body["identity"]["id"] == "u1"
    assert body["error"] is None


def test_analyze_and_read_back(client, sample_pdf):
    resp = _submit(client, sample_pdf)
    assert resp.status_code == 200
    record = resp.json()
    assert record["companyName"] == "Acme"
    assert record["feedback"] == SAMPLE_FEEDBACK

    stored = client.get(f"/records/{record['id']}")
    assert stored.status_code == 200
    assert stored.json() == record

    listed = client.get("/records").json()["records"]
    assert [r["id"] for r in listed] == [record["id"]]


def test_analyze_failure_reports_stage(client):
    resp = _submit(client, b"definitely not a pdf")
    assert resp.status_code == 502
    assert resp.json()["detail"] == {"stage": "CONVERT", "status": "Error: Failed to convert PDF to image"}


def test_analyze_requires_session(client, sample_pdf):
    client.post("/auth/sign-out")
    assert client.get("/auth/status").json()["status"] == "unauthenticated"
    assert _submit(client, sample_pdf).status_code == 401


def test_empty_upload_rejected(client):
    assert _submit(client, b"").status_code == 422


def test_missing_record(client):
    assert client.get("/records/nope").status_code == 404


def test_sign_in_round_trip(client):
    client.post("/auth/sign-out")
    body = client.post("/auth/sign-in").json()
    assert body["status"] == "authenticated"


def test_platform_unavailable(test_settings):
    app = SmartCVApp(settings=test_settings, probe=lambda: None).app
    with TestClient(app) as c:
        status = c.get("/auth/status").json()
        assert status["error"] == "platform unavailable"
        assert status["is_loading"] is False
        assert c.get("/records").status_code == 503

        cleared = c.delete("/error").json()
        assert cleared["error"] is None


def test_oversized_upload_rejected(fake_platform, test_settings, sample_pdf):
    settings = test_settings.model_copy(update={"MAX_UPLOAD_BYTES": 16})
    app = SmartCVApp(settings=settings, probe=lambda: fake_platform).app
    with TestClient(app) as c:
        assert _submit(c, sample_pdf).status_code == 413
    assert fake_platform.fs.uploads == []
