from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from leadhub import audit, events
from leadhub.core.auth import AuthUser, get_current_user as auth_get_current_user
from leadhub.core.config import get_settings
from leadhub.core.database import Base, get_db
from leadhub.logging import JsonLogFormatter
from leadhub.main import app


SUBMISSION_PAYLOAD = {
    "rep": "Dana Reyes",
    "relevancy": "Low",
    "company_name": "Acme",
    "first_name": "Jane",
    "last_name": "Doe",
    "email": "jane.doe@example.com",
    "phone": "100",
    "whatsapp": "101",
    "tier": "Tier 2",
    "volume": "5",
}


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def configure_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    monkeypatch.setenv("METRICS_ENABLED", "true")
    audit.audit_entries.clear()
    events.published_events.clear()
    get_settings.cache_clear()
    yield
    audit.audit_entries.clear()
    events.published_events.clear()
    get_settings.cache_clear()


@pytest.fixture()
def actor() -> dict[str, AuthUser]:
    return {"current": AuthUser(sub="admin-1", role="admin")}


@pytest.fixture()
def client(db_session: Session, actor: dict[str, AuthUser]) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    def override_auth_user() -> AuthUser:
        return actor["current"]

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[auth_get_current_user] = override_auth_user
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def test_correlation_id_is_echoed_and_recorded(client: TestClient) -> None:
    response = client.post("/api/submissions", json=SUBMISSION_PAYLOAD, headers={"X-Correlation-Id": "corr-obs-1"})

    assert response.status_code == 201
    assert response.headers["x-correlation-id"] == "corr-obs-1"
    assert audit.audit_entries[-1].correlation_id == "corr-obs-1"
    assert events.published_events[-1]["event_type"] == "submission.created"


def test_correlation_id_is_generated_when_missing(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert uuid.UUID(response.headers["x-correlation-id"])


def test_error_envelope_carries_correlation_id(client: TestClient) -> None:
    response = client.get(f"/api/submissions/{uuid.uuid4()}", headers={"X-Correlation-Id": "corr-404"})

    assert response.status_code == 404
    assert response.json()["correlation_id"] == "corr-404"


def test_request_log_has_route_template(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    response = client.get(f"/api/submissions/{uuid.uuid4()}", headers={"X-Correlation-Id": "abc-123"})
    assert response.status_code == 404

    records = [record for record in caplog.records if record.name == "leadhub.request" and record.getMessage() == "http.request"]
    assert any(
        getattr(record, "correlation_id", None) == "abc-123"
        and getattr(record, "method", None) == "GET"
        and getattr(record, "path", None) == "/api/submissions/{id}"
        and getattr(record, "status_code", None) == 404
        and isinstance(getattr(record, "duration_ms", None), float)
        for record in records
    )


def test_lifecycle_log_fields(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    response = client.post("/api/submissions", json=SUBMISSION_PAYLOAD)
    assert response.status_code == 201
    submission_id = response.json()["data"]["submission"]["id"]

    records = [record for record in caplog.records if record.name == "leadhub.submissions"]
    assert any(
        record.getMessage() == "submission.created"
        and getattr(record, "submission_id", None) == submission_id
        and getattr(record, "user_id", None) == "admin-1"
        for record in records
    )


def test_json_formatter_keeps_known_fields_only() -> None:
    record = logging.LogRecord("leadhub.test", logging.INFO, __file__, 1, "submission.updated", None, None)
    record.submission_id = "sub-1"
    record.password = "secret"
    record.correlation_id = "corr-fmt"

    payload = json.loads(JsonLogFormatter().format(record))

    assert payload["msg"] == "submission.updated"
    assert payload["correlation_id"] == "corr-fmt"
    assert payload["fields"] == {"submission_id": "sub-1"}


def test_metrics_endpoint_for_admin(client: TestClient) -> None:
    assert client.post("/api/submissions", json=SUBMISSION_PAYLOAD).status_code == 201

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "submission_lifecycle_total" in response.text
    assert 'action="create"' in response.text
    assert "http_requests_total" in response.text


def test_metrics_endpoint_forbidden_for_users(client: TestClient, actor: dict[str, AuthUser]) -> None:
    actor["current"] = AuthUser(sub="user-1", role="user")

    response = client.get("/metrics")

    assert response.status_code == 403


def test_metrics_endpoint_hidden_when_disabled(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("METRICS_ENABLED", "false")
    get_settings.cache_clear()

    response = client.get("/metrics")

    assert response.status_code == 404


def test_me_returns_identity(client: TestClient) -> None:
    response = client.get("/me")

    assert response.status_code == 200
    assert response.json() == {"sub": "admin-1", "role": "admin"}


def test_unsafe_correlation_header_is_replaced(client: TestClient) -> None:
    response = client.get("/health", headers={"X-Correlation-Id": "x" * 200})

    assert response.headers["x-correlation-id"] != "x" * 200
    assert uuid.UUID(response.headers["x-correlation-id"])


def test_lifecycle_logs_carry_actor(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    response = client.post("/api/submissions", json=SUBMISSION_PAYLOAD, headers={"X-Correlation-Id": "corr-actor"})
    assert response.status_code == 201

    records = [record for record in caplog.records if record.getMessage() == "submission.created"]
    assert records
    assert getattr(records[-1], "actor_id", None) == "admin-1"
    assert getattr(records[-1], "correlation_id", None) == "corr-actor"


def test_health_is_counted_but_not_logged(client: TestClient, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)

    assert client.get("/health").status_code == 200

    assert not [
        record
        for record in caplog.records
        if record.name == "leadhub.request" and getattr(record, "path", None) == "/health"
    ]
    assert 'path="/health"' in client.get("/metrics").text


def test_unknown_paths_share_one_metrics_label(client: TestClient) -> None:
    assert client.get(f"/api/nowhere/{uuid.uuid4()}").status_code == 404

    assert 'path="unmatched"' in client.get("/metrics").text


def test_unknown_route_uses_error_envelope(client: TestClient) -> None:
    response = client.get("/api/nowhere", headers={"X-Correlation-Id": "corr-missing"})

    assert response.status_code == 404
    assert response.json() == {
        "success": False,
        "message": "Not Found",
        "code": "not_found",
        "details": None,
        "correlation_id": "corr-missing",
    }
