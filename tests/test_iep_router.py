"""HTTP surface of the IEP extraction backend."""
from __future__ import annotations

from fastapi.testclient import TestClient

from iep_backend.batch import BatchRunner, NullArtifactSink, build_extraction_operation
from iep_backend.rate_limit import RateLimitConfig, RateLimiter
from iep_backend.routers.iep import get_batch_runner, get_extraction_operation

from conftest import FakeClock, MockLLM


def test_validate_accepts_conforming_payload(client: TestClient, valid_iep) -> None:
    response = client.post("/api/iep/validate", json=valid_iep)

    assert response.status_code == 200
    body = response.json()
    assert body["report"]["valid"] is True
    assert body["critical_issues"] == []
    assert body["form_issues"] == []
    assert "VALIDATION PASSED" in body["text_report"]


def test_validate_reports_missing_root(client: TestClient) -> None:
    response = client.post("/api/iep/validate", json={"student": "unknown"})

    assert response.status_code == 200
    body = response.json()
    assert body["report"]["valid"] is False
    assert body["report"]["missing_fields"] == ["IEP"]
    assert body["form_issues"] == ["Missing root IEP structure"]
    assert "VALIDATION FAILED" in body["text_report"]


def test_validate_rejects_non_object_body(client: TestClient) -> None:
    response = client.post("/api/iep/validate", json=[1, 2, 3])

    assert response.status_code == 422


def test_batch_route_uses_injected_runner_and_operation(client: TestClient, valid_iep) -> None:
    from iep_backend.app import app

    limiter = RateLimiter(RateLimitConfig(), clock=FakeClock())
    llm = MockLLM()
    llm.enqueue(valid_iep)
    llm.enqueue("not json")
    app.dependency_overrides[get_batch_runner] = lambda: BatchRunner(limiter, NullArtifactSink())
    app.dependency_overrides[get_extraction_operation] = lambda: build_extraction_operation(
        llm, limiter
    )

    response = client.post(
        "/api/iep/batches",
        json={
            "jobs": [
                {"document_id": "first.txt", "text": "IEP one"},
                {"document_id": "second.txt", "text": "IEP two"},
            ]
        },
    )

    assert response.status_code == 200
    body = response.json()
    summary = body["summary"]
    assert summary["total_files"] == 2
    assert summary["success_count"] + summary["fail_count"] == 2
    assert summary["fail_count"] == 1
    assert body["batch_id"] == summary["batch_id"]
    states = sorted(outcome["state"] for outcome in body["outcomes"])
    assert states == ["failed", "succeeded"]


def test_batch_route_requires_jobs(client: TestClient) -> None:
    response = client.post("/api/iep/batches", json={"jobs": []})

    assert response.status_code == 422


def test_batch_without_api_key_fails_every_job(client: TestClient) -> None:
    response = client.post("/api/iep/batches", json={"jobs": [{"document_id": "a", "text": "x"}]})

    assert response.status_code == 200
    body = response.json()
    assert body["summary"]["fail_count"] == 1
    assert "No LLM transport configured" in body["outcomes"][0]["error"]
