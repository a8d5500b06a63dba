"""Test configuration for the IEP extraction backend."""

from __future__ import annotations

import asyncio
import copy
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Generator

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from iep_backend.config import reset_settings_cache  # noqa: E402
from iep_backend.database import reset_database_state  # noqa: E402
from iep_backend.llm_client import LLMClient, LLMRequest, LLMResponse, TokenUsage  # noqa: E402
from iep_backend.routers.iep import get_rate_limiter  # noqa: E402

MOCK_MODEL = "o4-mini-2025-04-16"

VALID_IEP: Dict[str, Any] = {
    "IEP": {
        "CHILD'S INFORMATION": {
            "NAME": "Jordan Example",
            "ID NUMBER": "A-1042",
            "DATE OF BIRTH": "2010-04-02",
            "GRADE": "8",
            "Is the child in preschool?": False,
        },
        "PARENT/GUARDIAN INFORMATION": {
            "Parent/Guardian 1": {"NAME": "Alex Example", "CITY": "Columbus", "EMAIL": None},
        },
        "AMENDMENTS": [],
        "5. POSTSECONDARY TRANSITION": {
            "Postsecondary Training and Education": {
                "Measurable Postsecondary Goal": "Enroll in a two-year program.",
                "Method for Measuring Progress": {"Portfolios": True, "Other (list)": None},
            }
        },
        "6. MEASURABLE ANNUAL GOALS": {
            "GOALS": [
                {
                    "NUMBER": 1,
                    "AREA": "Reading",
                    "MEASURABLE ANNUAL GOAL": "Read grade-level text at 120 wpm.",
                    "METHOD(S) FOR MEASURING THE CHILD'S PROGRESS TOWARDS ANNUAL GOAL": {
                        "Observation": True,
                        "Rubrics": False,
                    },
                    "Objectives/Benchmarks": [
                        {"Objective/Benchmark": "Read 90 wpm.", "Date of Mastery": None}
                    ],
                }
            ]
        },
        "7. SPECIALLY DESIGNED SERVICES": {
            "SPECIALLY DESIGNED INSTRUCTION": [
                {"Description": "Small-group reading", "Goal Addressed #": 1, "Frequency": "Daily"}
            ],
            "ACCOMMODATIONS": [{"Description": "Extended time"}],
        },
    }
}


@pytest.fixture(autouse=True)
def _isolate_environment(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    """Provide isolated configuration for each test."""

    monkeypatch.setenv("IEP_OUTPUT_DIR", str(tmp_path / "batches"))
    monkeypatch.setenv("IEP_ARTIFACT_DB_URL", f"sqlite:///{tmp_path / 'artifacts.db'}")
    monkeypatch.setenv("IEP_ARTIFACT_SINK", "none")
    monkeypatch.setenv("IEP_LLM_MODEL", MOCK_MODEL)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    reset_settings_cache()
    reset_database_state()
    get_rate_limiter.cache_clear()
    yield
    reset_settings_cache()
    reset_database_state()
    get_rate_limiter.cache_clear()


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    """Return a test client for the FastAPI application."""

    from iep_backend.app import app

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


class FakeClock:
    """Manual clock: ``sleep`` returns at once after moving time forward."""

    def __init__(self, start: float | None = None) -> None:
        self.current = start if start is not None else datetime(2025, 6, 10, 9, 0).timestamp()
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self.current

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += max(seconds, 0.0)
        await asyncio.sleep(0)

    def advance(self, seconds: float) -> None:
        self.current += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


class MockLLM(LLMClient):
    """Mock LLM client with a simple FIFO response queue."""

    def __init__(self) -> None:
        super().__init__(transport=self._dispatch)
        self._queue: list[str | Exception] = []
        self.requests: list[LLMRequest] = []
        self.usage = TokenUsage(prompt_tokens=1000, completion_tokens=500)

    def enqueue(self, response: str | Dict[str, Any] | Exception) -> None:
        if isinstance(response, dict):
            response = json.dumps(response)
        self._queue.append(response)

    async def _dispatch(self, request: LLMRequest) -> LLMResponse:
        self.requests.append(request)
        if not self._queue:
            raise RuntimeError("MockLLM was called without a queued response")
        item = self._queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return LLMResponse(content=item, model=request.model, usage=self.usage)


@pytest.fixture
def mock_llm() -> MockLLM:
    return MockLLM()


@pytest.fixture
def valid_iep() -> Dict[str, Any]:
    return copy.deepcopy(VALID_IEP)
