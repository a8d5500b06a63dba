"""OpenAI-compatible HTTP transport, exercised through httpx.MockTransport."""
from __future__ import annotations

import json

import httpx
import pytest

from iep_backend.llm_client import LLMClient, LLMRequest, create_default_client
from iep_backend.rate_limit import ErrorKind, ExtractionCallError, ExtractionError
from iep_backend.services.openai_client import OpenAIChatTransport

REQUEST = LLMRequest(
    model="o4-mini-2025-04-16",
    system_prompt="Extract the form.",
    user_prompt="document text",
    timeout=30,
    max_tokens=1000,
)


def _transport(handler) -> OpenAIChatTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return OpenAIChatTransport(api_key="test-key", base_url="https://llm.test/v1/", client=client)


@pytest.mark.asyncio
async def test_successful_completion() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "model": "o4-mini-2025-04-16",
                "choices": [{"message": {"content": '{"IEP": {}}'}}],
                "usage": {
                    "prompt_tokens": 120,
                    "completion_tokens": 80,
                    "completion_tokens_details": {"reasoning_tokens": 50},
                    "prompt_tokens_details": {"cached_tokens": 20},
                },
            },
        )

    response = await LLMClient(_transport(handler)).complete(REQUEST)

    assert response.content == '{"IEP": {}}'
    assert response.usage.prompt_tokens == 120
    assert response.usage.reasoning_tokens == 50
    assert response.usage.cached_prompt_tokens == 20
    assert response.usage.total_tokens == 200
    sent = seen[0]
    assert str(sent.url) == "https://llm.test/v1/chat/completions"
    assert sent.headers["Authorization"] == "Bearer test-key"
    body = json.loads(sent.content)
    assert body["model"] == "o4-mini-2025-04-16"
    assert [message["role"] for message in body["messages"]] == ["system", "user"]
    assert body["max_completion_tokens"] == 1000


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "kind"),
    [(429, ErrorKind.RATE_LIMITED), (504, ErrorKind.TIMEOUT), (500, ErrorKind.OTHER), (401, ErrorKind.OTHER)],
)
async def test_http_errors_are_tagged(status: int, kind: ErrorKind) -> None:
    transport = _transport(lambda request: httpx.Response(status, text="nope"))

    with pytest.raises(ExtractionCallError) as excinfo:
        await transport(REQUEST)

    assert excinfo.value.kind is kind
    assert excinfo.value.status_code == status


@pytest.mark.asyncio
async def test_network_timeout_is_tagged_as_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("read timed out", request=request)

    with pytest.raises(ExtractionCallError) as excinfo:
        await _transport(handler)(REQUEST)

    assert excinfo.value.kind is ErrorKind.TIMEOUT


@pytest.mark.asyncio
async def test_connection_error_is_not_retryable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ExtractionCallError) as excinfo:
        await _transport(handler)(REQUEST)

    assert excinfo.value.kind is ErrorKind.OTHER


@pytest.mark.asyncio
async def test_unexpected_body_raises_extraction_error() -> None:
    transport = _transport(lambda request: httpx.Response(200, json={"choices": []}))

    with pytest.raises(ExtractionError):
        await transport(REQUEST)


def test_default_client_without_key_has_no_transport() -> None:
    import asyncio

    client = create_default_client()

    with pytest.raises(RuntimeError):
        asyncio.run(client.complete(REQUEST))


def test_default_client_with_key_uses_http_transport(monkeypatch: pytest.MonkeyPatch) -> None:
    from iep_backend.config import reset_settings_cache

    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    reset_settings_cache()

    client = create_default_client()

    assert isinstance(client._transport, OpenAIChatTransport)
