"""httpx transport for an OpenAI-compatible chat completions endpoint."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

import httpx

from ..config import Settings
from ..llm_client import LLMRequest, LLMResponse, TokenUsage
from ..rate_limit.errors import ErrorKind, ExtractionCallError, ExtractionError

LOGGER = logging.getLogger(__name__)


def _usage_from_payload(payload: Mapping[str, Any]) -> TokenUsage:
    usage = payload.get("usage") or {}
    completion_details = usage.get("completion_tokens_details") or {}
    prompt_details = usage.get("prompt_tokens_details") or {}
    return TokenUsage(
        prompt_tokens=int(usage.get("prompt_tokens") or 0),
        completion_tokens=int(usage.get("completion_tokens") or 0),
        reasoning_tokens=int(completion_details.get("reasoning_tokens") or 0),
        cached_prompt_tokens=int(prompt_details.get("cached_tokens") or 0),
    )


class OpenAIChatTransport:
    """Send :class:`LLMRequest` objects to ``POST {base_url}/chat/completions``.

    Failures leave this class as :class:`ExtractionCallError` tagged with an
    :class:`ErrorKind` derived from the HTTP status or the httpx exception
    type, so callers never inspect messages.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "OpenAIChatTransport":
        if not settings.openai_api_key:
            raise ValueError("OPENAI_API_KEY is required for the OpenAI transport")
        return cls(api_key=settings.openai_api_key, base_url=settings.openai_base_url)

    def _body(self, request: LLMRequest) -> Dict[str, Any]:
        return {
            "model": request.model,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.user_prompt},
            ],
            "max_completion_tokens": request.max_tokens,
            "response_format": {"type": "json_object"},
        }

    async def __call__(self, request: LLMRequest) -> LLMResponse:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        url = f"{self._base_url}/chat/completions"
        LOGGER.debug("Sending chat completion", extra={"model": request.model, "url": url})

        try:
            if self._client is not None:
                response = await self._client.post(
                    url, headers=headers, json=self._body(request), timeout=request.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=httpx.Timeout(request.timeout)) as client:
                    response = await client.post(url, headers=headers, json=self._body(request))
        except httpx.TimeoutException as exc:
            raise ExtractionCallError(
                f"Chat completion timed out after {request.timeout}s", kind=ErrorKind.TIMEOUT
            ) from exc
        except httpx.TransportError as exc:
            raise ExtractionCallError(f"Chat completion transport failure: {exc}") from exc

        if response.status_code >= 400:
            raise ExtractionCallError.from_status(
                response.status_code,
                f"Chat completion failed with HTTP {response.status_code}: {response.text[:200]}",
            )

        try:
            payload = response.json()
            content = payload["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ExtractionError("Unexpected chat completion response structure") from exc
        if not isinstance(content, str):
            raise ExtractionError("Chat completion returned no text content")

        return LLMResponse(
            content=content,
            model=str(payload.get("model") or request.model),
            usage=_usage_from_payload(payload),
        )


__all__ = ["OpenAIChatTransport"]
