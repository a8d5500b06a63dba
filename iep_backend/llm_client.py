"""Minimal LLM client abstraction used by the extraction pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from .config import Settings, get_settings


@dataclass
class LLMRequest:
    """Parameters for an LLM completion call."""

    model: str
    system_prompt: str
    user_prompt: str
    timeout: float
    max_tokens: int


@dataclass(slots=True)
class TokenUsage:
    """Provider token counts; reasoning and cached tokens are subsets of the totals."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    reasoning_tokens: int = 0
    cached_prompt_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass
class LLMResponse:
    """Text returned by the model plus the usage the provider reported."""

    content: str
    model: str
    usage: TokenUsage = field(default_factory=TokenUsage)


Transport = Callable[[LLMRequest], Awaitable[LLMResponse]]


class LLMClient:
    """Simple, awaitable LLM client wrapper."""

    def __init__(self, transport: Optional[Transport] = None) -> None:
        self._transport = transport or self._default_transport

    async def complete(self, request: LLMRequest) -> LLMResponse:
        """Execute the request using the configured transport."""

        return await self._transport(request)

    async def _default_transport(self, request: LLMRequest) -> LLMResponse:
        """Default transport raises to signal missing integration."""

        raise RuntimeError(
            "No LLM transport configured. Set OPENAI_API_KEY or provide a transport "
            "implementation when constructing LLMClient."
        )


def create_default_client(settings: Settings | None = None) -> LLMClient:
    """Return an ``LLMClient`` wired to the HTTP transport when an API key is set."""

    settings = settings or get_settings()
    if not settings.openai_api_key:
        return LLMClient()

    from .services.openai_client import OpenAIChatTransport

    return LLMClient(OpenAIChatTransport.from_settings(settings))


__all__ = [
    "LLMClient",
    "LLMRequest",
    "LLMResponse",
    "TokenUsage",
    "Transport",
    "create_default_client",
]
