"""Token usage to dollar cost conversion for the extraction models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

PER_MILLION = 1_000_000


@dataclass(frozen=True, slots=True)
class ModelPricing:
    """Prices in USD per million tokens."""

    input: float
    output: float
    cached_input: Optional[float] = None


MODEL_PRICING: Dict[str, ModelPricing] = {
    "o4-mini-2025-04-16": ModelPricing(input=1.10, output=4.40),
    "gpt-5-2025-08-07": ModelPricing(input=1.25, output=10.00, cached_input=0.125),
}


def estimate_cost(
    model: str,
    input_tokens: int,
    output_tokens: int,
    cached_input_tokens: int = 0,
) -> float:
    """Return the USD cost of one call, or ``0.0`` for models without pricing."""

    pricing = MODEL_PRICING.get(model)
    if pricing is None:
        return 0.0
    if pricing.cached_input is None:
        input_cost = input_tokens * pricing.input
    else:
        uncached = max(0, input_tokens - cached_input_tokens)
        input_cost = uncached * pricing.input + cached_input_tokens * pricing.cached_input
    return (input_cost + output_tokens * pricing.output) / PER_MILLION


__all__ = ["MODEL_PRICING", "ModelPricing", "estimate_cost"]
