"""Per-model token pricing."""

from __future__ import annotations

from dataclasses import dataclass

from .executors import Usage


@dataclass(frozen=True)
class ModelPricing:
    input_per_million: float
    output_per_million: float


MODEL_PRICING: dict[str, ModelPricing] = {
    "gpt-5.2": ModelPricing(1.75, 14.0),
    "gemini-2.5-pro": ModelPricing(1.25, 10.0),
    "gemini-3-pro-preview": ModelPricing(2.0, 12.0),
    "gemini-3.1-pro-preview": ModelPricing(2.0, 12.0),
    "deepseek-reasoner": ModelPricing(0.55, 2.19),
}


def calculate_cost(usage: Usage | None, model: str) -> tuple[float, float, float]:
    """Return ``(input_cost, output_cost, total_cost)`` in USD. Unknown models cost 0."""
    pricing = MODEL_PRICING.get(model)
    if pricing is None or usage is None:
        return 0.0, 0.0, 0.0
    input_cost = usage.prompt_tokens / 1_000_000 * pricing.input_per_million
    output_cost = usage.completion_tokens / 1_000_000 * pricing.output_per_million
    return input_cost, output_cost, input_cost + output_cost


def format_cost_info(usage: Usage | None, model: str) -> str:
    if usage is None:
        return "Usage data not available"
    input_cost, output_cost, total = calculate_cost(usage, model)
    return (
        f"Tokens: {usage.prompt_tokens} input, {usage.completion_tokens} output | "
        f"Cost: ${total:.6f} (input: ${input_cost:.6f}, output: ${output_cost:.6f})"
    )
