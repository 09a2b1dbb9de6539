"""LLM pricing reference for the cloud structuring backends.

All prices are per 1 MILLION tokens. Local and Hugging Face backends are
not billed per token and always estimate to 0.
"""

from dataclasses import dataclass


@dataclass
class ModelPricing:
    """Pricing for a single model."""

    input: float  # $ per 1M input tokens
    output: float  # $ per 1M output tokens


OPENAI_PRICING: dict[str, ModelPricing] = {
    "gpt-4o-mini": ModelPricing(input=0.15, output=0.60),
    "gpt-4o": ModelPricing(input=2.50, output=10.00),
    "gpt-4.1-mini": ModelPricing(input=0.40, output=1.60),
    "gpt-4.1-nano": ModelPricing(input=0.10, output=0.40),
}

ANTHROPIC_PRICING: dict[str, ModelPricing] = {
    "claude-3-5-haiku-20241022": ModelPricing(input=0.80, output=4.00),
    "claude-haiku-4-5-20251001": ModelPricing(input=1.00, output=5.00),
}

PRICING_BY_PROVIDER: dict[str, dict[str, ModelPricing]] = {
    "openai": OPENAI_PRICING,
    "anthropic": ANTHROPIC_PRICING,
}


def get_pricing(provider: str, model: str) -> ModelPricing:
    """Look up pricing for a model.

    Raises:
        KeyError: If provider or model is unknown.
    """
    table = PRICING_BY_PROVIDER[provider]
    if model in table:
        return table[model]
    raise KeyError(f"Unknown model for {provider}: {model}")


def estimate_cost(provider: str, model: str, input_tokens: int, output_tokens: int) -> float:
    """Estimate request cost in USD.

    Raises:
        KeyError: If provider or model is unknown.
    """
    pricing = get_pricing(provider, model)
    return (input_tokens * pricing.input + output_tokens * pricing.output) / 1_000_000
