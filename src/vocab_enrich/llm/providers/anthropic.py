"""Anthropic provider implementation (cloud backend)."""

import os

from anthropic import Anthropic, APIError

from vocab_enrich.constants.llm_config import (
    DEFAULT_MODEL_ANTHROPIC,
    DEFAULT_TEMPERATURE,
    SINGLE_MAX_TOKENS,
    SINGLE_TIMEOUT_SECONDS,
)
from vocab_enrich.constants.llm_pricing import estimate_cost
from vocab_enrich.errors import BackendMisconfigured, BackendUnavailable
from vocab_enrich.llm.base import LLMProvider, LLMResponse


class AnthropicProvider(LLMProvider):
    """Anthropic messages API provider.

    Args:
        api_key: Anthropic API key. If not provided, reads from ANTHROPIC_API_KEY env var.
        model: Model to use. Defaults to claude-3-5-haiku.
        temperature: Temperature for sampling.
    """

    name = "Anthropic"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL_ANTHROPIC,
        temperature: float = DEFAULT_TEMPERATURE,
    ):
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not self.api_key:
            raise BackendMisconfigured(
                "ANTHROPIC_API_KEY not configured. Add it to your .env file "
                "or choose another ENRICH_BACKEND."
            )

        self.model = model
        self.temperature = temperature
        self.client = Anthropic(api_key=self.api_key)

    def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        timeout: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        kwargs = {}
        if system:
            kwargs["system"] = system

        try:
            response = self.client.messages.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.temperature,
                max_tokens=max_tokens or SINGLE_MAX_TOKENS,
                timeout=timeout or SINGLE_TIMEOUT_SECONDS,
                **kwargs,
            )
        except APIError as exc:
            raise BackendUnavailable(f"Anthropic request failed: {exc}") from exc

        content = response.content[0].text if response.content else ""
        input_tokens = response.usage.input_tokens
        output_tokens = response.usage.output_tokens

        return LLMResponse(
            content=content,
            model=response.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=self.estimate_cost(input_tokens, output_tokens),
        )

    def estimate_cost(self, input_tokens: int, output_tokens: int) -> float:
        try:
            return estimate_cost("anthropic", self.model, input_tokens, output_tokens)
        except KeyError:
            return 0.0
