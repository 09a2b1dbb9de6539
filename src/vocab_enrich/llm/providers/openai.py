"""OpenAI provider implementation (cloud backend)."""

import os

from openai import APIError, OpenAI

from vocab_enrich.constants.llm_config import (
    DEFAULT_MODEL_OPENAI,
    DEFAULT_TEMPERATURE,
    SINGLE_MAX_TOKENS,
    SINGLE_TIMEOUT_SECONDS,
)
from vocab_enrich.constants.llm_pricing import estimate_cost
from vocab_enrich.errors import BackendMisconfigured, BackendUnavailable
from vocab_enrich.llm.base import LLMProvider, LLMResponse


class OpenAIProvider(LLMProvider):
    """OpenAI chat completions provider.

    Args:
        api_key: OpenAI API key. If not provided, reads from OPENAI_API_KEY env var.
        model: Model to use. Defaults to gpt-4o-mini.
        temperature: Temperature for sampling.
    """

    name = "OpenAI"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL_OPENAI,
        temperature: float = DEFAULT_TEMPERATURE,
    ):
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        if not self.api_key:
            raise BackendMisconfigured(
                "OPENAI_API_KEY not configured. Add it to your .env file "
                "or set ENRICH_BACKEND=local or ENRICH_BACKEND=huggingface."
            )

        self.model = model
        self.temperature = temperature
        self.client = OpenAI(api_key=self.api_key)

    def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        timeout: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=max_tokens or SINGLE_MAX_TOKENS,
                timeout=timeout or SINGLE_TIMEOUT_SECONDS,
            )
        except APIError as exc:
            raise BackendUnavailable(f"OpenAI request failed: {exc}") from exc

        content = response.choices[0].message.content or ""
        input_tokens = response.usage.prompt_tokens if response.usage else 0
        output_tokens = response.usage.completion_tokens if response.usage else 0

        return LLMResponse(
            content=content,
            model=response.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=self.estimate_cost(input_tokens, output_tokens),
        )

    def estimate_cost(self, input_tokens: int, output_tokens: int) -> float:
        try:
            return estimate_cost("openai", self.model, input_tokens, output_tokens)
        except KeyError:
            # Unknown model: return 0
            return 0.0
