"""Base types and abstract classes for structuring backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from vocab_enrich.constants.llm_config import (
    BACKEND_ANTHROPIC,
    BACKEND_HUGGINGFACE,
    BACKEND_LOCAL,
    BACKEND_OPENAI,
    DEFAULT_MODEL_ANTHROPIC,
    DEFAULT_MODEL_HUGGINGFACE,
    DEFAULT_MODEL_LOCAL,
    DEFAULT_MODEL_OPENAI,
)


@dataclass
class LLMResponse:
    """Normalized response from any structuring backend.

    Attributes:
        content: The text content of the response.
        model: The model used for generation.
        input_tokens: Number of input tokens (0 when the backend does not report usage).
        output_tokens: Number of output tokens.
        cost_usd: Estimated cost in USD.
    """

    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0

    @property
    def total_tokens(self) -> int:
        """Total tokens used (input + output)."""
        return self.input_tokens + self.output_tokens


class LLMProvider(ABC):
    """Abstract base class for structuring backends.

    A provider is selected once from configuration and injected into the
    StructuringAgent. Implementations must:
    - fail at construction with BackendMisconfigured when credentials or
      endpoint are missing
    - raise BackendUnavailable for HTTP errors and timeouts
    - never retry on their own
    """

    name: str = ""
    model: str = ""

    @abstractmethod
    def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        timeout: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Execute a completion request.

        Args:
            prompt: The user payload.
            system: Optional system instruction.
            timeout: Request timeout in seconds.
            max_tokens: Upper bound on generated tokens.

        Returns:
            LLMResponse with the completion text.

        Raises:
            BackendUnavailable: On transport failures, HTTP errors or timeouts.
        """

    def estimate_cost(self, input_tokens: int, output_tokens: int) -> float:
        """Estimate cost for given token counts. Unbilled backends return 0."""
        return 0.0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model={self.model!r})"


# Default models for each backend
DEFAULT_MODELS = {
    BACKEND_OPENAI: DEFAULT_MODEL_OPENAI,
    BACKEND_ANTHROPIC: DEFAULT_MODEL_ANTHROPIC,
    BACKEND_HUGGINGFACE: DEFAULT_MODEL_HUGGINGFACE,
    BACKEND_LOCAL: DEFAULT_MODEL_LOCAL,
}


def get_provider(provider_name: str, model: str | None = None, **kwargs) -> LLMProvider:
    """Factory function to get a structuring backend.

    Args:
        provider_name: One of "openai", "anthropic", "huggingface", "local".
        model: Optional model name. Uses the backend default if not specified.
        **kwargs: Additional provider-specific arguments (api_key, base_url, ...).

    Returns:
        Configured LLMProvider instance.

    Raises:
        ValueError: If provider_name is unknown.
        BackendMisconfigured: If the backend lacks credentials.

    Examples:
        >>> provider = get_provider("local", base_url="http://localhost:1234/v1/chat/completions")
        >>> provider = get_provider("openai", "gpt-4o-mini")
    """
    # Import here to avoid circular imports
    from vocab_enrich.llm.providers.anthropic import AnthropicProvider
    from vocab_enrich.llm.providers.huggingface import HuggingFaceProvider
    from vocab_enrich.llm.providers.local import LocalProvider
    from vocab_enrich.llm.providers.openai import OpenAIProvider

    providers = {
        BACKEND_OPENAI: OpenAIProvider,
        BACKEND_ANTHROPIC: AnthropicProvider,
        BACKEND_HUGGINGFACE: HuggingFaceProvider,
        BACKEND_LOCAL: LocalProvider,
    }

    if provider_name not in providers:
        raise ValueError(
            f"Unknown provider: {provider_name}. Available: {list(providers.keys())}"
        )

    provider_class = providers[provider_name]
    model = model or DEFAULT_MODELS.get(provider_name)

    return provider_class(model=model, **kwargs)
