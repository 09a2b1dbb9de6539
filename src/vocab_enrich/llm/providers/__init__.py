"""Structuring backend implementations."""

from vocab_enrich.llm.providers.anthropic import AnthropicProvider
from vocab_enrich.llm.providers.huggingface import HuggingFaceProvider
from vocab_enrich.llm.providers.local import LocalProvider
from vocab_enrich.llm.providers.openai import OpenAIProvider

__all__ = [
    "OpenAIProvider",
    "AnthropicProvider",
    "HuggingFaceProvider",
    "LocalProvider",
]
