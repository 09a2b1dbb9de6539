"""Structuring backend integration.

Provides:
- LLMProvider abstract base class and LLMResponse
- Concrete backends: OpenAI and Anthropic (cloud SDKs), Hugging Face
  (raw-text HTTP) and a local OpenAI-compatible endpoint
- get_provider factory used by configuration
- parse_json_response for tolerant JSON extraction from model output
"""

from vocab_enrich.llm.adapters import extract_text
from vocab_enrich.llm.base import LLMProvider, LLMResponse, get_provider
from vocab_enrich.llm.parsing import parse_json_response

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "extract_text",
    "get_provider",
    "parse_json_response",
]
