"""Local inference provider (OpenAI-compatible chat endpoint).

Works with LM Studio, llama.cpp server and Ollama's /v1 compatibility
layer. No credentials are required.
"""

from __future__ import annotations

import logging

import requests

from vocab_enrich.constants.llm_config import (
    DEFAULT_LOCAL_URL,
    DEFAULT_MODEL_LOCAL,
    DEFAULT_TEMPERATURE,
    SINGLE_MAX_TOKENS,
    SINGLE_TIMEOUT_SECONDS,
)
from vocab_enrich.llm.adapters import extract_text, extract_usage
from vocab_enrich.llm.base import LLMProvider, LLMResponse
from vocab_enrich.llm.providers.http import post_json

logger = logging.getLogger(__name__)


class LocalProvider(LLMProvider):
    """Provider for a locally hosted chat completions endpoint.

    Args:
        base_url: Full chat completions URL. Defaults to LM Studio's.
        model: Model identifier passed through to the server.
        temperature: Temperature for sampling.
        session: Optional requests session (for connection reuse and tests).
    """

    name = "Local LLM"

    def __init__(
        self,
        base_url: str | None = None,
        model: str = DEFAULT_MODEL_LOCAL,
        temperature: float = DEFAULT_TEMPERATURE,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url or DEFAULT_LOCAL_URL
        self.model = model
        self.temperature = temperature
        self.session = session or requests.Session()

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

        body = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": max_tokens or SINGLE_MAX_TOKENS,
        }
        logger.debug(f"Sending request to local backend at {self.base_url}")
        payload = post_json(
            self.session,
            self.base_url,
            body,
            headers={"Content-Type": "application/json"},
            timeout=timeout or SINGLE_TIMEOUT_SECONDS,
            service_name=f"{self.name} (is the server running?)",
        )

        input_tokens, output_tokens = extract_usage(payload)
        return LLMResponse(
            content=extract_text(payload),
            model=self.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
