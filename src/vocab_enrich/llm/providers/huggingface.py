"""Hugging Face Inference API provider (raw-text completion)."""

from __future__ import annotations

import os

import requests

from vocab_enrich.constants.llm_config import (
    DEFAULT_MODEL_HUGGINGFACE,
    DEFAULT_TEMPERATURE,
    HUGGINGFACE_API_URL,
    SINGLE_MAX_TOKENS,
    SINGLE_TIMEOUT_SECONDS,
)
from vocab_enrich.errors import BackendMisconfigured
from vocab_enrich.llm.adapters import extract_text
from vocab_enrich.llm.base import LLMProvider, LLMResponse
from vocab_enrich.llm.providers.http import post_json


def build_text_prompt(prompt: str, system: str | None) -> str:
    """Flatten system + user messages into one text-to-text prompt."""
    if system:
        return f"{system}\n\nUser: {prompt}\n\nAssistant:"
    return f"User: {prompt}\n\nAssistant:"


class HuggingFaceProvider(LLMProvider):
    """Hugging Face text-generation provider.

    The Inference API has no chat roles, so the system instruction is
    prepended to the prompt and the reply is a raw generated_text.

    Args:
        api_key: API token. If not provided, reads from HUGGINGFACE_API_KEY env var.
        model: Hub model id.
        temperature: Temperature for sampling.
        session: Optional requests session.
    """

    name = "Hugging Face"

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL_HUGGINGFACE,
        temperature: float = DEFAULT_TEMPERATURE,
        session: requests.Session | None = None,
    ):
        self.api_key = api_key or os.environ.get("HUGGINGFACE_API_KEY")
        if not self.api_key:
            raise BackendMisconfigured(
                "Hugging Face API key not configured. Please add HUGGINGFACE_API_KEY "
                "to your .env file."
            )

        self.model = model
        self.temperature = temperature
        self.url = HUGGINGFACE_API_URL.format(model=model)
        self.session = session or requests.Session()

    def complete(
        self,
        prompt: str,
        *,
        system: str | None = None,
        timeout: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        body = {
            "inputs": build_text_prompt(prompt, system),
            "parameters": {
                "max_new_tokens": max_tokens or SINGLE_MAX_TOKENS,
                "temperature": self.temperature,
                "return_full_text": False,
            },
        }
        payload = post_json(
            self.session,
            self.url,
            body,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
            timeout=timeout or SINGLE_TIMEOUT_SECONDS,
            service_name=f"{self.name} (check your API key and model availability)",
        )
        return LLMResponse(content=extract_text(payload), model=self.model)
