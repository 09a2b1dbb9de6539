"""Response-shape normalization for HTTP structuring backends.

Backends answer in one of several JSON shapes:
- chat completions: {"choices": [{"message": {"content": "..."}}]}
- legacy completions: {"choices": [{"text": "..."}]}
- raw-text generation (Hugging Face): [{"generated_text": "..."}] or {"generated_text": "..."}
- Ollama generate: {"response": "..."}
- llama.cpp server: {"content": "..."}

extract_text() is the single place that knows about these shapes.
"""

from __future__ import annotations

from typing import Any


def extract_text(payload: Any) -> str:
    """Extract the generated text from a backend payload.

    Args:
        payload: Decoded JSON body returned by the backend.

    Returns:
        Generated text, or "" when the payload carries none.
    """
    if isinstance(payload, list):
        if not payload:
            return ""
        return extract_text(payload[0])

    if not isinstance(payload, dict):
        return payload if isinstance(payload, str) else ""

    choices = payload.get("choices")
    if isinstance(choices, list) and choices:
        choice = choices[0] or {}
        message = choice.get("message") or {}
        text = message.get("content") if isinstance(message, dict) else None
        if text is None:
            text = choice.get("text")
        return text or ""

    for key in ("generated_text", "response", "content"):
        value = payload.get(key)
        if isinstance(value, str):
            return value

    return ""


def extract_usage(payload: Any) -> tuple[int, int]:
    """Return (input_tokens, output_tokens) when the payload reports usage."""
    if not isinstance(payload, dict):
        return 0, 0
    usage = payload.get("usage") or {}
    if not isinstance(usage, dict):
        return 0, 0
    return int(usage.get("prompt_tokens") or 0), int(usage.get("completion_tokens") or 0)
