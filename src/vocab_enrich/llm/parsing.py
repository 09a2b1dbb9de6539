"""Tolerant JSON extraction from model output."""

from __future__ import annotations

import json
import re
from typing import Any

_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


def strip_code_fence(content: str) -> str:
    """Remove a surrounding ```json ... ``` (or bare ```) block."""
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


def parse_json_response(content: str) -> Any:
    """Parse JSON from model output.

    Handles:
    - Markdown code blocks (```json ... ```)
    - Prose around the JSON value (extracts the outermost object or array)
    - Trailing commas

    Args:
        content: Raw response content.

    Returns:
        Parsed JSON value (dict or list).

    Raises:
        ValueError: If no JSON value can be recovered.
    """
    if not content or not isinstance(content, str):
        raise ValueError("empty or non-string content")

    content = strip_code_fence(content)

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        error = e

    # Try the outermost array first when it encloses the first object
    candidates = []
    for open_char, close_char in (("[", "]"), ("{", "}")):
        start = content.find(open_char)
        end = content.rfind(close_char) + 1
        if start >= 0 and end > start:
            candidates.append((start, content[start:end]))
    candidates.sort(key=lambda item: item[0])

    for _, snippet in candidates:
        try:
            return json.loads(_TRAILING_COMMA.sub(r"\1", snippet))
        except json.JSONDecodeError:
            continue

    raise ValueError(f"Failed to parse JSON: {error}. Content preview: {content[:200]}")
