"""Shared JSON-over-HTTP call for the requests-based backends."""

from __future__ import annotations

import logging
from typing import Any

import requests

from vocab_enrich.errors import BackendUnavailable

logger = logging.getLogger(__name__)


def post_json(
    session: requests.Session,
    url: str,
    body: dict[str, Any],
    *,
    headers: dict[str, str] | None = None,
    timeout: float,
    service_name: str,
) -> Any:
    """POST a JSON body and return the decoded JSON reply.

    Raises:
        BackendUnavailable: On connection errors, timeouts, non-2xx status
            or a body that is not JSON.
    """
    try:
        response = session.post(url, json=body, headers=headers, timeout=timeout)
    except requests.Timeout as exc:
        raise BackendUnavailable(f"{service_name} timed out after {timeout}s") from exc
    except requests.RequestException as exc:
        raise BackendUnavailable(f"{service_name} request failed: {exc}") from exc

    if not response.ok:
        logger.error(f"{service_name} error {response.status_code}: {response.text[:200]}")
        raise BackendUnavailable(
            f"Failed to process dictionary data with {service_name} (HTTP {response.status_code})"
        )

    try:
        return response.json()
    except ValueError as exc:
        raise BackendUnavailable(f"{service_name} returned a non-JSON body") from exc
