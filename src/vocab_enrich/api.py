"""HTTP API: single-word and batch enrichment endpoints."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from vocab_enrich import __version__
from vocab_enrich.enrichment.service import EnrichmentService
from vocab_enrich.errors import (
    BackendMisconfigured,
    BackendUnavailable,
    NoSourceMatch,
    RateLimitExceeded,
)

logger = logging.getLogger(__name__)

CONFIGURATION_HINT = (
    "Set ENRICH_BACKEND and the matching API key (OPENAI_API_KEY, ANTHROPIC_API_KEY, "
    "HUGGINGFACE_API_KEY) or LOCAL_LLM_URL."
)


class WordRequest(BaseModel):
    word: str | None = None


class BatchRequest(BaseModel):
    words: list[str] | None = None


def client_identifier(request: Request) -> str:
    """Identify the caller for rate limiting (proxy headers first)."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client is not None and request.client.host:
        return request.client.host
    return "unknown"


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code, headers=headers)


def create_app(service: EnrichmentService) -> FastAPI:
    """Build the FastAPI application around an EnrichmentService."""
    app = FastAPI(
        title="Vocabulary Enrichment API",
        description="Dictionary lookup and structuring of vocabulary words.",
        version=__version__,
    )
    app.state.service = service

    @app.exception_handler(RequestValidationError)
    def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _error(400, "Invalid request body")

    @app.exception_handler(RateLimitExceeded)
    def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        reset = datetime.fromtimestamp(exc.reset_time, tz=timezone.utc).isoformat()
        headers = {
            "Retry-After": str(exc.retry_after),
            "X-RateLimit-Limit": str(exc.limit),
            "X-RateLimit-Remaining": "0",
            "X-RateLimit-Reset": reset,
        }
        return _error(429, str(exc), headers)

    @app.exception_handler(NoSourceMatch)
    def no_match_handler(request: Request, exc: NoSourceMatch):
        return _error(404, str(exc))

    @app.exception_handler(BackendMisconfigured)
    def misconfigured_handler(request: Request, exc: BackendMisconfigured):
        logger.error(f"Structuring backend misconfigured: {exc}")
        return _error(500, f"{exc} {CONFIGURATION_HINT}")

    @app.exception_handler(BackendUnavailable)
    def unavailable_handler(request: Request, exc: BackendUnavailable):
        logger.error(f"Structuring backend unavailable: {exc}")
        return _error(502, f"AI processing failed: {exc}")

    @app.post("/api/fetch-dictionary")
    def fetch_dictionary(body: WordRequest, request: Request):
        client_id = client_identifier(request)
        try:
            result = service.enrich_word(body.word or "", client_id=client_id)
        except ValueError as exc:
            # BackendMisconfigured is a ValueError too
            if isinstance(exc, BackendMisconfigured):
                raise
            return _error(400, str(exc))
        return result.to_dict()

    @app.post("/api/fetch-dictionary-batch")
    def fetch_dictionary_batch(body: BatchRequest):
        words = [w for w in body.words or [] if w.strip()]
        if not words:
            return _error(400, "Words array is required")
        report = service.enrich_batch(words)
        return {
            "success": report.completed,
            "data": [record.to_dict() for record in report.records],
            "processed": report.processed,
            "total": report.total,
            "failed": report.failed_words,
            "updated": report.updated,
            "deleted": report.deleted,
            "state": report.state,
            "message": report.summary(),
        }

    return app
