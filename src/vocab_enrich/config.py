"""Runtime configuration read from environment variables.

Call `load_dotenv()` before `EnrichmentSettings.from_env()` to pick up a
local .env file (the CLI does this).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from vocab_enrich.constants.defaults import (
    BATCH_CHUNK_SIZE,
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_SECONDS,
    SOURCE_TIMEOUT_SECONDS,
)
from vocab_enrich.constants.llm_config import (
    BACKEND_ANTHROPIC,
    BACKEND_HUGGINGFACE,
    BACKEND_LOCAL,
    BACKEND_OPENAI,
    DEFAULT_BACKEND,
    DEFAULT_LOCAL_URL,
)
from vocab_enrich.enrichment.merger import SourceMerger
from vocab_enrich.enrichment.rate_limiter import RateLimiter
from vocab_enrich.enrichment.service import EnrichmentService
from vocab_enrich.enrichment.structuring import StructuringAgent
from vocab_enrich.errors import BackendMisconfigured
from vocab_enrich.llm.base import DEFAULT_MODELS, LLMProvider, get_provider
from vocab_enrich.sources import default_sources
from vocab_enrich.storage.backends import CSVStore, VocabularyStore

logger = logging.getLogger(__name__)

BACKENDS = (BACKEND_OPENAI, BACKEND_ANTHROPIC, BACKEND_HUGGINGFACE, BACKEND_LOCAL)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _flag(env: Mapping[str, str], name: str) -> bool:
    return env.get(name, "").strip().lower() in _TRUE_VALUES


def _number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _resolve_backend(env: Mapping[str, str]) -> str:
    backend = env.get("ENRICH_BACKEND", "").strip().lower()
    if backend:
        if backend not in BACKENDS:
            raise ValueError(f"Unknown ENRICH_BACKEND: {backend}. Available: {list(BACKENDS)}")
        return backend
    # Legacy switches, Hugging Face first
    if _flag(env, "USE_HUGGINGFACE"):
        return BACKEND_HUGGINGFACE
    if _flag(env, "USE_LM_STUDIO"):
        return BACKEND_LOCAL
    return DEFAULT_BACKEND


@dataclass
class EnrichmentSettings:
    """All tunables of the service in one place."""

    backend: str = DEFAULT_BACKEND
    openai_api_key: str | None = None
    openai_model: str | None = None
    anthropic_api_key: str | None = None
    anthropic_model: str | None = None
    huggingface_api_key: str | None = None
    huggingface_model: str | None = None
    local_llm_url: str = DEFAULT_LOCAL_URL
    local_llm_model: str | None = None
    rate_limit_max_requests: int = RATE_LIMIT_MAX_REQUESTS
    rate_limit_window_seconds: float = RATE_LIMIT_WINDOW_SECONDS
    batch_chunk_size: int = BATCH_CHUNK_SIZE
    source_timeout_seconds: float = SOURCE_TIMEOUT_SECONDS
    store_path: Path | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> EnrichmentSettings:
        """Build settings from environment variables (os.environ by default).

        Raises:
            ValueError: On an unknown backend name or a non-numeric limit.
        """
        env = os.environ if environ is None else environ
        store_path = env.get("VOCAB_STORE_PATH", "").strip()
        return cls(
            backend=_resolve_backend(env),
            openai_api_key=env.get("OPENAI_API_KEY") or None,
            openai_model=env.get("OPENAI_MODEL") or None,
            anthropic_api_key=env.get("ANTHROPIC_API_KEY") or None,
            anthropic_model=env.get("ANTHROPIC_MODEL") or None,
            huggingface_api_key=env.get("HUGGINGFACE_API_KEY") or None,
            huggingface_model=env.get("HUGGINGFACE_MODEL") or None,
            local_llm_url=(
                env.get("LOCAL_LLM_URL") or env.get("LM_STUDIO_URL") or DEFAULT_LOCAL_URL
            ),
            local_llm_model=env.get("LOCAL_LLM_MODEL") or env.get("LM_STUDIO_MODEL") or None,
            rate_limit_max_requests=_number(
                env, "RATE_LIMIT_MAX_REQUESTS", RATE_LIMIT_MAX_REQUESTS, int
            ),
            rate_limit_window_seconds=_number(
                env, "RATE_LIMIT_WINDOW_SECONDS", RATE_LIMIT_WINDOW_SECONDS, float
            ),
            batch_chunk_size=_number(env, "BATCH_CHUNK_SIZE", BATCH_CHUNK_SIZE, int),
            source_timeout_seconds=_number(
                env, "SOURCE_TIMEOUT_SECONDS", SOURCE_TIMEOUT_SECONDS, float
            ),
            store_path=Path(store_path) if store_path else None,
        )

    @property
    def model(self) -> str:
        """Model name for the selected backend."""
        configured = {
            BACKEND_OPENAI: self.openai_model,
            BACKEND_ANTHROPIC: self.anthropic_model,
            BACKEND_HUGGINGFACE: self.huggingface_model,
            BACKEND_LOCAL: self.local_llm_model,
        }[self.backend]
        return configured or DEFAULT_MODELS[self.backend]


def build_provider(settings: EnrichmentSettings) -> LLMProvider:
    """Instantiate the configured structuring backend.

    Raises:
        BackendMisconfigured: If the backend lacks its API key.
    """
    if settings.backend == BACKEND_LOCAL:
        return get_provider(BACKEND_LOCAL, settings.model, base_url=settings.local_llm_url)
    api_key = {
        BACKEND_OPENAI: settings.openai_api_key,
        BACKEND_ANTHROPIC: settings.anthropic_api_key,
        BACKEND_HUGGINGFACE: settings.huggingface_api_key,
    }[settings.backend]
    return get_provider(settings.backend, settings.model, api_key=api_key)


def build_agent(settings: EnrichmentSettings) -> StructuringAgent:
    """Structuring agent for the configured backend.

    A misconfigured backend does not fail here: the agent is created without
    a provider and reports the problem when the single-word path needs it.
    """
    try:
        provider = build_provider(settings)
    except BackendMisconfigured as exc:
        logger.warning(f"Structuring backend '{settings.backend}' unavailable: {exc}")
        return StructuringAgent(None, misconfiguration=str(exc))
    logger.info(f"Using {provider.name} ({provider.model}) for structuring")
    return StructuringAgent(provider)


def build_store(settings: EnrichmentSettings) -> VocabularyStore | None:
    if settings.store_path is None:
        return None
    return CSVStore(settings.store_path)


def build_service(
    settings: EnrichmentSettings,
    store: VocabularyStore | None = None,
) -> EnrichmentService:
    """Wire sources, merger, agent, rate limiter and store from settings."""
    merger = SourceMerger(default_sources(timeout=settings.source_timeout_seconds))
    limiter = RateLimiter(
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    return EnrichmentService(
        merger,
        build_agent(settings),
        rate_limiter=limiter,
        store=store if store is not None else build_store(settings),
        batch_options={"chunk_size": settings.batch_chunk_size},
    )
