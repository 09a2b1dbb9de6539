"""Entry points used by the HTTP API and the CLI."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from vocab_enrich.enrichment.merger import SourceMerger
from vocab_enrich.enrichment.models import (
    BatchProgress,
    BatchReport,
    MergedEvidence,
    StructuredRecord,
)
from vocab_enrich.enrichment.orchestrator import BatchOrchestrator
from vocab_enrich.enrichment.rate_limiter import RateLimiter
from vocab_enrich.enrichment.structuring import StructuringAgent
from vocab_enrich.errors import MissingPartOfSpeech, NoSourceMatch, RateLimitExceeded

if TYPE_CHECKING:
    from vocab_enrich.storage.backends import VocabularyStore

logger = logging.getLogger(__name__)

AI_PROCESSING_SUFFIX = " + AI Processing"


@dataclass(frozen=True)
class EnrichmentResult:
    """Single-word enrichment result."""

    record: StructuredRecord
    source: str
    evidence: MergedEvidence

    def to_dict(self) -> dict[str, Any]:
        return {"success": True, "data": self.record.to_dict(), "source": self.source}


class EnrichmentService:
    """Wires lookup, structuring, rate limiting and the store together.

    Args:
        merger: Multi-source lookup.
        agent: Structuring agent.
        rate_limiter: Limiter for the single-word entry point (None disables it).
        store: Store reconciled by batch runs (None: batch runs write nothing).
        batch_options: Extra BatchOrchestrator keyword arguments
            (chunk_size, word_delay, chunk_delay, sleep, delete_unenriched).
    """

    def __init__(
        self,
        merger: SourceMerger,
        agent: StructuringAgent,
        *,
        rate_limiter: RateLimiter | None = None,
        store: VocabularyStore | None = None,
        batch_options: dict[str, Any] | None = None,
    ):
        self.merger = merger
        self.agent = agent
        self.rate_limiter = rate_limiter
        self.store = store
        self.batch_options = dict(batch_options or {})

    def enrich_word(self, word: str, client_id: str = "unknown") -> EnrichmentResult:
        """Look up and structure one word.

        Raises:
            RateLimitExceeded: If client_id used up its request budget.
            ValueError: If word is blank.
            NoSourceMatch: If no source knows the word.
            MissingPartOfSpeech: If the result has no part of speech.
            BackendMisconfigured: If no structuring backend is configured.
            BackendUnavailable: If the structuring backend failed.
        """
        if self.rate_limiter is not None:
            decision = self.rate_limiter.check(client_id)
            if not decision.allowed:
                retry_after = decision.retry_after(self.rate_limiter.clock())
                logger.warning(f"Rate limit exceeded for {client_id}")
                raise RateLimitExceeded(client_id, retry_after, decision.limit, decision.reset_time)

        word = (word or "").strip()
        if not word:
            raise ValueError("Word is required")

        evidence = self.merger.lookup(word)
        if evidence is None:
            raise NoSourceMatch(word)

        outcome = self.agent.structure_outcome(evidence)
        if not outcome.record.is_complete:
            raise MissingPartOfSpeech(word)
        source = evidence.source_name
        if outcome.used_backend:
            source += AI_PROCESSING_SUFFIX
        return EnrichmentResult(record=outcome.record, source=source, evidence=evidence)

    def _orchestrator(
        self,
        on_progress: Callable[[BatchProgress], None] | None,
        cancel_event: threading.Event | None,
    ) -> BatchOrchestrator:
        return BatchOrchestrator(
            self.merger,
            self.agent,
            self.store,
            on_progress=on_progress,
            cancel_event=cancel_event,
            **self.batch_options,
        )

    def enrich_batch(
        self,
        words: Iterable[str],
        *,
        on_progress: Callable[[BatchProgress], None] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> BatchReport:
        """Enrich many words in chunks (not rate limited)."""
        words = [w for w in words if isinstance(w, str) and w.strip()]
        if not words:
            raise ValueError("Words array is required")
        return self._orchestrator(on_progress, cancel_event).run(words)

    def fill_incomplete(
        self,
        *,
        on_progress: Callable[[BatchProgress], None] | None = None,
        cancel_event: threading.Event | None = None,
    ) -> BatchReport:
        """Enrich every store record still missing a definition."""
        return self._orchestrator(on_progress, cancel_event).run_incomplete()
