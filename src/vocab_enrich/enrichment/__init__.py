"""Lookup, merging, structuring and batch orchestration."""

from vocab_enrich.enrichment.merger import SourceMerger, merge_entries
from vocab_enrich.enrichment.models import (
    BackendUsage,
    BatchProgress,
    BatchReport,
    MergedEvidence,
    StructuredRecord,
    StructuringOutcome,
)
from vocab_enrich.enrichment.orchestrator import BatchOrchestrator, BatchState, iter_chunks
from vocab_enrich.enrichment.rate_limiter import RateLimitDecision, RateLimiter
from vocab_enrich.enrichment.scoring import is_form_change_definition, score_definition_quality
from vocab_enrich.enrichment.service import EnrichmentResult, EnrichmentService
from vocab_enrich.enrichment.structuring import StructuringAgent

__all__ = [
    "BackendUsage",
    "BatchOrchestrator",
    "BatchProgress",
    "BatchReport",
    "BatchState",
    "EnrichmentResult",
    "EnrichmentService",
    "MergedEvidence",
    "RateLimitDecision",
    "RateLimiter",
    "SourceMerger",
    "StructuredRecord",
    "StructuringAgent",
    "StructuringOutcome",
    "is_form_change_definition",
    "iter_chunks",
    "merge_entries",
    "score_definition_quality",
]
