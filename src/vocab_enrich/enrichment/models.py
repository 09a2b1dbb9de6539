"""Data contracts passed between enrichment stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from vocab_enrich.constants.defaults import (
    CEFR_LEVELS,
    FAILED_WORDS_LISTING_LIMIT,
    LEVEL_NOT_AVAILABLE,
)
from vocab_enrich.llm.base import LLMResponse
from vocab_enrich.sources.base import LexicalEntry

STATE_COMPLETED = "completed"
STATE_ABORTED = "aborted"


def normalize_level(value: Any) -> str | None:
    """Return an upper-cased CEFR level, or None for anything else."""
    if not isinstance(value, str):
        return None
    level = value.strip().upper()
    return level if level in CEFR_LEVELS else None


@dataclass(frozen=True)
class ScoredEntry:
    """A source entry with its definition quality score."""

    entry: LexicalEntry
    score: int
    is_form_change: bool


@dataclass(frozen=True)
class MergedEvidence:
    """Best entry for a word, gaps back-filled from the other sources."""

    word: str
    primary_definition: str
    source_name: str
    sources: tuple[str, ...]
    score: int
    part_of_speech: str | None = None
    proficiency_level: str | None = None
    examples: tuple[str, ...] = ()
    pronunciation: str | None = None
    synonyms: tuple[str, ...] = ()

    def to_evidence_text(self) -> str:
        """Render the fixed evidence block handed to the structuring backend."""
        lines = [f"Word: {self.word}"]
        if self.pronunciation:
            lines.append(f"Pronunciation: /{self.pronunciation}/")
        if self.part_of_speech:
            lines.append(f"Part of Speech: {self.part_of_speech}")
        if self.proficiency_level:
            lines.append(f"CEFR Level: {self.proficiency_level}")
        lines.append(f"Definition: {self.primary_definition}")
        if self.synonyms:
            lines.append(f"Synonyms: {', '.join(self.synonyms)}")
        if self.examples:
            lines.append("Examples:")
            lines.extend(f"  {i}. {example}" for i, example in enumerate(self.examples, 1))
        lines.append(f"Sources: {self.source_name}")
        return "\n".join(lines)


@dataclass(frozen=True)
class StructuredRecord:
    """Final enrichment result, as persisted and returned.

    All fields are plain strings. An unknown level is LEVEL_NOT_AVAILABLE.
    """

    word: str
    part_of_speech: str
    proficiency_level: str
    primary_definition: str
    usage_example: str

    @property
    def is_complete(self) -> bool:
        """True when both part of speech and definition are present."""
        return bool(self.part_of_speech.strip() and self.primary_definition.strip())

    @classmethod
    def from_evidence(cls, evidence: MergedEvidence) -> StructuredRecord:
        """Deterministic record built from the evidence alone (no AI)."""
        return cls(
            word=evidence.word,
            part_of_speech=(evidence.part_of_speech or "").lower(),
            proficiency_level=evidence.proficiency_level or LEVEL_NOT_AVAILABLE,
            primary_definition=evidence.primary_definition,
            usage_example=evidence.examples[0] if evidence.examples else "",
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "word": self.word,
            "partOfSpeech": self.part_of_speech,
            "proficiencyLevel": self.proficiency_level,
            "primaryDefinition": self.primary_definition,
            "usageExample": self.usage_example,
        }


@dataclass(frozen=True)
class StructuringOutcome:
    """A structured record and whether the backend output was used for it."""

    record: StructuredRecord
    used_backend: bool


@dataclass
class BackendUsage:
    """Token and cost totals of the backend calls made for one run."""

    calls: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def add(self, response: LLMResponse) -> None:
        self.calls += 1
        self.input_tokens += response.input_tokens
        self.output_tokens += response.output_tokens
        self.cost_usd += response.cost_usd


@dataclass
class BatchProgress:
    """Mutable progress counters of one batch run."""

    total: int
    processed: int = 0
    chunk_index: int = 0
    chunk_count: int = 0

    @property
    def fraction(self) -> float:
        return self.processed / self.total if self.total else 1.0


@dataclass
class BatchReport:
    """Aggregate outcome of a batch run (complete or partial)."""

    total: int
    state: str = STATE_COMPLETED
    processed: int = 0
    chunks: int = 0
    updated: int = 0
    deleted: int = 0
    failed_words: list[str] = field(default_factory=list)
    records: list[StructuredRecord] = field(default_factory=list)
    persistence_errors: int = 0
    usage: BackendUsage = field(default_factory=BackendUsage)
    error: str | None = None

    @property
    def completed(self) -> bool:
        return self.state == STATE_COMPLETED

    def summary(self) -> str:
        """User-facing summary: counts, plus the failed words when few."""
        lines = [f"Processed {self.processed}/{self.total} words ({self.state})"]
        lines.append(f"- {self.updated} words found and updated")
        if self.deleted:
            lines.append(f"- {self.deleted} unenrichable words deleted")
        if self.persistence_errors:
            lines.append(f"- {self.persistence_errors} store writes failed")
        if self.usage.calls:
            lines.append(
                f"- {self.usage.calls} backend calls, {self.usage.total_tokens} tokens, "
                f"${self.usage.cost_usd:.4f}"
            )
        if self.failed_words and len(self.failed_words) <= FAILED_WORDS_LISTING_LIMIT:
            lines.append(f"Failed words: {', '.join(self.failed_words)}")
        elif self.failed_words:
            lines.append(f"{len(self.failed_words)} words could not be enriched")
        if self.error:
            lines.append(f"Stopped early: {self.error}")
        return "\n".join(lines)
