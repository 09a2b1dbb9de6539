"""Definition quality scoring.

Scrapers often return grammatical form-change definitions ("past simple of
vet") that are correct but useless for a learner. The score prefers longer,
descriptive prose.
"""

from __future__ import annotations

import re

from vocab_enrich.enrichment.models import ScoredEntry
from vocab_enrich.sources.base import LexicalEntry

BASE_SCORE = 50
FORM_CHANGE_PENALTY = 40
SHORT_PENALTY = 15  # fewer than SHORT_WORD_COUNT words
SHORT_WORD_COUNT = 3

# (minimum word count, bonus); bonuses accumulate
LENGTH_BONUSES = ((5, 15), (10, 10), (15, 5))

INFINITIVE_BONUS = 5
RELATIVE_PRONOUN_BONUS = 5
TERMINOLOGY_BONUS = 10

FORM_CHANGE_PATTERNS = [
    re.compile(
        r"^(the\s+)?(past\s+(simple|tense|participle)|present\s+participle|third\s+person"
        r"|plural|comparative|superlative)\s+(of|form\s+of)\s+",
        re.IGNORECASE,
    ),
    re.compile(r"^past\s+simple:", re.IGNORECASE),
    re.compile(r"^past\s+participle:", re.IGNORECASE),
    re.compile(r"^present\s+participle:", re.IGNORECASE),
    re.compile(r"^gerund\s+of\s+", re.IGNORECASE),
    re.compile(r"^third-person\s+singular\s+simple\s+present\s+of\s+", re.IGNORECASE),
    re.compile(r"^simple\s+past\s+(tense\s+)?(and|&)\s+past\s+participle\s+of\s+", re.IGNORECASE),
    re.compile(r"^plural\s+of\s+", re.IGNORECASE),
    re.compile(r"^comparative\s+form\s+of\s+", re.IGNORECASE),
    re.compile(r"^superlative\s+form\s+of\s+", re.IGNORECASE),
    re.compile(r"^\w+\s+form\s+of\s+\w+\.?$", re.IGNORECASE),
]

_INFINITIVE = re.compile(r"\bto\s+\w+", re.IGNORECASE)
_RELATIVE_PRONOUN = re.compile(r"\b(that|which|who)\b", re.IGNORECASE)
_TERMINOLOGY = re.compile(
    r"\b(examination|investigation|analysis|process|method|action)", re.IGNORECASE
)


def is_form_change_definition(definition: str | None) -> bool:
    """Check whether a definition only states a grammatical form change."""
    if not definition:
        return False
    text = definition.strip()
    return any(pattern.search(text) for pattern in FORM_CHANGE_PATTERNS)


def score_definition_quality(definition: str | None) -> int:
    """Score a definition for descriptiveness.

    Args:
        definition: Definition text.

    Returns:
        Integer score in [0, 100]; empty text scores 0.
    """
    if not definition or not definition.strip():
        return 0

    score = BASE_SCORE

    if is_form_change_definition(definition):
        score -= FORM_CHANGE_PENALTY

    word_count = len(definition.split())
    for min_words, bonus in LENGTH_BONUSES:
        if word_count >= min_words:
            score += bonus
    if word_count < SHORT_WORD_COUNT:
        score -= SHORT_PENALTY

    if _INFINITIVE.search(definition):
        score += INFINITIVE_BONUS
    if _RELATIVE_PRONOUN.search(definition):
        score += RELATIVE_PRONOUN_BONUS
    if _TERMINOLOGY.search(definition):
        score += TERMINOLOGY_BONUS

    return max(0, min(100, score))


def score_entry(entry: LexicalEntry) -> ScoredEntry:
    definition = entry.primary_definition or ""
    return ScoredEntry(
        entry=entry,
        score=score_definition_quality(definition),
        is_form_change=is_form_change_definition(definition),
    )
