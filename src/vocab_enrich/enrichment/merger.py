"""Multi-source lookup: concurrent fan-out, scoring and merging."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from vocab_enrich.constants.defaults import MAX_MERGED_EXAMPLES
from vocab_enrich.enrichment.models import MergedEvidence, ScoredEntry
from vocab_enrich.enrichment.scoring import score_entry
from vocab_enrich.errors import SourceUnavailable
from vocab_enrich.sources.base import LexicalEntry, SourceClient

logger = logging.getLogger(__name__)


def rank_entries(entries: Sequence[LexicalEntry]) -> list[ScoredEntry]:
    """Score entries with a definition, best first.

    The sort is stable, so equal scores keep the input (registration) order.
    """
    scored = [score_entry(entry) for entry in entries if entry.has_definition]
    scored.sort(key=lambda item: item.score, reverse=True)
    return scored


def merge_entries(word: str, entries: Sequence[LexicalEntry]) -> MergedEvidence | None:
    """Combine source entries into one piece of evidence.

    Args:
        word: The looked-up word.
        entries: Source results in registration order.

    Returns:
        MergedEvidence built on the best-scored entry, or None when no
        entry was found with a non-empty definition.
    """
    ranked = rank_entries(entries)
    if not ranked:
        return None

    for item in ranked:
        logger.debug(
            f"  {item.entry.source_name}: {item.score}/100 "
            f"{'[Form Change]' if item.is_form_change else '[Descriptive]'} "
            f"{item.entry.primary_definition[:100]!r}"
        )

    best = ranked[0]
    base = best.entry
    runners_up = [item.entry for item in ranked[1:]]

    part_of_speech = base.part_of_speech
    level = base.proficiency_level
    pronunciation = base.pronunciation
    synonyms = base.synonyms
    examples = list(dict.fromkeys(base.examples))[:MAX_MERGED_EXAMPLES]

    for other in runners_up:
        part_of_speech = part_of_speech or other.part_of_speech
        level = level or other.proficiency_level
        pronunciation = pronunciation or other.pronunciation
        synonyms = synonyms or other.synonyms
        for example in other.examples:
            if len(examples) >= MAX_MERGED_EXAMPLES:
                break
            if example not in examples:
                examples.append(example)

    sources = (base.source_name, *(other.source_name for other in runners_up))
    source_name = base.source_name
    if len(sources) > 1:
        source_name = f"{base.source_name} (+ {', '.join(sources[1:])})"

    return MergedEvidence(
        word=word,
        primary_definition=base.primary_definition.strip(),
        source_name=source_name,
        sources=sources,
        score=best.score,
        part_of_speech=part_of_speech,
        proficiency_level=level,
        examples=tuple(examples),
        pronunciation=pronunciation,
        synonyms=synonyms,
    )


class SourceMerger:
    """Queries every source for a word and merges the results.

    Args:
        sources: Source clients in priority order. The first registered
            source wins score ties.
    """

    def __init__(self, sources: Sequence[SourceClient]):
        if not sources:
            raise ValueError("SourceMerger needs at least one source")
        self.sources = list(sources)

    def _fetch_one(self, source: SourceClient, word: str) -> LexicalEntry:
        try:
            return source.fetch(word)
        except SourceUnavailable as exc:
            logger.warning(f"Source unavailable for '{word}': {exc}")
        except Exception:
            logger.exception(f"{source.name} failed while looking up '{word}'")
        return LexicalEntry.not_found(word, source.name)

    def gather(self, word: str) -> list[LexicalEntry]:
        """Fetch the word from all sources concurrently.

        Waits for every source to settle. A failing source yields a
        not-found entry and does not affect the others.

        Returns:
            One entry per source, in registration order.
        """
        with ThreadPoolExecutor(max_workers=len(self.sources)) as executor:
            futures = [executor.submit(self._fetch_one, source, word) for source in self.sources]
            return [future.result() for future in futures]

    def merge(self, word: str, entries: Sequence[LexicalEntry]) -> MergedEvidence | None:
        return merge_entries(word, entries)

    def lookup(self, word: str) -> MergedEvidence | None:
        """Gather and merge. Returns None when no source knows the word."""
        word = word.strip()
        if not word:
            raise ValueError("word must not be empty")

        logger.info(f"Searching {len(self.sources)} sources for: {word}")
        evidence = self.merge(word, self.gather(word))
        if evidence is None:
            logger.info(f"Not found in any source: {word}")
        else:
            logger.info(f"Best definition for '{word}' from {evidence.source_name}")
        return evidence
