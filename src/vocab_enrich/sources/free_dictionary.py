"""Free Dictionary API source (api.dictionaryapi.dev, JSON)."""

from __future__ import annotations

import logging
from typing import Any

from vocab_enrich.constants.defaults import MAX_SYNONYMS
from vocab_enrich.sources.base import HTTPSourceClient, LexicalEntry, clean_text

logger = logging.getLogger(__name__)


def parse_payload(word: str, payload: Any, source_name: str) -> LexicalEntry:
    """Build an entry from the API's JSON payload.

    The API answers with a list of entries; only the first meaning of the
    first entry is used. Anything that does not have that shape is treated
    as not found, and so is a first meaning without a definition.
    """
    if not isinstance(payload, list) or not payload or not isinstance(payload[0], dict):
        return LexicalEntry.not_found(word, source_name)

    entry = payload[0]
    meanings = entry.get("meanings") or []
    if not meanings or not isinstance(meanings[0], dict):
        return LexicalEntry.not_found(word, source_name)

    meaning = meanings[0]
    definitions = meaning.get("definitions") or []
    first = definitions[0] if definitions and isinstance(definitions[0], dict) else {}
    definition = clean_text(first.get("definition"))
    if not definition:
        return LexicalEntry.not_found(word, source_name)

    example = clean_text(first.get("example"))
    synonyms = [s for s in (first.get("synonyms") or meaning.get("synonyms") or []) if s]

    pronunciation = clean_text(entry.get("phonetic"))
    if not pronunciation:
        for phonetic in entry.get("phonetics") or []:
            text = clean_text(phonetic.get("text")) if isinstance(phonetic, dict) else ""
            if text:
                pronunciation = text
                break

    return LexicalEntry(
        word=word,
        found=True,
        source_name=source_name,
        part_of_speech=clean_text(meaning.get("partOfSpeech")) or None,
        primary_definition=definition,
        examples=(example,) if example else (),
        pronunciation=pronunciation.strip("/") or None,
        synonyms=tuple(synonyms[:MAX_SYNONYMS]),
    )


class FreeDictionarySource(HTTPSourceClient):
    """Queries the free dictionary JSON API."""

    name = "Free Dictionary API"
    url_template = "https://api.dictionaryapi.dev/api/v2/entries/en/{word}"

    def fetch(self, word: str) -> LexicalEntry:
        response = self.get(word)
        if response is None:
            return LexicalEntry.not_found(word, self.name)

        try:
            payload = response.json()
        except ValueError:
            logger.warning(f"{self.name} returned a non-JSON body for word: {word}")
            return LexicalEntry.not_found(word, self.name)

        return parse_payload(word, payload, self.name)
