"""Lexical source contract and shared HTTP/HTML plumbing."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from urllib.parse import quote

import requests
from bs4 import BeautifulSoup, Tag

from vocab_enrich.constants.defaults import (
    BROWSER_HEADERS,
    CEFR_LEVELS,
    MAX_SOURCE_EXAMPLES,
    SOURCE_TIMEOUT_SECONDS,
)
from vocab_enrich.errors import SourceUnavailable

logger = logging.getLogger(__name__)

_LEVEL_PATTERN = re.compile(r"\b([ABC][12])\b", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class LexicalEntry:
    """Normalized result from one source for one word.

    Attributes:
        word: The word that was looked up.
        found: Whether the source had an entry.
        part_of_speech: e.g. "noun", "verb".
        proficiency_level: CEFR level (A1..C2) or None.
        primary_definition: First definition given by the source.
        examples: Up to two example sentences.
        pronunciation: IPA transcription.
        source_name: Human-readable name of the source.
        synonyms: Up to three synonyms, when the source lists them.
    """

    word: str
    found: bool
    source_name: str
    part_of_speech: str | None = None
    proficiency_level: str | None = None
    primary_definition: str | None = None
    examples: tuple[str, ...] = ()
    pronunciation: str | None = None
    synonyms: tuple[str, ...] = ()

    @classmethod
    def not_found(cls, word: str, source_name: str) -> LexicalEntry:
        return cls(word=word, found=False, source_name=source_name)

    @property
    def has_definition(self) -> bool:
        return self.found and bool(self.primary_definition and self.primary_definition.strip())


def clean_text(text: str | None) -> str:
    """Collapse whitespace and strip."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip()


def extract_level(text: str | None) -> str | None:
    """Find a CEFR level (A1..C2) in free text, upper-cased."""
    if not text:
        return None
    match = _LEVEL_PATTERN.search(text)
    if not match:
        return None
    level = match.group(1).upper()
    return level if level in CEFR_LEVELS else None


class SourceClient(ABC):
    """One external lexical source.

    fetch() returns found=False for words the source does not know and
    raises SourceUnavailable only for transport-level failures. It never
    retries.
    """

    name: str = ""

    @abstractmethod
    def fetch(self, word: str) -> LexicalEntry:
        """Look up one word."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class FirstMatchSource(SourceClient):
    """Queries sources in order and answers with the first one that has a definition.

    A source that is unavailable is skipped. SourceUnavailable is raised only
    when every source failed that way.
    """

    def __init__(self, name: str, sources: list[SourceClient]):
        if not sources:
            raise ValueError("FirstMatchSource needs at least one source")
        self.name = name
        self.sources = sources

    def fetch(self, word: str) -> LexicalEntry:
        errors: list[SourceUnavailable] = []
        for source in self.sources:
            try:
                entry = source.fetch(word)
            except SourceUnavailable as exc:
                logger.warning(f"{source.name} unavailable for '{word}', trying next: {exc}")
                errors.append(exc)
                continue
            if entry.has_definition:
                return entry
        if len(errors) == len(self.sources):
            raise errors[-1]
        return LexicalEntry.not_found(word, self.name)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"


class HTTPSourceClient(SourceClient):
    """Base class for sources reached over HTTP.

    Args:
        timeout: Per-request timeout in seconds.
        session: Optional requests session (shared connection pool, tests).
    """

    url_template: str = ""

    def __init__(
        self,
        timeout: float = SOURCE_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ):
        self.timeout = timeout
        self.session = session or requests.Session()

    def build_url(self, word: str) -> str:
        return self.url_template.format(word=quote(word.lower()))

    def get(self, word: str) -> requests.Response | None:
        """GET the page for a word.

        Returns:
            The response, or None when the source answered 404.

        Raises:
            SourceUnavailable: On timeouts, connection errors and other
                non-success statuses.
        """
        url = self.build_url(word)
        try:
            response = self.session.get(url, headers=BROWSER_HEADERS, timeout=self.timeout)
        except requests.Timeout as exc:
            raise SourceUnavailable(self.name, f"timed out after {self.timeout}s") from exc
        except requests.RequestException as exc:
            raise SourceUnavailable(self.name, f"request failed: {exc}") from exc

        if response.status_code == 404:
            logger.info(f"{self.name} has no entry for word: {word}")
            return None
        if not response.ok:
            raise SourceUnavailable(self.name, f"returned status {response.status_code}")
        return response


class HTMLSourceClient(HTTPSourceClient):
    """Base class for sources that render an HTML dictionary page."""

    def fetch(self, word: str) -> LexicalEntry:
        response = self.get(word)
        if response is None:
            return LexicalEntry.not_found(word, self.name)

        soup = BeautifulSoup(response.text, "html.parser")
        entry = self.parse(word, soup)
        if entry.found and not entry.has_definition:
            logger.debug(f"{self.name} entry for '{word}' has no definition")
            entry = LexicalEntry.not_found(word, self.name)
        if not entry.found:
            logger.info(f"No entry found in {self.name} for word: {word}")
        return entry

    @abstractmethod
    def parse(self, word: str, soup: BeautifulSoup) -> LexicalEntry:
        """Parse a page. Must return not-found when the entry anchor is missing.

        An entry without a definition is turned into not-found by `fetch`.
        """


def select_text(root: Tag | BeautifulSoup, selector: str) -> str:
    """Text of the first element matching selector, or ""."""
    element = root.select_one(selector)
    return clean_text(element.get_text(" ")) if element is not None else ""


def select_examples(root: Tag | BeautifulSoup, selector: str) -> tuple[str, ...]:
    """Up to MAX_SOURCE_EXAMPLES non-empty texts matching selector."""
    examples = []
    for element in root.select(selector):
        text = clean_text(element.get_text(" "))
        if text:
            examples.append(text)
        if len(examples) >= MAX_SOURCE_EXAMPLES:
            break
    return tuple(examples)
