"""Exception types raised across the enrichment pipeline."""

from __future__ import annotations


class EnrichmentError(Exception):
    """Base class for enrichment pipeline errors."""


class SourceUnavailable(EnrichmentError):
    """A lexical source timed out or answered with a non-success status."""

    def __init__(self, source_name: str, message: str):
        super().__init__(f"{source_name}: {message}")
        self.source_name = source_name


class NoSourceMatch(EnrichmentError):
    """No lexical source returned a usable definition for a word."""

    def __init__(self, word: str):
        super().__init__(f'Word "{word}" was not found in any dictionary source.')
        self.word = word


class MissingPartOfSpeech(NoSourceMatch):
    """Sources define the word but none of them gives its part of speech."""

    def __init__(self, word: str):
        EnrichmentError.__init__(
            self, f'No part of speech found for "{word}" in any dictionary source.'
        )
        self.word = word


class BackendMisconfigured(EnrichmentError, ValueError):
    """The structuring backend has no credentials or endpoint configured."""


class BackendUnavailable(EnrichmentError):
    """The structuring backend failed (HTTP error, timeout, empty reply)."""


class MalformedStructuredOutput(EnrichmentError, ValueError):
    """Backend output failed JSON parsing or required-field validation."""


class RateLimitExceeded(EnrichmentError):
    """A client exhausted its request budget for the current window."""

    def __init__(self, identifier: str, retry_after: int, limit: int, reset_time: float):
        super().__init__(f"Rate limit exceeded. Try again in {retry_after} seconds.")
        self.identifier = identifier
        self.retry_after = retry_after
        self.limit = limit
        self.reset_time = reset_time


class PersistenceFailure(EnrichmentError):
    """A single store operation failed."""


class StoreUnavailable(PersistenceFailure):
    """The store as a whole cannot be reached; batches must stop."""
