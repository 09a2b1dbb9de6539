"""Storage backends for the vocabulary collection."""

from .backends import CSVStore, InMemoryStore, VocabRecord, VocabularyStore

__all__ = [
    "VocabularyStore",
    "VocabRecord",
    "InMemoryStore",
    "CSVStore",
]
