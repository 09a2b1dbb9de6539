"""Storage backends for the vocabulary collection.

The enrichment pipeline treats the store as the system of record and only
needs select-all, insert, update-by-id and delete-by-ids.
"""

from __future__ import annotations

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import asdict, dataclass, replace
from pathlib import Path

import pandas as pd

from vocab_enrich.constants.columns import (
    ID,
    PART_OF_SPEECH,
    PRIMARY_DEFINITION,
    PROFICIENCY_LEVEL,
    USAGE_EXAMPLE,
    VOCAB_COLUMNS,
    WORD,
)
from vocab_enrich.enrichment.models import StructuredRecord
from vocab_enrich.errors import PersistenceFailure, StoreUnavailable

logger = logging.getLogger(__name__)


def _has_content(value: str | None) -> bool:
    return bool(value and value.strip())


@dataclass(frozen=True)
class VocabRecord:
    """One row of the vocabulary collection."""

    id: str
    word: str
    part_of_speech: str = ""
    proficiency_level: str = ""
    primary_definition: str = ""
    usage_example: str = ""

    @property
    def is_complete(self) -> bool:
        """True when the word already has a definition and a part of speech."""
        return _has_content(self.primary_definition) and _has_content(self.part_of_speech)

    def with_enrichment(self, record: StructuredRecord) -> VocabRecord:
        return replace(
            self,
            part_of_speech=record.part_of_speech,
            proficiency_level=record.proficiency_level,
            primary_definition=record.primary_definition,
            usage_example=record.usage_example,
        )


class VocabularyStore(ABC):
    """Abstract base class for vocabulary storage backends.

    **Core Methods (Required):**
        - `select_all()`: every record
        - `insert(words)`: add words, returning the new records
        - `update_by_id(record_id, record)`: write enrichment fields
        - `delete_by_ids(ids)`: remove records, returning how many were removed
        - `exists()`: whether the backend is reachable

    **Errors:**
        - `PersistenceFailure` for a failed single operation (unknown id, ...)
        - `StoreUnavailable` when the backend as a whole cannot be reached
    """

    @abstractmethod
    def select_all(self) -> list[VocabRecord]:
        pass

    @abstractmethod
    def insert(self, words: Iterable[str]) -> list[VocabRecord]:
        pass

    @abstractmethod
    def update_by_id(self, record_id: str, record: StructuredRecord) -> VocabRecord:
        pass

    @abstractmethod
    def delete_by_ids(self, ids: Sequence[str]) -> int:
        pass

    @abstractmethod
    def exists(self) -> bool:
        pass

    def select_incomplete(self) -> list[VocabRecord]:
        """Records still missing a definition or part of speech."""
        return [record for record in self.select_all() if not record.is_complete]

    @staticmethod
    def _new_id() -> str:
        return uuid.uuid4().hex


class InMemoryStore(VocabularyStore):
    """Dictionary-backed store (tests, one-off CLI runs)."""

    def __init__(self, records: Iterable[VocabRecord] = ()):
        self._records: dict[str, VocabRecord] = {record.id: record for record in records}
        self._lock = threading.Lock()

    def select_all(self) -> list[VocabRecord]:
        with self._lock:
            return list(self._records.values())

    def insert(self, words: Iterable[str]) -> list[VocabRecord]:
        created = [VocabRecord(id=self._new_id(), word=w.strip()) for w in words if w.strip()]
        with self._lock:
            for record in created:
                self._records[record.id] = record
        return created

    def update_by_id(self, record_id: str, record: StructuredRecord) -> VocabRecord:
        with self._lock:
            current = self._records.get(record_id)
            if current is None:
                raise PersistenceFailure(f"No vocabulary record with id {record_id}")
            updated = current.with_enrichment(record)
            self._records[record_id] = updated
            return updated

    def delete_by_ids(self, ids: Sequence[str]) -> int:
        with self._lock:
            removed = [
                self._records.pop(record_id) for record_id in ids if record_id in self._records
            ]
        return len(removed)

    def exists(self) -> bool:
        return True


class CSVStore(VocabularyStore):
    """CSV file backend (one row per record, columns VOCAB_COLUMNS)."""

    def __init__(self, csv_path: Path | str) -> None:
        self.path = Path(csv_path)
        self._lock = threading.Lock()

    def _load(self) -> pd.DataFrame:
        if not self.path.exists():
            return pd.DataFrame(columns=VOCAB_COLUMNS)
        try:
            df = pd.read_csv(self.path, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            return pd.DataFrame(columns=VOCAB_COLUMNS)
        except OSError as exc:
            raise StoreUnavailable(f"Cannot read vocabulary store {self.path}: {exc}") from exc
        except (pd.errors.ParserError, ValueError) as exc:
            raise StoreUnavailable(f"Vocabulary store {self.path} is not valid CSV: {exc}") from exc

        missing = [col for col in (ID, WORD) if col not in df.columns]
        if missing:
            raise StoreUnavailable(f"Vocabulary store {self.path} missing columns: {missing}")
        for col in VOCAB_COLUMNS:
            if col not in df.columns:
                df[col] = ""
        return df[VOCAB_COLUMNS].fillna("")

    def _save(self, df: pd.DataFrame) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            df[VOCAB_COLUMNS].to_csv(self.path, index=False)
        except OSError as exc:
            raise StoreUnavailable(f"Cannot write vocabulary store {self.path}: {exc}") from exc

    def select_all(self) -> list[VocabRecord]:
        with self._lock:
            df = self._load()
        return [VocabRecord(**row) for row in df.to_dict(orient="records")]

    def insert(self, words: Iterable[str]) -> list[VocabRecord]:
        created = [VocabRecord(id=self._new_id(), word=w.strip()) for w in words if w.strip()]
        if not created:
            return []
        with self._lock:
            df = self._load()
            new_rows = pd.DataFrame([asdict(record) for record in created], columns=VOCAB_COLUMNS)
            self._save(new_rows if df.empty else pd.concat([df, new_rows], ignore_index=True))
        return created

    def update_by_id(self, record_id: str, record: StructuredRecord) -> VocabRecord:
        with self._lock:
            df = self._load()
            mask = df[ID] == record_id
            if not mask.any():
                raise PersistenceFailure(f"No vocabulary record with id {record_id}")
            df.loc[mask, PART_OF_SPEECH] = record.part_of_speech
            df.loc[mask, PROFICIENCY_LEVEL] = record.proficiency_level
            df.loc[mask, PRIMARY_DEFINITION] = record.primary_definition
            df.loc[mask, USAGE_EXAMPLE] = record.usage_example
            self._save(df)
            row = df[mask].iloc[0].to_dict()
        return VocabRecord(**row)

    def delete_by_ids(self, ids: Sequence[str]) -> int:
        if not ids:
            return 0
        with self._lock:
            df = self._load()
            mask = df[ID].isin(list(ids))
            removed = int(mask.sum())
            if removed:
                self._save(df[~mask])
        logger.debug(f"Deleted {removed} records from {self.path}")
        return removed

    def exists(self) -> bool:
        return self.path.exists()
