"""Chunked batch enrichment with store reconciliation.

Words are processed in fixed-size chunks, sequentially within a chunk and
with pauses between words and between chunks so that the lexical sources
are not hammered. After each chunk the store is reconciled: words that could
not be enriched are deleted in one call, enriched words are updated one by
one. A store outage aborts the run; everything written so far stays written.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, TypeVar

from vocab_enrich.constants.defaults import (
    BATCH_CHUNK_SIZE,
    CHUNK_DELAY_SECONDS,
    WORD_DELAY_SECONDS,
)
from vocab_enrich.enrichment.merger import SourceMerger
from vocab_enrich.enrichment.models import (
    STATE_ABORTED,
    STATE_COMPLETED,
    BatchProgress,
    BatchReport,
    MergedEvidence,
    StructuredRecord,
)
from vocab_enrich.enrichment.structuring import StructuringAgent
from vocab_enrich.errors import PersistenceFailure, StoreUnavailable

if TYPE_CHECKING:
    from vocab_enrich.storage.backends import VocabRecord, VocabularyStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

CANCELLED = "cancelled"


class BatchState(str, Enum):
    """Lifecycle of one batch run."""

    CHUNKING = "chunking"
    FETCHING = "fetching"
    STRUCTURING = "structuring"
    RECONCILING = "reconciling"
    ADVANCING = "advancing"
    COMPLETED = STATE_COMPLETED
    ABORTED = STATE_ABORTED


def iter_chunks(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """Yield consecutive slices of at most size items."""
    if size < 1:
        raise ValueError(f"chunk size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield list(items[start : start + size])


@dataclass(frozen=True)
class BatchItem:
    """A word to enrich and the store ids holding it (may be empty)."""

    word: str
    ids: tuple[str, ...] = ()


class BatchOrchestrator:
    """Runs batch enrichment and keeps the store in sync.

    Args:
        merger: Multi-source lookup.
        agent: Structuring agent, used through its lenient batch path.
        store: Vocabulary store to reconcile, or None for a dry run.
        chunk_size: Words per chunk.
        word_delay: Pause between words inside a chunk (seconds).
        chunk_delay: Pause between chunks (seconds).
        sleep: Sleep function (tests pass a no-op).
        delete_unenriched: Delete store records of words that could not be enriched.
        on_progress: Called with BatchProgress after every chunk.
        cancel_event: Checked before every chunk; when set the run aborts.
    """

    def __init__(
        self,
        merger: SourceMerger,
        agent: StructuringAgent,
        store: VocabularyStore | None = None,
        *,
        chunk_size: int = BATCH_CHUNK_SIZE,
        word_delay: float = WORD_DELAY_SECONDS,
        chunk_delay: float = CHUNK_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        delete_unenriched: bool = True,
        on_progress: Callable[[BatchProgress], None] | None = None,
        cancel_event: threading.Event | None = None,
    ):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.merger = merger
        self.agent = agent
        self.store = store
        self.chunk_size = chunk_size
        self.word_delay = word_delay
        self.chunk_delay = chunk_delay
        self.sleep = sleep
        self.delete_unenriched = delete_unenriched
        self.on_progress = on_progress
        self.cancel_event = cancel_event
        self.state = BatchState.COMPLETED

    def _enter(self, state: BatchState) -> None:
        logger.debug(f"Batch state: {self.state.value} -> {state.value}")
        self.state = state

    def run(self, words: Iterable[str]) -> BatchReport:
        """Enrich words, updating or deleting their store records."""
        cleaned = [w.strip() for w in words if w and w.strip()]
        report = BatchReport(total=len(cleaned))

        ids_by_word: dict[str, list[str]] = {}
        if self.store is not None:
            try:
                records = self.store.select_all()
            except StoreUnavailable as exc:
                return self._abort(report, f"Store unavailable: {exc}")
            for record in records:
                ids_by_word.setdefault(record.word.strip().lower(), []).append(record.id)

        items = [BatchItem(w, tuple(ids_by_word.get(w.lower(), ()))) for w in cleaned]
        return self._run_items(items, report)

    def run_incomplete(self) -> BatchReport:
        """Enrich every store record that lacks a definition or part of speech."""
        if self.store is None:
            raise ValueError("run_incomplete requires a store")
        try:
            records: list[VocabRecord] = self.store.select_incomplete()
        except StoreUnavailable as exc:
            return self._abort(BatchReport(total=0), f"Store unavailable: {exc}")

        items = [BatchItem(r.word.strip(), (r.id,)) for r in records if r.word.strip()]
        logger.info(f"Found {len(items)} incomplete words in store")
        return self._run_items(items, BatchReport(total=len(items)))

    def _run_items(self, items: list[BatchItem], report: BatchReport) -> BatchReport:
        self._enter(BatchState.CHUNKING)
        chunks = list(iter_chunks(items, self.chunk_size))
        progress = BatchProgress(total=len(items), chunk_count=len(chunks))
        logger.info(f"Processing {len(items)} words in {len(chunks)} chunks")

        for index, chunk in enumerate(chunks):
            if self.cancel_event is not None and self.cancel_event.is_set():
                logger.warning(f"Batch cancelled before chunk {index + 1}/{len(chunks)}")
                return self._abort(report, CANCELLED)
            if index > 0:
                self.sleep(self.chunk_delay)

            try:
                self._process_chunk(chunk, report)
            except StoreUnavailable as exc:
                return self._abort(report, f"Store unavailable: {exc}")

            self._enter(BatchState.ADVANCING)
            report.chunks += 1
            report.processed += len(chunk)
            progress.processed = report.processed
            progress.chunk_index = index + 1
            logger.info(f"Chunk {index + 1}/{len(chunks)} done ({report.processed}/{report.total})")
            if self.on_progress is not None:
                self.on_progress(progress)

        self._enter(BatchState.COMPLETED)
        report.state = STATE_COMPLETED
        logger.info(f"Batch complete: {report.updated} updated, {len(report.failed_words)} failed")
        return report

    def _abort(self, report: BatchReport, error: str) -> BatchReport:
        self._enter(BatchState.ABORTED)
        report.state = STATE_ABORTED
        report.error = error
        logger.error(f"Batch aborted after {report.processed}/{report.total} words: {error}")
        return report

    def _fetch(
        self, chunk: list[BatchItem]
    ) -> tuple[list[tuple[BatchItem, MergedEvidence]], list[BatchItem]]:
        self._enter(BatchState.FETCHING)
        found: list[tuple[BatchItem, MergedEvidence]] = []
        failed: list[BatchItem] = []
        for position, item in enumerate(chunk):
            if position > 0:
                self.sleep(self.word_delay)
            try:
                evidence = self.merger.lookup(item.word)
            except Exception:
                logger.exception(f"Lookup of '{item.word}' failed")
                evidence = None
            if evidence is None:
                failed.append(item)
            else:
                found.append((item, evidence))
        return found, failed

    def _process_chunk(self, chunk: list[BatchItem], report: BatchReport) -> None:
        found, failed = self._fetch(chunk)

        self._enter(BatchState.STRUCTURING)
        structured = self.agent.structure_many(
            [evidence for _, evidence in found], usage=report.usage
        )
        enriched: list[tuple[BatchItem, StructuredRecord]] = []
        for (item, _), record in zip(found, structured):
            if record.is_complete:
                enriched.append((item, record))
            else:
                logger.warning(f"No part of speech for '{item.word}', treating it as unenriched")
                failed.append(item)
        report.failed_words.extend(item.word for item in failed)
        report.records.extend(record for _, record in enriched)

        self._enter(BatchState.RECONCILING)
        if self.store is None:
            return

        failed_ids = [record_id for item in failed for record_id in item.ids]
        if self.delete_unenriched and failed_ids:
            try:
                report.deleted += self.store.delete_by_ids(failed_ids)
            except StoreUnavailable:
                raise
            except PersistenceFailure as exc:
                logger.error(f"Failed to delete {len(failed_ids)} unenriched words: {exc}")
                report.persistence_errors += 1

        for item, record in enriched:
            for record_id in item.ids:
                try:
                    self.store.update_by_id(record_id, record)
                except StoreUnavailable:
                    raise
                except PersistenceFailure as exc:
                    logger.error(f"Failed to update '{item.word}' ({record_id}): {exc}")
                    report.persistence_errors += 1
                else:
                    report.updated += 1
