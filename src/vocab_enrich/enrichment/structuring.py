"""Normalization of merged evidence through a generative backend.

The backend output is validated and, when it is unusable, replaced by a
record built directly from the evidence. Only a missing or failing backend
on the single-word path is surfaced to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from vocab_enrich.constants.defaults import LEVEL_NOT_AVAILABLE
from vocab_enrich.constants.llm_config import (
    BATCH_MAX_TOKENS,
    BATCH_TIMEOUT_SECONDS,
    SINGLE_MAX_TOKENS,
    SINGLE_TIMEOUT_SECONDS,
)
from vocab_enrich.enrichment.models import (
    BackendUsage,
    MergedEvidence,
    StructuredRecord,
    StructuringOutcome,
    normalize_level,
)
from vocab_enrich.enrichment.prompts import (
    BATCH_SYSTEM_PROMPT,
    REQUIRED_FIELDS,
    SINGLE_SYSTEM_PROMPT,
    build_batch_prompt,
    build_single_prompt,
)
from vocab_enrich.errors import (
    BackendMisconfigured,
    BackendUnavailable,
    MalformedStructuredOutput,
)
from vocab_enrich.llm.base import LLMProvider, LLMResponse
from vocab_enrich.llm.parsing import parse_json_response

logger = logging.getLogger(__name__)


def _text(data: dict, key: str) -> str:
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


def record_from_output(evidence: MergedEvidence, data: Any) -> StructuredRecord:
    """Validate one backend object and turn it into a record.

    Raises:
        MalformedStructuredOutput: If data is not an object or a required
            field (partOfSpeech, primaryDefinition) is empty.
    """
    if not isinstance(data, dict):
        raise MalformedStructuredOutput(f"expected a JSON object, got {type(data).__name__}")

    missing = [key for key in REQUIRED_FIELDS if not _text(data, key)]
    if missing:
        raise MalformedStructuredOutput(f"missing required fields: {missing}")

    usage = _text(data, "usageExample") or (evidence.examples[0] if evidence.examples else "")
    return StructuredRecord(
        word=evidence.word,
        part_of_speech=_text(data, "partOfSpeech").lower(),
        proficiency_level=(
            normalize_level(data.get("proficiencyLevel"))
            or evidence.proficiency_level
            or LEVEL_NOT_AVAILABLE
        ),
        primary_definition=_text(data, "primaryDefinition"),
        usage_example=usage,
    )


def fallback_record(evidence: MergedEvidence, data: Any = None) -> StructuredRecord:
    """Record built from the evidence; partial backend output only fills gaps."""
    record = StructuredRecord.from_evidence(evidence)
    if not isinstance(data, dict):
        return record

    return StructuredRecord(
        word=record.word,
        part_of_speech=record.part_of_speech or _text(data, "partOfSpeech").lower(),
        proficiency_level=(
            evidence.proficiency_level
            or normalize_level(data.get("proficiencyLevel"))
            or LEVEL_NOT_AVAILABLE
        ),
        primary_definition=record.primary_definition or _text(data, "primaryDefinition"),
        usage_example=record.usage_example or _text(data, "usageExample"),
    )


def _records_by_word(parsed: Any) -> dict[str, Any]:
    if isinstance(parsed, dict):
        # Some models wrap the array: {"words": [...]} / {"results": [...]}
        for key in ("words", "results", "data"):
            if isinstance(parsed.get(key), list):
                parsed = parsed[key]
                break
        else:
            parsed = [parsed]
    if not isinstance(parsed, list):
        raise MalformedStructuredOutput("batch response is not a JSON array")

    by_word: dict[str, Any] = {}
    for item in parsed:
        if isinstance(item, dict) and isinstance(item.get("word"), str):
            by_word.setdefault(item["word"].strip().lower(), item)
    return by_word


class StructuringAgent:
    """Turns merged evidence into structured records.

    Args:
        provider: Structuring backend, or None when none is configured.
        timeout: Backend timeout for single-word requests (seconds).
        batch_timeout: Backend timeout for the combined batch request.
        misconfiguration: Why no provider is available (shown to callers).
    """

    def __init__(
        self,
        provider: LLMProvider | None,
        *,
        timeout: float = SINGLE_TIMEOUT_SECONDS,
        batch_timeout: float = BATCH_TIMEOUT_SECONDS,
        misconfiguration: str | None = None,
    ):
        self.provider = provider
        self.timeout = timeout
        self.batch_timeout = batch_timeout
        self.misconfiguration = misconfiguration

    def _log_usage(self, response: LLMResponse, usage: BackendUsage | None) -> None:
        logger.info(
            f"{self.provider.name} ({response.model}): {response.input_tokens} in, "
            f"{response.output_tokens} out, ${response.cost_usd:.4f}"
        )
        if usage is not None:
            usage.add(response)

    @property
    def available(self) -> bool:
        return self.provider is not None

    @property
    def service_name(self) -> str:
        return self.provider.name if self.provider is not None else "no backend"

    def structure(self, evidence: MergedEvidence) -> StructuredRecord:
        """Structure one word's evidence, see `structure_outcome`."""
        return self.structure_outcome(evidence).record

    def structure_outcome(self, evidence: MergedEvidence) -> StructuringOutcome:
        """Structure one word's evidence (single-word path).

        Raises:
            BackendMisconfigured: If no backend is configured.
            BackendUnavailable: If the backend call fails or times out.
        """
        if self.provider is None:
            raise BackendMisconfigured(
                self.misconfiguration or "No structuring backend configured."
            )

        logger.info(f"Sending '{evidence.word}' to {self.provider.name} for processing")
        response = self.provider.complete(
            build_single_prompt(evidence),
            system=SINGLE_SYSTEM_PROMPT,
            timeout=self.timeout,
            max_tokens=SINGLE_MAX_TOKENS,
        )
        self._log_usage(response, None)
        logger.debug(f"Backend response for '{evidence.word}': {response.content!r}")

        data = None
        try:
            data = parse_json_response(response.content)
            return StructuringOutcome(record_from_output(evidence, data), used_backend=True)
        except ValueError as exc:
            # MalformedStructuredOutput is a ValueError as well
            logger.warning(f"Unusable backend output for '{evidence.word}', using evidence: {exc}")
            return StructuringOutcome(fallback_record(evidence, data), used_backend=False)

    def structure_many(
        self,
        evidences: Sequence[MergedEvidence],
        usage: BackendUsage | None = None,
    ) -> list[StructuredRecord]:
        """Structure several words with one combined request (batch path).

        Token and cost figures of the call are added to usage when given.

        Never raises for backend problems: a missing backend, a failed call
        or malformed output all degrade to evidence-based records.
        """
        if not evidences:
            return []

        if self.provider is None:
            logger.warning(
                f"No structuring backend ({self.misconfiguration or 'not configured'}), "
                f"using evidence for {len(evidences)} words"
            )
            return [fallback_record(evidence) for evidence in evidences]

        logger.info(f"Sending {len(evidences)} words to {self.provider.name} for batch processing")
        try:
            response = self.provider.complete(
                build_batch_prompt(evidences),
                system=BATCH_SYSTEM_PROMPT,
                timeout=self.batch_timeout,
                max_tokens=BATCH_MAX_TOKENS,
            )
            self._log_usage(response, usage)
            by_word = _records_by_word(parse_json_response(response.content))
        except BackendUnavailable as exc:
            logger.warning(f"{self.provider.name} unavailable, using evidence as-is: {exc}")
            return [fallback_record(evidence) for evidence in evidences]
        except ValueError as exc:
            logger.warning(f"Unparseable batch response, using evidence as-is: {exc}")
            return [fallback_record(evidence) for evidence in evidences]

        records = []
        for evidence in evidences:
            data = by_word.get(evidence.word.strip().lower())
            try:
                records.append(record_from_output(evidence, data))
            except MalformedStructuredOutput as exc:
                logger.info(f"Falling back to evidence for '{evidence.word}': {exc}")
                records.append(fallback_record(evidence, data))
        return records
