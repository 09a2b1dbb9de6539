"""Tests for the structuring agent and its fallbacks."""

import json

import pytest

from vocab_enrich.enrichment.models import BackendUsage, MergedEvidence, StructuredRecord
from vocab_enrich.enrichment.prompts import BATCH_SYSTEM_PROMPT, SINGLE_SYSTEM_PROMPT
from vocab_enrich.enrichment.structuring import (
    StructuringAgent,
    fallback_record,
    record_from_output,
)
from vocab_enrich.errors import BackendMisconfigured, BackendUnavailable, MalformedStructuredOutput


def make_evidence(word="vetted", **kwargs):
    defaults = {
        "primary_definition": "make a careful and critical examination of (something)",
        "source_name": "Oxford Dictionary (+ Cambridge Dictionary)",
        "sources": ("Oxford Dictionary", "Cambridge Dictionary"),
        "score": 75,
        "part_of_speech": "Verb",
        "proficiency_level": "C1",
        "examples": ("proposals for vetting applications",),
    }
    defaults.update(kwargs)
    return MergedEvidence(word=word, **defaults)


VALID_OUTPUT = {
    "partOfSpeech": "verb",
    "proficiencyLevel": "c1",
    "primaryDefinition": "make a careful and critical examination of (something)",
    "usageExample": "proposals for vetting applications",
}


class TestRecordFromOutput:
    """Tests for record_from_output validation."""

    def test_valid_output(self):
        record = record_from_output(make_evidence(), VALID_OUTPUT)

        assert record == StructuredRecord(
            word="vetted",
            part_of_speech="verb",
            proficiency_level="C1",
            primary_definition="make a careful and critical examination of (something)",
            usage_example="proposals for vetting applications",
        )

    def test_missing_required_field(self):
        with pytest.raises(MalformedStructuredOutput, match="partOfSpeech"):
            record_from_output(make_evidence(), {**VALID_OUTPUT, "partOfSpeech": " "})

    def test_not_an_object(self):
        with pytest.raises(MalformedStructuredOutput):
            record_from_output(make_evidence(), ["verb"])

    def test_invalid_level_uses_evidence_level(self):
        record = record_from_output(make_evidence(), {**VALID_OUTPUT, "proficiencyLevel": "D9"})
        assert record.proficiency_level == "C1"

    def test_invalid_level_without_evidence_level(self):
        evidence = make_evidence(proficiency_level=None)
        record = record_from_output(evidence, {**VALID_OUTPUT, "proficiencyLevel": "expert"})
        assert record.proficiency_level == "n.a."


class TestFallbackRecord:
    """Tests for fallback_record."""

    def test_built_from_evidence(self):
        record = fallback_record(make_evidence())

        assert record.part_of_speech == "verb"
        assert record.proficiency_level == "C1"
        assert record.primary_definition == (
            "make a careful and critical examination of (something)"
        )
        assert record.usage_example == "proposals for vetting applications"

    def test_unknown_level_and_no_examples(self):
        record = fallback_record(make_evidence(proficiency_level=None, examples=()))
        assert record.proficiency_level == "n.a."
        assert record.usage_example == ""

    def test_partial_output_fills_gaps_only(self):
        evidence = make_evidence(part_of_speech=None, proficiency_level=None)
        record = fallback_record(
            evidence,
            {"partOfSpeech": "Verb", "proficiencyLevel": "b2", "primaryDefinition": "ignored"},
        )
        assert record.part_of_speech == "verb"
        assert record.proficiency_level == "B2"
        assert record.primary_definition == evidence.primary_definition


class TestStructure:
    """Tests for the strict single-word path."""

    def test_uses_backend_output(self, fake_provider):
        provider = fake_provider([f"```json\n{json.dumps(VALID_OUTPUT)}\n```"])
        agent = StructuringAgent(provider, timeout=12)

        outcome = agent.structure_outcome(make_evidence())

        assert outcome.used_backend
        assert outcome.record.proficiency_level == "C1"
        call = provider.calls[0]
        assert call["system"] == SINGLE_SYSTEM_PROMPT
        assert call["timeout"] == 12
        assert "Definition: make a careful" in call["prompt"]

    def test_unparseable_output_falls_back(self, fake_provider):
        agent = StructuringAgent(fake_provider(["I cannot help with that."]))

        outcome = agent.structure_outcome(make_evidence())

        assert not outcome.used_backend
        assert outcome.record == fallback_record(make_evidence())

    def test_incomplete_output_falls_back(self, fake_provider):
        agent = StructuringAgent(fake_provider([{"proficiencyLevel": "B1"}]))
        record = agent.structure(make_evidence())
        assert record.part_of_speech == "verb"
        assert record.proficiency_level == "C1"

    def test_no_backend_raises(self):
        agent = StructuringAgent(None, misconfiguration="OPENAI_API_KEY not configured.")
        with pytest.raises(BackendMisconfigured, match="OPENAI_API_KEY"):
            agent.structure(make_evidence())

    def test_backend_failure_raises(self, fake_provider):
        agent = StructuringAgent(fake_provider(error=BackendUnavailable("HTTP 503")))
        with pytest.raises(BackendUnavailable):
            agent.structure(make_evidence())


class TestStructureMany:
    """Tests for the lenient batch path."""

    def test_matches_items_by_word(self, fake_provider):
        evidences = [make_evidence("vetted"), make_evidence("walk", part_of_speech="verb")]
        reply = [
            {"word": "Walk", **VALID_OUTPUT, "primaryDefinition": "move on foot"},
            {"word": "vetted", **VALID_OUTPUT},
        ]
        provider = fake_provider([reply])
        agent = StructuringAgent(provider, batch_timeout=99)

        records = agent.structure_many(evidences)

        assert [r.word for r in records] == ["vetted", "walk"]
        assert records[1].primary_definition == "move on foot"
        assert len(provider.calls) == 1
        assert provider.calls[0]["system"] == BATCH_SYSTEM_PROMPT
        assert provider.calls[0]["timeout"] == 99
        assert "--- Word 2: walk ---" in provider.calls[0]["prompt"]

    def test_wrapped_array(self, fake_provider):
        agent = StructuringAgent(fake_provider([{"words": [{"word": "vetted", **VALID_OUTPUT}]}]))
        assert agent.structure_many([make_evidence()])[0].proficiency_level == "C1"

    def test_missing_item_falls_back(self, fake_provider):
        evidences = [make_evidence("vetted"), make_evidence("walk")]
        agent = StructuringAgent(fake_provider([[{"word": "vetted", **VALID_OUTPUT}]]))

        records = agent.structure_many(evidences)

        assert records[1] == fallback_record(evidences[1])

    def test_backend_failure_falls_back(self, fake_provider):
        evidences = [make_evidence("vetted"), make_evidence("walk")]
        agent = StructuringAgent(fake_provider(error=BackendUnavailable("timed out")))

        records = agent.structure_many(evidences)

        assert records == [fallback_record(e) for e in evidences]

    def test_garbage_falls_back(self, fake_provider):
        agent = StructuringAgent(fake_provider(["Sure! Here you go."]))
        assert agent.structure_many([make_evidence()]) == [fallback_record(make_evidence())]

    def test_no_backend_falls_back(self, offline_agent):
        assert offline_agent.structure_many([make_evidence()]) == [fallback_record(make_evidence())]

    def test_empty_input(self, fake_provider):
        provider = fake_provider()
        assert StructuringAgent(provider).structure_many([]) == []
        assert provider.calls == []

    def test_usage_is_accumulated(self, fake_provider):
        usage = BackendUsage()
        agent = StructuringAgent(fake_provider(["[]"], usage=(900, 120, 0.0003)))

        agent.structure_many([make_evidence()], usage=usage)

        assert usage.calls == 1
        assert usage.input_tokens == 900
        assert usage.output_tokens == 120
        assert usage.cost_usd == 0.0003
