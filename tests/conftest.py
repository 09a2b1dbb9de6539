"""Shared test doubles: in-process sources and structuring backends."""

from __future__ import annotations

import json

import pytest

from vocab_enrich.enrichment.merger import SourceMerger
from vocab_enrich.enrichment.structuring import StructuringAgent
from vocab_enrich.llm.base import LLMProvider, LLMResponse
from vocab_enrich.sources.base import LexicalEntry, SourceClient


class FakeSource(SourceClient):
    """Source answering from a dict (word -> entry) or raising."""

    def __init__(self, name: str, entries: dict | None = None, error: Exception | None = None):
        self.name = name
        self.entries = entries or {}
        self.error = error
        self.calls: list[str] = []

    def fetch(self, word: str) -> LexicalEntry:
        self.calls.append(word)
        if self.error is not None:
            raise self.error
        return self.entries.get(word.lower()) or LexicalEntry.not_found(word, self.name)


class FakeProvider(LLMProvider):
    """Backend returning canned replies in order, or raising."""

    name = "Fake LLM"
    model = "fake-model"

    def __init__(self, replies=None, error: Exception | None = None, usage=(0, 0, 0.0)):
        self.replies = list(replies or [])
        self.error = error
        self.usage = usage
        self.calls: list[dict] = []

    def complete(self, prompt, *, system=None, timeout=None, max_tokens=None):
        self.calls.append(
            {"prompt": prompt, "system": system, "timeout": timeout, "max_tokens": max_tokens}
        )
        if self.error is not None:
            raise self.error
        reply = self.replies.pop(0) if self.replies else ""
        if not isinstance(reply, str):
            reply = json.dumps(reply)
        input_tokens, output_tokens, cost_usd = self.usage
        return LLMResponse(
            content=reply,
            model=self.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cost_usd=cost_usd,
        )


def entry(word: str, source_name: str, definition: str | None, **kwargs) -> LexicalEntry:
    return LexicalEntry(
        word=word,
        found=True,
        source_name=source_name,
        primary_definition=definition,
        **kwargs,
    )


@pytest.fixture
def make_entry():
    return entry


@pytest.fixture
def fake_source():
    return FakeSource


@pytest.fixture
def fake_provider():
    return FakeProvider


@pytest.fixture
def vetted_sources():
    """The 'vetted' case: one form-change definition, one descriptive."""
    return [
        FakeSource(
            "Cambridge Dictionary",
            {"vetted": entry("vetted", "Cambridge Dictionary", "past simple of vet",
                             part_of_speech="verb")},
        ),
        FakeSource(
            "Oxford Dictionary",
            {
                "vetted": entry(
                    "vetted",
                    "Oxford Dictionary",
                    "make a careful and critical examination of (something)",
                    part_of_speech="verb",
                    proficiency_level="C1",
                    examples=("proposals for vetting applications",),
                )
            },
        ),
    ]


@pytest.fixture
def dictionary_sources():
    """Two sources that know a small fixed vocabulary (and nothing else)."""
    words = {
        "walk": "move at a regular pace by lifting and setting down each foot in turn",
        "happy": "feeling or showing pleasure or contentment",
        "table": "a piece of furniture with a flat top and one or more legs",
    }
    return [
        FakeSource(
            "Cambridge Dictionary",
            {
                w: entry(w, "Cambridge Dictionary", d, part_of_speech="noun")
                for w, d in words.items()
            },
        ),
        FakeSource("Free Dictionary API"),
    ]


@pytest.fixture
def merger(dictionary_sources):
    return SourceMerger(dictionary_sources)


@pytest.fixture
def offline_agent():
    """Agent without a backend: batch runs fall back to evidence."""
    return StructuringAgent(None, misconfiguration="OPENAI_API_KEY not configured.")
