"""Prompts for the structuring backend."""

from __future__ import annotations

from collections.abc import Sequence

from vocab_enrich.enrichment.models import MergedEvidence

REQUIRED_FIELDS = ("partOfSpeech", "primaryDefinition")
OUTPUT_FIELDS = ("partOfSpeech", "proficiencyLevel", "primaryDefinition", "usageExample")

_FIELD_RULES = """Rules:
- Use the EXACT data from the dictionary evidence provided
- partOfSpeech: copy from the evidence, as a lowercase full word (e.g. "noun" not "n.")
- proficiencyLevel: use the level from the evidence if present; only if absent, estimate it from word complexity: basic words (A1-A2), common words (B1-B2), advanced words (C1-C2)
- primaryDefinition: copy the evidence definition verbatim
- usageExample: the first example sentence from the evidence, or a brief usage note if there is none
- Return ONLY the JSON, no markdown code blocks or additional text"""

SINGLE_SYSTEM_PROMPT = f"""You are a dictionary data processor. You receive dictionary evidence for one word and must convert it to a structured JSON format.

Return ONLY a single valid JSON object with exactly these fields:
{{
  "partOfSpeech": "noun" | "verb" | "adjective" | "adverb" | "preposition" | "conjunction" | "pronoun" | "interjection",
  "proficiencyLevel": "A1" | "A2" | "B1" | "B2" | "C1" | "C2",
  "primaryDefinition": "the primary definition",
  "usageExample": "example sentence"
}}

{_FIELD_RULES}"""

BATCH_SYSTEM_PROMPT = f"""You are a dictionary data processor. You receive dictionary evidence for MULTIPLE words and must convert ALL of them to structured JSON format.

Return ONLY a valid JSON array with one object per word, each with exactly these fields:
[
  {{
    "word": "the word",
    "partOfSpeech": "noun" | "verb" | "adjective" | "adverb" | "preposition" | "conjunction" | "pronoun" | "interjection",
    "proficiencyLevel": "A1" | "A2" | "B1" | "B2" | "C1" | "C2",
    "primaryDefinition": "the primary definition",
    "usageExample": "example sentence"
  }}
]

{_FIELD_RULES}
- Process ALL words provided"""


def build_single_prompt(evidence: MergedEvidence) -> str:
    return (
        "Here is the dictionary evidence:\n\n"
        f"{evidence.to_evidence_text()}\n\n"
        "Convert this to the required JSON format."
    )


def build_batch_prompt(evidences: Sequence[MergedEvidence]) -> str:
    blocks = [
        f"--- Word {i}: {evidence.word} ---\n{evidence.to_evidence_text()}"
        for i, evidence in enumerate(evidences, 1)
    ]
    return (
        f"Here is the dictionary evidence for {len(evidences)} words:\n\n"
        + "\n\n".join(blocks)
        + "\n\nConvert ALL of these words to the required JSON array format."
    )
