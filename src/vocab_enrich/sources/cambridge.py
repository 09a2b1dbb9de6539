"""Cambridge Dictionary source."""

from __future__ import annotations

from bs4 import BeautifulSoup

from vocab_enrich.sources.base import (
    HTMLSourceClient,
    LexicalEntry,
    extract_level,
    select_examples,
    select_text,
)


class CambridgeSource(HTMLSourceClient):
    """Scrapes the English entry page of Cambridge Dictionary."""

    name = "Cambridge Dictionary"
    url_template = "https://dictionary.cambridge.org/dictionary/english/{word}"

    def parse(self, word: str, soup: BeautifulSoup) -> LexicalEntry:
        entry_body = soup.select_one(".entry-body")
        if entry_body is None:
            return LexicalEntry.not_found(word, self.name)

        pos_header = entry_body.select_one(".pos-header") or entry_body
        def_block = entry_body.select_one(".def-block")

        definition = select_text(def_block, ".def") if def_block is not None else ""
        examples = select_examples(def_block, ".examp") if def_block is not None else ()

        level = extract_level(select_text(pos_header, ".epp-xref"))
        if level is None and def_block is not None:
            level = extract_level(select_text(def_block, ".def-info .epp-xref"))

        return LexicalEntry(
            word=word,
            found=True,
            source_name=self.name,
            part_of_speech=select_text(pos_header, ".pos") or None,
            proficiency_level=level,
            primary_definition=definition.rstrip(":").strip() or None,
            examples=examples,
            pronunciation=select_text(pos_header, ".ipa") or None,
        )
