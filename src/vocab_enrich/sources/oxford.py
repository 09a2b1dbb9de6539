"""Oxford Learner's Dictionaries source."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from vocab_enrich.sources.base import (
    HTMLSourceClient,
    LexicalEntry,
    extract_level,
    select_examples,
    select_text,
)

# CEFR icons are rendered as class names such as "ox-b2"
_ICON_LEVEL = re.compile(r"ox-([abc][12])", re.IGNORECASE)


def _level_from_icons(soup: BeautifulSoup) -> str | None:
    for icon in soup.select(".symbols [class]"):
        classes = " ".join(icon.get("class", []))
        match = _ICON_LEVEL.search(classes)
        if match:
            return match.group(1).upper()
    return None


class OxfordSource(HTMLSourceClient):
    """Scrapes the definition page of Oxford Learner's Dictionaries."""

    name = "Oxford Dictionary"
    url_template = "https://www.oxfordlearnersdictionaries.com/definition/english/{word}"

    def parse(self, word: str, soup: BeautifulSoup) -> LexicalEntry:
        entry = soup.select_one(".entry")
        if entry is None:
            return LexicalEntry.not_found(word, self.name)

        level = _level_from_icons(soup)
        if level is None:
            level = extract_level(select_text(soup, ".top-container .symbols"))

        return LexicalEntry(
            word=word,
            found=True,
            source_name=self.name,
            part_of_speech=select_text(entry, ".pos") or None,
            proficiency_level=level,
            primary_definition=select_text(entry, ".def") or None,
            examples=select_examples(entry, ".examples .x"),
            pronunciation=select_text(entry, ".phon") or None,
        )
