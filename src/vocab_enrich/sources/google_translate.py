"""Google Translate details page (English to English dictionary panel)."""

from __future__ import annotations

from bs4 import BeautifulSoup

from vocab_enrich.sources.base import (
    HTMLSourceClient,
    LexicalEntry,
    select_examples,
    select_text,
)

# First phrase block of the dictionary panel
_FIRST_PHRASE = '[data-phrase-index="0"]'


class GoogleTranslateSource(HTMLSourceClient):
    """Scrapes the dictionary panel of the Google Translate details page.

    The panel is often rendered client-side, in which case the page has no
    phrase block and the word counts as not found here.
    """

    name = "Google Translate"
    url_template = "https://translate.google.com/details?sl=en&tl=en&text={word}&op=translate"

    def parse(self, word: str, soup: BeautifulSoup) -> LexicalEntry:
        phrase = soup.select_one(_FIRST_PHRASE)
        if phrase is None:
            return LexicalEntry.not_found(word, self.name)

        return LexicalEntry(
            word=word,
            found=True,
            source_name=self.name,
            part_of_speech=select_text(phrase, ".YrbPuc").lower() or None,
            primary_definition=select_text(phrase, ".fw3bVc") or None,
            examples=select_examples(phrase, ".AZAKKf"),
        )
