"""Lexical sources queried for each word."""

from vocab_enrich.sources.base import FirstMatchSource, LexicalEntry, SourceClient
from vocab_enrich.sources.cambridge import CambridgeSource
from vocab_enrich.sources.free_dictionary import FreeDictionarySource
from vocab_enrich.sources.google_translate import GoogleTranslateSource
from vocab_enrich.sources.oxford import OxfordSource

__all__ = [
    "LexicalEntry",
    "SourceClient",
    "FirstMatchSource",
    "CambridgeSource",
    "OxfordSource",
    "GoogleTranslateSource",
    "FreeDictionarySource",
    "default_sources",
]

TRANSLATE_OR_FREE_DICTIONARY = "Google Translate / Free Dictionary API"


def default_sources(timeout: float | None = None) -> list[SourceClient]:
    """Sources in priority order (first registered wins score ties).

    The third source tries the Google Translate details page and falls back
    to the free dictionary API.
    """
    kwargs = {"timeout": timeout} if timeout is not None else {}
    return [
        CambridgeSource(**kwargs),
        OxfordSource(**kwargs),
        FirstMatchSource(
            TRANSLATE_OR_FREE_DICTIONARY,
            [GoogleTranslateSource(**kwargs), FreeDictionarySource(**kwargs)],
        ),
    ]
