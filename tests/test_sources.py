"""Tests for the lexical sources (HTML and JSON parsing, HTTP handling)."""

from unittest.mock import MagicMock

import pytest
import requests

from vocab_enrich.errors import SourceUnavailable
from vocab_enrich.sources import default_sources
from vocab_enrich.sources.base import FirstMatchSource, clean_text, extract_level
from vocab_enrich.sources.cambridge import CambridgeSource
from vocab_enrich.sources.free_dictionary import FreeDictionarySource, parse_payload
from vocab_enrich.sources.google_translate import GoogleTranslateSource
from vocab_enrich.sources.oxford import OxfordSource

CAMBRIDGE_HTML = """
<html><body>
<div class="entry-body">
  <div class="pos-header">
    <span class="headword">vet</span>
    <span class="pos">verb</span>
    <span class="ipa">vet</span>
  </div>
  <div class="def-block">
    <div class="def-info"><span class="epp-xref">C2</span></div>
    <div class="def">to  examine something or someone carefully
      to make certain that they are acceptable:</div>
    <span class="examp">All candidates are carefully vetted.</span>
    <span class="examp">The proposals were vetted by experts.</span>
    <span class="examp">A third example.</span>
  </div>
  <div class="def-block">
    <div class="def">another sense:</div>
  </div>
</div>
</body></html>
"""

OXFORD_HTML = """
<html><body>
<div class="top-container">
  <div class="symbols"><a href="#"><span class="ox-b2"></span></a></div>
</div>
<div class="entry">
  <span class="pos">verb</span>
  <span class="phon">/vet/</span>
  <span class="def">to find out about somebody's past life and career</span>
  <span class="examples"><span class="x">All employees are vetted.</span></span>
</div>
</body></html>
"""

GOOGLE_TRANSLATE_HTML = """
<html><body>
<div data-phrase-index="0">
  <div class="YrbPuc">Adjective</div>
  <div class="fw3bVc">feeling or showing pleasure or contentment.</div>
  <div class="AZAKKf">"Melissa came in looking happy"</div>
  <div class="AZAKKf">"we're just happy to be here"</div>
  <div class="AZAKKf">"a third one"</div>
</div>
<div data-phrase-index="1"><div class="fw3bVc">unused</div></div>
</body></html>
"""

FREE_DICTIONARY_PAYLOAD = [
    {
        "word": "happy",
        "phonetic": "/ˈhæpi/",
        "meanings": [
            {
                "partOfSpeech": "adjective",
                "definitions": [
                    {
                        "definition": "Feeling or showing pleasure or contentment.",
                        "example": "I am happy to see you.",
                        "synonyms": ["glad", "cheerful", "joyful", "merry"],
                    }
                ],
            },
            {"partOfSpeech": "noun", "definitions": [{"definition": "unused"}]},
        ],
    }
]


def make_session(status_code=200, text="", json_data=None, error=None):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
        return session
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 400
    response.text = text
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    session.get.return_value = response
    return session


class TestHelpers:
    def test_clean_text(self):
        assert clean_text("  a \n  b\tc ") == "a b c"
        assert clean_text(None) == ""

    def test_extract_level(self):
        assert extract_level("Level: b2") == "B2"
        assert extract_level("A1 word") == "A1"
        assert extract_level("no level") is None
        assert extract_level("D1") is None
        assert extract_level(None) is None


class TestCambridgeSource:
    """Tests for CambridgeSource."""

    def test_parses_entry(self):
        session = make_session(text=CAMBRIDGE_HTML)
        entry = CambridgeSource(session=session).fetch("vet")

        assert entry.found
        assert entry.source_name == "Cambridge Dictionary"
        assert entry.part_of_speech == "verb"
        assert entry.proficiency_level == "C2"
        assert entry.primary_definition == (
            "to examine something or someone carefully to make certain that they are acceptable"
        )
        assert entry.examples == (
            "All candidates are carefully vetted.",
            "The proposals were vetted by experts.",
        )
        assert entry.pronunciation == "vet"

    def test_requests_lowercased_url(self):
        session = make_session(text=CAMBRIDGE_HTML)
        CambridgeSource(session=session, timeout=3).fetch("Vet")

        url = session.get.call_args.args[0]
        assert url == "https://dictionary.cambridge.org/dictionary/english/vet"
        assert session.get.call_args.kwargs["timeout"] == 3

    def test_missing_anchor_is_not_found(self):
        session = make_session(text="<html><body><div class='def'>stray</div></body></html>")
        entry = CambridgeSource(session=session).fetch("xyzzy")

        assert not entry.found
        assert entry.primary_definition is None

    def test_entry_without_definition_is_not_found(self):
        html = (
            "<html><body><div class='entry-body'><div class='pos-header'>"
            "<span class='pos'>noun</span></div></div></body></html>"
        )
        entry = CambridgeSource(session=make_session(text=html)).fetch("vet")

        assert not entry.found
        assert entry.part_of_speech is None

    def test_404_is_not_found(self):
        entry = CambridgeSource(session=make_session(status_code=404)).fetch("xyzzy")
        assert not entry.found

    def test_server_error_raises(self):
        with pytest.raises(SourceUnavailable, match="503"):
            CambridgeSource(session=make_session(status_code=503)).fetch("vet")

    def test_timeout_raises(self):
        session = make_session(error=requests.Timeout("slow"))
        with pytest.raises(SourceUnavailable, match="timed out"):
            CambridgeSource(session=session).fetch("vet")

    def test_connection_error_raises(self):
        session = make_session(error=requests.ConnectionError("refused"))
        with pytest.raises(SourceUnavailable):
            CambridgeSource(session=session).fetch("vet")


class TestOxfordSource:
    """Tests for OxfordSource."""

    def test_parses_entry(self):
        entry = OxfordSource(session=make_session(text=OXFORD_HTML)).fetch("vet")

        assert entry.found
        assert entry.source_name == "Oxford Dictionary"
        assert entry.part_of_speech == "verb"
        assert entry.proficiency_level == "B2"
        assert entry.primary_definition == "to find out about somebody's past life and career"
        assert entry.examples == ("All employees are vetted.",)
        assert entry.pronunciation == "/vet/"

    def test_level_from_symbols_text(self):
        html = OXFORD_HTML.replace('<span class="ox-b2"></span>', "C1")
        entry = OxfordSource(session=make_session(text=html)).fetch("vet")
        assert entry.proficiency_level == "C1"

    def test_missing_anchor_is_not_found(self):
        entry = OxfordSource(session=make_session(text="<html></html>")).fetch("xyzzy")
        assert not entry.found


class TestFreeDictionarySource:
    """Tests for FreeDictionarySource and parse_payload."""

    def test_parse_payload(self):
        entry = parse_payload("happy", FREE_DICTIONARY_PAYLOAD, "Free Dictionary API")

        assert entry.found
        assert entry.part_of_speech == "adjective"
        assert entry.primary_definition == "Feeling or showing pleasure or contentment."
        assert entry.examples == ("I am happy to see you.",)
        assert entry.synonyms == ("glad", "cheerful", "joyful")
        assert entry.pronunciation == "ˈhæpi"
        assert entry.proficiency_level is None

    def test_phonetics_fallback(self):
        payload = [
            {
                "phonetics": [{"audio": "x.mp3"}, {"text": "/wɔːk/"}],
                "meanings": [{"partOfSpeech": "verb", "definitions": [{"definition": "move"}]}],
            }
        ]
        entry = parse_payload("walk", payload, "Free Dictionary API")
        assert entry.pronunciation == "wɔːk"
        assert entry.examples == ()

    @pytest.mark.parametrize(
        "payload",
        [
            {"title": "No Definitions Found"},
            [],
            [{"meanings": []}],
            [{"meanings": [{"partOfSpeech": "noun", "definitions": []}]}],
            [{"meanings": [{"partOfSpeech": "noun", "definitions": [{"definition": " "}]}]}],
            None,
        ],
    )
    def test_unusable_payload_is_not_found(self, payload):
        assert not parse_payload("xyzzy", payload, "Free Dictionary API").found

    def test_fetch(self):
        session = make_session(json_data=FREE_DICTIONARY_PAYLOAD)
        entry = FreeDictionarySource(session=session).fetch("happy")

        assert entry.found
        assert entry.source_name == "Free Dictionary API"
        assert session.get.call_args.args[0] == (
            "https://api.dictionaryapi.dev/api/v2/entries/en/happy"
        )

    def test_non_json_body_is_not_found(self):
        session = make_session(json_data=ValueError("not json"))
        assert not FreeDictionarySource(session=session).fetch("happy").found

    def test_404_is_not_found(self):
        assert not FreeDictionarySource(session=make_session(status_code=404)).fetch("x").found


class TestGoogleTranslateSource:
    """Tests for GoogleTranslateSource."""

    def test_parses_first_phrase(self):
        session = make_session(text=GOOGLE_TRANSLATE_HTML)
        entry = GoogleTranslateSource(session=session).fetch("Happy")

        assert entry.found
        assert entry.source_name == "Google Translate"
        assert entry.part_of_speech == "adjective"
        assert entry.primary_definition == "feeling or showing pleasure or contentment."
        assert len(entry.examples) == 2
        url = session.get.call_args.args[0]
        assert url == "https://translate.google.com/details?sl=en&tl=en&text=happy&op=translate"

    def test_script_rendered_page_is_not_found(self):
        session = make_session(text="<html><body><div id='yDmH0d'></div></body></html>")
        assert not GoogleTranslateSource(session=session).fetch("happy").found


class TestFirstMatchSource:
    """Tests for FirstMatchSource."""

    def test_first_source_with_definition_wins(self, fake_source, make_entry):
        first = fake_source("Google Translate")
        second = fake_source(
            "Free Dictionary API", {"happy": make_entry("happy", "Free Dictionary API", "glad")}
        )
        source = FirstMatchSource("Either", [first, second])

        entry = source.fetch("happy")

        assert entry.source_name == "Free Dictionary API"
        assert first.calls == ["happy"]

    def test_stops_at_first_match(self, fake_source, make_entry):
        first = fake_source(
            "Google Translate", {"happy": make_entry("happy", "Google Translate", "glad")}
        )
        second = fake_source("Free Dictionary API")

        entry = FirstMatchSource("Either", [first, second]).fetch("happy")

        assert entry.source_name == "Google Translate"
        assert second.calls == []

    def test_unavailable_source_is_skipped(self, fake_source, make_entry):
        first = fake_source("Google Translate", error=SourceUnavailable("Google Translate", "503"))
        second = fake_source(
            "Free Dictionary API", {"happy": make_entry("happy", "Free Dictionary API", "glad")}
        )

        assert FirstMatchSource("Either", [first, second]).fetch("happy").found

    def test_not_found_anywhere(self, fake_source):
        first = fake_source("Google Translate", error=SourceUnavailable("Google Translate", "503"))
        entry = FirstMatchSource("Either", [first, fake_source("Free Dictionary API")]).fetch("x")

        assert not entry.found
        assert entry.source_name == "Either"

    def test_all_unavailable_raises(self, fake_source):
        sources = [
            fake_source("Google Translate", error=SourceUnavailable("Google Translate", "503")),
            fake_source("Free Dictionary API", error=SourceUnavailable("Free Dictionary API", "x")),
        ]
        with pytest.raises(SourceUnavailable):
            FirstMatchSource("Either", sources).fetch("happy")


def test_default_sources_priority_order():
    cambridge, oxford, third = default_sources(timeout=5)
    assert cambridge.name == "Cambridge Dictionary"
    assert oxford.name == "Oxford Dictionary"
    assert third.name == "Google Translate / Free Dictionary API"
    assert [source.name for source in third.sources] == ["Google Translate", "Free Dictionary API"]
    assert all(source.timeout == 5 for source in (cambridge, oxford, *third.sources))
