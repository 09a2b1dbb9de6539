"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from vocab_enrich.api import create_app
from vocab_enrich.enrichment.merger import SourceMerger
from vocab_enrich.enrichment.rate_limiter import RateLimiter
from vocab_enrich.enrichment.service import EnrichmentService
from vocab_enrich.enrichment.structuring import StructuringAgent
from vocab_enrich.errors import BackendUnavailable
from vocab_enrich.storage import CSVStore, InMemoryStore

AI_REPLY = {
    "partOfSpeech": "verb",
    "proficiencyLevel": "C1",
    "primaryDefinition": "make a careful and critical examination of (something)",
    "usageExample": "proposals for vetting applications",
}


@pytest.fixture
def make_client(vetted_sources, fake_provider):
    def factory(provider="default", max_requests=30, store=None, misconfiguration=None):
        if provider == "default":
            provider = fake_provider([AI_REPLY] * 5)
        service = EnrichmentService(
            SourceMerger(vetted_sources),
            StructuringAgent(provider, misconfiguration=misconfiguration),
            rate_limiter=RateLimiter(max_requests=max_requests, window_seconds=60),
            store=store,
            batch_options={"sleep": lambda s: None},
        )
        return TestClient(create_app(service))

    return factory


class TestFetchDictionary:
    """Tests for POST /api/fetch-dictionary."""

    def test_success(self, make_client):
        response = make_client().post("/api/fetch-dictionary", json={"word": "vetted"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["primaryDefinition"] == (
            "make a careful and critical examination of (something)"
        )
        assert body["source"] == "Oxford Dictionary (+ Cambridge Dictionary) + AI Processing"

    @pytest.mark.parametrize("payload", [{}, {"word": ""}, {"word": "   "}, {"word": 5}])
    def test_missing_word(self, make_client, payload):
        response = make_client().post("/api/fetch-dictionary", json=payload)
        assert response.status_code == 400
        assert "error" in response.json()

    def test_not_found(self, make_client):
        response = make_client().post("/api/fetch-dictionary", json={"word": "xyzzy"})
        assert response.status_code == 404
        assert response.json()["error"] == 'Word "xyzzy" was not found in any dictionary source.'

    def test_missing_part_of_speech(self, fake_source, make_entry, fake_provider):
        ennui = make_entry("ennui", "Free Dictionary API", "listlessness and dissatisfaction")
        service = EnrichmentService(
            SourceMerger([fake_source("Free Dictionary API", {"ennui": ennui})]),
            StructuringAgent(fake_provider(["not json"])),
        )

        response = TestClient(create_app(service)).post(
            "/api/fetch-dictionary", json={"word": "ennui"}
        )

        assert response.status_code == 404
        assert "No part of speech" in response.json()["error"]

    def test_misconfigured_backend(self, make_client):
        client = make_client(provider=None, misconfiguration="OPENAI_API_KEY not configured.")
        response = client.post("/api/fetch-dictionary", json={"word": "vetted"})
        assert response.status_code == 500
        assert "OPENAI_API_KEY" in response.json()["error"]

    def test_backend_unavailable(self, make_client, fake_provider):
        client = make_client(provider=fake_provider(error=BackendUnavailable("HTTP 503")))
        response = client.post("/api/fetch-dictionary", json={"word": "vetted"})
        assert response.status_code == 502

    def test_rate_limit(self, make_client):
        client = make_client(max_requests=2)
        headers = {"X-Forwarded-For": "203.0.113.9, 10.0.0.1"}

        for _ in range(2):
            assert client.post(
                "/api/fetch-dictionary", json={"word": "vetted"}, headers=headers
            ).status_code == 200
        response = client.post("/api/fetch-dictionary", json={"word": "vetted"}, headers=headers)

        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) > 0
        assert response.headers["X-RateLimit-Limit"] == "2"
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert "X-RateLimit-Reset" in response.headers
        assert "Rate limit exceeded" in response.json()["error"]

        # A different client is not limited
        other = client.post(
            "/api/fetch-dictionary", json={"word": "vetted"}, headers={"X-Real-IP": "198.51.100.1"}
        )
        assert other.status_code == 200


class TestFetchDictionaryBatch:
    """Tests for POST /api/fetch-dictionary-batch."""

    def test_batch(self, make_client, fake_provider):
        reply = [{"word": "vetted", **AI_REPLY}]
        client = make_client(provider=fake_provider([reply]))

        response = client.post("/api/fetch-dictionary-batch", json={"words": ["vetted", "xyzzy"]})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["processed"] == 2
        assert body["total"] == 2
        assert body["failed"] == ["xyzzy"]
        assert body["state"] == "completed"
        assert [item["word"] for item in body["data"]] == ["vetted"]

    def test_batch_backend_down_falls_back(self, make_client, fake_provider):
        client = make_client(provider=fake_provider(error=BackendUnavailable("down")))

        response = client.post("/api/fetch-dictionary-batch", json={"words": ["vetted"]})

        assert response.status_code == 200
        assert response.json()["data"][0]["partOfSpeech"] == "verb"

    def test_batch_updates_store(self, make_client):
        store = InMemoryStore()
        store.insert(["vetted", "xyzzy"])
        client = make_client(provider=None, store=store)

        body = client.post(
            "/api/fetch-dictionary-batch", json={"words": ["vetted", "xyzzy"]}
        ).json()

        assert body["updated"] == 1
        assert body["deleted"] == 1
        assert [r.word for r in store.select_all()] == ["vetted"]

    def test_malformed_store_aborts_batch(self, make_client, tmp_path):
        csv_path = tmp_path / "vocabulary.csv"
        csv_path.write_text('id,word\n1,vetted\n2,"xyzzy\n')
        client = make_client(provider=None, store=CSVStore(csv_path))

        response = client.post("/api/fetch-dictionary-batch", json={"words": ["vetted"]})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["state"] == "aborted"
        assert body["processed"] == 0
        assert "not valid CSV" in body["message"]

    @pytest.mark.parametrize("payload", [{}, {"words": []}, {"words": ["", " "]}])
    def test_empty_words(self, make_client, payload):
        response = make_client().post("/api/fetch-dictionary-batch", json=payload)
        assert response.status_code == 400

    def test_batch_not_rate_limited(self, make_client):
        client = make_client(max_requests=1)
        for _ in range(3):
            response = client.post("/api/fetch-dictionary-batch", json={"words": ["vetted"]})
            assert response.status_code == 200
