import json
import logging

import pytest
import requests

from services.content_cache import ContentCache, resource_name
from services.content_client import ContentClient, cached_request, preload_images


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeResponse:
    def __init__(self, data=None, status_code=200):
        self._data = data
        self.status_code = status_code
        self.content = json.dumps(data).encode() if data is not None else b""

    def json(self):
        return self._data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    def __init__(self, responses=None, error=None):
        self.responses = responses or {}
        self.error = error
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url))
        if self.error is not None:
            raise self.error
        return self.responses.get(url, FakeResponse({"ok": True}))

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ContentCache(clock=clock)


def test_resource_name_is_last_path_segment():
    assert resource_name("/api/hero") == "hero"
    assert resource_name("http://localhost:3001/api/highlights?lang=th") == "highlights"
    assert resource_name("/api/hero/") == "default"


def test_hero_entry_expires_after_five_minutes(cache, clock):
    cache.set("/api/hero", {"a": 1})
    assert cache.get("/api/hero") == {"a": 1}

    clock.advance(299)
    assert cache.get("/api/hero") == {"a": 1}

    clock.advance(1)
    assert cache.get("/api/hero") is None
    assert cache.keys() == []


def test_unknown_resource_uses_default_ttl(cache, clock):
    cache.set("/api/tickets", [1, 2])
    clock.advance(59)
    assert cache.get("/api/tickets") == [1, 2]
    clock.advance(1)
    assert "/api/tickets" not in cache


def test_explicit_ttl_overrides_table(cache, clock):
    cache.set("/api/hero", "short", ttl=5)
    clock.advance(5)
    assert cache.get("/api/hero") is None


def test_ttl_table_is_configurable(clock):
    cache = ContentCache(ttls={"bookings": 10}, default_ttl=2, clock=clock)
    assert cache.ttl_for("/api/bookings") == 10
    assert cache.ttl_for("/api/hero") == 2


def test_falsy_values_are_still_cached(cache):
    cache.set("/api/highlights", [])
    assert cache.get("/api/highlights", "missing") == []


def test_clear_with_pattern_leaves_other_keys(cache):
    cache.set("/api/highlights", [1])
    cache.set("/api/highlights?page=2", [2])
    cache.set("/api/hero", {"image": "h.webp"})

    assert cache.clear("highlights") == 2

    assert cache.keys() == ["/api/hero"]


def test_clear_without_pattern_removes_everything(cache):
    cache.set("/api/highlights", [1])
    cache.set("/api/hero", {})
    cache.clear()
    assert len(cache) == 0


def test_max_entries_evicts_oldest(clock):
    cache = ContentCache(clock=clock, max_entries=2)
    cache.set("/a", 1)
    cache.set("/b", 2)
    cache.set("/c", 3)
    assert cache.keys() == ["/b", "/c"]


def test_purge_expired(cache, clock):
    cache.set("/api/hero", 1)
    cache.set("/api/other", 2)
    clock.advance(61)
    assert cache.purge_expired() == 1
    assert cache.keys() == ["/api/hero"]


def test_cached_request_hits_network_once(cache):
    session = FakeSession({"/api/hero": FakeResponse({"image": "hero.webp"})})

    first = cached_request(cache, session, "/api/hero")
    second = cached_request(cache, session, "/api/hero")

    assert session.calls == [("GET", "/api/hero")]
    assert first.from_cache is False
    assert second.from_cache is True
    assert second.data == {"image": "hero.webp"}


def test_cached_request_bypasses_cache_for_writes(cache):
    session = FakeSession()

    cached_request(cache, session, "/api/highlights", method="POST", json={"title": "x"})
    cached_request(cache, session, "/api/highlights", method="post", json={"title": "x"})

    assert len(session.calls) == 2
    assert len(cache) == 0


def test_transport_errors_propagate_and_nothing_is_cached(cache):
    session = FakeSession(error=requests.ConnectionError("refused"))

    with pytest.raises(requests.ConnectionError):
        cached_request(cache, session, "/api/hero")

    assert len(cache) == 0


def test_http_errors_are_not_cached(cache):
    session = FakeSession({"/api/hero": FakeResponse({"error": "server_error"}, status_code=500)})

    with pytest.raises(requests.HTTPError):
        cached_request(cache, session, "/api/hero")

    assert "/api/hero" not in cache


def test_preload_images_reports_failures_without_raising(caplog):
    class FlakySession(FakeSession):
        def get(self, url, **kwargs):
            if "broken" in url:
                raise requests.Timeout("slow")
            return FakeResponse({"ok": True})

    with caplog.at_level(logging.WARNING):
        results = preload_images(FlakySession(), ["/img/a.webp", "/img/broken.webp", "", "/img/b.webp"])

    assert [(r.url, r.ok) for r in results] == [
        ("/img/a.webp", True),
        ("/img/broken.webp", False),
        ("/img/b.webp", True),
    ]
    assert "broken.webp" in caplog.text


def test_preload_images_survives_non_http_errors():
    class BrokenDecoderSession(FakeSession):
        def get(self, url, **kwargs):
            if "corrupt" in url:
                raise ValueError("decode failure")
            return FakeResponse({"ok": True})

    results = preload_images(BrokenDecoderSession(), ["/img/a.webp", "/img/corrupt.webp"])

    assert [(r.url, r.ok) for r in results] == [("/img/a.webp", True), ("/img/corrupt.webp", False)]
    assert results[1].error == "decode failure"


def test_content_client_caches_by_full_url(clock):
    session = FakeSession({"http://api.test/api/highlights": FakeResponse({"highlights": []})})
    client = ContentClient("http://api.test/", session=session, cache=ContentCache(clock=clock))

    assert client.highlights() == {"highlights": []}
    assert client.highlights() == {"highlights": []}
    assert len(session.calls) == 1

    client.invalidate("highlights")
    client.highlights()
    assert len(session.calls) == 2
