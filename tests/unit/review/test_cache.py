"""Tests for ResponseCache."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from commitguard.exceptions import CacheError
from commitguard.review import ResponseCache, cache_key


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(tmp_path: Path, clock: FakeClock) -> ResponseCache:
    return ResponseCache(tmp_path / "cache", ttl=3600, clock=clock)


class TestCacheKey:
    def test_stable(self) -> None:
        assert cache_key("p", "s", "sonnet") == cache_key("p", "s", "sonnet")
        assert len(cache_key("p", "s", "sonnet")) == 64

    def test_every_part_counts(self) -> None:
        base = cache_key("p", "s", "sonnet")

        assert cache_key("p2", "s", "sonnet") != base
        assert cache_key("p", "s2", "sonnet") != base
        assert cache_key("p", "s", "opus") != base

    def test_no_boundary_collisions(self) -> None:
        assert cache_key("ab", "c", "m") != cache_key("a", "bc", "m")


class TestResponseCache:
    def test_miss_on_empty_cache(self, cache: ResponseCache) -> None:
        assert cache.get("abc") is None

    def test_put_then_get(self, cache: ResponseCache) -> None:
        cache.put("abc", "PASS", model="sonnet")

        assert cache.get("abc") == "PASS"
        entry = json.loads((cache.directory / "abc.json").read_text())
        assert entry["model"] == "sonnet"
        assert entry["key"] == "abc"

    def test_entry_expires_after_ttl(self, cache: ResponseCache, clock: FakeClock) -> None:
        cache.put("abc", "PASS")

        clock.now += 3600
        assert cache.get("abc") == "PASS"
        clock.now += 1
        assert cache.get("abc") is None

    def test_put_replaces_entry(self, cache: ResponseCache) -> None:
        cache.put("abc", "first")
        cache.put("abc", "second")

        assert cache.get("abc") == "second"

    def test_corrupt_entry_raises(self, cache: ResponseCache) -> None:
        cache.directory.mkdir(parents=True)
        (cache.directory / "abc.json").write_text("{not json")

        with pytest.raises(CacheError):
            cache.get("abc")

    def test_entry_without_response_raises(self, cache: ResponseCache) -> None:
        cache.directory.mkdir(parents=True)
        (cache.directory / "abc.json").write_text(json.dumps({"created_at": 1}))

        with pytest.raises(CacheError):
            cache.get("abc")

    @pytest.mark.parametrize("created_at", ["yesterday", None, [1], "nan"])
    def test_bad_timestamp_raises_cache_error(
        self, cache: ResponseCache, created_at: object
    ) -> None:
        cache.directory.mkdir(parents=True)
        (cache.directory / "abc.json").write_text(
            json.dumps({"created_at": created_at, "response": "PASS"})
        )

        with pytest.raises(CacheError):
            cache.get("abc")

    def test_purge_removes_entry_with_bad_timestamp(self, cache: ResponseCache) -> None:
        cache.directory.mkdir(parents=True)
        (cache.directory / "abc.json").write_text(
            json.dumps({"created_at": "yesterday", "response": "PASS"})
        )

        assert cache.purge_expired() == 1

    def test_unwritable_directory_raises(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        cache = ResponseCache(blocker / "cache", ttl=60)

        with pytest.raises(CacheError):
            cache.put("abc", "PASS")

    def test_purge_expired(self, cache: ResponseCache, clock: FakeClock) -> None:
        cache.put("old", "PASS")
        clock.now += 4000
        cache.put("new", "PASS")
        (cache.directory / "broken.json").write_text("")

        assert cache.purge_expired() == 2
        assert cache.get("new") == "PASS"
        assert sorted(p.name for p in cache.directory.iterdir()) == ["new.json"]

    def test_clear(self, cache: ResponseCache) -> None:
        cache.put("a", "PASS")
        cache.put("b", "PASS")

        assert cache.clear() == 2
        assert cache.get("a") is None

    def test_clear_missing_directory(self, tmp_path: Path) -> None:
        assert ResponseCache(tmp_path / "absent", ttl=60).clear() == 0
