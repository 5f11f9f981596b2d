"""
Tests for the in-memory cache and the cache client.
"""

import asyncio
import json
from datetime import timedelta

import pytest

from pubglookup.cache.memory import CacheClient, CacheEntry, MemoryCache
from pubglookup.collectors.fetcher import Fetcher
from pubglookup.core.cancellation import CancellationSignal
from pubglookup.core.exceptions import (
    DecodeError,
    ErrorKind,
    HttpError,
    NetworkUnavailableError,
    RequestCancelledError,
    ServerError,
)
from pubglookup.core.models import MatchResponse, PlayerResponse
from stubs import StubFetcher

URL = "https://api.pubg.com/shards/steam/players?filter[playerNames]=shroud"
SHROUD = '{"data":[{"id":"p1","attributes":{"name":"shroud"}}]}'


class TestMemoryCache:
    """Tests for the MemoryCache store."""

    def test_set_and_get(self, store):
        """Test basic set and get operations."""
        store.set("player_shroud", {"id": "p1"}, 60)
        assert store.get("player_shroud") == {"id": "p1"}

    def test_get_missing(self, store):
        """Test that a missing key returns None."""
        assert store.get("nope") is None

    def test_expiry_is_inclusive(self, store, clock):
        """Test that an entry is still served exactly at its expiry time."""
        store.set("k", "v", 60)
        clock.advance(60)
        assert store.get("k") == "v"
        clock.advance(0.001)
        assert store.get("k") is None

    def test_set_overwrites(self, store):
        """Test that a new value replaces the old entry."""
        store.set("k", "old", 60)
        first = store.get_entry("k")
        store.set("k", "new", 60)

        assert store.get("k") == "new"
        assert store.get_entry("k") is not first

    def test_expired_entries_kept_until_cleanup(self, store, clock):
        """Test that expiry is lazy and cleanup() sweeps on demand."""
        store.set("a", 1, 10)
        store.set("b", 2, 100)
        clock.advance(50)

        assert len(store) == 2
        assert store.cleanup() == 1
        assert "a" not in store
        assert store.get("b") == 2

    def test_delete_and_invalidate(self, store):
        """Test removing single entries and entries by prefix."""
        store.set("player_a", 1, 60)
        store.set("player_b", 2, 60)
        store.set("match_m1", 3, 60)

        assert store.delete("player_a")
        assert not store.delete("player_a")
        assert store.invalidate("player_") == 1
        assert store.get("match_m1") == 3

    def test_clear(self, store):
        """Test clearing everything."""
        store.set("a", 1, 60)
        store.set("b", 2, 60)
        assert store.clear() == 2
        assert len(store) == 0

    def test_stats(self, store, clock):
        """Test statistics by key prefix."""
        store.set("player_a", 1, 10)
        store.set("player_b", 2, 100)
        store.set("match_m1", 3, 100)
        clock.advance(50)

        stats = store.stats()

        assert stats["total_entries"] == 3
        assert stats["valid_entries"] == 2
        assert stats["expired_entries"] == 1
        assert stats["entries_by_prefix"] == {"player": 1, "match": 1}

    def test_make_key(self):
        """Test key construction."""
        assert MemoryCache.make_key("player", "shroud") == "player_shroud"

    def test_entry_is_immutable(self):
        """Test that entries cannot be changed in place."""
        entry = CacheEntry(value=1, expires_at=10.0)
        with pytest.raises(AttributeError):
            entry.value = 2  # type: ignore[misc]


class TestCacheClientHits:
    """Tests for serving values from the cache."""

    @pytest.mark.asyncio
    async def test_hit_avoids_network(self, store):
        """Test that a live entry is returned without calling the fetcher."""
        fetcher = StubFetcher(SHROUD)
        client = CacheClient(fetcher, store)

        first = await client.get("player_shroud", 300, URL, PlayerResponse, "key")
        second = await client.get("player_shroud", 300, URL, PlayerResponse, "key")

        assert fetcher.call_count == 1
        assert second is first
        assert first.data[0].id == "p1"
        assert first.data[0].name == "shroud"

    @pytest.mark.asyncio
    async def test_hit_ignores_cancelled_signal(self, store):
        """Test that a cache hit is served even if the signal already fired."""
        fetcher = StubFetcher(SHROUD)
        client = CacheClient(fetcher, store)
        await client.get("player_shroud", 300, URL, PlayerResponse, "key")

        signal = CancellationSignal()
        signal.cancel()
        value = await client.get("player_shroud", 300, URL, PlayerResponse, "key", signal)

        assert value.data[0].id == "p1"
        assert fetcher.call_count == 1

    @pytest.mark.asyncio
    async def test_expiry_boundary(self, store, clock):
        """Test hit just before expiry and refetch just after."""
        fetcher = StubFetcher(SHROUD)
        client = CacheClient(fetcher, store)
        ttl = 300

        await client.get("player_shroud", ttl, URL, PlayerResponse, "key")

        clock.advance(ttl - 0.001)
        await client.get("player_shroud", ttl, URL, PlayerResponse, "key")
        assert fetcher.call_count == 1

        clock.advance(0.002)
        await client.get("player_shroud", ttl, URL, PlayerResponse, "key")
        assert fetcher.call_count == 2

    @pytest.mark.asyncio
    async def test_timedelta_ttl(self, store, clock):
        """Test that a timedelta TTL behaves like seconds."""
        fetcher = StubFetcher(SHROUD)
        client = CacheClient(fetcher, store)

        await client.get("player_shroud", timedelta(minutes=5), URL, PlayerResponse, "key")
        clock.advance(299)
        await client.get("player_shroud", timedelta(minutes=5), URL, PlayerResponse, "key")
        assert fetcher.call_count == 1

        clock.advance(2)
        await client.get("player_shroud", timedelta(minutes=5), URL, PlayerResponse, "key")
        assert fetcher.call_count == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("ttl", [0, -5])
    async def test_non_positive_ttl_never_caches(self, store, ttl):
        """Test that ttl <= 0 makes every call a fresh fetch."""
        fetcher = StubFetcher(SHROUD)
        client = CacheClient(fetcher, store)

        await client.get("player_shroud", ttl, URL, PlayerResponse, "key")
        await client.get("player_shroud", ttl, URL, PlayerResponse, "key")

        assert fetcher.call_count == 2
        assert "player_shroud" not in store

    @pytest.mark.asyncio
    async def test_entry_of_other_type_is_a_miss(self, store, match_payload):
        """Test that a value of the wrong model under the same key is refetched."""
        fetcher = StubFetcher(json.dumps(match_payload), SHROUD)
        client = CacheClient(fetcher, store)

        await client.get("shared", 300, URL, MatchResponse, "key")
        value = await client.get("shared", 300, URL, PlayerResponse, "key")

        assert isinstance(value, PlayerResponse)
        assert fetcher.call_count == 2
        assert isinstance(store.get("shared"), PlayerResponse)

    @pytest.mark.asyncio
    async def test_forwards_request_arguments(self, store):
        """Test that address, credential and signal reach the fetcher."""
        fetcher = StubFetcher(SHROUD)
        client = CacheClient(fetcher, store)
        signal = CancellationSignal()

        await client.get("player_shroud", 300, URL, PlayerResponse, "secret", signal)

        assert fetcher.calls == [(URL, "secret", signal)]

    @pytest.mark.asyncio
    async def test_distinct_keys_fetch_separately(self, store):
        """Test that different keys never share an entry."""
        fetcher = StubFetcher(SHROUD)
        client = CacheClient(fetcher, store)

        await client.get("player_shroud", 300, URL, PlayerResponse, "key")
        await client.get("player_other", 300, URL, PlayerResponse, "key")

        assert fetcher.call_count == 2


class TestCacheClientFailures:
    """Tests that failures propagate and never reach the store."""

    @pytest.mark.asyncio
    async def test_failure_does_not_poison_cache(self, store):
        """Test that a failed fetch is retried from scratch on the next call."""
        fetcher = StubFetcher(NetworkUnavailableError(URL), SHROUD)
        client = CacheClient(fetcher, store)

        with pytest.raises(NetworkUnavailableError):
            await client.get("player_shroud", 300, URL, PlayerResponse, "key")
        assert "player_shroud" not in store

        value = await client.get("player_shroud", 300, URL, PlayerResponse, "key")
        assert value.data[0].id == "p1"
        assert fetcher.call_count == 2

    @pytest.mark.asyncio
    async def test_failure_is_propagated_verbatim(self, store):
        """Test that the exact exception object from the fetcher surfaces."""
        error = HttpError(URL, 404, "Not Found", "nope")
        client = CacheClient(StubFetcher(error), store)

        with pytest.raises(HttpError) as exc_info:
            await client.get("player_shroud", 300, URL, PlayerResponse, "key")

        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_failed_refresh_does_not_fall_back_to_stale(self, store, clock):
        """Test that an expired entry is not served when the refresh fails."""
        fetcher = StubFetcher(SHROUD, ServerError(URL, 503, "down"))
        client = CacheClient(fetcher, store)

        await client.get("player_shroud", 60, URL, PlayerResponse, "key")
        clock.advance(61)

        with pytest.raises(ServerError):
            await client.get("player_shroud", 60, URL, PlayerResponse, "key")

    @pytest.mark.asyncio
    async def test_incompatible_shape_is_decode_error(self, store):
        """Test that '{}' decoded as a player response fails and is not stored."""
        client = CacheClient(StubFetcher("{}"), store)

        with pytest.raises(DecodeError) as exc_info:
            await client.get("player_shroud", 300, URL, PlayerResponse, "key")

        assert exc_info.value.kind is ErrorKind.DECODE_ERROR
        assert exc_info.value.model == "PlayerResponse"
        assert "player_shroud" not in store

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body,model",
        [
            ("not json", PlayerResponse),
            ("[1, 2]", PlayerResponse),
            ('{"data": {"id": "x"}}', PlayerResponse),
            ("[" * 100000 + "]" * 100000, PlayerResponse),
            ('{"data": {"id": "m1", "attributes": {"duration": 1e400}}}', MatchResponse),
        ],
        ids=["not-json", "array", "missing-fields", "deep-nesting", "infinite-duration"],
    )
    async def test_malformed_bodies_are_decode_errors(self, store, body, model):
        """Test that invalid JSON, deep nesting and wrong structures are DecodeErrors."""
        client = CacheClient(StubFetcher(body), store)

        with pytest.raises(DecodeError):
            await client.get("some_key", 300, URL, model, "key")

        assert "some_key" not in store

    @pytest.mark.asyncio
    async def test_cancelled_fetch_leaves_store_untouched(self, store, clock):
        """Test that a cancelled refresh neither writes nor removes entries."""
        fetcher = StubFetcher(SHROUD, RequestCancelledError(URL))
        client = CacheClient(fetcher, store)

        await client.get("player_shroud", 60, URL, PlayerResponse, "key")
        before = store.get_entry("player_shroud")
        clock.advance(61)

        with pytest.raises(RequestCancelledError):
            await client.get("player_shroud", 60, URL, PlayerResponse, "key")

        assert store.get_entry("player_shroud") is before


class TestCacheClientWithServer:
    """End-to-end tests through a real fetcher and a local server."""

    @pytest.mark.asyncio
    async def test_player_lookup_is_cached(self, fake_api, store):
        """Test a first miss against the server and a second hit from memory."""
        fake_api.respond("/players", body=SHROUD)

        async with Fetcher() as fetcher:
            client = CacheClient(fetcher, store)
            first = await client.get(
                "player_shroud", timedelta(minutes=5), fake_api.url("/players"),
                PlayerResponse, "key",
            )
            second = await client.get(
                "player_shroud", timedelta(minutes=5), fake_api.url("/players"),
                PlayerResponse, "key",
            )

        assert first.data[0].id == "p1"
        assert second is first
        assert len(fake_api.requests) == 1

    @pytest.mark.asyncio
    async def test_server_error_then_recovery(self, fake_api, store, match_payload):
        """Test that a 500 surfaces with its body and a later retry caches normally."""
        fake_api.respond("/matches/m1", status=500, body="upstream down")

        async with Fetcher() as fetcher:
            client = CacheClient(fetcher, store)
            url = fake_api.url("/matches/m1")

            with pytest.raises(ServerError) as exc_info:
                await client.get("match_m1", timedelta(minutes=10), url, MatchResponse, "key")
            assert "upstream down" in str(exc_info.value)
            assert "match_m1" not in store

            fake_api.respond("/matches/m1", body=match_payload)
            recovered = await client.get("match_m1", timedelta(minutes=10), url, MatchResponse, "key")
            again = await client.get("match_m1", timedelta(minutes=10), url, MatchResponse, "key")

        assert recovered.data.id == "m1"
        assert again is recovered
        assert len(fake_api.requests) == 2

    @pytest.mark.asyncio
    async def test_cancel_in_flight_miss(self, fake_api, store):
        """Test that cancelling a pending miss leaves no entry behind."""
        fake_api.hang("/players")
        signal = CancellationSignal()

        async with Fetcher() as fetcher:
            client = CacheClient(fetcher, store)
            task = asyncio.ensure_future(
                client.get("player_shroud", 300, fake_api.url("/players"),
                           PlayerResponse, "key", signal)
            )
            await asyncio.wait_for(fake_api.received.wait(), timeout=5)
            signal.cancel()

            with pytest.raises(RequestCancelledError):
                await asyncio.wait_for(task, timeout=5)

        assert "player_shroud" not in store
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_concurrent_misses_both_fetch(self, fake_api, store):
        """Test that concurrent misses on one key are not merged."""
        fake_api.respond("/players", body=SHROUD)

        async with Fetcher() as fetcher:
            client = CacheClient(fetcher, store)
            url = fake_api.url("/players")
            a, b = await asyncio.gather(
                client.get("player_shroud", 300, url, PlayerResponse, "key"),
                client.get("player_shroud", 300, url, PlayerResponse, "key"),
            )

        assert len(fake_api.requests) == 2
        assert store.get("player_shroud") in (a, b)
