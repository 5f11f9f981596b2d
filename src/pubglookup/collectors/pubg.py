"""
PUBG API client for player and match lookups.

Builds the shard-specific URLs and cache keys for the two queries the
application makes, and routes them through the cache client so repeated
lookups of the same player or match stay off the network.
"""

import os
from datetime import timedelta
from typing import Optional

from pubglookup.cache.memory import CacheClient, MemoryCache
from pubglookup.collectors.fetcher import Fetcher
from pubglookup.core.cancellation import CancellationSignal
from pubglookup.core.exceptions import PlayerNotFoundError
from pubglookup.core.models import MatchResponse, PlayerData, PlayerResponse
from pubglookup.core.validation import (
    encode_for_url,
    sanitize_credential,
    validate_match_id,
    validate_player_name,
)


class PubgClient:
    """Async client for the PUBG API.

    The API key is read once, cleaned, and validated here so a bad key
    fails at construction rather than on the first request.
    """

    BASE_URL = "https://api.pubg.com"
    DEFAULT_SHARD = "steam"

    # Searching the same name again right away should not hit the API
    PLAYER_CACHE_TTL = timedelta(minutes=5)
    # Match data is immutable once the match is over
    MATCH_CACHE_TTL = timedelta(minutes=10)

    def __init__(
        self,
        api_key: Optional[str] = None,
        shard: str = DEFAULT_SHARD,
        fetcher: Optional[Fetcher] = None,
        cache: Optional[CacheClient] = None,
        base_url: str = BASE_URL,
    ):
        """Initialize the PUBG client.

        Args:
            api_key: PUBG API key. Falls back to the PUBG_API_KEY environment
                     variable.
            shard: Platform shard, e.g. "steam", "kakao", "psn".
            fetcher: Optional fetcher. One with its own session is created
                     by default.
            cache: Optional cache client. Defaults to one wrapping ``fetcher``.
            base_url: API root, overridable for tests and proxies.

        Raises:
            ValidationError: If no usable API key is available.
        """
        self.api_key = sanitize_credential(api_key or os.environ.get("PUBG_API_KEY"))
        self.shard = shard
        self.base_url = base_url.rstrip("/")

        if cache is None:
            cache = CacheClient(fetcher or Fetcher(), MemoryCache())
        self.cache = cache
        self.fetcher = cache.fetcher

    async def close(self) -> None:
        await self.fetcher.close()

    async def __aenter__(self) -> "PubgClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    @property
    def shard_url(self) -> str:
        return f"{self.base_url}/shards/{encode_for_url(self.shard)}"

    def players_url(self, player_name: str) -> str:
        """Build the URL that searches a player by exact name."""
        name = encode_for_url(player_name.strip())
        return f"{self.shard_url}/players?filter[playerNames]={name}"

    def match_url(self, match_id: str) -> str:
        """Build the URL for a single match."""
        return f"{self.shard_url}/matches/{encode_for_url(match_id)}"

    @staticmethod
    def player_cache_key(player_name: str) -> str:
        # Names are case-insensitive on the API side
        return MemoryCache.make_key("player", player_name.strip().lower())

    @staticmethod
    def match_cache_key(match_id: str) -> str:
        return MemoryCache.make_key("match", match_id)

    async def find_player(
        self,
        player_name: str,
        signal: Optional[CancellationSignal] = None,
    ) -> PlayerData:
        """Find a player by name.

        Args:
            player_name: Name as typed by the user.
            signal: Optional cancellation signal.

        Returns:
            The first player the API returned.

        Raises:
            ValidationError: If the name is empty or malformed.
            PlayerNotFoundError: If the API returned no players.
            FetchError: If the request or decoding fails.
        """
        name = validate_player_name(player_name)

        response = await self.cache.get(
            self.player_cache_key(name),
            self.PLAYER_CACHE_TTL,
            self.players_url(name),
            PlayerResponse,
            self.api_key,
            signal,
        )

        player = response.first()
        if player is None:
            raise PlayerNotFoundError(name, self.shard)
        return player

    async def get_match(
        self,
        match_id: str,
        signal: Optional[CancellationSignal] = None,
    ) -> MatchResponse:
        """Fetch match details by id.

        Raises:
            ValidationError: If the id is empty.
            FetchError: If the request or decoding fails.
        """
        match_id = validate_match_id(match_id)

        return await self.cache.get(
            self.match_cache_key(match_id),
            self.MATCH_CACHE_TTL,
            self.match_url(match_id),
            MatchResponse,
            self.api_key,
            signal,
        )
