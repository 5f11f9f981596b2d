"""
pubglookup

An async client for the PUBG API with an in-memory response cache.
Looks up players by name and matches by id, keeps decoded results for a
few minutes so repeated lookups stay off the network, and reports failures
as a small set of typed errors.

Quick Start:
    >>> import asyncio
    >>> from pubglookup import PubgClient
    >>> async def main():
    ...     async with PubgClient(api_key="...") as client:
    ...         player = await client.find_player("shroud")
    ...         match = await client.get_match(player.match_ids(1)[0])
    ...         print(match.data.attributes.map_name)
    >>> asyncio.run(main())

    # Or use the synchronous API:
    >>> from pubglookup import find_player_sync
    >>> player = find_player_sync("shroud")
"""

__version__ = "0.1.0"

# High-level API
from pubglookup.api import (
    find_player,
    find_player_sync,
    get_match,
    get_match_sync,
)

# Core components
from pubglookup.cache.memory import CacheClient, CacheEntry, MemoryCache
from pubglookup.collectors.fetcher import Fetcher
from pubglookup.collectors.pubg import PubgClient
from pubglookup.core.cancellation import CancellationScope, CancellationSignal
from pubglookup.lookup import PlayerLookup

# Exceptions
from pubglookup.core.exceptions import (
    DecodeError,
    EmptyBodyError,
    ErrorKind,
    FetchError,
    HttpError,
    NetworkUnavailableError,
    PlayerNotFoundError,
    PubgLookupError,
    RequestCancelledError,
    ServerError,
    UnauthorizedError,
    ValidationError,
)

# Data models
from pubglookup.core.models import (
    MatchAttributes,
    MatchData,
    MatchReference,
    MatchResponse,
    PlayerAttributes,
    PlayerData,
    PlayerResponse,
)

__all__ = [
    # Version
    "__version__",
    # High-level API
    "find_player",
    "find_player_sync",
    "get_match",
    "get_match_sync",
    # Core
    "CacheClient",
    "CacheEntry",
    "MemoryCache",
    "Fetcher",
    "PubgClient",
    "PlayerLookup",
    "CancellationScope",
    "CancellationSignal",
    # Models
    "MatchAttributes",
    "MatchData",
    "MatchReference",
    "MatchResponse",
    "PlayerAttributes",
    "PlayerData",
    "PlayerResponse",
    # Exceptions
    "ErrorKind",
    "PubgLookupError",
    "FetchError",
    "NetworkUnavailableError",
    "RequestCancelledError",
    "UnauthorizedError",
    "ServerError",
    "HttpError",
    "EmptyBodyError",
    "DecodeError",
    "ValidationError",
    "PlayerNotFoundError",
]
