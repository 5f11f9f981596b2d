"""
High-level programmatic API for pubglookup.

These functions open a client, run one lookup, and close the client again,
so each call starts with an empty cache. Keep a ``PubgClient`` around when
repeated lookups should be served from memory.

Example:
    import asyncio
    from pubglookup import find_player, get_match

    async def main():
        player = await find_player("shroud")
        print(player.id, player.match_ids(5))

        match = await get_match(player.match_ids(1)[0])
        print(match.data.attributes.map_name)

    asyncio.run(main())
"""

import asyncio

from pubglookup.collectors.pubg import PubgClient
from pubglookup.core.models import MatchResponse, PlayerData


async def find_player(
    player_name: str,
    *,
    api_key: str | None = None,
    shard: str = PubgClient.DEFAULT_SHARD,
) -> PlayerData:
    """Find a player by name.

    Args:
        player_name: Exact player name.
        api_key: PUBG API key. Falls back to PUBG_API_KEY.
        shard: Platform shard (default: "steam").

    Returns:
        The matching player.

    Example:
        >>> import asyncio
        >>> from pubglookup import find_player
        >>> player = asyncio.run(find_player("shroud"))
        >>> player.name
        'shroud'
    """
    async with PubgClient(api_key=api_key, shard=shard) as client:
        return await client.find_player(player_name)


async def get_match(
    match_id: str,
    *,
    api_key: str | None = None,
    shard: str = PubgClient.DEFAULT_SHARD,
) -> MatchResponse:
    """Fetch the details of one match.

    Args:
        match_id: Match id, usually taken from ``PlayerData.match_ids()``.
        api_key: PUBG API key. Falls back to PUBG_API_KEY.
        shard: Platform shard (default: "steam").
    """
    async with PubgClient(api_key=api_key, shard=shard) as client:
        return await client.get_match(match_id)


def find_player_sync(
    player_name: str,
    *,
    api_key: str | None = None,
    shard: str = PubgClient.DEFAULT_SHARD,
) -> PlayerData:
    """Synchronous wrapper for find_player().

    For use in non-async contexts. Runs a new event loop.
    """
    return asyncio.run(find_player(player_name, api_key=api_key, shard=shard))


def get_match_sync(
    match_id: str,
    *,
    api_key: str | None = None,
    shard: str = PubgClient.DEFAULT_SHARD,
) -> MatchResponse:
    """Synchronous wrapper for get_match()."""
    return asyncio.run(get_match(match_id, api_key=api_key, shard=shard))
