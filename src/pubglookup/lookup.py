"""
Lookup orchestration for interactive front ends.

``PlayerLookup`` is what a UI talks to: every user action (a new search, a
new match selection) aborts whatever the previous action was still waiting
on before it starts its own request.
"""

from typing import Optional

from pubglookup.collectors.pubg import PubgClient
from pubglookup.core.cancellation import CancellationScope
from pubglookup.core.models import MatchResponse, PlayerData


class PlayerLookup:
    """Coordinate player searches and match selections.

    Both actions share one cancellation scope, mirroring a window with a
    single status line: a match click cancels a pending search and vice
    versa.
    """

    def __init__(self, client: PubgClient, match_limit: int = 25):
        """Initialize the lookup.

        Args:
            client: PUBG client doing the actual requests.
            match_limit: Number of recent match ids kept per player.
        """
        self.client = client
        self.match_limit = match_limit
        self.scope = CancellationScope()

    async def search_player(self, player_name: str) -> tuple[PlayerData, list[str]]:
        """Search a player, cancelling any pending action first.

        Returns:
            The player and up to ``match_limit`` of their recent match ids.
        """
        signal = self.scope.renew()
        player = await self.client.find_player(player_name, signal)
        return player, player.match_ids(self.match_limit)

    async def select_match(self, match_id: Optional[str]) -> Optional[MatchResponse]:
        """Load a match, cancelling any pending action first.

        A cleared selection (``None`` or blank) loads nothing and leaves the
        pending action alone.
        """
        if not match_id or not match_id.strip():
            return None
        signal = self.scope.renew()
        return await self.client.get_match(match_id, signal)

    def cancel(self) -> None:
        """Cancel the pending action, if any."""
        self.scope.cancel()
