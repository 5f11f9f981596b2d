"""
Main CLI entry point for pubglookup.

Provides commands for looking up a player, showing a match, and an
interactive shell that keeps its cache for the whole session.
"""

import asyncio
import sys
from typing import Optional

import click

from pubglookup import __version__
from pubglookup.cli.output import (
    print_error,
    print_match,
    print_player,
    print_warning,
)
from pubglookup.collectors.pubg import PubgClient
from pubglookup.core.exceptions import (
    ErrorKind,
    FetchError,
    PubgLookupError,
)
from pubglookup.logger import setup_logging
from pubglookup.lookup import PlayerLookup


def _make_client(ctx: click.Context) -> PubgClient:
    return PubgClient(api_key=ctx.obj.get("api_key"), shard=ctx.obj["shard"])


async def _with_client(ctx: click.Context, action):
    """Run ``action(client)`` and close the client afterwards."""
    async with _make_client(ctx) as client:
        return await action(client)


def _fail(message: str, error: PubgLookupError) -> None:
    if isinstance(error, FetchError) and error.kind is ErrorKind.UNAUTHORIZED:
        print_warning("Set a valid key with --api-key or PUBG_API_KEY.")
    print_error(f"{message}: {error}")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="pubglookup")
@click.option(
    "--api-key",
    envvar="PUBG_API_KEY",
    help="PUBG API key.",
)
@click.option(
    "--shard",
    default=PubgClient.DEFAULT_SHARD,
    show_default=True,
    help="Platform shard (steam, kakao, psn, xbox, ...).",
)
@click.option("--verbose", "-v", is_flag=True, help="Log requests and cache activity.")
@click.pass_context
def cli(ctx: click.Context, api_key: Optional[str], shard: str, verbose: bool) -> None:
    """PUBG lookup - players and matches from the PUBG API.

    Results are cached in memory for the lifetime of the process.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["api_key"] = api_key
    ctx.obj["shard"] = shard


@cli.command()
@click.argument("name")
@click.option(
    "--limit", "-n",
    type=click.IntRange(min=0),
    default=25,
    show_default=True,
    help="Number of recent matches to list.",
)
@click.pass_context
def player(ctx: click.Context, name: str, limit: int) -> None:
    """Look up a player by NAME and list their recent matches.

    \b
    Examples:
        pubglookup player shroud
        pubglookup --shard kakao player somename -n 5
    """
    try:
        found = asyncio.run(_with_client(ctx, lambda c: c.find_player(name)))
    except PubgLookupError as e:
        _fail("Lookup failed", e)
        return

    print_player(found, found.match_ids(limit))


@cli.command()
@click.argument("match_id")
@click.pass_context
def match(ctx: click.Context, match_id: str) -> None:
    """Show the details of match MATCH_ID.

    \b
    Examples:
        pubglookup match 2f3a5c1e-...
    """
    try:
        details = asyncio.run(_with_client(ctx, lambda c: c.get_match(match_id)))
    except PubgLookupError as e:
        _fail("Lookup failed", e)
        return

    print_match(details)


@cli.command()
@click.option(
    "--limit", "-n",
    type=click.IntRange(min=0),
    default=25,
    show_default=True,
    help="Number of recent matches to list per player.",
)
@click.pass_context
def shell(ctx: click.Context, limit: int) -> None:
    """Interactive lookups sharing one cache.

    Type a player name to search, the number of a listed match to show it,
    or an empty line to quit. Repeating a search within a few minutes is
    answered from memory.
    """
    try:
        client = _make_client(ctx)
    except PubgLookupError as e:
        _fail("Cannot start", e)
        return

    lookup = PlayerLookup(client, match_limit=limit)
    loop = asyncio.new_event_loop()
    match_ids: list[str] = []

    try:
        while True:
            text = click.prompt("player or match #", default="", show_default=False).strip()
            if not text:
                break

            try:
                if text.isdigit() and match_ids:
                    index = int(text) - 1
                    if not 0 <= index < len(match_ids):
                        print_warning(f"Pick a match between 1 and {len(match_ids)}.")
                        continue
                    print_match(loop.run_until_complete(lookup.select_match(match_ids[index])))
                else:
                    found, match_ids = loop.run_until_complete(lookup.search_player(text))
                    print_player(found, match_ids)
            except PubgLookupError as e:
                print_error(str(e))
    finally:
        loop.run_until_complete(client.close())
        loop.close()
