"""
Rich terminal output helpers for CLI.

Provides functions for printing player cards, match details, and
formatted messages using the Rich library.
"""

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from pubglookup.core.models import MatchResponse, PlayerData

# Console instance for all output
console = Console()


def _or_dash(value: str | None) -> str:
    return value if value and value.strip() else "-"


def print_player(player: PlayerData, match_ids: list[str]) -> None:
    """Print a player card followed by the list of recent matches.

    Args:
        player: The player found.
        match_ids: Recent match ids to list.
    """
    console.print()
    console.print(
        Panel(
            f"[bold]{escape(_or_dash(player.name))}[/]\n[dim]{escape(player.id)}[/]",
            title="Player",
            box=box.ROUNDED,
        )
    )

    if not match_ids:
        console.print("[yellow]No recent matches.[/]")
        return

    table = Table(
        title=f"Recent matches ({len(match_ids)})",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Match ID", style="cyan", no_wrap=True)

    for i, match_id in enumerate(match_ids, start=1):
        table.add_row(str(i), match_id)

    console.print(table)


def print_match(match: MatchResponse) -> None:
    """Print the details of one match."""
    attrs = match.data.attributes

    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")

    table.add_row("Match ID", _or_dash(match.data.id))
    table.add_row("Map", _or_dash(attrs.map_name))
    table.add_row("Mode", _or_dash(attrs.game_mode))
    table.add_row("Duration", attrs.duration_display)
    table.add_row("Created", _or_dash(attrs.created_at))

    console.print()
    console.print(Panel(table, title="Match", box=box.ROUNDED))


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/] {escape(message)}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/] {escape(message)}")
