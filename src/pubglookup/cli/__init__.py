"""
Command-line interface for pubglookup.

Provides Click-based CLI commands for player and match lookups.
"""

from pubglookup.cli.main import cli

__all__ = ["cli"]
