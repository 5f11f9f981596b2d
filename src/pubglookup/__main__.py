"""
CLI entry point for running pubglookup as a module.

Usage: python -m pubglookup [OPTIONS] COMMAND [ARGS]...
"""

from pubglookup.cli.main import cli

if __name__ == "__main__":
    cli()
