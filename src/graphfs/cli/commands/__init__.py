"""CLI commands for graphfs."""

from graphfs.cli.commands import filesystem

__all__ = ["filesystem"]
