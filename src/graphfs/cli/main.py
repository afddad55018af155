"""Main CLI entry point for graphfs."""  # pragma: no cover

from graphfs.cli.app import app  # pragma: no cover

# Register commands
from graphfs.cli.commands import filesystem  # noqa: F401  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
