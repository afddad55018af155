"""graphfs API module."""

from graphfs.api.app import app

__all__ = ["app"]
