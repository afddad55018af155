"""API routers."""

from graphfs.api.routers import filesystem_router as filesystem

__all__ = ["filesystem"]
