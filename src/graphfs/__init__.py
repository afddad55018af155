"""graphfs - virtual file system stored as a folder/file containment graph."""

__version__ = "0.1.0"
