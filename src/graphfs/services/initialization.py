"""Shared initialization for graphfs.

Used by both the CLI and the API so startup behaves the same on every entry
point.
"""

from typing import Dict

from loguru import logger

from graphfs import db
from graphfs.config import GraphFSConfig
from graphfs.services.filesystem_service import FileSystemService


async def initialize_database(app_config: GraphFSConfig) -> None:
    """Connect to the configured database and make sure the schema exists."""
    try:
        await db.get_or_create_db(app_config=app_config)
        logger.info("Database initialization completed")
    except Exception as e:
        logger.error(f"Error during database initialization: {e}")
        raise


# name -> (parent name, files as title -> content)
DEMO_HIERARCHY = {
    "Root": (None, {"README.txt": "Welcome to the file system."}),
    "Documents": ("Root", {}),
    "Media": ("Root", {}),
    "Trash": ("Root", {"old_config.json": "{}"}),
    "Work Projects": (
        "Documents",
        {"2024_Budget.xlsx": "raw_binary_content_mock", "meeting_notes.md": "# Monday Meeting"},
    ),
    "Personal": ("Documents", {}),
    "Photos": ("Media", {"logo.png": "image_data"}),
}


async def seed_demo_hierarchy(service: FileSystemService) -> Dict[str, str]:
    """Create the demo hierarchy.

    Returns:
        Mapping of every created folder name and file title to its canonical id
    """
    ids: Dict[str, str] = {}
    for name, (parent, files) in DEMO_HIERARCHY.items():
        folder = await service.create_folder(name, ids[parent] if parent else None)
        ids[name] = folder.id
        for title, content in files.items():
            file = await service.create_file(title, folder.id, content)
            ids[title] = file.id

    logger.info(f"Seeded demo hierarchy with {len(ids)} nodes")
    return ids
