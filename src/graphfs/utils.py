"""Utility functions for graphfs."""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from loguru import logger


def ensure_timezone_aware(dt: datetime) -> datetime:
    """Ensure a datetime is timezone-aware using the local timezone.

    SQLite does not store timezone information, so datetimes read back from it
    are naive. Naive values are interpreted as local time.
    """
    if dt.tzinfo is None:
        return dt.astimezone()
    return dt


class InterceptHandler(logging.Handler):
    """Route stdlib logging records (SQLAlchemy, uvicorn) through loguru."""

    def emit(self, record: logging.LogRecord) -> None:  # pragma: no cover
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find the caller frame outside of the logging module
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(
    log_level: str = "INFO",
    log_to_file: bool = False,
    log_to_stdout: bool = False,
    log_file: Optional[Path] = None,
    structured_context: bool = False,
) -> None:  # pragma: no cover
    """Configure loguru sinks.

    Args:
        log_level: Minimum level for all sinks
        log_to_file: Write to a rotating log file under the data directory
        log_to_stdout: Write to stderr (used by the API server)
        log_file: Override the log file location
        structured_context: Emit JSON records instead of formatted lines
    """
    logger.remove()

    if log_to_file:
        if log_file is None:
            home = os.getenv("GRAPHFS_HOME", str(Path.home() / ".graphfs"))
            log_file = Path(home) / "graphfs.log"
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_file),
            level=log_level,
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=False,
            enqueue=True,
            colorize=False,
        )

    if log_to_stdout:
        logger.add(sys.stderr, level=log_level, backtrace=True, serialize=structured_context)

    # Bridge stdlib loggers used by our dependencies
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("sqlalchemy.engine", "uvicorn", "uvicorn.access"):
        logging.getLogger(name).handlers = [InterceptHandler()]
        logging.getLogger(name).propagate = False

    logger.debug(f"Logging configured: level={log_level} file={log_to_file} stdout={log_to_stdout}")
