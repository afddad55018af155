"""FastAPI application for graphfs."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException

from graphfs import __version__, db
from graphfs.api.routers import filesystem
from graphfs.config import ConfigManager, init_api_logging
from graphfs.exceptions import (
    FileSystemError,
    InternalError,
    InvalidArgumentError,
    NodeNotFoundError,
    StoreError,
)
from graphfs.services.initialization import initialize_database

ERROR_STATUS_CODES = {
    InvalidArgumentError: 400,
    NodeNotFoundError: 404,
    InternalError: 500,
    StoreError: 503,
}


def status_code_for(exc: FileSystemError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            return status_code
    return 500  # pragma: no cover


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover
    """Lifecycle manager for the FastAPI app."""
    init_api_logging()
    app_config = ConfigManager().config
    logger.info(f"Starting graphfs API {__version__}")
    await initialize_database(app_config)

    yield

    logger.info("Shutting down graphfs API")
    await db.shutdown_db()


app = FastAPI(
    title="graphfs API",
    description="Folder and file hierarchy stored as a graph",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(filesystem.router)


@app.exception_handler(FileSystemError)
async def filesystem_error_handler(request: Request, exc: FileSystemError):
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.debug(f"{request.method} {request.url.path} rejected ({status_code}): {exc}")
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.exception_handler(Exception)
async def exception_handler(request, exc):  # pragma: no cover
    logger.exception(
        "API unhandled exception",
        url=str(request.url),
        method=request.method,
        client=request.client.host if request.client else None,
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return await http_exception_handler(request, HTTPException(status_code=500, detail=str(exc)))
