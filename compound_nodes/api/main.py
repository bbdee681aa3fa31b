"""FastAPI application entrypoint for the compound node service."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from compound_nodes.api.routes import admin, hierarchy
from compound_nodes.core.config import settings
from compound_nodes.core.exceptions import ApplicationError
from compound_nodes.core.observability import setup_logging, setup_tracing


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    """Configure logging and tracing on startup."""

    setup_logging()
    setup_tracing()
    yield


app = FastAPI(
    title=settings.APP_TITLE,
    version=settings.APP_VERSION,
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# Routers
app.include_router(hierarchy.router, prefix="/api")
app.include_router(admin.router, prefix="/api")
app.add_api_route("/metrics", admin.metrics, methods=["GET"], include_in_schema=False)


@app.exception_handler(ApplicationError)
async def handle_application_error(_: Request, exc: ApplicationError):
    """Return standardized responses for application layer exceptions."""

    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "code": exc.code})
