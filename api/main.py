#!/usr/bin/env python3
"""
Hobbygraph API - HTTP API layer for the friendship and popularity engine.

This is the main FastAPI application behind the graph UI. It exposes:
- Person, friendship and interest mutations (via MutationCoordinator)
- The read-only graph view
- Health check
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hobbygraph.logging_config import configure_logging, get_logger

from .dependencies import authenticate_pb
from .errors import register_exception_handlers
from .settings import get_settings

# Format: 2026-01-06T14:05:52Z [api] LEVEL message
configure_logging(source="api")
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle - startup and shutdown."""
    settings = get_settings()

    if settings.store_backend == "pocketbase":
        await authenticate_pb()
    else:
        logger.warning("Using in-memory person store; data is lost on restart")

    yield


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="Hobbygraph API", description="Social graph with interest-based popularity", lifespan=lifespan)

    register_exception_handlers(app)

    settings = get_settings()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    from .routers import graph, persons

    app.include_router(persons.router)
    app.include_router(graph.router)

    @app.get("/api/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "hobbygraph-api"}

    return app


# Create app instance for uvicorn
app = create_app()
