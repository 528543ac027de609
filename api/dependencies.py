"""
Shared dependencies for the Hobbygraph API.

This module provides:
- Person store construction (in-memory or PocketBase)
- The process-wide MutationCoordinator
- PocketBase authentication on startup
"""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache

from hobbygraph.coordinator import MutationCoordinator
from hobbygraph.store import InMemoryPersonStore, PersonStore, PocketBasePersonStore
from pocketbase import PocketBase

from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


# ========================================
# PocketBase Client
# ========================================


@lru_cache
def get_pb_client() -> PocketBase:
    """Shared PocketBase client, created on first use."""
    return PocketBase(get_settings().pocketbase_url)


async def authenticate_pb() -> None:
    """Authenticate with PocketBase as admin."""
    settings = get_settings()
    pb = get_pb_client()
    try:
        await asyncio.to_thread(
            pb.collection("_superusers").auth_with_password,
            settings.pocketbase_admin_email,
            settings.pocketbase_admin_password,
        )
        logger.info("Successfully authenticated with PocketBase")
    except Exception as e:
        logger.error(f"Failed to authenticate with PocketBase: {e}")
        raise


# ========================================
# Store and Coordinator
# ========================================


def build_store(settings: Settings) -> PersonStore:
    """Create the configured person store."""
    if settings.store_backend == "pocketbase":
        logger.info(f"Using PocketBase person store at {settings.pocketbase_url}")
        return PocketBasePersonStore(get_pb_client(), collection=settings.persons_collection)
    logger.info("Using in-memory person store")
    return InMemoryPersonStore()


@lru_cache
def get_coordinator() -> MutationCoordinator:
    """FastAPI dependency returning the process-wide coordinator.

    One coordinator per process: its lock manager is what serializes
    overlapping mutations.
    """
    settings = get_settings()
    return MutationCoordinator(
        build_store(settings),
        lock_timeout_seconds=settings.lock_timeout_seconds,
        max_commit_retries=settings.max_commit_retries,
    )


__all__ = [
    "authenticate_pb",
    "build_store",
    "get_coordinator",
    "get_pb_client",
]
