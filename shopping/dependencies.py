"""Wiring of query drivers into a QueryManager, plus FastAPI dependencies.

Pattern:
  1. The app lifespan owns one TypesenseClient (app.state.typesense), or None
  2. Each request gets its own AsyncSession from get_db
  3. build_query_manager registers the drivers over those resources
"""

from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shopping.core.config import Settings, settings
from shopping.db.base import get_db
from shopping.drivers.database import DatabaseQueryDriver
from shopping.drivers.typesense import TypesenseQueryDriver
from shopping.services.query_manager import QueryManager
from shopping.services.typesense_client import TypesenseClient


def build_typesense_client(config: Settings = settings) -> TypesenseClient | None:
    if not config.typesense_enabled:
        return None
    return TypesenseClient(
        config.typesense_url,
        config.typesense_api_key,
        timeout=config.typesense_timeout,
    )


def build_query_manager(
    session: AsyncSession,
    typesense: TypesenseClient | None = None,
    config: Settings = settings,
) -> QueryManager:
    """Register the database driver (always) and the Typesense driver (when configured)."""
    manager = QueryManager(default_driver=config.query_method)
    manager.register_driver("database", DatabaseQueryDriver(session))
    if typesense is not None:
        manager.register_driver(
            "typesense",
            TypesenseQueryDriver(typesense, session, max_per_page=config.typesense_max_per_page),
        )
    return manager


def get_typesense_client(request: Request) -> TypesenseClient | None:
    return getattr(request.app.state, "typesense", None)


async def get_query_manager(
    session: AsyncSession = Depends(get_db),
    typesense: TypesenseClient | None = Depends(get_typesense_client),
) -> QueryManager:
    return build_query_manager(session, typesense)
