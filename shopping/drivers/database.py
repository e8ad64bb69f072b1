"""Relational-database query driver backed by an async SQLAlchemy session."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from shopping.core.pagination import CursorPage, LengthAwarePage, SimplePage, page_number
from shopping.domain.registry import find_model, resolve_model
from shopping.drivers.base import QueryDriver
from shopping.repositories.base import ModelQueryRepository


class DatabaseQueryDriver(QueryDriver):
    """Serves every mapped model straight from the database; the universal fallback."""

    name = "database"

    def __init__(self, session: AsyncSession):
        self._session = session

    def _repo(self, model: str) -> ModelQueryRepository:
        return ModelQueryRepository(self._session, resolve_model(model))

    def supports(self, model: str) -> bool:
        return find_model(model) is not None

    async def paginate(
        self,
        model: str,
        filters: dict[str, Any] | None = None,
        search_options: dict[str, Any] | None = None,
        per_page: int = 15,
    ) -> LengthAwarePage:
        return await self._repo(model).paginate(
            filters, search_options, page=page_number(search_options), per_page=per_page
        )

    async def simple_paginate(
        self,
        model: str,
        filters: dict[str, Any] | None = None,
        search_options: dict[str, Any] | None = None,
        per_page: int = 15,
    ) -> SimplePage:
        return await self._repo(model).simple_paginate(
            filters, search_options, page=page_number(search_options), per_page=per_page
        )

    async def cursor_paginate(
        self,
        model: str,
        filters: dict[str, Any] | None = None,
        search_options: dict[str, Any] | None = None,
        per_page: int = 15,
        cursor: str | None = None,
    ) -> CursorPage:
        return await self._repo(model).cursor_paginate(
            filters, search_options, per_page=per_page, cursor=cursor
        )

    async def search(
        self,
        model: str,
        query: str,
        fields: Sequence[str] | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[Any]:
        return await self._repo(model).search(query, fields, filters)

    async def all(self, model: str, filters: dict[str, Any] | None = None) -> list[Any]:
        return await self._repo(model).all(filters)
