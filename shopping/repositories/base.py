"""Generic async query repository with soft-delete, filters, free-text search and pagination."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Generic, TypeVar

from sqlalchemy import String, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from shopping.core.pagination import (
    CursorPage,
    LengthAwarePage,
    SimplePage,
    decode_cursor,
    encode_cursor,
    page_size,
)
from shopping.core.exceptions import ValidationError
from shopping.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class ModelQueryRepository(Generic[ModelT]):
    """Read-only query repository for any mapped model.

    Soft-deletes: rows with `deleted_at IS NOT NULL` are excluded from every
    read. Filters are simple equality filters; unknown columns are ignored.
    """

    def __init__(self, session: AsyncSession, model: type[ModelT]):
        self._session = session
        self.model = model

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _base_query(self):
        """Return a SELECT excluding soft-deleted rows."""
        q = select(self.model)
        if hasattr(self.model, "deleted_at"):
            q = q.where(self.model.deleted_at.is_(None))
        return q

    def _column(self, name: str):
        column = self.model.__table__.columns.get(name)
        return getattr(self.model, name) if column is not None else None

    def search_fields(self) -> list[str]:
        """Explicit searchable fields, else every string column."""
        declared = getattr(self.model, "__searchable_fields__", ())
        if declared:
            return list(declared)
        return [c.name for c in self.model.__table__.columns if isinstance(c.type, String)]

    def apply_filters(self, q, filters: dict[str, Any] | None):
        if not filters:
            return q
        for col_name, value in filters.items():
            if value is None or value == "":
                continue
            column = self._column(col_name)
            if column is not None:
                q = q.where(column == value)
        return q

    def apply_search(self, q, term: str | None, fields: Sequence[str] | None = None):
        if not term or term == "*":
            return q
        columns = [self._column(f) for f in (fields or self.search_fields())]
        columns = [c for c in columns if c is not None]
        if not columns:
            return q
        pattern = f"%{term}%"
        return q.where(or_(*(c.ilike(pattern) for c in columns)))

    def apply_sorting(self, q, search_options: dict[str, Any] | None):
        """Order by `sort_field` when that column exists, else newest first."""
        options = search_options or {}
        column = self._column(options["sort_field"]) if options.get("sort_field") else None
        if column is None:
            column, direction = self._column("created_at"), "desc"
            if column is None:
                column = self.model.id
        else:
            direction = str(options.get("sort_direction") or "asc").lower()
        q = q.order_by(column.desc() if direction == "desc" else column.asc())
        # Stable ordering for rows sharing the sort value
        if column.key != "id":
            q = q.order_by(self.model.id.asc())
        return q

    def _listing_query(self, filters, search_options):
        options = search_options or {}
        q = self.apply_filters(self._base_query(), filters)
        return self.apply_search(q, options.get("search"), options.get("search_fields"))

    async def _fetch(self, q) -> list[ModelT]:
        return list((await self._session.execute(q)).scalars().all())

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_many(self, ids: Sequence[Any]) -> list[ModelT]:
        """Return rows for `ids` in the order given, dropping ids that no longer exist."""
        if not ids:
            return []
        rows = await self._fetch(self._base_query().where(self.model.id.in_(ids)))
        by_id = {row.id: row for row in rows}
        return [by_id[i] for i in ids if i in by_id]

    async def paginate(
        self,
        filters: dict[str, Any] | None,
        search_options: dict[str, Any] | None,
        *,
        page: int,
        per_page: int,
    ) -> LengthAwarePage[ModelT]:
        per_page = page_size(per_page)
        q = self._listing_query(filters, search_options)

        count_q = select(func.count()).select_from(q.subquery())
        total = (await self._session.execute(count_q)).scalar_one()

        q = self.apply_sorting(q, search_options)
        items = await self._fetch(q.offset((page - 1) * per_page).limit(per_page))
        return LengthAwarePage(items=items, total=total, page=page, per_page=per_page)

    async def simple_paginate(
        self,
        filters: dict[str, Any] | None,
        search_options: dict[str, Any] | None,
        *,
        page: int,
        per_page: int,
    ) -> SimplePage[ModelT]:
        per_page = page_size(per_page)
        q = self.apply_sorting(self._listing_query(filters, search_options), search_options)
        # One extra row tells us whether another page exists
        items = await self._fetch(q.offset((page - 1) * per_page).limit(per_page + 1))
        return SimplePage(
            items=items[:per_page],
            page=page,
            per_page=per_page,
            has_more=len(items) > per_page,
        )

    async def cursor_paginate(
        self,
        filters: dict[str, Any] | None,
        search_options: dict[str, Any] | None,
        *,
        per_page: int,
        cursor: str | None = None,
    ) -> CursorPage[ModelT]:
        """Keyset pagination on the primary key, ascending."""
        per_page = page_size(per_page)
        q = self._listing_query(filters, search_options)

        position = decode_cursor(cursor)
        if position is not None:
            if "id" not in position:
                raise ValidationError(f"Malformed cursor '{cursor}'")
            q = q.where(self.model.id > position["id"])

        items = await self._fetch(q.order_by(self.model.id.asc()).limit(per_page + 1))
        next_cursor = None
        if len(items) > per_page:
            items = items[:per_page]
            next_cursor = encode_cursor({"id": items[-1].id})
        return CursorPage(items=items, per_page=per_page, cursor=cursor, next_cursor=next_cursor)

    async def search(
        self,
        term: str,
        fields: Sequence[str] | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[ModelT]:
        q = self.apply_filters(self._base_query(), filters)
        q = self.apply_search(q, term, fields)
        return await self._fetch(self.apply_sorting(q, None))

    async def all(self, filters: dict[str, Any] | None = None) -> list[ModelT]:
        q = self.apply_filters(self._base_query(), filters)
        return await self._fetch(q)

    async def stream_all(self, chunk_size: int = 500):
        """Yield every non-deleted row in primary-key order, `chunk_size` rows at a time."""
        last_id = None
        while True:
            q = self._base_query()
            if last_id is not None:
                q = q.where(self.model.id > last_id)
            chunk = await self._fetch(q.order_by(self.model.id.asc()).limit(chunk_size))
            if not chunk:
                return
            yield chunk
            last_id = chunk[-1].id
