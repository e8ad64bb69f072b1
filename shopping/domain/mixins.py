"""Reusable SQLAlchemy column mixins and the search-index capability mixin."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import DateTime, func
from sqlalchemy.orm import Mapped, mapped_column

from shopping.core.config import settings


def _now() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Adds created_at, updated_at, deleted_at columns (soft deletes)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_now, server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_now,
        onupdate=_now,
        server_default=func.now(),
        nullable=False,
    )
    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )


def _to_index_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return int(value.timestamp())
    if isinstance(value, Decimal):
        return float(value)
    return value


class SearchableMixin:
    """Marks a model as mirrored into the Typesense search index.

    Subclasses declare:
      __searchable_fields__  - fields matched by free-text search (query_by)
      __index_fields__  - Typesense field definitions beyond id_numeric / created_at
    """

    __searchable_fields__ = ()
    __index_fields__ = ()

    @classmethod
    def searchable_fields(cls) -> list[str]:
        return list(cls.__searchable_fields__)

    @classmethod
    def search_collection_name(cls) -> str:
        return f"{settings.typesense_collection_prefix}{cls.__tablename__}"

    @classmethod
    def typesense_collection_schema(cls) -> dict[str, Any]:
        return {
            "name": cls.search_collection_name(),
            "fields": [
                {"name": "id_numeric", "type": "int64"},
                *cls.__index_fields__,
                {"name": "created_at", "type": "int64"},
            ],
            "default_sorting_field": "id_numeric",
        }

    def to_search_document(self) -> dict[str, Any]:
        """Build the document stored in the index for this row."""
        document: dict[str, Any] = {"id": str(self.id), "id_numeric": self.id}
        for field in self.__index_fields__:
            value = getattr(self, field["name"], None)
            if value is None:
                continue
            document[field["name"]] = _to_index_value(value)
        document["created_at"] = _to_index_value(self.created_at or _now())
        return document
