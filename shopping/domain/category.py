"""SQLAlchemy ORM model for product categories (indexed for search)."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shopping.db.base import Base
from shopping.domain.mixins import SearchableMixin, TimestampMixin


class Category(Base, SearchableMixin, TimestampMixin):
    __tablename__ = "categories"

    __searchable_fields__ = ("name", "slug", "description")
    __index_fields__ = (
        {"name": "name", "type": "string"},
        {"name": "slug", "type": "string"},
        {"name": "description", "type": "string", "optional": True},
        {"name": "parent_id", "type": "int64", "optional": True},
        {"name": "is_active", "type": "bool"},
        {"name": "sort_order", "type": "int32"},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    parent_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("categories.id"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    products: Mapped[List["Product"]] = relationship(
        back_populates="category", lazy="noload"
    )
