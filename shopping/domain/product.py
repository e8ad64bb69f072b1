"""SQLAlchemy ORM model for products (indexed for search)."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shopping.db.base import Base
from shopping.domain.mixins import SearchableMixin, TimestampMixin


class Product(Base, SearchableMixin, TimestampMixin):
    __tablename__ = "products"

    __searchable_fields__ = ("title", "sku", "description")
    __index_fields__ = (
        {"name": "title", "type": "string"},
        {"name": "slug", "type": "string"},
        {"name": "sku", "type": "string"},
        {"name": "description", "type": "string", "optional": True},
        {"name": "status", "type": "string", "facet": True},
        {"name": "category_id", "type": "int64", "optional": True, "facet": True},
        {"name": "brand_id", "type": "int64", "optional": True, "facet": True},
        {"name": "price", "type": "float"},
        {"name": "stock_quantity", "type": "int32"},
        {"name": "is_active", "type": "bool"},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    category_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("categories.id"), nullable=True, index=True
    )
    brand_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("brands.id"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    sku: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    stock_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # "draft" | "published" | "archived"
    status: Mapped[str] = mapped_column(String(50), default="draft", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    category: Mapped[Optional["Category"]] = relationship(
        back_populates="products", lazy="noload"
    )
    brand: Mapped[Optional["Brand"]] = relationship(
        back_populates="products", lazy="noload"
    )
