"""Shared fixtures for Shopping query-layer tests.

Provides an in-memory SQLite session (aiosqlite) with the full schema, a
seeded catalogue, and an httpx.MockTransport-backed Typesense client
factory.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# Deterministic settings BEFORE importing application modules.
os.environ.pop("TYPESENSE_API_KEY", None)
os.environ.pop("QUERY_METHOD", None)

import httpx
import pytest_asyncio

import shopping.domain  # noqa: F401  (registers every model on Base)
from shopping.db.base import Base, build_engine, build_session_factory
from shopping.domain import Address, Brand, Category, Product
from shopping.services.typesense_client import TypesenseClient

_BASE_TIME = datetime(2024, 6, 1, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def async_session():
    """Provide an async session backed by an in-memory SQLite database."""
    engine = build_engine("sqlite+aiosqlite://")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = build_session_factory(engine)
    async with factory() as session:
        yield session

    await engine.dispose()


def _product(id_: int, title: str, sku: str, **kwargs) -> Product:
    return Product(
        id=id_,
        title=title,
        slug=title.lower().replace(" ", "-"),
        sku=sku,
        created_at=_BASE_TIME + timedelta(days=id_),
        **kwargs,
    )


@pytest_asyncio.fixture
async def seeded_session(async_session):
    """Session with a small catalogue.

    Products 1-5 are live; product 6 is soft-deleted.
    """
    async_session.add_all(
        [
            Category(id=1, name="Shoes", slug="shoes", sort_order=1),
            Category(id=2, name="Shirts", slug="shirts", sort_order=2),
            Category(id=3, name="Hats", slug="hats", sort_order=3, is_active=False),
            Brand(id=1, name="Acme", slug="acme", website="https://acme.example"),
            Brand(id=2, name="Globex", slug="globex", is_featured=True),
        ]
    )
    async_session.add_all(
        [
            _product(
                1, "Running Shoe", "RS-1", category_id=1, brand_id=1,
                price=Decimal("99.99"), stock_quantity=10, status="published",
                description="Lightweight running shoe for road",
            ),
            _product(
                2, "Trail Shoe", "TS-1", category_id=1, brand_id=2,
                price=Decimal("129.00"), stock_quantity=0, status="published",
                description="Grippy sole for mud",
            ),
            _product(
                3, "Oxford Shirt", "OS-1", category_id=2, brand_id=1,
                price=Decimal("49.50"), stock_quantity=5, status="published",
                description="Classic cotton oxford",
            ),
            _product(
                4, "Linen Shirt", "LS-1", category_id=2, brand_id=2,
                price=Decimal("59.00"), stock_quantity=3, status="draft",
            ),
            _product(
                5, "Wool Hat", "WH-1", category_id=3, brand_id=1,
                price=Decimal("25.00"), stock_quantity=7, status="archived",
                is_active=False,
            ),
            _product(
                6, "Retired Shoe", "RT-1", category_id=1,
                price=Decimal("10.00"), status="published",
                deleted_at=_BASE_TIME,
            ),
            Address(
                id=1, user_id=1, type="shipping", first_name="Ada", last_name="Lovelace",
                address_line_1="1 Main St", city="Berlin", postal_code="10115", country="DE",
            ),
            Address(
                id=2, user_id=2, type="billing", first_name="Alan", last_name="Turing",
                address_line_1="2 High St", city="London", postal_code="N1", country="GB",
                is_default=True,
            ),
        ]
    )
    await async_session.flush()
    return async_session


@pytest_asyncio.fixture
async def make_typesense():
    """Factory: build a TypesenseClient whose HTTP calls go to `handler`."""
    clients: list[TypesenseClient] = []

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> TypesenseClient:
        client = TypesenseClient(
            "http://typesense.test:8108",
            "test-key",
            transport=httpx.MockTransport(handler),
        )
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.close()
