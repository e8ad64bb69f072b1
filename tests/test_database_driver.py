"""Tests for shopping/drivers/database.py and shopping/repositories/base.py

Runs against an in-memory SQLite database (see conftest.seeded_session).

Covers:
- supports() for mapped / unknown models
- Equality filters, skipped empty values, ignored unknown columns
- Free-text search across declared and fallback string fields
- Sorting, soft-delete exclusion
- Length-aware, simple and cursor pagination
"""

from __future__ import annotations

import pytest

from shopping.core.exceptions import ModelNotFoundError, ValidationError
from shopping.core.pagination import decode_cursor
from shopping.drivers.database import DatabaseQueryDriver


def _ids(rows) -> list[int]:
    return [row.id for row in rows]


@pytest.fixture
def driver(seeded_session) -> DatabaseQueryDriver:
    return DatabaseQueryDriver(seeded_session)


class TestSupports:
    def test_mapped_models_are_supported(self, driver):
        assert driver.supports("Product")
        assert driver.supports("Brand")
        assert driver.supports("Address")

    def test_unknown_model_is_not_supported(self, driver):
        assert not driver.supports("Invoice")

    @pytest.mark.asyncio
    async def test_querying_unknown_model_raises(self, driver):
        with pytest.raises(ModelNotFoundError):
            await driver.all("Invoice")


class TestPaginate:
    @pytest.mark.asyncio
    async def test_filters_and_sorting(self, driver):
        page = await driver.paginate(
            "Product",
            {"category_id": 1},
            {"sort_field": "price", "sort_direction": "desc"},
            per_page=10,
        )
        # Product 6 is soft-deleted
        assert _ids(page.items) == [2, 1]
        assert page.total == 2
        assert page.page == 1

    @pytest.mark.asyncio
    async def test_second_page(self, driver):
        page = await driver.paginate("Product", {}, {"sort_field": "id", "page": 2}, per_page=2)
        assert _ids(page.items) == [3, 4]
        assert page.total == 5
        assert page.per_page == 2
        assert page.last_page == 3

    @pytest.mark.asyncio
    async def test_default_order_is_newest_first(self, driver):
        page = await driver.paginate("Product", per_page=3)
        assert _ids(page.items) == [5, 4, 3]

    @pytest.mark.asyncio
    async def test_unknown_sort_field_keeps_newest_first(self, driver):
        page = await driver.paginate("Product", {}, {"sort_field": "colour"}, per_page=3)
        assert _ids(page.items) == [5, 4, 3]

    @pytest.mark.asyncio
    async def test_sort_direction_is_case_insensitive(self, driver):
        page = await driver.paginate(
            "Product", {}, {"sort_field": "id", "sort_direction": "DESC"}, per_page=2
        )
        assert _ids(page.items) == [5, 4]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("per_page", [0, -1])
    async def test_page_size_must_be_positive(self, driver, per_page):
        with pytest.raises(ValidationError):
            await driver.paginate("Product", per_page=per_page)

    @pytest.mark.asyncio
    async def test_empty_filter_values_and_unknown_columns_are_ignored(self, driver):
        page = await driver.paginate(
            "Product",
            {"status": "published", "brand_id": None, "sku": "", "colour": "red"},
            {"sort_field": "id"},
        )
        assert _ids(page.items) == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_search_term_matches_searchable_fields(self, driver):
        page = await driver.paginate("Product", {}, {"search": "SHOE", "sort_field": "id"})
        assert _ids(page.items) == [1, 2]

    @pytest.mark.asyncio
    async def test_search_fields_restrict_columns(self, driver):
        page = await driver.paginate("Product", {}, {"search": "rs", "search_fields": ["sku"]})
        assert _ids(page.items) == [1]

    @pytest.mark.asyncio
    async def test_wildcard_term_matches_everything(self, driver):
        page = await driver.paginate("Product", {}, {"search": "*"})
        assert page.total == 5

    @pytest.mark.asyncio
    async def test_invalid_page_number(self, driver):
        with pytest.raises(ValidationError):
            await driver.paginate("Product", {}, {"page": "last"})


class TestSimplePaginate:
    @pytest.mark.asyncio
    async def test_has_more_on_first_page(self, driver):
        page = await driver.simple_paginate("Product", {}, {"sort_field": "id"}, per_page=2)
        assert _ids(page.items) == [1, 2]
        assert page.has_more is True

    @pytest.mark.asyncio
    async def test_last_page(self, driver):
        page = await driver.simple_paginate("Product", {}, {"sort_field": "id", "page": 3}, per_page=2)
        assert _ids(page.items) == [5]
        assert page.has_more is False

    @pytest.mark.asyncio
    async def test_zero_page_size_is_rejected(self, driver):
        with pytest.raises(ValidationError):
            await driver.simple_paginate("Product", per_page=0)


class TestCursorPaginate:
    @pytest.mark.asyncio
    async def test_walks_all_rows_in_key_order(self, driver):
        first = await driver.cursor_paginate("Product", per_page=2)
        assert _ids(first.items) == [1, 2]
        assert first.cursor is None
        assert decode_cursor(first.next_cursor) == {"id": 2}

        second = await driver.cursor_paginate("Product", per_page=2, cursor=first.next_cursor)
        assert _ids(second.items) == [3, 4]
        assert second.cursor == first.next_cursor

        third = await driver.cursor_paginate("Product", per_page=2, cursor=second.next_cursor)
        assert _ids(third.items) == [5]
        assert third.next_cursor is None
        assert not third.has_more

    @pytest.mark.asyncio
    async def test_filters_apply(self, driver):
        page = await driver.cursor_paginate("Product", {"is_active": True}, {}, per_page=10)
        assert _ids(page.items) == [1, 2, 3, 4]
        assert page.next_cursor is None

    @pytest.mark.asyncio
    async def test_malformed_cursor(self, driver):
        with pytest.raises(ValidationError):
            await driver.cursor_paginate("Product", per_page=2, cursor="not-a-cursor!")

    @pytest.mark.asyncio
    async def test_zero_page_size_is_rejected(self, driver):
        with pytest.raises(ValidationError):
            await driver.cursor_paginate("Product", per_page=0)


class TestSearchAndAll:
    @pytest.mark.asyncio
    async def test_search_orders_newest_first(self, driver):
        assert _ids(await driver.search("Product", "shirt")) == [4, 3]

    @pytest.mark.asyncio
    async def test_search_with_fields_and_filters(self, driver):
        assert _ids(await driver.search("Product", "cotton", ["description"])) == [3]
        assert await driver.search("Product", "shirt", None, {"status": "archived"}) == []

    @pytest.mark.asyncio
    async def test_search_model_with_declared_fields(self, driver):
        rows = await driver.search("Address", "berlin")
        assert _ids(rows) == [1]

    @pytest.mark.asyncio
    async def test_search_falls_back_to_string_columns(self, driver):
        rows = await driver.search("Brand", "glob")
        assert [b.name for b in rows] == ["Globex"]

    @pytest.mark.asyncio
    async def test_all_with_filters(self, driver):
        assert sorted(_ids(await driver.all("Product", {"brand_id": 1}))) == [1, 3, 5]
        assert _ids(await driver.all("Product", {"is_active": False})) == [5]

    @pytest.mark.asyncio
    async def test_all_excludes_soft_deleted(self, driver):
        assert 6 not in _ids(await driver.all("Product"))
