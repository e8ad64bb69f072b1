"""Tests for shopping/core/pagination.py"""

from __future__ import annotations

import pytest

from shopping.core.exceptions import ValidationError
from shopping.core.pagination import (
    CursorPage,
    LengthAwarePage,
    decode_cursor,
    encode_cursor,
    page_number,
    page_size,
)


def test_cursor_is_opaque_and_decodable():
    token = encode_cursor({"id": 42})
    assert "42" not in token
    assert "=" not in token
    assert decode_cursor(token) == {"id": 42}


def test_missing_cursor_passes_through():
    assert decode_cursor(None) is None
    assert decode_cursor("") is None


@pytest.mark.parametrize("token", ["%%%", encode_cursor({"id": 1})[:-2] + "!!", "WzEsMl0"])
def test_malformed_cursor(token):
    # "WzEsMl0" is valid base64 JSON for a list, not an object
    with pytest.raises(ValidationError):
        decode_cursor(token)


def test_page_number():
    assert page_number(None) == 1
    assert page_number({"page": "3"}) == 3
    assert page_number({"page": 0}) == 1
    with pytest.raises(ValidationError):
        page_number({"page": "next"})


def test_last_page():
    assert LengthAwarePage(items=[], total=0, page=1, per_page=15).last_page == 1
    assert LengthAwarePage(items=[], total=31, page=1, per_page=15).last_page == 3


def test_cursor_page_has_more():
    assert CursorPage(items=[], per_page=5, next_cursor="abc").has_more
    assert not CursorPage(items=[], per_page=5).has_more


def test_page_size():
    assert page_size(25) == 25
    assert page_size("10") == 10
    for invalid in (0, -3, "many", None):
        with pytest.raises(ValidationError):
            page_size(invalid)
