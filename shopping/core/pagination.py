"""Page containers returned by query drivers, plus opaque cursor helpers."""


import base64
import binascii
import json
import math
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from shopping.core.exceptions import ValidationError

T = TypeVar("T")

_PAGE_CONFIG = {"arbitrary_types_allowed": True}


class LengthAwarePage(BaseModel, Generic[T]):
    """A page of results that knows the total number of matches."""

    items: list[T]
    total: int
    page: int
    per_page: int

    model_config = _PAGE_CONFIG

    @property
    def last_page(self) -> int:
        return max(math.ceil(self.total / self.per_page), 1) if self.per_page else 1


class SimplePage(BaseModel, Generic[T]):
    """A page of results without a total count."""

    items: list[T]
    page: int
    per_page: int
    has_more: bool

    model_config = _PAGE_CONFIG


class CursorPage(BaseModel, Generic[T]):
    """A page of results addressed by an opaque cursor token."""

    items: list[T]
    per_page: int
    cursor: str | None = None
    next_cursor: str | None = None

    model_config = _PAGE_CONFIG

    @property
    def has_more(self) -> bool:
        return self.next_cursor is not None


def encode_cursor(position: dict[str, Any]) -> str:
    """Encode a cursor position as URL-safe base64 JSON."""
    raw = json.dumps(position, separators=(",", ":"), sort_keys=True).encode()
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def decode_cursor(token: str | None) -> dict[str, Any] | None:
    """Decode a token produced by :func:`encode_cursor`; ``None`` passes through."""
    if not token:
        return None
    padded = token + "=" * (-len(token) % 4)
    try:
        position = json.loads(base64.urlsafe_b64decode(padded.encode()))
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise ValidationError(f"Malformed cursor '{token}'") from exc
    if not isinstance(position, dict):
        raise ValidationError(f"Malformed cursor '{token}'")
    return position


def page_number(search_options: dict[str, Any] | None) -> int:
    """Return the 1-based page requested in search options (default 1)."""
    raw = (search_options or {}).get("page", 1)
    try:
        page = int(raw)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid page number '{raw}'") from exc
    return max(page, 1)


def page_size(per_page: Any) -> int:
    """Validate a requested page size; it must be a positive integer."""
    try:
        size = int(per_page)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid page size '{per_page}'") from exc
    if size < 1:
        raise ValidationError(f"Page size must be at least 1, got {size}")
    return size
