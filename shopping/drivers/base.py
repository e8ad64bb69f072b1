"""Query driver contract shared by every backing store.

A driver answers `supports(model)` and implements the five query operations
against its own store. The QueryManager picks a driver per call and returns
whatever the driver returns; drivers are free to differ in latency,
consistency and filter semantics.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from shopping.core.pagination import CursorPage, LengthAwarePage, SimplePage


class QueryDriver(ABC):
    name: str

    @abstractmethod
    def supports(self, model: str) -> bool:
        """Return True when this driver can serve `model`. Must be cheap and side-effect free."""

    @abstractmethod
    async def paginate(
        self,
        model: str,
        filters: dict[str, Any] | None = None,
        search_options: dict[str, Any] | None = None,
        per_page: int = 15,
    ) -> LengthAwarePage: ...

    @abstractmethod
    async def simple_paginate(
        self,
        model: str,
        filters: dict[str, Any] | None = None,
        search_options: dict[str, Any] | None = None,
        per_page: int = 15,
    ) -> SimplePage: ...

    @abstractmethod
    async def cursor_paginate(
        self,
        model: str,
        filters: dict[str, Any] | None = None,
        search_options: dict[str, Any] | None = None,
        per_page: int = 15,
        cursor: str | None = None,
    ) -> CursorPage: ...

    @abstractmethod
    async def search(
        self,
        model: str,
        query: str,
        fields: Sequence[str] | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[Any]: ...

    @abstractmethod
    async def all(self, model: str, filters: dict[str, Any] | None = None) -> list[Any]: ...
