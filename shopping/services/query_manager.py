"""QueryManager: routes model queries to a named query driver.

Every query operation resolves a driver the same way:

  1. explicit `driver` argument, else the current default name
  2. unknown name → DriverNotFoundError
  3. driver does not support the model → the "database" driver instead
  4. delegate with identical arguments and return the result verbatim

The registry is populated while the manager is being set up; mutating it
while queries are in flight is not supported.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from shopping.core.exceptions import DriverNotFoundError, ValidationError
from shopping.core.pagination import CursorPage, LengthAwarePage, SimplePage
from shopping.drivers.base import QueryDriver

logger = logging.getLogger(__name__)

FALLBACK_DRIVER = "database"


class QueryManager:
    def __init__(
        self,
        drivers: Mapping[str, QueryDriver] | None = None,
        default_driver: str = FALLBACK_DRIVER,
    ):
        self._drivers: dict[str, QueryDriver] = {}
        self._default = default_driver
        for name, driver in (drivers or {}).items():
            self.register_driver(name, driver)

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    @property
    def default_driver(self) -> str:
        return self._default

    def driver_names(self) -> list[str]:
        return list(self._drivers)

    def register_driver(self, name: str, driver: QueryDriver) -> None:
        """Register `driver` under `name`, replacing any existing entry."""
        if not name:
            raise ValidationError("Query driver name must not be empty")
        self._drivers[name] = driver

    def set_default_driver(self, name: str) -> None:
        if name not in self._drivers:
            raise DriverNotFoundError(name)
        self._default = name

    def get_driver(self, name: str | None = None) -> QueryDriver:
        """Return the named (or default) driver. No capability fallback is applied."""
        name = name or self._default
        try:
            return self._drivers[name]
        except KeyError:
            raise DriverNotFoundError(name) from None

    def get_best_driver_for_model(self, model: str) -> str:
        """Name of the first registered driver supporting `model`, else "database"."""
        for name, driver in self._drivers.items():
            if driver.supports(model):
                return name
        return FALLBACK_DRIVER

    def _resolve(self, model: str, name: str | None) -> QueryDriver:
        driver = self.get_driver(name)
        if driver.supports(model):
            return driver
        logger.debug(
            "Driver '%s' does not support %s; falling back to '%s'",
            name or self._default, model, FALLBACK_DRIVER,
        )
        return self.get_driver(FALLBACK_DRIVER)

    # ------------------------------------------------------------------
    # Query operations
    # ------------------------------------------------------------------

    async def paginate(
        self,
        model: str,
        filters: dict[str, Any] | None = None,
        search_options: dict[str, Any] | None = None,
        per_page: int = 15,
        driver: str | None = None,
    ) -> LengthAwarePage:
        return await self._resolve(model, driver).paginate(model, filters, search_options, per_page)

    async def simple_paginate(
        self,
        model: str,
        filters: dict[str, Any] | None = None,
        search_options: dict[str, Any] | None = None,
        per_page: int = 15,
        driver: str | None = None,
    ) -> SimplePage:
        return await self._resolve(model, driver).simple_paginate(
            model, filters, search_options, per_page
        )

    async def cursor_paginate(
        self,
        model: str,
        filters: dict[str, Any] | None = None,
        search_options: dict[str, Any] | None = None,
        per_page: int = 15,
        cursor: str | None = None,
        driver: str | None = None,
    ) -> CursorPage:
        return await self._resolve(model, driver).cursor_paginate(
            model, filters, search_options, per_page, cursor
        )

    async def search(
        self,
        model: str,
        query: str,
        fields: Sequence[str] | None = None,
        filters: dict[str, Any] | None = None,
        driver: str | None = None,
    ) -> list[Any]:
        return await self._resolve(model, driver).search(model, query, fields, filters)

    async def all(
        self,
        model: str,
        filters: dict[str, Any] | None = None,
        driver: str | None = None,
    ) -> list[Any]:
        return await self._resolve(model, driver).all(model, filters)
