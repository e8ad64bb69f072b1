"""Query drivers: one per backing store.

Files:
  base.py  - QueryDriver contract (supports + five query operations)
  database.py  - SQLAlchemy-backed driver, the universal fallback
  typesense.py  - Typesense search-index driver for SearchableMixin models
"""

from shopping.drivers.base import QueryDriver
from shopping.drivers.database import DatabaseQueryDriver
from shopping.drivers.typesense import TypesenseQueryDriver

__all__ = ["DatabaseQueryDriver", "QueryDriver", "TypesenseQueryDriver"]
