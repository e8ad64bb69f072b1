"""Domain package: all ORM models are imported here so the model registry sees them.

Folder intent:
  category.py  - product categories (indexed)
  product.py  - products (indexed)
  brand.py  - brands (database only)
  address.py  - customer addresses (database only)
  mixins.py  - TimestampMixin (soft deletes), SearchableMixin
  registry.py  - model identifier → ORM class lookup
"""

from shopping.domain.address import Address
from shopping.domain.brand import Brand
from shopping.domain.category import Category
from shopping.domain.product import Product

__all__ = [
    "Address",
    "Brand",
    "Category",
    "Product",
]
