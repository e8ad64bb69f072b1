"""Resolve model identifiers ("Product", "Category", ...) to mapped ORM classes."""

from __future__ import annotations

from shopping.core.exceptions import ModelNotFoundError
from shopping.db.base import Base
from shopping.domain.mixins import SearchableMixin


def find_model(name: str) -> type[Base] | None:
    for mapper in Base.registry.mappers:
        if mapper.class_.__name__ == name:
            return mapper.class_
    return None


def resolve_model(name: str) -> type[Base]:
    model = find_model(name)
    if model is None:
        raise ModelNotFoundError(name)
    return model


def is_searchable(name: str) -> bool:
    model = find_model(name)
    return model is not None and issubclass(model, SearchableMixin)
