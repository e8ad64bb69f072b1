"""Typesense search-index query driver.

Serves models that mix in :class:`SearchableMixin`. Filters become a
Typesense `filter_by` expression, sort options become `sort_by`, and the
search options are translated into Typesense search parameters by
:func:`build_typesense_options`. When a database session is supplied, hits
are hydrated into ORM rows in index order; otherwise raw documents are
returned.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from shopping.core.exceptions import UnsupportedSortError
from shopping.core.pagination import (
    CursorPage,
    LengthAwarePage,
    SimplePage,
    decode_cursor,
    encode_cursor,
    page_number,
    page_size,
)
from shopping.domain.mixins import SearchableMixin
from shopping.domain.registry import is_searchable, resolve_model
from shopping.drivers.base import QueryDriver
from shopping.repositories.base import ModelQueryRepository
from shopping.services.typesense_client import TypesenseClient

logger = logging.getLogger(__name__)

_BOOLEAN_STRINGS = {"true": True, "false": False, "1": True, "0": False}

# ── Search presets ────────────────────────────────────────────────────────

SEARCH_PRESETS: dict[str, dict[str, Any]] = {
    # E-commerce product search: forgiving, user-friendly
    "ecommerce": {
        "match_type": "fuzzy",
        "typo_tolerance": 2,
        "prefix": True,
        "infix": "fallback",
        "split_join_tokens": "fallback",
        "prioritize_exact_match": True,
        "drop_tokens_threshold": 1,
    },
    # Strict technical documentation search
    "technical": {
        "match_type": "exact",
        "typo_tolerance": 0,
        "prefix": False,
        "prioritize_exact_match": True,
    },
    # Autocomplete / typeahead
    "autocomplete": {
        "match_type": "prefix",
        "typo_tolerance": 0,
        "prefix": True,
        "infix": "off",
        "per_page": 10,
    },
    "semantic": {
        "match_type": "semantic",
        "embedding_field": "embedding",
        "k": 100,
        "alpha": 0.8,
        "exclude_fields": "embedding",
    },
    # 30% vector, 70% keyword
    "hybrid": {
        "match_type": "hybrid",
        "embedding_field": "embedding",
        "k": 200,
        "alpha": 0.3,
        "typo_tolerance": 1,
        "prefix": True,
        "drop_tokens_threshold": 0,
        "exclude_fields": "embedding",
    },
    # Chatbots / RAG: favour semantic meaning
    "conversational": {
        "match_type": "hybrid",
        "embedding_field": "embedding",
        "k": 50,
        "alpha": 0.7,
        "drop_tokens_threshold": 0,
        "exclude_fields": "embedding",
    },
    "autocorrect": {
        "match_type": "fuzzy",
        "typo_tolerance": 2,
        "max_candidates": 4,
        "prefix": True,
    },
    "multilingual": {
        "match_type": "partial",
        "typo_tolerance": 1,
        "prefix": True,
        "infix": "fallback",
    },
}


def get_search_preset(preset: str) -> dict[str, Any]:
    """Return a copy of a named preset; unknown names get the `ecommerce` preset."""
    return dict(SEARCH_PRESETS.get(preset, SEARCH_PRESETS["ecommerce"]))


# ── Option building ───────────────────────────────────────────────────────


def _csv(value: Any) -> str:
    return ",".join(str(v) for v in value) if isinstance(value, (list, tuple)) else str(value)


def _vector_query(config: dict[str, Any], default_alpha: float) -> str:
    field = config["embedding_field"]
    k = config.get("k", 100)
    alpha = config.get("alpha", default_alpha)
    return f"{field}:([], k:{k}, alpha:{alpha})"


def _apply_match_type(options: dict[str, Any], config: dict[str, Any]) -> None:
    match_type = config.get("match_type") or "partial"
    typos = config.get("typo_tolerance")

    if match_type == "exact":
        options.update(num_typos=0, prefix=False, infix="off", prioritize_exact_match=True)
    elif match_type in ("prefix", "starts_with"):
        options.update(prefix=True, infix="off", num_typos=1 if typos is None else typos)
    elif match_type in ("infix", "contains"):
        options.update(infix="always", prefix=True, num_typos=1 if typos is None else typos)
    elif match_type == "fuzzy":
        options.update(
            num_typos=2 if typos is None else typos,
            prefix=True,
            infix="fallback",
            split_join_tokens="fallback",
            max_candidates=10000,
        )
    elif match_type == "semantic":
        if config.get("embedding_field"):
            options["vector_query"] = _vector_query(config, 0.5)
            # Embeddings are large; never return them
            options["exclude_fields"] = config["embedding_field"]
    elif match_type == "hybrid":
        if config.get("embedding_field"):
            options["vector_query"] = _vector_query(config, 0.3)
            options["exclude_fields"] = config["embedding_field"]
            options["num_typos"] = 1 if typos is None else typos
            options["prefix"] = True
    else:
        options.update(num_typos=2 if typos is None else typos, prefix=True, infix="fallback")


_PASSTHROUGH_SET = (
    "min_len_1typo",
    "min_len_2typo",
    "drop_tokens_threshold",
    "split_join_tokens",
    "max_facet_values",
    "per_page",
    "page",
    "prioritize_exact_match",
    "prioritize_token_position",
    "prioritize_num_matching_fields",
    "exhaustive_search",
    "use_cache",
    "cache_ttl",
)
_PASSTHROUGH_NONEMPTY = ("sort_by", "filter_by", "pinned_hits", "hidden_hits")
_CSV_NONEMPTY = ("stopwords", "facet_by", "highlight_fields", "highlight_full_fields", "include_fields")


def build_typesense_options(
    config: dict[str, Any], searchable_fields: Sequence[str]
) -> dict[str, Any]:
    """Translate search options into Typesense search parameters."""
    options: dict[str, Any] = {"query_by": ",".join(searchable_fields)}

    if config.get("field_weights"):
        options["query_by_weights"] = _csv(config["field_weights"])

    _apply_match_type(options, config)

    if config.get("typo_tolerance") is not None:
        options["num_typos"] = min(2, max(0, int(config["typo_tolerance"])))

    for key in _PASSTHROUGH_SET:
        if config.get(key) is not None:
            options[key] = config[key]
    for key in _PASSTHROUGH_NONEMPTY:
        if config.get(key):
            options[key] = config[key]
    for key in _CSV_NONEMPTY:
        if config.get(key):
            options[key] = _csv(config[key])

    if config.get("group_by"):
        options["group_by"] = config["group_by"]
        options["group_limit"] = config.get("group_limit") or 3

    if config.get("exclude_fields"):
        existing = options.get("exclude_fields")
        extra = _csv(config["exclude_fields"])
        options["exclude_fields"] = f"{existing},{extra}" if existing else extra

    return options


# ── Filters & sorting ─────────────────────────────────────────────────────


def _coerce_filter_value(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value in _BOOLEAN_STRINGS:
        return _BOOLEAN_STRINGS[value]
    return value


def _format_filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple, set)):
        return "[" + ",".join(_format_filter_value(v) for v in value) + "]"
    # Backticks keep commas, spaces and operators inside the value literal
    return "`" + str(value).replace("`", "") + "`"


def build_filter_by(filters: dict[str, Any] | None) -> str | None:
    """Build a Typesense `filter_by` expression of equality clauses joined by `&&`."""
    clauses = []
    for key, value in (filters or {}).items():
        if value is None or value == "":
            continue
        clauses.append(f"{key}:={_format_filter_value(_coerce_filter_value(value))}")
    return " && ".join(clauses) or None


def build_sort_by(model: type[SearchableMixin], search_options: dict[str, Any] | None) -> str | None:
    options = search_options or {}
    if not options.get("sort_field"):
        return None
    field = options["sort_field"]
    if field == "id":
        field = "id_numeric"
    direction = str(options.get("sort_direction") or "asc").lower()

    schema = model.typesense_collection_schema()
    string_fields = {f["name"] for f in schema["fields"] if f["type"] == "string"}
    if field in string_fields:
        raise UnsupportedSortError(f"Typesense does not support sorting by string field: {field}")
    return f"{field}:{direction}"


def _merge_filters(*expressions: str | None) -> str | None:
    parts = [e for e in expressions if e]
    return " && ".join(f"({p})" if len(parts) > 1 else p for p in parts) or None


# ── Driver ────────────────────────────────────────────────────────────────


class TypesenseQueryDriver(QueryDriver):
    """Queries the Typesense index for models that mix in SearchableMixin."""

    name = "typesense"

    def __init__(
        self,
        client: TypesenseClient,
        session: AsyncSession | None = None,
        max_per_page: int = 250,
    ):
        self._client = client
        self._session = session
        self._max_per_page = max_per_page

    def supports(self, model: str) -> bool:
        return is_searchable(model)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _build_params(
        self,
        model_cls: type[SearchableMixin],
        filters: dict[str, Any] | None,
        search_options: dict[str, Any] | None,
    ) -> dict[str, Any]:
        options = search_options or {}
        term = options.get("search") or "*"
        fields = options.get("search_fields") or model_cls.searchable_fields()

        if term != "*":
            params = build_typesense_options(options, fields)
        else:
            params = {"query_by": ",".join(fields)}
        params["q"] = term

        params["filter_by"] = _merge_filters(build_filter_by(filters), params.get("filter_by"))
        params["sort_by"] = build_sort_by(model_cls, options) or params.get("sort_by")

        include = params.get("include_fields")
        if include and self._session is not None and "id_numeric" not in include.split(","):
            # Hydration looks rows up by id_numeric
            params["include_fields"] = f"{include},id_numeric"
        return params

    def _per_page(self, per_page: int) -> int:
        per_page = page_size(per_page)
        if per_page > self._max_per_page:
            logger.debug("Clamping per_page %d to Typesense maximum %d", per_page, self._max_per_page)
            return self._max_per_page
        return per_page

    async def _run(
        self, model_cls: type[SearchableMixin], params: dict[str, Any], page: int, per_page: int
    ) -> tuple[list[Any], int]:
        params = {**params, "page": page, "per_page": per_page}
        result = await self._client.search(model_cls.search_collection_name(), params)
        documents = [hit["document"] for hit in result.get("hits", [])]
        return await self._hydrate(model_cls, documents), int(result.get("found", 0))

    async def _hydrate(self, model_cls, documents: list[dict[str, Any]]) -> list[Any]:
        if self._session is None:
            return documents
        ids = []
        for doc in documents:
            key = doc.get("id_numeric", doc.get("id"))
            if key is None:
                logger.warning("Skipping %s hit without an id", model_cls.__name__)
                continue
            ids.append(int(key))
        return await ModelQueryRepository(self._session, model_cls).get_many(ids)

    # ------------------------------------------------------------------
    # Query operations
    # ------------------------------------------------------------------

    async def paginate(
        self,
        model: str,
        filters: dict[str, Any] | None = None,
        search_options: dict[str, Any] | None = None,
        per_page: int = 15,
    ) -> LengthAwarePage:
        model_cls = resolve_model(model)
        page, per_page = page_number(search_options), self._per_page(per_page)
        items, found = await self._run(
            model_cls, self._build_params(model_cls, filters, search_options), page, per_page
        )
        return LengthAwarePage(items=items, total=found, page=page, per_page=per_page)

    async def simple_paginate(
        self,
        model: str,
        filters: dict[str, Any] | None = None,
        search_options: dict[str, Any] | None = None,
        per_page: int = 15,
    ) -> SimplePage:
        model_cls = resolve_model(model)
        page, per_page = page_number(search_options), self._per_page(per_page)
        items, found = await self._run(
            model_cls, self._build_params(model_cls, filters, search_options), page, per_page
        )
        return SimplePage(items=items, page=page, per_page=per_page, has_more=page * per_page < found)

    async def cursor_paginate(
        self,
        model: str,
        filters: dict[str, Any] | None = None,
        search_options: dict[str, Any] | None = None,
        per_page: int = 15,
        cursor: str | None = None,
    ) -> CursorPage:
        """The index only pages by number, so the cursor carries the next page number."""
        model_cls = resolve_model(model)
        per_page = self._per_page(per_page)
        position = decode_cursor(cursor) or {}
        page = page_number(position)
        items, found = await self._run(
            model_cls, self._build_params(model_cls, filters, search_options), page, per_page
        )
        next_cursor = encode_cursor({"page": page + 1}) if page * per_page < found else None
        return CursorPage(items=items, per_page=per_page, cursor=cursor, next_cursor=next_cursor)

    async def search(
        self,
        model: str,
        query: str,
        fields: Sequence[str] | None = None,
        filters: dict[str, Any] | None = None,
    ) -> list[Any]:
        model_cls = resolve_model(model)
        params = {
            "q": query or "*",
            "query_by": ",".join(fields or model_cls.searchable_fields()),
            "filter_by": build_filter_by(filters),
        }
        items, _ = await self._run(model_cls, params, 1, self._max_per_page)
        return items

    async def all(self, model: str, filters: dict[str, Any] | None = None) -> list[Any]:
        model_cls = resolve_model(model)
        params = {
            "q": "*",
            "query_by": ",".join(model_cls.searchable_fields()),
            "filter_by": build_filter_by(filters),
        }
        items, _ = await self._run(model_cls, params, 1, self._max_per_page)
        return items
