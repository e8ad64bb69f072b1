"""Search-index sync service: mirrors database rows into Typesense collections.

Rule: callers pass model identifiers ("Product"); only SearchableMixin models
can be imported or flushed.
"""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from shopping.core.exceptions import ValidationError
from shopping.domain.mixins import SearchableMixin
from shopping.domain.registry import resolve_model
from shopping.repositories.base import ModelQueryRepository
from shopping.services.typesense_client import TypesenseClient

logger = logging.getLogger(__name__)


class SearchIndexService:
    def __init__(self, session: AsyncSession, client: TypesenseClient, chunk_size: int = 500):
        self._session = session
        self._client = client
        self._chunk_size = chunk_size

    def _searchable(self, model: str) -> type[SearchableMixin]:
        model_cls = resolve_model(model)
        if not issubclass(model_cls, SearchableMixin):
            raise ValidationError(f"Model '{model}' is not searchable")
        return model_cls

    async def ensure_collection(self, model: str) -> str:
        """Create the model's collection if missing; return its name."""
        model_cls = self._searchable(model)
        name = model_cls.search_collection_name()
        if await self._client.retrieve_collection(name) is None:
            logger.info("Creating Typesense collection %s", name)
            await self._client.create_collection(model_cls.typesense_collection_schema())
        return name

    async def import_model(self, model: str) -> int:
        """Upsert every non-deleted row of `model`; returns the number of documents indexed."""
        collection = await self.ensure_collection(model)
        repo = ModelQueryRepository(self._session, self._searchable(model))

        imported = 0
        async for chunk in repo.stream_all(self._chunk_size):
            results = await self._client.import_documents(
                collection, [row.to_search_document() for row in chunk]
            )
            failed = [r for r in results if not r.get("success")]
            for failure in failed:
                logger.warning("Failed to index %s document: %s", model, failure.get("error"))
            imported += len(results) - len(failed)

        logger.info("Imported %d %s document(s) into %s", imported, model, collection)
        return imported

    async def flush_model(self, model: str) -> bool:
        """Drop the model's collection; returns False when it did not exist."""
        name = self._searchable(model).search_collection_name()
        return await self._client.delete_collection(name)
