"""Thin async client for the Typesense REST API.

Only the endpoints the query layer needs are wrapped: document search,
collection lifecycle, and JSONL document import. Every transport failure or
non-2xx response is raised as :class:`SearchIndexError`.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from shopping.core.exceptions import SearchIndexError

logger = logging.getLogger(__name__)

_API_KEY_HEADER = "X-TYPESENSE-API-KEY"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    return str(body.get("message", response.text)) if isinstance(body, dict) else response.text


class TypesenseClient:
    """Async wrapper around a single Typesense node.

    Parameters
    ----------
    base_url:
        Node URL, e.g. ``http://localhost:8108``.
    api_key:
        Admin or search-only key sent on every request.
    timeout:
        Per-request timeout in seconds.
    transport:
        Optional httpx transport (tests pass an ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=httpx.Timeout(timeout),
            headers={_API_KEY_HEADER: api_key},
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        allow_404: bool = False,
        **kwargs: Any,
    ) -> httpx.Response | None:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Typesense %s %s failed: %s", method, path, exc)
            raise SearchIndexError(f"Typesense request failed: {exc}") from exc

        if allow_404 and response.status_code == 404:
            return None
        if response.is_error:
            message = _error_message(response)
            logger.warning(
                "Typesense %s %s returned %s: %s", method, path, response.status_code, message
            )
            raise SearchIndexError(
                f"Typesense {method} {path} failed ({response.status_code}): {message}"
            )
        return response

    # -- Documents -----------------------------------------------------------

    async def search(self, collection: str, params: dict[str, Any]) -> dict[str, Any]:
        """Run ``GET /collections/{collection}/documents/search``."""
        clean = {k: v for k, v in params.items() if v is not None}
        response = await self._request(
            "GET", f"/collections/{collection}/documents/search", params=clean
        )
        return response.json()

    async def import_documents(
        self,
        collection: str,
        documents: list[dict[str, Any]],
        action: str = "upsert",
    ) -> list[dict[str, Any]]:
        """Bulk import documents as JSONL; returns one result object per document."""
        if not documents:
            return []
        body = "\n".join(json.dumps(doc) for doc in documents)
        response = await self._request(
            "POST",
            f"/collections/{collection}/documents/import",
            params={"action": action},
            content=body.encode(),
            headers={"Content-Type": "text/plain"},
        )
        return [json.loads(line) for line in response.text.splitlines() if line.strip()]

    # -- Collections ---------------------------------------------------------

    async def retrieve_collection(self, name: str) -> dict[str, Any] | None:
        response = await self._request("GET", f"/collections/{name}", allow_404=True)
        return response.json() if response is not None else None

    async def create_collection(self, schema: dict[str, Any]) -> dict[str, Any]:
        response = await self._request("POST", "/collections", json=schema)
        return response.json()

    async def delete_collection(self, name: str) -> bool:
        """Drop a collection; returns False when it did not exist."""
        response = await self._request("DELETE", f"/collections/{name}", allow_404=True)
        return response is not None
