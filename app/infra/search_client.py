"""Async client for the retrieval backend's ``/search`` endpoint."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

import httpx

from app.session.errors import (
    GENERIC_SEARCH_ERROR,
    MalformedResponseError,
    SearchProtocolError,
    SearchTransportError,
)
from app.session.models import DEFAULT_TOP_K, ResultPassage


class SearchClient:
    """Thin wrapper around ``POST {base_url}/search``."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: Optional[float] = None,
        top_k: int = DEFAULT_TOP_K,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = str(base_url).rstrip("/")
        self.timeout = timeout
        self.top_k = top_k
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        kwargs: dict[str, Any] = {}
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.AsyncClient(**kwargs)

    async def search(self, query: str) -> List[ResultPassage]:
        """Run one retrieval request and return passages in backend rank order."""

        payload = {"query": query, "top_k": self.top_k}
        try:
            async with self._client() as client:
                response = await client.post(f"{self.base_url}/search", json=payload)
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            raise SearchTransportError(str(exc)) from exc

        if not response.is_success:
            raise SearchProtocolError(response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise MalformedResponseError("search response is not valid JSON") from exc

        results = data.get("results") if isinstance(data, Mapping) else None
        if not isinstance(results, list):
            raise MalformedResponseError("search response has no 'results' list")

        return [ResultPassage.from_payload(item) for item in results if isinstance(item, Mapping)]

    async def check_reachable(self) -> Dict[str, Any]:
        """Report whether the backend answers HTTP at all.

        Only ``POST /search`` is part of the backend contract, so any HTTP
        response to a bare GET (404 and 405 included) counts as reachable.
        """

        try:
            async with self._client() as client:
                response = await client.get(self.base_url)
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            return {
                "status": "unreachable",
                "endpoint": self.base_url,
                "error": str(exc) or GENERIC_SEARCH_ERROR,
            }
        return {
            "status": "reachable",
            "endpoint": self.base_url,
            "http_status": response.status_code,
        }
