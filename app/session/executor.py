"""Runs one search request and resolves the session store with its outcome."""
from __future__ import annotations

import asyncio
import logging
from typing import List, Protocol

from .errors import (
    GENERIC_SEARCH_ERROR,
    SEARCH_CANCELLED,
    MalformedResponseError,
    SearchProtocolError,
    SearchTransportError,
)
from .models import RequestStatus, ResultPassage
from .store import SessionStateStore

logger = logging.getLogger(__name__)


class SearchBackend(Protocol):
    async def search(self, query: str) -> List[ResultPassage]:
        ...


class SearchRequestExecutor:
    """Maps backend outcomes onto ``resolve_success`` / ``resolve_failure``.

    No retries are attempted; a failed search needs a fresh submission.
    """

    def __init__(self, store: SessionStateStore, backend: SearchBackend) -> None:
        self.store = store
        self.backend = backend

    async def run(self, query: str) -> None:
        try:
            passages = await self.backend.search(query)
        except asyncio.CancelledError:
            logger.info("Search cancelled for query=%r", query)
            self._resolve_failure(query, SEARCH_CANCELLED)
            raise
        except MalformedResponseError as exc:
            logger.warning("Treating malformed search response as no results: %s", exc)
            self._resolve_success(query, [])
        except SearchProtocolError as exc:
            logger.warning("Search backend returned %s for query=%r", exc.status_code, query)
            self._resolve_failure(query, str(exc))
        except SearchTransportError as exc:
            logger.warning("Search request failed for query=%r: %s", query, exc)
            self._resolve_failure(query, str(exc))
        except Exception as exc:
            logger.exception("Unexpected error while searching for query=%r", query)
            self._resolve_failure(query, str(exc) or GENERIC_SEARCH_ERROR)
        else:
            self._resolve_success(query, passages)

    def _is_current(self, query: str) -> bool:
        return self.store.status is RequestStatus.PENDING and self.store.query == query

    def _resolve_success(self, query: str, passages: List[ResultPassage]) -> None:
        if not self._is_current(query):
            logger.debug("Discarding stale search response for query=%r", query)
            return
        self.store.resolve_success(passages)

    def _resolve_failure(self, query: str, message: str) -> None:
        if not self._is_current(query):
            logger.debug("Discarding stale search failure for query=%r", query)
            return
        self.store.resolve_failure(message)
