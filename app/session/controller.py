"""Action surface tying a session store to its search executor."""
from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Callable, Optional, Union

from .errors import SEARCH_CANCELLED
from .executor import SearchBackend, SearchRequestExecutor
from .models import ActiveTab, RequestStatus, SessionSnapshot
from .store import Listener, SessionStateStore

logger = logging.getLogger(__name__)


class QuerySession:
    """One panel session: a store, its executor and the in-flight task."""

    def __init__(self, backend: SearchBackend, *, store: SessionStateStore | None = None) -> None:
        self.store = store or SessionStateStore()
        self.executor = SearchRequestExecutor(self.store, backend)
        self._task: Optional[asyncio.Task[None]] = None

    def submit(self, text: str) -> Optional[asyncio.Task[None]]:
        """Apply the submission and dispatch the search without awaiting it.

        The store already reads ``PENDING`` with cleared results when this
        returns. Rejected submissions return ``None`` and dispatch nothing.
        Raises ``RuntimeError`` before touching the store when called outside
        a running event loop.
        """

        loop = asyncio.get_running_loop()
        if not self.store.submit_query(text):
            return None
        logger.debug("Dispatching search for query=%r", text)
        self._task = loop.create_task(self.executor.run(text))
        self._task.add_done_callback(partial(self._on_search_done, text))
        return self._task

    @property
    def is_pending(self) -> bool:
        return self.store.status is RequestStatus.PENDING

    async def wait_idle(self) -> None:
        """Wait for the in-flight search, if any, to resolve the store."""

        task = self._task
        if task is not None and not task.done():
            await asyncio.wait({task})

    def _on_search_done(self, query: str, task: asyncio.Task[None]) -> None:
        # A task cancelled before its first step never enters the executor.
        if task.cancelled() and self.is_pending and self.store.query == query:
            logger.info("Search cancelled before dispatch for query=%r", query)
            self.store.resolve_failure(SEARCH_CANCELLED)

    def snapshot(self) -> SessionSnapshot:
        return self.store.snapshot()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.store.subscribe(listener)

    def adjust_rating(self, stars: int) -> None:
        self.store.adjust_rating(stars)

    def mark_helpful(self) -> None:
        self.store.mark_helpful()

    def mark_needs_work(self) -> None:
        self.store.mark_needs_work()

    def set_active_tab(self, tab: Union[ActiveTab, str]) -> None:
        self.store.set_active_tab(tab)
