"""In-memory registry of independent panel sessions."""
from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Optional
from uuid import uuid4

from .controller import QuerySession
from .executor import SearchBackend

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Holds one ``QuerySession`` per session id; nothing is persisted.

    Sessions untouched for ``idle_ttl`` seconds are evicted, and once
    ``max_sessions`` is reached the least recently used session goes first.
    A session with a search in flight is never evicted.
    """

    def __init__(
        self,
        backend_factory: Callable[[], SearchBackend],
        *,
        max_sessions: int = 1000,
        idle_ttl: float = 1800.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self._backend_factory = backend_factory
        self.max_sessions = max_sessions
        self.idle_ttl = idle_ttl
        self._clock = clock
        self._sessions: Dict[str, QuerySession] = {}
        self._last_access: Dict[str, float] = {}

    def create(self) -> tuple[str, QuerySession]:
        self._evict_expired()
        if len(self._sessions) >= self.max_sessions:
            self._evict_least_recent()

        session_id = uuid4().hex
        session = QuerySession(self._backend_factory())
        self._sessions[session_id] = session
        self._last_access[session_id] = self._clock()
        logger.info("Created panel session %s", session_id)
        return session_id, session

    def get(self, session_id: str) -> Optional[QuerySession]:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if self._is_expired(session_id, session):
            self._drop(session_id, reason="idle")
            return None
        self._last_access[session_id] = self._clock()
        return session

    def discard(self, session_id: str) -> bool:
        if session_id not in self._sessions:
            return False
        self._drop(session_id, reason="discarded")
        return True

    def __len__(self) -> int:
        return len(self._sessions)

    def _is_expired(self, session_id: str, session: QuerySession) -> bool:
        if session.is_pending:
            return False
        return self._clock() - self._last_access[session_id] >= self.idle_ttl

    def _evict_expired(self) -> None:
        expired = [sid for sid, s in self._sessions.items() if self._is_expired(sid, s)]
        for session_id in expired:
            self._drop(session_id, reason="idle")

    def _evict_least_recent(self) -> None:
        idle = [sid for sid, s in self._sessions.items() if not s.is_pending]
        if not idle:
            logger.warning(
                "All %s panel sessions have searches in flight; exceeding the cap",
                len(self._sessions),
            )
            return
        oldest = min(idle, key=self._last_access.__getitem__)
        self._drop(oldest, reason="capacity")

    def _drop(self, session_id: str, *, reason: str) -> None:
        self._sessions.pop(session_id, None)
        self._last_access.pop(session_id, None)
        logger.info("Removed panel session %s (%s)", session_id, reason)
