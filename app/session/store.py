"""Observable state container for one query-panel session."""
from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional, Tuple, Union

from .errors import QueryValidationError
from .models import (
    DEFAULT_RATING,
    MAX_RATING,
    ActiveTab,
    FeedbackCounters,
    RequestStatus,
    ResultPassage,
    SessionSnapshot,
)

logger = logging.getLogger(__name__)

Listener = Callable[[SessionSnapshot], None]


def validate_query(text: Optional[str]) -> str:
    """Return the query unchanged, or raise for empty and whitespace-only text."""

    if not text or not text.strip():
        raise QueryValidationError()
    return text


class SessionStateStore:
    """Sole mutable owner of a session's query, results and feedback state.

    Every mutation goes through one of the public operations below, each of
    which leaves the store consistent: results are only ever non-empty while
    the status is ``SUCCESS``. Subscribers receive a fresh snapshot after each
    change that actually happened.
    """

    def __init__(self, *, rating: float = DEFAULT_RATING) -> None:
        self._query = ""
        self._status = RequestStatus.IDLE
        self._results: Tuple[ResultPassage, ...] = ()
        self._error: Optional[str] = None
        self._feedback = FeedbackCounters()
        self._rating = float(rating)
        self._active_tab = ActiveTab.QA
        self._listeners: List[Listener] = []

    @property
    def status(self) -> RequestStatus:
        return self._status

    @property
    def query(self) -> str:
        return self._query

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            query=self._query,
            status=self._status,
            results=self._results,
            error=self._error,
            helpful_count=self._feedback.helpful,
            needs_work_count=self._feedback.needs_work,
            rating=self._rating,
            active_tab=self._active_tab,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a callable that removes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def submit_query(self, text: str) -> bool:
        """Enter ``PENDING`` for a new question.

        Returns ``False`` without touching state when the text is blank or a
        request is already in flight.
        """

        try:
            validate_query(text)
        except QueryValidationError:
            logger.debug("Ignoring blank query submission")
            return False
        if self._status is RequestStatus.PENDING:
            logger.debug("Ignoring submission while a search is in flight: %r", text)
            return False

        self._query = text
        self._status = RequestStatus.PENDING
        self._results = ()
        self._error = None
        self._feedback.reset()
        logger.info("Query submitted: %r", text)
        self._notify()
        return True

    def resolve_success(self, results: Iterable[ResultPassage]) -> bool:
        if self._status is not RequestStatus.PENDING:
            logger.debug("Dropping search results; status is %s", self._status.value)
            return False

        self._results = tuple(results)
        self._status = RequestStatus.SUCCESS
        logger.info("Search for %r returned %s passage(s)", self._query, len(self._results))
        self._notify()
        return True

    def resolve_failure(self, message: str) -> bool:
        if self._status is not RequestStatus.PENDING:
            logger.debug("Dropping search failure %r; status is %s", message, self._status.value)
            return False

        self._results = ()
        self._error = message
        self._status = RequestStatus.FAILED
        self._notify()
        return True

    def adjust_rating(self, stars: int) -> None:
        """Set the trust rating from a whole-star click (1..5)."""

        if isinstance(stars, bool) or not isinstance(stars, int):
            raise ValueError("rating must be a whole number of stars")
        if not 1 <= stars <= MAX_RATING:
            raise ValueError(f"rating must be between 1 and {MAX_RATING}")
        self._rating = float(stars)
        self._notify()

    def mark_helpful(self) -> None:
        self._feedback.helpful += 1
        self._notify()

    def mark_needs_work(self) -> None:
        self._feedback.needs_work += 1
        self._notify()

    def set_active_tab(self, tab: Union[ActiveTab, str]) -> None:
        try:
            self._active_tab = ActiveTab(tab)
        except ValueError as exc:
            raise ValueError(f"unknown tab '{tab}'") from exc
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Session listener %r failed", listener)
