"""Error taxonomy for the query session."""
from __future__ import annotations

GENERIC_SEARCH_ERROR = "An error occurred while searching."
SEARCH_CANCELLED = "The search was cancelled."


class PanelError(Exception):
    """Base class for errors surfaced to the panel user."""


class QueryValidationError(PanelError):
    """Query text is empty or whitespace only."""

    def __init__(self, message: str = "query is required") -> None:
        super().__init__(message)


class SearchTransportError(PanelError):
    """The request never produced an HTTP response (DNS, connect, timeout, bad URL)."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or GENERIC_SEARCH_ERROR)


class SearchProtocolError(PanelError):
    """The backend answered with a status outside the 2xx range."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"HTTP {status_code}")


class MalformedResponseError(PanelError):
    """The backend answered 2xx but the body is not the expected shape."""
