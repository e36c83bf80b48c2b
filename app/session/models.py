"""Domain models for one query-panel session."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

DEFAULT_RATING = 4.5
MAX_RATING = 5
DEFAULT_TOP_K = 5
UNKNOWN_SOURCE = "unknown source"


class RequestStatus(str, Enum):
    """Lifecycle of the session's search request."""

    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class ActiveTab(str, Enum):
    """Display mode selector; independent of the request lifecycle."""

    QA = "qa"
    HISTORY = "history"


@dataclass(frozen=True, slots=True)
class ResultPassage:
    """One retrieved passage, kept in backend rank order."""

    source: str
    text: str
    enriched_text: Optional[str] = None

    @property
    def display_text(self) -> str:
        """Enriched text wins over plain text when the backend supplied it."""

        if self.enriched_text is not None:
            return self.enriched_text
        return self.text

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ResultPassage":
        """Normalize one item of the backend's ``results`` array."""

        source = payload.get("source")
        if not isinstance(source, str) or not source.strip():
            source = UNKNOWN_SOURCE

        text = payload.get("text")
        if not isinstance(text, str):
            text = ""

        enriched = payload.get("enriched_text")
        if not isinstance(enriched, str) or not enriched:
            enriched = None

        return cls(source=source, text=text, enriched_text=enriched)


@dataclass(slots=True)
class FeedbackCounters:
    """Helpful / needs-work clicks on the current answer."""

    helpful: int = 0
    needs_work: int = 0

    def reset(self) -> None:
        self.helpful = 0
        self.needs_work = 0


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Immutable view of the store handed to the presentation layer."""

    query: str
    status: RequestStatus
    results: Tuple[ResultPassage, ...]
    error: Optional[str]
    helpful_count: int
    needs_work_count: int
    rating: float
    active_tab: ActiveTab

    @property
    def is_pending(self) -> bool:
        return self.status is RequestStatus.PENDING
