"""Presentation-ready view of a session snapshot."""
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .models import MAX_RATING, ActiveTab, RequestStatus, SessionSnapshot

TITLE_MAX_CHARS = 80

SEARCHING_MESSAGE = "Searching…"
NO_RESULTS_ANSWER = "No related results. Try making your question more specific."
LOADING_REFERENCES = "Loading…"
NO_REFERENCES = "No search results."
EMPTY_HISTORY = "No conversation history yet. Try asking a question."

StarState = Literal["full", "half", "empty"]


class ReferenceCard(BaseModel):
    rank: int = Field(..., ge=1, description="1-based position in backend order")
    label: str
    title: str


class RatingView(BaseModel):
    value: float
    label: str
    stars: List[StarState]


class FeedbackView(BaseModel):
    helpful: int
    needs_work: int


class PanelView(BaseModel):
    tab: ActiveTab
    status: RequestStatus
    question: Optional[str] = None
    answer: Optional[str] = None
    error: Optional[str] = None
    references: List[ReferenceCard] = Field(default_factory=list)
    references_placeholder: Optional[str] = None
    history_placeholder: Optional[str] = None
    rating: RatingView
    feedback: FeedbackView


def answer_text(count: int) -> str:
    if count == 1:
        return "1 result found. Check the references below for the original text."
    return f"{count} results found. Check the references below for the original text."


def card_title(text: str) -> str:
    if len(text) > TITLE_MAX_CHARS:
        return text[:TITLE_MAX_CHARS] + "…"
    return text


def star_states(value: float, out_of: int = MAX_RATING) -> List[StarState]:
    """Star fill for a rating rounded to the nearest half."""

    rounded = round(value * 2) / 2
    states: List[StarState] = []
    for position in range(1, out_of + 1):
        if rounded >= position:
            states.append("full")
        elif rounded + 0.5 == position:
            states.append("half")
        else:
            states.append("empty")
    return states


def build_panel_view(snapshot: SessionSnapshot) -> PanelView:
    status = snapshot.status
    answer: Optional[str] = None
    if status is RequestStatus.PENDING:
        answer = SEARCHING_MESSAGE
    elif status is RequestStatus.SUCCESS:
        answer = answer_text(len(snapshot.results)) if snapshot.results else NO_RESULTS_ANSWER

    references = [
        ReferenceCard(rank=idx, label=passage.source, title=card_title(passage.display_text))
        for idx, passage in enumerate(snapshot.results, start=1)
    ]
    placeholder: Optional[str] = None
    if status is RequestStatus.PENDING:
        placeholder = LOADING_REFERENCES
    elif not references:
        placeholder = NO_REFERENCES

    return PanelView(
        tab=snapshot.active_tab,
        status=status,
        question=snapshot.query or None,
        answer=answer,
        error=snapshot.error if status is RequestStatus.FAILED else None,
        references=references,
        references_placeholder=placeholder,
        history_placeholder=EMPTY_HISTORY if snapshot.active_tab is ActiveTab.HISTORY else None,
        rating=RatingView(
            value=snapshot.rating,
            label=f"{snapshot.rating:.1f}",
            stars=star_states(snapshot.rating),
        ),
        feedback=FeedbackView(
            helpful=snapshot.helpful_count,
            needs_work=snapshot.needs_work_count,
        ),
    )
