"""FastAPI endpoints serving the query panel's sessions."""
from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Response, status
from pydantic import BaseModel, Field

from app.core.providers import get_session_registry
from app.session.controller import QuerySession
from app.session.errors import QueryValidationError
from app.session.models import ActiveTab, RequestStatus
from app.session.registry import SessionRegistry
from app.session.store import validate_query
from app.session.view import PanelView, build_panel_view

router = APIRouter(prefix="/panel", tags=["panel"])


class SubmitQueryRequest(BaseModel):
    text: str = Field(..., description="Natural-language question")


class RatingRequest(BaseModel):
    stars: int = Field(..., ge=1, le=5, description="Whole-star trust rating")


class FeedbackRequest(BaseModel):
    kind: Literal["helpful", "needs_work"]


class TabRequest(BaseModel):
    tab: ActiveTab


class SessionResponse(BaseModel):
    session_id: str
    view: PanelView


def _render(session_id: str, session: QuerySession) -> SessionResponse:
    return SessionResponse(session_id=session_id, view=build_panel_view(session.snapshot()))


def _require_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> QuerySession:
    session = registry.get(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="session not found")
    return session


@router.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_session(
    registry: SessionRegistry = Depends(get_session_registry),
) -> SessionResponse:
    session_id, session = registry.create()
    return _render(session_id, session)


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    session: QuerySession = Depends(_require_session),
) -> SessionResponse:
    return _render(session_id, session)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    registry: SessionRegistry = Depends(get_session_registry),
) -> Response:
    if not registry.discard(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="session not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/sessions/{session_id}/query",
    response_model=SessionResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def submit_query(
    session_id: str,
    request: SubmitQueryRequest,
    session: QuerySession = Depends(_require_session),
) -> SessionResponse:
    try:
        query = validate_query(request.text)
    except QueryValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if session.snapshot().status is RequestStatus.PENDING:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="a search is already in progress for this session",
        )

    session.submit(query)
    return _render(session_id, session)


@router.post("/sessions/{session_id}/rating", response_model=SessionResponse)
async def adjust_rating(
    session_id: str,
    request: RatingRequest,
    session: QuerySession = Depends(_require_session),
) -> SessionResponse:
    session.adjust_rating(request.stars)
    return _render(session_id, session)


@router.post("/sessions/{session_id}/feedback", response_model=SessionResponse)
async def record_feedback(
    session_id: str,
    request: FeedbackRequest,
    session: QuerySession = Depends(_require_session),
) -> SessionResponse:
    if request.kind == "helpful":
        session.mark_helpful()
    else:
        session.mark_needs_work()
    return _render(session_id, session)


@router.put("/sessions/{session_id}/tab", response_model=SessionResponse)
async def set_tab(
    session_id: str,
    request: TabRequest,
    session: QuerySession = Depends(_require_session),
) -> SessionResponse:
    session.set_active_tab(request.tab)
    return _render(session_id, session)
