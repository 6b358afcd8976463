"""Peer revision session endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from hifz.config.app_config import AppConfig
from hifz.core.stats import StatsEngine
from hifz.core.store import HifzStore
from hifz.web.deps import get_config, get_stats, get_store, patch_changes, resolve_limit
from hifz.web.schemas import (
    SessionCreate,
    SessionResponse,
    SessionUpdate,
    SessionWithDetailsResponse,
)

router = APIRouter(prefix="/api/sessions", tags=["sessions"])


def _not_found(session_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Session {session_id} not found",
    )


@router.get("", response_model=list[SessionResponse])
async def list_sessions(store: HifzStore = Depends(get_store)) -> list[SessionResponse]:
    return [SessionResponse.from_entity(s) for s in store.list_sessions()]


@router.get("/recent", response_model=list[SessionWithDetailsResponse])
async def recent_sessions(
    limit: int | None = Query(default=None, ge=1),
    stats: StatsEngine = Depends(get_stats),
    config: AppConfig = Depends(get_config),
) -> list[SessionWithDetailsResponse]:
    """Most recent sessions, newest first, with participants and mistake counts."""
    sessions = stats.get_recent_sessions(resolve_limit(limit, config))
    return [SessionWithDetailsResponse.from_entity(s) for s in sessions]


@router.get("/student/{student_id}", response_model=list[SessionResponse])
async def sessions_by_student(
    student_id: int,
    store: HifzStore = Depends(get_store),
) -> list[SessionResponse]:
    """Sessions a student took part in, newest first."""
    return [SessionResponse.from_entity(s) for s in store.get_sessions_by_student(student_id)]


@router.get("/{session_id}", response_model=SessionWithDetailsResponse)
async def get_session(
    session_id: int,
    stats: StatsEngine = Depends(get_stats),
) -> SessionWithDetailsResponse:
    details = stats.get_session_with_details(session_id)
    if details is None:
        raise _not_found(session_id)
    return SessionWithDetailsResponse.from_entity(details)


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    payload: SessionCreate,
    store: HifzStore = Depends(get_store),
) -> SessionResponse:
    """Record a session. ``date`` defaults to now."""
    session = store.create_session(**payload.model_dump())
    return SessionResponse.from_entity(session)


@router.put("/{session_id}", response_model=SessionResponse)
@router.patch("/{session_id}", response_model=SessionResponse)
async def update_session(
    session_id: int,
    payload: SessionUpdate,
    store: HifzStore = Depends(get_store),
) -> SessionResponse:
    session = store.update_session(session_id, patch_changes(payload))
    if session is None:
        raise _not_found(session_id)
    return SessionResponse.from_entity(session)


@router.post("/{session_id}/complete", response_model=SessionResponse)
async def complete_session(
    session_id: int,
    store: HifzStore = Depends(get_store),
) -> SessionResponse:
    session = store.complete_session(session_id)
    if session is None:
        raise _not_found(session_id)
    return SessionResponse.from_entity(session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: int, store: HifzStore = Depends(get_store)) -> None:
    """Delete a session and its mistakes."""
    if not store.delete_session(session_id):
        raise _not_found(session_id)
