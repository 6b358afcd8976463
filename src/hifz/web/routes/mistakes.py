"""Session mistake endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from hifz.core.store import HifzStore
from hifz.web.deps import get_store, patch_changes
from hifz.web.schemas import MistakeCreate, MistakeResponse, MistakeUpdate

router = APIRouter(prefix="/api/mistakes", tags=["mistakes"])


def _not_found(mistake_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Mistake {mistake_id} not found",
    )


@router.get("", response_model=list[MistakeResponse])
async def list_mistakes(store: HifzStore = Depends(get_store)) -> list[MistakeResponse]:
    return [MistakeResponse.from_entity(m) for m in store.list_mistakes()]


@router.get("/session/{session_id}", response_model=list[MistakeResponse])
async def mistakes_by_session(
    session_id: int,
    store: HifzStore = Depends(get_store),
) -> list[MistakeResponse]:
    return [MistakeResponse.from_entity(m) for m in store.get_mistakes_by_session(session_id)]


@router.get("/student/{student_id}", response_model=list[MistakeResponse])
async def mistakes_by_student(
    student_id: int,
    store: HifzStore = Depends(get_store),
) -> list[MistakeResponse]:
    return [MistakeResponse.from_entity(m) for m in store.get_mistakes_by_student(student_id)]


@router.get("/{mistake_id}", response_model=MistakeResponse)
async def get_mistake(mistake_id: int, store: HifzStore = Depends(get_store)) -> MistakeResponse:
    mistake = store.get_mistake(mistake_id)
    if mistake is None:
        raise _not_found(mistake_id)
    return MistakeResponse.from_entity(mistake)


@router.post("", response_model=MistakeResponse, status_code=status.HTTP_201_CREATED)
async def create_mistake(
    payload: MistakeCreate,
    store: HifzStore = Depends(get_store),
) -> MistakeResponse:
    """Record a mistake. The referenced session must exist."""
    mistake = store.create_mistake(**payload.model_dump())
    return MistakeResponse.from_entity(mistake)


@router.put("/{mistake_id}", response_model=MistakeResponse)
@router.patch("/{mistake_id}", response_model=MistakeResponse)
async def update_mistake(
    mistake_id: int,
    payload: MistakeUpdate,
    store: HifzStore = Depends(get_store),
) -> MistakeResponse:
    mistake = store.update_mistake(mistake_id, patch_changes(payload))
    if mistake is None:
        raise _not_found(mistake_id)
    return MistakeResponse.from_entity(mistake)


@router.delete("/{mistake_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_mistake(mistake_id: int, store: HifzStore = Depends(get_store)) -> None:
    if not store.delete_mistake(mistake_id):
        raise _not_found(mistake_id)
