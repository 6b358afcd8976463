"""User endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from hifz.core.models import User
from hifz.core.store import HifzStore
from hifz.web.deps import get_current_user, get_store
from hifz.web.schemas import UserCreate, UserResponse

router = APIRouter(prefix="/api", tags=["users"])


@router.get("/users", response_model=list[UserResponse])
async def list_users(store: HifzStore = Depends(get_store)) -> list[UserResponse]:
    """List all users."""
    return [UserResponse.from_entity(u) for u in store.list_users()]


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(payload: UserCreate, store: HifzStore = Depends(get_store)) -> UserResponse:
    """Create a user. Duplicate usernames are rejected with 409."""
    user = store.create_user(username=payload.username, name=payload.name, role=payload.role)
    return UserResponse.from_entity(user)


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(user_id: int, store: HifzStore = Depends(get_store)) -> UserResponse:
    user = store.get_user(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found",
        )
    return UserResponse.from_entity(user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, store: HifzStore = Depends(get_store)) -> None:
    """Delete a user with its teacher links and lessons."""
    if not store.delete_user(user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User {user_id} not found",
        )


@router.get("/auth/user", response_model=UserResponse)
async def current_user(user: User = Depends(get_current_user)) -> UserResponse:
    """The user named by the X-User-Id header."""
    return UserResponse.from_entity(user)
