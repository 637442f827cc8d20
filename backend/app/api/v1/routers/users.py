"""Users router — read, update and delete accounts (register via /register instead)."""

import uuid

from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from app.api.deps import get_current_user, get_db
from app.controllers import user_controller
from app.core.exceptions import APIError
from app.models.user import User
from app.schemas.user import DeleteResult, UserRead, UserUpdate

router = APIRouter(prefix="/user", tags=["users"])


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a specific user by ID (requires auth)."""
    target = await user_controller.find_user_by_id(user_id, db)
    if not target:
        raise APIError(404, error="User not found")
    return target


@router.patch("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: uuid.UUID,
    payload: UserUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Change username and/or email (requires auth)."""
    return await user_controller.update_user(user_id, payload, db)


@router.delete("/{user_id}", response_model=DeleteResult)
async def delete_user(
    user_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a user and, by cascade, all of their refresh tokens (requires auth)."""
    affected = await user_controller.delete_user(user_id, db)
    return DeleteResult(affected=affected)
