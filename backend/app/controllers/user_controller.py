"""User controller — lookups and updates used by the auth flows and /user routes."""

import uuid

from sqlalchemy import delete, or_, select
from sqlmodel.ext.asyncio.session import AsyncSession

from app.core.exceptions import APIError
from app.core.security import hash_password, verify_password
from app.models.user import User
from app.schemas.user import UserUpdate


async def find_user_by_id(user_id: uuid.UUID | str, db: AsyncSession) -> User | None:
    if isinstance(user_id, str):
        try:
            user_id = uuid.UUID(user_id)
        except ValueError:
            return None
    return await db.get(User, user_id)


async def find_user_by_username_or_email(identifier: str, db: AsyncSession) -> User | None:
    result = await db.execute(
        select(User).where(or_(User.username == identifier, User.email == identifier))
    )
    return result.scalars().first()


async def create_user(username: str, email: str, password: str, db: AsyncSession) -> User:
    """Create a user with a bcrypt password hash."""
    user = User(
        username=username,
        email=email,
        hashed_password=hash_password(password),
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


def check_password(user: User, password: str) -> bool:
    return verify_password(password, user.hashed_password)


async def update_user(user_id: uuid.UUID, payload: UserUpdate, db: AsyncSession) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise APIError(404, error="User not found")

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    for field in ("username", "email"):
        value = changes.get(field)
        if value is None or value == getattr(user, field):
            continue
        result = await db.execute(
            select(User).where(getattr(User, field) == value, User.id != user.id)
        )
        if result.scalar_one_or_none():
            raise APIError(409, error=f"{field.capitalize()} already taken")
        setattr(user, field, value)

    db.add(user)
    await db.flush()
    await db.refresh(user)
    return user


async def delete_user(user_id: uuid.UUID, db: AsyncSession) -> int:
    """Hard-delete a user; the DB cascades its refresh tokens. Returns rows affected."""
    result = await db.execute(delete(User).where(User.id == user_id))
    return result.rowcount or 0
