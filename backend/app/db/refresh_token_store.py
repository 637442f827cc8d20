"""Persistence for refresh tokens.

Every query here works on hashes only. The store never sees a raw secret.
"""

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TypeVar
from uuid import UUID

from sqlalchemy import delete, func, or_, select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from app.models.refresh_token import RefreshToken

T = TypeVar("T")


class RefreshTokenStore:
    def __init__(self, db: AsyncSession, lock_rows: bool = False) -> None:
        self.db = db
        self.lock_rows = lock_rows

    def create_pending(self, user_id: UUID, token_hash: str, expires_at: datetime) -> RefreshToken:
        """Add a new, not yet flushed, active token to the session."""
        token = RefreshToken(user_id=user_id, token_hash=token_hash, expires_at=expires_at)
        self.db.add(token)
        return token

    async def persist(self, token: RefreshToken) -> RefreshToken:
        self.db.add(token)
        await self.db.flush()
        return token

    async def find_active_by_hash(self, token_hash: str) -> RefreshToken | None:
        """Non-revoked token with this hash. Expiry is left to the caller."""
        result = await self.db.execute(
            select(RefreshToken).where(
                RefreshToken.token_hash == token_hash,
                RefreshToken.is_revoked == False,  # noqa: E712
            )
        )
        return result.scalar_one_or_none()

    async def find_active_by_hash_and_owner(self, token_hash: str, user_id: UUID) -> RefreshToken | None:
        """Like find_active_by_hash, but only if the token belongs to ``user_id``."""
        stmt = select(RefreshToken).where(
            RefreshToken.token_hash == token_hash,
            RefreshToken.user_id == user_id,
            RefreshToken.is_revoked == False,  # noqa: E712
        )
        if self.lock_rows:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_revoked(self, token: RefreshToken) -> None:
        if not token.is_revoked:
            token.is_revoked = True
        await self.persist(token)

    async def revoke_by_hash(self, token_hash: str) -> int:
        """Revoke every row with this hash. Returns the number of rows touched."""
        result = await self.db.execute(
            update(RefreshToken)
            .where(
                RefreshToken.token_hash == token_hash,
                RefreshToken.is_revoked == False,  # noqa: E712
            )
            .values(is_revoked=True)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def run_atomic(self, fn: Callable[["RefreshTokenStore"], Awaitable[T]]) -> T:
        """Run ``fn`` as one unit of work: commit on success, roll back on error."""
        try:
            result = await fn(self)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return result

    async def delete_stale(self, before: datetime) -> int:
        """Hard-delete tokens that expired, or were revoked, before ``before``."""
        result = await self.db.execute(
            delete(RefreshToken).where(
                or_(
                    RefreshToken.expires_at <= before,
                    (RefreshToken.is_revoked == True)  # noqa: E712
                    & (func.coalesce(RefreshToken.updated_at, RefreshToken.created_at) <= before),
                )
            )
        )
        return result.rowcount or 0
