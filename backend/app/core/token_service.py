"""
Refresh-token lifecycle: issue, rotate, revoke, resolve.

A refresh token row is ACTIVE until it is either REVOKED (logout, explicit
revoke, or being rotated away) or EXPIRED (``expires_at <= now``, computed on
read). Both end states are terminal. Rotation revokes the old row and inserts
its successor in one unit of work, so a secret can be exchanged at most once.

Expected rejections (unknown, revoked, expired, wrong owner) come back as
``None``; storage failures propagate to the caller.
"""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlmodel.ext.asyncio.session import AsyncSession

from app.controllers import user_controller
from app.core.exceptions import UserNotFound
from app.core.security import generate_refresh_secret, hash_token, looks_like_token_hash
from app.core.tokens import AccessTokenCodec
from app.db.refresh_token_store import RefreshTokenStore
from app.models.base import as_utc, utc_now
from app.models.refresh_token import RefreshToken
from app.models.user import User

logger = logging.getLogger(__name__)


class TokenService:
    def __init__(
        self,
        codec: AccessTokenCodec,
        refresh_ttl_days: int = 7,
        lock_rows: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.codec = codec
        self.refresh_ttl = timedelta(days=refresh_ttl_days)
        self.lock_rows = lock_rows
        self._clock = clock

    def _store(self, db: AsyncSession) -> RefreshTokenStore:
        return RefreshTokenStore(db, lock_rows=self.lock_rows)

    def _is_expired(self, token: RefreshToken) -> bool:
        return as_utc(token.expires_at) <= self._clock()

    def _new_token(self, store: RefreshTokenStore, user_id: uuid.UUID) -> tuple[str, RefreshToken]:
        raw = generate_refresh_secret()
        token = store.create_pending(
            user_id=user_id,
            token_hash=hash_token(raw),
            expires_at=self._clock() + self.refresh_ttl,
        )
        return raw, token

    # ── Access tokens ─────────────────────────────────────────

    def sign_access_token(self, user: User) -> str:
        return self.codec.sign(user.id, user.username)

    # ── Refresh tokens ────────────────────────────────────────

    async def issue(self, db: AsyncSession, user_id: uuid.UUID) -> str:
        """Create an ACTIVE refresh token for ``user_id`` and return its raw secret.

        The raw secret exists only in the return value; it must go straight to
        the client.
        """
        user = await user_controller.find_user_by_id(user_id, db)
        if not user:
            raise UserNotFound(str(user_id))

        store = self._store(db)
        raw, token = self._new_token(store, user.id)
        await store.persist(token)
        logger.info("Issued refresh token %s for user %s", token.id, user.id)
        return raw

    async def rotate(self, db: AsyncSession, raw: str, user_id: uuid.UUID) -> str | None:
        """Exchange ``raw`` for a fresh secret, revoking the old one.

        Returns None if ``raw`` is not an ACTIVE token owned by ``user_id``.
        Once this returns a value the old secret is dead, whether or not the
        new one reaches the client.
        """
        token_hash = hash_token(raw)

        async def _rotate(store: RefreshTokenStore) -> str | None:
            existing = await store.find_active_by_hash_and_owner(token_hash, user_id)
            if not existing or self._is_expired(existing):
                return None

            await store.mark_revoked(existing)

            new_raw, successor = self._new_token(store, existing.user_id)
            await store.persist(successor)
            logger.info("Rotated refresh token %s -> %s for user %s", existing.id, successor.id, user_id)
            return new_raw

        return await self._store(db).run_atomic(_rotate)

    async def revoke(self, db: AsyncSession, raw_or_hash: str) -> None:
        """Revoke by raw secret or by its hash. Unknown or already revoked is a no-op."""
        token_hash = raw_or_hash if looks_like_token_hash(raw_or_hash) else hash_token(raw_or_hash)
        count = await self._store(db).revoke_by_hash(token_hash.lower())
        if count:
            logger.info("Revoked %d refresh token(s)", count)

    async def resolve_owner(self, db: AsyncSession, raw: str) -> uuid.UUID | None:
        """Owner of an ACTIVE token, or None if absent, revoked or expired."""
        token = await self._store(db).find_active_by_hash(hash_token(raw))
        if not token or self._is_expired(token):
            return None
        return token.user_id

    async def purge_stale(self, db: AsyncSession, older_than: timedelta) -> int:
        """Delete tokens that expired or were revoked more than ``older_than`` ago."""
        cutoff = self._clock() - older_than
        deleted = await self._store(db).delete_stale(cutoff)
        await db.commit()
        return deleted
