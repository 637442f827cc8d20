"""
Out-of-band purge of dead refresh tokens.

Run periodically (cron, k8s CronJob) with::

    python -m app.db.sweep

Rows that expired, or were revoked, more than REFRESH_TOKEN_RETENTION_DAYS
ago are deleted. Never called on the request path.
"""

import asyncio
import logging
from datetime import timedelta

from app.core.config import settings
from app.core.token_service import TokenService
from app.core.tokens import AccessTokenCodec
from app.db.database import AsyncSessionLocal, engine

logger = logging.getLogger(__name__)


async def sweep(service: TokenService, session_factory=AsyncSessionLocal) -> int:
    retention = timedelta(days=settings.REFRESH_TOKEN_RETENTION_DAYS)
    async with session_factory() as db:
        deleted = await service.purge_stale(db, older_than=retention)
    logger.info("Purged %d stale refresh token(s) older than %s", deleted, retention)
    return deleted


async def main() -> None:
    service = TokenService(
        codec=AccessTokenCodec(settings.ACCESS_TOKEN_SECRET, settings.JWT_ALGORITHM, settings.ACCESS_TOKEN_TTL),
        refresh_ttl_days=settings.REFRESH_TOKEN_TTL_DAYS,
    )
    try:
        await sweep(service)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    asyncio.run(main())
