"""
Shared FastAPI dependencies — single source of truth for DI.

All routers should import get_db, get_token_service and get_current_user
from HERE, not directly from core or db modules.
"""

from fastapi import Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from app.controllers import user_controller
from app.core.exceptions import APIError, InvalidToken
from app.core.pokeapi import PokeAPIClient
from app.core.token_service import TokenService
from app.db.database import get_db as _get_db
from app.models.user import User

__all__ = ["get_db", "get_token_service", "get_pokeapi_client", "get_current_user"]


async def get_db() -> AsyncSession:
    """Yield an async database session."""
    async for session in _get_db():
        yield session


def get_token_service(request: Request) -> TokenService:
    """The TokenService built once at startup (see app.main)."""
    return request.app.state.token_service


def get_pokeapi_client(request: Request) -> PokeAPIClient:
    return request.app.state.pokeapi_client


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Require a valid ``Authorization: Bearer <access token>`` whose subject
    still exists. Every failure is a terminal 401.
    """
    token = _bearer_token(request)
    if not token:
        raise APIError(401, error="Missing Bearer token")

    try:
        claims = tokens.codec.verify(token)
    except InvalidToken:
        raise APIError(401, message="Unauthorized")

    user = await user_controller.find_user_by_id(claims.sub, db)
    if not user:
        raise APIError(401, error="User not found")

    return user
