"""Auth router — thin HTTP layer, delegates all logic to auth_controller."""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

from app.api.deps import get_db, get_token_service
from app.controllers import auth_controller
from app.core.config import settings
from app.core.token_service import TokenService
from app.schemas.auth import (
    AccessTokenResponse,
    AuthResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
)

router = APIRouter(tags=["auth"])


# ── Username / Password ──────────────────────────────────────

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    response: Response,
    tokens: TokenService = Depends(get_token_service),
    db: AsyncSession = Depends(get_db),
):
    """Create an account and return an access token; the refresh token is set as a cookie."""
    return await auth_controller.handle_register(payload, response, tokens, db)


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    tokens: TokenService = Depends(get_token_service),
    db: AsyncSession = Depends(get_db),
):
    """Log in with a username or email."""
    return await auth_controller.handle_login(payload, response, tokens, db)


# ── Token Management ─────────────────────────────────────────

@router.post("/refresh", response_model=AccessTokenResponse)
async def refresh_token(
    request: Request,
    response: Response,
    tokens: TokenService = Depends(get_token_service),
    db: AsyncSession = Depends(get_db),
):
    """Rotate the refresh token and issue a new access token."""
    refresh_token_value = request.cookies.get(settings.REFRESH_COOKIE_NAME)
    access_token = await auth_controller.handle_refresh(refresh_token_value, response, tokens, db)
    return AccessTokenResponse(access_token=access_token)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    tokens: TokenService = Depends(get_token_service),
    db: AsyncSession = Depends(get_db),
):
    """Revoke the refresh token and clear the cookie."""
    refresh_token_value = request.cookies.get(settings.REFRESH_COOKIE_NAME)
    await auth_controller.handle_logout(refresh_token_value, response, tokens, db)
    return {"message": "Logged out"}
