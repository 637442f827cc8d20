"""Auth controller — all business logic for authentication flows."""

import logging

from fastapi import Response
from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from app.controllers import user_controller
from app.core.cookies import attach_refresh_cookie, clear_refresh_cookie
from app.core.exceptions import APIError
from app.core.token_service import TokenService
from app.models.user import User
from app.schemas.auth import AuthResponse, AuthUser, LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)


# ── Token Issuance ────────────────────────────────────────────

async def issue_tokens(user: User, response: Response, tokens: TokenService, db: AsyncSession) -> AuthResponse:
    """Create access + refresh tokens; the refresh token goes out as a cookie only."""
    access_token = tokens.sign_access_token(user)
    refresh_token = await tokens.issue(db, user.id)
    attach_refresh_cookie(response, refresh_token)
    return AuthResponse(access_token=access_token, user=AuthUser.model_validate(user))


# ── Username / Password Auth ─────────────────────────────────

async def handle_register(
    payload: RegisterRequest,
    response: Response,
    tokens: TokenService,
    db: AsyncSession,
) -> AuthResponse:
    """Register a new user and log them straight in."""
    try:
        for identifier in (payload.email, payload.username):
            if await user_controller.find_user_by_username_or_email(identifier, db):
                raise APIError(409, message="User already exists")

        user = await user_controller.create_user(payload.username, payload.email, payload.password, db)
        return await issue_tokens(user, response, tokens, db)
    except APIError:
        raise
    except IntegrityError:
        # Lost a race with a concurrent registration for the same name/email
        raise APIError(409, message="User already exists")
    except Exception:
        logger.exception("Registration failed")
        raise APIError(500, message="Registration failed")


async def handle_login(
    payload: LoginRequest,
    response: Response,
    tokens: TokenService,
    db: AsyncSession,
) -> AuthResponse:
    """Authenticate by username or email + password."""
    try:
        user = await user_controller.find_user_by_username_or_email(payload.identifier, db)
        if not user or not user_controller.check_password(user, payload.password):
            raise APIError(401, message="Invalid credentials")

        return await issue_tokens(user, response, tokens, db)
    except APIError:
        raise
    except Exception:
        logger.exception("Login failed")
        raise APIError(500, message="Login failed")


# ── Token Refresh ─────────────────────────────────────────────

async def handle_refresh(
    refresh_token_value: str | None,
    response: Response,
    tokens: TokenService,
    db: AsyncSession,
) -> str:
    """
    Validate a refresh token, rotate it, and return a new access token.

    Unknown, revoked, expired and reused tokens all get the same answer.
    """
    if not refresh_token_value:
        raise APIError(401, message="Missing refresh token")

    try:
        user_id = await tokens.resolve_owner(db, refresh_token_value)
        user = await user_controller.find_user_by_id(user_id, db) if user_id else None
        if not user:
            raise APIError(401, message="Invalid refresh token")

        new_refresh_token = await tokens.rotate(db, refresh_token_value, user.id)
        if not new_refresh_token:
            raise APIError(401, message="Invalid refresh token")
    except APIError:
        raise
    except Exception:
        logger.exception("Refresh failed")
        raise APIError(401, message="Refresh failed")

    attach_refresh_cookie(response, new_refresh_token)
    return tokens.sign_access_token(user)


# ── Logout ────────────────────────────────────────────────────

async def handle_logout(
    refresh_token_value: str | None,
    response: Response,
    tokens: TokenService,
    db: AsyncSession,
) -> None:
    """Revoke the refresh token (if any) and clear the cookie."""
    try:
        if refresh_token_value:
            await tokens.revoke(db, refresh_token_value)
    except Exception:
        logger.exception("Logout failed")
        raise APIError(500, message="Logout failed")

    clear_refresh_cookie(response)
