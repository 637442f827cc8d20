"""Refresh-token cookie: HttpOnly, Secure, SameSite=Strict, scoped to /refresh and /logout."""

from fastapi import Response

from app.core.config import Settings, settings as default_settings

SECONDS_PER_DAY = 86400


def attach_refresh_cookie(response: Response, raw_token: str, settings: Settings = default_settings) -> None:
    """Set the refresh cookie once per scoped path.

    Max-Age follows REFRESH_TOKEN_TTL_DAYS so the cookie never outlives the row.
    """
    for path in settings.refresh_cookie_paths:
        response.set_cookie(
            key=settings.REFRESH_COOKIE_NAME,
            value=raw_token,
            max_age=settings.REFRESH_TOKEN_TTL_DAYS * SECONDS_PER_DAY,
            path=path,
            secure=True,
            httponly=True,
            samesite="strict",
        )


def clear_refresh_cookie(response: Response, settings: Settings = default_settings) -> None:
    for path in settings.refresh_cookie_paths:
        response.delete_cookie(
            settings.REFRESH_COOKIE_NAME,
            path=path,
            secure=True,
            httponly=True,
            samesite="strict",
        )
