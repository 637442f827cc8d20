"""Short-lived JWT access tokens."""

import uuid
from collections.abc import Callable
from datetime import datetime, timedelta

import jwt
from pydantic import BaseModel, ValidationError

from app.core.exceptions import ConfigurationError, InvalidToken
from app.models.base import utc_now


class AccessTokenClaims(BaseModel):
    sub: str
    username: str
    iat: int
    exp: int


class AccessTokenCodec:
    """Signs and verifies access tokens. Stateless: no store lookups."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(minutes=15),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if not secret:
            raise ConfigurationError("ACCESS_TOKEN_SECRET environment variable is required")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = ttl
        self._clock = clock

    def sign(self, subject_id: uuid.UUID | str, username: str) -> str:
        """Create a signed access token for the given subject."""
        issued_at = self._clock()
        payload = {
            "sub": str(subject_id),
            "username": username,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> AccessTokenClaims:
        """Decode and validate an access token. Raises InvalidToken."""
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                # Time checks run against the injected clock below
                options={"require": ["sub", "iat", "exp"], "verify_exp": False, "verify_iat": False},
            )
        except jwt.InvalidTokenError as exc:
            raise InvalidToken(str(exc)) from exc

        try:
            claims = AccessTokenClaims.model_validate(payload)
        except ValidationError as exc:
            raise InvalidToken("Malformed token payload") from exc

        if claims.exp <= int(self._clock().timestamp()):
            raise InvalidToken("Token expired")
        return claims
