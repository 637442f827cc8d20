"""Error taxonomy shared by the core and the HTTP layer."""

from typing import Any


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing or invalid."""


class InvalidToken(Exception):
    """An access token failed signature, payload or expiry checks."""


class UserNotFound(LookupError):
    """A token was requested for a user id that does not exist."""


class APIError(Exception):
    """An HTTP error whose JSON body is sent to the client as-is.

    ``APIError(401, message="Invalid credentials")`` renders
    ``401 {"message": "Invalid credentials"}``.
    """

    def __init__(self, status_code: int, **body: Any) -> None:
        super().__init__(body.get("message") or body.get("error") or str(status_code))
        self.status_code = status_code
        self.body = body
