import re
from datetime import timedelta
from enum import Enum
from typing import Any

from pydantic import Field, PostgresDsn, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.core.exceptions import ConfigurationError


class ModeEnum(str, Enum):
    development = "development"
    production = "production"
    testing = "testing"


_DURATION_RE = re.compile(
    r"^\s*(?P<value>\d+(?:\.\d+)?)\s*(?P<unit>ms|milliseconds?|s|secs?|seconds?|m|mins?|minutes?|h|hrs?|hours?|d|days?|w|weeks?)?\s*$",
    re.IGNORECASE,
)

_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
    "w": 604800,
}


def parse_duration(value: Any) -> timedelta:
    """Parse ``"15m"``, ``"2h"``, ``"7d"``, ``"900"`` or an int into a timedelta.

    Bare numbers are seconds.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return timedelta(seconds=value)
    if not isinstance(value, str):
        raise ValueError(f"Unsupported duration: {value!r}")

    match = _DURATION_RE.match(value)
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")

    unit = (match.group("unit") or "s").lower()
    if unit.startswith("ms") or unit.startswith("milli"):
        key = "ms"
    else:
        key = unit[0]
    return timedelta(seconds=float(match.group("value")) * _UNIT_SECONDS[key])


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file="../.env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── App ───────────────────────────────────────────────────
    MODE: ModeEnum = ModeEnum.production
    API_PREFIX: str = ""
    PROJECT_NAME: str = "POKEDEX"
    LOG_LEVEL: str = "INFO"

    # ── JWT / Auth ────────────────────────────────────────────
    ACCESS_TOKEN_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_TTL: timedelta = timedelta(minutes=15)
    REFRESH_TOKEN_TTL_DAYS: int = Field(default=7, gt=0)
    REFRESH_TOKEN_RETENTION_DAYS: int = Field(default=30, ge=0)
    REFRESH_COOKIE_NAME: str = "refresh_token"
    ROTATION_LOCK_ROWS: bool = True
    BCRYPT_ROUNDS: int = Field(default=10, ge=4, le=31)

    # ── Database ──────────────────────────────────────────────
    DATABASE_USER: str = "postgres"
    DATABASE_PASSWORD: str = "postgres"
    DATABASE_HOST: str = "localhost"
    DATABASE_PORT: int = 5432
    DATABASE_NAME: str = "app_db"

    ASYNC_DATABASE_URI: PostgresDsn | str = Field(default="", validate_default=True)

    # ── PokéAPI ───────────────────────────────────────────────
    POKEAPI_BASE_URL: str = "https://pokeapi.co/api/v2"
    POKEAPI_TIMEOUT_SECONDS: float = 10.0

    @field_validator("ACCESS_TOKEN_SECRET")
    @classmethod
    def secret_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("ACCESS_TOKEN_SECRET must not be empty")
        return v

    @field_validator("ACCESS_TOKEN_TTL", mode="before")
    @classmethod
    def parse_access_ttl(cls, v: Any) -> timedelta:
        ttl = parse_duration(v)
        if ttl <= timedelta(0):
            raise ValueError("ACCESS_TOKEN_TTL must be positive")
        return ttl

    @field_validator("ASYNC_DATABASE_URI", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: str | None, info) -> Any:
        if isinstance(v, str) and v == "":
            data = info.data
            # SSL only in production
            mode = data.get("MODE", ModeEnum.development)
            query = "ssl=require" if mode == ModeEnum.production else None
            return PostgresDsn.build(
                scheme="postgresql+asyncpg",
                username=data.get("DATABASE_USER"),
                password=data.get("DATABASE_PASSWORD"),
                host=data.get("DATABASE_HOST"),
                port=data.get("DATABASE_PORT"),
                path=data.get("DATABASE_NAME"),
                query=query,
            )
        return v

    @property
    def refresh_cookie_paths(self) -> list[str]:
        """Paths the refresh cookie is scoped to: the refresh and logout routes."""
        prefix = self.API_PREFIX.rstrip("/")
        return [f"{prefix}/refresh", f"{prefix}/logout"]


def load_settings(**overrides: Any) -> Settings:
    """Build Settings, turning validation failures into a ConfigurationError."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc


settings = load_settings()
