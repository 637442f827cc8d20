import hashlib
import re
import secrets

from passlib.context import CryptContext

from app.core.config import settings

# ── Password hashing (bcrypt) ────────────────────────────────
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify a plain password against a bcrypt hash."""
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # Stored value is not a recognisable hash
        return False


# ── Refresh token hashing ────────────────────────────────────

REFRESH_SECRET_BYTES = 32
_TOKEN_HASH_RE = re.compile(r"^[0-9a-fA-F]{64}$")


def generate_refresh_secret() -> str:
    """Return 32 random bytes, base64url encoded (43 chars).

    Never 64 hex chars, so a raw secret cannot be mistaken for a hash.
    """
    return secrets.token_urlsafe(REFRESH_SECRET_BYTES)


def hash_token(raw_token: str) -> str:
    """SHA-256 hash a raw token for safe storage in the database."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def looks_like_token_hash(value: str) -> bool:
    """True for a 64-character hex string, i.e. an already hashed token."""
    return bool(_TOKEN_HASH_RE.match(value))
