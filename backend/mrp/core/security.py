"""
Password hashing and bearer-token utilities.
No DB model imports here; callers pass the user lookup in.
"""
import base64
import binascii
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any, TypeVar
from uuid import UUID

from jose import JWTError, jwt
from passlib.crypto.digest import pbkdf2_hmac
from passlib.utils import consteq

from mrp.core.config import settings

UserT = TypeVar("UserT")

# PBKDF2 parameters for newly created hashes
PBKDF2_DIGEST = "sha256"
PBKDF2_ITERATIONS = 65_536
SALT_BYTES = 16
KEY_BYTES = 32  # 256-bit derived key

BEARER_PREFIX = "Bearer "


class CryptoUnavailableError(RuntimeError):
    """Raised at startup when PBKDF2-HMAC-SHA256 cannot be computed."""


# ── Password helpers ──────────────────────────────────────────────────────────

def _derive(password: str, salt: bytes, iterations: int, key_len: int) -> bytes:
    return pbkdf2_hmac(PBKDF2_DIGEST, password.encode("utf-8"), salt, iterations, key_len)


def hash_password(plain: str) -> str:
    """
    Return a self-describing hash of *plain*.

    Format: ``iterations:base64(salt):base64(derived_key)``.
    """
    salt = secrets.token_bytes(SALT_BYTES)
    key = _derive(plain, salt, PBKDF2_ITERATIONS, KEY_BYTES)
    return ":".join(
        [
            str(PBKDF2_ITERATIONS),
            base64.b64encode(salt).decode("ascii"),
            base64.b64encode(key).decode("ascii"),
        ]
    )


def verify_password(plain: str, stored: str | None) -> bool:
    """
    Return True if *plain* matches the stored hash string.

    Malformed stored values count as a mismatch rather than an error.
    """
    if not stored:
        return False

    parts = stored.split(":")
    if len(parts) != 3:
        return False

    try:
        iterations = int(parts[0])
        salt = base64.b64decode(parts[1], validate=True)
        expected = base64.b64decode(parts[2], validate=True)
    except (ValueError, binascii.Error):
        return False

    if iterations <= 0 or not salt or not expected:
        return False

    actual = _derive(plain, salt, iterations, len(expected))
    return consteq(actual, expected)


def ensure_crypto_available() -> None:
    """Fail fast when the KDF primitive is missing from this interpreter."""
    try:
        _derive("probe", b"\x00" * SALT_BYTES, 1, KEY_BYTES)
    except (ValueError, LookupError, TypeError) as exc:
        raise CryptoUnavailableError("PBKDF2-HMAC-SHA256 is not available") from exc


# ── Bearer token helpers ──────────────────────────────────────────────────────

def issue_token(
    user_id: Any,
    username: str,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a signed bearer token for a freshly authenticated user.

    Claims carry the user id (``sub``), the username and a random ``jti``
    so that every login yields a distinct token. The caller must persist
    the returned value on the user row; only that value authenticates.
    """
    now = datetime.now(timezone.utc)
    expire = now + (
        expires_delta
        or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {
        "sub": str(user_id),
        "username": username,
        "jti": secrets.token_urlsafe(24),
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def parse_token(token: str) -> UUID | None:
    """
    Verify the signature and return the user id claim.
    Returns None on any error (expired, tampered, malformed).
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
        )
    except JWTError:
        return None

    sub = payload.get("sub")
    if not isinstance(sub, str):
        return None
    try:
        return UUID(sub)
    except ValueError:
        return None


def extract_bearer(authorization: str | None) -> str | None:
    """Return the trimmed token from a ``Bearer <token>`` header value."""
    if authorization is None:
        return None
    authorization = authorization.strip()
    if not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def authenticate(
    authorization: str | None,
    lookup_user: Callable[[UUID], UserT | None],
) -> UserT | None:
    """
    Resolve an Authorization header to its user, or None.

    The referenced user is loaded first; the presented token must then equal
    the token persisted on that row, so logging in again revokes older tokens.
    """
    token = extract_bearer(authorization)
    if token is None:
        return None

    user_id = parse_token(token)
    if user_id is None:
        return None

    user = lookup_user(user_id)
    if user is None:
        return None

    if getattr(user, "token", None) != token:
        return None
    return user
