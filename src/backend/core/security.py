"""Security utilities for authentication.

Session tokens are opaque: a token is the URL-safe base64 encoding of a random
nonce, and the nonce itself is only ever stored under its SHA-256 digest key.
Passwords are hashed with bcrypt.
"""

import asyncio
import base64
import binascii
import hashlib
import secrets
from typing import Awaitable, Callable, Optional, TypeVar

import bcrypt

from core.config import settings
from core.errors import ServerError

T = TypeVar("T")

# ============================================================================
# Token codec
# ============================================================================


def encode_nonce(nonce: bytes) -> str:
    """Encode a session nonce as a transport-safe token."""
    return base64.urlsafe_b64encode(nonce).decode("ascii")


def decode_token(token: Optional[str]) -> Optional[bytes]:
    """
    Decode a token back into its nonce.

    Returns None for anything that isn't valid URL-safe base64, so callers can
    treat a malformed token exactly like an unknown one.
    """
    if not token:
        return None
    try:
        return base64.b64decode(token.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, UnicodeEncodeError, ValueError):
        return None


def nonce_key(nonce: bytes) -> str:
    """Storage key for a nonce (SHA-256 hex digest, fits a document id)."""
    return hashlib.sha256(nonce).hexdigest()


# ============================================================================
# Randomness
# ============================================================================


async def random_bytes(length: int) -> bytes:
    """Generate cryptographically secure random bytes."""
    try:
        return await asyncio.to_thread(secrets.token_bytes, length)
    except OSError as e:
        raise ServerError(cause=e) from e


def activation_id_from_bytes(raw: bytes) -> str:
    """Alphanumeric activation ID (base64 with '/', '+' and '=' stripped)."""
    return base64.b64encode(raw).decode("ascii").translate(str.maketrans("", "", "/+="))


async def generate_unique(
    generate: Callable[[], Awaitable[T]],
    is_taken: Callable[[T], Awaitable[bool]],
    max_attempts: Optional[int] = None,
) -> T:
    """
    Draw random values until one isn't taken.

    Collisions should be astronomically rare, so running out of attempts
    means the random source or the store is broken and is a server error.
    The store's unique ids still reject a value claimed concurrently.
    """
    attempts = max_attempts or settings.NONCE_MAX_ATTEMPTS
    for _ in range(attempts):
        candidate = await generate()
        if not await is_taken(candidate):
            return candidate
    raise ServerError(cause=RuntimeError(f"no unused random value after {attempts} attempts"))


# ============================================================================
# Passwords
# ============================================================================


async def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash a password with a fresh salt. CPU-bound, so it runs in a worker thread."""
    cost = rounds or settings.BCRYPT_ROUNDS
    try:
        hashed = await asyncio.to_thread(
            bcrypt.hashpw, password.encode("utf-8"), bcrypt.gensalt(rounds=cost)
        )
    except ValueError as e:
        raise ServerError(cause=e) from e
    if not hashed:
        raise ServerError(cause=RuntimeError("bcrypt returned an empty hash"))
    return hashed.decode("utf-8")


async def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time comparison of a password against its stored hash."""
    try:
        return await asyncio.to_thread(
            bcrypt.checkpw, password.encode("utf-8"), password_hash.encode("utf-8")
        )
    except ValueError as e:
        raise ServerError(cause=e) from e
