"""HMAC-based stateless tokens bound to a context string.

Token format: ``{b64_hmac}:{expires_unix}:{context}``

The HMAC (SHA-256, standard base64 with the ``=`` padding stripped) covers
``{expires_unix}:{context}``. The context comes last so it may contain
colons; parsing splits on at most two of them. Nothing is stored server-side:
a token can only be invalidated by expiring.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
import math
import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

__all__ = [
    "TokenCodec",
    "TokenCheck",
    "TokenStatus",
    "default_codec",
    "create_token",
    "verify_token",
    "check_token",
    "get_expiry",
    "get_context",
]

logger = logging.getLogger(__name__)

DEFAULT_LIFETIME = 60

# Leading or trailing whitespace is deliberately not numeric, so get_expiry()
# only reads the field in the exact form create() writes it.
_NUMERIC_RE = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")


class TokenStatus(str, Enum):
    """Outcome of a token check. Everything except VALID is a rejection."""

    VALID = "valid"
    MALFORMED = "malformed"
    INVALID_EXPIRY = "invalid_expiry"
    EXPIRED = "expired"
    CONTEXT_MISMATCH = "context_mismatch"
    INVALID_ENCODING = "invalid_encoding"
    HASH_MISMATCH = "hash_mismatch"


@dataclass(frozen=True)
class TokenCheck:
    """Result of ``TokenCodec.check()``.

    ``expiry`` and ``context`` are whatever could be parsed before the check
    stopped; they are only trustworthy when ``valid`` is True.
    """

    status: TokenStatus
    expiry: int | None = None
    context: str | None = None

    @property
    def valid(self) -> bool:
        return self.status is TokenStatus.VALID


class TokenCodec:
    """Create and verify tokens against an injectable clock.

    Parameters
    ----------
    clock : callable
        Zero-argument callable returning the current Unix time in seconds.
        Truncated to a whole second on every call.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    def now(self) -> int:
        return int(self._clock())

    def create(self, secret_key: str | bytes, context, lifetime: float = DEFAULT_LIFETIME) -> str:
        """Issue a token for *context* valid for *lifetime* seconds.

        A negative lifetime yields a token that is already expired.
        """
        expires = self.now() + int(lifetime)
        sig = _encode(_sign(secret_key, f"{expires}:{context}"))
        return f"{sig}:{expires}:{context}"

    def verify(self, secret_key: str | bytes, expected_context, token) -> bool:
        """Return True if *token* is intact, unexpired and issued for *expected_context*."""
        return self.check(secret_key, expected_context, token).valid

    def check(self, secret_key: str | bytes, expected_context, token) -> TokenCheck:
        """Verify *token* and report the first reason it was rejected, if any."""
        parts = _split(token)
        if parts is None:
            return _reject(TokenStatus.MALFORMED)

        encoded_sig, expires_str, token_context = parts
        expires = _parse_number(expires_str)
        if expires is None:
            return _reject(TokenStatus.INVALID_EXPIRY, context=token_context)

        # A token is still good during its expiry second.
        if expires < self.now():
            return _reject(TokenStatus.EXPIRED, int(expires), token_context)

        expected_context = str(expected_context)
        if token_context != expected_context:
            return _reject(TokenStatus.CONTEXT_MISMATCH, int(expires), token_context)

        sig = _decode(encoded_sig)
        if sig is None:
            return _reject(TokenStatus.INVALID_ENCODING, int(expires), token_context)

        expected = _sign(secret_key, f"{expires_str}:{expected_context}")
        if not hmac.compare_digest(sig, expected):
            return _reject(TokenStatus.HASH_MISMATCH, int(expires), token_context)

        return TokenCheck(TokenStatus.VALID, int(expires), token_context)

    def get_expiry(self, token) -> int | None:
        """Unauthenticated read of the expiry time. None if it can't be parsed."""
        parts = _split(token)
        if parts is None:
            return None
        expires = _parse_number(parts[1])
        return None if expires is None else int(expires)

    def get_context(self, token) -> str | None:
        """Unauthenticated read of the context. None if the token is malformed."""
        parts = _split(token)
        if parts is None:
            return None
        return parts[2]


def _reject(
    status: TokenStatus, expiry: int | None = None, context: str | None = None
) -> TokenCheck:
    logger.debug("Token rejected: %s", status.value)
    return TokenCheck(status, expiry, context)


def _split(token) -> list[str] | None:
    if not isinstance(token, str):
        return None
    parts = token.split(":", 2)
    if len(parts) != 3:
        return None
    return parts


def _parse_number(value: str) -> int | float | None:
    if not _NUMERIC_RE.fullmatch(value):
        return None
    try:
        return int(value)
    except ValueError:
        pass
    number = float(value)
    # inf/nan can't be truncated to a timestamp
    if not math.isfinite(number):
        return None
    return number


def _sign(key: str | bytes, message: str) -> bytes:
    # surrogatepass: any Python str must be signable, lone surrogates included
    if isinstance(key, str):
        key = key.encode("utf-8", "surrogatepass")
    return hmac.new(key, message.encode("utf-8", "surrogatepass"), hashlib.sha256).digest()


def _encode(sig: bytes) -> str:
    return base64.b64encode(sig).decode("ascii").rstrip("=")


def _decode(encoded: str) -> bytes | None:
    if len(encoded) % 4 == 1:
        return None
    padded = encoded + "=" * (-len(encoded) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError):
        return None


# Wall-clock codec behind the module-level helpers
default_codec = TokenCodec()


def create_token(secret_key: str | bytes, context, lifetime: float = DEFAULT_LIFETIME) -> str:
    """Issue a token using the wall clock. See ``TokenCodec.create``."""
    return default_codec.create(secret_key, context, lifetime)


def verify_token(secret_key: str | bytes, expected_context, token) -> bool:
    """Verify a token using the wall clock. See ``TokenCodec.verify``."""
    return default_codec.verify(secret_key, expected_context, token)


def check_token(secret_key: str | bytes, expected_context, token) -> TokenCheck:
    return default_codec.check(secret_key, expected_context, token)


def get_expiry(token) -> int | None:
    return default_codec.get_expiry(token)


def get_context(token) -> str | None:
    return default_codec.get_context(token)
