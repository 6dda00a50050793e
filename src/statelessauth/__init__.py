"""Stateless, expiring, context-bound HMAC tokens."""

from statelessauth.tokens import (
    TokenCheck,
    TokenCodec,
    TokenStatus,
    check_token,
    create_token,
    get_context,
    get_expiry,
    verify_token,
)
from statelessauth.xsrf import xsrf_input, xsrf_verify

__all__ = [
    "TokenCheck",
    "TokenCodec",
    "TokenStatus",
    "check_token",
    "create_token",
    "get_context",
    "get_expiry",
    "verify_token",
    "xsrf_input",
    "xsrf_verify",
]
