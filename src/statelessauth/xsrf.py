"""Form helpers for XSRF protection built on stateless tokens.

``xsrf_input()`` renders a hidden ``<input>`` carrying a fresh token and
``xsrf_verify()`` checks the value posted back. Make the context as specific
as possible, e.g. ``"send:{username}"``, so a token issued for one form and
user can't be replayed against another.
"""

from __future__ import annotations

import html
from collections.abc import Mapping

from statelessauth.tokens import TokenCodec, default_codec

__all__ = ["DEFAULT_FIELD_NAME", "DEFAULT_XSRF_LIFETIME", "xsrf_input", "xsrf_verify"]

DEFAULT_FIELD_NAME = "xsrf_token"
DEFAULT_XSRF_LIFETIME = 3600


def xsrf_input(
    secret_key: str | bytes,
    context,
    lifetime: float = DEFAULT_XSRF_LIFETIME,
    name: str = DEFAULT_FIELD_NAME,
    xhtml: bool = True,
    codec: TokenCodec | None = None,
) -> str:
    """Return a hidden ``<input>`` element holding a new token for *context*.

    Set *xhtml* to False to end the tag with ``>`` instead of `` />``.
    """
    codec = codec or default_codec
    token = codec.create(secret_key, context, lifetime)
    end = " />" if xhtml else ">"
    return (
        f'<input type="hidden" name="{html.escape(name, quote=True)}"'
        f' value="{html.escape(token, quote=True)}"{end}'
    )


def xsrf_verify(
    secret_key: str | bytes,
    context,
    form: Mapping | None = None,
    token: str | None = None,
    name: str = DEFAULT_FIELD_NAME,
    codec: TokenCodec | None = None,
) -> bool:
    """Check a posted XSRF token.

    An explicit *token* wins; otherwise the value is read from *form* under
    *name*. A missing field counts as invalid.
    """
    codec = codec or default_codec
    if token is None:
        if form is None:
            return False
        token = form.get(name)
    if not isinstance(token, str):
        return False
    return codec.verify(secret_key, context, token)
