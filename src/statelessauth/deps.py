# FastAPI dependencies guarding form posts with XSRF tokens.

from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import HTTPException, Request

from statelessauth.config import get_settings
from statelessauth.tokens import TokenCodec, default_codec
from statelessauth.xsrf import xsrf_input

logger = logging.getLogger(__name__)

ContextSource = str | Callable[[Request], str]


def require_xsrf(
    context: ContextSource,
    *,
    secret_key: str | bytes | None = None,
    field_name: str | None = None,
    codec: TokenCodec | None = None,
):
    """FastAPI dependency that rejects form posts without a valid XSRF token.

    Usage::

        @router.post(
            "/send",
            dependencies=[Depends(require_xsrf(lambda req: f"send:{req.state.user}"))],
        )
        async def send(...): ...

    *context* is either a fixed string or a callable receiving the request.
    When *secret_key* or *field_name* is omitted the configured value is used.
    """
    codec = codec or default_codec

    async def _check(request: Request) -> None:
        settings = get_settings()
        key = secret_key if secret_key is not None else settings.require_secret()
        name = field_name or settings.xsrf_field_name
        expected = context(request) if callable(context) else context

        form = await request.form()
        token = form.get(name)
        if not isinstance(token, str):
            logger.warning("XSRF token missing from %s %s", request.method, request.url.path)
            raise HTTPException(status_code=403, detail="Invalid XSRF token")

        result = codec.check(key, expected, token)
        if not result.valid:
            logger.warning(
                "XSRF token rejected (%s) on %s %s",
                result.status.value,
                request.method,
                request.url.path,
            )
            raise HTTPException(status_code=403, detail="Invalid XSRF token")

    return _check


def configured_xsrf_input(context, codec: TokenCodec | None = None) -> str:
    """Render the hidden XSRF ``<input>`` using the configured secret, lifetime and field name."""
    settings = get_settings()
    return xsrf_input(
        settings.require_secret(),
        context,
        lifetime=settings.xsrf_lifetime,
        name=settings.xsrf_field_name,
        xhtml=settings.xsrf_xhtml,
        codec=codec,
    )
