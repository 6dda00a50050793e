"""stateless-auth command-line tool.

Create, verify and inspect tokens from a shell, e.g. to mint a one-off login
link or debug why a token is being rejected.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime, timezone

from statelessauth.config import LOG_LEVELS, MissingSecretError, Settings
from statelessauth.logging_setup import setup_logging
from statelessauth.tokens import check_token, create_token, get_context, get_expiry

logger = logging.getLogger(__name__)


def _secret(args: argparse.Namespace, settings: Settings) -> str:
    return args.secret if args.secret else settings.require_secret()


def cmd_create(args: argparse.Namespace, settings: Settings) -> int:
    lifetime = args.lifetime if args.lifetime is not None else settings.token_lifetime
    token = create_token(_secret(args, settings), args.context, lifetime)
    logger.debug("Created token for context %r, lifetime %ss", args.context, lifetime)
    print(token)
    return 0


def cmd_verify(args: argparse.Namespace, settings: Settings) -> int:
    result = check_token(_secret(args, settings), args.context, args.token)
    print(result.status.value)
    return 0 if result.valid else 1


def cmd_inspect(args: argparse.Namespace, settings: Settings) -> int:
    context = get_context(args.token)
    if context is None:
        print("malformed token", file=sys.stderr)
        return 1

    expiry = get_expiry(args.token)
    if expiry is None:
        print("expiry:  (invalid)")
    else:
        when = datetime.fromtimestamp(expiry, tz=timezone.utc).isoformat()
        print(f"expiry:  {expiry} ({when})")
    print(f"context: {context}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stateless-auth",
        description="Create and verify stateless HMAC tokens",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  stateless-auth create login:alice                 Token valid for the default lifetime
  stateless-auth create login:alice --lifetime 300  Token valid for five minutes
  stateless-auth verify login:alice TOKEN           Exit 0 if valid, 1 otherwise
  stateless-auth inspect TOKEN                      Show (unauthenticated) expiry and context

The secret is read from STATELESS_AUTH_SECRET_KEY unless --secret is given.
""",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=LOG_LEVELS,
        help="Logging level (default from settings)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_create = sub.add_parser("create", help="Issue a new token")
    p_create.add_argument("context", help="Context the token is valid for")
    p_create.add_argument("--lifetime", type=int, default=None, help="Lifetime in seconds")
    p_create.add_argument("--secret", default=None, help="Secret key (overrides env)")
    p_create.set_defaults(func=cmd_create)

    p_verify = sub.add_parser("verify", help="Verify a token")
    p_verify.add_argument("context", help="Expected context")
    p_verify.add_argument("token", help="Token to check")
    p_verify.add_argument("--secret", default=None, help="Secret key (overrides env)")
    p_verify.set_defaults(func=cmd_verify)

    p_inspect = sub.add_parser("inspect", help="Show a token's expiry and context")
    p_inspect.add_argument("token", help="Token to read")
    p_inspect.set_defaults(func=cmd_inspect)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    settings = Settings.load()
    setup_logging(args.log_level or settings.log_level)

    try:
        return args.func(args, settings)
    except MissingSecretError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
