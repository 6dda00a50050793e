"""Rich console logging for the command-line tool.

The library itself only calls ``logging.getLogger(__name__)``; handlers are
installed here, by the application, never on import.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_HANDLER_NAME = "statelessauth-rich"


def setup_logging(level: str | int = "INFO") -> None:
    """Attach a single RichHandler to the root logger and set its level."""
    root = logging.getLogger()
    root.setLevel(level.upper() if isinstance(level, str) else level)

    if any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        return

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    root.addHandler(handler)
