"""Logging configuration for l2wp.

Log records go to stderr through rich's handler so they never mix with
command output or ``--json`` payloads on stdout.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Configure the root logger for a CLI run.

    ``L2WP_DEBUG=1`` has the same effect as ``verbose``.
    """
    if quiet:
        level = logging.ERROR
    elif verbose or os.environ.get("L2WP_DEBUG", "").lower() in ("1", "true", "yes"):
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        markup=False,
        show_time=verbose,
        show_path=verbose,
    )
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=[handler], force=True)

    logger = logging.getLogger("l2wp")
    logger.setLevel(level)
    return logger
