"""
Logging setup

stdout carries the JSON result, so records go to a stderr console.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler

from .config import DEFAULT_LOG_LEVEL


stderr_console = Console(stderr=True)


def setup_logging(level: str = DEFAULT_LOG_LEVEL):
    """Route all netprobe loggers through a rich handler on stderr"""
    handler = RichHandler(
        console=stderr_console,
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logger = logging.getLogger("netprobe")
    logger.handlers[:] = [handler]
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger
