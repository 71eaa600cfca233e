"""
Logging setup for launchgrid using rich.logging.

The library itself only creates loggers under the ``launchgrid`` namespace and
never configures handlers on import. Applications (and the example scripts)
call setup_logging() once to get rich formatted output.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "launchgrid"

_handler: Optional[RichHandler] = None


def setup_logging(
    level: int = logging.INFO,
    show_time: bool = True,
    show_path: bool = False,
    rich_tracebacks: bool = True,
    console: Optional[Console] = None,
    root: bool = False,
) -> None:
    """
    Attach a RichHandler to the launchgrid logger (or the root logger).

    Calling it again only updates the level, so repeated calls never stack
    handlers.

    Args:
        level: Logging level (logging.DEBUG, logging.INFO, etc.)
        show_time: Show timestamp in log messages
        show_path: Show file path in log messages
        rich_tracebacks: Render exceptions (e.g. failing responders) with rich
        console: Optional rich Console instance (stderr console if None)
        root: Configure the root logger instead of only ``launchgrid``

    Example:
        >>> import logging
        >>> from launchgrid.logging_config import setup_logging
        >>> setup_logging(level=logging.DEBUG)
    """
    global _handler

    target = logging.getLogger() if root else logging.getLogger(PACKAGE_LOGGER)
    target.setLevel(level)

    if _handler is not None:
        return

    _handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=show_time,
        show_path=show_path,
        rich_tracebacks=rich_tracebacks,
        markup=False,
        log_time_format="[%X]",
    )
    _handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    target.addHandler(_handler)
    if not root:
        target.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Logger for a launchgrid module, usually called with ``__name__``."""
    return logging.getLogger(name)


def set_module_level(module_name: str, level: int) -> None:
    """
    Override the level of one module, e.g. to trace MIDI traffic only.

        >>> set_module_level("launchgrid.midi_io", logging.DEBUG)
    """
    logging.getLogger(module_name).setLevel(level)
