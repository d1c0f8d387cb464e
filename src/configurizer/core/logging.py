"""Logging configuration for configurizer.

Console output goes through rich; an optional log file receives the full
debug stream in a plain format.

Example:
    ```python
    from configurizer.core.logging import setup_logging

    setup_logging(debug=True, log_file="~/Library/Logs/configurizer.log")
    ```
"""

import logging
import sys
from pathlib import Path
from types import TracebackType
from typing import Optional, Type

from rich.console import Console
from rich.logging import RichHandler

# Diagnostics go to stderr so status output on stdout stays clean
console = Console(stderr=True)


def setup_logging(
    debug: bool = False,
    log_file: Optional[str] = None,
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
) -> None:
    """Set up logging configuration.

    Args:
        debug: Whether to enable debug logging on the console.
        log_file: Optional path to a log file. The file always records debug
            messages. ``~`` is expanded.
        log_format: Format string for log file records.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug or log_file else logging.INFO)
    root_logger.handlers.clear()

    console_handler = RichHandler(
        console=console,
        show_path=debug,
        enable_link_path=debug,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=debug,
    )
    console_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(log_format))
        root_logger.addHandler(file_handler)

    logger = logging.getLogger(__name__)
    logger.debug("Logging initialized (debug=%s)", debug)
    if log_file:
        logger.debug("Log file: %s", log_file)

    def handle_exception(
        exc_type: Type[BaseException],
        exc_value: BaseException,
        exc_traceback: Optional[TracebackType],
    ) -> None:
        """Log uncaught exceptions before the process exits."""
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return

        logger.critical(
            "Uncaught exception",
            exc_info=(exc_type, exc_value, exc_traceback),
        )

    sys.excepthook = handle_exception
