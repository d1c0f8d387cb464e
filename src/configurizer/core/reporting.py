"""Operator-facing status output."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from rich.console import Console
from rich.text import Text

logger = logging.getLogger(__name__)

LEVEL_STYLES = {
    "INFO": "bold blue",
    "SUCCESS": "bold green",
    "WARNING": "bold yellow",
    "ERROR": "bold red",
}


class StatusReporter:
    """Prints one tagged status line per event.

    Lines look like ``[SUCCESS] Neovim configuration backed up``. Messages are
    rendered as plain text, so paths containing brackets print verbatim.
    Every line is also mirrored to the log at debug level.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def _emit(self, level: str, message: str) -> None:
        line = Text.assemble((f"[{level}]", LEVEL_STYLES[level]), " ", message)
        self.console.print(line, soft_wrap=True)
        logger.debug("%s %s", level, message)

    def info(self, message: str) -> None:
        self._emit("INFO", message)

    def success(self, message: str) -> None:
        self._emit("SUCCESS", message)

    def warning(self, message: str) -> None:
        self._emit("WARNING", message)

    def error(self, message: str) -> None:
        self._emit("ERROR", message)

    def line(self, message: str = "") -> None:
        """Print an untagged line, e.g. a list entry or a blank separator."""
        self.console.print(Text(message), soft_wrap=True)

    def listing(self, paths: Iterable[Path], base: Path, prefix: str = "  - ") -> None:
        """Print paths relative to ``base``, one per line."""
        for path in paths:
            self.line(f"{prefix}{path.relative_to(base)}")


def human_size(num_bytes: int) -> str:
    """Format a byte count the way ``du -h`` does, e.g. ``512B``, ``4.0K``, ``12M``."""
    size = float(num_bytes)
    for unit in ("B", "K", "M", "G", "T"):
        if size < 1024 or unit == "T":
            if unit == "B":
                return f"{int(size)}B"
            if size < 10:
                return f"{size:.1f}{unit}"
            return f"{size:.0f}{unit}"
        size /= 1024
    return f"{size:.0f}T"
