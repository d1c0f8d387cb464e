"""Backup of live configuration into the configuration set.

This module captures the current machine's configuration files into the
``config/`` configuration set. Each stored item is replaced wholesale; a
directory that disappears from the live system is not removed from the set,
but files deleted from a live directory disappear from its stored copy.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .config import Config
from .inventory import (
    EXCLUDED_FILES,
    ITERM2,
    PLAIN_ITEMS,
    SSH_CONFIG,
    ConfigItem,
    TerminalFileKind,
    list_terminal_files,
    live_path,
    stored_path,
    terminal_file_kind,
    terminal_search_dirs,
)
from .reporting import StatusReporter

logger = logging.getLogger(__name__)


@dataclass
class BackupResult:
    """Outcome of a backup run.

    Attributes:
        backed_up: Names of the items that were captured.
        skipped: Names of the items whose live source was missing.
        terminal_files: Stored terminal file name mapped to the live file it came from.
        stored_files: Every file in the configuration set after the run.
    """

    backed_up: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    terminal_files: Dict[str, Path] = field(default_factory=dict)
    stored_files: List[Path] = field(default_factory=list)


def replace_directory(src: Path, dst: Path) -> None:
    """Replace ``dst`` with a copy of ``src``, leaving out excluded files."""
    if dst.exists():
        shutil.rmtree(dst)
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copytree(src, dst, ignore=shutil.ignore_patterns(*EXCLUDED_FILES))


def replace_file(src: Path, dst: Path) -> None:
    """Overwrite ``dst`` with ``src``, preserving metadata."""
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)


class BackupManager:
    """Captures the live configuration into the configuration set.

    Attributes:
        config (Config): Configuration object; provides the configuration set location
        home (Path): Home directory the live configuration is read from
        reporter (StatusReporter): Status output
    """

    def __init__(
        self,
        config: Config,
        home: Path,
        reporter: Optional[StatusReporter] = None,
    ):
        self.config = config
        self.home = Path(home)
        self.reporter = reporter or StatusReporter()

    @property
    def config_dir(self) -> Path:
        return self.config.config_dir

    def backup_item(self, item: ConfigItem) -> bool:
        """Capture one file or directory item.

        Returns:
            bool: False if the live source does not exist.

        Raises:
            OSError: On any filesystem failure while copying.
        """
        src = live_path(item, self.home)
        dst = stored_path(item, self.config_dir)

        if item.is_directory:
            if not src.is_dir():
                self.reporter.warning(f"{item.label} directory not found at {src}")
                return False
            self.reporter.info(f"Backing up {item.label}...")
            replace_directory(src, dst)
        else:
            if not src.is_file():
                self.reporter.warning(f"{item.label} not found at {src}")
                return False
            self.reporter.info(f"Backing up {item.label}...")
            replace_file(src, dst)

        logger.debug("Stored %s -> %s", src, dst)
        self.reporter.success(f"{item.label} backed up")
        if item is SSH_CONFIG:
            self.reporter.warning("Note: SSH keys are NOT backed up for security reasons")
        return True

    def collect_terminal_files(self) -> Dict[str, Path]:
        """Find terminal color schemes and profiles in the search directories.

        Directories are visited in precedence order; a later match replaces an
        earlier one with the same file name.
        """
        found: Dict[str, Path] = {}
        for directory in terminal_search_dirs(self.home):
            matches = list_terminal_files(directory)
            for kind in TerminalFileKind:
                for path in matches[kind]:
                    kind_label = (
                        "color scheme" if kind is TerminalFileKind.COLOR_SCHEME else "profile"
                    )
                    self.reporter.info(f"Found {kind_label}: {path.name} in {directory}")
                    if path.name in found:
                        logger.debug("%s replaces %s", path, found[path.name])
                    found[path.name] = path
        return found

    def backup_terminal(self) -> Dict[str, Path]:
        """Capture terminal color schemes and profiles into the stored directory."""
        self.reporter.info("Looking for iTerm2 color schemes and profiles...")
        found = self.collect_terminal_files()
        dst_dir = stored_path(ITERM2, self.config_dir)

        if not found:
            self.reporter.warning(
                "No iTerm2 color schemes (.itermcolors) or profiles (.json) found in common locations"
            )
            self.reporter.warning(f"If you have these files, manually copy them to {dst_dir}/")
            return found

        if dst_dir.exists():
            shutil.rmtree(dst_dir)
        dst_dir.mkdir(parents=True)
        for name, src in sorted(found.items()):
            shutil.copy2(src, dst_dir / name)
            self.reporter.success(f"Backed up {name}")

        kinds = {terminal_file_kind(Path(name)) for name in found}
        if TerminalFileKind.COLOR_SCHEME not in kinds:
            self.reporter.warning("No iTerm2 color schemes (.itermcolors) found in common locations")
        if TerminalFileKind.PROFILE not in kinds:
            self.reporter.warning("No iTerm2 profiles (.json) found in common locations")
        return found

    def backup(self) -> BackupResult:
        """Capture every inventory item into the configuration set.

        Missing live sources are reported and skipped. Filesystem errors
        propagate and abort the run.

        Returns:
            BackupResult: What was captured and what was skipped.
        """
        result = BackupResult()
        self.reporter.info("Starting configuration backup...")
        self.reporter.info(f"Config directory: {self.config_dir}")
        self.config_dir.mkdir(parents=True, exist_ok=True)

        for item in PLAIN_ITEMS:
            if self.backup_item(item):
                result.backed_up.append(item.name)
            else:
                result.skipped.append(item.name)

        result.terminal_files = self.backup_terminal()
        if result.terminal_files:
            result.backed_up.append(ITERM2.name)
        else:
            result.skipped.append(ITERM2.name)

        result.stored_files = sorted(p for p in self.config_dir.rglob("*") if p.is_file())

        self.reporter.success("Configuration backup completed!")
        self.reporter.line()
        self.reporter.info(f"Backed up configurations are located in: {self.config_dir}")
        self.reporter.info(
            "You can now run 'configurizer setup' on a fresh macOS install to restore these configurations"
        )
        self.reporter.line()
        self.reporter.info("Files backed up:")
        self.reporter.listing(result.stored_files, self.config_dir)
        return result
