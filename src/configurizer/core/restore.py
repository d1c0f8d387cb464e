"""Restore functionality for configurizer.

Copies the configuration set onto the live system. Stored directories replace
their live counterparts entirely, so after a restore each live directory has
exactly the stored content.
"""

from __future__ import annotations

import filecmp
import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .config import Config
from .inventory import (
    ITERM2,
    LIVE_CONFIG_DIRS,
    PLAIN_ITEMS,
    SSH_CONFIG,
    ConfigItem,
    TerminalFileKind,
    is_present,
    list_terminal_files,
    live_path,
    stored_path,
    terminal_live_dirs,
)
from .reporting import StatusReporter

logger = logging.getLogger(__name__)


@dataclass
class RestoreResult:
    """Outcome of applying the configuration set.

    Attributes:
        applied: Names of the items copied to the live system.
        missing: Names of the items absent from the configuration set.
        terminal_files: Live paths written for each terminal file sub-kind.
    """

    applied: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    terminal_files: Dict[TerminalFileKind, List[Path]] = field(
        default_factory=lambda: {kind: [] for kind in TerminalFileKind}
    )


def trees_match(left: Path, right: Path) -> bool:
    """Compare two directory trees recursively by content."""
    comparison = filecmp.dircmp(left, right)

    def _match(cmp: filecmp.dircmp) -> bool:
        if cmp.left_only or cmp.right_only or cmp.funny_files:
            return False
        _, mismatch, errors = filecmp.cmpfiles(
            cmp.left, cmp.right, cmp.common_files, shallow=False
        )
        if mismatch or errors:
            return False
        return all(_match(sub) for sub in cmp.subdirs.values())

    return _match(comparison)


class RestoreManager:
    """Manage applying the configuration set to the live system."""

    def __init__(
        self,
        config: Config,
        home: Path,
        reporter: Optional[StatusReporter] = None,
    ) -> None:
        """Initialize restore manager.

        Args:
            config: Configuration; provides the configuration set location.
            home: Home directory to restore into.
            reporter: Status output.
        """
        self.config = config
        self.home = Path(home)
        self.reporter = reporter or StatusReporter()

    @property
    def config_dir(self) -> Path:
        return self.config.config_dir

    def create_live_dirs(self) -> None:
        """Create the live configuration directories."""
        self.reporter.info("Creating configuration directories...")
        for rel in LIVE_CONFIG_DIRS:
            (self.home / rel).mkdir(parents=True, exist_ok=True)

    def _restore_file(self, src_file: Path, target_path: Path) -> None:
        """Overwrite a live file with its stored copy."""
        if target_path.parent == self.home / ".ssh":
            target_path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        else:
            target_path.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src_file, target_path)
        logger.debug("Restored file: %s", target_path)

    def _restore_directory(self, src_dir: Path, dst_dir: Path) -> None:
        """Replace a live directory with its stored copy."""
        if dst_dir.is_symlink() or dst_dir.is_file():
            dst_dir.unlink()
        elif dst_dir.exists():
            shutil.rmtree(dst_dir)
        dst_dir.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(src_dir, dst_dir)
        logger.debug("Restored directory: %s", dst_dir)

    def restore_item(self, item: ConfigItem) -> bool:
        """Copy one stored item to its live location.

        Returns:
            bool: False if the item is absent from the configuration set.
        """
        src = stored_path(item, self.config_dir)
        dst = live_path(item, self.home)

        if not is_present(item, src):
            if item.required:
                self.reporter.warning(
                    f"{item.label} not found in {src} - you'll need to set it up manually"
                )
            else:
                self.reporter.info(f"{item.label} not in the configuration set, skipping")
            return False

        self.reporter.info(f"Copying {item.label}...")
        if item.is_directory:
            self._restore_directory(src, dst)
        else:
            self._restore_file(src, dst)
        if item is SSH_CONFIG:
            dst.chmod(0o600)
        self.reporter.success(f"{item.label} copied")
        return True

    def restore_terminal(self) -> Dict[TerminalFileKind, List[Path]]:
        """Install stored color schemes and profiles into their live directories."""
        written: Dict[TerminalFileKind, List[Path]] = {kind: [] for kind in TerminalFileKind}
        src_dir = stored_path(ITERM2, self.config_dir)
        if not src_dir.is_dir():
            self.reporter.info(f"{ITERM2.label} not in the configuration set, skipping")
            return written

        stored = list_terminal_files(src_dir, recursive=True)
        live_dirs = terminal_live_dirs(self.home)

        for kind, label in (
            (TerminalFileKind.COLOR_SCHEME, "color scheme"),
            (TerminalFileKind.PROFILE, "profile"),
        ):
            if not stored[kind]:
                continue
            self.reporter.info(f"Setting up iTerm2 {label}s...")
            live_dirs[kind].mkdir(parents=True, exist_ok=True)
            for path in stored[kind]:
                target = live_dirs[kind] / path.name
                shutil.copy2(path, target)
                written[kind].append(target)
                self.reporter.success(f"Copied {label}: {path.name}")

        if written[TerminalFileKind.COLOR_SCHEME]:
            self.reporter.warning(
                "To apply color schemes: iTerm2 → Preferences → Profiles → Colors → Color Presets"
            )
        if written[TerminalFileKind.PROFILE]:
            self.reporter.warning("iTerm2 profiles will be available after restarting iTerm2")
        if any(written.values()):
            self.reporter.warning("Please restart iTerm2 to see all new configurations")
        return written

    def restore(self) -> RestoreResult:
        """Apply every stored item to the live system.

        A missing stored item is reported and skipped. Filesystem errors
        propagate.
        """
        result = RestoreResult()
        self.create_live_dirs()
        self.reporter.info("Setting up configurations...")

        for item in PLAIN_ITEMS:
            if self.restore_item(item):
                result.applied.append(item.name)
            else:
                result.missing.append(item.name)

        result.terminal_files = self.restore_terminal()
        if any(result.terminal_files.values()):
            result.applied.append(ITERM2.name)
        else:
            result.missing.append(ITERM2.name)
        return result

    def validate_restore(self, items: Optional[List[ConfigItem]] = None) -> Dict[str, bool]:
        """Check that live items match their stored copies.

        Items absent from the configuration set are left out of the result.
        """
        results: Dict[str, bool] = {}
        for item in items if items is not None else list(PLAIN_ITEMS):
            src = stored_path(item, self.config_dir)
            dst = live_path(item, self.home)
            if not is_present(item, src):
                continue
            if not dst.exists():
                results[item.name] = False
            elif item.is_directory:
                results[item.name] = dst.is_dir() and trees_match(src, dst)
            else:
                results[item.name] = dst.is_file() and filecmp.cmp(src, dst, shallow=False)
            logger.debug("Validated %s: %s", item.name, results[item.name])
        return results
