"""Verification of the configuration set.

Verification is read-only. ``VerifyManager.verify`` walks the inventory and
returns a ``VerificationReport``; ``render_report`` prints it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from .config import Config
from .errors import ConfigSetMissingError
from .inventory import (
    ITERM2,
    NVIM,
    OMP,
    PLAIN_ITEMS,
    TMUX,
    ZSHRC,
    ConfigItem,
    TerminalFileKind,
    is_present,
    list_terminal_files,
    stored_path,
)
from .reporting import StatusReporter, human_size

logger = logging.getLogger(__name__)

NVIM_ENTRY_POINTS = ("init.lua", "init.vim")
TMUX_PATTERNS = ("*.conf", "*.tmux")
THEME_PATTERNS = ("*.json", "*.yaml", "*.yml", "*.toml")
MIN_PROFILE_LINES = 5
MOSTLY_COMPLETE_RATIO = 0.75


class Completeness(Enum):
    COMPLETE = "complete"
    MOSTLY_COMPLETE = "mostly complete"
    INCOMPLETE = "incomplete"


@dataclass
class ItemCheck:
    """Result of checking one inventory item.

    ``detail`` is a file count for directories or a human readable size for
    files; it is empty when the item is missing.
    """

    item: ConfigItem
    present: bool
    passed: bool
    detail: str = ""


@dataclass
class DetailCheck:
    """A structural check that does not affect the pass count."""

    name: str
    ok: bool
    message: str


@dataclass
class StoredFile:
    name: str
    size: str


@dataclass
class VerificationReport:
    config_dir: Path
    checks: List[ItemCheck] = field(default_factory=list)
    details: List[DetailCheck] = field(default_factory=list)
    color_schemes: List[StoredFile] = field(default_factory=list)
    profiles: List[StoredFile] = field(default_factory=list)
    listing: List[Path] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.checks)

    @property
    def passed(self) -> int:
        return sum(1 for check in self.checks if check.passed)

    @property
    def ratio(self) -> float:
        return self.passed / self.total if self.total else 1.0

    @property
    def completeness(self) -> Completeness:
        return classify(self.passed, self.total)


def classify(passed: int, total: int) -> Completeness:
    """Classify a pass count: all passed, at least three quarters, or fewer."""
    ratio = passed / total if total else 1.0
    if ratio == 1.0:
        return Completeness.COMPLETE
    if ratio >= MOSTLY_COMPLETE_RATIO:
        return Completeness.MOSTLY_COMPLETE
    return Completeness.INCOMPLETE


def count_files(directory: Path) -> int:
    return sum(1 for p in directory.rglob("*") if p.is_file())


def count_matching(directory: Path, patterns) -> int:
    return sum(
        1 for p in directory.rglob("*") if p.is_file() and any(p.match(pat) for pat in patterns)
    )


class VerifyManager:
    """Audits the configuration set against the inventory."""

    def __init__(self, config: Config):
        self.config = config

    @property
    def config_dir(self) -> Path:
        return self.config.config_dir

    def check_item(self, item: ConfigItem) -> ItemCheck:
        path = stored_path(item, self.config_dir)
        if not is_present(item, path):
            # Missing optional items are not penalized
            return ItemCheck(item, present=False, passed=not item.required)
        if item.is_directory:
            detail = f"directory with {count_files(path)} files"
        else:
            detail = f"file, {human_size(path.stat().st_size)}"
        return ItemCheck(item, present=True, passed=True, detail=detail)

    def check_terminal(self, report: VerificationReport) -> None:
        """Count the terminal item only when its stored directory exists."""
        path = stored_path(ITERM2, self.config_dir)
        if not path.is_dir():
            return
        files = list_terminal_files(path, recursive=True)
        schemes = files[TerminalFileKind.COLOR_SCHEME]
        profiles = files[TerminalFileKind.PROFILE]
        report.color_schemes = [StoredFile(p.name, human_size(p.stat().st_size)) for p in schemes]
        report.profiles = [StoredFile(p.name, human_size(p.stat().st_size)) for p in profiles]
        passed = bool(schemes or profiles)
        detail = f"{len(schemes)} color schemes, {len(profiles)} profiles"
        report.checks.append(ItemCheck(ITERM2, present=True, passed=passed, detail=detail))

    def detail_checks(self) -> List[DetailCheck]:
        """Structural checks on the core items that are present."""
        details = []

        nvim = stored_path(NVIM, self.config_dir)
        if nvim.is_dir():
            if any((nvim / name).is_file() for name in NVIM_ENTRY_POINTS):
                details.append(DetailCheck("nvim", True, "Neovim init file found"))
            else:
                details.append(
                    DetailCheck("nvim", False, "No init.lua or init.vim found in Neovim config")
                )

        tmux = stored_path(TMUX, self.config_dir)
        if tmux.is_dir():
            count = count_matching(tmux, TMUX_PATTERNS)
            if count:
                details.append(
                    DetailCheck("tmux", True, f"Tmux configuration files found ({count} files)")
                )
            else:
                details.append(
                    DetailCheck("tmux", False, "No .conf or .tmux files found in Tmux config")
                )

        omp = stored_path(OMP, self.config_dir)
        if omp.is_dir():
            count = count_matching(omp, THEME_PATTERNS)
            if count:
                details.append(
                    DetailCheck("omp", True, f"Oh My Posh theme files found ({count} files)")
                )
            else:
                details.append(
                    DetailCheck("omp", False, "No theme files found in Oh My Posh config")
                )

        zshrc = stored_path(ZSHRC, self.config_dir)
        if zshrc.is_file():
            with open(zshrc, "rb") as f:
                lines = sum(1 for _ in f)
            if lines > MIN_PROFILE_LINES:
                details.append(
                    DetailCheck("zshrc", True, f".zshrc appears to have content ({lines} lines)")
                )
            else:
                details.append(
                    DetailCheck("zshrc", False, f".zshrc seems quite short ({lines} lines)")
                )

        return details

    def verify(self) -> VerificationReport:
        """Check the configuration set.

        Raises:
            ConfigSetMissingError: If the configuration set directory is absent.
        """
        if not self.config_dir.is_dir():
            raise ConfigSetMissingError(
                "Config directory not found! Please run 'configurizer backup' first."
            )

        report = VerificationReport(self.config_dir)
        for item in PLAIN_ITEMS:
            check = self.check_item(item)
            logger.debug("Checked %s: present=%s passed=%s", item.name, check.present, check.passed)
            report.checks.append(check)
        self.check_terminal(report)
        report.details = self.detail_checks()
        report.listing = sorted(self.config_dir.rglob("*"))
        return report


ADVICE = {
    Completeness.COMPLETE: (
        "success",
        "All verifications passed! Your backup looks complete.",
        "You can now use 'configurizer setup' on a fresh macOS install.",
    ),
    Completeness.MOSTLY_COMPLETE: (
        "warning",
        "Most verifications passed. Some optional items are missing.",
        "Your backup should work, but you may want to check the missing items.",
    ),
    Completeness.INCOMPLETE: (
        "error",
        "Several verifications failed. Your backup may be incomplete.",
        "Consider running 'configurizer backup' again or manually checking your configurations.",
    ),
}


def _render_check(check: ItemCheck, reporter: StatusReporter) -> None:
    if check.present and check.passed:
        reporter.success(f"{check.item.label}: ✓ ({check.detail})")
    elif check.present:
        reporter.warning(f"{check.item.label}: ✗ (no .itermcolors or .json files found)")
    elif check.item.required:
        reporter.error(f"{check.item.label}: ✗ (missing - this is important!)")
    else:
        reporter.warning(f"{check.item.label}: ✗ (missing - optional)")


def render_report(report: VerificationReport, reporter: Optional[StatusReporter] = None) -> None:
    """Print a verification report."""
    reporter = reporter or StatusReporter()
    reporter.info("Verifying backup configurations...")
    reporter.info(f"Config directory: {report.config_dir}")
    reporter.line()

    reporter.info("Checking core configurations...")
    for check in report.checks:
        if check.item.required:
            _render_check(check, reporter)
    reporter.line()

    reporter.info("Checking optional configurations...")
    for check in report.checks:
        if not check.item.required:
            _render_check(check, reporter)
    reporter.line()

    reporter.info("Performing detailed verification...")
    for detail in report.details:
        if detail.ok:
            reporter.success(detail.message)
        else:
            reporter.warning(detail.message)
    for title, files in (
        ("Found iTerm2 color schemes:", report.color_schemes),
        ("Found iTerm2 profiles:", report.profiles),
    ):
        if files:
            reporter.success(title)
            for stored in files:
                reporter.line(f"    - {stored.name} ({stored.size})")
    reporter.line()

    reporter.info("Verification Summary:")
    reporter.line(f"  Checks passed: {report.passed}/{report.total}")
    level, headline, advice = ADVICE[report.completeness]
    getattr(reporter, level)(headline)
    reporter.line()
    reporter.info(advice)
    reporter.line()
    reporter.info("Backup verification complete!")

    reporter.line()
    reporter.info("Backed up files and directories:")
    reporter.listing(report.listing, report.config_dir, prefix="  ")
