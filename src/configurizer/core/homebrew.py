"""Homebrew package manager operations."""

from __future__ import annotations

import logging
import platform
import urllib.request
from pathlib import Path
from typing import Callable, Optional, Sequence

from .commands import CommandResult, CommandRunner

logger = logging.getLogger(__name__)

APPLE_SILICON_PREFIX = Path("/opt/homebrew")
INTEL_PREFIX = Path("/usr/local")


def default_prefix(machine: Optional[str] = None) -> Path:
    """Homebrew's install prefix for the given CPU architecture."""
    machine = machine or platform.machine()
    return APPLE_SILICON_PREFIX if machine == "arm64" else INTEL_PREFIX


def shellenv_line(prefix: Path) -> str:
    """The profile line that puts Homebrew on the PATH of new shells."""
    return f'eval "$({prefix}/bin/brew shellenv)"'


def download_text(url: str) -> str:
    with urllib.request.urlopen(url) as response:
        return response.read().decode("utf-8")


class Homebrew:
    """Thin wrapper around the ``brew`` binary.

    The installer is fetched and run through bash, exactly like Homebrew's
    documented one-liner. After a fresh install the absolute path of the new
    binary is used, since the current process's PATH does not contain it yet.
    """

    def __init__(
        self,
        runner: CommandRunner,
        install_url: str,
        machine: Optional[str] = None,
        fetch_script: Callable[[str], str] = download_text,
    ) -> None:
        self.runner = runner
        self.install_url = install_url
        self.machine = machine or platform.machine()
        self.fetch_script = fetch_script
        self.executable = "brew"

    def is_installed(self) -> bool:
        return self.runner.exists("brew")

    def install(self, home: Path) -> None:
        """Install Homebrew and register its shellenv in ``~/.zprofile``."""
        script = self.fetch_script(self.install_url)
        self.runner.run(["/bin/bash", "-c", script], interactive=True)

        prefix = default_prefix(self.machine)
        zprofile = Path(home) / ".zprofile"
        with open(zprofile, "a") as f:
            f.write(shellenv_line(prefix) + "\n")
        logger.debug("Registered brew shellenv in %s", zprofile)
        self.executable = str(prefix / "bin" / "brew")

    def update(self) -> None:
        self.runner.run([self.executable, "update"], interactive=True)

    def tap(self, name: str) -> None:
        self.runner.run([self.executable, "tap", name], interactive=True)

    def install_formulae(self, formulae: Sequence[str]) -> None:
        if not formulae:
            return
        self.runner.run([self.executable, "install", *formulae], interactive=True)

    def install_cask(self, cask: str) -> None:
        self.runner.run([self.executable, "install", "--cask", cask], interactive=True)

    def prefix(self) -> Path:
        result: CommandResult = self.runner.run([self.executable, "--prefix"])
        return Path(result.stdout.strip())

    def run_tool_installer(self, tool: str) -> None:
        """Run ``$(brew --prefix)/opt/<tool>/install --all`` (key bindings, completion)."""
        installer = self.prefix() / "opt" / tool / "install"
        self.runner.run([str(installer), "--all"], interactive=True)
