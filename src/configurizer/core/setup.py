"""Setup of a fresh macOS machine.

``SetupManager.setup`` runs the whole installation in order:

1. fetch the configuration set when it is not present locally
2. check that the host is macOS
3. check for the Xcode Command Line Tools
4. install or update Homebrew
5. install the command line tools
6. install the font and the terminal emulator
7. apply the configuration set (and clone the tmux plugin manager)
8. install terminal color schemes and profiles
9. run the fzf key binding and completion installer
10. reload the shell profile

Steps 1 to 3 raise a ``FatalPreconditionError`` subclass when their check
fails. Later steps only warn about missing stored items.
"""

from __future__ import annotations

import logging
import platform
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional

from .archive import ArchiveFetcher, relocate_config_set
from .commands import CommandRunner
from .config import Config
from .errors import (
    ConfigSetMissingError,
    PrerequisiteInstallPendingError,
    UnsupportedPlatformError,
)
from .homebrew import Homebrew
from .inventory import TMUX, ZSHRC, live_path
from .repository import GitRepository
from .reporting import StatusReporter
from .restore import RestoreManager, RestoreResult

logger = logging.getLogger(__name__)

TPM_PATH = ".tmux/plugins/tpm"


def ensure_macos(system: Optional[str] = None) -> None:
    """Raise ``UnsupportedPlatformError`` unless running on macOS."""
    system = system if system is not None else platform.system()
    if system != "Darwin":
        raise UnsupportedPlatformError("This tool is designed for macOS only!")


class SetupManager:
    """Installs developer tooling and applies the configuration set."""

    def __init__(
        self,
        config: Config,
        home: Path,
        runner: Optional[CommandRunner] = None,
        reporter: Optional[StatusReporter] = None,
        system: Optional[str] = None,
        homebrew: Optional[Homebrew] = None,
        fetcher_factory: Callable[[str], ArchiveFetcher] = ArchiveFetcher,
    ) -> None:
        self.config = config
        self.home = Path(home)
        self.runner = runner or CommandRunner()
        self.reporter = reporter or StatusReporter()
        self.system = system
        self.homebrew = homebrew or Homebrew(
            self.runner, self.config.get("homebrew_install_url")
        )
        self.fetcher_factory = fetcher_factory

    def ensure_config_set(self) -> None:
        """Fetch the configuration set from the repository archive if absent.

        Raises:
            ConfigSetMissingError: If the archive carries no configuration set.
        """
        config_dir = self.config.config_dir
        if config_dir.is_dir():
            self.reporter.success("Using local configuration files")
            return

        self.reporter.info("Config directory not found locally. Downloading from GitHub...")
        workdir = Path(tempfile.mkdtemp(prefix="configurizer-"))
        try:
            fetcher = self.fetcher_factory(self.config.get("archive_url"))
            checkout = fetcher.fetch(workdir)
            if not relocate_config_set(checkout, self.config.get("config_dir_name"), config_dir):
                self.reporter.error("Failed to download configuration files")
                raise ConfigSetMissingError(
                    f"No '{self.config.get('config_dir_name')}' directory in {self.config.get('archive_url')}"
                )
            self.reporter.success("Configuration files downloaded successfully")
        finally:
            shutil.rmtree(workdir, ignore_errors=True)

    def ensure_command_line_tools(self) -> None:
        """Check for the Xcode Command Line Tools, starting their installer if missing.

        Raises:
            PrerequisiteInstallPendingError: If the installer had to be started.
        """
        self.reporter.info("Checking for Xcode Command Line Tools...")
        if self.runner.run(["xcode-select", "-p"], check=False).ok:
            self.reporter.success("Xcode Command Line Tools already installed")
            return

        self.reporter.info("Installing Xcode Command Line Tools...")
        self.runner.run(["xcode-select", "--install"], check=False)
        raise PrerequisiteInstallPendingError(
            "Please complete the Xcode Command Line Tools installation and run this command again."
        )

    def ensure_homebrew(self) -> None:
        self.reporter.info("Checking for Homebrew...")
        if not self.homebrew.is_installed():
            self.reporter.info("Installing Homebrew...")
            self.homebrew.install(self.home)
            self.reporter.success("Homebrew installed successfully")
        else:
            self.reporter.success("Homebrew already installed")
            self.reporter.info("Updating Homebrew...")
            self.homebrew.update()

    def install_packages(self) -> None:
        """Install the command line tools, the font and the terminal emulator."""
        for command, formula in self.config.conditional_formulae.items():
            self.reporter.info(f"Installing {command}...")
            if self.runner.exists(command):
                self.reporter.success(f"{command} already installed")
            else:
                self.homebrew.install_formulae([formula])
                self.reporter.success(f"{command} installed successfully")

        formulae = self.config.formulae
        self.reporter.info(f"Installing CLI tools ({', '.join(formulae)})...")
        self.homebrew.install_formulae(formulae)

        for tap in self.config.taps:
            self.homebrew.tap(tap)
        for cask in self.config.casks:
            self.reporter.info(f"Installing {cask}...")
            self.homebrew.install_cask(cask)
            self.reporter.success(f"{cask} installed successfully")

    def apply_configuration(self) -> RestoreResult:
        """Copy the configuration set to the live system."""
        result = RestoreManager(self.config, self.home, self.reporter).restore()

        if TMUX.name in result.applied:
            tpm = GitRepository(
                self.home / TPM_PATH, self.config.get("tmux_plugin_manager_url"), self.runner
            )
            if not tpm.exists():
                self.reporter.info("Installing Tmux Plugin Manager (TPM)...")
                tpm.clone()
                self.reporter.success("TPM installed")
        return result

    def install_key_bindings(self) -> None:
        tool = self.config.get("completion_tool")
        self.reporter.info(f"Setting up {tool} key bindings and completion...")
        self.homebrew.run_tool_installer(tool)

    def reload_shell_profile(self) -> bool:
        """Source the shell profile in a fresh shell to check that it loads.

        Returns:
            bool: True if the profile loaded without errors.
        """
        profile = live_path(ZSHRC, self.home)
        if not profile.is_file():
            self.reporter.warning(f"No shell profile at {profile}, skipping reload")
            return False
        shell = self.config.get("shell")
        result = self.runner.run([shell, "-c", f'source "{profile}"'], check=False)
        if not result.ok:
            self.reporter.warning(f"Sourcing {profile} reported errors: {result.stderr.strip()}")
            return False
        self.reporter.success(f"Reloaded {profile}")
        return True

    def setup(self) -> RestoreResult:
        """Run the complete setup.

        Raises:
            FatalPreconditionError: If one of the precondition checks fails.
            CommandError: If an installation command fails.
        """
        self.reporter.info("Starting macOS fresh install setup...")
        self.reporter.info(f"Configuration root: {self.config.root_dir}")

        self.ensure_config_set()
        ensure_macos(self.system)
        self.ensure_command_line_tools()
        self.ensure_homebrew()
        self.install_packages()
        result = self.apply_configuration()
        self.install_key_bindings()
        self.reload_shell_profile()

        self.reporter.success("Setup completed successfully!")
        return result
