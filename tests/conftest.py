"""Test configuration."""

from __future__ import annotations

import io
import tarfile
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set

import pytest
from rich.console import Console

from configurizer.core.commands import CommandResult, CommandRunner
from configurizer.core.config import Config
from configurizer.core.errors import CommandError
from configurizer.core.homebrew import Homebrew
from configurizer.core.reporting import StatusReporter

ZSHRC_CONTENT = "\n".join(f"export VAR{i}={i}" for i in range(10)) + "\n"


class FakeRunner(CommandRunner):
    """Records commands instead of running them."""

    def __init__(self, existing: Optional[Set[str]] = None) -> None:
        self.existing: Set[str] = set(existing or ())
        self.calls: List[List[str]] = []
        self.returncodes: Dict[str, int] = {}
        self.stdout: Dict[str, str] = {}

    def run(
        self,
        argv: Sequence[str],
        check: bool = True,
        cwd: Optional[Path] = None,
        interactive: bool = False,
    ) -> CommandResult:
        argv_list = [str(a) for a in argv]
        self.calls.append(argv_list)
        key = " ".join(argv_list[:2])
        result = CommandResult(
            argv_list, self.returncodes.get(key, 0), self.stdout.get(key, ""), ""
        )
        if check and not result.ok:
            raise CommandError(argv_list, result.returncode)
        return result

    def exists(self, command: str) -> bool:
        return command in self.existing

    def ran(self, *argv: str) -> bool:
        return list(argv) in self.calls


def write_live_config(home: Path) -> None:
    """Create a live configuration in ``home``."""
    nvim = home / ".config" / "nvim"
    (nvim / "lua").mkdir(parents=True)
    (nvim / "init.lua").write_text("require('plugins')\n")
    (nvim / "lua" / "plugins.lua").write_text("return {}\n")

    tmux = home / ".config" / "tmux"
    tmux.mkdir(parents=True)
    (tmux / "tmux.conf").write_text("set -g mouse on\n")

    omp = home / ".config" / "omp"
    omp.mkdir(parents=True)
    (omp / "theme.omp.json").write_text('{"blocks": []}\n')

    (home / ".zshrc").write_text(ZSHRC_CONTENT)


def write_stored_config(config_dir: Path, optional: bool = False) -> None:
    """Create a configuration set with the four required items."""
    (config_dir / "nvim").mkdir(parents=True)
    (config_dir / "nvim" / "init.lua").write_text("vim.o.number = true\n")
    (config_dir / "tmux").mkdir()
    (config_dir / "tmux" / "tmux.conf").write_text("set -g prefix C-a\n")
    (config_dir / "omp").mkdir()
    (config_dir / "omp" / "theme.toml").write_text("version = 2\n")
    (config_dir / "zshrc").write_text(ZSHRC_CONTENT)
    if optional:
        (config_dir / "gitconfig").write_text("[user]\n\tname = Test User\n")
        (config_dir / "ssh_config").write_text("Host *\n  AddKeysToAgent yes\n")
        (config_dir / "tmux.conf").write_text("source ~/.config/tmux/tmux.conf\n")
        (config_dir / "iterm2").mkdir()
        (config_dir / "iterm2" / "Dracula.itermcolors").write_text("<plist/>\n")
        (config_dir / "iterm2" / "Work.json").write_text('{"Profiles": []}\n')


def make_archive(tmp_path: Path, with_config: bool = True) -> str:
    """Build a repository tarball and return a file:// URL for it."""
    checkout = tmp_path / "archive_src" / "configurizer-main"
    checkout.mkdir(parents=True)
    (checkout / "README.md").write_text("# configurizer\n")
    if with_config:
        write_stored_config(checkout / "config")

    archive = tmp_path / "main.tar.gz"
    with tarfile.open(archive, "w:gz") as tar:
        tar.add(checkout, arcname="configurizer-main")
    return archive.as_uri()


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Create an empty home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """Create an empty project checkout."""
    root = tmp_path / "repo"
    root.mkdir()
    return root


@pytest.fixture
def config(root: Path) -> Config:
    """Create a configuration pointing at the test checkout."""
    return Config().with_root(root)


@pytest.fixture
def reporter() -> StatusReporter:
    """Create a reporter that records its output."""
    return StatusReporter(Console(file=io.StringIO(), width=200))


def output_of(reporter: StatusReporter) -> str:
    return reporter.console.file.getvalue()


@pytest.fixture
def runner() -> FakeRunner:
    """Create a runner on a machine with Xcode tools and Homebrew."""
    runner = FakeRunner(existing={"brew", "git"})
    runner.stdout["brew --prefix"] = "/opt/homebrew\n"
    return runner


@pytest.fixture
def homebrew(runner: FakeRunner) -> Homebrew:
    """Create a Homebrew wrapper that never downloads the installer."""
    return Homebrew(
        runner,
        "https://example.invalid/install.sh",
        machine="arm64",
        fetch_script=lambda url: "echo installing homebrew",
    )
