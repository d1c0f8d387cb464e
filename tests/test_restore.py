"""Tests for restore functionality."""

import stat
from pathlib import Path

import pytest
from conftest import output_of, write_stored_config

from configurizer.core.config import Config
from configurizer.core.inventory import INVENTORY, TerminalFileKind
from configurizer.core.reporting import StatusReporter
from configurizer.core.restore import RestoreManager, trees_match

ITERM2_SUPPORT = Path("Library/Application Support/iTerm2")


@pytest.fixture
def restore_manager(config: Config, home: Path, reporter: StatusReporter) -> RestoreManager:
    """Create a restore manager for the test home directory."""
    return RestoreManager(config, home, reporter)


def test_restore_required_items(restore_manager: RestoreManager, home: Path, root: Path) -> None:
    """Test that required items end up identical to the stored copies."""
    write_stored_config(root / "config")

    result = restore_manager.restore()

    assert result.applied == ["nvim", "tmux", "omp", "zshrc"]
    assert (home / ".config" / "nvim" / "init.lua").read_text() == "vim.o.number = true\n"
    assert (home / ".zshrc").read_bytes() == (root / "config" / "zshrc").read_bytes()
    validation = restore_manager.validate_restore()
    assert validation == {"nvim": True, "tmux": True, "omp": True, "zshrc": True}


def test_restore_creates_live_directories(
    restore_manager: RestoreManager, home: Path, root: Path
) -> None:
    """Test that the live configuration directories exist after a restore."""
    (root / "config").mkdir()

    restore_manager.restore()

    for name in ("nvim", "tmux", "omp", "iterm2"):
        assert (home / ".config" / name).is_dir()


def test_restore_replaces_live_directory(
    restore_manager: RestoreManager, home: Path, root: Path
) -> None:
    """Test that stale live files are removed by a restore."""
    write_stored_config(root / "config")
    stale = home / ".config" / "nvim" / "old.vim"
    stale.parent.mkdir(parents=True)
    stale.write_text("stale")

    restore_manager.restore()

    assert not stale.exists()
    assert trees_match(root / "config" / "nvim", home / ".config" / "nvim")


def test_restore_missing_items_warn(
    restore_manager: RestoreManager, reporter: StatusReporter, root: Path
) -> None:
    """Test that missing stored items are reported and skipped."""
    (root / "config").mkdir()

    result = restore_manager.restore()

    assert result.applied == []
    assert [item.name for item in INVENTORY] == result.missing
    assert "[WARNING] .zshrc not found" in output_of(reporter)


def test_restore_optional_items(restore_manager: RestoreManager, home: Path, root: Path) -> None:
    """Test restoring git, ssh and tmux root configuration."""
    write_stored_config(root / "config", optional=True)

    result = restore_manager.restore()

    assert {"gitconfig", "ssh_config", "tmux.conf", "iterm2"} <= set(result.applied)
    assert (home / ".gitconfig").read_text() == "[user]\n\tname = Test User\n"
    assert (home / ".tmux.conf").exists()
    ssh_config = home / ".ssh" / "config"
    assert ssh_config.exists()
    assert stat.S_IMODE(ssh_config.stat().st_mode) == 0o600


def test_restore_terminal_files(
    restore_manager: RestoreManager, reporter: StatusReporter, home: Path, root: Path
) -> None:
    """Test that color schemes and profiles go to separate live directories."""
    write_stored_config(root / "config", optional=True)

    result = restore_manager.restore()

    assert (home / ITERM2_SUPPORT / "Dracula.itermcolors").exists()
    assert (home / ITERM2_SUPPORT / "DynamicProfiles" / "Work.json").exists()
    assert not (home / ITERM2_SUPPORT / "Work.json").exists()
    assert result.terminal_files[TerminalFileKind.PROFILE] == [
        home / ITERM2_SUPPORT / "DynamicProfiles" / "Work.json"
    ]
    assert "Please restart iTerm2" in output_of(reporter)


def test_restore_is_idempotent(restore_manager: RestoreManager, home: Path, root: Path) -> None:
    """Test that restoring twice leaves the same live content."""
    write_stored_config(root / "config", optional=True)

    restore_manager.restore()
    first = {p: p.read_bytes() for p in home.rglob("*") if p.is_file()}
    restore_manager.restore()
    second = {p: p.read_bytes() for p in home.rglob("*") if p.is_file()}

    assert first == second


def test_validate_restore_detects_changes(
    restore_manager: RestoreManager, home: Path, root: Path
) -> None:
    """Test that validation notices a modified live file."""
    write_stored_config(root / "config")
    restore_manager.restore()
    (home / ".config" / "tmux" / "tmux.conf").write_text("changed\n")

    validation = restore_manager.validate_restore()

    assert validation["tmux"] is False
    assert validation["nvim"] is True
