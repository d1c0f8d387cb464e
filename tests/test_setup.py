"""Tests for the setup process."""

from pathlib import Path

import pytest
from conftest import FakeRunner, make_archive, output_of, write_stored_config

from configurizer.core.config import Config
from configurizer.core.errors import (
    ArchiveError,
    CommandError,
    ConfigSetMissingError,
    PrerequisiteInstallPendingError,
    UnsupportedPlatformError,
)
from configurizer.core.homebrew import Homebrew
from configurizer.core.reporting import StatusReporter
from configurizer.core.setup import SetupManager, ensure_macos


@pytest.fixture
def setup_manager(
    config: Config,
    home: Path,
    runner: FakeRunner,
    homebrew: Homebrew,
    reporter: StatusReporter,
) -> SetupManager:
    """Create a setup manager on a fake macOS host."""
    return SetupManager(
        config, home, runner=runner, reporter=reporter, system="Darwin", homebrew=homebrew
    )


def live_snapshot(home: Path) -> dict:
    return {str(p.relative_to(home)): p.read_bytes() for p in home.rglob("*") if p.is_file()}


def test_ensure_macos() -> None:
    """Test the platform check."""
    ensure_macos("Darwin")
    with pytest.raises(UnsupportedPlatformError):
        ensure_macos("Linux")


def test_setup_applies_configuration(
    setup_manager: SetupManager, runner: FakeRunner, home: Path, root: Path
) -> None:
    """Test a full setup on a machine that already has Homebrew."""
    write_stored_config(root / "config")

    result = setup_manager.setup()

    assert result.applied == ["nvim", "tmux", "omp", "zshrc"]
    assert (home / ".zshrc").read_bytes() == (root / "config" / "zshrc").read_bytes()
    assert runner.ran("brew", "update")
    assert runner.ran("brew", "install", "neovim", "tmux", "fzf", "ripgrep", "fd", "zoxide")
    assert runner.ran("brew", "install", "jandedobbeleer/oh-my-posh/oh-my-posh")
    assert not runner.ran("brew", "install", "git")
    assert not any(call[1:2] == ["tap"] for call in runner.calls)
    assert runner.ran("brew", "install", "--cask", "font-jetbrains-mono-nerd-font")
    assert runner.ran("brew", "install", "--cask", "iterm2")
    assert runner.ran("/opt/homebrew/opt/fzf/install", "--all")
    assert runner.ran("zsh", "-c", f'source "{home / ".zshrc"}"')


def test_setup_taps_configured_repositories(
    setup_manager: SetupManager, config: Config, runner: FakeRunner, home: Path, root: Path
) -> None:
    """Test that configured taps are added before the casks are installed."""
    write_stored_config(root / "config")
    config.config["taps"] = ["homebrew/cask-versions"]

    setup_manager.setup()

    tap = runner.calls.index(["brew", "tap", "homebrew/cask-versions"])
    cask = runner.calls.index(["brew", "install", "--cask", "font-jetbrains-mono-nerd-font"])
    assert tap < cask
    assert (home / ".zshrc").exists()


def test_setup_clones_tmux_plugin_manager(
    setup_manager: SetupManager, runner: FakeRunner, home: Path, root: Path
) -> None:
    """Test that TPM is cloned once the tmux configuration is applied."""
    write_stored_config(root / "config")

    setup_manager.setup()

    tpm = home / ".tmux" / "plugins" / "tpm"
    assert runner.ran("git", "clone", "https://github.com/tmux-plugins/tpm", str(tpm))


def test_setup_skips_existing_tmux_plugin_manager(
    setup_manager: SetupManager, runner: FakeRunner, home: Path, root: Path
) -> None:
    """Test that an existing TPM checkout is left alone."""
    write_stored_config(root / "config")
    (home / ".tmux" / "plugins" / "tpm").mkdir(parents=True)

    setup_manager.setup()

    assert not any(call[:2] == ["git", "clone"] for call in runner.calls)


def test_setup_wrong_platform(
    config: Config, home: Path, runner: FakeRunner, homebrew: Homebrew, root: Path
) -> None:
    """Test that setup refuses to run outside macOS."""
    write_stored_config(root / "config")
    manager = SetupManager(config, home, runner=runner, system="Linux", homebrew=homebrew)

    with pytest.raises(UnsupportedPlatformError):
        manager.setup()

    assert runner.calls == []


def test_setup_missing_command_line_tools(
    setup_manager: SetupManager, runner: FakeRunner, home: Path, root: Path
) -> None:
    """Test that setup starts the Xcode tools installer and stops."""
    write_stored_config(root / "config")
    runner.returncodes["xcode-select -p"] = 2

    with pytest.raises(PrerequisiteInstallPendingError, match="run this command again"):
        setup_manager.setup()

    assert runner.ran("xcode-select", "--install")
    assert not any(call[0] == "brew" for call in runner.calls)
    assert not (home / ".zshrc").exists()


def test_setup_installs_homebrew(
    config: Config, home: Path, reporter: StatusReporter, root: Path
) -> None:
    """Test a setup on a machine without Homebrew or git."""
    write_stored_config(root / "config")
    runner = FakeRunner()
    runner.stdout["/opt/homebrew/bin/brew --prefix"] = "/opt/homebrew\n"
    homebrew = Homebrew(
        runner, "https://example.invalid/install.sh", machine="arm64", fetch_script=lambda url: "true"
    )
    manager = SetupManager(
        config, home, runner=runner, reporter=reporter, system="Darwin", homebrew=homebrew
    )

    manager.setup()

    assert runner.ran("/bin/bash", "-c", "true")
    assert not runner.ran("/opt/homebrew/bin/brew", "update")
    assert runner.ran("/opt/homebrew/bin/brew", "install", "git")
    assert 'eval "$(/opt/homebrew/bin/brew shellenv)"' in (home / ".zprofile").read_text()
    assert "Homebrew installed successfully" in output_of(reporter)


def test_setup_continues_without_stored_items(
    setup_manager: SetupManager, runner: FakeRunner, reporter: StatusReporter, root: Path
) -> None:
    """Test that an empty configuration set only produces warnings."""
    (root / "config").mkdir()

    result = setup_manager.setup()

    assert result.applied == []
    assert runner.ran("/opt/homebrew/opt/fzf/install", "--all")
    output = output_of(reporter)
    assert "Neovim config not found" in output
    assert "No shell profile" in output
    assert "Setup completed successfully!" in output


def test_setup_command_failure_propagates(
    setup_manager: SetupManager, runner: FakeRunner, root: Path
) -> None:
    """Test that a failing package install aborts the run."""
    write_stored_config(root / "config")
    runner.returncodes["brew install"] = 1

    with pytest.raises(CommandError):
        setup_manager.setup()


def test_setup_is_idempotent(setup_manager: SetupManager, home: Path, root: Path) -> None:
    """Test that a second setup leaves the same live content."""
    write_stored_config(root / "config", optional=True)

    setup_manager.setup()
    first = live_snapshot(home)
    setup_manager.setup()

    assert live_snapshot(home) == first


def test_setup_downloads_missing_config_set(
    setup_manager: SetupManager, config: Config, home: Path, root: Path, tmp_path: Path
) -> None:
    """Test that setup fetches the configuration set from the archive."""
    config.config["archive_url"] = make_archive(tmp_path)

    setup_manager.setup()

    assert (root / "config" / "zshrc").exists()
    assert (home / ".config" / "nvim" / "init.lua").exists()


def test_setup_archive_without_config_set(
    setup_manager: SetupManager, config: Config, runner: FakeRunner, tmp_path: Path
) -> None:
    """Test that an archive without a configuration set is fatal."""
    config.config["archive_url"] = make_archive(tmp_path, with_config=False)

    with pytest.raises(ConfigSetMissingError):
        setup_manager.setup()

    assert runner.calls == []


def test_setup_unreachable_archive(
    setup_manager: SetupManager, config: Config, tmp_path: Path
) -> None:
    """Test that a missing archive aborts the run."""
    config.config["archive_url"] = (tmp_path / "missing.tar.gz").as_uri()

    with pytest.raises(ArchiveError):
        setup_manager.setup()


def test_reload_shell_profile_failure_warns(
    setup_manager: SetupManager, runner: FakeRunner, reporter: StatusReporter, home: Path
) -> None:
    """Test that a profile with errors is reported without aborting."""
    (home / ".zshrc").write_text("broken\n")
    runner.returncodes["zsh -c"] = 1

    assert not setup_manager.reload_shell_profile()
    assert "reported errors" in output_of(reporter)
