"""Command line interface for configurizer."""

import os
import sys
from pathlib import Path
from typing import NoReturn, Optional

import click
from rich.console import Console
from rich.progress import Progress

from .core.backup import BackupManager
from .core.bootstrap import BootstrapManager
from .core.config import CONFIG_ENV_VAR, ROOT_ENV_VAR, Config
from .core.errors import FatalPreconditionError, InvalidConfigurationError
from .core.logging import setup_logging
from .core.reporting import StatusReporter
from .core.setup import SetupManager
from .core.verify import VerifyManager, render_report

console = Console()


def _reporter() -> StatusReporter:
    return StatusReporter(console)


def _fail(error: FatalPreconditionError) -> NoReturn:
    _reporter().error(str(error))
    raise click.Abort()


@click.group()
@click.option("--debug", is_flag=True, help="Show debug logging on the console")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write a debug log to this file",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar=CONFIG_ENV_VAR,
    help="YAML file overriding the default settings",
)
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    envvar=ROOT_ENV_VAR,
    help="Directory holding the config/ configuration set",
)
@click.pass_context
def cli(
    ctx: click.Context,
    debug: bool,
    log_file: Optional[Path],
    config_file: Optional[Path],
    root: Optional[Path],
) -> None:
    """Fresh macOS setup and dotfile backup tool.

    configurizer installs developer tooling with Homebrew and keeps a
    snapshot of your editor, tmux, prompt theme, shell and iTerm2
    configuration in a config/ directory.

    Main commands:

      bootstrap  Download configurizer and run setup from the download
      setup      Install tooling and apply the stored configuration
      backup     Capture this machine's configuration
      verify     Check that the stored configuration is complete

    Run 'configurizer COMMAND --help' for more information on a specific command.
    """
    setup_logging(debug=debug, log_file=str(log_file) if log_file else None)
    config = Config.load(config_file, root)
    errors = config.validate()
    if errors:
        _fail(InvalidConfigurationError("Invalid configuration: " + "; ".join(errors)))
    ctx.obj = config


@cli.command()
@click.pass_obj
def bootstrap(config: Config) -> None:
    """Download configurizer and run setup from the download.

    The repository archive is downloaded into a temporary directory,
    extracted, and setup runs against its config/ directory. The temporary
    directory is removed afterwards.

    Example:

      configurizer bootstrap
    """
    manager = BootstrapManager(config, Path.home(), reporter=_reporter())
    try:
        # Progress is live only while the archive downloads
        manager.bootstrap(Progress(console=console, transient=True))
    except FatalPreconditionError as e:
        _fail(e)
    _offer_shell_restart(config)


@cli.command()
@click.pass_obj
def setup(config: Config) -> None:
    """Install tooling and apply the stored configuration.

    The setup command will:
    1. Download the configuration set if there is no local config/ directory
    2. Check for macOS and the Xcode Command Line Tools
    3. Install or update Homebrew, then the CLI tools, font and iTerm2
    4. Copy the stored configuration into your home directory
    5. Install fzf key bindings and reload your shell profile

    Running it again is safe; existing installs are left alone and the
    configuration is copied again.

    Example:

      configurizer setup
    """
    manager = SetupManager(config, Path.home(), reporter=_reporter())
    try:
        manager.setup()
    except FatalPreconditionError as e:
        _fail(e)
    _offer_shell_restart(config)


@cli.command()
@click.pass_obj
def backup(config: Config) -> None:
    """Capture this machine's configuration into config/.

    Neovim, tmux and Oh My Posh directories, .zshrc, and when present
    .gitconfig, ~/.ssh/config and ~/.tmux.conf are copied. iTerm2 color
    schemes and profiles are collected from the usual locations. Items
    that are not found are reported and skipped.

    Example:

      configurizer backup
    """
    BackupManager(config, Path.home(), reporter=_reporter()).backup()


@cli.command()
@click.pass_obj
def verify(config: Config) -> None:
    """Check that the stored configuration is complete.

    Nothing is modified. Missing required items lower the result; missing
    optional items do not.

    Example:

      configurizer verify
    """
    try:
        report = VerifyManager(config).verify()
    except FatalPreconditionError as e:
        _fail(e)
    render_report(report, _reporter())


def _offer_shell_restart(config: Config) -> None:
    # Only ask when someone can answer
    if not sys.stdin.isatty():
        return
    if click.confirm("Would you like to restart your shell now?", default=False):
        shell = config.get("shell")
        os.execvp(shell, [shell])


def main() -> None:
    """Entry point for the configurizer CLI."""
    cli()


if __name__ == "__main__":
    main()
