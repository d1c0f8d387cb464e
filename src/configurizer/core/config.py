"""Configuration management for configurizer."""

from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from rich.console import Console

console = Console()

# src/configurizer/core/config.py -> project checkout
PROJECT_ROOT = Path(__file__).resolve().parents[3]

# Used when configurizer is installed rather than run from a checkout
USER_ROOT = "~/.configurizer"


def default_root(checkout: Path = PROJECT_ROOT) -> Path:
    """The source checkout when running from one, otherwise ``USER_ROOT``."""
    if (checkout / "pyproject.toml").is_file():
        return checkout
    return Path(USER_ROOT)


ROOT_ENV_VAR = "CONFIGURIZER_ROOT"
CONFIG_ENV_VAR = "CONFIGURIZER_CONFIG"
USER_CONFIG_FILE = "~/.config/configurizer/config.yaml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "root_dir": str(default_root()),
    "config_dir_name": "config",
    "archive_url": "https://github.com/rkvmar/configurizer/archive/main.tar.gz",
    "homebrew_install_url": "https://raw.githubusercontent.com/Homebrew/install/HEAD/install.sh",
    "formulae": ["neovim", "tmux", "fzf", "ripgrep", "fd", "zoxide"],
    "conditional_formulae": {
        "git": "git",
        "oh-my-posh": "jandedobbeleer/oh-my-posh/oh-my-posh",
    },
    "taps": [],
    "casks": ["font-jetbrains-mono-nerd-font", "iterm2"],
    "tmux_plugin_manager_url": "https://github.com/tmux-plugins/tpm",
    "completion_tool": "fzf",
    "shell": "zsh",
}

_STRING_KEYS = (
    "root_dir",
    "config_dir_name",
    "archive_url",
    "homebrew_install_url",
    "tmux_plugin_manager_url",
    "completion_tool",
    "shell",
)
_LIST_KEYS = ("formulae", "taps", "casks")


class Config:
    """Configuration class for configurizer.

    Holds the defaults above, merged with an optional YAML file. The
    inventory of configuration items is not part of the configuration.
    """

    def __init__(self) -> None:
        """Initialize configuration with the defaults."""
        self.config: Dict[str, Any] = {}
        self._merge_config(copy.deepcopy(DEFAULT_CONFIG))

    @classmethod
    def load(cls, config_file: Optional[Path] = None, root_dir: Optional[Path] = None) -> Config:
        """Build a configuration from defaults, a YAML file and overrides.

        Args:
            config_file: Explicit YAML file. When omitted, the file named by
                ``CONFIGURIZER_CONFIG`` or the per-user file is used if present.
            root_dir: Root directory override, taking precedence over the
                ``CONFIGURIZER_ROOT`` environment variable and the file.
        """
        config = cls()
        if config_file is None:
            candidate = os.environ.get(CONFIG_ENV_VAR) or USER_CONFIG_FILE
            config_path = Path(candidate).expanduser()
            if config_path.exists():
                config_file = config_path
        config.load_config(config_file)

        env_root = os.environ.get(ROOT_ENV_VAR)
        if root_dir is not None:
            config._merge_config({"root_dir": str(root_dir)})
        elif env_root:
            config._merge_config({"root_dir": env_root})
        return config

    def load_config(self, config_file: Optional[Path] = None) -> None:
        """Merge a YAML configuration file over the current values."""
        if config_file is None:
            return
        try:
            with open(config_file, "r") as f:
                user_config = yaml.safe_load(f)
            if user_config:
                self._merge_config(user_config)
        except (OSError, yaml.YAMLError, ValueError) as e:
            console.print(f"[red]Error loading config file: {e}[/red]")

    def _merge_config(self, config: Dict[str, Any]) -> None:
        """Merge configuration with current configuration."""
        if not isinstance(config, dict):
            raise ValueError("Configuration must be a dictionary")

        for key in _STRING_KEYS:
            if key in config and not isinstance(config[key], str):
                raise ValueError(f"{key} must be a string")

        for key in _LIST_KEYS:
            if key in config:
                if not isinstance(config[key], list):
                    raise ValueError(f"{key} must be a list")
                for value in config[key]:
                    if not isinstance(value, str):
                        raise ValueError(f"{key} entries must be strings")

        if "conditional_formulae" in config:
            if not isinstance(config["conditional_formulae"], dict):
                raise ValueError("conditional_formulae must be a dictionary")

        self.config.update(config)

    def validate(self) -> List[str]:
        """Validate configuration."""
        errors = []

        for key in _STRING_KEYS:
            value = self.config.get(key)
            if not isinstance(value, str) or not value:
                errors.append(f"{key} must be a non-empty string")

        for key in _LIST_KEYS:
            value = self.config.get(key)
            if not isinstance(value, list):
                errors.append(f"{key} must be a list")

        conditional = self.config.get("conditional_formulae")
        if not isinstance(conditional, dict):
            errors.append("conditional_formulae must be a dictionary")
        else:
            for command, formula in conditional.items():
                if not isinstance(command, str) or not isinstance(formula, str):
                    errors.append(f"conditional formula {command} must map a string to a string")

        for key in ("archive_url", "homebrew_install_url", "tmux_plugin_manager_url"):
            value = self.config.get(key)
            if isinstance(value, str) and "://" not in value:
                errors.append(f"{key} must be a URL")

        return errors

    @property
    def root_dir(self) -> Path:
        """Directory that holds the configuration set."""
        return Path(self.config["root_dir"]).expanduser()

    @property
    def config_dir(self) -> Path:
        """The configuration set directory."""
        return self.root_dir / self.config["config_dir_name"]

    @property
    def formulae(self) -> List[str]:
        return list(self.config["formulae"])

    @property
    def conditional_formulae(self) -> Dict[str, str]:
        return dict(self.config["conditional_formulae"])

    @property
    def taps(self) -> List[str]:
        return list(self.config["taps"])

    @property
    def casks(self) -> List[str]:
        return list(self.config["casks"])

    def with_root(self, root_dir: Path) -> Config:
        """Return a copy of this configuration pointing at another root."""
        clone = Config()
        clone.config = copy.deepcopy(self.config)
        clone.config["root_dir"] = str(root_dir)
        return clone

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value.

        Args:
            key: The configuration key to get.
            default: The default value to return if the key is not found.

        Returns:
            The configuration value, or the default if not found.
        """
        return self.config.get(key, default)
