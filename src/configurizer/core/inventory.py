"""Inventory of the configuration items managed by configurizer.

The inventory is compiled in: every item has a fixed location inside the
configuration set and a fixed location on the live system. Paths are always
composed from an explicit base directory, never from the working directory.

Example:
    ```python
    from pathlib import Path
    from configurizer.core.inventory import INVENTORY, live_path, stored_path

    for item in INVENTORY:
        print(item.name, stored_path(item, Path("~/configurizer/config")), live_path(item, Path.home()))
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Tuple

# Files that are never captured into the configuration set
EXCLUDED_FILES = [".DS_Store", "Thumbs.db", "desktop.ini", "__pycache__"]

ITERM2_SUPPORT_DIR = "Library/Application Support/iTerm2"
ITERM2_PROFILES_DIR = f"{ITERM2_SUPPORT_DIR}/DynamicProfiles"

COLOR_SCHEME_PATTERN = "*.itermcolors"
PROFILE_PATTERN = "*.json"

# Directories searched for terminal color schemes and profiles, in precedence
# order. A file found in a later entry replaces a same-named file from an
# earlier one.
TERMINAL_SEARCH_ORDER: Tuple[str, ...] = (
    ITERM2_SUPPORT_DIR,
    ITERM2_PROFILES_DIR,
    "Downloads",
    "Desktop",
    ".config/iterm2",
    "Documents",
)

# Live directories created by setup before any configuration is applied
LIVE_CONFIG_DIRS: Tuple[str, ...] = (
    ".config/nvim",
    ".config/tmux",
    ".config/omp",
    ".config/iterm2",
)


class ItemKind(Enum):
    """How a configuration item is laid out on disk."""

    FILE = "file"
    DIRECTORY = "directory"
    TERMINAL_PROFILES = "terminal_profiles"


class TerminalFileKind(Enum):
    """Sub-kinds of files stored for the terminal emulator."""

    COLOR_SCHEME = "color_scheme"
    PROFILE = "profile"


@dataclass(frozen=True)
class ConfigItem:
    """One logical unit of configuration.

    Attributes:
        name: Identifier of the item.
        label: Human readable name used in status output.
        live: Location on the live system, relative to the home directory.
        stored: Location inside the configuration set.
        kind: Whether the item is a single file or a directory tree.
        required: Whether a missing item degrades verification.
    """

    name: str
    label: str
    live: str
    stored: str
    kind: ItemKind
    required: bool = True

    @property
    def is_directory(self) -> bool:
        return self.kind is not ItemKind.FILE


NVIM = ConfigItem("nvim", "Neovim config", ".config/nvim", "nvim", ItemKind.DIRECTORY)
TMUX = ConfigItem("tmux", "Tmux config", ".config/tmux", "tmux", ItemKind.DIRECTORY)
OMP = ConfigItem("omp", "Oh My Posh config", ".config/omp", "omp", ItemKind.DIRECTORY)
ZSHRC = ConfigItem("zshrc", ".zshrc", ".zshrc", "zshrc", ItemKind.FILE)
GITCONFIG = ConfigItem(
    "gitconfig", "Git config", ".gitconfig", "gitconfig", ItemKind.FILE, required=False
)
SSH_CONFIG = ConfigItem(
    "ssh_config", "SSH config", ".ssh/config", "ssh_config", ItemKind.FILE, required=False
)
TMUX_CONF = ConfigItem(
    "tmux.conf", "Tmux root config", ".tmux.conf", "tmux.conf", ItemKind.FILE, required=False
)
ITERM2 = ConfigItem(
    "iterm2",
    "iTerm2 configurations",
    ITERM2_SUPPORT_DIR,
    "iterm2",
    ItemKind.TERMINAL_PROFILES,
    required=False,
)

INVENTORY: Tuple[ConfigItem, ...] = (
    NVIM,
    TMUX,
    OMP,
    ZSHRC,
    GITCONFIG,
    SSH_CONFIG,
    TMUX_CONF,
    ITERM2,
)

# Items copied verbatim between the configuration set and the live system
PLAIN_ITEMS: Tuple[ConfigItem, ...] = tuple(
    item for item in INVENTORY if item.kind is not ItemKind.TERMINAL_PROFILES
)


def stored_path(item: ConfigItem, config_dir: Path) -> Path:
    """Location of an item inside the configuration set rooted at ``config_dir``."""
    return Path(config_dir) / item.stored


def live_path(item: ConfigItem, home: Path) -> Path:
    """Location of an item on the live system for the given home directory."""
    return Path(home) / item.live


def terminal_search_dirs(home: Path) -> List[Path]:
    """Candidate directories for terminal files, lowest precedence first."""
    return [Path(home) / rel for rel in TERMINAL_SEARCH_ORDER]


def terminal_live_dirs(home: Path) -> Dict[TerminalFileKind, Path]:
    """Live destinations for each terminal file sub-kind."""
    return {
        TerminalFileKind.COLOR_SCHEME: Path(home) / ITERM2_SUPPORT_DIR,
        TerminalFileKind.PROFILE: Path(home) / ITERM2_PROFILES_DIR,
    }


def terminal_file_kind(path: Path) -> TerminalFileKind | None:
    """Classify a file as a color scheme, a profile, or neither."""
    if path.match(COLOR_SCHEME_PATTERN):
        return TerminalFileKind.COLOR_SCHEME
    if path.match(PROFILE_PATTERN):
        return TerminalFileKind.PROFILE
    return None


def list_terminal_files(
    directory: Path, recursive: bool = False
) -> Dict[TerminalFileKind, List[Path]]:
    """List the color schemes and profiles inside ``directory``.

    Only the top level is searched unless ``recursive`` is set.
    """
    found: Dict[TerminalFileKind, List[Path]] = {kind: [] for kind in TerminalFileKind}
    if not directory.is_dir():
        return found
    candidates = directory.rglob("*") if recursive else directory.iterdir()
    for path in sorted(candidates):
        if not path.is_file():
            continue
        kind = terminal_file_kind(path)
        if kind is not None:
            found[kind].append(path)
    return found


def is_present(item: ConfigItem, path: Path) -> bool:
    """Whether ``path`` exists with the layout ``item`` expects."""
    return path.is_dir() if item.is_directory else path.is_file()
