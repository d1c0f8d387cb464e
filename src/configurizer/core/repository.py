"""Git repository functionality for configurizer."""

from pathlib import Path

from .commands import CommandRunner


class GitRepository:
    """A Git working copy that configurizer installs into the home directory.

    Used for plugin managers that are distributed as Git repositories, such as
    the tmux plugin manager.

    Attributes:
        path (Path): Location of the working copy.
        url (str): Remote the working copy is cloned from.
    """

    def __init__(self, path: Path, url: str, runner: CommandRunner):
        """Initialize repository."""
        self.path = Path(path)
        self.url = url
        self.runner = runner

    def exists(self) -> bool:
        """Check if the working copy has been cloned."""
        return self.path.is_dir()

    def _run_git(self, *args: str) -> str:
        """Run a Git command and return its output."""
        return self.runner.run(["git", *args]).stdout.strip()

    def clone(self) -> bool:
        """Clone the repository unless it is already present.

        Returns:
            bool: True if a clone was made, False if the working copy existed.

        Raises:
            CommandError: If ``git clone`` fails.
        """
        if self.exists():
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._run_git("clone", self.url, str(self.path))
        return True
