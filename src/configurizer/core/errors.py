"""Exceptions raised by configurizer.

Fatal precondition failures stop a run with a printed error. Failing external
commands and archive problems are left to propagate as uncaught errors. A
single missing configuration item is never an exception; managers record it
as a warning and carry on.
"""


class ConfigurizerError(Exception):
    """Base class for configurizer errors."""


class FatalPreconditionError(ConfigurizerError):
    """A precondition for the run does not hold and the run must stop."""


class UnsupportedPlatformError(FatalPreconditionError):
    """The host is not macOS."""


class ConfigSetMissingError(FatalPreconditionError):
    """The configuration set directory is absent."""


class InvalidConfigurationError(FatalPreconditionError):
    """The settings file produced values that cannot be used."""


class PrerequisiteInstallPendingError(FatalPreconditionError):
    """A prerequisite installation was started and must finish before resuming."""


class CommandError(ConfigurizerError):
    """An external command exited with a non-zero status."""

    def __init__(self, argv, returncode: int, output: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.output = output
        message = f"Command failed ({returncode}): {' '.join(self.argv)}"
        if output:
            message = f"{message}\n{output}"
        super().__init__(message)


class ArchiveError(ConfigurizerError):
    """The repository archive could not be downloaded or extracted."""
