"""External command execution for configurizer."""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .errors import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    argv: List[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs external tools by name and checks whether they are installed.

    Every command is logged. Output is captured unless ``interactive`` is set,
    in which case the command shares the terminal (installers that prompt).
    """

    def run(
        self,
        argv: Sequence[str],
        check: bool = True,
        cwd: Optional[Path] = None,
        interactive: bool = False,
    ) -> CommandResult:
        """Run a command.

        Raises:
            CommandError: If ``check`` is set and the command exits non-zero.
        """
        argv_list = [str(a) for a in argv]
        logger.debug("CMD %s", " ".join(shlex.quote(a) for a in argv_list))

        if interactive:
            proc = subprocess.run(argv_list, cwd=cwd)
            result = CommandResult(argv_list, proc.returncode, "", "")
        else:
            proc = subprocess.run(argv_list, cwd=cwd, capture_output=True, text=True)
            result = CommandResult(argv_list, proc.returncode, proc.stdout, proc.stderr)
            if proc.stdout:
                logger.debug("STDOUT %s", proc.stdout.strip())
            if proc.stderr:
                logger.debug("STDERR %s", proc.stderr.strip())

        if check and not result.ok:
            raise CommandError(argv_list, result.returncode, result.stderr.strip())
        return result

    def exists(self, command: str) -> bool:
        """Check whether ``command`` is on the search path."""
        return shutil.which(command) is not None
