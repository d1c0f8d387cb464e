"""Bootstrap functionality for configurizer."""

from __future__ import annotations

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Optional

from rich.progress import Progress

from .archive import ArchiveFetcher
from .config import Config
from .reporting import StatusReporter
from .restore import RestoreResult
from .setup import SetupManager, ensure_macos

logger = logging.getLogger(__name__)


class BootstrapManager:
    """Fetches a fresh copy of the repository and runs setup from it."""

    def __init__(
        self,
        config: Config,
        home: Path,
        reporter: Optional[StatusReporter] = None,
        system: Optional[str] = None,
        fetcher_factory: Callable[[str], ArchiveFetcher] = ArchiveFetcher,
        setup_factory: Optional[Callable[[Config], SetupManager]] = None,
    ):
        """Initialize bootstrap manager.

        Args:
            config: Configuration; ``archive_url`` names the repository archive.
            home: Home directory setup installs into.
            reporter: Status output.
            system: Platform name override, ``platform.system()`` when omitted.
            fetcher_factory: Builds the archive fetcher for a URL.
            setup_factory: Builds the setup manager for the extracted checkout.
        """
        self.config = config
        self.home = Path(home)
        self.reporter = reporter or StatusReporter()
        self.system = system
        self.fetcher_factory = fetcher_factory
        self.setup_factory = setup_factory

    def download(self, url: str, workdir: Path, progress: Optional[Progress] = None) -> Path:
        """Fetch the archive into ``workdir`` and return the checkout.

        ``progress`` is started for the download and stopped before returning.
        """
        fetcher = self.fetcher_factory(url)
        if progress is None:
            return fetcher.fetch(workdir)
        with progress:
            return fetcher.fetch(workdir, progress)

    def bootstrap(self, progress: Optional[Progress] = None) -> RestoreResult:
        """Download the repository, run setup from it and clean up.

        ``progress`` is only live while the archive downloads, so setup's
        installers have the terminal to themselves. The temporary directory
        is removed even when setup fails.

        Raises:
            UnsupportedPlatformError: If the host is not macOS.
            ArchiveError: If the archive cannot be fetched.
        """
        ensure_macos(self.system)

        self.reporter.info("Downloading and setting up development environment...")
        workdir = Path(tempfile.mkdtemp(prefix="configurizer-bootstrap-"))
        logger.debug("Bootstrap working directory: %s", workdir)
        try:
            url = self.config.get("archive_url")
            self.reporter.info(f"Downloading configurizer from {url}...")
            checkout = self.download(url, workdir, progress)
            self.reporter.success("Repository downloaded successfully!")
            self.reporter.line()

            self.reporter.info("Starting setup process...")
            setup_config = self.config.with_root(checkout)
            if self.setup_factory is not None:
                manager = self.setup_factory(setup_config)
            else:
                manager = SetupManager(
                    setup_config, self.home, reporter=self.reporter, system=self.system
                )
            result = manager.setup()
        finally:
            shutil.rmtree(workdir, ignore_errors=True)

        self.reporter.success("Install complete")
        return result
