"""
Module for fetching the configurizer repository archive.

The archive is a gzipped tarball with a single top-level directory (e.g.
``configurizer-main/``) that contains the ``config`` configuration set.
"""

from __future__ import annotations

import logging
import shutil
import tarfile
import urllib.error
import urllib.request
from pathlib import Path
from typing import Optional

from rich.progress import Progress, TaskID

from .errors import ArchiveError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class ArchiveFetcher:
    """Downloads and unpacks the repository archive."""

    def __init__(self, url: str):
        """
        Initialize the ArchiveFetcher.

        Args:
            url: Location of the ``.tar.gz`` archive (``https://`` or ``file://``)
        """
        self.url = url

    def download(self, dest: Path, progress: Optional[Progress] = None) -> Path:
        """
        Download the archive to ``dest``.

        Args:
            dest: File to write the archive to
            progress: Optional Progress instance for progress tracking

        Raises:
            ArchiveError: If the archive cannot be retrieved
        """
        dest.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Downloading %s to %s", self.url, dest)

        try:
            with urllib.request.urlopen(self.url) as response, open(dest, "wb") as out:
                total = response.headers.get("Content-Length") if response.headers else None
                task_id: Optional[TaskID] = None
                if progress:
                    task_id = progress.add_task(
                        f"Downloading {Path(self.url).name}",
                        total=int(total) if total else None,
                    )
                while True:
                    chunk = response.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    out.write(chunk)
                    if progress and task_id is not None:
                        progress.advance(task_id, len(chunk))
        except (urllib.error.URLError, OSError) as e:
            if dest.exists():
                dest.unlink()
            raise ArchiveError(f"Failed to download {self.url}: {e}") from e

        return dest

    def extract(self, archive: Path, dest: Path) -> Path:
        """
        Extract ``archive`` into ``dest`` and return the checkout directory.

        The checkout directory is the archive's single top-level directory, or
        ``dest`` itself when the archive has several top-level entries.

        Raises:
            ArchiveError: If the file is not a readable tarball
        """
        dest.mkdir(parents=True, exist_ok=True)
        try:
            with tarfile.open(archive, "r:*") as tar:
                tar.extractall(path=dest, filter="data")
        except (tarfile.TarError, OSError) as e:
            raise ArchiveError(f"Failed to extract {archive}: {e}") from e

        entries = [p for p in dest.iterdir() if p.name != "__MACOSX"]
        if len(entries) == 1 and entries[0].is_dir():
            return entries[0]
        return dest

    def fetch(self, workdir: Path, progress: Optional[Progress] = None) -> Path:
        """Download and extract into ``workdir``; return the checkout directory."""
        archive = self.download(workdir / "archive.tar.gz", progress)
        checkout = self.extract(archive, workdir / "extracted")
        archive.unlink()
        logger.debug("Extracted checkout at %s", checkout)
        return checkout


def relocate_config_set(checkout: Path, config_dir_name: str, target: Path) -> bool:
    """Move the configuration set out of an extracted checkout into ``target``.

    Returns:
        bool: False if the checkout has no configuration set.
    """
    source = checkout / config_dir_name
    if not source.is_dir():
        return False
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(source), str(target))
    return True
