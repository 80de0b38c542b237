"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Implements directory scanning for the duplicate finder.
Features:
- Lists one directory at a time with os.scandir (entries sorted by name)
- Optionally descends into subdirectories
- Records regular files only: symbolic links, fifos, sockets and devices are skipped
- A directory that cannot be listed becomes an error entry, never an exception
"""

import os
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from keepone.core.errors import RootStatError, RootNotDirectoryError
from keepone.core.events import notify
from keepone.core.interfaces import FileScanner, ScanObserver
from keepone.core.models import FileRecord, ScanResult

logger = logging.getLogger(__name__)


class FileScannerImpl(FileScanner):
    """
    Walks a directory tree and collects regular files with their sizes.

    Attributes:
        root_dir: Root directory to scan
        recursive: Descend into subdirectories when True
        observer: Optional ScanObserver notified when a directory is entered
    """

    def __init__(
        self,
        root_dir: str,
        recursive: bool = False,
        observer: Optional[ScanObserver] = None
    ):
        self.root_dir = root_dir
        self.recursive = recursive
        self.observer = observer

    def scan(self) -> ScanResult:
        """
        Returns every regular file found under the root, plus per-directory errors.

        Raises:
            RootStatError: root does not exist or cannot be stat'ed
            RootNotDirectoryError: root is not a directory
        """
        self.validate_root(self.root_dir)

        logger.debug(f"Scanning {self.root_dir} (recursive={self.recursive})")
        result = ScanResult()

        # Depth-first; a directory's files are recorded before its subdirectories are entered
        pending = [self.root_dir]
        while pending:
            directory = pending.pop()
            subdirs = self._scan_directory(directory, result)
            if self.recursive:
                pending.extend(reversed(subdirs))

        logger.debug(
            f"Scan completed. {len(result.files)} files in {result.directories} directories, "
            f"{len(result.errors)} errors"
        )
        return result

    @staticmethod
    def validate_root(root_dir: str) -> None:
        try:
            is_dir = Path(root_dir).is_dir()
            exists = is_dir or os.path.exists(root_dir)
        except OSError as e:
            raise RootStatError(root_dir, f"error reading path {root_dir}, {e}") from e

        if not exists:
            error_msg = f"error reading path {root_dir}, no such file or directory"
            logger.error(error_msg)
            raise RootStatError(root_dir, error_msg)
        if not is_dir:
            error_msg = f"the given path is not a directory, {root_dir}"
            logger.error(error_msg)
            raise RootNotDirectoryError(root_dir, error_msg)

    def _scan_directory(self, directory: str, result: ScanResult) -> List[str]:
        """
        Records the regular files of one directory.
        Returns its subdirectories (sorted) for the caller to descend into.
        """
        notify(self.observer, "on_enter_directory", directory)
        result.directories += 1

        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            message = f"error reading contents of path {directory}, {e.strerror or e}"
            logger.warning(message)
            result.errors.append(message)
            return []

        subdirs = []
        for entry in entries:
            kind, size, error = self._classify(entry)
            if error:
                logger.debug(error)
                result.errors.append(error)
            elif kind == "file":
                result.files.append(FileRecord(path=entry.path, size=size))
            elif kind == "dir":
                subdirs.append(entry.path)
            else:
                logger.debug(f"Skipping non-regular entry: {entry.path}")
        return subdirs

    @staticmethod
    def _classify(entry: os.DirEntry) -> Tuple[Optional[str], int, Optional[str]]:
        """Returns (kind, size, error) where kind is "file", "dir" or None."""
        try:
            if entry.is_symlink():
                return None, 0, None
            if entry.is_dir(follow_symlinks=False):
                return "dir", 0, None
            if entry.is_file(follow_symlinks=False):
                return "file", entry.stat(follow_symlinks=False).st_size, None
        except OSError as e:
            return None, 0, f"unable to read file info of {entry.path}, {e.strerror or e}"
        return None, 0, None
