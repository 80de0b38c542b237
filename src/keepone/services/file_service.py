"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Destructive file operations used while resolving duplicates:
permanent deletion, moving to the system trash, and replacing a file with a symlink.
Every failure is raised as RuntimeError carrying the offending path.
"""
import os
import uuid
import logging
from pathlib import Path
from typing import List

from send2trash import send2trash

logger = logging.getLogger(__name__)


class FileService:
    """
    Cross-platform file operations.
    Stateless; the resolution session receives an instance so tests can swap it.
    """

    def __init__(self, use_trash: bool = False):
        self.use_trash = use_trash

    def delete(self, file_path: str) -> None:
        """Deletes a file, or moves it to trash when use_trash is set."""
        if self.use_trash:
            self.move_to_trash(file_path)
        else:
            self.remove_file(file_path)

    @staticmethod
    def remove_file(file_path: str) -> None:
        """Permanently removes a file."""
        try:
            os.remove(file_path)
        except OSError as e:
            raise RuntimeError(f"Failed to delete file: {e.strerror or e}") from e
        logger.debug(f"Deleted {file_path}")

    @staticmethod
    def move_to_trash(file_path: str) -> None:
        """Moves a file to the system trash."""
        path = Path(file_path).resolve()

        if not path.exists():
            raise RuntimeError(f"Failed to move to trash: file not found: {path}")

        try:
            send2trash(str(path))
        except Exception as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e
        logger.debug(f"Moved to trash {file_path}")

    @staticmethod
    def replace_with_symlink(target: str, link_path: str) -> str:
        """
        Replaces link_path with a symbolic link to the absolute path of target.
        The link is created beside link_path and renamed over it, so link_path is
        never missing: it is either the old file or the new link.

        Returns:
            The absolute link target
        """
        target_abs = os.path.abspath(target)
        link_abs = os.path.abspath(link_path)

        if target_abs == link_abs:
            raise RuntimeError(f"Failed to create link: {link_path} cannot point to itself")
        if not os.path.isfile(target_abs):
            raise RuntimeError(f"Failed to create link: target not found: {target_abs}")

        directory, name = os.path.split(link_abs)
        temp_link = os.path.join(directory, f".{name}.{uuid.uuid4().hex[:8]}.keepone-tmp")
        try:
            os.symlink(target_abs, temp_link)
            os.replace(temp_link, link_abs)
        except OSError as e:
            if os.path.lexists(temp_link):
                try:
                    os.remove(temp_link)
                except OSError:
                    logger.warning(f"Could not remove temporary link {temp_link}")
            raise RuntimeError(f"Failed to create link: {e.strerror or e}") from e

        logger.debug(f"Linked {link_abs} -> {target_abs}")
        return target_abs

    @staticmethod
    def is_regular_file(file_path: str) -> bool:
        """True for an existing regular file that is not a symlink."""
        try:
            return os.path.isfile(file_path) and not os.path.islink(file_path)
        except OSError:
            return False

    @classmethod
    def existing_regular_files(cls, file_paths: List[str]) -> List[str]:
        return [p for p in file_paths if cls.is_regular_file(p)]
