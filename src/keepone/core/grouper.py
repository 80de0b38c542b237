"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/grouper.py
Implements the two grouping steps of duplicate detection:
size buckets (cheap pre-filter) and checksum groups (content comparison).
"""

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import List, Dict, Tuple, Any, Callable

from keepone.core.errors import HashError
from keepone.core.interfaces import FileGrouper, Hasher
from keepone.core.models import FileRecord

logger = logging.getLogger(__name__)


class FileGrouperImpl(FileGrouper):
    """
    Groups files by size and by content checksum.
    Uses an injected Hasher instance for flexibility and testability.

    Attributes:
        hasher: computes the checksum of one file
        workers: number of threads hashing in parallel (1 = hash inline)
    """

    def __init__(self, hasher: Hasher, workers: int = 1):
        self.hasher = hasher
        self.workers = max(1, workers)

    def group_by_size(self, files: List[FileRecord]) -> Dict[int, List[str]]:
        """Groups file paths by size. Buckets keep scan order; singletons are kept."""
        buckets = defaultdict(list)
        for file in files:
            buckets[file.size].append(file.path)
        return dict(buckets)

    def group_by_checksum(self, paths: List[str]) -> Tuple[Dict[str, List[str]], List[str]]:
        """
        Hashes every path and groups them by checksum.
        A file that fails to hash is left out and its error returned.

        Returns:
            (checksum -> paths, errors); groups may hold a single path
        """
        return self._group_by(paths, self.hasher.compute_checksum)

    def _group_by(self, paths: List[str], key_func: Callable[[str], Any]) -> Tuple[Dict[Any, List[str]], List[str]]:
        """
        Helper method to group paths by any computed key.
        Results are merged in input order whatever order the workers finish in.
        """
        groups = defaultdict(list)
        errors = []

        for path, key, error in self._compute_keys(paths, key_func):
            if error is not None:
                errors.append(error)
            else:
                groups[key].append(path)

        if errors:
            logger.warning(f"Skipped {len(errors)} files due to hash computation errors")

        return dict(groups), errors

    def _compute_keys(self, paths: List[str], key_func: Callable[[str], Any]):
        def compute(path: str):
            try:
                return path, key_func(path), None
            except HashError as e:
                return path, None, str(e)

        if self.workers == 1 or len(paths) < 2:
            return [compute(path) for path in paths]

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            return list(pool.map(compute, paths))
