"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

deduplicator.py
Implements the duplicate detection pipeline:
    scan → size buckets → checksum of every file sharing its size → groups of 2+

Only a missing or non-directory root aborts the run. Unreadable directories and
unreadable files are recorded in DupeReport.errors and the run goes on.
"""
import time
import logging
from typing import List, Optional

from keepone.core.events import notify
from keepone.core.grouper import FileGrouperImpl
from keepone.core.hasher import HasherImpl, get_algorithm
from keepone.core.interfaces import Deduplicator, ScanObserver
from keepone.core.models import DupeReport, DeduplicationParams, DeduplicationStats
from keepone.core.scanner import FileScannerImpl

logger = logging.getLogger(__name__)


# =============================
# Main Deduplicator Class
# =============================
class DeduplicatorImpl(Deduplicator):
    """
    Finds groups of files with identical content under one directory.
    Statistics of the last run are kept in `stats`.
    """
    def __init__(self, observer: Optional[ScanObserver] = None):
        self.observer = observer
        self.stats = DeduplicationStats()

    def find_duplicates(self, params: DeduplicationParams) -> DupeReport:
        """
        Main deduplication pipeline.
        Args:
            params: root directory, hash mode, recursion and worker count
        Returns:
            DupeReport with checksum → paths (2+ each) and the non-fatal errors
        Raises:
            ScanRootError: if params.root_dir is missing or not a directory
        """
        self.stats = DeduplicationStats()
        total_start_time = time.time()

        scanner = FileScannerImpl(
            root_dir=params.root_dir,
            recursive=params.recursive,
            observer=self.observer
        )
        scan_result = scanner.scan()
        errors: List[str] = list(scan_result.errors)

        hasher = HasherImpl(get_algorithm(params.mode), observer=self.observer)
        grouper = FileGrouperImpl(hasher, workers=params.workers)

        # A file alone in its size bucket cannot have a duplicate: never hash it
        candidates: List[str] = []
        for size, paths in grouper.group_by_size(scan_result.files).items():
            if len(paths) < 2:
                continue
            notify(self.observer, "on_potential_duplicate", list(paths), size)
            candidates.extend(paths)

        logger.debug(f"{len(candidates)} of {len(scan_result.files)} files share a size, hashing them")
        checksum_groups, hash_errors = grouper.group_by_checksum(candidates)
        errors.extend(hash_errors)

        # Groups that lost members to hash failures may be down to one file
        dupes = {
            checksum: paths
            for checksum, paths in checksum_groups.items()
            if len(paths) >= 2
        }
        report = DupeReport(dupes=dupes, errors=errors)

        self.stats.directories_scanned = scan_result.directories
        self.stats.files_seen = len(scan_result.files)
        self.stats.files_hashed = len(candidates) - len(hash_errors)
        self.stats.groups_found = report.group_count
        self.stats.duplicate_files = report.file_count
        self.stats.errors = len(errors)
        self.stats.total_time = time.time() - total_start_time

        logger.info(
            f"Found {report.group_count} duplicate groups ({report.file_count} files), "
            f"{len(errors)} errors"
        )
        return report
