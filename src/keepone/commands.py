"""
Unified command orchestrator for duplicate detection.
This is the single entry point for finding duplicates — used by the CLI and by library callers.
"""
from typing import Optional, Tuple

from keepone.core.deduplicator import DeduplicatorImpl
from keepone.core.interfaces import ScanObserver
from keepone.core.models import DupeReport, DeduplicationStats, DeduplicationParams


class DeduplicationCommand:
    """
    Runs one scan-and-hash pass.

    Usage:
        params = DeduplicationParams(root_dir="~/Downloads", mode=HashMode.MD5, recursive=True)
        report, stats = DeduplicationCommand(observer=console_printer).execute(params)
    """

    def __init__(self, observer: Optional[ScanObserver] = None):
        self._deduplicator = DeduplicatorImpl(observer=observer)

    def execute(self, params: DeduplicationParams) -> Tuple[DupeReport, DeduplicationStats]:
        """
        Execute duplicate detection with given parameters.

        Returns:
            Tuple of (report, statistics)

        Raises:
            ScanRootError: if the root directory is missing or not a directory
        """
        report = self._deduplicator.find_duplicates(params)
        return report, self._deduplicator.stats
