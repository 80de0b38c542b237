"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the deduplication system.
These protocols enforce structural typing using Python's `typing.Protocol` to ensure
consistency across modules while maintaining flexibility and modularity.

Key Components:
---------------
- HashAlgorithm: Factory for incremental digest objects (MD5, SHA-256, xxHash64).
- Hasher: Computes the content checksum of a single file.
- FileScanner: Walks a directory tree and returns file metadata.
- FileGrouper: Groups files by size or checksum.
- Deduplicator: The engine that turns a directory into a DupeReport.
- ScanObserver: Optional progress notifications from scanner, engine and hasher.
- DecisionProvider: Supplies the operator's choice for each duplicate group.
- ResolutionListener: Optional presentation hooks for the resolution session.
"""

from typing import Protocol, List, Dict, Tuple

from keepone.core.models import (
    FileRecord,
    ScanResult,
    DupeReport,
    DeduplicationParams,
    Decision,
    ActionResult,
    GroupOutcome,
)


# ===== Hashing =====

class Digest(Protocol):
    def update(self, data: bytes) -> None: ...
    def hexdigest(self) -> str: ...


class HashAlgorithm(Protocol):
    """
    Interface for generic hash algorithms.

    Allows plugging in different hashing functions like SHA-256, MD5, or xxHash
    without affecting the rest of the deduplication logic.
    """

    @staticmethod
    def new() -> Digest:
        """Returns a fresh incremental digest object."""
        ...


class Hasher(Protocol):
    """Interface for hashing the whole content of a file."""
    def compute_checksum(self, path: str) -> str: ...


# ===== Scanning and grouping =====

class FileScanner(Protocol):
    def scan(self) -> ScanResult:
        """
        Walk the configured root.

        Returns:
            ScanResult with the regular files found and per-directory errors.
        """
        ...


class FileGrouper(Protocol):
    def group_by_size(self, files: List[FileRecord]) -> Dict[int, List[str]]:
        """Group file paths by size in bytes (singletons included)."""
        ...

    def group_by_checksum(self, paths: List[str]) -> Tuple[Dict[str, List[str]], List[str]]:
        """Group file paths by checksum; returns (groups, errors)."""
        ...


class Deduplicator(Protocol):
    def find_duplicates(self, params: DeduplicationParams) -> DupeReport:
        """
        Scan params.root_dir and return every group of files with identical content.

        Raises:
            ScanRootError: the root does not exist or is not a directory.
        """
        ...


class ScanObserver(Protocol):
    """
    Fire-and-forget progress notifications.
    Nothing an observer does can change the scan result.
    """
    def on_enter_directory(self, path: str) -> None: ...
    def on_potential_duplicate(self, paths: List[str], size: int) -> None: ...
    def on_hashing(self, path: str) -> None: ...
    def on_hashed(self, path: str, checksum: str) -> None: ...


# ===== Resolution =====

class DecisionProvider(Protocol):
    """Supplies the operator's choice for one duplicate group."""

    def choose(self, checksum: str, files: List[str]) -> Decision:
        """Return the chosen decision. Blocks for as long as it needs to."""
        ...

    def reject(self, checksum: str, files: List[str], reason: str) -> None:
        """The last decision was refused; choose() will be called again."""
        ...


class ResolutionListener(Protocol):
    def on_group(self, position: int, total: int, checksum: str, files: List[str]) -> None: ...
    def on_action(self, result: ActionResult) -> None: ...
    def on_group_resolved(self, outcome: GroupOutcome) -> None: ...
