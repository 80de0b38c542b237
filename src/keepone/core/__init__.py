"""
Core duplicate detection and resolution — scanner, hasher, grouper, engine and session.

This package contains the foundation of keepone:
- FileScannerImpl: directory traversal (optionally recursive), regular files only
- HasherImpl + MD5/SHA256/XXHash algorithms: streaming whole-file checksums
- FileGrouperImpl: size buckets and checksum groups
- DeduplicatorImpl: scan → size pre-filter → hash → groups of 2+
- ResolutionSession: per-group keep-one decisions with dry-run support
- Models: FileRecord, DupeReport, decisions and parameter objects
"""

from .errors import (
    DedupeError, ScanRootError, RootStatError, RootNotDirectoryError, HashError,
    InvalidChoiceError, ReportError, ReportReadError, ReportParseError, ReportWriteError)
from .models import (
    HashMode, FileRecord, ScanResult, DupeReport, DeduplicationStats, DeduplicationParams,
    SessionParams, Decision, DecisionKind, GroupState, ActionStatus, ActionResult,
    GroupOutcome, SessionSummary)
from .scanner import FileScannerImpl
from .hasher import HasherImpl, MD5AlgorithmImpl, SHA256AlgorithmImpl, XXHashAlgorithmImpl, get_algorithm
from .grouper import FileGrouperImpl
from .deduplicator import DeduplicatorImpl
from .resolver import ResolutionSession, ScriptedDecisionProvider

__all__ = [
    "DedupeError",
    "ScanRootError",
    "RootStatError",
    "RootNotDirectoryError",
    "HashError",
    "InvalidChoiceError",
    "ReportError",
    "ReportReadError",
    "ReportParseError",
    "ReportWriteError",
    "HashMode",
    "FileRecord",
    "ScanResult",
    "DupeReport",
    "DeduplicationStats",
    "DeduplicationParams",
    "SessionParams",
    "Decision",
    "DecisionKind",
    "GroupState",
    "ActionStatus",
    "ActionResult",
    "GroupOutcome",
    "SessionSummary",
    "FileScannerImpl",
    "HasherImpl",
    "MD5AlgorithmImpl",
    "SHA256AlgorithmImpl",
    "XXHashAlgorithmImpl",
    "get_algorithm",
    "FileGrouperImpl",
    "DeduplicatorImpl",
    "ResolutionSession",
    "ScriptedDecisionProvider",
]
