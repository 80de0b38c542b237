"""
keepone — duplicate file finder with interactive, resumable resolution.

Core features:
- Size pre-filter, then whole-file checksums (md5, sha256 or xxh64)
- Keep-one mode: per duplicate group keep all, delete all, keep one, or link the rest to one
- Dry-run mode that only describes what would be deleted or linked
- Sessions can be saved on Ctrl+C and resumed later without rescanning
"""

# Get version
try:
    from importlib.metadata import version as _version, PackageNotFoundError
    __version__ = _version("keepone")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Public API: only what users should import directly
from keepone.commands import DeduplicationCommand
from keepone.core import (
    DeduplicationParams, SessionParams, HashMode, DupeReport, Decision, DecisionKind,
    ResolutionSession, ScriptedDecisionProvider)
from keepone.services import FileService, ReportStore
from keepone.shutdown import ShutdownHooks

__all__ = [
    "DeduplicationCommand",
    "DeduplicationParams",
    "SessionParams",
    "HashMode",
    "DupeReport",
    "Decision",
    "DecisionKind",
    "ResolutionSession",
    "ScriptedDecisionProvider",
    "FileService",
    "ReportStore",
    "ShutdownHooks",
    "__version__",
]
