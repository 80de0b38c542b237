"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Exception hierarchy for scanning, hashing, resolution and report persistence.

Fatal errors (ScanRootError, ReportError) abort the operation that raised them.
HashError is per-file: the engine records it in the report and keeps going.
"""


class DedupeError(RuntimeError):
    """Base class for all keepone errors."""


# =============================
# Scan root (fatal)
# =============================

class ScanRootError(DedupeError):
    """The scan root cannot be used. Aborts find_duplicates()."""

    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path


class RootStatError(ScanRootError):
    """The scan root does not exist or cannot be stat'ed."""


class RootNotDirectoryError(ScanRootError):
    """The scan root exists but is not a directory."""


# =============================
# Per-item (recoverable)
# =============================

class HashError(DedupeError):
    """A file could not be opened or read while computing its checksum."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"unable to calculate checksum of file {path}, {reason}")
        self.path = path
        self.reason = reason


class InvalidChoiceError(DedupeError):
    """An operator choice could not be parsed or is out of range."""


# =============================
# Report persistence (fatal for load/save)
# =============================

class ReportError(DedupeError):
    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path


class ReportReadError(ReportError):
    """The saved report cannot be read."""


class ReportParseError(ReportError):
    """The saved report is not valid JSON or has the wrong shape."""


class ReportWriteError(ReportError):
    """The report cannot be written."""
