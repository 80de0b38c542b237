"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/report_store.py
Saves and loads duplicate reports so a resolution session can be resumed.

Format:
    {"dupes": {"<checksum>": ["/path/a", "/path/b"]}, "errors": ["..."]}

Saving goes through a temporary file in the target directory that is renamed
over the target, so an interrupted save leaves the previous report intact.
Loading only reads.
"""
import os
import json
import stat
import logging
import tempfile
from typing import Any, Dict, List

from keepone.core.errors import ReportReadError, ReportParseError, ReportWriteError
from keepone.core.models import DupeReport

logger = logging.getLogger(__name__)


class ReportStore:

    @staticmethod
    def save(path: str, report: DupeReport) -> None:
        """
        Writes the report as JSON.

        Raises:
            ReportWriteError: if the file cannot be written
        """
        target = os.path.abspath(path)
        directory = os.path.dirname(target)
        logger.info(f"Saving report to {target} ({report.group_count} groups)")

        try:
            data = json.dumps(report.to_dict(), indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            raise ReportWriteError(path, f"error marshalling report, {e}") from e

        temp_path = None
        try:
            fd, temp_path = tempfile.mkstemp(prefix=".keepone-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            ReportStore._copy_mode(target, temp_path)
            os.replace(temp_path, target)
        except OSError as e:
            if temp_path and os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    logger.warning(f"Could not remove temporary report {temp_path}")
            raise ReportWriteError(path, f"unable to write report file {path}, {e.strerror or e}") from e

    @staticmethod
    def _copy_mode(target: str, temp_path: str) -> None:
        """Gives the new file the permissions of the report it replaces, if any."""
        try:
            mode = os.stat(target).st_mode
        except FileNotFoundError:
            return
        os.chmod(temp_path, stat.S_IMODE(mode))

    @staticmethod
    def load(path: str) -> DupeReport:
        """
        Reads a report written by save().

        Raises:
            ReportReadError: the file cannot be read
            ReportParseError: the content is not a valid report
        """
        logger.info(f"Loading report from {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            raise ReportReadError(path, f"unable to read report file {path}, {e.strerror or e}") from e
        except UnicodeDecodeError as e:
            raise ReportParseError(path, f"report file {path} is not valid UTF-8 text") from e

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ReportParseError(path, f"unable to parse report file {path}, {e}") from e

        return ReportStore.from_dict(document, path)

    @staticmethod
    def from_dict(document: Any, path: str = "<memory>") -> DupeReport:
        """Validates the decoded JSON shape and builds a DupeReport."""
        if not isinstance(document, dict):
            raise ReportParseError(path, f"report file {path} must contain a JSON object")

        # Older reports used capitalised field names
        raw_dupes = document.get("dupes", document.get("Dupes")) or {}
        raw_errors = document.get("errors", document.get("Errors")) or []

        if not isinstance(raw_dupes, dict):
            raise ReportParseError(path, f"'dupes' in {path} must be an object of checksum → paths")
        if not isinstance(raw_errors, list):
            raise ReportParseError(path, f"'errors' in {path} must be a list")

        dupes: Dict[str, List[str]] = {}
        for checksum, paths in raw_dupes.items():
            if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
                raise ReportParseError(path, f"group {checksum} in {path} must be a list of paths")
            if len(paths) < 2:
                logger.debug(f"Dropping group {checksum} with {len(paths)} path(s)")
                continue
            dupes[checksum] = list(paths)

        errors = [e if isinstance(e, str) else json.dumps(e) for e in raw_errors]
        return DupeReport(dupes=dupes, errors=errors)
