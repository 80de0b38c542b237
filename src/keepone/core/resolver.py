"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/resolver.py
Interactive "keep-one" resolution of duplicate groups.

For every group the session asks a DecisionProvider what to do:
    keep all       → KEPT_ALL, nothing touched
    delete all     → DELETED
    keep file N    → DELETED, every other file removed
    symlink to N   → LINKED, every other file replaced by a link to N's absolute path
    quit           → session stops, this and later groups stay unresolved

A resolved group is removed from `remaining`, which is what gets checkpointed
when the session is interrupted. Each group is resolved at most once per session.
"""

import os
import logging
import threading
from collections import deque
from typing import Callable, Iterable, List, Optional, Union

from keepone.core.errors import InvalidChoiceError
from keepone.core.events import notify
from keepone.core.interfaces import DecisionProvider, ResolutionListener
from keepone.core.models import (
    ActionResult, ActionStatus, Decision, DecisionKind, DupeReport,
    GroupOutcome, GroupState, SessionSummary,
)
from keepone.services.file_service import FileService

logger = logging.getLogger(__name__)

SNAPSHOT_LOCK_TIMEOUT = 1.0  # seconds, must stay below the shutdown hook timeout

ScriptItem = Union[Decision, str, Callable[[str, List[str]], Union[Decision, str]]]


class ScriptedDecisionProvider(DecisionProvider):
    """
    Replays a fixed list of decisions, for tests and unattended runs.
    Items may be Decision objects, operator strings ("a", "n", "2", "s1", "q"),
    or callables (checksum, files) -> Decision | str.
    Once the script runs out every further group gets QUIT.
    """

    def __init__(self, decisions: Iterable[ScriptItem]):
        self._decisions = deque(decisions)
        self.asked: List[str] = []
        self.rejections: List[str] = []

    def choose(self, checksum: str, files: List[str]) -> Decision:
        self.asked.append(checksum)
        if not self._decisions:
            return Decision(DecisionKind.QUIT)

        item = self._decisions.popleft()
        if callable(item):
            item = item(checksum, files)
        if isinstance(item, str):
            item = Decision.parse(item)
        return item

    def reject(self, checksum: str, files: List[str], reason: str) -> None:
        self.rejections.append(reason)


class ResolutionSession:
    """
    Drives one resolution pass over a DupeReport.

    Attributes:
        remaining: working copy of the report; shrinks as groups are resolved
        dry_run: describe deletions and links instead of performing them
    """

    def __init__(
        self,
        report: DupeReport,
        provider: DecisionProvider,
        file_service: Optional[FileService] = None,
        dry_run: bool = False,
        listener: Optional[ResolutionListener] = None
    ):
        self.remaining = report.copy()
        self.provider = provider
        self.file_service = file_service or FileService()
        self.dry_run = dry_run
        self.listener = listener
        self._lock = threading.Lock()

    def snapshot(self) -> DupeReport:
        """
        Copy of the unresolved groups and the carried errors. Safe from any thread.

        A signal handler runs on the main thread and may interrupt it while it
        holds the lock; the main thread then stays blocked until the handler
        returns, so after SNAPSHOT_LOCK_TIMEOUT the copy is taken without the lock.
        """
        if not self._lock.acquire(timeout=SNAPSHOT_LOCK_TIMEOUT):
            logger.warning("Session state is locked, taking snapshot without the lock")
            return self.remaining.copy()
        try:
            return self.remaining.copy()
        finally:
            self._lock.release()

    def run(self) -> SessionSummary:
        """Resolves every remaining group in turn, until done or the provider quits."""
        summary = SessionSummary()
        with self._lock:
            groups = [(checksum, list(files)) for checksum, files in self.remaining.dupes.items()]

        total = len(groups)
        for position, (checksum, files) in enumerate(groups, 1):
            current = self._refresh_group(checksum, files)
            if current is None:
                summary.stale_groups += 1
                continue

            notify(self.listener, "on_group", position, total, checksum, list(current))
            outcome = self.resolve_group(checksum, current)
            if outcome is None:
                summary.quit = True
                break
            summary.outcomes.append(outcome)

        with self._lock:
            summary.unresolved = len(self.remaining.dupes)
        return summary

    def resolve_group(self, checksum: str, files: List[str]) -> Optional[GroupOutcome]:
        """
        Asks for a decision and carries it out.
        Returns None if the operator quit; the group then stays in `remaining`.
        """
        decision = self._ask(checksum, files)

        if decision.kind == DecisionKind.QUIT:
            logger.info("Resolution stopped by operator")
            return None

        if decision.kind == DecisionKind.KEEP_ALL:
            outcome = GroupOutcome(checksum, GroupState.KEPT_ALL, kept=list(files))

        elif decision.kind == DecisionKind.DELETE_ALL:
            outcome = GroupOutcome(checksum, GroupState.DELETED, results=self._delete(files))

        else:
            keep_at = decision.index - 1
            kept = files[keep_at]
            kept_abs = os.path.abspath(kept)
            # Never touch the kept file through a second entry for the same path
            others = [path for i, path in enumerate(files)
                      if i != keep_at and os.path.abspath(path) != kept_abs]

            if decision.kind == DecisionKind.KEEP_ONE:
                outcome = GroupOutcome(checksum, GroupState.DELETED, kept=[kept],
                                       results=self._delete(others))
            else:
                outcome = GroupOutcome(checksum, GroupState.LINKED, kept=[kept],
                                       results=self._link(kept, others))

        self._mark_resolved(checksum)
        notify(self.listener, "on_group_resolved", outcome)
        return outcome

    def _ask(self, checksum: str, files: List[str]) -> Decision:
        """Asks until the provider gives a decision that fits the group."""
        while True:
            decision = self.provider.choose(checksum, list(files))
            try:
                decision.validate(len(files))
                return decision
            except InvalidChoiceError as e:
                logger.debug(f"Rejected choice for {checksum}: {e}")
                self.provider.reject(checksum, list(files), str(e))

    def _refresh_group(self, checksum: str, files: List[str]) -> Optional[List[str]]:
        """
        Drops members that are no longer regular files (removed, or already
        linked by an earlier run) and repeated entries for the same absolute
        path. A group left with fewer than two members is resolved without asking.
        """
        current = self._unique_paths(self.file_service.existing_regular_files(files))
        if len(current) == len(files):
            return files

        logger.info(f"Group {checksum}: dropped {len(files) - len(current)} missing or repeated file(s)")
        if len(current) < 2:
            self._mark_resolved(checksum)
            return None

        with self._lock:
            self.remaining.dupes[checksum] = list(current)
        return current

    @staticmethod
    def _unique_paths(paths: List[str]) -> List[str]:
        """First entry wins when several entries name the same file."""
        seen = set()
        unique = []
        for path in paths:
            key = os.path.abspath(path)
            if key not in seen:
                seen.add(key)
                unique.append(path)
        return unique

    def _mark_resolved(self, checksum: str) -> None:
        with self._lock:
            self.remaining.dupes.pop(checksum, None)

    def _delete(self, paths: List[str]) -> List[ActionResult]:
        results = []
        for path in paths:
            if self.dry_run:
                result = ActionResult(path, "delete", ActionStatus.DRY_RUN)
            else:
                try:
                    self.file_service.delete(path)
                    result = ActionResult(path, "delete", ActionStatus.DONE)
                except RuntimeError as e:
                    logger.warning(f"Unable to delete file {path}: {e}")
                    result = ActionResult(path, "delete", ActionStatus.FAILED, error=str(e))
            notify(self.listener, "on_action", result)
            results.append(result)
        return results

    def _link(self, kept: str, paths: List[str]) -> List[ActionResult]:
        target = os.path.abspath(kept)
        results = []
        for path in paths:
            link_path = os.path.abspath(path)
            if self.dry_run:
                result = ActionResult(link_path, "symlink", ActionStatus.DRY_RUN, target=target)
            else:
                try:
                    self.file_service.replace_with_symlink(target, link_path)
                    result = ActionResult(link_path, "symlink", ActionStatus.DONE, target=target)
                except RuntimeError as e:
                    logger.warning(f"Unable to link {link_path} to {target}: {e}")
                    result = ActionResult(link_path, "symlink", ActionStatus.FAILED,
                                          target=target, error=str(e))
            notify(self.listener, "on_action", result)
            results.append(result)
        return results
