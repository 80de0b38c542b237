"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for scanning, duplicate reports and interactive resolution.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Union
from enum import Enum

from keepone.core.errors import InvalidChoiceError


# =============================
# Enums
# =============================

class HashMode(Enum):
    """
    Checksum algorithm used to compare file contents.
    Configured once per run.
    """
    MD5 = "md5"
    SHA256 = "sha256"
    XXH64 = "xxh64"

    @property
    def display_name(self) -> str:
        """Human-readable name for UI display."""
        mapping = {
            HashMode.MD5: "MD5",
            HashMode.SHA256: "SHA-256",
            HashMode.XXH64: "xxHash64",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class DecisionKind(Enum):
    KEEP_ALL = "all"
    DELETE_ALL = "none"
    KEEP_ONE = "keep"
    SYMLINK = "symlink"
    QUIT = "quit"


class GroupState(Enum):
    """Terminal state of a resolved duplicate group."""
    KEPT_ALL = "kept-all"
    DELETED = "deleted"
    LINKED = "linked"


class ActionStatus(Enum):
    DONE = "done"
    DRY_RUN = "dry-run"
    FAILED = "failed"


# ======================
#  Scan Data Models
# ======================

@dataclass(frozen=True)
class FileRecord:
    """A regular file found by the scanner. Lives only for one scan pass."""
    path: str
    size: int  # in bytes

    def __repr__(self):
        return f"<FileRecord path={self.path}, size={self.size}>"


@dataclass
class ScanResult:
    """Everything one scanner pass produced."""
    files: List[FileRecord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    directories: int = 0


@dataclass
class DupeReport:
    """
    Duplicate groups keyed by checksum, plus non-fatal errors met along the way.
    Produced by a scan or loaded from a saved session.
    Every group holds at least two paths.
    """
    dupes: Dict[str, List[str]] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    @property
    def group_count(self) -> int:
        return len(self.dupes)

    @property
    def file_count(self) -> int:
        return sum(len(paths) for paths in self.dupes.values())

    def is_empty(self) -> bool:
        return not self.dupes

    def copy(self) -> 'DupeReport':
        """Copy with fresh containers so the copy can shrink independently."""
        return DupeReport(
            dupes={checksum: list(paths) for checksum, paths in self.dupes.items()},
            errors=list(self.errors),
        )

    def to_dict(self) -> Dict[str, Union[Dict[str, List[str]], List[str]]]:
        return {
            "dupes": {checksum: list(paths) for checksum, paths in self.dupes.items()},
            "errors": list(self.errors),
        }

    def __repr__(self):
        return f"<DupeReport groups={self.group_count}, errors={len(self.errors)}>"


@dataclass
class DeduplicationStats:
    """Counters collected during one find_duplicates() run."""
    directories_scanned: int = 0
    files_seen: int = 0
    files_hashed: int = 0
    groups_found: int = 0
    duplicate_files: int = 0
    errors: int = 0
    total_time: float = 0.0

    def print_summary(self) -> str:
        lines = [
            "📊 Deduplication Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s",
            f"📁 Directories scanned: {self.directories_scanned}",
            f"📄 Files seen: {self.files_seen}",
            f"🔍 Files hashed: {self.files_hashed}",
            f"🧩 Duplicate groups: {self.groups_found} ({self.duplicate_files} files)",
        ]
        if self.errors:
            lines.append(f"⚠️ Errors: {self.errors}")
        return "\n".join(lines)


# ======================
#  Resolution Models
# ======================

@dataclass(frozen=True)
class Decision:
    """
    What the operator wants done with one duplicate group.
    `index` is 1-based, as shown in the prompt.
    """
    kind: DecisionKind
    index: Optional[int] = None

    @classmethod
    def parse(cls, text: str) -> 'Decision':
        """
        Parse operator input:
            a   keep all          n   delete all
            N   keep file N       sN  symlink the others to file N
            q   quit the session
        """
        choice = (text or "").strip().lower()
        if choice == "a":
            return cls(DecisionKind.KEEP_ALL)
        if choice == "n":
            return cls(DecisionKind.DELETE_ALL)
        if choice == "q":
            return cls(DecisionKind.QUIT)

        kind = DecisionKind.KEEP_ONE
        number = choice
        if choice.startswith("s"):
            kind = DecisionKind.SYMLINK
            number = choice[1:].strip()

        if not number.isdecimal():
            raise InvalidChoiceError(f"Invalid choice: '{(text or '').strip()}'")
        return cls(kind, int(number))

    def validate(self, file_count: int) -> None:
        """Raise InvalidChoiceError if the index does not point into the group."""
        if self.kind not in (DecisionKind.KEEP_ONE, DecisionKind.SYMLINK):
            return
        if self.index is None or self.index < 1 or self.index > file_count:
            raise InvalidChoiceError(
                f"Invalid choice: {self.index} is not between 1 and {file_count}"
            )


@dataclass
class ActionResult:
    """Outcome of one destructive action on one file."""
    path: str
    action: str  # "delete" or "symlink"
    status: ActionStatus
    target: Optional[str] = None
    error: Optional[str] = None

    def describe(self) -> str:
        is_link = self.action == "symlink"
        if self.status == ActionStatus.DRY_RUN:
            verb = f"link to {self.target}" if is_link else "delete"
            return f"(to {verb}) {self.path}"
        if self.status == ActionStatus.FAILED:
            if is_link:
                return f"Unable to link {self.path} to {self.target}: {self.error}"
            return f"Unable to delete file {self.path}: {self.error}"
        done = f"linked -> {self.target}" if self.action == "symlink" else "deleted"
        return f"({done}) {self.path}"


@dataclass
class GroupOutcome:
    checksum: str
    state: GroupState
    kept: List[str] = field(default_factory=list)
    results: List[ActionResult] = field(default_factory=list)

    @property
    def failures(self) -> List[ActionResult]:
        return [r for r in self.results if r.status == ActionStatus.FAILED]


@dataclass
class SessionSummary:
    outcomes: List[GroupOutcome] = field(default_factory=list)
    stale_groups: int = 0
    unresolved: int = 0
    quit: bool = False

    def count(self, state: GroupState) -> int:
        return sum(1 for o in self.outcomes if o.state == state)

    @property
    def failures(self) -> List[ActionResult]:
        return [r for o in self.outcomes for r in o.failures]


# =============================
# Parameter objects
# =============================

@dataclass
class DeduplicationParams:
    """Parameters for one scan. Interface-agnostic, validated on creation."""
    root_dir: str
    mode: HashMode = HashMode.SHA256
    recursive: bool = False
    workers: int = 1

    def __post_init__(self):
        if not self.root_dir:
            raise ValueError("Root directory cannot be empty")

        if isinstance(self.mode, str):
            try:
                self.mode = HashMode(self.mode.strip().lower())
            except ValueError:
                valid = ", ".join(m.value for m in HashMode)
                raise ValueError(f"Unknown hash algorithm: '{self.mode}'. Valid options: {valid}")

        if self.workers < 1:
            raise ValueError("Number of hashing workers must be at least 1")


@dataclass
class SessionParams:
    """Parameters for one resolution session."""
    keep_one: bool = False
    dry_run: bool = False
    use_trash: bool = False
    save_to: Optional[str] = None
    load_from: Optional[str] = None

    def __post_init__(self):
        # Resuming without an explicit target checkpoints back into the loaded file
        if self.load_from and not self.save_to:
            self.save_to = self.load_from
