"""Small helpers shared by test modules."""
from pathlib import Path

from keepone.core.models import Decision, DecisionKind, DupeReport


def keep(name: str, kind: DecisionKind = DecisionKind.KEEP_ONE):
    """Scripted decision choosing the group member whose basename is `name`."""
    def choose(checksum, files):
        names = [Path(f).name for f in files]
        return Decision(kind, names.index(name) + 1)
    return choose


def group_sets(report: DupeReport):
    """Group memberships as a set of frozensets, ignoring order."""
    return {frozenset(paths) for paths in report.dupes.values()}
