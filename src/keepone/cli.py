#!/usr/bin/env python3
"""
keepone CLI — command line interface for duplicate file detection and resolution.

Without --keep-one the duplicate groups are only listed. With --keep-one the operator
decides, group by group, which file to keep. --save-to checkpoints the unresolved
groups on Ctrl+C (and at the end of the session); --load-from resumes from such a file.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import sys
import os
import time
import logging
from pathlib import Path
from typing import List, Optional, NoReturn

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)
logger = logging.getLogger(__name__)

# === EARLY DEPENDENCY VALIDATION ===
_MISSING_DEPS = []
try:
    from send2trash import send2trash
except ImportError:
    _MISSING_DEPS.append("send2trash")

try:
    import xxhash
except ImportError:
    _MISSING_DEPS.append("xxhash")

if _MISSING_DEPS:
    print("❌ Missing required dependencies:", file=sys.stderr)
    print(f"   pip install {' '.join(_MISSING_DEPS)}", file=sys.stderr)
    print("\nOr install the package with its dependencies:", file=sys.stderr)
    print("   pip install keepone", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from keepone.core.errors import DedupeError, InvalidChoiceError, ReportError, ScanRootError
from keepone.core.models import (
    ActionResult, ActionStatus, Decision, DecisionKind, DeduplicationParams, DupeReport,
    GroupOutcome, GroupState, HashMode, SessionParams, SessionSummary,
)
from keepone.core.resolver import ResolutionSession
from keepone.commands import DeduplicationCommand
from keepone.services.file_service import FileService
from keepone.services.report_store import ReportStore
from keepone.shutdown import ShutdownHooks, listen_for_signals
from keepone.utils.convert_utils import ConvertUtils
from keepone.aliases import (
    HASH_MODE_ALIASES, HASH_MODE_CHOICES, HASH_MODE_HELP_TEXT,
    CHOICE_HELP_TEXT, EPILOG_TEXT
)


class ConsoleScanPrinter:
    """Verbose progress output for the scan. Writes to stderr."""

    def on_enter_directory(self, path: str) -> None:
        print(f"  > Checking contents in directory: {path}", file=sys.stderr)

    def on_potential_duplicate(self, paths: List[str], size: int) -> None:
        print(f"  > {len(paths)} files of {ConvertUtils.bytes_to_human(size)} to compare", file=sys.stderr)

    def on_hashing(self, path: str) -> None:
        print(f"  > Calculating hash of file: {path}", file=sys.stderr)

    def on_hashed(self, path: str, checksum: str) -> None:
        print(f"      > {ConvertUtils.short_checksum(checksum)}", file=sys.stderr)


class ConsoleDecisionProvider:
    """Asks the operator on stdin which file of a group to keep."""

    def choose(self, checksum: str, files: List[str]) -> Decision:
        print("Which file would you like to keep?")
        while True:
            print("  (a) All")
            print("  (n) None")
            for idx, path in enumerate(files, 1):
                print(f"  ({idx}) {path}")
            print("  (s<N>) Keep N, replace the others with links to it   (q) Quit")

            try:
                text = input("> ")
            except EOFError:
                print()
                return Decision(DecisionKind.QUIT)

            try:
                return Decision.parse(text)
            except InvalidChoiceError as e:
                print(f"❌ {e}")
                print(CHOICE_HELP_TEXT)

    def reject(self, checksum: str, files: List[str], reason: str) -> None:
        print(f"❌ {reason}")


class ConsoleResolutionListener:
    """Prints each group header and the result of every action."""

    def __init__(self, quiet: bool = False):
        self.quiet = quiet
        self.freed_bytes = 0
        self._group_size = 0

    def on_group(self, position: int, total: int, checksum: str, files: List[str]) -> None:
        try:
            self._group_size = os.path.getsize(files[0])
        except OSError:
            self._group_size = 0
        print()
        print(f"Items left: {total - position + 1}")
        print(f"📁 Checksum: {checksum} | Size: {ConvertUtils.bytes_to_human(self._group_size)} | Files: {len(files)}")

    def on_action(self, result: ActionResult) -> None:
        if result.status == ActionStatus.FAILED:
            print(f"   ⚠️  {result.describe()}", file=sys.stderr)
            return
        if result.status == ActionStatus.DONE:
            self.freed_bytes += self._group_size
        if not self.quiet:
            print(f"   {result.describe()}")

    def on_group_resolved(self, outcome: GroupOutcome) -> None:
        if self.quiet:
            return
        if outcome.state == GroupState.KEPT_ALL:
            print("   Kept all files.")
        elif outcome.kept:
            print(f"   [KEEP] {outcome.kept[0]}")


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self, hooks: Optional[ShutdownHooks] = None):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self.hooks = hooks or ShutdownHooks()

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="keepone",
            description="keepone — duplicate file finder with interactive, resumable resolution",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "path",
            nargs="?",
            default=None,
            help="Directory to scan for duplicates"
        )
        parser.add_argument(
            "--recursive", "-r",
            action="store_true",
            help="Also scan subdirectories. Default: only the given directory"
        )
        parser.add_argument(
            "--algorithm", "-a",
            choices=HASH_MODE_CHOICES,
            default="sha256",
            type=str,
            help=HASH_MODE_HELP_TEXT
        )
        parser.add_argument(
            "--workers", "-w",
            default=1,
            type=int,
            metavar='',
            help="Number of files hashed in parallel. Default: 1"
        )

        # Resolution
        parser.add_argument(
            "--keep-one", "-o",
            action="store_true",
            help="For each duplicate group, ask which file to keep"
        )
        parser.add_argument(
            "--dry-run", "-d",
            action="store_true",
            help="With --keep-one, print what would be deleted or linked without touching any file"
        )
        parser.add_argument(
            "--trash",
            action="store_true",
            help="Move files to the system trash instead of deleting them permanently"
        )

        # Sessions
        parser.add_argument(
            "--save-to", "-s",
            default=None,
            type=str,
            metavar='FILE',
            help="Save the unresolved groups to FILE on Ctrl+C and when the session ends"
        )
        parser.add_argument(
            "--load-from", "-l",
            default=None,
            type=str,
            metavar='FILE',
            help="Continue a saved session instead of scanning. Progress is saved back to FILE\n"
                 "unless --save-to is given"
        )

        # Output options
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show every directory and file as it is processed, and statistics"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if not args.path and not args.load_from:
            self.error_exit("No starting path or progress file provided")
        if args.path and args.load_from:
            self.error_exit("Give either a directory to scan or --load-from, not both")

        if args.workers < 1:
            self.error_exit("--workers must be at least 1")

        if args.dry_run and not args.keep_one:
            self.warning("--dry-run has no effect without --keep-one")

        if args.save_to:
            save_dir = Path(args.save_to).resolve().parent
            if not save_dir.is_dir():
                self.error_exit(f"Directory for --save-to does not exist: {save_dir}")

        if args.load_from and not Path(args.load_from).is_file():
            self.error_exit(f"Progress file not found: {args.load_from}")

    @staticmethod
    def create_params(args: argparse.Namespace) -> DeduplicationParams:
        """Create DeduplicationParams from CLI arguments."""
        return DeduplicationParams(
            root_dir=str(Path(args.path).resolve()),
            mode=HASH_MODE_ALIASES.get(args.algorithm, HashMode.SHA256),
            recursive=args.recursive,
            workers=args.workers,
        )

    @staticmethod
    def create_session_params(args: argparse.Namespace) -> SessionParams:
        return SessionParams(
            keep_one=args.keep_one,
            dry_run=args.dry_run,
            use_trash=args.trash,
            save_to=args.save_to,
            load_from=args.load_from,
        )

    def run_deduplication(self, params: DeduplicationParams) -> DupeReport:
        """Execute the scan and return its report. Exits on a fatal error."""
        if not self.quiet:
            print(f"Scanning directory: {params.root_dir}")
        if self.verbose:
            print(f"Finding duplicates (algorithm: {params.mode.display_name}, "
                  f"recursive: {'yes' if params.recursive else 'no'})...")

        command = DeduplicationCommand(observer=ConsoleScanPrinter() if self.verbose else None)
        try:
            report, stats = command.execute(params)
        except ScanRootError as e:
            self.error_exit(f"Unable to find duplicates. {e}")

        if self.verbose:
            print()
            print(stats.print_summary())
        return report

    def load_report(self, path: str) -> DupeReport:
        if not self.quiet:
            print(f"Loading report from {path}")
        try:
            return ReportStore.load(path)
        except ReportError as e:
            self.error_exit(str(e))

    def save_report(self, path: str, report: DupeReport) -> None:
        """Writes the report; used both by the shutdown hook and at the end of a session."""
        if not self.quiet:
            print(f"Saving report to {path} ({report.group_count} groups left)")
        ReportStore.save(path, report)

    def output_errors(self, report: DupeReport) -> None:
        if self.quiet:
            return
        if not report.errors:
            print("\nNo errors.")
            return
        print("\nErrors:")
        for error in report.errors:
            print(f"- {error}")

    def output_results(self, report: DupeReport) -> None:
        """Output duplicate groups as plain text."""
        if self.quiet:
            return

        if report.is_empty():
            print("No duplicates.")
            return

        print(f"\nFound {report.group_count} duplicate groups ({report.file_count} files)")
        for idx, (checksum, paths) in enumerate(report.dupes.items(), 1):
            print(f"\n📁 Group {idx} | Checksum: {checksum} | Files: {len(paths)}")
            for path in paths:
                print(f"   {path}")

    def run_session(self, report: DupeReport, session_params: SessionParams) -> Optional[SessionSummary]:
        """
        Lists the report, or resolves it interactively with --keep-one.
        The unresolved part is saved on interrupt and at the end when save_to is set.
        """
        self.output_errors(report)

        if not session_params.keep_one:
            # Nothing is resolved in list mode: the whole report can be resumed later
            self.output_results(report)
            self.checkpoint(session_params.save_to, report)
            return None

        if report.is_empty():
            if not self.quiet:
                print("No duplicates.")
            self.checkpoint(session_params.save_to, report)
            return None

        listener = ConsoleResolutionListener(quiet=self.quiet)
        session = ResolutionSession(
            report,
            ConsoleDecisionProvider(),
            file_service=FileService(use_trash=session_params.use_trash),
            dry_run=session_params.dry_run,
            listener=listener,
        )

        if session_params.save_to:
            def save_progress():
                self.save_report(session_params.save_to, session.snapshot())

            self.hooks.add_hook(save_progress)
            logger.info("Shutdown hook registered.")

        if not self.quiet:
            if session_params.dry_run:
                print("\n⚠️  Dry run: no file will be deleted or linked.")
            print(f"\nDuplicates: {report.group_count} groups")

        summary = session.run()
        self.checkpoint(session_params.save_to, session.snapshot())
        self.output_summary(summary, listener)
        return summary

    def checkpoint(self, path: Optional[str], report: DupeReport) -> None:
        """Saves the report at the end of a run if a target was given. Exits if it cannot."""
        if not path:
            return
        try:
            self.save_report(path, report)
        except ReportError as e:
            self.error_exit(str(e))

    def output_summary(self, summary: SessionSummary, listener: ConsoleResolutionListener) -> None:
        if self.quiet:
            return
        print()
        print("=" * 60)
        print(f"Groups kept: {summary.count(GroupState.KEPT_ALL)}, "
              f"deleted: {summary.count(GroupState.DELETED)}, "
              f"linked: {summary.count(GroupState.LINKED)}")
        if summary.stale_groups:
            print(f"Groups skipped (files no longer present): {summary.stale_groups}")
        if summary.unresolved:
            print(f"Groups left unresolved: {summary.unresolved}")
        failures = summary.failures
        if failures:
            print(f"⚠️  {len(failures)} file operation(s) failed")
        if listener.freed_bytes:
            print(f"Total space saved: {ConvertUtils.bytes_to_human(listener.freed_bytes)}")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv: Optional[List[str]] = None) -> None:
        """Main entry point."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        if self.verbose:
            logging.getLogger("keepone").setLevel(logging.INFO)

        self.validate_args(args)
        session_params = self.create_session_params(args)

        if session_params.load_from:
            report = self.load_report(session_params.load_from)
        else:
            report = self.run_deduplication(self.create_params(args))

        self.run_session(report, session_params)

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    listen_for_signals(app.hooks)
    try:
        app.run()
    except KeyboardInterrupt:
        # Only reached when the default SIGINT handler is back in place,
        # e.g. a caller restored it; listen_for_signals normally exits first.
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        app.hooks.invoke_all()
        sys.exit(130)
    except DedupeError as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
