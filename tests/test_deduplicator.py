"""
Integration tests for DeduplicatorImpl: the scan → size → hash → group pipeline.
"""
import os
import pytest
from pathlib import Path
from unittest import mock

from keepone.core.deduplicator import DeduplicatorImpl
from keepone.core.errors import HashError, RootStatError, RootNotDirectoryError, ScanRootError
from keepone.core.hasher import HasherImpl
from keepone.core.models import DeduplicationParams, HashMode
from keepone.commands import DeduplicationCommand

from helpers import group_sets


def paths(*files):
    return frozenset(str(f) for f in files)


class TestFindDuplicates:

    def test_finds_expected_groups_non_recursive(self, test_files, temp_dir):
        report = DeduplicatorImpl().find_duplicates(DeduplicationParams(str(temp_dir)))

        assert group_sets(report) == {
            paths(test_files["dup1_a"], test_files["dup1_b"]),
            paths(test_files["dup2_a"], test_files["dup2_b"]),
            paths(test_files["empty1"], test_files["empty2"]),
        }
        assert report.errors == []

    def test_recursive_includes_subdirectory_duplicate(self, test_files, temp_dir):
        report = DeduplicatorImpl().find_duplicates(DeduplicationParams(str(temp_dir), recursive=True))

        assert paths(test_files["dup1_a"], test_files["dup1_b"], test_files["sub_dup"]) in group_sets(report)

    def test_every_group_has_at_least_two_members(self, test_files, temp_dir):
        report = DeduplicatorImpl().find_duplicates(DeduplicationParams(str(temp_dir), recursive=True))

        assert all(len(group) >= 2 for group in report.dupes.values())

    @pytest.mark.parametrize("mode", list(HashMode))
    def test_all_hash_modes_agree(self, test_files, temp_dir, mode):
        report = DeduplicatorImpl().find_duplicates(DeduplicationParams(str(temp_dir), mode=mode))

        assert len(report.dupes) == 3

    def test_checksum_matches_mode(self, temp_dir):
        (temp_dir / "a").write_bytes(b"abc")
        (temp_dir / "b").write_bytes(b"abc")

        report = DeduplicatorImpl().find_duplicates(DeduplicationParams(str(temp_dir), mode=HashMode.MD5))

        assert list(report.dupes) == ["900150983cd24fb0d6963f7d28e17f72"]

    def test_scenario_same_size_different_content(self, temp_dir):
        """a.txt and b.txt hold "X", c.txt holds "Y": only {a, b} is reported."""
        a = temp_dir / "a.txt"
        b = temp_dir / "b.txt"
        c = temp_dir / "c.txt"
        a.write_bytes(b"X")
        b.write_bytes(b"X")
        c.write_bytes(b"Y")

        engine = DeduplicatorImpl()
        report = engine.find_duplicates(DeduplicationParams(str(temp_dir)))

        assert group_sets(report) == {paths(a, b)}
        assert engine.stats.files_hashed == 3  # c.txt shares the size bucket

    def test_scenario_non_recursive_ignores_subdirectory_copy(self, temp_dir):
        (temp_dir / "original.txt").write_bytes(b"payload")
        sub = temp_dir / "sub"
        sub.mkdir()
        (sub / "copy.txt").write_bytes(b"payload")

        report = DeduplicatorImpl().find_duplicates(DeduplicationParams(str(temp_dir)))

        assert report.is_empty()

    def test_idempotent_on_unchanged_tree(self, test_files, temp_dir):
        params = DeduplicationParams(str(temp_dir), recursive=True)

        first = DeduplicatorImpl().find_duplicates(params)
        second = DeduplicatorImpl().find_duplicates(params)

        assert group_sets(first) == group_sets(second)

    def test_parallel_workers_same_result(self, test_files, temp_dir):
        sequential = DeduplicatorImpl().find_duplicates(DeduplicationParams(str(temp_dir), recursive=True))
        parallel = DeduplicatorImpl().find_duplicates(
            DeduplicationParams(str(temp_dir), recursive=True, workers=4))

        assert sequential.dupes == parallel.dupes


class TestSizePreFilter:

    def test_unique_size_file_is_never_hashed(self, test_files, temp_dir):
        hashed = []
        real = HasherImpl.compute_checksum

        def spy(self, path):
            hashed.append(path)
            return real(self, path)

        with mock.patch.object(HasherImpl, "compute_checksum", spy):
            DeduplicatorImpl().find_duplicates(DeduplicationParams(str(temp_dir)))

        assert str(test_files["unique"]) not in hashed
        assert str(test_files["same_size"]) in hashed

    def test_distinct_sizes_never_compared(self, temp_dir):
        for i in range(5):
            (temp_dir / f"f{i}").write_bytes(b"x" * (i + 1))

        engine = DeduplicatorImpl()
        report = engine.find_duplicates(DeduplicationParams(str(temp_dir)))

        assert report.is_empty()
        assert engine.stats.files_hashed == 0

    def test_potential_duplicate_notification(self, test_files, temp_dir):
        buckets = []

        class Observer:
            def on_potential_duplicate(self, paths, size):
                buckets.append((size, len(paths)))

        DeduplicatorImpl(observer=Observer()).find_duplicates(DeduplicationParams(str(temp_dir)))

        assert sorted(buckets) == [(0, 2), (1024, 3), (2048, 2)]


class TestErrorHandling:

    def test_missing_root_is_fatal(self, temp_dir):
        with pytest.raises(RootStatError):
            DeduplicatorImpl().find_duplicates(DeduplicationParams(str(temp_dir / "nope")))

    def test_file_root_is_fatal(self, test_files):
        with pytest.raises(RootNotDirectoryError):
            DeduplicatorImpl().find_duplicates(DeduplicationParams(str(test_files["dup1_a"])))

    def test_hash_failure_recorded_and_group_pruned(self, temp_dir):
        """A pair that loses one member to a read error is not reported."""
        a = temp_dir / "a.txt"
        b = temp_dir / "b.txt"
        a.write_bytes(b"same")
        b.write_bytes(b"same")
        real = HasherImpl.compute_checksum

        def failing(self, path):
            if path == str(b):
                raise HashError(path, "Permission denied")
            return real(self, path)

        with mock.patch.object(HasherImpl, "compute_checksum", failing):
            report = DeduplicatorImpl().find_duplicates(DeduplicationParams(str(temp_dir)))

        assert report.is_empty()
        assert len(report.errors) == 1
        assert str(b) in report.errors[0]

    def test_hash_failure_keeps_other_members(self, temp_dir):
        files = [temp_dir / f"{n}.txt" for n in "abc"]
        for f in files:
            f.write_bytes(b"same")
        real = HasherImpl.compute_checksum

        def failing(self, path):
            if path == str(files[0]):
                raise HashError(path, "I/O error")
            return real(self, path)

        with mock.patch.object(HasherImpl, "compute_checksum", failing):
            report = DeduplicatorImpl().find_duplicates(DeduplicationParams(str(temp_dir)))

        assert group_sets(report) == {paths(files[1], files[2])}

    def test_unlistable_directory_recorded(self, test_files, temp_dir):
        real_scandir = os.scandir
        subdir = str(temp_dir / "subdir")

        def fake_scandir(path):
            if str(path) == subdir:
                raise PermissionError(13, "Permission denied", path)
            return real_scandir(path)

        with mock.patch("keepone.core.scanner.os.scandir", side_effect=fake_scandir):
            report = DeduplicatorImpl().find_duplicates(DeduplicationParams(str(temp_dir), recursive=True))

        assert len(report.dupes) == 3
        assert any(subdir in e for e in report.errors)


class TestDeduplicationCommand:

    def test_returns_report_and_stats(self, test_files, temp_dir):
        report, stats = DeduplicationCommand().execute(DeduplicationParams(str(temp_dir), recursive=True))

        assert stats.groups_found == len(report.dupes) == 3
        assert stats.duplicate_files == 7
        assert stats.files_seen == 9
        assert stats.directories_scanned == 2
        assert "Deduplication Statistics" in stats.print_summary()

    def test_fatal_error_propagates(self, temp_dir):
        with pytest.raises(ScanRootError):
            DeduplicationCommand().execute(DeduplicationParams(str(temp_dir / "missing")))
