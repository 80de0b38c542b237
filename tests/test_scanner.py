"""
Unit tests for FileScannerImpl.
Verifies file discovery, recursion, skipped entry types and error accumulation.
"""
import os
import sys
import pytest
from pathlib import Path
from unittest import mock

from keepone.core.errors import RootStatError, RootNotDirectoryError
from keepone.core.scanner import FileScannerImpl


def scanned_names(result):
    return sorted(Path(f.path).name for f in result.files)


class TestFileScannerImpl:
    """Test directory walking with and without recursion."""

    def test_non_recursive_scans_only_root(self, test_files, temp_dir):
        """Subdirectory files must not be scanned when recursion is off."""
        result = FileScannerImpl(str(temp_dir)).scan()

        assert "dup_in_subdir.txt" not in scanned_names(result)
        assert len(result.files) == 8
        assert result.directories == 1

    def test_recursive_scans_subdirectories(self, test_files, temp_dir):
        result = FileScannerImpl(str(temp_dir), recursive=True).scan()

        assert "dup_in_subdir.txt" in scanned_names(result)
        assert len(result.files) == 9
        assert result.directories == 2

    def test_records_sizes(self, test_files, temp_dir):
        result = FileScannerImpl(str(temp_dir)).scan()
        sizes = {Path(f.path).name: f.size for f in result.files}

        assert sizes["dup1_a.txt"] == 1024
        assert sizes["dup2_a.txt"] == 2048
        assert sizes["unique.txt"] == 2500

    def test_zero_length_files_are_included(self, test_files, temp_dir):
        result = FileScannerImpl(str(temp_dir)).scan()
        empty = [f for f in result.files if f.size == 0]

        assert len(empty) == 2

    def test_files_recorded_before_subdirectory_contents(self, temp_dir):
        (temp_dir / "a").mkdir()
        (temp_dir / "a" / "inner.txt").write_bytes(b"x")
        (temp_dir / "z.txt").write_bytes(b"y")

        result = FileScannerImpl(str(temp_dir), recursive=True).scan()

        assert scanned_names(result) == ["inner.txt", "z.txt"]
        assert Path(result.files[0].path).name == "z.txt"

    def test_deeply_nested_tree(self, temp_dir):
        current = temp_dir
        for depth in range(30):
            current = current / f"level{depth}"
            current.mkdir()
        (current / "deep.txt").write_bytes(b"deep")

        result = FileScannerImpl(str(temp_dir), recursive=True).scan()

        assert scanned_names(result) == ["deep.txt"]
        assert result.directories == 31

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges on Windows")
    def test_symlinks_are_skipped(self, temp_dir):
        """Symbolic links are neither files nor directories for the scanner."""
        target = temp_dir / "real.txt"
        target.write_bytes(b"content")
        os.symlink(target, temp_dir / "link.txt")
        linked_dir = temp_dir / "real_dir"
        linked_dir.mkdir()
        (linked_dir / "inside.txt").write_bytes(b"inside")
        os.symlink(linked_dir, temp_dir / "dir_link")

        result = FileScannerImpl(str(temp_dir), recursive=True).scan()

        assert scanned_names(result) == ["inside.txt", "real.txt"]

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="requires named pipes")
    def test_special_files_are_skipped(self, temp_dir):
        os.mkfifo(temp_dir / "pipe")
        (temp_dir / "regular.txt").write_bytes(b"x")

        result = FileScannerImpl(str(temp_dir)).scan()

        assert scanned_names(result) == ["regular.txt"]

    def test_observer_notified_for_each_directory(self, test_files, temp_dir):
        entered = []

        class Observer:
            def on_enter_directory(self, path):
                entered.append(path)

        FileScannerImpl(str(temp_dir), recursive=True, observer=Observer()).scan()

        assert entered == [str(temp_dir), str(temp_dir / "subdir")]


class TestScannerErrors:
    """Root problems are fatal; directory problems are collected."""

    def test_missing_root_raises(self, temp_dir):
        with pytest.raises(RootStatError):
            FileScannerImpl(str(temp_dir / "missing")).scan()

    def test_file_root_raises(self, temp_dir):
        f = temp_dir / "file.txt"
        f.write_bytes(b"x")

        with pytest.raises(RootNotDirectoryError):
            FileScannerImpl(str(f)).scan()

    def test_unlistable_directory_is_an_error_not_an_exception(self, temp_dir):
        """A directory that cannot be listed is reported; siblings are still scanned."""
        locked = temp_dir / "locked"
        locked.mkdir()
        (locked / "hidden.txt").write_bytes(b"hidden")
        sibling = temp_dir / "open"
        sibling.mkdir()
        (sibling / "visible.txt").write_bytes(b"visible")
        (temp_dir / "top.txt").write_bytes(b"top")

        real_scandir = os.scandir

        def fake_scandir(path):
            if str(path) == str(locked):
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        with mock.patch("keepone.core.scanner.os.scandir", side_effect=fake_scandir):
            result = FileScannerImpl(str(temp_dir), recursive=True).scan()

        assert scanned_names(result) == ["top.txt", "visible.txt"]
        assert len(result.errors) == 1
        assert str(locked) in result.errors[0]

    def test_unlistable_root_contents_reported(self, temp_dir):
        with mock.patch("keepone.core.scanner.os.scandir",
                        side_effect=PermissionError(13, "Permission denied")):
            result = FileScannerImpl(str(temp_dir)).scan()

        assert result.files == []
        assert len(result.errors) == 1
