"""
Shared fixtures for keepone tests.
Creates isolated temporary directories with controlled test files.
"""
import pytest
import tempfile
from pathlib import Path
from typing import Dict
import sys

# Add src/ to sys.path so 'keepone' is importable without installing
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_files(temp_dir) -> Dict[str, Path]:
    """
    Creates controlled test files for duplicate detection scenarios:
    - 2 identical files of 1KB (duplicates)
    - 2 identical files of 2KB (duplicates)
    - 1 file of 1KB with different content (same size, unique content)
    - 1 file with a unique size
    - 2 empty files (empty files are duplicates of each other)
    - subdir/ with a copy of the 1KB duplicate
    """
    files = {}

    # Duplicate pair #1 (1KB of 'A')
    content_a = b"A" * 1024
    files["dup1_a"] = temp_dir / "dup1_a.txt"
    files["dup1_b"] = temp_dir / "dup1_b.txt"
    files["dup1_a"].write_bytes(content_a)
    files["dup1_b"].write_bytes(content_a)

    # Duplicate pair #2 (2KB of 'B')
    content_b = b"B" * 2048
    files["dup2_a"] = temp_dir / "dup2_a.txt"
    files["dup2_b"] = temp_dir / "dup2_b.txt"
    files["dup2_a"].write_bytes(content_b)
    files["dup2_b"].write_bytes(content_b)

    # Same size as pair #1, different content
    files["same_size"] = temp_dir / "same_size.txt"
    files["same_size"].write_bytes(b"C" * 1024)

    # Unique size
    files["unique"] = temp_dir / "unique.txt"
    files["unique"].write_bytes(b"D" * 2500)

    # Empty files
    files["empty1"] = temp_dir / "empty1.txt"
    files["empty2"] = temp_dir / "empty2.txt"
    files["empty1"].write_bytes(b"")
    files["empty2"].write_bytes(b"")

    # Subdirectory with a duplicate of pair #1
    subdir = temp_dir / "subdir"
    subdir.mkdir()
    files["sub_dup"] = subdir / "dup_in_subdir.txt"
    files["sub_dup"].write_bytes(content_a)

    return files


@pytest.fixture
def make_group(temp_dir):
    """Factory: writes `count` identical files named <prefix>1..N and returns their paths."""
    def _make(prefix: str = "f", count: int = 3, content: bytes = b"same content") -> list:
        paths = []
        for i in range(1, count + 1):
            path = temp_dir / f"{prefix}{i}.txt"
            path.write_bytes(content)
            paths.append(str(path))
        return paths
    return _make
