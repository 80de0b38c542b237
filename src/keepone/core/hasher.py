"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/hasher.py
Implements whole-file content hashing with pluggable hash algorithms.

Files are streamed in fixed-size chunks, so memory use does not depend on
file size. The checksum is returned as a lowercase hex string.
"""

import hashlib
import logging
from typing import Dict, Optional

import xxhash

from keepone.core.errors import HashError
from keepone.core.events import notify
from keepone.core.interfaces import Hasher, HashAlgorithm, Digest, ScanObserver
from keepone.core.models import HashMode

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024  # 1 MiB per read


# Use the same way to implement and use any other hashing algorithm
class MD5AlgorithmImpl(HashAlgorithm):
    @staticmethod
    def new() -> Digest:
        return hashlib.md5()


class SHA256AlgorithmImpl(HashAlgorithm):
    @staticmethod
    def new() -> Digest:
        return hashlib.sha256()


class XXHashAlgorithmImpl(HashAlgorithm):
    @staticmethod
    def new() -> Digest:
        return xxhash.xxh64()


HASH_ALGORITHMS: Dict[HashMode, HashAlgorithm] = {
    HashMode.MD5: MD5AlgorithmImpl(),
    HashMode.SHA256: SHA256AlgorithmImpl(),
    HashMode.XXH64: XXHashAlgorithmImpl(),
}


def get_algorithm(mode: HashMode) -> HashAlgorithm:
    """Returns the algorithm implementation for a hash mode."""
    try:
        return HASH_ALGORITHMS[mode]
    except KeyError:
        raise ValueError(f"Unsupported hash mode: {mode!r}")


class HasherImpl(Hasher):
    """
    A hasher implementation that supports any algorithm via the HashAlgorithm interface.

    Attributes:
        algorithm: Digest factory used for every file
        observer: Optional ScanObserver told before and after each file is hashed
        chunk_size: Bytes read per I/O call
    """

    def __init__(
        self,
        algorithm: HashAlgorithm,
        observer: Optional[ScanObserver] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE
    ):
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        self.algorithm = algorithm
        self.observer = observer
        self.chunk_size = chunk_size

    def compute_checksum(self, path: str) -> str:
        """
        Streams the file through the digest and returns its hex checksum.

        Raises:
            HashError: if the file cannot be opened or read
        """
        notify(self.observer, "on_hashing", path)

        digest = self.algorithm.new()
        try:
            with open(path, 'rb') as f:
                for chunk in iter(lambda: f.read(self.chunk_size), b''):
                    digest.update(chunk)
        except OSError as e:
            logger.debug(f"Failed to hash {path}: {e}")
            raise HashError(path, str(e)) from e

        checksum = digest.hexdigest()
        notify(self.observer, "on_hashed", path, checksum)
        return checksum
