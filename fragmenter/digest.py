"""Provides SHA-256 digest calculation over byte streams and verification helpers."""

import errno
import hashlib
import logging
from typing import BinaryIO

from common.constants import BUFFER_SIZE
from common.exceptions import VerificationError

logger = logging.getLogger(__name__)


def compute_checksum(data: bytes) -> str:
    """
    Compute SHA-256 checksum for given data.

    Args:
        data: Bytes to compute checksum for

    Returns:
        Lowercase hexadecimal string representation of SHA-256 hash
    """
    return hashlib.sha256(data).hexdigest()


def normalize_digest(digest: str) -> str:
    """Strip surrounding whitespace and lowercase a hex digest."""
    return digest.strip().lower()


def digests_match(expected: str, actual: str) -> bool:
    """
    Compare two hex digests, ignoring case and surrounding whitespace.

    Args:
        expected: Expected SHA-256 digest (hex string)
        actual: Computed SHA-256 digest (hex string)

    Returns:
        True if digests are equal, False otherwise
    """
    return normalize_digest(expected) == normalize_digest(actual)


class DigestStreamHasher:
    """
    Calculate a SHA-256 digest incrementally over streamed data.

    Usage:
        hasher = DigestStreamHasher()
        hasher.update(piece1)
        hasher.update(piece2)
        digest = hasher.finalize()

    A finalized hasher rejects further use until reset() is called.
    """

    def __init__(self):
        """Initialize a new incremental hasher."""
        self._hasher = hashlib.sha256()
        self._finalized = False
        self._bytes_hashed = 0

    @property
    def bytes_hashed(self) -> int:
        """Number of bytes folded in since the last reset."""
        return self._bytes_hashed

    @property
    def finalized(self) -> bool:
        return self._finalized

    def update(self, data: bytes) -> None:
        """
        Fold bytes into the running digest.

        Args:
            data: Bytes actually produced by a read, never a whole fixed-size buffer

        Raises:
            ValueError: If the hasher was already finalized
        """
        if self._finalized:
            raise ValueError("Cannot update after finalization")
        self._hasher.update(data)
        self._bytes_hashed += len(data)

    def finalize(self) -> str:
        """
        Finalize digest calculation and return result.

        Returns:
            Lowercase hexadecimal string representation of SHA-256 hash

        Raises:
            ValueError: If the hasher was already finalized
        """
        if self._finalized:
            raise ValueError("Hasher already finalized; call reset() first")
        self._finalized = True
        return self._hasher.hexdigest()

    def reset(self) -> None:
        """Reset hasher to initial state."""
        self._hasher = hashlib.sha256()
        self._finalized = False
        self._bytes_hashed = 0


class HashingReader:
    """Readable wrapper that feeds every byte it returns into a hasher."""

    def __init__(self, stream: BinaryIO, hasher: DigestStreamHasher):
        self._stream = stream
        self.hasher = hasher

    def read(self, size: int = -1) -> bytes:
        data = self._stream.read(size)
        if data:
            self.hasher.update(data)
        return data


class HashingWriter:
    """Writable wrapper that tees every byte written into a hasher."""

    def __init__(self, stream: BinaryIO, hasher: DigestStreamHasher):
        self._stream = stream
        self.hasher = hasher

    def write(self, data: bytes) -> int:
        """
        Write all of data, hashing only the bytes the sink accepted.

        Raises:
            BlockingIOError: If a non-blocking raw sink accepts nothing
        """
        view = memoryview(data)
        while view:
            written = self._stream.write(view)
            # A raw sink returns None when it would block
            if written is None:
                raise BlockingIOError(errno.EAGAIN, "sink accepted no bytes", len(data) - len(view))
            self.hasher.update(view[:written])
            view = view[written:]
        return len(data)

    def flush(self) -> None:
        self._stream.flush()


def hash_stream(stream: BinaryIO, buffer_size: int = BUFFER_SIZE) -> str:
    """
    Compute the SHA-256 digest of everything remaining in a stream.

    Args:
        stream: Binary readable stream
        buffer_size: Bytes requested per read

    Returns:
        Lowercase hex digest
    """
    if buffer_size <= 0:
        raise ValueError("buffer_size must be positive")
    hasher = DigestStreamHasher()
    reader = HashingReader(stream, hasher)
    while reader.read(buffer_size):
        pass
    logger.debug(f"Hashed {hasher.bytes_hashed} bytes")
    return hasher.finalize()


def hash_to(source: BinaryIO, target: BinaryIO, buffer_size: int = BUFFER_SIZE) -> str:
    """
    Hash a source stream and write the hex digest to a target stream.

    Returns:
        The digest that was written
    """
    digest = hash_stream(source, buffer_size)
    target.write(digest.encode('ascii'))
    target.flush()
    return digest


def verify_stream(
    payload: BinaryIO,
    expected_source: BinaryIO,
    buffer_size: int = BUFFER_SIZE,
) -> str:
    """
    Check a payload stream against a digest stored in another stream.

    Args:
        payload: Binary stream to hash
        expected_source: Binary stream holding the expected hex digest
        buffer_size: Bytes requested per read

    Returns:
        The matching digest

    Raises:
        VerificationError: If the digests differ
    """
    expected = normalize_digest(expected_source.read().decode('ascii', errors='replace'))
    actual = hash_stream(payload, buffer_size)
    if not digests_match(expected, actual):
        raise VerificationError(expected, actual, subject="payload")
    return actual
