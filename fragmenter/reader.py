"""Reassembles fragments into a destination stream and verifies the result."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List, Union

from common.constants import BUFFER_SIZE
from common.exceptions import FragmentMissingError, VerificationError
from fragmenter.digest import DigestStreamHasher, HashingWriter, digests_match
from fragmenter.fragment_storage import fragment_exists, read_fragment_streaming
from fragmenter.manifest import FragmentManifest, read_manifest

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class DefragmentResult:
    """
    Outcome of a successful reconstruction.
    """
    digest: str
    fragment_count: int
    bytes_written: int


@dataclass(frozen=True)
class FragmentCheck:
    """
    Digest check of a single fragment file.
    """
    filename: str
    expected: str
    actual: str

    @property
    def ok(self) -> bool:
        return digests_match(self.expected, self.actual)


def _is_rereadable(stream: BinaryIO) -> bool:
    try:
        return stream.readable() and stream.seekable()
    except (AttributeError, ValueError):
        return False


def _rehash(stream: BinaryIO, length: int, buffer_size: int) -> str:
    """Hash the next `length` bytes of a stream, stopping early at EOF."""
    hasher = DigestStreamHasher()
    left = length
    while left > 0:
        data = stream.read(min(buffer_size, left))
        if not data:
            break
        hasher.update(data)
        left -= len(data)
    return hasher.finalize()


def ensure_fragments_present(manifest: FragmentManifest, directory: PathLike) -> None:
    """
    Check that every fragment named by the manifest is on disk.

    Raises:
        FragmentMissingError: Naming the first absent fragment
    """
    for descriptor in manifest.fragments:
        if not fragment_exists(directory, descriptor.filename):
            raise FragmentMissingError(descriptor.filename, str(directory))


def defragment(
    manifest: FragmentManifest,
    fragment_directory: PathLike,
    destination: BinaryIO,
    buffer_size: int = BUFFER_SIZE,
) -> DefragmentResult:
    """
    Concatenate fragments in manifest order into destination and verify the digest.

    A readable, seekable destination is re-read after the copy. Any other
    sink is verified with a digest teed off while writing.

    Args:
        manifest: Parsed fragment manifest
        fragment_directory: Directory holding the fragment files
        destination: Binary writable stream
        buffer_size: Bytes copied per read

    Returns:
        DefragmentResult with the verified digest

    Raises:
        FragmentMissingError: If any fragment is absent (checked before writing)
        VerificationError: If the reconstructed digest does not match manifest.hash.
            The destination is left as written.
        OSError: On any read or write failure
    """
    directory = Path(fragment_directory)
    ensure_fragments_present(manifest, directory)

    rereadable = _is_rereadable(destination)
    start_offset = destination.tell() if rereadable else 0

    tee_hasher = DigestStreamHasher()
    writer = HashingWriter(destination, tee_hasher)
    for descriptor in manifest.fragments:
        for piece in read_fragment_streaming(directory, descriptor.filename, buffer_size):
            writer.write(piece)
        logger.debug(f"Copied fragment {descriptor.filename}")
    writer.flush()

    bytes_written = tee_hasher.bytes_hashed
    if rereadable:
        destination.seek(start_offset)
        actual = _rehash(destination, bytes_written, buffer_size)
    else:
        actual = tee_hasher.finalize()

    if not digests_match(manifest.hash, actual):
        logger.error(f"Reconstruction digest mismatch: expected {manifest.hash}, got {actual}")
        raise VerificationError(manifest.hash, actual, subject="reconstructed stream")

    logger.info(
        f"Reconstructed {bytes_written} bytes from {len(manifest.fragments)} fragment(s) "
        f"[hash={actual}]"
    )
    return DefragmentResult(
        digest=actual,
        fragment_count=len(manifest.fragments),
        bytes_written=bytes_written,
    )


def defragment_from_manifest(
    manifest_path: PathLike,
    destination: BinaryIO,
    buffer_size: int = BUFFER_SIZE,
) -> DefragmentResult:
    """
    Load a manifest file and rebuild its stream from fragments beside it.

    The manifest is parsed before anything is written to destination.

    Raises:
        ManifestParseError: If the manifest is malformed
    """
    manifest_path = Path(manifest_path)
    manifest = read_manifest(manifest_path)
    return defragment(manifest, manifest_path.parent, destination, buffer_size)


def verify_fragments(
    manifest: FragmentManifest,
    fragment_directory: PathLike,
    buffer_size: int = BUFFER_SIZE,
) -> List[FragmentCheck]:
    """
    Recompute the digest of every fragment file without reconstructing.

    Raises:
        FragmentMissingError: If any fragment is absent
    """
    directory = Path(fragment_directory)
    checks = []
    for descriptor in manifest.fragments:
        hasher = DigestStreamHasher()
        for piece in read_fragment_streaming(directory, descriptor.filename, buffer_size):
            hasher.update(piece)
        checks.append(FragmentCheck(descriptor.filename, descriptor.hash, hasher.finalize()))
    return checks


def check_fragments(
    manifest: FragmentManifest,
    fragment_directory: PathLike,
    buffer_size: int = BUFFER_SIZE,
) -> int:
    """
    Verify every fragment file against its descriptor.

    Returns:
        Number of fragments checked

    Raises:
        VerificationError: Naming the first fragment whose digest differs
    """
    checks = verify_fragments(manifest, fragment_directory, buffer_size)
    for check in checks:
        if not check.ok:
            raise VerificationError(check.expected, check.actual, subject=f"fragment {check.filename}")
    return len(checks)
