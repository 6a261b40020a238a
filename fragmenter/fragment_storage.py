"""Manages fragment files on disk: staging, publishing, reading and cleanup."""

import logging
import os
import tempfile
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, Tuple, Union

from common.constants import (
    FRAGMENT_SUFFIX,
    HASH_PREFIX_LENGTH,
    STAGING_PREFIX,
    STAGING_SUFFIX,
)
from common.exceptions import FragmentMissingError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def fragment_filename(index: int, digest: str) -> str:
    """
    Build the on-disk name of a fragment.

    Args:
        index: Zero-based ordinal among emitted fragments
        digest: Hex digest of the fragment's bytes

    Returns:
        Name of the form '<index>-<first 20 hex chars>.frag'
    """
    return f"{index}-{digest[:HASH_PREFIX_LENGTH]}{FRAGMENT_SUFFIX}"


def get_fragment_path(directory: PathLike, filename: str) -> Path:
    """
    Get file path for a fragment.

    Args:
        directory: Directory holding the manifest and its fragments
        filename: Fragment file name from the manifest

    Returns:
        Path object for fragment file
    """
    return Path(directory) / filename


def open_staging_file(directory: PathLike) -> Tuple[BinaryIO, Path]:
    """
    Create a uniquely named staging file in the target directory.

    Args:
        directory: Existing, writable directory

    Returns:
        Tuple of (open binary handle, path of the staging file)

    Raises:
        OSError: If the file cannot be created
    """
    fd, tmp_path = tempfile.mkstemp(prefix=STAGING_PREFIX, suffix=STAGING_SUFFIX, dir=directory)
    return os.fdopen(fd, 'wb'), Path(tmp_path)


def publish_fragment(staging_path: PathLike, directory: PathLike, filename: str) -> Path:
    """
    Rename a fully written staging file to its final fragment name.

    Raises:
        OSError: If the rename fails
    """
    final_path = get_fragment_path(directory, filename)
    os.replace(staging_path, final_path)
    return final_path


def discard_staging_file(staging_path: PathLike) -> bool:
    """
    Remove a staging file.

    Returns:
        True if file was deleted, False if it didn't exist
    """
    path = Path(staging_path)
    if path.exists():
        path.unlink()
        return True
    return False


def open_fragment(directory: PathLike, filename: str) -> BinaryIO:
    """
    Open a fragment for reading.

    Raises:
        FragmentMissingError: If the fragment does not exist
        OSError: If the open fails for any other reason
    """
    filepath = get_fragment_path(directory, filename)
    try:
        return open(filepath, 'rb')
    except FileNotFoundError as e:
        raise FragmentMissingError(filename, str(directory)) from e


def read_fragment_streaming(
    directory: PathLike, filename: str, piece_size: int = 64 * 1024
) -> Iterator[bytes]:
    """
    Stream fragment data in pieces.

    Args:
        directory: Directory holding the fragment
        filename: Fragment file name
        piece_size: Size of each piece in bytes (default 64KB)

    Yields:
        Fragment data pieces

    Raises:
        FragmentMissingError: If fragment does not exist
        OSError: If read operation fails
    """
    with open_fragment(directory, filename) as f:
        while True:
            piece = f.read(piece_size)
            if not piece:
                break
            yield piece


def fragment_exists(directory: PathLike, filename: str) -> bool:
    return get_fragment_path(directory, filename).is_file()


def get_fragment_size(directory: PathLike, filename: str) -> Optional[int]:
    """
    Get size of fragment file in bytes.

    Returns:
        Size in bytes, or None if fragment doesn't exist
    """
    filepath = get_fragment_path(directory, filename)
    if filepath.exists():
        return filepath.stat().st_size
    return None


def list_fragments(directory: PathLike) -> list[str]:
    """
    List published fragment file names in a directory.

    Returns:
        Sorted list of names ending in .frag
    """
    directory = Path(directory)
    if not directory.exists():
        return []
    return sorted(
        p.name for p in directory.glob(f"*{FRAGMENT_SUFFIX}")
        if not p.name.startswith(STAGING_PREFIX)
    )


def list_staging_files(directory: PathLike) -> list[Path]:
    """List staging files left behind by interrupted runs."""
    directory = Path(directory)
    if not directory.exists():
        return []
    return sorted(directory.glob(f"{STAGING_PREFIX}*{STAGING_SUFFIX}"))


def remove_staging_files(directory: PathLike) -> int:
    """
    Delete orphaned staging files.

    Only safe when no fragmentation run is writing into the directory.

    Returns:
        Number of files removed
    """
    removed = 0
    for path in list_staging_files(directory):
        if discard_staging_file(path):
            logger.info(f"Removed orphaned staging file {path.name}")
            removed += 1
    return removed
