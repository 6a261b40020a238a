"""Splits a byte stream into fixed-size, content-hashed fragment files."""

import logging
import os
from pathlib import Path
from typing import BinaryIO, Tuple, Union

from common.constants import BUFFER_SIZE, DEFAULT_CHUNK_SIZE, MANIFEST_NAME
from fragmenter.digest import DigestStreamHasher
from fragmenter.fragment_storage import (
    discard_staging_file,
    fragment_filename,
    open_staging_file,
    publish_fragment,
)
from fragmenter.manifest import FragmentDescriptor, FragmentManifest, write_manifest

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FragmentWriter:
    """
    Streams a source into fragment files of at most chunk_size bytes.

    Each fragment is written to a staging file and renamed to
    '<ordinal>-<digest prefix>.frag' once complete. A fragment that
    received no bytes is discarded and gets no descriptor.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, buffer_size: int = BUFFER_SIZE):
        """
        Args:
            chunk_size: Maximum bytes per fragment
            buffer_size: Maximum bytes requested per read

        Raises:
            ValueError: If either size is not positive
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive")
        self.chunk_size = chunk_size
        self.buffer_size = buffer_size

    def fragment(self, source: BinaryIO, target_directory: PathLike) -> FragmentManifest:
        """
        Fragment a source stream into target_directory.

        Args:
            source: Binary readable stream (file, pipe or stdin)
            target_directory: Existing, writable directory

        Returns:
            Manifest listing fragments in production order

        Raises:
            FileNotFoundError: If target_directory does not exist
            NotADirectoryError: If target_directory is not a directory
            OSError: On any read, write or rename failure
        """
        directory = Path(target_directory)
        if not directory.exists():
            raise FileNotFoundError(f"Target directory does not exist: {directory}")
        if not directory.is_dir():
            raise NotADirectoryError(f"Target is not a directory: {directory}")

        global_hasher = DigestStreamHasher()
        fragment_hasher = DigestStreamHasher()
        descriptors: list[FragmentDescriptor] = []
        exhausted = False

        while not exhausted:
            remaining = self.chunk_size
            fragment_hasher.reset()
            handle, staging_path = open_staging_file(directory)
            try:
                with handle:
                    while remaining > 0:
                        data = source.read(min(self.buffer_size, remaining))
                        if not data:
                            exhausted = True
                            break
                        global_hasher.update(data)
                        fragment_hasher.update(data)
                        handle.write(data)
                        remaining -= len(data)
                    handle.flush()
                    os.fsync(handle.fileno())

                if fragment_hasher.bytes_hashed == 0:
                    discard_staging_file(staging_path)
                    continue

                digest = fragment_hasher.finalize()
                filename = fragment_filename(len(descriptors), digest)
                publish_fragment(staging_path, directory, filename)
            except BaseException:
                discard_staging_file(staging_path)
                raise

            descriptors.append(FragmentDescriptor(hash=digest, filename=filename))
            logger.debug(
                f"Fragment {filename} written [size={fragment_hasher.bytes_hashed}, hash={digest}]"
            )

        total_bytes = global_hasher.bytes_hashed
        manifest = FragmentManifest(hash=global_hasher.finalize(), fragments=descriptors)
        logger.info(
            f"Fragmented {total_bytes} bytes into {len(descriptors)} fragment(s) "
            f"[chunk_size={self.chunk_size}, hash={manifest.hash}]"
        )
        return manifest


def fragment(
    source: BinaryIO,
    target_directory: PathLike,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    buffer_size: int = BUFFER_SIZE,
) -> FragmentManifest:
    """
    Fragment a source stream into target_directory.

    Returns:
        Manifest of the emitted fragments and the whole-stream digest
    """
    return FragmentWriter(chunk_size, buffer_size).fragment(source, target_directory)


def fragment_to_directory(
    source: BinaryIO,
    target_directory: PathLike,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    manifest_name: str = MANIFEST_NAME,
    buffer_size: int = BUFFER_SIZE,
) -> Tuple[FragmentManifest, Path]:
    """
    Fragment a source and publish its manifest beside the fragments.

    The manifest is only written after every fragment has been renamed
    into place.

    Returns:
        Tuple of (manifest, path of the manifest file)
    """
    manifest = fragment(source, target_directory, chunk_size, buffer_size)
    manifest_path = write_manifest(manifest, Path(target_directory) / manifest_name)
    return manifest, manifest_path
