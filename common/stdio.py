"""Opens byte streams for reading or writing, honouring the '-' stdio sentinel."""

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Union

from common.constants import STDIO_SENTINEL

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def is_stdio(path: PathLike) -> bool:
    """Return True if path is the sentinel for stdin/stdout."""
    return str(path) == STDIO_SENTINEL


@contextmanager
def open_source(path: PathLike) -> Iterator[BinaryIO]:
    """
    Open a byte source for reading.

    Args:
        path: File path, or '-' for standard input

    Yields:
        Binary readable stream. Standard input is never closed.

    Raises:
        OSError: If the file cannot be opened
    """
    if is_stdio(path):
        logger.debug("Reading from standard input")
        yield sys.stdin.buffer
        return

    with open(path, 'rb') as f:
        yield f


@contextmanager
def open_target(path: PathLike) -> Iterator[BinaryIO]:
    """
    Open a byte sink for writing, creating or truncating it.

    Args:
        path: File path, or '-' for standard output

    Yields:
        Binary writable stream. Standard output is flushed, not closed.

    Raises:
        OSError: If the file cannot be created
    """
    if is_stdio(path):
        logger.debug("Writing to standard output")
        try:
            yield sys.stdout.buffer
        finally:
            sys.stdout.buffer.flush()
        return

    with open(path, 'wb') as f:
        yield f
