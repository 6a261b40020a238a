"""Shared pytest fixtures for all tests."""

import io
import logging
import random

import pytest

from cli.config import Config


class ShortReadStream(io.RawIOBase):
    """
    Byte source that never returns more than `max_read` bytes per call,
    like a pipe delivering partial reads.
    """

    def __init__(self, data: bytes, max_read: int):
        self._data = data
        self._pos = 0
        self._max_read = max_read
        self.read_sizes = []

    def readable(self):
        return True

    def read(self, size=-1):
        if size is None or size < 0:
            size = len(self._data) - self._pos
        n = min(size, self._max_read, len(self._data) - self._pos)
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        self.read_sizes.append(n)
        return chunk


class NonSeekableSink(io.RawIOBase):
    """Write-only sink that cannot be re-read, like a pipe or socket."""

    def __init__(self):
        self.buffer = bytearray()

    def writable(self):
        return True

    def seekable(self):
        return False

    def readable(self):
        return False

    def write(self, data):
        self.buffer.extend(data)
        return len(data)


@pytest.fixture
def fragment_dir(tmp_path):
    """
    Create an empty directory to receive fragments.

    Returns:
        Path to the directory
    """
    directory = tmp_path / 'parts'
    directory.mkdir()
    return directory


@pytest.fixture
def sample_bytes():
    """
    Deterministic pseudo-random payload of 10,000 bytes.
    """
    rng = random.Random(1234)
    return bytes(rng.getrandbits(8) for _ in range(10_000))


@pytest.fixture
def short_reads():
    """Factory for sources that deliver partial reads."""
    return ShortReadStream


@pytest.fixture
def non_seekable_sink():
    """Fresh write-only sink."""
    return NonSeekableSink()


@pytest.fixture
def temp_config(tmp_path):
    """
    Create temporary config instance.

    Returns:
        Config instance backed by a file under tmp_path
    """
    return Config(tmp_path / '.fragmenter' / 'config.json')


@pytest.fixture(autouse=True)
def reset_component_loggers():
    """Drop handlers added by setup_logging so each test gets fresh streams."""
    yield
    for name in ('cli', 'fragmenter', 'common'):
        component_logger = logging.getLogger(name)
        for handler in list(component_logger.handlers):
            component_logger.removeHandler(handler)
        component_logger.propagate = True
