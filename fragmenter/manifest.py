"""Pydantic schema for fragment manifests and their JSON (de)serialization."""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import List, Union

from pydantic import BaseModel, ValidationError, field_validator, model_validator

from common.constants import DIGEST_HEX_LENGTH, MANIFEST_INDENT
from common.exceptions import ManifestParseError

logger = logging.getLogger(__name__)

_HEX_DIGEST = re.compile(rf'^[0-9a-f]{{{DIGEST_HEX_LENGTH}}}$')


def _validate_digest(value: str) -> str:
    value = value.strip().lower()
    if not _HEX_DIGEST.match(value):
        raise ValueError(f"not a SHA-256 hex digest: {value!r}")
    return value


class FragmentDescriptor(BaseModel):
    """One emitted fragment: its digest and its file name beside the manifest."""
    hash: str
    filename: str

    @field_validator('hash')
    @classmethod
    def _check_hash(cls, value: str) -> str:
        return _validate_digest(value)

    @field_validator('filename')
    @classmethod
    def _check_filename(cls, value: str) -> str:
        if not value or value in ('.', '..') or '/' in value or '\\' in value:
            raise ValueError(f"fragment filename must be a bare file name: {value!r}")
        return value


class FragmentManifest(BaseModel):
    """
    Ordered index of fragments plus the digest of the whole original stream.

    Fragment order is the concatenation order used to rebuild the stream.
    """
    hash: str
    fragments: List[FragmentDescriptor] = []

    @field_validator('hash')
    @classmethod
    def _check_hash(cls, value: str) -> str:
        return _validate_digest(value)

    @model_validator(mode='after')
    def _check_unique_filenames(self) -> 'FragmentManifest':
        seen = set()
        for descriptor in self.fragments:
            if descriptor.filename in seen:
                raise ValueError(f"duplicate fragment filename: {descriptor.filename}")
            seen.add(descriptor.filename)
        return self


def dump_manifest(manifest: FragmentManifest) -> str:
    """Serialize a manifest to indented JSON with a trailing newline."""
    return manifest.model_dump_json(indent=MANIFEST_INDENT) + '\n'


def load_manifest(text: Union[str, bytes]) -> FragmentManifest:
    """
    Parse a manifest from JSON text.

    Raises:
        ManifestParseError: If the text is not valid JSON or does not match the schema
    """
    try:
        return FragmentManifest.model_validate_json(text)
    except ValidationError as e:
        raise ManifestParseError(f"Invalid manifest: {e}") from e


def write_manifest(manifest: FragmentManifest, path: Union[str, Path]) -> Path:
    """
    Write a manifest atomically: a temporary file beside it is renamed into place.

    Args:
        manifest: Manifest to persist
        path: Destination path

    Returns:
        Path of the written manifest

    Raises:
        OSError: If the write or rename fails
    """
    path = Path(path)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as handle:
            handle.write(dump_manifest(manifest))
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
    logger.debug(f"Manifest written to {path} ({len(manifest.fragments)} fragments)")
    return path


def read_manifest(path: Union[str, Path]) -> FragmentManifest:
    """
    Read and parse a manifest file.

    Raises:
        OSError: If the file cannot be read
        ManifestParseError: If the contents are malformed
    """
    return load_manifest(Path(path).read_bytes())
