"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal, Optional

from common.constants import STDIO_SENTINEL


@dataclass(frozen=True)
class HashCommand:
    """Hash a source and write the digest."""

    source: str
    target: str = STDIO_SENTINEL
    command: Literal["hash"] = "hash"


@dataclass(frozen=True)
class VerifyCommand:
    """Verify a payload against a stored digest."""

    payload: str
    hash_source: str
    command: Literal["verify"] = "verify"


@dataclass(frozen=True)
class FragmentCommand:
    """Split a source into fragments in a target directory."""

    source: str
    target_dir: str
    chunk_size: Optional[int] = None
    command: Literal["fragment"] = "fragment"


@dataclass(frozen=True)
class DefragmentCommand:
    """Rebuild a stream from a manifest and its fragments."""

    manifest: str
    destination: str = STDIO_SENTINEL
    command: Literal["defragment"] = "defragment"


@dataclass(frozen=True)
class CheckCommand:
    """Verify fragment files against their manifest."""

    manifest: str
    command: Literal["check"] = "check"


@dataclass(frozen=True)
class CleanCommand:
    """Remove orphaned staging files."""

    target_dir: str
    command: Literal["clean"] = "clean"


CommandRequest = (
    HashCommand
    | VerifyCommand
    | FragmentCommand
    | DefragmentCommand
    | CheckCommand
    | CleanCommand
)
