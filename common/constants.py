"""Project-wide constants (buffer sizes, fragment naming, manifest defaults)."""

BUFFER_SIZE: int = 16000  # bytes requested per read from the source
DEFAULT_CHUNK_SIZE: int = 4 * 1024 * 1024  # 4 MiB default fragment size

DIGEST_HEX_LENGTH: int = 64  # SHA-256 hex digest
HASH_PREFIX_LENGTH: int = 20

FRAGMENT_SUFFIX: str = ".frag"
STAGING_PREFIX: str = ".staging-"
STAGING_SUFFIX: str = ".frag.tmp"

MANIFEST_NAME: str = "manifest.json"
MANIFEST_INDENT: int = 2

STDIO_SENTINEL: str = "-"

EXIT_OK: int = 0
EXIT_FAILURE: int = 1
EXIT_NO_COMMAND: int = 2
EXIT_BAD_ARGUMENTS: int = 3
