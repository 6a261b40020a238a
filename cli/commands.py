"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from common.stdio import is_stdio, open_source, open_target
from cli.config import Config
from cli.models import (
    CheckCommand,
    CleanCommand,
    CommandRequest,
    DefragmentCommand,
    FragmentCommand,
    HashCommand,
    VerifyCommand,
)
from cli.utils import format_file_size, short_digest
from fragmenter.digest import hash_to, verify_stream
from fragmenter.fragment_storage import get_fragment_size, list_fragments, remove_staging_files
from fragmenter.manifest import read_manifest
from fragmenter.reader import check_fragments, defragment, ensure_fragments_present
from fragmenter.writer import fragment_to_directory

logger = get_logger(__name__)


_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get or create global Config instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        logger.debug("Loading CLI configuration")
        _config = Config()
    return _config


def handle_hash(cmd: HashCommand, config: Optional[Config] = None) -> str:
    """
    Handle 'hash' command.

    Args:
        cmd: HashCommand with source and target
        config: Optional Config for dependency injection (testing)

    Returns:
        Status message (empty when the digest went to stdout)
    """
    if config is None:
        config = get_config()
    with open_source(cmd.source) as source, open_target(cmd.target) as target:
        digest = hash_to(source, target, config.get_buffer_size())
    logger.debug(f"Hashed {cmd.source} -> {digest}")
    if is_stdio(cmd.target):
        return ""
    return f"Wrote SHA-256 of {cmd.source} to {cmd.target}"


def handle_verify(cmd: VerifyCommand, config: Optional[Config] = None) -> str:
    """
    Handle 'verify' command.

    Raises:
        VerificationError: If the payload does not match the stored digest
    """
    if config is None:
        config = get_config()
    with open_source(cmd.payload) as payload, open_source(cmd.hash_source) as hash_source:
        digest = verify_stream(payload, hash_source, config.get_buffer_size())
    return f"OK: {cmd.payload} matches {digest}"


def handle_fragment(cmd: FragmentCommand, config: Optional[Config] = None) -> str:
    """
    Handle 'fragment' command.

    Args:
        cmd: FragmentCommand with source, target directory and optional chunk size
        config: Optional Config for dependency injection (testing)

    Returns:
        Summary of the written manifest
    """
    if config is None:
        config = get_config()
    chunk_size = cmd.chunk_size if cmd.chunk_size is not None else config.get_chunk_size()
    logger.info(f"Executing fragment command: source={cmd.source} target={cmd.target_dir} chunk_size={chunk_size}")

    with open_source(cmd.source) as source:
        manifest, manifest_path = fragment_to_directory(
            source,
            cmd.target_dir,
            chunk_size=chunk_size,
            manifest_name=config.get_manifest_name(),
            buffer_size=config.get_buffer_size(),
        )

    return (
        f"Wrote {len(manifest.fragments)} fragment(s) of up to {format_file_size(chunk_size)} "
        f"(hash {short_digest(manifest.hash)}...) - manifest: {manifest_path}"
    )


def handle_defragment(cmd: DefragmentCommand, config: Optional[Config] = None) -> str:
    """
    Handle 'defragment' command.

    The manifest is parsed and every fragment located before the destination
    is opened, so neither failure creates or truncates the destination.

    Raises:
        ManifestParseError: If the manifest is malformed
        FragmentMissingError: If a fragment file is absent
        VerificationError: If the rebuilt stream does not match (output is kept)
    """
    if config is None:
        config = get_config()
    manifest_path = Path(cmd.manifest)
    manifest = read_manifest(manifest_path)
    ensure_fragments_present(manifest, manifest_path.parent)
    logger.info(f"Executing defragment command: manifest={manifest_path} destination={cmd.destination}")

    with open_target(cmd.destination) as destination:
        result = defragment(manifest, manifest_path.parent, destination, config.get_buffer_size())

    return (
        f"Restored {format_file_size(result.bytes_written)} from {result.fragment_count} "
        f"fragment(s); hash verified ({short_digest(result.digest)}...)"
    )


def handle_check(cmd: CheckCommand, config: Optional[Config] = None) -> str:
    """
    Handle 'check' command.

    Reports the total size of the checked fragments and any published
    fragment files in the directory that the manifest does not reference.

    Raises:
        VerificationError: Naming the first corrupt fragment
    """
    if config is None:
        config = get_config()
    manifest_path = Path(cmd.manifest)
    manifest = read_manifest(manifest_path)
    directory = manifest_path.parent
    count = check_fragments(manifest, directory, config.get_buffer_size())

    total_size = sum(get_fragment_size(directory, f.filename) or 0 for f in manifest.fragments)
    referenced = {f.filename for f in manifest.fragments}
    unreferenced = [name for name in list_fragments(directory) if name not in referenced]
    if unreferenced:
        logger.warning(f"Fragments not referenced by {manifest_path.name}: {', '.join(unreferenced)}")

    message = f"All {count} fragment(s) ({format_file_size(total_size)}) match {manifest_path.name}"
    if unreferenced:
        message += f"; {len(unreferenced)} unreferenced fragment(s) in {directory}"
    return message


def handle_clean(cmd: CleanCommand, config: Optional[Config] = None) -> str:
    """
    Handle 'clean' command.

    Returns:
        Number of staging files removed
    """
    removed = remove_staging_files(cmd.target_dir)
    return f"Removed {removed} staging file(s) from {cmd.target_dir}"


def dispatch_command(cmd_obj: CommandRequest, config: Optional[Config] = None) -> str:
    """Dispatch parsed command to appropriate handler."""
    if isinstance(cmd_obj, HashCommand):
        return handle_hash(cmd_obj, config)
    elif isinstance(cmd_obj, VerifyCommand):
        return handle_verify(cmd_obj, config)
    elif isinstance(cmd_obj, FragmentCommand):
        return handle_fragment(cmd_obj, config)
    elif isinstance(cmd_obj, DefragmentCommand):
        return handle_defragment(cmd_obj, config)
    elif isinstance(cmd_obj, CheckCommand):
        return handle_check(cmd_obj, config)
    elif isinstance(cmd_obj, CleanCommand):
        return handle_clean(cmd_obj, config)
    else:
        raise TypeError(f"Unknown command type: {type(cmd_obj)}")
