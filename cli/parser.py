"""Command parser for CLI input."""

import re
import shlex
from typing import Sequence

from cli.models import (
    CheckCommand,
    CleanCommand,
    CommandRequest,
    DefragmentCommand,
    FragmentCommand,
    HashCommand,
    VerifyCommand,
)


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


_SIZE_PATTERN = re.compile(r'^(\d+)([KMG]?)(I?B)?$', re.IGNORECASE)
_SIZE_UNITS = {'': 1, 'K': 1024, 'M': 1024 ** 2, 'G': 1024 ** 3}


def parse_size(text: str) -> int:
    """
    Parse a byte count such as '4096', '64K' or '16MiB'.

    Raises:
        ParseError: If the size is malformed or not positive
    """
    match = _SIZE_PATTERN.match(text.strip())
    if not match:
        raise ParseError(f"Invalid size: {text}")
    size = int(match.group(1)) * _SIZE_UNITS[match.group(2).upper()]
    if size <= 0:
        raise ParseError(f"Size must be positive: {text}")
    return size


def parse_command(input_line: str) -> CommandRequest:
    """Parse a line of user input into a CommandRequest object.

    Args:
        input_line: Raw user input from the shell

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    return parse_tokens(tokens)


def parse_tokens(tokens: Sequence[str]) -> CommandRequest:
    """Parse already-split arguments (e.g. sys.argv[1:]) into a CommandRequest.

    Raises:
        ParseError: If the command is unknown or its arguments are invalid
    """
    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]
    args = list(tokens[1:])

    if command_name == "hash":
        return _parse_hash(args)
    elif command_name == "verify":
        return _parse_verify(args)
    elif command_name == "fragment":
        return _parse_fragment(args)
    elif command_name == "defragment":
        return _parse_defragment(args)
    elif command_name == "check":
        return _parse_check(args)
    elif command_name == "clean":
        return _parse_clean(args)
    else:
        raise ParseError(f"Invalid command '{command_name}'")


def _parse_hash(args: list[str]) -> HashCommand:
    """Parse 'hash <source> [target]' command."""
    if not args:
        raise ParseError("Please provide input source")
    if len(args) > 2:
        raise ParseError("hash takes at most 2 arguments: <source> [target]")

    if len(args) == 2:
        return HashCommand(source=args[0], target=args[1])
    return HashCommand(source=args[0])


def _parse_verify(args: list[str]) -> VerifyCommand:
    """Parse 'verify <payload> <hash_source>' command."""
    if not args:
        raise ParseError("Please provide input source")
    if len(args) < 2:
        raise ParseError("Please provide a hash source")
    if len(args) > 2:
        raise ParseError("verify takes exactly 2 arguments: <payload> <hash_source>")

    return VerifyCommand(payload=args[0], hash_source=args[1])


def _parse_fragment(args: list[str]) -> FragmentCommand:
    """Parse 'fragment <source> <target_dir> [chunk_size]' command."""
    if len(args) < 2:
        raise ParseError("fragment requires <source> <target_dir> [chunk_size]")
    if len(args) > 3:
        raise ParseError("fragment takes at most 3 arguments")

    chunk_size = parse_size(args[2]) if len(args) == 3 else None
    return FragmentCommand(source=args[0], target_dir=args[1], chunk_size=chunk_size)


def _parse_defragment(args: list[str]) -> DefragmentCommand:
    """Parse 'defragment <manifest> [destination]' command."""
    if not args:
        raise ParseError("defragment requires <manifest> [destination]")
    if len(args) > 2:
        raise ParseError("defragment takes at most 2 arguments")

    if len(args) == 2:
        return DefragmentCommand(manifest=args[0], destination=args[1])
    return DefragmentCommand(manifest=args[0])


def _parse_check(args: list[str]) -> CheckCommand:
    """Parse 'check <manifest>' command."""
    if len(args) != 1:
        raise ParseError("check requires exactly 1 argument: <manifest>")

    return CheckCommand(manifest=args[0])


def _parse_clean(args: list[str]) -> CleanCommand:
    """Parse 'clean <target_dir>' command."""
    if len(args) != 1:
        raise ParseError("clean requires exactly 1 argument: <target_dir>")

    return CleanCommand(target_dir=args[0])
