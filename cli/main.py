"""CLI entry point."""

import sys
from typing import Optional, Sequence

from common.constants import (
    EXIT_BAD_ARGUMENTS,
    EXIT_FAILURE,
    EXIT_NO_COMMAND,
    EXIT_OK,
)
from common.exceptions import FragmenterError, VerificationError
from common.logging_config import set_run_label, setup_logging
from cli.commands import dispatch_command
from cli.config import Config
from cli.constants import USAGE
from cli.parser import ParseError, parse_tokens
from cli.repl import repl_loop

LOGGED_COMPONENTS = ('cli', 'fragmenter', 'common')


def main(argv: Optional[Sequence[str]] = None, config: Optional[Config] = None) -> int:
    """
    Run one command (or the interactive shell) and return the process exit code.

    Exit codes: 0 success, 1 I/O failure or digest mismatch,
    2 missing command, 3 invalid command or arguments.
    """
    args = list(sys.argv[1:] if argv is None else argv)

    debug = '--debug' in args
    if debug:
        args = [a for a in args if a != '--debug']
    log_level = 'DEBUG' if debug else None

    loggers = [setup_logging(name, log_level=log_level) for name in LOGGED_COMPONENTS]
    logger = loggers[0]
    if debug:
        logger.debug("Debug logging enabled")

    if not args:
        print("Please provide command", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return EXIT_NO_COMMAND

    if args[0] == 'shell':
        repl_loop(config)
        return EXIT_OK

    try:
        cmd_obj = parse_tokens(args)
    except ParseError as e:
        print(str(e), file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return EXIT_BAD_ARGUMENTS

    for component_logger in loggers:
        set_run_label(component_logger, cmd_obj.command)
    logger.debug(f"Running {cmd_obj.command}")
    try:
        message = dispatch_command(cmd_obj, config)
    except VerificationError as e:
        print(f"Digest mismatch for {e.subject}\nExpected:\n'{e.expected}'\ngot:\n'{e.actual}'", file=sys.stderr)
        return EXIT_FAILURE
    except (FragmenterError, OSError) as e:
        logger.error(f"{cmd_obj.command} failed: {e}", exc_info=debug)
        return EXIT_FAILURE

    if message:
        print(message, file=sys.stderr)
    return EXIT_OK


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
