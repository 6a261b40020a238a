"""Interactive shell with prompt_toolkit."""

import os
import sys
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from common.exceptions import FragmenterError, VerificationError
from common.logging_config import get_logger
from cli.commands import dispatch_command
from cli.completer import FragmenterCompleter
from cli.config import Config
from cli.constants import (
    HELP_TEXT,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.parser import ParseError, parse_command

logger = get_logger(__name__)


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    if sys.platform == "win32":
        os.system("cls")
    else:
        os.system("clear")


def show_welcome() -> None:
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


def run_line(user_input: str, config: Optional[Config] = None) -> str:
    """
    Parse and execute one shell line, turning failures into messages.

    Returns:
        Text to print for this line
    """
    try:
        cmd_obj = parse_command(user_input)
        result = dispatch_command(cmd_obj, config)
    except ParseError as e:
        return f"Error: {e}"
    except VerificationError as e:
        return f"Digest mismatch for {e.subject}\nExpected:\n'{e.expected}'\ngot:\n'{e.actual}'"
    except (FragmenterError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        return f"Error: {e}"
    # Empty for digests written to stdout; print() then ends their line
    return result


def repl_loop(config: Optional[Config] = None) -> None:
    """Start interactive shell with prompt_toolkit."""
    history = InMemoryHistory()
    session: PromptSession = PromptSession(
        completer=FragmenterCompleter(), history=history, style=STYLE
    )

    clear_screen()
    show_welcome()

    while True:
        try:
            user_input = session.prompt([("class:prompt", PROMPT_TEXT)])

            if not user_input.strip():
                continue

            if user_input.strip() == "exit":
                print("Goodbye!")
                break

            if user_input.strip() == "help":
                print(HELP_TEXT)
                continue

            if user_input.strip() == "clear":
                clear_screen()
                show_welcome()
                continue

            print(run_line(user_input, config))

        except KeyboardInterrupt:
            continue
        except EOFError:
            print("\nGoodbye!")
            break
