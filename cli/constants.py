"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = ["hash", "verify", "fragment", "defragment", "check", "clean", "clear", "exit", "help"]

# Commands whose arguments name files or directories on disk
PATH_COMMANDS = ("hash", "verify", "fragment", "defragment", "check", "clean")

STYLE = Style.from_dict(
    {
        "prompt": "#2E9E6B bold",
        "command": "#0088ff bold",
    }
)

GREEN = "\033[38;2;46;158;107m"
RESET = "\033[0m"

WELCOME_TITLE = f"{GREEN}fragmenter{RESET} - split streams into verified fragments"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "fragmenter> "

USAGE = "usage: fragmenter [--debug] <hash|verify|fragment|defragment|check|clean|shell> [args...]"

HELP_TEXT = """Available commands:
  hash <source> [target]                  Write SHA-256 of source to target (default: stdout)
  verify <payload> <hash_source>          Check payload against a stored digest
  fragment <source> <target_dir> [size]   Split source into fragments of at most size bytes
  defragment <manifest> [destination]     Rebuild and verify the original (default: stdout)
  check <manifest>                        Verify every fragment file against the manifest
  clean <target_dir>                      Remove staging files left by interrupted runs
  clear                                   Clear screen
  help                                    Show this help
  exit                                    Exit shell

Use '-' for standard input or output.
Sizes accept a plain byte count or a K/M/G suffix (binary units).
Examples:
  hash backup.tar
  fragment backup.tar parts/ 16M
  check parts/manifest.json
  defragment parts/manifest.json restored.tar"""
