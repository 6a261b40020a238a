"""Custom completer for the fragmenter shell with path autocompletion."""

from pathlib import Path
from typing import Iterable, Optional

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS, PATH_COMMANDS
from common.constants import MANIFEST_NAME


class FragmenterCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Path completion for command arguments, relative to the working directory
    """

    def __init__(self, base_dir: Optional[Path] = None):
        self._base_dir = base_dir

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        """
        Generate completions based on cursor position and context.
        """
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        command = tokens[0].lower()
        if command not in PATH_COMMANDS:
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        manifests_first = command in ("defragment", "check")
        yield from self._complete_paths(current_word, manifests_first)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_paths(self, partial: str, manifests_first: bool) -> Iterable[Completion]:
        """
        Complete entries of the directory named by the partial path.

        Directories get a trailing '/'. Hidden entries (including staging
        files) are skipped unless the partial name starts with '.'.
        """
        base = self._base_dir or Path.cwd()
        head, _, name_prefix = partial.rpartition("/")
        directory = base / head if head else base
        if not directory.is_dir():
            return

        entries = []
        for item in directory.iterdir():
            if item.name.startswith(".") and not name_prefix.startswith("."):
                continue
            if not item.name.startswith(name_prefix):
                continue
            suffix = "/" if item.is_dir() else ""
            candidate = f"{head}/{item.name}{suffix}" if head else f"{item.name}{suffix}"
            entries.append((item, candidate))

        def sort_key(entry):
            item, candidate = entry
            is_manifest = item.name == MANIFEST_NAME or item.suffix == ".json"
            return (not (manifests_first and is_manifest), candidate)

        for _, candidate in sorted(entries, key=sort_key):
            yield Completion(candidate, start_position=-len(partial))
