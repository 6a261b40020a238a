"""Tests for CLI command parsing."""

import pytest

from cli.models import (
    CheckCommand,
    CleanCommand,
    DefragmentCommand,
    FragmentCommand,
    HashCommand,
    VerifyCommand,
)
from cli.parser import ParseError, parse_command, parse_size, parse_tokens


class TestParseCommand:
    """Parse each command form."""

    def test_hash_defaults_to_stdout(self):
        assert parse_command("hash data.bin") == HashCommand(source="data.bin", target="-")

    def test_hash_with_target(self):
        assert parse_command("hash - out.sha") == HashCommand(source="-", target="out.sha")

    def test_verify(self):
        assert parse_command("verify data.bin data.sha") == VerifyCommand(
            payload="data.bin", hash_source="data.sha"
        )

    def test_fragment_without_size(self):
        cmd = parse_command("fragment data.bin parts")
        assert cmd == FragmentCommand(source="data.bin", target_dir="parts", chunk_size=None)

    def test_fragment_with_size_suffix(self):
        cmd = parse_command("fragment data.bin parts 16M")
        assert cmd.chunk_size == 16 * 1024 * 1024

    def test_defragment(self):
        assert parse_command("defragment parts/manifest.json") == DefragmentCommand(
            manifest="parts/manifest.json", destination="-"
        )
        assert parse_command("defragment m.json out.bin").destination == "out.bin"

    def test_check_and_clean(self):
        assert parse_command("check m.json") == CheckCommand(manifest="m.json")
        assert parse_command("clean parts") == CleanCommand(target_dir="parts")

    def test_quoted_paths(self):
        cmd = parse_command('fragment "my file.bin" "out dir"')
        assert cmd.source == "my file.bin"
        assert cmd.target_dir == "out dir"


class TestParseErrors:
    """Missing and invalid arguments."""

    @pytest.mark.parametrize(
        "line,message",
        [
            ("hash", "Please provide input source"),
            ("verify data.bin", "Please provide a hash source"),
            ("fragment data.bin", "fragment requires"),
            ("defragment", "defragment requires"),
            ("check", "check requires"),
            ("frobnicate x", "Invalid command 'frobnicate'"),
            ('hash "unterminated', "Invalid syntax"),
            ("   ", "Empty command"),
        ],
    )
    def test_errors(self, line, message):
        with pytest.raises(ParseError, match=message):
            parse_command(line)

    def test_empty_tokens(self):
        with pytest.raises(ParseError):
            parse_tokens([])

    def test_invalid_chunk_size(self):
        with pytest.raises(ParseError):
            parse_command("fragment a b 0")


class TestParseSize:
    """Byte count parsing."""

    @pytest.mark.parametrize(
        "text,expected",
        [("4096", 4096), ("64K", 65536), ("64kb", 65536), ("16MiB", 16 * 1024 ** 2), ("1G", 1024 ** 3)],
    )
    def test_valid(self, text, expected):
        assert parse_size(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "-5", "1.5M", "0"])
    def test_invalid(self, text):
        with pytest.raises(ParseError):
            parse_size(text)
