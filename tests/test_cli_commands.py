"""Tests for CLI command handlers."""

import hashlib
import json
from unittest.mock import Mock

import pytest

from cli.commands import (
    dispatch_command,
    handle_check,
    handle_clean,
    handle_defragment,
    handle_fragment,
    handle_hash,
    handle_verify,
)
from cli.config import Config
from cli.models import (
    CheckCommand,
    CleanCommand,
    DefragmentCommand,
    FragmentCommand,
    HashCommand,
    VerifyCommand,
)
from common.exceptions import FragmentMissingError, ManifestParseError, VerificationError


@pytest.fixture
def config():
    """Mocked config with small sizes."""
    mock_config = Mock(spec=Config)
    mock_config.get_chunk_size.return_value = 4096
    mock_config.get_buffer_size.return_value = 1000
    mock_config.get_manifest_name.return_value = "manifest.json"
    return mock_config


@pytest.fixture
def payload(tmp_path, sample_bytes):
    path = tmp_path / "payload.bin"
    path.write_bytes(sample_bytes)
    return path


def test_handle_hash_to_file(tmp_path, payload, sample_bytes, config):
    target = tmp_path / "payload.sha"

    result = handle_hash(HashCommand(source=str(payload), target=str(target)), config=config)

    assert "Wrote SHA-256" in result
    assert target.read_text() == hashlib.sha256(sample_bytes).hexdigest()


def test_handle_verify(tmp_path, payload, sample_bytes, config):
    stored = tmp_path / "payload.sha"
    stored.write_text(hashlib.sha256(sample_bytes).hexdigest() + "\n")

    result = handle_verify(VerifyCommand(payload=str(payload), hash_source=str(stored)), config=config)

    assert result.startswith("OK")


def test_handle_verify_mismatch(tmp_path, payload, config):
    stored = tmp_path / "payload.sha"
    stored.write_text("0" * 64)

    with pytest.raises(VerificationError):
        handle_verify(VerifyCommand(payload=str(payload), hash_source=str(stored)), config=config)


def test_handle_fragment_uses_config_chunk_size(tmp_path, payload, config):
    parts = tmp_path / "parts"
    parts.mkdir()

    result = handle_fragment(FragmentCommand(source=str(payload), target_dir=str(parts)), config=config)

    manifest = json.loads((parts / "manifest.json").read_text())
    assert len(manifest["fragments"]) == 3
    assert "Wrote 3 fragment(s)" in result
    config.get_chunk_size.assert_called_once()


def test_handle_fragment_explicit_chunk_size(tmp_path, payload, config):
    parts = tmp_path / "parts"
    parts.mkdir()

    handle_fragment(FragmentCommand(source=str(payload), target_dir=str(parts), chunk_size=1000), config=config)

    manifest = json.loads((parts / "manifest.json").read_text())
    assert len(manifest["fragments"]) == 10
    config.get_chunk_size.assert_not_called()


def test_fragment_then_defragment(tmp_path, payload, sample_bytes, config):
    parts = tmp_path / "parts"
    parts.mkdir()
    restored = tmp_path / "restored.bin"
    handle_fragment(FragmentCommand(source=str(payload), target_dir=str(parts)), config=config)

    result = handle_defragment(
        DefragmentCommand(manifest=str(parts / "manifest.json"), destination=str(restored)), config=config
    )

    assert restored.read_bytes() == sample_bytes
    assert "hash verified" in result


def test_defragment_bad_manifest_leaves_destination_untouched(tmp_path, config):
    manifest_path = tmp_path / "manifest.json"
    manifest_path.write_text("not json")
    restored = tmp_path / "restored.bin"

    with pytest.raises(ManifestParseError):
        handle_defragment(
            DefragmentCommand(manifest=str(manifest_path), destination=str(restored)), config=config
        )

    assert not restored.exists()


def test_defragment_missing_fragment(tmp_path, payload, config):
    parts = tmp_path / "parts"
    parts.mkdir()
    handle_fragment(FragmentCommand(source=str(payload), target_dir=str(parts)), config=config)
    next(parts.glob("1-*.frag")).unlink()
    existing = tmp_path / "out"
    existing.write_bytes(b"existing content")

    with pytest.raises(FragmentMissingError):
        handle_defragment(
            DefragmentCommand(manifest=str(parts / "manifest.json"), destination=str(existing)),
            config=config,
        )

    assert existing.read_bytes() == b"existing content"


def test_handle_check(tmp_path, payload, config):
    parts = tmp_path / "parts"
    parts.mkdir()
    handle_fragment(FragmentCommand(source=str(payload), target_dir=str(parts)), config=config)

    result = handle_check(CheckCommand(manifest=str(parts / "manifest.json")), config=config)

    assert result == "All 3 fragment(s) (9.77 KiB) match manifest.json"


def test_handle_check_reports_unreferenced_fragments(tmp_path, payload, config):
    parts = tmp_path / "parts"
    parts.mkdir()
    handle_fragment(FragmentCommand(source=str(payload), target_dir=str(parts)), config=config)
    (parts / "7-0000000000000000000a.frag").write_bytes(b"left over")

    result = handle_check(CheckCommand(manifest=str(parts / "manifest.json")), config=config)

    assert result.startswith("All 3 fragment(s) (9.77 KiB) match manifest.json")
    assert "1 unreferenced fragment(s)" in result


def test_handle_clean(tmp_path):
    parts = tmp_path / "parts"
    parts.mkdir()
    (parts / ".staging-abc.frag.tmp").write_bytes(b"partial")

    result = handle_clean(CleanCommand(target_dir=str(parts)))

    assert "Removed 1 staging file(s)" in result
    assert list(parts.iterdir()) == []


def test_dispatch_rejects_unknown_type():
    with pytest.raises(TypeError):
        dispatch_command(object())
