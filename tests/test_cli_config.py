"""Tests for CLI configuration module."""

import json

from cli.config import Config
from common.constants import BUFFER_SIZE, DEFAULT_CHUNK_SIZE, MANIFEST_NAME


def test_config_defaults_when_file_missing(tmp_path, monkeypatch):
    """Test that defaults are used and no file is created."""
    for name in ("FRAGMENTER_CHUNK_SIZE", "FRAGMENTER_BUFFER_SIZE", "FRAGMENTER_MANIFEST_NAME"):
        monkeypatch.delenv(name, raising=False)
    config_path = tmp_path / '.fragmenter' / 'config.json'
    config = Config(config_path)

    assert not config_path.exists()
    assert config.get_chunk_size() == DEFAULT_CHUNK_SIZE
    assert config.get_buffer_size() == BUFFER_SIZE
    assert config.get_manifest_name() == MANIFEST_NAME


def test_config_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("FRAGMENTER_CHUNK_SIZE", "2048")
    monkeypatch.setenv("FRAGMENTER_MANIFEST_NAME", "index.json")
    config = Config(tmp_path / 'config.json')

    assert config.get_chunk_size() == 2048
    assert config.get_manifest_name() == "index.json"


def test_config_ignores_bad_env_value(tmp_path, monkeypatch):
    monkeypatch.setenv("FRAGMENTER_BUFFER_SIZE", "lots")
    config = Config(tmp_path / 'config.json')

    assert config.get_buffer_size() == BUFFER_SIZE


def test_config_loads_existing_file(tmp_path):
    """Test loading existing config file."""
    config_path = tmp_path / 'config.json'
    config_path.write_text(json.dumps({'chunk_size': 1000, 'buffer_size': 10}))

    config = Config(config_path)

    assert config.get_chunk_size() == 1000
    assert config.get_buffer_size() == 10


def test_config_invalid_values_fall_back(tmp_path):
    config_path = tmp_path / 'config.json'
    config_path.write_text(json.dumps({'chunk_size': -1, 'buffer_size': "big"}))

    config = Config(config_path)

    assert config.get_chunk_size() == DEFAULT_CHUNK_SIZE
    assert config.get_buffer_size() == BUFFER_SIZE


def test_corrupt_config_is_backed_up(tmp_path):
    config_path = tmp_path / 'config.json'
    config_path.write_text('{broken')

    config = Config(config_path)

    assert config.get_manifest_name() == MANIFEST_NAME
    assert (tmp_path / 'config.json.bak').read_text() == '{broken'
