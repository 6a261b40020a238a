"""Configuration management for the fragmenter CLI."""

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from common.constants import BUFFER_SIZE, DEFAULT_CHUNK_SIZE, MANIFEST_NAME

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / '.fragmenter' / 'config.json'


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={value!r}")
        return default


class Config:
    """Manages CLI configuration stored in JSON file."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.fragmenter/config.json)
        """
        self.config_path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
        self.data = self._load()

    @staticmethod
    def defaults() -> dict:
        """Default settings, overridable through FRAGMENTER_* environment variables."""
        return {
            "chunk_size": _env_int("FRAGMENTER_CHUNK_SIZE", DEFAULT_CHUNK_SIZE),
            "buffer_size": _env_int("FRAGMENTER_BUFFER_SIZE", BUFFER_SIZE),
            "manifest_name": os.environ.get("FRAGMENTER_MANIFEST_NAME", MANIFEST_NAME),
        }

    def _load(self) -> dict:
        """
        Load configuration from file, falling back to defaults.

        A missing file is not created; a corrupt one is backed up to
        config.json.bak and ignored.

        Returns:
            Configuration dictionary
        """
        config = self.defaults()
        if not self.config_path.exists():
            return config

        try:
            with open(self.config_path, 'r') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("config root must be an object")
        except (json.JSONDecodeError, ValueError, OSError) as e:
            backup_path = self.config_path.with_suffix('.json.bak')
            logger.warning(f"Unreadable config {self.config_path} ({e}); using defaults")
            try:
                shutil.copy(self.config_path, backup_path)
            except OSError as copy_error:
                logger.warning(f"Could not back up config to {backup_path}: {copy_error}")
            return config

        config.update(data)
        return config

    def _positive_int(self, key: str, default: int) -> int:
        value = self.data.get(key, default)
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            logger.warning(f"Invalid {key}={value!r} in config; using {default}")
            return default
        return value

    def get_chunk_size(self) -> int:
        """
        Get default fragment size in bytes.

        Returns:
            Positive chunk size
        """
        return self._positive_int('chunk_size', DEFAULT_CHUNK_SIZE)

    def get_buffer_size(self) -> int:
        """
        Get read buffer size in bytes.

        Returns:
            Positive buffer size
        """
        return self._positive_int('buffer_size', BUFFER_SIZE)

    def get_manifest_name(self) -> str:
        """
        Get the file name used for manifests written by 'fragment'.

        Returns:
            Manifest file name
        """
        name = self.data.get('manifest_name') or MANIFEST_NAME
        return str(name)
