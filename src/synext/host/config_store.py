"""
Persistent key/value settings for synext.

Settings live in a small JSON file so they survive across sessions. The
engine never reads this module; hosts turn stored values into an
ExtractionConfig per call via ConfigStore.extraction_config().
"""

import atexit
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Union

from dotenv import load_dotenv

from ..core.exceptions import ConfigError
from ..core.models import CompressionLevel, ExtractionConfig, FileTypeSet

# Load environment variables from .env file
load_dotenv()

KEY_FILE_TYPES = "fileTypes"
KEY_COMPRESSION_LEVEL = "compressionLevel"
KEY_CLIPBOARD_BOX_HEIGHT = "clipboardDataBoxHeight"

DEFAULT_CLIPBOARD_BOX_HEIGHT = 200
SETTINGS_FILE_NAME = "settings.json"

logger = logging.getLogger(__name__)


def default_config_path() -> Path:
    """Settings file location: $SYNEXT_CONFIG_DIR or ~/.config/synext."""
    config_dir = os.getenv('SYNEXT_CONFIG_DIR')
    if config_dir:
        return Path(config_dir).expanduser() / SETTINGS_FILE_NAME
    return Path.home() / ".config" / "synext" / SETTINGS_FILE_NAME


class ConfigStore:
    """JSON-backed settings with typed accessors for the values synext uses."""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else default_config_path()
        self._data: Dict[str, Any] = {}
        self._lock = threading.RLock()
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable settings file {self.path}: {e}")
            return
        if isinstance(data, dict):
            self._data = data
        else:
            logger.warning(f"Ignoring settings file {self.path}: expected a JSON object")

    def exists(self) -> bool:
        """Check whether settings have ever been saved."""
        return self.path.exists()

    def save(self) -> None:
        """Write settings atomically."""
        with self._lock:
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".settings-", suffix=".json")
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(self._data, f, indent=2, sort_keys=True)
                os.replace(tmp_path, self.path)
            except OSError as e:
                raise ConfigError(f"Cannot save settings to {self.path}: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value and persist it."""
        with self._lock:
            self._data[key] = value
            self.save()

    def snapshot(self) -> Dict[str, Any]:
        """The values a host displays, in their stored form."""
        return {
            KEY_FILE_TYPES: self.get_file_types().to_list(),
            KEY_COMPRESSION_LEVEL: self.get_compression_level().value,
            KEY_CLIPBOARD_BOX_HEIGHT: self.get_clipboard_box_height(),
        }

    # File types

    def get_file_types(self) -> FileTypeSet:
        file_types = FileTypeSet()
        for suffix in self.get(KEY_FILE_TYPES) or []:
            try:
                file_types.add(suffix)
            except ValueError:
                logger.warning(f"Ignoring invalid stored file type {suffix!r}")
        return file_types

    def set_file_types(self, file_types: Iterable[str]) -> FileTypeSet:
        normalized = FileTypeSet(file_types)
        self.set(KEY_FILE_TYPES, normalized.to_list())
        return normalized

    def toggle_file_type(self, file_type: str) -> FileTypeSet:
        """Add a file type if absent, remove it if present."""
        with self._lock:
            file_types = self.get_file_types()
            file_types.toggle(file_type)
            return self.set_file_types(file_types)

    # Compression level

    def get_compression_level(self) -> CompressionLevel:
        value = self.get(KEY_COMPRESSION_LEVEL, CompressionLevel.NONE.value)
        try:
            return CompressionLevel.parse(value)
        except ValueError:
            logger.warning(f"Ignoring invalid stored compression level {value!r}")
            return CompressionLevel.NONE

    def set_compression_level(self, level: Union[str, CompressionLevel]) -> CompressionLevel:
        try:
            parsed = CompressionLevel.parse(level)
        except ValueError as e:
            raise ConfigError(str(e)) from e
        self.set(KEY_COMPRESSION_LEVEL, parsed.value)
        return parsed

    # UI layout preferences

    def get_clipboard_box_height(self) -> int:
        value = self.get(KEY_CLIPBOARD_BOX_HEIGHT, DEFAULT_CLIPBOARD_BOX_HEIGHT)
        if isinstance(value, int) and not isinstance(value, bool) and value > 0:
            return value
        return DEFAULT_CLIPBOARD_BOX_HEIGHT

    def set_clipboard_box_height(self, height: int) -> int:
        try:
            height = int(height)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid height: {height!r}") from e
        if height <= 0:
            raise ConfigError(f"Height must be positive, got {height}")
        self.set(KEY_CLIPBOARD_BOX_HEIGHT, height)
        return height

    def extraction_config(self, **overrides: Any) -> ExtractionConfig:
        """Build a per-call ExtractionConfig from stored values."""
        values = {
            'file_types': self.get_file_types(),
            'compression_level': self.get_compression_level(),
        }
        values.update({key: value for key, value in overrides.items() if value is not None})
        return ExtractionConfig(**values)


_store: Optional[ConfigStore] = None
_store_lock = threading.Lock()


def get_config_store() -> ConfigStore:
    """
    Process-wide settings store.

    Created on first access and released by teardown_config_store(), which
    also runs at interpreter exit.
    """
    global _store
    with _store_lock:
        if _store is None:
            _store = ConfigStore()
            atexit.register(teardown_config_store)
        return _store


def teardown_config_store() -> None:
    """Release the process-wide store."""
    global _store
    with _store_lock:
        if _store is not None:
            atexit.unregister(teardown_config_store)
        _store = None
