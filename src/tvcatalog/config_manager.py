#!/usr/bin/env python3
"""Configuration and preference management for the channel catalog."""
from __future__ import annotations
import json
import logging
import os
import threading
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_SOURCE_URL = "https://raw.githubusercontent.com/Guovin/iptv-api/main/output/result.m3u"

DEFAULT_CONFIG: Dict[str, Any] = {
    # Used when no source list has ever been saved in the preferences
    "default_source_url": DEFAULT_SOURCE_URL,
    "network": {
        # Seconds; applied to both connect and read
        "request_timeout": 30,
        "user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) tvcatalog/downloader",
        # None -> one worker per configured URL
        "max_parallel_downloads": None,
    },
    "output_directories": {
        # Base directory for all outputs (relative to the working directory)
        "base_output_dir": "data",
        # Last combined playlist (single slot, expires after cache_ttl_ms)
        "cache": {
            "directory": "data/cache",
            "filename": "channels_cache.m3u",
            "cache_ttl_ms": 7 * 24 * 60 * 60 * 1000,
        },
        # custom_channels.m3u, preferences.json, playback.json
        "data": {
            "directory": "data",
        },
        "preferences": {
            "directory": "data",
            "filename": "preferences.json",
        },
        "playback_state": {
            "directory": "data",
            "filename": "playback.json",
        },
        # Playlist export
        "m3u_output": {
            "directory": "data",
            "filename": "channels.m3u",
        },
    },
    # Optional replacement for the packaged default playlist
    "default_playlist_path": None,
}


def get_default_config() -> Dict[str, Any]:
    """Return a fresh copy of the default configuration."""
    return json.loads(json.dumps(DEFAULT_CONFIG))


def _merge_defaults(config: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in defaults.items():
        if key not in config:
            config[key] = value
        elif isinstance(value, dict) and isinstance(config[key], dict):
            _merge_defaults(config[key], value)
    return config


def load_config(config_path: str | None) -> Dict[str, Any]:
    """Load configuration from JSON file; fall back to defaults on error."""
    if not config_path:
        return get_default_config()
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            loaded = json.loads(f.read().strip())
        if not isinstance(loaded, dict):
            raise ValueError("top level must be an object")
        return _merge_defaults(loaded, get_default_config())
    except FileNotFoundError:
        return get_default_config()
    except Exception as e:  # noqa: BLE001
        logger.warning(f"Invalid config {config_path} ({e}); using defaults")
        return get_default_config()


def save_config(config_path: str, config: Dict[str, Any]) -> bool:
    try:
        directory = os.path.dirname(config_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2, ensure_ascii=False)
        return True
    except (IOError, OSError) as e:
        logger.error(f"Failed to save config: {e}")
        return False


def get_output_directory(config: Dict[str, Any], output_type: str) -> str:
    """
    Get output directory path for a specific output type.

    Args:
        config: Configuration dictionary
        output_type: One of 'cache', 'data', 'preferences', 'playback_state', 'm3u_output'

    Returns:
        Directory path as string
    """
    output_dirs = config.get("output_directories", {})

    if output_type in output_dirs:
        return output_dirs[output_type].get("directory", "data")

    # Fallback to base directory
    return output_dirs.get("base_output_dir", "data")


def get_output_path(config: Dict[str, Any], output_type: str) -> str:
    """Full file path for a file-backed output type."""
    entry = config.get("output_directories", {}).get(output_type, {})
    filename = entry.get("filename")
    if not filename:
        filename = get_default_config()["output_directories"].get(output_type, {}).get("filename", "output.txt")
    return os.path.join(get_output_directory(config, output_type), filename)


class Preferences:
    """Tiny persistent string key/value store backed by a JSON file."""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _read(self) -> Dict[str, str]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except FileNotFoundError:
            return {}
        except Exception as e:  # noqa: BLE001
            logger.warning(f"Unreadable preferences {self.path}: {e}")
            return {}

    def _write(self, data: Dict[str, str]) -> None:
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except (IOError, OSError) as e:
            logger.error(f"Failed to save preferences: {e}")

    def get_string(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            value = self._read().get(key)
        return value if isinstance(value, str) else default

    def put_string(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if data.pop(key, None) is not None:
                self._write(data)
