#!/usr/bin/env python3
"""Bundled default playlist plus the user's custom playlist."""
from __future__ import annotations

import logging
import os
from typing import List, Optional

from .results import ErrorKind, Outcome

logger = logging.getLogger(__name__)

DEFAULT_CHANNELS_FILE = "default_channels.m3u"
CUSTOM_CHANNELS_FILE = "custom_channels.m3u"
BUNDLED_DEFAULT_PATH = os.path.join(os.path.dirname(__file__), "assets", DEFAULT_CHANNELS_FILE)


def _read_text(path: str) -> Optional[str]:
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            return f.read()
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read {path}: {e}")
        return None


class LocalSourceLoader:
    """Reads the packaged default playlist and the optional custom override."""

    def __init__(self, data_dir: str, *, default_path: str | None = None):
        self.data_dir = data_dir
        self.default_path = default_path or BUNDLED_DEFAULT_PATH
        self.custom_path = os.path.join(data_dir, CUSTOM_CHANNELS_FILE)

    def load(self) -> Outcome[str]:
        """Default then custom playlist joined by a blank line; NOT_FOUND if neither exists."""
        results: List[str] = []
        default = _read_text(self.default_path)
        if default is not None:
            results.append(default)
        custom = self.load_custom().get_or_none()
        if custom is not None:
            results.append(custom)
        if not results:
            return Outcome.failure(ErrorKind.NOT_FOUND, "No local sources found")
        return Outcome.success("\n\n".join(results))

    def load_custom(self) -> Outcome[str]:
        content = _read_text(self.custom_path)
        if content is None:
            return Outcome.failure(ErrorKind.NOT_FOUND, f"File not found: {CUSTOM_CHANNELS_FILE}")
        return Outcome.success(content)

    def save_custom(self, content: str) -> Outcome[None]:
        try:
            os.makedirs(self.data_dir, exist_ok=True)
            with open(self.custom_path, "w", encoding="utf-8") as f:
                f.write(content)
            logger.info(f"Custom channels saved to {self.custom_path}")
            return Outcome.success()
        except OSError as e:
            logger.error(f"Failed to save custom channels: {e}")
            return Outcome.failure(ErrorKind.IO_FAILURE, f"Failed to save custom channels: {e}")

    def clear_custom(self) -> None:
        try:
            os.remove(self.custom_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove custom channels: {e}")


__all__ = ["LocalSourceLoader", "BUNDLED_DEFAULT_PATH", "CUSTOM_CHANNELS_FILE"]
