#!/usr/bin/env python3
"""Single-slot disk cache for the last combined playlist text."""
from __future__ import annotations

import logging
import os
import tempfile
import time
from typing import Callable

from .models import CacheInfo
from .results import ErrorKind, Outcome

logger = logging.getLogger(__name__)

CACHE_FILE_NAME = "channels_cache.m3u"
CACHE_TTL_MS = 7 * 24 * 60 * 60 * 1000  # 7 days


def _now_ms() -> int:
    return int(time.time() * 1000)


class SourceCache:
    """Stores the last assembled playlist; the file's mtime is its timestamp.

    Every method swallows disk errors: a broken cache just means no cache.
    """

    def __init__(self, cache_dir: str, *, ttl_ms: int = CACHE_TTL_MS,
                 clock: Callable[[], int] = _now_ms, file_name: str = CACHE_FILE_NAME):
        self.cache_dir = cache_dir
        self.ttl_ms = ttl_ms
        self._clock = clock
        self.cache_file = os.path.join(cache_dir, file_name)

    def save(self, content: str) -> Outcome[None]:
        """Overwrite the cache slot atomically (temp file + rename)."""
        tmp_path = None
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".cache-", dir=self.cache_dir)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_path, self.cache_file)
            tmp_path = None
            logger.info(f"Cache saved ({len(content)} characters) to {self.cache_file}")
            return Outcome.success()
        except OSError as e:
            logger.error(f"Failed to save cache: {e}")
            return Outcome.failure(ErrorKind.IO_FAILURE, f"Failed to save cache: {e}")
        finally:
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass

    def _mtime_ms(self) -> int | None:
        try:
            return int(os.stat(self.cache_file).st_mtime_ns // 1_000_000)
        except OSError:
            return None

    def _is_fresh(self, mtime_ms: int) -> bool:
        return self._clock() - mtime_ms <= self.ttl_ms

    def get(self) -> Outcome[str]:
        mtime = self._mtime_ms()
        if mtime is None:
            return Outcome.failure(ErrorKind.NOT_FOUND, "Cache file not found")
        if not self._is_fresh(mtime):
            return Outcome.failure(ErrorKind.EXPIRED, "Cache expired")
        try:
            with open(self.cache_file, "r", encoding="utf-8-sig") as f:
                return Outcome.success(f.read())
        except FileNotFoundError:
            return Outcome.failure(ErrorKind.NOT_FOUND, "Cache file not found")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Failed to read cache: {e}")
            return Outcome.failure(ErrorKind.IO_FAILURE, f"Failed to read cache: {e}")

    def is_valid(self) -> bool:
        """Freshness check from the file's mtime alone, without reading it."""
        mtime = self._mtime_ms()
        return mtime is not None and self._is_fresh(mtime)

    def clear(self) -> None:
        try:
            os.remove(self.cache_file)
            logger.info("Cache cleared")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to clear cache: {e}")

    def size(self) -> int:
        try:
            return os.path.getsize(self.cache_file)
        except OSError:
            return 0

    def last_modified(self) -> int:
        return self._mtime_ms() or 0

    def info(self) -> CacheInfo:
        return CacheInfo(is_valid=self.is_valid(), size=self.size(), last_modified=self.last_modified())


__all__ = ["SourceCache", "CACHE_TTL_MS", "CACHE_FILE_NAME"]
