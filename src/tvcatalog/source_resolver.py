#!/usr/bin/env python3
"""Tiered source loading: remote URLs, then local playlists, then the disk cache.

Remote and local results are combined (remote first, in URL order) and written
back to the cache. The cache is only read when both of those tiers come back
empty.
"""
from __future__ import annotations

import logging
from typing import Callable, List

from .local_source import LocalSourceLoader
from .m3u.downloader import RemoteSourceLoader
from .results import ErrorKind, Outcome
from .source_cache import SourceCache

logger = logging.getLogger(__name__)

ProgressCb = Callable[[str], None] | None

SEPARATOR = "\n\n"


class SourceResolver:
    """Combines the remote, local and cache tiers into one playlist text."""

    def __init__(self, remote: RemoteSourceLoader, local: LocalSourceLoader, cache: SourceCache):
        self.remote = remote
        self.local = local
        self.cache = cache

    def load_sources(self, urls: List[str], *, progress_callback: ProgressCb = None) -> Outcome[str]:
        results: List[str] = []

        if urls:
            outcomes = self.remote.load_many(urls, progress_callback=progress_callback)
            for url, outcome in zip(urls, outcomes):
                if outcome.ok and outcome.value:
                    results.append(outcome.value)
                else:
                    logger.warning(f"Skipping remote source {url}: {outcome.error}")

        local = self.local.load()
        if local.ok and local.value and local.value.strip():
            results.append(local.value)
        else:
            logger.info(f"No local playlist: {local.error}")

        if not results:
            cached = self.cache.get()
            if cached.ok and cached.value and cached.value.strip():
                logger.info("Remote and local sources empty; using cached playlist")
                return Outcome.success(cached.value)
            logger.error(f"No sources available (cache: {cached.error})")
            return Outcome.failure(ErrorKind.EMPTY_RESULT, "No sources available")

        combined = SEPARATOR.join(results)
        saved = self.cache.save(combined)
        if not saved.ok:
            logger.warning(f"Could not refresh cache: {saved.error}")
        if progress_callback:
            progress_callback(f"Loaded {len(results)} playlist sources")
        return Outcome.success(combined)

    def load_remote_sources(self, urls: List[str]) -> Outcome[str]:
        bodies = [o.value for o in self.remote.load_many(urls) if o.ok and o.value]
        if not bodies:
            return Outcome.failure(ErrorKind.NETWORK_FAILURE, "Failed to load remote sources")
        return Outcome.success(SEPARATOR.join(bodies))

    def load_local_source(self) -> Outcome[str]:
        return self.local.load()

    def load_cached_source(self) -> Outcome[str]:
        return self.cache.get()

    def clear_cache(self) -> None:
        self.cache.clear()


__all__ = ["SourceResolver"]
