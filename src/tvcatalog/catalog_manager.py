#!/usr/bin/env python3
"""Channel catalog service.

Owns the source resolver, the disk cache and the current catalog, and exposes
the catalog, the loading flag and the last error as observable values so a
UI can subscribe to them. The catalog is replaced wholesale on every
successful load and never cleared by a failed one.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Tuple

from .config_manager import (
    Preferences,
    get_output_directory,
    get_output_path,
    load_config,
)
from .local_source import LocalSourceLoader
from .m3u.downloader import UA, RemoteSourceLoader
from .m3u.parser import parse_playlist
from .m3u.writer import export_playlist, write_playlist
from .models import CacheInfo, Channel, ChannelGroup, ChannelSource
from .observable import ObservableValue
from .playback import PlaybackTracker
from .results import ErrorKind, Outcome
from .source_cache import CACHE_FILE_NAME, CACHE_TTL_MS, SourceCache
from .source_resolver import SourceResolver

logger = logging.getLogger(__name__)

ProgressCb = Callable[[str], None] | None

KEY_SOURCE_URLS = "source_urls"
URL_DELIMITER = ","


class CatalogManager:
    """Loads, caches and queries the channel catalog."""

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        *,
        config_path: str | None = None,
        resolver: SourceResolver | None = None,
        cache: SourceCache | None = None,
        preferences: Preferences | None = None,
        playback: PlaybackTracker | None = None,
    ):
        self.config = config if config is not None else load_config(config_path)
        dirs = self.config.get("output_directories", {})
        cache_cfg = dirs.get("cache", {})

        self.cache = cache or (resolver.cache if resolver else SourceCache(
            get_output_directory(self.config, "cache"),
            ttl_ms=cache_cfg.get("cache_ttl_ms", CACHE_TTL_MS),
            file_name=cache_cfg.get("filename", CACHE_FILE_NAME),
        ))
        self.resolver = resolver or self._build_resolver()
        self.preferences = preferences or Preferences(get_output_path(self.config, "preferences"))
        self.playback = playback or PlaybackTracker(get_output_path(self.config, "playback_state"))
        self.default_source_url: str = self.config.get("default_source_url", "")

        self.channels: ObservableValue[Tuple[Channel, ...]] = ObservableValue(())
        self.is_loading: ObservableValue[bool] = ObservableValue(False)
        self.error: ObservableValue[Optional[str]] = ObservableValue(None)

        self._executor: ThreadPoolExecutor | None = None

    def _build_resolver(self) -> SourceResolver:
        net = self.config.get("network", {})
        remote = RemoteSourceLoader(
            timeout=net.get("request_timeout", 30),
            user_agent=net.get("user_agent") or UA,
            max_workers=net.get("max_parallel_downloads"),
        )
        local = LocalSourceLoader(
            get_output_directory(self.config, "data"),
            default_path=self.config.get("default_playlist_path"),
        )
        return SourceResolver(remote, local, self.cache)

    # --- lifecycle -------------------------------------------------------
    def init(self) -> "CatalogManager":
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="catalog-load")
        return self

    def shutdown(self, wait: bool = True) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None
        self.resolver.remote.close()

    def __enter__(self) -> "CatalogManager":
        return self.init()

    def __exit__(self, *exc) -> None:
        self.shutdown()

    # --- loading ---------------------------------------------------------
    def load_catalog(self, force_refresh: bool = False, *, progress_callback: ProgressCb = None) -> Outcome[None]:
        """
        Load the catalog, preferring a fresh disk cache unless forced.

        Args:
            force_refresh: Skip the cache shortcut and go through every source tier
            progress_callback: Optional callback for progress updates

        Returns:
            Successful outcome, or the resolver's failure (also published on ``error``)
        """
        self.is_loading.set(True)
        self.error.set(None)
        try:
            if not force_refresh and self.cache.is_valid():
                cached = self.cache.get()
                if cached.ok:
                    self._publish(parse_playlist(cached.value or "", progress_callback=progress_callback))
                    logger.info("Catalog loaded from cache")
                    return Outcome.success()

            result = self.resolver.load_sources(self.get_source_urls(), progress_callback=progress_callback)
            if not result.ok:
                self.error.set(result.error)
                return result
            self._publish(parse_playlist(result.value or "", progress_callback=progress_callback))
            return Outcome.success()
        except Exception as e:  # noqa: BLE001
            logger.error(f"Catalog load failed: {e}")
            self.error.set(str(e))
            return Outcome.failure(ErrorKind.IO_FAILURE, str(e))
        finally:
            self.is_loading.set(False)

    def load_catalog_async(self, force_refresh: bool = False) -> "Future[Outcome[None]]":
        """Run ``load_catalog`` on the manager's worker pool."""
        self.init()
        return self._executor.submit(self.load_catalog, force_refresh)

    def update_sources(self, *, progress_callback: ProgressCb = None) -> Outcome[None]:
        return self.load_catalog(force_refresh=True, progress_callback=progress_callback)

    def _publish(self, channels: List[Channel]) -> None:
        self.channels.set(tuple(channels))
        logger.info(f"Catalog updated: {len(channels)} channels")

    # --- queries ---------------------------------------------------------
    def get_all_channels(self) -> List[Channel]:
        return list(self.channels.value)

    def get_channels_by_category(self, category: str) -> List[Channel]:
        return [ch for ch in self.channels.value if ch.category == category]

    def get_categories(self) -> List[str]:
        return sorted({ch.category for ch in self.channels.value})

    def get_channel_groups(self) -> List[ChannelGroup]:
        groups: Dict[str, List[Channel]] = {}
        for ch in self.channels.value:
            groups.setdefault(ch.category, []).append(ch)
        return [ChannelGroup(name, tuple(members)) for name, members in sorted(groups.items())]

    def search_channels(self, query: str) -> List[Channel]:
        snapshot = self.channels.value
        if not query or not query.strip():
            return list(snapshot)
        needle = query.lower()
        return [
            ch for ch in snapshot
            if needle in ch.name.lower()
            or needle in ch.display_name.lower()
            or needle in ch.category.lower()
        ]

    def get_channel_by_id(self, channel_id: str) -> Optional[Channel]:
        return next((ch for ch in self.channels.value if ch.id == channel_id), None)

    def next_source(self, channel_id: str) -> Optional[ChannelSource]:
        """Source the player should try next, based on reported playback results."""
        channel = self.get_channel_by_id(channel_id)
        if channel is None:
            return None
        index = self.playback.next_source_index(channel)
        return None if index is None else channel.sorted_sources()[index]

    def get_channel_count(self) -> int:
        return len(self.channels.value)

    def get_source_count(self) -> int:
        return sum(len(ch.sources) for ch in self.channels.value)

    def get_stats(self) -> Dict[str, Any]:
        categories = self.get_categories()
        return {
            "channel_count": self.get_channel_count(),
            "source_count": self.get_source_count(),
            "category_count": len(categories),
            "categories": categories,
            "cache": self.get_cache_info().as_dict(),
        }

    def to_playlist(self) -> str:
        return write_playlist(self.channels.value)

    def export_playlist(self, output_path: str | None = None, *, progress_callback: ProgressCb = None) -> Tuple[bool, str]:
        path = output_path or get_output_path(self.config, "m3u_output")
        return export_playlist(self.get_all_channels(), path, progress_callback=progress_callback)

    # --- source URLs -----------------------------------------------------
    def get_source_urls(self) -> List[str]:
        raw = self.preferences.get_string(KEY_SOURCE_URLS)
        if raw is None:
            return [self.default_source_url] if self.default_source_url else []
        urls: List[str] = []
        for url in raw.split(URL_DELIMITER):
            url = url.strip()
            if url and url not in urls:
                urls.append(url)
        return urls

    def _save_source_urls(self, urls: List[str]) -> None:
        self.preferences.put_string(KEY_SOURCE_URLS, URL_DELIMITER.join(urls))

    def add_source_url(self, url: str) -> bool:
        url = url.strip()
        urls = self.get_source_urls()
        if not url or url in urls:
            return False
        urls.append(url)
        self._save_source_urls(urls)
        logger.info(f"Added source {url}")
        return True

    def remove_source_url(self, url: str) -> bool:
        urls = self.get_source_urls()
        if url not in urls:
            return False
        urls.remove(url)
        self._save_source_urls(urls)
        logger.info(f"Removed source {url}")
        return True

    # --- cache -----------------------------------------------------------
    def clear_cache(self) -> None:
        self.cache.clear()

    def get_cache_info(self) -> CacheInfo:
        return self.cache.info()

    def save_custom_channels(self, content: str) -> Outcome[None]:
        return self.resolver.local.save_custom(content)


__all__ = ["CatalogManager", "KEY_SOURCE_URLS", "URL_DELIMITER"]
