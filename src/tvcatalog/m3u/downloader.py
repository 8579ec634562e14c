#!/usr/bin/env python3
"""Playlist download utilities."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List

import requests

from ..results import ErrorKind, Outcome

logger = logging.getLogger(__name__)

ProgressCb = Callable[[str], None] | None

DEFAULT_TIMEOUT = 30
UA = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) tvcatalog/downloader'


class RemoteSourceLoader:
    """Fetch playlist text over HTTP.

    Never raises – every failure comes back as a failed ``Outcome``.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, *, user_agent: str = UA,
                 max_workers: int | None = None, session: requests.Session | None = None):
        self.timeout = timeout
        self.user_agent = user_agent
        self.max_workers = max_workers
        self._session = session or requests.Session()

    def load(self, url: str, *, progress_callback: ProgressCb = None) -> Outcome[str]:
        """Download one playlist, returning its text or a NETWORK_FAILURE/EMPTY_RESULT outcome."""
        try:
            if progress_callback:
                progress_callback(f"Downloading {url}...")
            headers = {'User-Agent': self.user_agent}
            # requests takes (connect, read); the read timeout also bounds each send
            resp = self._session.get(url, headers=headers, timeout=(self.timeout, self.timeout))
            try:
                if not 200 <= resp.status_code < 300:
                    msg = f"HTTP {resp.status_code}: {resp.reason or ''}".strip()
                    logger.warning(f"Download of {url} failed: {msg}")
                    return Outcome.failure(ErrorKind.NETWORK_FAILURE, msg, status_code=resp.status_code)
                body = resp.text
            finally:
                resp.close()
            if not body:
                logger.warning(f"Download of {url} returned an empty body")
                return Outcome.failure(ErrorKind.EMPTY_RESULT, "Empty response body")
            if progress_callback:
                progress_callback("Download completed successfully!")
            logger.info(f"Downloaded {len(body)} characters from {url}")
            return Outcome.success(body)
        except requests.exceptions.Timeout as e:
            msg = f"Download timed out: {e}"
        except Exception as e:  # noqa: BLE001
            msg = f"Download failed: {e}"
        logger.warning(msg)
        if progress_callback:
            progress_callback(msg)
        return Outcome.failure(ErrorKind.NETWORK_FAILURE, msg)

    def load_many(self, urls: List[str], *, progress_callback: ProgressCb = None) -> List[Outcome[str]]:
        """Fetch every URL concurrently; one outcome per URL, in input order."""
        if not urls:
            return []
        workers = self.max_workers or len(urls)
        with ThreadPoolExecutor(max_workers=max(1, min(workers, len(urls)))) as ex:
            futures = [ex.submit(self.load, url) for url in urls]
            results: List[Outcome[str]] = []
            for idx, fut in enumerate(futures, start=1):
                results.append(fut.result())
                if progress_callback:
                    progress_callback(f"Downloaded {idx}/{len(urls)} sources")
        return results

    def close(self) -> None:
        self._session.close()


__all__ = ["RemoteSourceLoader", "DEFAULT_TIMEOUT"]
