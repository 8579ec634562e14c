#!/usr/bin/env python3
"""M3U playlist parsing utilities.

Two dialects are understood:

* extended playlists (``#EXTM3U`` header, ``#EXTINF`` info lines followed by a
  URL line), and
* simple ``name,url`` lists where bare URLs are also accepted.

Both dialects honour ``<category>,#genre#`` marker lines. Entries sharing a
channel name are merged into one :class:`Channel` with several sources.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional
from urllib.parse import urlsplit

from ..models import (
    DEFAULT_CATEGORY,
    Channel,
    ChannelSource,
    SourceOrigin,
    make_channel_id,
)

logger = logging.getLogger(__name__)

ProgressCb = Callable[[str], None] | None

EXTM3U_HEADER = "#EXTM3U"
EXTINF_PREFIX = "#EXTINF:"
GENRE_MARKER = "#genre#"
UNNAMED_CHANNEL = "Unnamed Channel"
BOM = "\ufeff"

ATTR_RE = re.compile(r'([A-Za-z0-9-]+)="([^"]*)"')
SIMPLE_ENTRY_MARKERS = (",http", ",rtmp", ",rtsp")
URL_SCHEMES = ("http", "rtmp", "rtsp")


@dataclass
class ChannelInfo:
    """Metadata carried by an ``#EXTINF`` line until its URL shows up."""
    name: str
    category: str = DEFAULT_CATEGORY
    tvg_id: Optional[str] = None
    tvg_name: Optional[str] = None
    tvg_logo: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)


def parse_attributes(line: str) -> Dict[str, str]:
    """Return every ``key="value"`` pair found on a line (later keys win)."""
    return dict(ATTR_RE.findall(line))


def parse_extinf(line: str, default_category: str = DEFAULT_CATEGORY) -> ChannelInfo:
    """
    Parse an ``#EXTINF`` line.

    Args:
        line: The info line, e.g. ``#EXTINF:-1 tvg-id="CCTV1" group-title="News",CCTV-1``
        default_category: Category used when the line has no ``group-title``

    Returns:
        ChannelInfo; the name is the text after the last comma.
    """
    attrs = parse_attributes(line)
    name = line.rsplit(",", 1)[1].strip() if "," in line else ""
    return ChannelInfo(
        name=name or UNNAMED_CHANNEL,
        category=attrs.get("group-title") or default_category,
        tvg_id=attrs.get("tvg-id") or None,
        tvg_name=attrs.get("tvg-name") or None,
        tvg_logo=attrs.get("tvg-logo") or None,
        attributes=attrs,
    )


def is_extended(lines: List[str]) -> bool:
    for line in lines:
        if line:
            return line.startswith(EXTM3U_HEADER)
    return False


def parse_playlist(
    text: str,
    *,
    origin: SourceOrigin = SourceOrigin.REMOTE,
    progress_callback: ProgressCb = None,
) -> List[Channel]:
    """
    Parse playlist text into merged channels.

    Never raises: malformed input yields an empty or partial list.

    Args:
        text: Raw playlist text in either dialect
        origin: Origin recorded on every parsed source
        progress_callback: Optional callback function for progress updates

    Returns:
        Channels in first-seen name order
    """
    if progress_callback:
        progress_callback("Parsing channels...")
    # a BOM can open any of the joined playlist bodies, not only the first
    lines = [line.lstrip(BOM).strip() for line in (text or "").splitlines()]
    try:
        if is_extended(lines):
            channels = _parse_extended(lines, origin)
        else:
            channels = _parse_simple(lines, origin)
    except Exception as e:  # noqa: BLE001
        logger.error(f"Playlist parsing aborted: {e}")
        channels = []
    if progress_callback:
        progress_callback(f"Parsed {len(channels)} channels")
    logger.debug(f"Parsed {len(channels)} channels from {len(lines)} lines")
    return channels


def _is_genre_line(line: str) -> bool:
    return GENRE_MARKER in line and not line.startswith(EXTINF_PREFIX)


def _genre_label(line: str) -> str:
    return line.split(",", 1)[0].strip() or DEFAULT_CATEGORY


def _parse_extended(lines: List[str], origin: SourceOrigin) -> List[Channel]:
    infos: Dict[str, ChannelInfo] = {}
    sources: Dict[str, List[ChannelSource]] = {}
    current_category = DEFAULT_CATEGORY
    pending: Optional[ChannelInfo] = None

    for line in lines:
        if not line or line.startswith(EXTM3U_HEADER):
            continue
        if _is_genre_line(line):
            current_category = _genre_label(line)
            pending = None
        elif line.startswith(EXTINF_PREFIX):
            pending = parse_extinf(line, current_category)
        elif not line.startswith("#"):
            if pending is None:
                continue
            sources.setdefault(pending.name, []).append(ChannelSource.from_url(line, origin))
            infos.setdefault(pending.name, pending)
            pending = None

    return [_build_channel(infos[name], found) for name, found in sources.items()]


def _parse_simple(lines: List[str], origin: SourceOrigin) -> List[Channel]:
    categories: Dict[str, str] = {}
    sources: Dict[str, List[ChannelSource]] = {}
    current_category = DEFAULT_CATEGORY

    for line in lines:
        if not line or line.startswith("#"):
            continue
        if _is_genre_line(line):
            current_category = _genre_label(line)
            continue
        if any(marker in line for marker in SIMPLE_ENTRY_MARKERS):
            name, url = (part.strip() for part in line.split(",", 1))
            name = name or name_from_url(url)
        elif line.lower().startswith(URL_SCHEMES) and "," not in line:
            url = line
            name = name_from_url(url)
        else:
            continue
        categories.setdefault(name, current_category)
        sources.setdefault(name, []).append(ChannelSource.from_url(url, origin))

    return [
        _build_channel(ChannelInfo(name=name, category=categories[name]), found)
        for name, found in sources.items()
    ]


def name_from_url(url: str) -> str:
    """Derive a channel name from the last path segment, extension stripped."""
    try:
        path = urlsplit(url).path
    except ValueError:
        path = url
    segment = path.rstrip("/").rsplit("/", 1)[-1]
    stem = segment.rsplit(".", 1)[0] if "." in segment else segment
    return stem.strip() or UNNAMED_CHANNEL


def _build_channel(info: ChannelInfo, sources: List[ChannelSource]) -> Channel:
    return Channel(
        id=make_channel_id(info.category, info.name),
        name=info.name,
        display_name=info.tvg_name or info.name,
        category=info.category,
        logo=info.tvg_logo,
        epg_id=info.tvg_id,
        sources=tuple(sources),
        metadata=dict(info.attributes),
    )


__all__ = [
    "ChannelInfo",
    "parse_playlist",
    "parse_extinf",
    "parse_attributes",
    "name_from_url",
    "is_extended",
]
