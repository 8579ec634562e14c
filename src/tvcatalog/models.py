#!/usr/bin/env python3
"""Channel catalog data structures shared by parser, writer and manager."""
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

DEFAULT_CATEGORY = "Uncategorized"


class SourceOrigin(str, Enum):
    LOCAL_BUILTIN = "local-builtin"
    LOCAL_CUSTOM = "local-custom"
    REMOTE = "remote-subscribed"
    HISTORY = "cached-history"
    WHITELIST = "whitelist"


class Protocol(str, Enum):
    HTTP = "http"
    HTTPS = "https"
    RTMP = "rtmp"
    RTSP = "rtsp"
    UDP = "udp"


class Quality(str, Enum):
    SD = "SD"
    HD = "HD"
    FHD = "FHD"
    UHD = "UHD"

    @classmethod
    def from_resolution(cls, width: int, height: int) -> "Quality":
        if width >= 3840 and height >= 2160:
            return cls.UHD
        if width >= 1920 and height >= 1080:
            return cls.FHD
        if width >= 1280 and height >= 720:
            return cls.HD
        return cls.SD


# Checked in order; the first matching hint wins ("uhd" also contains "hd").
QUALITY_HINTS: List[Tuple[Quality, Tuple[str, ...]]] = [
    (Quality.UHD, ("4k", "uhd")),
    (Quality.FHD, ("1080", "fhd")),
    (Quality.HD, ("720", "hd")),
    (Quality.SD, ("480", "sd")),
]

PROTOCOL_PREFIXES: List[Tuple[str, Protocol]] = [
    ("rtmp://", Protocol.RTMP),
    ("rtsp://", Protocol.RTSP),
    ("udp://", Protocol.UDP),
    ("https://", Protocol.HTTPS),
    ("http://", Protocol.HTTP),
]


def _stable_digest(text: str) -> str:
    return hashlib.sha1(text.encode("utf-8")).hexdigest()[:16]


def make_channel_id(category: str, name: str) -> str:
    """Deterministic channel id for a (category, name) pair."""
    return _stable_digest(f"{category}_{name}")


def detect_protocol(url: str) -> Protocol:
    lowered = url.lower()
    for prefix, protocol in PROTOCOL_PREFIXES:
        if lowered.startswith(prefix):
            return protocol
    return Protocol.HTTP


def detect_quality(url: str) -> Optional[Quality]:
    lowered = url.lower()
    for quality, hints in QUALITY_HINTS:
        if any(hint in lowered for hint in hints):
            return quality
    return None


@dataclass(frozen=True)
class TestResult:
    """Speed test measurement attached to a source."""
    __test__ = False  # not a pytest test class

    delay_ms: int
    speed: float  # MB/s
    resolution: Optional[str] = None
    tested_at: int = 0  # epoch ms

    def is_valid(self, max_delay: int = 5000, min_speed: float = 0.5) -> bool:
        return 0 <= self.delay_ms <= max_delay and self.speed >= min_speed

    def score(self) -> float:
        delay_score = (1.0 / self.delay_ms) * 1000 if self.delay_ms > 0 else 0.0
        return delay_score + self.speed * 10


@dataclass(frozen=True)
class ChannelSource:
    url: str
    origin: SourceOrigin = SourceOrigin.REMOTE
    protocol: Protocol = Protocol.HTTP
    quality: Optional[Quality] = None
    priority: int = 0
    test_result: Optional[TestResult] = None

    @property
    def id(self) -> str:
        return _stable_digest(self.url)

    @classmethod
    def from_url(cls, url: str, origin: SourceOrigin = SourceOrigin.REMOTE) -> "ChannelSource":
        return cls(
            url=url,
            origin=origin,
            protocol=detect_protocol(url),
            quality=detect_quality(url),
        )


@dataclass(frozen=True)
class Channel:
    id: str
    name: str
    display_name: str
    category: str = DEFAULT_CATEGORY
    logo: Optional[str] = None
    epg_id: Optional[str] = None
    sources: Tuple[ChannelSource, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def sorted_sources(self) -> List[ChannelSource]:
        # sorted() is stable, so equal priorities keep discovery order
        return sorted(self.sources, key=lambda s: -s.priority)

    def preferred_source(self) -> Optional[ChannelSource]:
        ranked = self.sorted_sources()
        return ranked[0] if ranked else None


@dataclass(frozen=True)
class ChannelGroup:
    name: str
    channels: Tuple[Channel, ...]

    @property
    def size(self) -> int:
        return len(self.channels)


@dataclass(frozen=True)
class CacheInfo:
    is_valid: bool
    size: int
    last_modified: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "size_bytes": self.size,
            "last_modified": self.last_modified,
        }


__all__ = [
    "DEFAULT_CATEGORY",
    "SourceOrigin",
    "Protocol",
    "Quality",
    "TestResult",
    "ChannelSource",
    "Channel",
    "ChannelGroup",
    "CacheInfo",
    "make_channel_id",
    "detect_protocol",
    "detect_quality",
]
