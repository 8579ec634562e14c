#!/usr/bin/env python3
"""Per-channel playback bookkeeping used to pick the next source to try."""
import json
import logging
import os
import threading
import time
from dataclasses import asdict, dataclass
from typing import Dict, Optional

from .models import Channel

logger = logging.getLogger(__name__)

# Playback state file version for compatibility checks
PLAYBACK_VERSION = "1.0"


@dataclass
class PlaybackState:
    last_good_index: int = 0
    fail_count: int = 0
    last_failed_index: Optional[int] = None
    last_played: int = 0  # epoch ms of the last success


class PlaybackTracker:
    """Remembers, per channel id, which source last worked and how often playback failed."""

    def __init__(self, state_file: Optional[str] = None):
        """
        Initialize the tracker.

        Args:
            state_file: JSON file used to persist state; None keeps it in memory only
        """
        self.state_file = state_file
        self._lock = threading.Lock()
        self._states: Dict[str, PlaybackState] = self._load()

    def _load(self) -> Dict[str, PlaybackState]:
        if not self.state_file or not os.path.exists(self.state_file):
            return {}
        try:
            with open(self.state_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            if data.get("version") != PLAYBACK_VERSION:
                logger.warning(f"Ignoring playback state with version {data.get('version')}")
                return {}
            return {cid: PlaybackState(**raw) for cid, raw in data.get("channels", {}).items()}
        except Exception as e:  # noqa: BLE001
            logger.error(f"Failed to load playback state: {e}")
            return {}

    def _save(self) -> None:
        if not self.state_file:
            return
        try:
            directory = os.path.dirname(self.state_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            payload = {
                "version": PLAYBACK_VERSION,
                "channels": {cid: asdict(state) for cid, state in self._states.items()},
            }
            with open(self.state_file, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
        except (IOError, OSError) as e:
            logger.error(f"Failed to save playback state: {e}")

    def get_state(self, channel_id: str) -> PlaybackState:
        with self._lock:
            state = self._states.get(channel_id)
            return PlaybackState(**asdict(state)) if state else PlaybackState()

    def report_success(self, channel_id: str, source_index: int) -> None:
        with self._lock:
            self._states[channel_id] = PlaybackState(
                last_good_index=source_index,
                fail_count=0,
                last_failed_index=None,
                last_played=int(time.time() * 1000),
            )
            self._save()

    def report_failure(self, channel_id: str, source_index: int) -> int:
        """Record a failed attempt; returns the consecutive failure count."""
        with self._lock:
            state = self._states.setdefault(channel_id, PlaybackState())
            state.fail_count += 1
            state.last_failed_index = source_index
            self._save()
            return state.fail_count

    def next_source_index(self, channel: Channel) -> Optional[int]:
        """Index into ``channel.sorted_sources()`` to try next, or None without sources."""
        count = len(channel.sources)
        if not count:
            return None
        state = self.get_state(channel.id)
        if state.last_failed_index is not None:
            return (state.last_failed_index + 1) % count
        return state.last_good_index if 0 <= state.last_good_index < count else 0

    def reset(self, channel_id: Optional[str] = None) -> None:
        with self._lock:
            if channel_id is None:
                self._states.clear()
            else:
                self._states.pop(channel_id, None)
            self._save()


__all__ = ["PlaybackTracker", "PlaybackState"]
