#!/usr/bin/env python3
"""M3U export utilities."""
from __future__ import annotations

import logging
import os
from typing import Callable, Dict, Iterable, List, Tuple

from ..models import Channel
from .parser import EXTINF_PREFIX, EXTM3U_HEADER, GENRE_MARKER

logger = logging.getLogger(__name__)

ProgressCb = Callable[[str], None] | None


def write_playlist(channels: Iterable[Channel]) -> str:
    """Render channels as an extended playlist, one info/URL pair per source."""
    grouped: Dict[str, List[Channel]] = {}
    for ch in channels:
        grouped.setdefault(ch.category, []).append(ch)

    lines = [EXTM3U_HEADER]
    for category, members in grouped.items():
        lines.append('')
        lines.append(f'{category},{GENRE_MARKER}')
        for ch in members:
            for source in ch.sources:
                extinf = f'{EXTINF_PREFIX}-1'
                if ch.epg_id: extinf += f' tvg-id="{ch.epg_id}"'
                extinf += f' tvg-name="{ch.display_name}"'
                if ch.logo: extinf += f' tvg-logo="{ch.logo}"'
                extinf += f' group-title="{category}"'
                extinf += f',{ch.name}'
                lines.append(extinf)
                lines.append(source.url)
    return '\n'.join(lines) + '\n'


def export_playlist(channels: List[Channel], output_path: str, *, progress_callback: ProgressCb = None) -> Tuple[bool, str]:
    try:
        if progress_callback:
            progress_callback("Exporting M3U playlist...")
        if not channels:
            return False, "No channels to export"
        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(write_playlist(channels))
        msg = f"Successfully exported {len(channels)} channels to {os.path.basename(output_path)}"
        logger.info(msg)
        if progress_callback: progress_callback(msg)
        return True, msg
    except Exception as e:  # noqa: BLE001
        err = f"Export failed: {e}"
        logger.error(err)
        if progress_callback: progress_callback(err)
        return False, err


__all__ = ["write_playlist", "export_playlist"]
