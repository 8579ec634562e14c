#!/usr/bin/env python3
"""Command line interface for the channel catalog."""
from __future__ import annotations

import argparse
import logging
import sys

from .catalog_manager import CatalogManager


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tvcatalog", description="Merge IPTV playlists into one channel catalog")
    parser.add_argument("--config", help="Path to a JSON config file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    load = sub.add_parser("load", help="Load the catalog and print a summary")
    load.add_argument("--force", action="store_true", help="Ignore a fresh cache")

    search = sub.add_parser("search", help="Search channels by name or category")
    search.add_argument("query", nargs="?", default="")

    sub.add_parser("categories", help="List categories")
    sub.add_parser("stats", help="Print catalog and cache statistics")

    export = sub.add_parser("export", help="Write the catalog as an M3U playlist")
    export.add_argument("path", nargs="?")

    sources = sub.add_parser("sources", help="Manage remote playlist URLs")
    sources.add_argument("action", choices=["list", "add", "remove"])
    sources.add_argument("url", nargs="?")

    sub.add_parser("clear-cache", help="Delete the cached playlist")
    return parser


def run(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    with CatalogManager(config_path=args.config) as manager:
        if args.command == "sources":
            if args.action == "list":
                for url in manager.get_source_urls():
                    print(url)
                return 0
            if not args.url:
                print("A URL is required")
                return 2
            changed = (manager.add_source_url(args.url) if args.action == "add"
                       else manager.remove_source_url(args.url))
            print("Updated" if changed else "Nothing to change")
            return 0

        if args.command == "clear-cache":
            manager.clear_cache()
            print("Cache cleared")
            return 0

        result = manager.load_catalog(force_refresh=getattr(args, "force", False), progress_callback=print)
        if not result.ok:
            print(f"Error: {result.error}")
            return 1

        if args.command == "load":
            print(f"{manager.get_channel_count()} channels, {manager.get_source_count()} sources")
        elif args.command == "search":
            for ch in manager.search_channels(args.query):
                print(f"[{ch.category}] {ch.display_name} ({len(ch.sources)} sources)")
        elif args.command == "categories":
            for group in manager.get_channel_groups():
                print(f"{group.name}: {group.size}")
        elif args.command == "stats":
            for key, value in manager.get_stats().items():
                print(f"{key}: {value}")
        elif args.command == "export":
            ok, msg = manager.export_playlist(args.path)
            print(msg)
            return 0 if ok else 1
    return 0


def main():
    """Console script entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
