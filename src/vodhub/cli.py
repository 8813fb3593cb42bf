#!/usr/bin/env python3
"""
vodhub CLI - Drive the playback core from a terminal.

Usage:
    vodhub play --id 123 --source src1
    vodhub play --id 123 --source src1 --episode 4 --reverse
    vodhub probe https://api.example.com https://other.example.com
    vodhub group results.json
    vodhub show-config
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from vodhub.config.loader import get_config
from vodhub.config.settings import SettingsStore
from vodhub.exceptions import ConfigError
from vodhub.models.source import VideoSource


def _load_settings() -> SettingsStore:
    try:
        return SettingsStore.load(get_config().settings_path)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


def _cmd_play(args):
    """Handle the play subcommand."""
    from vodhub.clients.detail import DetailClient
    from vodhub.models.state import Direction, SessionStatus
    from vodhub.playback.session import PlaybackSessionController

    store = _load_settings()
    direction = Direction.REVERSED if args.reverse else None

    async def run():
        controller = PlaybackSessionController(DetailClient(get_config().api_base_url), store)
        async with controller:
            state = await controller.start(
                args.id, args.source, args.episode, direction, title=args.title
            )
            # Snapshot before close() marks the session CLOSED
            return state.to_dict()

    result = asyncio.run(run())
    print(json.dumps(result, indent=2, ensure_ascii=False))
    if result["status"] == SessionStatus.ERROR.value:
        sys.exit(1)


def _cmd_probe(args):
    """Handle the probe subcommand."""
    from vodhub.probing.latency import LatencyProbe

    store = _load_settings()
    ping_url = args.ping_url
    if ping_url is None and not args.direct:
        ping_url = get_config().api_base_url + "/api/ping"

    async def run():
        probe = LatencyProbe(store, ping_url=ping_url)
        try:
            return await probe.probe_all({url: url for url in args.urls})
        finally:
            await probe.close()

    results = asyncio.run(run())
    print(json.dumps(results, indent=2))


def _cmd_group(args):
    """Handle the group subcommand."""
    from vodhub.search.grouping import group_sources

    try:
        data = json.loads(args.file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"ERROR: cannot read {args.file}: {e}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, list):
        print("ERROR: expected a JSON list of search results", file=sys.stderr)
        sys.exit(1)

    videos = [VideoSource.from_search_result(item) for item in data if isinstance(item, dict)]
    groups = group_sources(videos)
    output = [
        {
            "name": group.name,
            "key": group.key,
            "sources": [c.to_dict() for c in group.candidates()],
        }
        for group in groups
    ]
    print(json.dumps(output, indent=2, ensure_ascii=False))


def _cmd_show_config(args):
    """Handle the show-config subcommand."""
    config = get_config()
    store = _load_settings()
    print(f"Root dir: {config.root_dir}")
    print(f"API base URL: {config.api_base_url} (from {config.source.value})")
    print(f"Settings file: {config.settings_path}")
    print(json.dumps(store.snapshot().to_dict(), indent=2, ensure_ascii=False))


def main():
    parser = argparse.ArgumentParser(
        description="Multi-source video playback core",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s play --id 123 --source src1
    %(prog)s play --id 123 --source src1 --episode 2 --reverse
    %(prog)s probe https://api.example.com --direct
    %(prog)s group results.json
    %(prog)s show-config
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command")

    play_parser = subparsers.add_parser("play", help="Start a playback session")
    play_parser.add_argument("--id", required=True, help="Video id on the source")
    play_parser.add_argument("--source", required=True, help="Source id")
    play_parser.add_argument("--episode", default=None, help="Episode index")
    play_parser.add_argument("--title", default=None, help="Title hint")
    play_parser.add_argument(
        "--reverse", action="store_true",
        help="Traverse episodes last-to-first",
    )

    probe_parser = subparsers.add_parser("probe", help="Measure source latency once")
    probe_parser.add_argument("urls", nargs="+", help="Source base URLs")
    probe_parser.add_argument(
        "--ping-url", default=None,
        help="Ping endpoint (default: <api_base_url>/api/ping)",
    )
    probe_parser.add_argument(
        "--direct", action="store_true",
        help="Time a GET to each URL instead of using the ping endpoint",
    )

    group_parser = subparsers.add_parser("group", help="Group search results by title")
    group_parser.add_argument("file", type=Path, help="JSON list of search results")

    subparsers.add_parser("show-config", help="Print resolved configuration")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )

    if args.command == "play":
        _cmd_play(args)
    elif args.command == "probe":
        _cmd_probe(args)
    elif args.command == "group":
        _cmd_group(args)
    elif args.command == "show-config":
        _cmd_show_config(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
