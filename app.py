#!/usr/bin/env python3
"""
busmap Application

Loads the configured GTFS feed and prints bus departures for a stop,
the stops around a point, or a summary of the route shapes.
"""

import argparse
import sys

from busmap.config import get_config
from busmap.errors import FeedError, InvalidDate
from busmap.gtfs import FeedManager, parse_query_date
from busmap.providers import DepartureBoardProvider, NearbyStopsProvider, get_configured_feed_manager
from busmap.renderers import TextRenderer


def build_feed_manager(args, config) -> FeedManager:
    """Feed manager from config, with --source/--all-modes/--timeout overrides applied."""
    if not (args.source or args.all_modes or args.timeout):
        return get_configured_feed_manager(config)

    feed_config = config.get_feed_config()
    display_config = config.get_display_config()
    return FeedManager(
        sources=args.source or feed_config.get("sources", []),
        metadata_url=None if args.source else feed_config.get("metadata_url"),
        route_type=None if args.all_modes else feed_config.get("route_type", 3),
        timeout=args.timeout or feed_config.get("timeout", 30),
        url_keys=feed_config.get("metadata_url_keys", ["file_url"]),
        default_color=display_config.get("default_route_color", "#3388ff"),
        default_headsign=display_config.get("default_headsign", "(no headsign)"),
    )


def print_shapes(manager: FeedManager, width: int):
    feed = manager.get_feed()
    shapes = feed.route_shapes()
    print(f"{len(shapes)} drawable shapes from {feed.source}")
    print("=" * width)
    for shape in shapes:
        print(f"{shape.color}  {shape.shape_id:<16} {len(shape.points):>5} pts  {shape.label}")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="busmap - GTFS bus stops and departures",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python app.py --stop 1001                    Next departures at stop 1001
  python app.py --stop 1001 --date 2024-06-17  All departures on a date
  python app.py --near 34.9896 137.0025        Stops around a point
  python app.py --shapes --source feed.zip     Route shapes from a local feed
        """
    )
    parser.add_argument("--config", default="config.json", help="Path to config file")
    parser.add_argument("--stop", help="Stop ID to show departures for")
    parser.add_argument("--date", help="Service date (YYYY-MM-DD); shows every departure that day")
    parser.add_argument("--limit", type=int, help="Number of upcoming departures to show")
    parser.add_argument("--near", nargs=2, type=float, metavar=("LAT", "LON"),
                        help="List stops around this point")
    parser.add_argument("--radius", type=float, help="Search radius in meters for --near")
    parser.add_argument("--shapes", action="store_true", help="Summarize drawable route shapes")
    parser.add_argument("--source", action="append",
                        help="Feed URL or zip path to use instead of the configured sources (repeatable)")
    parser.add_argument("--timeout", type=float, help="Seconds allowed per feed source")
    parser.add_argument("--all-modes", action="store_true", help="Keep every route, not only buses")
    parser.add_argument("--width", type=int, default=64, help="Output width in characters")
    args = parser.parse_args()

    if not (args.stop or args.near or args.shapes):
        parser.error("one of --stop, --near or --shapes is required")

    service_date = None
    if args.date:
        try:
            service_date = parse_query_date(args.date)
        except InvalidDate as e:
            parser.error(str(e))

    config = get_config(args.config)
    renderer = TextRenderer(width=args.width)

    try:
        manager = build_feed_manager(args, config)

        if args.stop:
            provider = DepartureBoardProvider(
                stop_id=args.stop,
                service_date=service_date,
                max_departures=args.limit,
                feed_manager=manager,
            )
            print(renderer.render_frame(provider.get_data()))

        if args.near:
            provider = NearbyStopsProvider(
                center=tuple(args.near),
                radius_meters=args.radius,
                feed_manager=manager,
            )
            print(renderer.render_frame(provider.get_data()))

        if args.shapes:
            print_shapes(manager, args.width)

    except FeedError as e:
        print(f"\n[ERROR] {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
