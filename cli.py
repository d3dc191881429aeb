# cli.py

from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional

from activities import ActivityTotals, aggregate, get_activity_config, recent_activities
from combiner import CombinedPool, SourceResult, breakdown_by_source, combine
from config import ACCOUNTS_FILE, CACHE_DIR, DEFAULT_TIME_FRAME, LOG_LEVEL
from fetcher import fetch_all_sources, load_accounts
from goal_tracker import Goal, Metric, ProgressMetric, calculate_activity_progress
from timeframes import FrameSpec, TimeFrame, parse_time_frame, resolve_day_counts, resolve_interval
from utils import cache_path, get_cache_info


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Activity Goal Tracker')

    # Global options
    parser.add_argument('--accounts', default=ACCOUNTS_FILE,
                        help='JSON file listing connected accounts')
    parser.add_argument('--refresh', action='store_true',
                        help='Ignore cached activities and fetch fresh data')

    frame_options = argparse.ArgumentParser(add_help=False)
    frame_options.add_argument('--frame', default=DEFAULT_TIME_FRAME,
                               help='day, week, month, year (ytd), all or custom')
    frame_options.add_argument('--start', help='Custom range start (YYYY-MM-DD)')
    frame_options.add_argument('--end', help='Custom range end (YYYY-MM-DD)')

    activity_options = argparse.ArgumentParser(add_help=False)
    activity_options.add_argument('--activity', default='running',
                                  help='Activity key (running, cycling, swimming, ...)')
    activity_options.add_argument('--types', nargs='+',
                                  help='Raw activity categories (overrides --activity)')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    progress_parser = subparsers.add_parser('progress', parents=[frame_options, activity_options],
                                            help='Show goal progress and pacing')
    progress_parser.add_argument('--distance-km', help='Distance target in km')
    progress_parser.add_argument('--count', help='Activity count target')
    progress_parser.add_argument('--elevation-m', help='Elevation target in meters')
    progress_parser.add_argument('--time-h', help='Moving time target in hours')

    totals_parser = subparsers.add_parser('totals', parents=[frame_options, activity_options],
                                          help='Show activity totals for a time frame')
    totals_parser.add_argument('--by-source', action='store_true',
                               help='Break totals down per connected account')
    totals_parser.add_argument('--recent', type=int, default=0,
                               help='Also list the N most recent activities')

    subparsers.add_parser('frame', parents=[frame_options],
                          help='Show the resolved time frame and day counts')

    subparsers.add_parser('status', help='Show accounts and cache status')

    return parser


def _decimal_arg(value: Optional[str], scale: int = 1) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(value) * scale
    except InvalidOperation as e:
        raise ValueError(f"Invalid number: {value}") from e


def build_goal(args) -> Goal:
    """Build a Goal in raw units from the display-unit CLI options."""
    return Goal(
        distance_meters=_decimal_arg(args.distance_km, 1000),
        count=_decimal_arg(args.count),
        elevation_meters=_decimal_arg(args.elevation_m),
        time_seconds=_decimal_arg(args.time_h, 3600),
    )


def resolve_categories(args) -> List[str]:
    if args.types:
        return list(args.types)
    return [get_activity_config(args.activity).category]


def fetch_combined(args, frame: FrameSpec) -> tuple[List[SourceResult], CombinedPool]:
    """Fetch every connected account and combine the pools."""
    accounts = load_accounts(args.accounts)
    if not accounts:
        logging.warning(f"No connected accounts found in {args.accounts}")

    after = None
    if frame != TimeFrame.ALL_TIME:
        after = int(resolve_interval(frame).start.timestamp())

    if args.refresh and os.path.isdir(CACHE_DIR):
        shutil.rmtree(CACHE_DIR)
        print("Cache cleared. Fetching fresh data...")

    sources = fetch_all_sources(accounts, after=after, cache_dir=CACHE_DIR)
    return sources, combine(sources)


def display_totals(totals: ActivityTotals, title: str = 'TOTALS') -> None:
    print(f"\n=== {title} ===")
    print(f"count: {totals.count}")
    print(f"distance_meters: {totals.distance_meters}")
    print(f"moving_time_seconds: {totals.moving_time_seconds}")
    print(f"elapsed_time_seconds: {totals.elapsed_time_seconds}")
    print(f"elevation_gain_meters: {totals.elevation_gain_meters}")


def display_progress(progress: Dict[Metric, ProgressMetric]) -> None:
    if not progress:
        print("\nNo goal targets set.")
        return

    for metric, p in progress.items():
        print(f"\n=== {metric.value.upper()} ({p.unit}) ===")
        print(f"current: {float(p.current):.2f}")
        print(f"goal: {float(p.goal):.2f}")
        print(f"percentage: {p.percentage:.1f}")
        print(f"remainder: {float(p.remainder):.2f}")
        print(f"expected_progress_to_date: {float(p.expected_progress_to_date):.2f}")
        print(f"behind_plan: {float(p.behind_plan):.2f} ({p.status})")
        print(f"days_remaining: {p.days_remaining}")
        print(f"daily_pace_needed: {float(p.daily_pace_needed):.2f}")


def display_failures(pool: CombinedPool) -> None:
    if pool.failures:
        print("\n=== UNAVAILABLE SOURCES ===")
        for failure in pool.failures:
            print(f"{failure.source_id}: {failure.error}")


def handle_progress(args, frame: FrameSpec) -> None:
    goal = build_goal(args)
    categories = resolve_categories(args)
    _, pool = fetch_combined(args, frame)

    now = datetime.now()
    totals = aggregate(pool.activities, resolve_interval(frame, now), categories)
    display_totals(totals)
    display_progress(calculate_activity_progress(totals, goal, frame, now))
    display_failures(pool)


def handle_totals(args, frame: FrameSpec) -> None:
    categories = resolve_categories(args)
    sources, pool = fetch_combined(args, frame)
    interval = resolve_interval(frame)

    display_totals(aggregate(pool.activities, interval, categories))

    if args.by_source:
        for source_id, totals in breakdown_by_source(sources, interval, categories).items():
            display_totals(totals, title=f"SOURCE {source_id}")

    if args.recent > 0:
        print(f"\n=== {args.recent} MOST RECENT ===")
        for activity in recent_activities(pool.activities, interval, categories, args.recent):
            print(f"{activity.start_timestamp:%Y-%m-%d %H:%M} {activity.category} "
                  f"{activity.distance_meters} m - {activity.name}")

    display_failures(pool)


def handle_frame(frame: FrameSpec) -> None:
    now = datetime.now()
    interval = resolve_interval(frame, now)
    days = resolve_day_counts(frame, now)
    print(f"start: {interval.start.isoformat()}")
    print(f"end: {interval.end.isoformat()}")
    print(f"days elapsed: {days.elapsed} | remaining: {days.remaining} | total: {days.total}")


def handle_status(args) -> None:
    accounts = load_accounts(args.accounts)
    print("\n=== CURRENT SETTINGS ===")
    print(f"Accounts file: {args.accounts} ({len(accounts)} accounts)")
    print(f"Cache directory: {CACHE_DIR}")
    for account in accounts:
        info = get_cache_info(cache_path(CACHE_DIR, account.source_id))
        state = f"{info['size']} bytes" if info['exists'] else "not cached"
        print(f" {account.source_id}: {state}")


def main() -> None:
    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        return

    if args.command == 'status':
        handle_status(args)
        return

    try:
        frame = parse_time_frame(args.frame, args.start, args.end)
        if args.command == 'progress':
            handle_progress(args, frame)
        elif args.command == 'totals':
            handle_totals(args, frame)
        elif args.command == 'frame':
            handle_frame(frame)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(2)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.")
        sys.exit(0)


if __name__ == "__main__":
    logging.basicConfig(level=getattr(logging, LOG_LEVEL.upper(), logging.INFO))
    main()
