#!/usr/bin/env python3
"""
PGC Tournament Autoscorer CLI

Recomputes team scores and standings from a tournament snapshot, or groups
the upcoming field from the DataGolf feeds.

Usage:
    python autoscorer.py score --snapshot data/snapshots/masters.json
    python autoscorer.py score --snapshot data/snapshots/masters.json --fetch-earnings
    python autoscorer.py score --snapshot data/snapshots/masters.json --live
    python autoscorer.py group --expected-event "The Masters" --output data/groups.json
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from pgc import (
    DataGolfFetcher,
    FeedUnavailableError,
    InvalidContextError,
    apply_live_feed,
    build_groups,
    earnings_fetcher_for,
    load_snapshot,
    match_event_names,
    recompute,
    save_results,
)
from pgc.logging_config import log_level_for, setup_logging


def run_score(args) -> int:
    """Score every team in a snapshot and save the results."""
    logger = logging.getLogger('pgc.autoscorer')
    snapshot_path = Path(args.snapshot)

    try:
        snapshot = load_snapshot(snapshot_path)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f'Cannot load snapshot: {e}')
        return 1

    context, golfers = snapshot.context, snapshot.golfers
    fetcher = DataGolfFetcher() if (args.live or args.fetch_earnings) else None

    if args.live:
        try:
            entries = fetcher.fetch_live_stats()
        except FeedUnavailableError as e:
            logger.error(f'Live feed unavailable: {e}')
            return 1
        context, golfers = apply_live_feed(context, golfers, entries)
        logger.info(f'Applied {len(entries)} live rows (live play: {context.live_play})')

    event_earnings = None
    if args.fetch_earnings:
        event_earnings = earnings_fetcher_for(fetcher, context)

    try:
        batch = recompute(
            context,
            golfers,
            snapshot.teams,
            prior_event_score=snapshot.prior_event_score,
            event_earnings=event_earnings,
        )
    except InvalidContextError as e:
        logger.error(f'Invalid tournament context: {e}')
        return 1

    if args.output:
        output_path = Path(args.output)
    else:
        output_path = snapshot_path.with_name(f'{snapshot_path.stem}_results.json')
    save_results(output_path, batch)

    if not args.quiet:
        print('\n' + '=' * 60)
        print(f'STANDINGS - {batch.tournament_id}')
        print('=' * 60)
        ordered = sorted(
            batch.results,
            key=lambda r: (r.peer_group, r.is_cut, r.raw_score if r.raw_score is not None else 0.0),
        )
        for result in ordered:
            print(
                f'  [{result.peer_group}] {result.position or "-":>4} {result.team_id}: '
                f'{result.score:+.1f} (pts {result.points:.1f}, ${result.earnings:,.0f})'
            )
        for skipped in batch.skipped:
            print(f'  skipped {skipped.team_id}: {skipped.reason}')

    print(f'\n✅ Saved {len(batch.results)} team results to {output_path}')
    return 0


def run_group(args) -> int:
    """Group the current field into draft tiers."""
    logger = logging.getLogger('pgc.autoscorer')
    fetcher = DataGolfFetcher()

    try:
        if args.expected_event:
            match = match_event_names(args.expected_event, fetcher.event_name or '')
            if not match.compatible:
                logger.error(
                    f'Field feed is for {fetcher.event_name!r}, not {args.expected_event!r} '
                    f'(overlap {match.score:.2f})'
                )
                return 1
        ranked = fetcher.ranked_field()
    except FeedUnavailableError as e:
        logger.error(f'DataGolf feed unavailable: {e}')
        return 1

    assignments, identities = build_groups(ranked)

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(
            {
                'event_name': fetcher.event_name,
                'groups': [asdict(a) for a in assignments],
                'golfers': [asdict(i) for i in identities],
            },
            f,
            indent=2,
        )

    for assignment in assignments:
        print(f'  Group {assignment.group_number}: {len(assignment.golfer_ids)} golfers')
    print(f'\n✅ Saved groups to {output_path}')
    return 0


def main():
    parser = argparse.ArgumentParser(description='PGC fantasy golf tournament autoscorer')
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable debug logging',
    )
    parser.add_argument(
        '--log-dir',
        default=None,
        help='Also write a DEBUG log file for this run into this directory',
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    score = subparsers.add_parser('score', help='Recompute teams from a snapshot file')
    score.add_argument(
        '--snapshot', '-s',
        required=True,
        help='Path to tournament snapshot JSON',
    )
    score.add_argument(
        '--output', '-o',
        default=None,
        help='Output path for results JSON (defaults to <snapshot>_results.json)',
    )
    score.add_argument(
        '--live',
        action='store_true',
        help='Refresh golfers from the DataGolf in-play feed before scoring',
    )
    score.add_argument(
        '--fetch-earnings',
        action='store_true',
        help='Fetch real-event earnings from DataGolf to break first-place ties',
    )
    score.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress standings output',
    )

    group = subparsers.add_parser('group', help='Group the upcoming field into draft tiers')
    group.add_argument(
        '--output', '-o',
        default='data/groups.json',
        help='Output path for group assignments JSON',
    )
    group.add_argument(
        '--expected-event', '-e',
        default=None,
        help="Our tournament name; abort if the feed's event doesn't match",
    )

    args = parser.parse_args()
    setup_logging(
        level=log_level_for(args.verbose, getattr(args, 'quiet', False)),
        log_dir=args.log_dir,
        run_name=args.command,
    )

    if args.command == 'score':
        sys.exit(run_score(args))
    sys.exit(run_group(args))


if __name__ == '__main__':
    main()
