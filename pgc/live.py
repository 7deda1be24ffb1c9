"""Helpers for interpreting live-scoring feed rows."""

import logging
import re
from collections import Counter
from dataclasses import replace
from typing import Iterable, Optional, Sequence

from .constants import FINISHED_FEED_CODES, HOLES_PER_ROUND, ROUND_FIELDS
from .models import GolferSnapshot, TournamentContext
from .schemas import LiveStatsEntry
from .utils import is_finite

logger = logging.getLogger('pgc.live')


def normalize_player_name(raw: str) -> str:
    """
    Convert feed names to display order.

    "Scheffler, Scottie" -> "Scottie Scheffler". Names without a comma only
    have their whitespace collapsed.
    """
    trimmed = (raw or '').strip()
    if ',' not in trimmed:
        return re.sub(r'\s+', ' ', trimmed)

    parts = [p.strip() for p in trimmed.split(',') if p.strip()]
    if len(parts) < 2:
        return re.sub(r'\s+', ' ', trimmed)

    last = parts[0]
    first = ', '.join(parts[1:])
    return re.sub(r'\s+', ' ', f'{first} {last}').strip()


def parse_thru(thru) -> Optional[int]:
    """Holes completed from the feed's ``thru`` value ('F' means finished)."""
    raw = str(thru if thru is not None else '').strip().upper()
    if not raw:
        return None
    if raw == 'F':
        return HOLES_PER_ROUND
    match = re.match(r'^\d+', raw)
    return int(match.group(0)) if match else None


def parse_position_number(position: Optional[str]) -> Optional[int]:
    """Numeric place from '3' or 'T3'; None for CUT/WD/DQ or blanks."""
    if not position:
        return None
    stripped = str(position).strip()
    if stripped[:1].upper() == 'T':
        stripped = stripped[1:]
    match = re.match(r'^\d+', stripped)
    return int(match.group(0)) if match else None


def position_change(previous: Optional[str], current: Optional[str]) -> int:
    """Places gained since the previous cycle (positive = moved up)."""
    prev_num = parse_position_number(previous)
    next_num = parse_position_number(current)
    if prev_num is None or next_num is None:
        return 0
    return prev_num - next_num


def is_player_finished(entry: LiveStatsEntry) -> bool:
    """True once a golfer is out of the event or has completed the round."""
    position = (entry.current_pos or '').strip().upper()
    if position in FINISHED_FEED_CODES:
        return True

    if entry.end_hole is not None and entry.end_hole >= HOLES_PER_ROUND:
        return True

    raw = str(entry.thru if entry.thru is not None else '').strip().upper()
    if not raw:
        return False
    if raw in FINISHED_FEED_CODES:
        return True

    holes = parse_thru(raw)
    return holes is not None and holes >= HOLES_PER_ROUND


def is_round_running(entries: Iterable[LiveStatsEntry]) -> bool:
    """True while at least one golfer is somewhere between holes 1 and 17."""
    for entry in entries:
        if is_player_finished(entry):
            continue
        if entry.end_hole is not None and 0 < entry.end_hole < HOLES_PER_ROUND:
            return True
        holes = parse_thru(entry.thru)
        if holes is not None and 0 < holes < HOLES_PER_ROUND:
            return True
    return False


def are_all_players_finished(entries: list[LiveStatsEntry]) -> bool:
    """True when the feed is non-empty and every golfer is done."""
    return bool(entries) and all(is_player_finished(e) for e in entries)


def infer_par_from_live_stats(entries: Iterable[LiveStatsEntry]) -> tuple[Optional[int], int]:
    """
    Infer course par from recorded rounds and cumulative scores.

    Each golfer with at least two completed rounds votes for
    (sum of strokes - score to par) / rounds, if it lands within 0.25 of a
    whole number.

    Returns:
        Tuple of (most common par or None, number of votes)
    """
    votes: Counter = Counter()
    samples = 0

    for entry in entries:
        rounds = [
            r
            for r in (entry.round_one, entry.round_two, entry.round_three, entry.round_four)
            if is_finite(r)
        ]
        if len(rounds) < 2 or not is_finite(entry.current_score):
            continue

        raw_par = (sum(rounds) - entry.current_score) / len(rounds)
        rounded = round(raw_par)
        if abs(raw_par - rounded) > 0.25:
            continue

        votes[rounded] += 1
        samples += 1

    if not votes:
        return None, samples
    return votes.most_common(1)[0][0], samples


def apply_live_stats(golfer: GolferSnapshot, entry: LiveStatsEntry) -> GolferSnapshot:
    """
    Return a copy of ``golfer`` updated from a live feed row.

    Recorded rounds are only overwritten by values the feed actually has.
    """
    updates = {
        'position': entry.current_pos or golfer.position,
        'today': entry.today if entry.today is not None else golfer.today,
        'score': entry.current_score if entry.current_score is not None else golfer.score,
    }

    holes = parse_thru(entry.thru)
    if holes is not None:
        updates['thru'] = holes
    elif entry.end_hole is not None:
        updates['thru'] = entry.end_hole

    for attr in ROUND_FIELDS.values():
        value = getattr(entry, attr)
        if is_finite(value):
            updates[attr] = value

    return replace(golfer, **updates)


def apply_live_feed(
    context: TournamentContext,
    golfers: Sequence[GolferSnapshot],
    entries: Sequence[LiveStatsEntry],
) -> tuple[TournamentContext, list[GolferSnapshot]]:
    """
    Refresh a cycle's inputs from the in-play feed.

    Golfers are matched on their external id; golfers missing from the feed
    are kept as they are. ``live_play`` is set from whether anyone is
    mid-round.

    Args:
        context: Tournament state from the snapshot
        golfers: Every golfer in the tournament field
        entries: Rows from DataGolfFetcher.fetch_live_stats()

    Returns:
        Tuple of (updated context, updated golfers)
    """
    by_id = {e.external_id: e for e in entries}
    updated = [
        apply_live_stats(g, by_id[g.golfer_id]) if g.golfer_id in by_id else g
        for g in golfers
    ]

    missing = len(golfers) - sum(1 for g in golfers if g.golfer_id in by_id)
    if missing:
        logger.warning(f'{missing} golfers not in the live feed; keeping snapshot values')

    par, votes = infer_par_from_live_stats(entries)
    if par is not None and par != context.par:
        logger.warning(f'Live feed suggests par {par} ({votes} golfers), snapshot has {context.par}')

    running = is_round_running(entries)
    if not running and are_all_players_finished(entries):
        logger.info('Every golfer in the live feed has finished the round')

    return replace(context, live_play=running), updated
