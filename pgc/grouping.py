"""Pre-tournament field grouping into draft tiers."""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, TypeVar

import polars as pl

from .config import get_config
from .constants import NUM_GROUPS
from .live import normalize_player_name
from .models import GolferIdentity, GroupAssignment
from .rating import normalize_skill_estimate
from .schemas import FieldEntry, GroupLimit, RankingEntry, ScoringRules

logger = logging.getLogger('pgc.grouping')

T = TypeVar('T')

FIELD_SCHEMA = {
    'external_id': pl.Int64,
    'player_name': pl.Utf8,
    'country': pl.Utf8,
    'world_rank': pl.Int64,
    'skill_estimate': pl.Float64,
    'r1_teetime': pl.Utf8,
    'r2_teetime': pl.Utf8,
}

RANKINGS_SCHEMA = {
    'external_id': pl.Int64,
    'rank_world_rank': pl.Int64,
    'rank_skill_estimate': pl.Float64,
    'rank_country': pl.Utf8,
}


@dataclass
class RankedGolfer:
    """Field entry joined with its ranking, in skill order."""
    external_id: int
    player_name: str
    country: Optional[str] = None
    world_rank: Optional[int] = None
    skill_estimate: Optional[float] = None
    r1_teetime: Optional[str] = None
    r2_teetime: Optional[str] = None


def field_frame(field: Sequence[FieldEntry]) -> pl.DataFrame:
    """Build a polars frame from field feed entries."""
    rows = [
        {
            'external_id': e.external_id,
            'player_name': e.player_name,
            'country': e.country,
            'world_rank': e.world_rank,
            'skill_estimate': e.skill_estimate,
            'r1_teetime': e.r1_teetime,
            'r2_teetime': e.r2_teetime,
        }
        for e in field
    ]
    return pl.DataFrame(rows, schema=FIELD_SCHEMA)


def rankings_frame(rankings: Sequence[RankingEntry]) -> pl.DataFrame:
    """Build a polars frame from rankings entries, one row per golfer."""
    rows = [
        {
            'external_id': r.external_id,
            'rank_world_rank': r.world_rank if r.world_rank is not None else r.own_rank,
            'rank_skill_estimate': r.skill_estimate,
            'rank_country': r.country,
        }
        for r in rankings
    ]
    frame = pl.DataFrame(rows, schema=RANKINGS_SCHEMA)
    return frame.unique(subset='external_id', keep='first', maintain_order=True)


def rank_field(
    field: Sequence[FieldEntry],
    rankings: Sequence[RankingEntry],
    unranked_skill_estimate: Optional[float] = None,
    excluded_ids: Optional[Sequence[int]] = None,
) -> list[RankedGolfer]:
    """
    Join the field with the rankings feed and order it by skill.

    Golfers missing from the rankings sort with ``unranked_skill_estimate``
    (-50 by default); equal estimates keep feed order.

    Args:
        field: Field feed entries
        rankings: Rankings feed entries, joined on external id
        unranked_skill_estimate: Sort value for golfers without an estimate
        excluded_ids: External ids to leave out of the draft pool

    Returns:
        Golfers ranked best to worst
    """
    rules = get_config()
    if unranked_skill_estimate is None:
        unranked_skill_estimate = rules.unranked_skill_estimate
    if excluded_ids is None:
        excluded_ids = rules.excluded_golfer_ids

    frame = field_frame(field).with_row_index('feed_order')
    if excluded_ids:
        frame = frame.filter(~pl.col('external_id').is_in(list(excluded_ids)))

    frame = (
        frame.join(rankings_frame(rankings), on='external_id', how='left')
        .with_columns(
            pl.coalesce('rank_skill_estimate', 'skill_estimate').alias('skill_estimate'),
            pl.coalesce('rank_world_rank', 'world_rank').alias('world_rank'),
            pl.coalesce('country', 'rank_country').alias('country'),
        )
        .with_columns(
            pl.col('skill_estimate').fill_null(unranked_skill_estimate).alias('sort_skill')
        )
        .sort(['sort_skill', 'feed_order'], descending=[True, False])
    )

    return [
        RankedGolfer(
            external_id=row['external_id'],
            player_name=row['player_name'],
            country=row['country'],
            world_rank=row['world_rank'],
            skill_estimate=row['skill_estimate'],
            r1_teetime=row['r1_teetime'],
            r2_teetime=row['r2_teetime'],
        )
        for row in frame.iter_rows(named=True)
    ]


def determine_group_index(
    current_index: int,
    total_golfers: int,
    group_sizes: Sequence[int],
    limits: Sequence[GroupLimit],
) -> int:
    """
    Pick the 0-based group for the golfer at ``current_index``.

    Groups 1-4 fill in order while below both their share of the field and
    their hard cap. After that the tail goes to group 5 once it is small
    relative to groups 4 and 5, otherwise alternates between groups 4 and 5.
    """
    remaining = total_golfers - current_index

    for gi, limit in enumerate(limits):
        size = group_sizes[gi]
        if size < total_golfers * limit.percentage and size < limit.max_count:
            return gi

    last = NUM_GROUPS - 1
    if remaining <= group_sizes[last - 1] + group_sizes[last] * 0.5 or remaining == 1:
        return last

    return last - 1 if current_index % 2 else last


def group_field(
    ranked: Sequence[T],
    limits: Optional[Sequence[GroupLimit]] = None,
) -> list[list[T]]:
    """
    Partition a ranked pool into five groups in a single greedy pass.

    Args:
        ranked: Golfers ordered best to worst
        limits: Thresholds for groups 1-4 (default from config)

    Returns:
        Five lists, group 1 first; every golfer appears exactly once
    """
    if limits is None:
        limits = get_config().group_limits

    groups: list[list[T]] = [[] for _ in range(NUM_GROUPS)]
    total = len(ranked)
    for index, golfer in enumerate(ranked):
        gi = determine_group_index(index, total, [len(g) for g in groups], limits)
        groups[gi].append(golfer)
    return groups


def build_groups(
    ranked: Sequence[RankedGolfer],
    rules: Optional[ScoringRules] = None,
) -> tuple[list[GroupAssignment], list[GolferIdentity]]:
    """
    Group a ranked field and resolve golfer identities for persistence.

    Args:
        ranked: Output of rank_field()
        rules: Scoring rules (default from config)

    Returns:
        Tuple of (group assignments 1-5, golfer identities)
    """
    rules = rules or get_config()
    groups = group_field(ranked, rules.group_limits)

    assignments = []
    identities = []
    for gi, members in enumerate(groups):
        group_number = gi + 1
        assignments.append(
            GroupAssignment(group_number=group_number, golfer_ids=[g.external_id for g in members])
        )
        for golfer in members:
            identities.append(
                GolferIdentity(
                    golfer_id=golfer.external_id,
                    player_name=normalize_player_name(golfer.player_name),
                    group=group_number,
                    world_rank=golfer.world_rank or rules.default_world_rank,
                    rating=normalize_skill_estimate(
                        golfer.skill_estimate, default=rules.default_skill_estimate
                    ),
                    country=golfer.country,
                    skill_estimate=golfer.skill_estimate,
                    round_one_tee_time=_clean_tee_time(golfer.r1_teetime),
                    round_two_tee_time=_clean_tee_time(golfer.r2_teetime),
                )
            )

    sizes = ', '.join(f'G{a.group_number}={len(a.golfer_ids)}' for a in assignments)
    logger.info(f'Grouped {len(ranked)} golfers: {sizes}')
    return assignments, identities


def _clean_tee_time(value: Optional[str]) -> Optional[str]:
    if value is None or not value.strip():
        return None
    return value.strip()
